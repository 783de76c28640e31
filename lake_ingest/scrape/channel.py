"""Canal en memoria entre los watchers de la página y el collector.

Un slot por tipo de medición + marca de cierre: el productor nunca
bloquea y el consumidor sabe cuándo no llegarán más eventos.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Iterable, Iterator, Optional

from ..core.domain.measurement import Measurement, MeasurementName, REQUIRED_KINDS

logger = logging.getLogger(__name__)

_CLOSED = object()


class ChannelTimeout(Exception):
    """No llegó ningún evento dentro del timeout."""


class MeasurementChannel:
    """Canal acotado de mediciones.

    - Cada tipo se acepta una sola vez (los duplicados se descartan)
    - close() deja una marca de fin; luego receive() retorna None
    """

    def __init__(self, kinds: Iterable[MeasurementName] = REQUIRED_KINDS):
        self._kinds = frozenset(kinds)
        self._queue: "queue.Queue[object]" = queue.Queue(maxsize=len(self._kinds) + 1)
        self._lock = threading.Lock()
        self._emitted: set[MeasurementName] = set()
        self._closed = False
        self._drained = False
        self.error: Optional[BaseException] = None

    @property
    def kinds(self) -> frozenset[MeasurementName]:
        return self._kinds

    def emit(self, measurement: Measurement) -> bool:
        """Entrega una medición. Retorna False si fue descartada."""
        with self._lock:
            if self._closed:
                logger.warning("[CHANNEL] Emit after close dropped: %s", measurement.name.value)
                return False
            if measurement.name not in self._kinds:
                logger.warning("[CHANNEL] Unexpected kind dropped: %s", measurement.name.value)
                return False
            if measurement.name in self._emitted:
                logger.warning("[CHANNEL] Duplicate %s dropped", measurement.name.value)
                return False
            self._emitted.add(measurement.name)
        self._queue.put_nowait(measurement)
        return True

    def close(self, error: Optional[BaseException] = None) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self.error = error
        self._queue.put_nowait(_CLOSED)

    @property
    def closed(self) -> bool:
        return self._closed

    def receive(self, timeout: Optional[float] = None) -> Optional[Measurement]:
        """Espera la siguiente medición.

        Returns:
            La medición, o None si el canal está cerrado y vacío

        Raises:
            ChannelTimeout: nada llegó dentro de timeout
        """
        if self._drained:
            return None
        try:
            item = self._queue.get(timeout=timeout)
        except queue.Empty:
            raise ChannelTimeout(f"no measurement within {timeout}s") from None
        if item is _CLOSED:
            self._drained = True
            return None
        return item  # type: ignore[return-value]

    def __iter__(self) -> Iterator[Measurement]:
        while True:
            item = self.receive()
            if item is None:
                return
            yield item
