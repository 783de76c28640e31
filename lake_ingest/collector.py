"""Collector: punto de sincronización entre extracción y publicación.

Espera el CONJUNTO de tipos requeridos (no un número de eventos) con un
deadline explícito. Si el deadline vence o el canal se cierra antes,
retorna una lectura parcial en lugar de bloquear indefinidamente.
"""

from __future__ import annotations

import logging
import time
from typing import Iterable, Optional

from .core.domain.measurement import AggregatedReading, MeasurementName, REQUIRED_KINDS
from .scrape.channel import ChannelTimeout, MeasurementChannel

logger = logging.getLogger(__name__)

DEFAULT_COLLECT_TIMEOUT_SECONDS = 30.0


class ReadingCollector:
    def __init__(
        self,
        required: Iterable[MeasurementName] = REQUIRED_KINDS,
        timeout: float = DEFAULT_COLLECT_TIMEOUT_SECONDS,
    ):
        self._required = frozenset(required)
        self._timeout = timeout

    def collect(
        self,
        channel: MeasurementChannel,
        timeout: Optional[float] = None,
    ) -> AggregatedReading:
        """Agrega mediciones hasta tener todos los tipos requeridos.

        Args:
            channel: canal alimentado por el extractor
            timeout: deadline total en segundos (None = el del collector)

        Returns:
            AggregatedReading; is_complete indica si llegaron todos los tipos
        """
        budget = self._timeout if timeout is None else timeout
        deadline = time.monotonic() + budget
        reading = AggregatedReading()

        while not self._required.issubset(reading.received):
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                reading.timed_out = True
                break
            try:
                measurement = channel.receive(timeout=remaining)
            except ChannelTimeout:
                reading.timed_out = True
                break
            if measurement is None:
                break
            if not reading.fold(measurement):
                logger.warning("[COLLECTOR] Ignoring repeated %s", measurement.name.value)

        missing = sorted(k.value for k in self._required if k not in reading.received)
        if reading.timed_out:
            logger.warning(
                "[COLLECTOR] Deadline %.1fs reached, missing=%s", budget, missing,
            )
        elif missing:
            logger.warning("[COLLECTOR] Source closed, missing=%s", missing)
        else:
            logger.info(
                "[COLLECTOR] Complete order=%s",
                ",".join(k.value for k in reading.received),
            )
        return reading
