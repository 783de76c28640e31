"""Extracción de nivel y temperatura desde la página fuente.

Dos watchers independientes (uno por selector) emiten cada medición al
canal en cuanto el elemento aparece. Un elemento ausente no es error:
el watcher simplemente no dispara y se registra un warning.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Sequence

from ..core.domain.errors import FetchFailure
from ..core.domain.measurement import Measurement, MeasurementName
from ..core.transport.page_fetcher import HtmlElement, HtmlPageFetcher
from .channel import MeasurementChannel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WatchTarget:
    """Elemento a observar en la página."""
    name: MeasurementName
    selector: str
    suffix: str


TEMPERATURE_TARGET = WatchTarget(MeasurementName.TEMPERATURE, "#wrsn-temp-1", "°F")
LEVEL_TARGET = WatchTarget(MeasurementName.LEVEL, "#wrsn-temp-weather-1", "′")
DEFAULT_TARGETS: tuple[WatchTarget, ...] = (TEMPERATURE_TARGET, LEVEL_TARGET)


def build_targets(
    temperature_selector: str = TEMPERATURE_TARGET.selector,
    level_selector: str = LEVEL_TARGET.selector,
) -> tuple[WatchTarget, ...]:
    return (
        WatchTarget(MeasurementName.TEMPERATURE, temperature_selector, TEMPERATURE_TARGET.suffix),
        WatchTarget(MeasurementName.LEVEL, level_selector, LEVEL_TARGET.suffix),
    )


def strip_unit(text: str, suffix: str) -> str:
    """Quita espacios y el sufijo de unidad: "71°F" → "71"."""
    value = text.strip()
    if suffix and value.endswith(suffix):
        value = value[: -len(suffix)]
    return value.strip()


class PageExtractor:
    """Conecta el fetcher con el canal de mediciones.

    Uso:
        channel = MeasurementChannel()
        PageExtractor().extract(url, channel)
    """

    def __init__(
        self,
        fetcher_factory: Optional[Callable[[], HtmlPageFetcher]] = None,
        targets: Sequence[WatchTarget] = DEFAULT_TARGETS,
    ):
        self._fetcher_factory = fetcher_factory or HtmlPageFetcher
        self._targets = tuple(targets)

    @property
    def kinds(self) -> frozenset[MeasurementName]:
        return frozenset(t.name for t in self._targets)

    def extract(self, page_url: str, channel: MeasurementChannel) -> None:
        """Visita la página y emite las mediciones encontradas.

        El canal siempre queda cerrado al retornar, incluso con error.

        Raises:
            FetchFailure: la página no pudo obtenerse (cero mediciones)
        """
        fetcher = self._fetcher_factory()
        fetcher.on_request(lambda url: logger.info("[SCRAPE] Visiting %s", url))
        for target in self._targets:
            fetcher.on_html(target.selector, self._watcher(target, channel))

        try:
            matched = fetcher.visit(page_url)
        except FetchFailure as e:
            logger.error("[SCRAPE] %s", e)
            channel.close(error=e)
            raise
        except Exception as e:
            channel.close(error=e)
            raise

        for target in self._targets:
            if target.selector not in matched:
                logger.warning(
                    "[SCRAPE] Element %s not found, no %s reading",
                    target.selector, target.name.value,
                )
        channel.close()

    def iter_measurements(self, page_url: str) -> Iterator[Measurement]:
        """Secuencia perezosa de mediciones (sin hilos)."""
        channel = MeasurementChannel(kinds=self.kinds)
        self.extract(page_url, channel)
        yield from channel

    def _watcher(self, target: WatchTarget, channel: MeasurementChannel) -> Callable[[HtmlElement], None]:
        def on_element(element: HtmlElement) -> None:
            measurement = Measurement(target.name, strip_unit(element.text, target.suffix))
            if channel.emit(measurement):
                logger.debug("[SCRAPE] %s=%r", target.name.value, measurement.raw_text)

        return on_element
