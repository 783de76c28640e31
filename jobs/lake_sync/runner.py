"""Lake sync orchestrator: extracción, colección y fan-out a los sinks."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeout
from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

from lake_ingest.collector import ReadingCollector
from lake_ingest.core.domain.errors import FetchFailure
from lake_ingest.core.domain.measurement import AggregatedReading, MeasurementName, PublishOutcome
from lake_ingest.core.domain.sink_interface import ReadingSink
from lake_ingest.scrape.channel import MeasurementChannel
from lake_ingest.scrape.extractor import PageExtractor

from .config import RunnerConfig

logger = logging.getLogger(__name__)

_KNOWN_FIELDS = {k.value for k in MeasurementName}


class PipelineState(str, Enum):
    IDLE = "idle"
    EXTRACTING = "extracting"
    COLLECTING = "collecting"
    PUBLISHING = "publishing"
    DONE = "done"


@dataclass
class PipelineResult:
    """Resultado de una corrida."""
    state: PipelineState
    reading: AggregatedReading
    outcomes: list[PublishOutcome] = field(default_factory=list)
    no_data: bool = False

    @property
    def summary(self) -> str:
        return self.reading.summary()

    @property
    def failures(self) -> list[PublishOutcome]:
        return [o for o in self.outcomes if not o.success]


class PipelineRunner:
    """Orquesta una corrida: Idle → Extracting → Collecting → Publishing → Done.

    - FetchFailure se propaga (aborta la corrida), también si el fetch
      sigue corriendo tras el deadline del collector y su propio timeout
    - Temperatura vacía termina sin publicar (no_data)
    - Los fallos de cada sink quedan en su PublishOutcome
    """

    def __init__(
        self,
        extractor: PageExtractor,
        collector: ReadingCollector,
        sinks: Sequence[ReadingSink],
        cfg: RunnerConfig,
    ):
        self._extractor = extractor
        self._collector = collector
        self._sinks = list(sinks)
        self._cfg = cfg
        self.state = PipelineState.IDLE

    def _transition(self, new_state: PipelineState) -> None:
        logger.debug("[PIPELINE] %s -> %s", self.state.value, new_state.value)
        self.state = new_state

    def run(self) -> PipelineResult:
        if self.state is not PipelineState.IDLE:
            raise RuntimeError(f"runner already used (state={self.state.value})")

        t0 = time.monotonic()
        reading = self._extract_and_collect()
        logger.info(
            "[PIPELINE] Level: %s ft Temp: %s ºF",
            reading.level or "-", reading.temperature or "-",
        )

        if not reading.temperature:
            logger.info("[PIPELINE] no temp data")
            self._transition(PipelineState.DONE)
            return PipelineResult(state=self.state, reading=reading, no_data=True)

        self._transition(PipelineState.PUBLISHING)
        outcomes = self._publish(reading)
        for outcome in outcomes:
            self._report(outcome)

        self._transition(PipelineState.DONE)
        logger.info(
            "[PIPELINE] run ms=%.1f ok=%d fail=%d",
            (time.monotonic() - t0) * 1000,
            sum(1 for o in outcomes if o.success),
            sum(1 for o in outcomes if not o.success),
        )
        return PipelineResult(state=self.state, reading=reading, outcomes=outcomes)

    def _extract_and_collect(self) -> AggregatedReading:
        channel = MeasurementChannel(kinds=self._extractor.kinds)
        pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="lake-scrape")
        try:
            self._transition(PipelineState.EXTRACTING)
            future = pool.submit(self._extractor.extract, self._cfg.source_url, channel)

            self._transition(PipelineState.COLLECTING)
            reading = self._collector.collect(channel, timeout=self._cfg.collect_timeout_seconds)

            # FetchFailure del hilo de extracción se re-lanza aquí.
            if reading.timed_out and not future.done():
                logger.warning(
                    "[PIPELINE] Fetch still running after collector deadline, waiting %.1fs",
                    self._cfg.fetch_timeout_seconds,
                )
            try:
                future.result(timeout=self._cfg.fetch_timeout_seconds)
            except FuturesTimeout:
                raise FetchFailure(
                    self._cfg.source_url,
                    f"timeout: fetch still running after {self._cfg.fetch_timeout_seconds:.1f}s",
                ) from None
        finally:
            pool.shutdown(wait=False)
        return reading

    def _publish(self, reading: AggregatedReading) -> list[PublishOutcome]:
        tasks = []
        for field_name in self._cfg.publish_fields:
            if field_name not in _KNOWN_FIELDS:
                logger.warning("[PIPELINE] Unknown publish field %r skipped", field_name)
                continue
            value = reading.value_of(field_name)
            if not value:
                logger.warning("[PIPELINE] no %s data, not published", field_name)
                continue
            for sink in self._sinks:
                tasks.append((sink, field_name, value))

        if self._cfg.publish_workers <= 1 or len(tasks) <= 1:
            return [sink.publish(name, value) for sink, name, value in tasks]

        with ThreadPoolExecutor(
            max_workers=self._cfg.publish_workers,
            thread_name_prefix="lake-sink",
        ) as pool:
            return list(pool.map(lambda t: t[0].publish(t[1], t[2]), tasks))

    @staticmethod
    def _report(outcome: PublishOutcome) -> None:
        if outcome.success:
            logger.info("Successfully wrote %s to %s", outcome.field, outcome.sink_name)
        else:
            logger.error("Couldn't send %s to %s: %s", outcome.field, outcome.sink_name, outcome.error)
