"""Tests end-to-end del pipeline con página y sinks falsos.

Ejecutar:
    pytest tests/test_runner.py -v
"""

from __future__ import annotations

import threading
import time
from dataclasses import replace
from unittest.mock import MagicMock

import pytest

from conftest import PAGE_URL, fetcher_factory, lake_page, page_transport
from jobs.lake_sync.config import RunnerConfig
from jobs.lake_sync.runner import PipelineRunner, PipelineState
from lake_ingest.collector import ReadingCollector
from lake_ingest.core.domain.errors import FetchFailure
from lake_ingest.core.domain.sink_interface import NullSink
from lake_ingest.scrape.extractor import PageExtractor
from lake_ingest.sinks.influx_sink import InfluxSink
from lake_ingest.sinks.mqtt_sink import MqttSink


@pytest.fixture
def cfg() -> RunnerConfig:
    return RunnerConfig(source_url=PAGE_URL, fetch_timeout_seconds=2.0, collect_timeout_seconds=2.0)


def build_runner(html, cfg, sinks, status_code=200, calls=None):
    extractor = PageExtractor(
        fetcher_factory=fetcher_factory(page_transport(html, status_code=status_code, calls=calls)),
    )
    return PipelineRunner(
        extractor=extractor,
        collector=ReadingCollector(),
        sinks=sinks,
        cfg=cfg,
    )


# =============================================================================
# CAMINO FELIZ
# =============================================================================

class TestHappyPath:
    def test_reading_flows_to_both_sinks(
        self, cfg, mqtt_settings, mqtt_factory, mqtt_clients, influx_settings, influx_factory,
    ):
        sinks = [
            MqttSink(mqtt_settings, client_factory=mqtt_factory()),
            InfluxSink(influx_settings, client_factory=influx_factory),
        ]
        runner = build_runner(lake_page(level="915.2′", temperature="71°F"), cfg, sinks)

        result = runner.run()

        assert result.state is PipelineState.DONE
        assert runner.state is PipelineState.DONE
        assert result.reading.level == "915.2"
        assert result.reading.temperature == "71"
        assert result.summary == "Level: 915.2 ft\nTemp: 71 ºF\n"
        assert [(o.sink_name, o.success) for o in result.outcomes] == [
            ("MQTT", True),
            ("InfluxDB", True),
        ]
        assert mqtt_clients[0].published == [("lake/temperature", "71", 1)]
        point = influx_factory.return_value.write_api.return_value.write.call_args.kwargs["record"]
        assert point._fields == {"value": "71", "valueNum": 71.0}
        assert point._tags == {"unit": "ºF"}

    def test_single_fetch_per_run(self, cfg):
        calls = []
        build_runner(lake_page(), cfg, [NullSink()], calls=calls).run()

        assert calls == [PAGE_URL]

    def test_runner_is_single_shot(self, cfg):
        runner = build_runner(lake_page(), cfg, [NullSink()])
        runner.run()

        with pytest.raises(RuntimeError):
            runner.run()

    def test_level_can_be_published_too(self, cfg, influx_settings, influx_factory):
        cfg = replace(cfg, publish_fields=("temperature", "level"))
        sink = InfluxSink(influx_settings, client_factory=influx_factory)

        result = build_runner(lake_page(), cfg, [sink]).run()

        assert [o.field for o in result.outcomes] == ["temperature", "level"]
        write = influx_factory.return_value.write_api.return_value.write
        names = [c.kwargs["record"]._name for c in write.call_args_list]
        assert names == ["tablerock_temperature", "tablerock_level"]

    def test_parallel_publish_keeps_outcome_order(self, cfg):
        cfg = replace(cfg, publish_workers=4)
        sinks = [NullSink(), NullSink(), NullSink()]

        result = build_runner(lake_page(), cfg, sinks).run()

        assert len(result.outcomes) == 3
        assert all(o.success for o in result.outcomes)


# =============================================================================
# FALLOS AISLADOS POR SINK
# =============================================================================

class TestSinkIsolation:
    def test_unreachable_broker_does_not_block_influx(
        self, cfg, mqtt_settings, mqtt_factory, influx_settings, influx_factory,
    ):
        sinks = [
            MqttSink(mqtt_settings, client_factory=mqtt_factory(unreachable=True)),
            InfluxSink(influx_settings, client_factory=influx_factory),
        ]

        result = build_runner(lake_page(), cfg, sinks).run()

        assert result.state is PipelineState.DONE
        mqtt_outcome, influx_outcome = result.outcomes
        assert mqtt_outcome.success is False
        assert influx_outcome.success is True
        assert len(result.failures) == 1

    def test_parse_failure_does_not_abort_broker(
        self, cfg, mqtt_settings, mqtt_factory, mqtt_clients, influx_settings, influx_factory,
    ):
        sinks = [
            MqttSink(mqtt_settings, client_factory=mqtt_factory()),
            InfluxSink(influx_settings, client_factory=influx_factory),
        ]

        result = build_runner(lake_page(temperature="seventy°F"), cfg, sinks).run()

        assert [o.success for o in result.outcomes] == [True, False]
        assert mqtt_clients[0].published == [("lake/temperature", "seventy", 1)]
        influx_factory.assert_not_called()

    def test_missing_broker_prefix_makes_no_broker_calls(
        self, cfg, mqtt_settings, mqtt_factory, mqtt_clients, influx_settings, influx_factory,
    ):
        sinks = [
            MqttSink(replace(mqtt_settings, prefix=None), client_factory=mqtt_factory()),
            InfluxSink(influx_settings, client_factory=influx_factory),
        ]

        result = build_runner(lake_page(), cfg, sinks).run()

        assert result.outcomes[0].error == "no MQTT_PREFIX specified"
        assert mqtt_clients == []
        assert result.outcomes[1].success is True


# =============================================================================
# EXTRACCIÓN INCOMPLETA O FALLIDA
# =============================================================================

class TestNoData:
    def test_missing_temperature_publishes_nothing(self, cfg):
        sink = MagicMock()

        result = build_runner(lake_page(temperature=None), cfg, [sink]).run()

        assert result.no_data is True
        assert result.state is PipelineState.DONE
        assert result.outcomes == []
        assert result.reading.level == "915.2"
        sink.publish.assert_not_called()

    def test_empty_temperature_text_is_no_data(self, cfg):
        sink = MagicMock()

        result = build_runner(lake_page(temperature="°F"), cfg, [sink]).run()

        assert result.no_data is True
        sink.publish.assert_not_called()

    def test_missing_level_still_publishes_temperature(self, cfg):
        result = build_runner(lake_page(level=None), cfg, [NullSink()]).run()

        assert result.no_data is False
        assert result.reading.is_complete is False
        assert [o.success for o in result.outcomes] == [True]

    def test_fetch_failure_aborts_run(self, cfg):
        sink = MagicMock()
        runner = build_runner("down", cfg, [sink], status_code=500)

        with pytest.raises(FetchFailure):
            runner.run()

        assert runner.state is PipelineState.COLLECTING
        sink.publish.assert_not_called()


# =============================================================================
# FETCH LENTO TRAS EL DEADLINE DEL COLLECTOR
# =============================================================================

class SlowFetcher:
    """Fetcher que tarda en responder y luego falla (o queda colgado)."""

    def __init__(self, delay: float, release: threading.Event | None = None):
        self.delay = delay
        self.release = release

    def on_request(self, callback):
        pass

    def on_html(self, selector, callback):
        pass

    def visit(self, url):
        if self.release is not None:
            self.release.wait(5.0)
        else:
            time.sleep(self.delay)
        raise FetchFailure(url, "HTTP 503", status_code=503)


def slow_runner(cfg, sinks, fetcher):
    return PipelineRunner(
        extractor=PageExtractor(fetcher_factory=lambda: fetcher),
        collector=ReadingCollector(),
        sinks=sinks,
        cfg=cfg,
    )


class TestSlowFetch:
    def test_failure_after_collector_deadline_is_fatal(self, cfg):
        cfg = replace(cfg, collect_timeout_seconds=0.1, fetch_timeout_seconds=2.0)
        sink = MagicMock()
        runner = slow_runner(cfg, [sink], SlowFetcher(delay=0.5))

        with pytest.raises(FetchFailure) as exc_info:
            runner.run()

        assert exc_info.value.status_code == 503
        sink.publish.assert_not_called()

    def test_hung_fetch_is_fetch_timeout_not_no_data(self, cfg):
        cfg = replace(cfg, collect_timeout_seconds=0.1, fetch_timeout_seconds=0.2)
        release = threading.Event()
        sink = MagicMock()
        runner = slow_runner(cfg, [sink], SlowFetcher(delay=0, release=release))

        try:
            with pytest.raises(FetchFailure) as exc_info:
                runner.run()
        finally:
            release.set()

        assert "still running" in exc_info.value.reason
        assert runner.state is PipelineState.COLLECTING
        sink.publish.assert_not_called()
