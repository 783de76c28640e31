"""Sink InfluxDB: un punto por publicación vía write API bloqueante."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from influxdb_client import InfluxDBClient, Point, WritePrecision
from influxdb_client.client.write_api import SYNCHRONOUS
from influxdb_client.rest import ApiException

from common.config import InfluxSettings

from ..core.domain.errors import ConfigurationError, WriteFailure
from ..core.domain.sink_interface import ReadingSink
from .validators import SeriesPoint, build_series_point

logger = logging.getLogger(__name__)

# InfluxDB 1.8 ignora la organización; "-" es el valor convencional.
INFLUX_ORG = "-"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_influx_point(series: SeriesPoint, timestamp: datetime) -> Point:
    point = Point(series.measurement).tag("unit", series.unit)
    for name, value in series.fields().items():
        point = point.field(name, value)
    return point.time(timestamp, WritePrecision.NS)


class InfluxSink(ReadingSink):
    name = "InfluxDB"

    def __init__(
        self,
        settings: InfluxSettings,
        client_factory: Optional[Callable[..., Any]] = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self._settings = settings
        self._client_factory = client_factory or InfluxDBClient
        self._clock = clock

    def _publish(self, field_name: str, value: str) -> None:
        missing = self._settings.missing_keys()
        if missing:
            raise ConfigurationError(self.name, missing)

        series = build_series_point(self._settings.prefix, field_name, value)
        point = to_influx_point(series, self._clock())

        logger.info(
            "[INFLUX] Writing %s to %s db=%s",
            series.measurement, self._settings.url, self._settings.database,
        )
        client = self._client_factory(
            url=self._settings.url,
            token=self._settings.token,
            org=INFLUX_ORG,
            timeout=self._settings.timeout_ms,
        )
        try:
            write_api = client.write_api(write_options=SYNCHRONOUS)
            write_api.write(bucket=self._settings.database, org=INFLUX_ORG, record=point)
        except ApiException as e:
            raise WriteFailure(f"HTTP {e.status} {e.reason}: {e.body}") from e
        finally:
            client.close()
