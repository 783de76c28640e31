"""Sinks - Destinos de telemetría (MQTT, InfluxDB)."""

from .factory import create_sinks
from .influx_sink import InfluxSink
from .mqtt_sink import MqttSink, random_client_id
from .validators import SeriesPoint, build_series_point

__all__ = [
    "InfluxSink",
    "MqttSink",
    "SeriesPoint",
    "build_series_point",
    "create_sinks",
    "random_client_id",
]
