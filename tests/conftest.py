"""Fixtures compartidos: página falsa, cliente MQTT falso y entorno limpio."""

from __future__ import annotations

from typing import Callable, List, Optional
from unittest.mock import MagicMock

import httpx
import pytest

from common.config import InfluxSettings, MqttSettings
from lake_ingest.core.transport.page_fetcher import HtmlPageFetcher

ENV_KEYS = [
    "LAKE_ENV_FILE",
    "LAKE_SOURCE_URL",
    "LAKE_FETCH_TIMEOUT_SECONDS",
    "LAKE_COLLECT_TIMEOUT_SECONDS",
    "LAKE_USER_AGENT",
    "LAKE_TEMPERATURE_SELECTOR",
    "LAKE_LEVEL_SELECTOR",
    "LAKE_PUBLISH_FIELDS",
    "LAKE_PUBLISH_WORKERS",
    "MQTT_SERVER",
    "MQTT_PORT",
    "MQTT_PREFIX",
    "MQTT_USERNAME",
    "MQTT_PASSWORD",
    "MQTT_CONNECT_TIMEOUT_SECONDS",
    "MQTT_PUBLISH_TIMEOUT_SECONDS",
    "MQTT_DISCONNECT_GRACE_MS",
    "INFLUXDB_SERVER",
    "INFLUXDB_PORT",
    "INFLUXDB_PREFIX",
    "INFLUXDB_DATABASE",
    "INFLUXDB_USERNAME",
    "INFLUXDB_PASSWORD",
    "INFLUXDB_USE_SSL",
    "INFLUXDB_TIMEOUT_MS",
]

PAGE_URL = "https://lake.example/table-rock/"


def lake_page(level: Optional[str] = "915.2′", temperature: Optional[str] = "71°F") -> str:
    parts = ["<html><body><h1>Table Rock Lake</h1>"]
    if temperature is not None:
        parts.append(f'<span class="big" id="wrsn-temp-1">{temperature}</span>')
    if level is not None:
        parts.append(f'<div id="wrsn-temp-weather-1">{level}</div>')
    parts.append("</body></html>")
    return "".join(parts)


def page_transport(html: str, status_code: int = 200, calls: Optional[list] = None) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(str(request.url))
        return httpx.Response(status_code, html=html)

    return httpx.MockTransport(handler)


def fetcher_factory(transport: httpx.BaseTransport) -> Callable[[], HtmlPageFetcher]:
    return lambda: HtmlPageFetcher(timeout=2.0, transport=transport)


class FakeMessageInfo:
    rc = 0

    def __init__(self, acked: bool = True):
        self._acked = acked
        self.waited_with: Optional[float] = None

    def wait_for_publish(self, timeout=None):
        self.waited_with = timeout

    def is_published(self) -> bool:
        return self._acked


class FakeMqttClient:
    """Doble de paho Client: dispara on_connect al iniciar el loop."""

    def __init__(self, client_id: str, unreachable: bool = False, refuse: bool = False, acked: bool = True):
        self.client_id = client_id
        self.unreachable = unreachable
        self.refuse = refuse
        self.acked = acked
        self.on_connect = None
        self.on_disconnect = None
        self.credentials = None
        self.address = None
        self.published: List[tuple] = []
        self.loop_running = False
        self.disconnected = False

    def username_pw_set(self, username, password=None):
        self.credentials = (username, password)

    def connect(self, host, port, keepalive=60):
        self.address = (host, port)
        if self.unreachable:
            raise ConnectionRefusedError(111, "Connection refused")

    def loop_start(self):
        self.loop_running = True
        self.on_connect(self, None, {}, 5 if self.refuse else 0, None)

    def loop_stop(self):
        self.loop_running = False

    def publish(self, topic, payload, qos=0):
        self.published.append((topic, payload, qos))
        return FakeMessageInfo(self.acked)

    def disconnect(self):
        self.disconnected = True
        self.on_disconnect(self, None, {}, 0, None)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Entorno sin variables del servicio; lo cargado por dotenv se revierte."""
    for key in ENV_KEYS:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)


@pytest.fixture
def mqtt_clients() -> list:
    return []


@pytest.fixture
def mqtt_factory(mqtt_clients):
    """Factory de clientes MQTT falsos; los creados quedan en mqtt_clients."""

    def build(**options):
        def factory(client_id):
            client = FakeMqttClient(client_id, **options)
            mqtt_clients.append(client)
            return client

        return factory

    return build


@pytest.fixture
def mqtt_settings() -> MqttSettings:
    return MqttSettings(
        server="broker.local",
        port=1883,
        prefix="lake",
        connect_timeout_seconds=0.2,
        publish_timeout_seconds=0.2,
        disconnect_grace_ms=50,
    )


@pytest.fixture
def influx_settings() -> InfluxSettings:
    return InfluxSettings(server="influx.local", prefix="tablerock_")


@pytest.fixture
def influx_factory() -> MagicMock:
    return MagicMock(name="InfluxDBClient")
