from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_SOURCE_URL = "https://anglerspy.com/table-rock-lake-water-temperature-ipm/"


def _default_env_file() -> str:
    # .env del directorio de trabajo, igual que el despliegue con cron.
    return str(Path.cwd() / ".env")


def _env(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip()


def _env_optional(name: str) -> Optional[str]:
    value = _env(name)
    return value or None


@dataclass(frozen=True)
class ScrapeSettings:
    """Configuración de la extracción de la página fuente."""
    source_url: str = DEFAULT_SOURCE_URL
    fetch_timeout_seconds: float = 10.0
    collect_timeout_seconds: float = 30.0
    user_agent: str = "lake-sync/1.0"
    temperature_selector: str = "#wrsn-temp-1"
    level_selector: str = "#wrsn-temp-weather-1"

    @classmethod
    def from_env(cls) -> "ScrapeSettings":
        return cls(
            source_url=_env("LAKE_SOURCE_URL", DEFAULT_SOURCE_URL),
            fetch_timeout_seconds=float(_env("LAKE_FETCH_TIMEOUT_SECONDS", "10")),
            collect_timeout_seconds=float(_env("LAKE_COLLECT_TIMEOUT_SECONDS", "30")),
            user_agent=_env("LAKE_USER_AGENT", "lake-sync/1.0"),
            temperature_selector=_env("LAKE_TEMPERATURE_SELECTOR", "#wrsn-temp-1"),
            level_selector=_env("LAKE_LEVEL_SELECTOR", "#wrsn-temp-weather-1"),
        )


@dataclass(frozen=True)
class MqttSettings:
    """Configuración del broker MQTT.

    server y prefix son obligatorios; su ausencia se reporta como
    ConfigurationError antes de cualquier intento de red.
    """
    server: Optional[str] = None
    port: int = 1883
    prefix: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    connect_timeout_seconds: float = 5.0
    publish_timeout_seconds: float = 5.0
    disconnect_grace_ms: int = 1000

    @classmethod
    def from_env(cls) -> "MqttSettings":
        return cls(
            server=_env_optional("MQTT_SERVER"),
            port=int(_env("MQTT_PORT") or "1883"),
            prefix=_env_optional("MQTT_PREFIX"),
            username=_env_optional("MQTT_USERNAME"),
            password=_env_optional("MQTT_PASSWORD"),
            connect_timeout_seconds=float(_env("MQTT_CONNECT_TIMEOUT_SECONDS", "5")),
            publish_timeout_seconds=float(_env("MQTT_PUBLISH_TIMEOUT_SECONDS", "5")),
            disconnect_grace_ms=int(_env("MQTT_DISCONNECT_GRACE_MS", "1000")),
        )

    def missing_keys(self) -> list[str]:
        missing = []
        if not self.server:
            missing.append("MQTT_SERVER")
        if not self.prefix:
            missing.append("MQTT_PREFIX")
        return missing

    @property
    def uri(self) -> str:
        return f"tcp://{self.server}:{self.port}"


@dataclass(frozen=True)
class InfluxSettings:
    """Configuración de InfluxDB.

    La base de datos es configurable (INFLUXDB_DATABASE) con "lakeinfo"
    como valor por defecto.
    """
    server: Optional[str] = None
    port: int = 8086
    prefix: Optional[str] = None
    database: str = "lakeinfo"
    username: Optional[str] = None
    password: Optional[str] = None
    use_ssl: bool = False
    timeout_ms: int = 10_000

    @classmethod
    def from_env(cls) -> "InfluxSettings":
        return cls(
            server=_env_optional("INFLUXDB_SERVER"),
            port=int(_env("INFLUXDB_PORT") or "8086"),
            prefix=_env_optional("INFLUXDB_PREFIX"),
            database=_env("INFLUXDB_DATABASE") or "lakeinfo",
            username=_env_optional("INFLUXDB_USERNAME"),
            password=_env_optional("INFLUXDB_PASSWORD"),
            use_ssl=_env("INFLUXDB_USE_SSL").lower() == "yes",
            timeout_ms=int(_env("INFLUXDB_TIMEOUT_MS", "10000")),
        )

    def missing_keys(self) -> list[str]:
        missing = []
        if not self.server:
            missing.append("INFLUXDB_SERVER")
        if not self.prefix:
            missing.append("INFLUXDB_PREFIX")
        return missing

    @property
    def url(self) -> str:
        protocol = "https" if self.use_ssl else "http"
        return f"{protocol}://{self.server}:{self.port}"

    @property
    def token(self) -> str:
        # InfluxDB 1.8 acepta "usuario:password" como token.
        if self.username and self.password:
            return f"{self.username}:{self.password}"
        return ""


@dataclass(frozen=True)
class Settings:
    scrape: ScrapeSettings = field(default_factory=ScrapeSettings)
    mqtt: MqttSettings = field(default_factory=MqttSettings)
    influx: InfluxSettings = field(default_factory=InfluxSettings)
    publish_fields: tuple[str, ...] = ("temperature",)
    publish_workers: int = 1


def get_settings(env_file: Optional[str] = None) -> Settings:
    # Carga el .env (si existe) pero las variables reales del entorno tienen prioridad.
    if env_file is None:
        env_file = os.getenv("LAKE_ENV_FILE", _default_env_file())
    if env_file and Path(env_file).exists():
        load_dotenv(env_file, override=False)

    fields = tuple(
        f.strip().lower()
        for f in _env("LAKE_PUBLISH_FIELDS", "temperature").split(",")
        if f.strip()
    )

    return Settings(
        scrape=ScrapeSettings.from_env(),
        mqtt=MqttSettings.from_env(),
        influx=InfluxSettings.from_env(),
        publish_fields=fields or ("temperature",),
        publish_workers=max(1, int(_env("LAKE_PUBLISH_WORKERS", "1"))),
    )
