"""Lake sync runner configuration."""

from __future__ import annotations

from dataclasses import dataclass

from common.config import DEFAULT_SOURCE_URL, Settings


@dataclass(frozen=True)
class RunnerConfig:
    """Configuración de una corrida del job."""
    source_url: str = DEFAULT_SOURCE_URL
    fetch_timeout_seconds: float = 10.0
    collect_timeout_seconds: float = 30.0
    publish_fields: tuple[str, ...] = ("temperature",)
    publish_workers: int = 1

    @classmethod
    def from_settings(cls, settings: Settings) -> "RunnerConfig":
        return cls(
            source_url=settings.scrape.source_url,
            fetch_timeout_seconds=settings.scrape.fetch_timeout_seconds,
            collect_timeout_seconds=settings.scrape.collect_timeout_seconds,
            publish_fields=settings.publish_fields,
            publish_workers=settings.publish_workers,
        )
