"""Scrape - Extracción de lecturas desde la página fuente."""

from .channel import ChannelTimeout, MeasurementChannel
from .extractor import (
    DEFAULT_TARGETS,
    LEVEL_TARGET,
    TEMPERATURE_TARGET,
    PageExtractor,
    WatchTarget,
    build_targets,
    strip_unit,
)

__all__ = [
    "ChannelTimeout",
    "DEFAULT_TARGETS",
    "LEVEL_TARGET",
    "MeasurementChannel",
    "PageExtractor",
    "TEMPERATURE_TARGET",
    "WatchTarget",
    "build_targets",
    "strip_unit",
]
