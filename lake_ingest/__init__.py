"""Lake ingest - Extracción de lecturas del lago y publicación a MQTT/InfluxDB.

Flujo:
    página → PageExtractor → canal → ReadingCollector → sinks (MQTT, InfluxDB)
"""

from .collector import ReadingCollector
from .core.domain import AggregatedReading, Measurement, MeasurementName, PublishOutcome
from .scrape import MeasurementChannel, PageExtractor

__all__ = [
    "AggregatedReading",
    "Measurement",
    "MeasurementChannel",
    "MeasurementName",
    "PageExtractor",
    "PublishOutcome",
    "ReadingCollector",
]
