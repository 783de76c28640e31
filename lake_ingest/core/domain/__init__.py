"""Domain layer - Modelos, errores y contratos."""

from .errors import (
    ConfigurationError,
    ConnectFailure,
    FetchFailure,
    LakeIngestError,
    ParseFailure,
    SinkError,
    WriteFailure,
)
from .measurement import (
    AggregatedReading,
    Measurement,
    MeasurementName,
    PublishOutcome,
    REQUIRED_KINDS,
    unit_for,
)
from .sink_interface import NullSink, ReadingSink

__all__ = [
    "AggregatedReading",
    "ConfigurationError",
    "ConnectFailure",
    "FetchFailure",
    "LakeIngestError",
    "Measurement",
    "MeasurementName",
    "NullSink",
    "ParseFailure",
    "PublishOutcome",
    "REQUIRED_KINDS",
    "ReadingSink",
    "SinkError",
    "WriteFailure",
    "unit_for",
]
