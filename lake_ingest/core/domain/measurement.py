"""Modelos de dominio para las lecturas del lago."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class MeasurementName(str, Enum):
    """Tipos de medición extraídos de la página."""
    LEVEL = "level"
    TEMPERATURE = "temperature"


REQUIRED_KINDS = frozenset({MeasurementName.LEVEL, MeasurementName.TEMPERATURE})

UNITS = {
    MeasurementName.LEVEL: "ft",
    MeasurementName.TEMPERATURE: "ºF",
}


def unit_for(field_name: str) -> str:
    """Unidad por nombre de campo: "level" → ft, cualquier otro → ºF."""
    if field_name == MeasurementName.LEVEL.value:
        return UNITS[MeasurementName.LEVEL]
    return UNITS[MeasurementName.TEMPERATURE]


@dataclass(frozen=True)
class Measurement:
    """Valor crudo emitido por un watcher de la página (sufijo ya removido)."""
    name: MeasurementName
    raw_text: str


@dataclass
class AggregatedReading:
    """Lectura agregada construida por el collector.

    Sólo es válida (is_complete) cuando se recibió exactamente un LEVEL y
    un TEMPERATURE. Los campos ausentes quedan como "".
    """
    level: str = ""
    temperature: str = ""
    received: list[MeasurementName] = field(default_factory=list)
    timed_out: bool = False

    def fold(self, measurement: Measurement) -> bool:
        """Incorpora una medición. Retorna False si el tipo ya estaba."""
        if measurement.name in self.received:
            return False
        if measurement.name is MeasurementName.LEVEL:
            self.level = measurement.raw_text
        else:
            self.temperature = measurement.raw_text
        self.received.append(measurement.name)
        return True

    @property
    def missing(self) -> list[MeasurementName]:
        return [k for k in MeasurementName if k not in self.received]

    @property
    def is_complete(self) -> bool:
        return not self.missing

    def value_of(self, field_name: str) -> str:
        if field_name == MeasurementName.LEVEL.value:
            return self.level
        if field_name == MeasurementName.TEMPERATURE.value:
            return self.temperature
        raise KeyError(field_name)

    def summary(self) -> str:
        return f"Level: {self.level} ft\nTemp: {self.temperature} ºF\n"


@dataclass(frozen=True)
class PublishOutcome:
    """Resultado de un único intento de publicación en un sink."""
    sink_name: str
    success: bool
    field: str = MeasurementName.TEMPERATURE.value
    error: Optional[str] = None

    @classmethod
    def ok(cls, sink_name: str, field: str) -> "PublishOutcome":
        return cls(sink_name=sink_name, success=True, field=field)

    @classmethod
    def failed(cls, sink_name: str, field: str, error: str) -> "PublishOutcome":
        return cls(sink_name=sink_name, success=False, field=field, error=error)
