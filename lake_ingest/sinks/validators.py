"""Validación del punto numérico para la serie temporal.

La conversión texto → float es la frontera de ParseFailure: un valor no
numérico aborta sólo el sink que lo necesita.
"""

from __future__ import annotations

import logging
import math

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..core.domain.errors import ParseFailure
from ..core.domain.measurement import unit_for

logger = logging.getLogger(__name__)


class SeriesPoint(BaseModel):
    """Punto a escribir en la serie temporal.

    Formato:
        measurement = <prefix><campo>
        tags        = {"unit": "ºF" | "ft"}
        fields      = {"value": "71", "valueNum": 71.0}
    """

    measurement: str
    unit: str
    value: str
    value_num: float = Field(..., alias="valueNum")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("value_num", mode="before")
    @classmethod
    def parse_value_num(cls, v):
        if isinstance(v, str):
            try:
                v = float(v.strip())
            except ValueError:
                raise ValueError(f"not a number: {v!r}")
        if math.isnan(v):
            raise ValueError("Value is NaN")
        if math.isinf(v):
            raise ValueError("Value is infinite")
        return v

    def fields(self) -> dict:
        return {"value": self.value, "valueNum": self.value_num}


def build_series_point(prefix: str, field_name: str, value: str) -> SeriesPoint:
    """Construye el punto validado.

    Raises:
        ParseFailure: value no es numérico
    """
    try:
        return SeriesPoint(
            measurement=f"{prefix}{field_name}",
            unit=unit_for(field_name),
            value=value,
            valueNum=value,
        )
    except ValidationError as e:
        errors = e.errors()
        reason = errors[0]["msg"] if errors else str(e)
        logger.warning("[SERIES_VALIDATOR] %s=%r rejected: %s", field_name, value, reason)
        raise ParseFailure(field_name, value, reason) from e
