"""Jerarquía de errores del pipeline de lecturas del lago.

- FetchFailure: fallo de red/HTTP al obtener la página → aborta la corrida.
- SinkError y subclases: fallos contenidos por sink, se reportan como
  PublishOutcome y nunca se propagan al otro sink.
"""

from __future__ import annotations

from typing import Sequence


class LakeIngestError(Exception):
    """Error base del servicio."""


class FetchFailure(LakeIngestError):
    """Fallo al obtener la página fuente (red, timeout o status no 2xx)."""

    def __init__(self, url: str, reason: str, status_code: int | None = None):
        self.url = url
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"Fetch of {url} failed: {reason}")


class SinkError(LakeIngestError):
    """Error contenido en un único sink."""


class ConfigurationError(SinkError):
    def __init__(self, sink_name: str, missing: Sequence[str]):
        self.sink_name = sink_name
        self.missing = list(missing)
        super().__init__(f"no {', '.join(self.missing)} specified")


class ConnectFailure(SinkError):
    """No se pudo conectar al broker."""


class ParseFailure(SinkError):
    """El valor textual no es convertible a número."""

    def __init__(self, field_name: str, raw_value: str, reason: str = ""):
        self.field_name = field_name
        self.raw_value = raw_value
        detail = f": {reason}" if reason else ""
        super().__init__(f"cannot parse {field_name}={raw_value!r} as number{detail}")


class WriteFailure(SinkError):
    """El sink rechazó la escritura/publicación."""
