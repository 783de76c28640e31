"""Interfaz abstracta para los sinks de telemetría.

Desacopla el pipeline de los detalles de cada destino (MQTT, InfluxDB).
Cada intento de publicación termina en un PublishOutcome; los errores
nunca cruzan de un sink a otro.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from .errors import SinkError
from .measurement import PublishOutcome

logger = logging.getLogger(__name__)


class ReadingSink(ABC):
    """Destino de telemetría.

    Implementaciones:
    - MqttSink: publica al topic <prefix>/<campo>
    - InfluxSink: escribe un punto <prefix><campo>
    """

    name: str = "sink"

    def publish(self, field_name: str, value: str) -> PublishOutcome:
        """Intenta publicar un valor y retorna el resultado.

        Args:
            field_name: "temperature" o "level"
            value: valor textual (sin unidad)

        Returns:
            PublishOutcome exitoso o con el error reportado
        """
        try:
            self._publish(field_name, value)
        except SinkError as e:
            return PublishOutcome.failed(self.name, field_name, str(e))
        except Exception as e:
            logger.exception("[%s] Unexpected error sending %s", self.name, field_name)
            return PublishOutcome.failed(self.name, field_name, f"{type(e).__name__}: {e}")

        logger.debug("[%s] Published %s=%s", self.name, field_name, value)
        return PublishOutcome.ok(self.name, field_name)

    @abstractmethod
    def _publish(self, field_name: str, value: str) -> None:
        """Realiza la publicación; lanza SinkError si falla."""
        pass


class NullSink(ReadingSink):
    """Sink no-op para pruebas o sinks deshabilitados."""

    name = "null"

    def _publish(self, field_name: str, value: str) -> None:
        return None
