"""Factory para crear los sinks configurados.

Centraliza la creación de los destinos de telemetría. Ambos sinks se
crean siempre; la validación de configuración ocurre al publicar para
que cada sink reporte su propio ConfigurationError.
"""

from __future__ import annotations

import logging
import random
from typing import Optional

from common.config import Settings

from ..core.domain.sink_interface import ReadingSink
from .influx_sink import InfluxSink
from .mqtt_sink import MqttSink

logger = logging.getLogger(__name__)


def create_sinks(settings: Settings, rng: Optional[random.Random] = None) -> list[ReadingSink]:
    sinks: list[ReadingSink] = [
        MqttSink(settings.mqtt, rng=rng),
        InfluxSink(settings.influx),
    ]
    logger.debug("[SINK_FACTORY] Sinks: %s", ", ".join(s.name for s in sinks))
    return sinks
