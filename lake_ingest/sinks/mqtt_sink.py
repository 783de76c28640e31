"""Sink MQTT: una sesión efímera por publicación."""

from __future__ import annotations

import logging
import random
from typing import Any, Callable, Optional

from common.config import MqttSettings

from ..core.domain.errors import ConfigurationError
from ..core.domain.sink_interface import ReadingSink
from ..core.transport.mqtt_client import MQTTPublisherSession

logger = logging.getLogger(__name__)

CLIENT_ID_PREFIX = "lake-svc"
CLIENT_ID_LENGTH = 8
CLIENT_ID_ALPHABET = (
    "ABCDEFGHIJKLMNOPQRSTUVWXYZÅÄÖ"
    "abcdefghijklmnopqrstuvwxyzåäö"
    "0123456789"
)


def random_client_id(rng: random.Random, length: int = CLIENT_ID_LENGTH) -> str:
    """Sufijo aleatorio del client id (colisiones toleradas, sesión efímera)."""
    return "".join(rng.choice(CLIENT_ID_ALPHABET) for _ in range(length))


class MqttSink(ReadingSink):
    """Publica <prefix>/<campo> con QoS 1 y espera el ack."""

    name = "MQTT"

    def __init__(
        self,
        settings: MqttSettings,
        rng: Optional[random.Random] = None,
        client_factory: Optional[Callable[[str], Any]] = None,
    ):
        self._settings = settings
        self._rng = rng or random.Random()
        self._client_factory = client_factory

    def topic_for(self, field_name: str) -> str:
        return f"{self._settings.prefix}/{field_name}"

    def _publish(self, field_name: str, value: str) -> None:
        missing = self._settings.missing_keys()
        if missing:
            raise ConfigurationError(self.name, missing)

        client_id = f"{CLIENT_ID_PREFIX}-{random_client_id(self._rng)}"
        logger.info("[MQTT] Trying to connect to %s clientID=%s", self._settings.uri, client_id)

        session = MQTTPublisherSession(
            broker_host=self._settings.server,
            broker_port=self._settings.port,
            client_id=client_id,
            username=self._settings.username,
            password=self._settings.password,
            connect_timeout=self._settings.connect_timeout_seconds,
            client_factory=self._client_factory,
        )
        session.connect()
        try:
            session.publish(
                self.topic_for(field_name),
                value,
                qos=1,
                timeout=self._settings.publish_timeout_seconds,
            )
        finally:
            session.disconnect(grace_ms=self._settings.disconnect_grace_ms)
