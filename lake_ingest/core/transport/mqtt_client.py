"""Cliente MQTT para publicación de lecturas."""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Optional

import paho.mqtt.client as mqtt

from ..domain.errors import ConnectFailure, WriteFailure

logger = logging.getLogger(__name__)


def _default_client_factory(client_id: str) -> mqtt.Client:
    return mqtt.Client(
        callback_api_version=mqtt.CallbackAPIVersion.VERSION2,
        client_id=client_id,
        protocol=mqtt.MQTTv311,
    )


class MQTTPublisherSession:
    """Sesión MQTT efímera para publicar.

    Responsabilidades:
    - Conexión con espera acotada
    - Publicación con ack (QoS 1) y espera acotada
    - Desconexión con periodo de gracia
    """

    def __init__(
        self,
        broker_host: str,
        broker_port: int = 1883,
        client_id: str = "lake-svc",
        username: Optional[str] = None,
        password: Optional[str] = None,
        connect_timeout: float = 5.0,
        client_factory: Optional[Callable[[str], Any]] = None,
    ):
        self.broker_host = broker_host
        self.broker_port = broker_port
        self.client_id = client_id
        self.username = username
        self.password = password
        self.connect_timeout = connect_timeout

        self._client_factory = client_factory or _default_client_factory
        self._client: Any = None
        self._connected = threading.Event()
        self._disconnected = threading.Event()
        self._refused = threading.Event()
        self._connect_rc: Any = None

    def connect(self) -> None:
        """Conecta al broker.

        Raises:
            ConnectFailure: broker inalcanzable, rechazo o timeout
        """
        self._client = self._client_factory(self.client_id)
        self._client.on_connect = self._on_connect
        self._client.on_disconnect = self._on_disconnect

        if self.username:
            self._client.username_pw_set(self.username, self.password)

        logger.info(
            "[MQTT] Connecting to tcp://%s:%d clientID=%s",
            self.broker_host, self.broker_port, self.client_id,
        )
        try:
            self._client.connect(self.broker_host, self.broker_port, keepalive=60)
        except (OSError, ValueError) as e:
            raise ConnectFailure(
                f"cannot reach tcp://{self.broker_host}:{self.broker_port}: {e}"
            ) from e

        self._client.loop_start()

        deadline = time.monotonic() + self.connect_timeout
        while not self._connected.is_set() and not self._refused.is_set():
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            self._refused.wait(min(remaining, 0.05))

        if self._refused.is_set():
            # paho reintenta desde loop_start; cortar antes de parar el loop
            self._client.disconnect()
            self._client.loop_stop()
            raise ConnectFailure(f"connection refused: {self._connect_rc}")
        if not self._connected.is_set():
            self._client.loop_stop()
            raise ConnectFailure(
                f"connection timeout after {self.connect_timeout:.1f}s"
            )

    def publish(self, topic: str, payload: str, qos: int = 1, timeout: float = 5.0) -> None:
        """Publica y espera el acknowledgment del broker.

        Raises:
            WriteFailure: publicación rechazada o sin ack dentro del timeout
        """
        if self._client is None or not self._connected.is_set():
            raise WriteFailure("not connected")

        info = self._client.publish(topic, payload, qos=qos)
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            raise WriteFailure(f"publish to {topic} failed: {mqtt.error_string(info.rc)}")

        try:
            info.wait_for_publish(timeout=timeout)
        except (RuntimeError, ValueError) as e:
            raise WriteFailure(f"publish to {topic} failed: {e}") from e

        if not info.is_published():
            raise WriteFailure(f"publish to {topic} not acknowledged within {timeout:.1f}s")

        logger.debug("[MQTT] Published topic=%s payload=%s", topic, payload)

    def disconnect(self, grace_ms: int = 1000) -> None:
        """Desconecta del broker esperando como máximo grace_ms."""
        if self._client is None:
            return
        try:
            if self._connected.is_set():
                self._client.disconnect()
                self._disconnected.wait(grace_ms / 1000.0)
            self._client.loop_stop()
        except Exception as e:
            logger.warning("[MQTT] Disconnect error: %s", e)
        self._connected.clear()

    def _on_connect(self, client, userdata, flags, reason_code, properties=None):
        """Callback de conexión."""
        if reason_code == 0:
            self._connected.set()
            logger.info("[MQTT] Connected to broker")
        else:
            self._connect_rc = reason_code
            self._refused.set()
            logger.error("[MQTT] Connection failed: rc=%s", reason_code)

    def _on_disconnect(self, client, userdata, flags, reason_code, properties=None):
        """Callback de desconexión."""
        self._disconnected.set()
        logger.info("[MQTT] Disconnected (rc=%s)", reason_code)

    @property
    def is_connected(self) -> bool:
        return self._connected.is_set()
