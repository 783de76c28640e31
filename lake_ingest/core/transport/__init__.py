"""Transport layer - Página fuente (HTTP) y broker MQTT."""

from .mqtt_client import MQTTPublisherSession
from .page_fetcher import HtmlElement, HtmlPageFetcher

__all__ = ["HtmlElement", "HtmlPageFetcher", "MQTTPublisherSession"]
