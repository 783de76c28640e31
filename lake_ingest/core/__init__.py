"""Core module - Piezas base del pipeline de lecturas del lago.

Estructura:
- domain/      → Modelos, errores y contrato de sinks
- transport/   → Página fuente (httpx + BeautifulSoup) y cliente MQTT
"""
