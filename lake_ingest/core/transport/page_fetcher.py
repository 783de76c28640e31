"""Cliente HTML para la página fuente.

Una visita = un GET. Los callbacks registrados por selector CSS se
disparan cero o una vez cada uno; los errores de red/HTTP se reportan
como FetchFailure al llamador.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

import httpx
from bs4 import BeautifulSoup

from ..domain.errors import FetchFailure

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_USER_AGENT = "lake-sync/1.0"


@dataclass(frozen=True)
class HtmlElement:
    """Elemento encontrado en la página."""
    selector: str
    text: str


HtmlCallback = Callable[[HtmlElement], None]


class HtmlPageFetcher:
    """Fetcher ligero de una sola página.

    Responsabilidades:
    - GET de la URL (httpx)
    - Selección DOM (BeautifulSoup)
    - Delegación de elementos encontrados a los callbacks
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._timeout = timeout
        self._user_agent = user_agent
        self._transport = transport
        self._html_callbacks: dict[str, list[HtmlCallback]] = {}
        self._request_callbacks: list[Callable[[str], None]] = []

    def on_html(self, selector: str, callback: HtmlCallback) -> None:
        self._html_callbacks.setdefault(selector, []).append(callback)

    def on_request(self, callback: Callable[[str], None]) -> None:
        self._request_callbacks.append(callback)

    def visit(self, url: str) -> frozenset[str]:
        """Visita la URL y dispara los callbacks.

        Returns:
            Selectores que encontraron un elemento

        Raises:
            FetchFailure: error de red, timeout o status no 2xx
        """
        for callback in self._request_callbacks:
            callback(url)

        html = self._fetch(url)
        soup = BeautifulSoup(html, "html.parser")

        matched = set()
        for selector, callbacks in self._html_callbacks.items():
            node = soup.select_one(selector)
            if node is None:
                continue
            element = HtmlElement(selector=selector, text=node.get_text())
            matched.add(selector)
            for callback in callbacks:
                callback(element)

        return frozenset(matched)

    def _fetch(self, url: str) -> str:
        try:
            with httpx.Client(
                timeout=self._timeout,
                headers={"User-Agent": self._user_agent},
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                resp = client.get(url)
                resp.raise_for_status()
                return resp.text
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise FetchFailure(url, f"HTTP {status}", status_code=status) from e
        except httpx.HTTPError as e:
            raise FetchFailure(url, f"{type(e).__name__}: {e}") from e
