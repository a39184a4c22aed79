"""In-memory navigation context for headless hosts and tests."""

from __future__ import annotations

from typing import List, Optional
from urllib.parse import parse_qs, urlsplit

from ..utils.logging_setup import get_logger

logger = get_logger(__name__)


class NavigationContext:
    """
    Tracks the current URI and a back stack.

    ``query_param`` reads the first value of a query-string parameter of the
    current URI (case-sensitive name, like the browser host).
    """

    def __init__(self, uri: str = "/"):
        self._uri = uri
        self.history: List[str] = []

    @property
    def uri(self) -> str:
        return self._uri

    def query_param(self, name: str) -> Optional[str]:
        values = parse_qs(urlsplit(self._uri).query).get(name)
        return values[0] if values else None

    def navigate_to(self, uri: str) -> None:
        logger.debug(f"Navigate {self._uri} -> {uri}")
        self.history.append(self._uri)
        self._uri = uri

    def back(self) -> Optional[str]:
        if not self.history:
            return None
        self._uri = self.history.pop()
        return self._uri
