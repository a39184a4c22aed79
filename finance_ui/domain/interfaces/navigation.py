"""Navigation protocol."""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class Navigation(Protocol):
    """Current location of the host UI and a way to move elsewhere."""

    @property
    def uri(self) -> str: ...

    def query_param(self, name: str) -> Optional[str]: ...

    def navigate_to(self, uri: str) -> None: ...
