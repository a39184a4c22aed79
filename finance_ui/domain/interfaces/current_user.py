"""Current user identity protocol."""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable
from uuid import UUID


@runtime_checkable
class CurrentUser(Protocol):
    """
    Identity of the signed-in user.

    Optional service: view models that cannot resolve it treat the session
    as authenticated.
    """

    @property
    def is_authenticated(self) -> bool: ...

    @property
    def is_admin(self) -> bool: ...

    @property
    def user_id(self) -> UUID: ...

    @property
    def preferred_language(self) -> Optional[str]: ...
