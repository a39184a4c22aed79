"""Current user service backed by the signed-in session."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from ..domain.models import EMPTY_ID


@dataclass
class SessionUser:
    """
    Mutable identity of the current session.

    The host sets it after sign-in/sign-out; view models only read it.
    """

    user_id: UUID = EMPTY_ID
    is_authenticated: bool = False
    is_admin: bool = False
    preferred_language: Optional[str] = None
    username: Optional[str] = None

    def sign_in(self, user_id: UUID, username: str, is_admin: bool = False,
                preferred_language: Optional[str] = None) -> None:
        self.user_id = user_id
        self.username = username
        self.is_admin = is_admin
        self.preferred_language = preferred_language
        self.is_authenticated = True

    def sign_out(self) -> None:
        self.user_id = EMPTY_ID
        self.username = None
        self.is_admin = False
        self.is_authenticated = False
