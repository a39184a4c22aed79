"""Localizer protocol and result type."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class LocalizedString:
    """
    Lookup result.

    When the key is missing, ``value`` is the key itself and
    ``resource_not_found`` is True.
    """

    name: str
    value: str
    resource_not_found: bool = False

    def __str__(self) -> str:
        return self.value


@runtime_checkable
class Localizer(Protocol):
    """String resources for one scope (e.g. "Pages") in the active language."""

    def __getitem__(self, key: str) -> LocalizedString: ...
