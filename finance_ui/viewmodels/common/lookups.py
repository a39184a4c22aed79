"""
Lookup helpers: enum registry and lookup-filter parsing.

Card fields name their picker with ``lookup_type``. ``"Enum:<Name>"``
pickers are served from an ``EnumLookupRegistry``: an explicit,
case-insensitive mapping from logical enum name to its members. Entity
pickers may carry a ``lookup_filter`` such as ``"Type=Bank"`` or
``"OnlyActive=false"``; malformed filters mean "no filter".
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Type, TypeVar
from uuid import UUID

from ...domain.models import (
    AccountType,
    AttachmentEntityKind,
    BooleanSelection,
    ContactType,
    PostingKind,
    SavingsPlanExpectation,
    SavingsPlanInterval,
    SavingsPlanType,
    SecurityPostingSubType,
    display_name,
)
from ...utils.result import Err, Ok, Result

ENUM_PREFIX = "Enum:"

E = TypeVar("E", bound=Enum)


@dataclass(frozen=True)
class EnumLookup:
    name: str
    enum_type: Type[Enum]
    members: Callable[[], Iterable[Enum]]

    def resource_key(self, member_name: str) -> str:
        return f"EnumType_{self.name}_{member_name}"


class EnumLookupRegistry:
    """
    Usage:
        registry = EnumLookupRegistry()
        registry.register(ContactType)
        registry.resolve("contacttype").members()
    """

    def __init__(self) -> None:
        self._entries: Dict[str, EnumLookup] = {}

    def register(self, enum_type: Type[Enum], name: Optional[str] = None,
                 members: Optional[Callable[[], Iterable[Enum]]] = None) -> EnumLookup:
        entry = EnumLookup(
            name=name or enum_type.__name__,
            enum_type=enum_type,
            members=members or (lambda: list(enum_type)),
        )
        self._entries[entry.name.lower()] = entry
        return entry

    def resolve(self, name: Optional[str]) -> Optional[EnumLookup]:
        if not name:
            return None
        return self._entries.get(name.strip().lower())

    def names(self) -> List[str]:
        return sorted(e.name for e in self._entries.values())

    def __contains__(self, name: str) -> bool:
        return self.resolve(name) is not None


def default_enum_registry() -> EnumLookupRegistry:
    registry = EnumLookupRegistry()
    for enum_type in (
        ContactType,
        AccountType,
        SavingsPlanType,
        SavingsPlanInterval,
        SavingsPlanExpectation,
        PostingKind,
        SecurityPostingSubType,
        BooleanSelection,
        AttachmentEntityKind,
    ):
        registry.register(enum_type)
    return registry


def enum_lookup_name(lookup_type: Optional[str]) -> Optional[str]:
    """``"Enum:ContactType"`` → ``"ContactType"``; None for other lookup types."""
    if not lookup_type or not lookup_type.lower().startswith(ENUM_PREFIX.lower()):
        return None
    return lookup_type[len(ENUM_PREFIX):].strip() or None


def parse_lookup_filter(text: Optional[str]) -> Result[Dict[str, str], str]:
    """
    Parse ``"Key=Value"`` pairs separated by ``;``. Keys are lowercased.

    Any malformed pair fails the whole filter.
    """
    if not text or not text.strip():
        return Err("empty filter")
    pairs: Dict[str, str] = {}
    for part in text.split(";"):
        if not part.strip():
            continue
        key, sep, value = part.partition("=")
        if not sep or not key.strip():
            return Err(f"malformed filter part: {part!r}")
        pairs[key.strip().lower()] = value.strip()
    if not pairs:
        return Err("empty filter")
    return Ok(pairs)


def filter_value(text: Optional[str], key: str) -> Optional[str]:
    return parse_lookup_filter(text).unwrap_or({}).get(key.lower())


def parse_enum_member(enum_type: Type[E], text: Optional[str]) -> Result[E, str]:
    """Case-insensitive match against the member's display name or its name."""
    if not text:
        return Err("empty enum value")
    wanted = text.strip().lower()
    for member in enum_type:
        if wanted in (display_name(member).lower(), member.name.lower()):
            return Ok(member)
    return Err(f"{text!r} is not a {enum_type.__name__}")


def parse_bool(text: Optional[str]) -> Result[bool, str]:
    if text is not None and text.strip().lower() in ("true", "false"):
        return Ok(text.strip().lower() == "true")
    return Err(f"not a bool: {text!r}")


def parse_guid(text: Optional[str]) -> Result[UUID, str]:
    try:
        return Ok(UUID((text or "").strip()))
    except ValueError:
        return Err(f"not a uuid: {text!r}")
