"""
Result type for parse steps that must never raise.

Lookup filters, enum names and pending string values come from the UI as
free text. Parsers return ``Ok(value)`` or ``Err(reason)`` and callers decide
how to degrade, typically with ``unwrap_or``.

Usage:
    from finance_ui.utils.result import Result, Ok, Err

    def parse_bool(text: str) -> Result[bool, str]:
        if text.lower() in ("true", "false"):
            return Ok(text.lower() == "true")
        return Err(f"not a bool: {text!r}")

    only_active = parse_bool(raw).unwrap_or(True)

    match parse_bool(raw):
        case Ok(value):
            ...
        case Err(reason):
            logger.debug(reason)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful parse."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    @property
    def error(self) -> None:
        return None

    def map(self, f: Callable[[T], U]) -> "Result[U, E]":
        return Ok(f(self.value))

    def and_then(self, f: Callable[[T], "Result[U, E]"]) -> "Result[U, E]":
        return f(self.value)


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failed parse carrying a reason."""

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> None:
        """Raises ValueError. Check is_ok() first."""
        raise ValueError(f"Called unwrap() on Err: {self.error}")

    def unwrap_or(self, default: T) -> T:
        return default

    @property
    def value(self) -> None:
        return None

    def map(self, f: Callable[[T], U]) -> "Result[U, E]":
        return self  # type: ignore

    def and_then(self, f: Callable[[T], "Result[U, E]"]) -> "Result[U, E]":
        return self  # type: ignore


Result = Union[Ok[T], Err[E]]


def try_result(f: Callable[[], T], error_type: type[BaseException] = Exception) -> Result[T, str]:
    """
    Run ``f`` and capture ``error_type`` as Err.

    Example:
        try_result(lambda: UUID("not-a-guid"), ValueError)
        # Err("badly formed hexadecimal UUID string")
    """
    try:
        return Ok(f())
    except error_type as e:
        return Err(str(e))
