"""
Pending card edits.

The UI hands card view models untyped values (a picked LookupItem, a GUID
from an upload, a decimal from a currency editor, raw text). Each value is
coerced once into a ``PendingValue`` when it is recorded, and applied to
the matching ``CardField`` with an exhaustive match.

Coercion order for raw values:
    LookupItem        → ReferenceValue(key, name)
    UUID              → ReferenceValue(key)
    Decimal/int/float → NumberValue
    str               → NumberValue if the field is CURRENCY and it parses,
                        else ReferenceValue if it parses as a UUID,
                        else TextValue
    anything else     → TextValue(str(raw))
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, ItemsView, Iterator, Optional, Union
from uuid import UUID

from ...utils.result import Err, Ok, Result
from .lookups import parse_bool, parse_guid
from .rendering import CardField, CardFieldKind, LookupItem


@dataclass(frozen=True)
class TextValue:
    text: str


@dataclass(frozen=True)
class NumberValue:
    amount: Decimal


@dataclass(frozen=True)
class ReferenceValue:
    key: UUID
    name: Optional[str] = None


PendingValue = Union[TextValue, NumberValue, ReferenceValue]


def parse_decimal(text: str) -> Result[Decimal, str]:
    try:
        value = Decimal(text.strip())
    except InvalidOperation:
        return Err(f"not a decimal: {text!r}")
    if not value.is_finite():
        return Err(f"not a finite decimal: {text!r}")
    return Ok(value)


def coerce_pending(raw: Any, kind: CardFieldKind) -> PendingValue:
    if isinstance(raw, (TextValue, NumberValue, ReferenceValue)):
        return raw
    if raw is None:
        return TextValue("")
    if isinstance(raw, LookupItem):
        return ReferenceValue(raw.key, raw.name)
    if isinstance(raw, UUID):
        return ReferenceValue(raw)
    if isinstance(raw, (Decimal, int, float)) and not isinstance(raw, bool):
        return NumberValue(Decimal(str(raw)))
    if isinstance(raw, str):
        if kind is CardFieldKind.CURRENCY:
            number = parse_decimal(raw)
            if number.is_ok():
                return NumberValue(number.unwrap())
        key = parse_guid(raw)
        if key.is_ok():
            return ReferenceValue(key.unwrap())
        return TextValue(raw)
    return TextValue(str(raw))


def apply_pending(card_field: CardField, value: PendingValue) -> None:
    match value:
        case ReferenceValue(key=key, name=name) if name is not None:
            card_field.value_id = key
            card_field.text = name
        case ReferenceValue(key=key):
            card_field.value_id = key
            if card_field.kind is CardFieldKind.SYMBOL:
                card_field.symbol_id = key
        case NumberValue(amount=amount):
            card_field.amount = amount
        case TextValue(text=text):
            card_field.text = text
            if card_field.kind is CardFieldKind.BOOLEAN:
                card_field.bool_value = parse_bool(text).unwrap_or(card_field.bool_value)


class PendingFieldValues:
    """Pending values keyed by CardField.label_key, held until save."""

    def __init__(self) -> None:
        self._values: Dict[str, PendingValue] = {}

    def set(self, card_field: CardField, raw: Any) -> PendingValue:
        value = coerce_pending(raw, card_field.kind)
        self._values[card_field.label_key] = value
        return value

    def remove(self, label_key: str) -> None:
        self._values.pop(label_key, None)

    def clear(self) -> None:
        self._values.clear()

    def get(self, label_key: str) -> Optional[PendingValue]:
        return self._values.get(label_key)

    def text(self, label_key: str) -> Optional[str]:
        """Pending text (or a reference's name) for saves that only need a string."""
        match self._values.get(label_key):
            case TextValue(text=text):
                return text
            case ReferenceValue(name=name) if name is not None:
                return name
            case NumberValue(amount=amount):
                return str(amount)
        return None

    def reference(self, label_key: str) -> Optional[UUID]:
        value = self._values.get(label_key)
        return value.key if isinstance(value, ReferenceValue) else None

    def items(self) -> ItemsView[str, PendingValue]:
        return self._values.items()

    def __contains__(self, label_key: object) -> bool:
        return label_key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)
