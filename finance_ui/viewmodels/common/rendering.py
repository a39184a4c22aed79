"""
Generic list and card rendering records.

Hosts render any entity from these records without per-entity UI code:
lists as ``ListColumn``/``ListRecord`` rows, cards as ``CardRecord``
fields. List records carry one cell per column; card fields are keyed by
their ``label_key``.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, List, Optional, Sequence
from uuid import UUID

from ...domain.exceptions import DuplicateFieldError, RecordShapeError


class ListCellKind(Enum):
    TEXT = "Text"
    SYMBOL = "Symbol"
    CURRENCY = "Currency"


class ListColumnAlign(Enum):
    LEFT = "Left"
    CENTER = "Center"
    RIGHT = "Right"


@dataclass(frozen=True)
class ListColumn:
    key: str
    title: str
    width: Optional[str] = None
    align: ListColumnAlign = ListColumnAlign.LEFT


@dataclass(frozen=True)
class ListCell:
    kind: ListCellKind
    text: Optional[str] = None
    symbol_id: Optional[UUID] = None
    amount: Optional[Decimal] = None
    icon_url: Optional[str] = None
    muted: bool = False

    @classmethod
    def of_text(cls, text: Optional[str], muted: bool = False) -> "ListCell":
        return cls(ListCellKind.TEXT, text=text, muted=muted)

    @classmethod
    def of_symbol(cls, symbol_id: Optional[UUID]) -> "ListCell":
        return cls(ListCellKind.SYMBOL, symbol_id=symbol_id)

    @classmethod
    def of_currency(cls, amount: Optional[Decimal]) -> "ListCell":
        return cls(ListCellKind.CURRENCY, amount=amount)


@dataclass
class ListRecord:
    cells: List[ListCell]
    item: Any = None
    hint: Optional[str] = None


def validate_records(columns: Sequence[ListColumn], records: Iterable[ListRecord]) -> None:
    """Raise RecordShapeError for the first record whose cells don't match the columns."""
    for index, record in enumerate(records):
        if len(record.cells) != len(columns):
            raise RecordShapeError(index, len(record.cells), len(columns))


class CardFieldKind(Enum):
    TEXT = "Text"
    DATE = "Date"
    BOOLEAN = "Boolean"
    SYMBOL = "Symbol"
    CURRENCY = "Currency"


@dataclass
class CardField:
    """
    One card field. Mutated in place when pending edits are applied.

    ``lookup_type`` turns the field into a picker: ``"Enum:<Name>"`` for enum
    members, or an entity name ("Contact", "Account", ...). ``value_id`` is
    the key of the picked entity.
    """

    label_key: str
    kind: CardFieldKind = CardFieldKind.TEXT
    text: Optional[str] = None
    symbol_id: Optional[UUID] = None
    amount: Optional[Decimal] = None
    bool_value: Optional[bool] = None
    editable: bool = False
    lookup_type: Optional[str] = None
    lookup_field: Optional[str] = None
    lookup_filter: Optional[str] = None
    hint: Optional[str] = None
    value_id: Optional[UUID] = None
    allow_add: bool = False
    record_creation_name_suggestion: Optional[str] = None


class CardRecord:
    """Ordered card fields plus the backing DTO. Label keys are unique."""

    def __init__(self, fields: Iterable[CardField], item: Any = None):
        self.fields: List[CardField] = []
        self.item = item
        seen = set()
        for f in fields:
            if f.label_key in seen:
                raise DuplicateFieldError(f.label_key)
            seen.add(f.label_key)
            self.fields.append(f)

    def field(self, label_key: str) -> Optional[CardField]:
        for f in self.fields:
            if f.label_key == label_key:
                return f
        return None

    def __iter__(self):
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def __repr__(self) -> str:
        return f"CardRecord(fields={[f.label_key for f in self.fields]}, item={self.item!r})"


@dataclass(frozen=True)
class LookupItem:
    key: UUID
    name: str
