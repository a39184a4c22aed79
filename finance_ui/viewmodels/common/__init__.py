"""
View-model composition framework shared by all list and card view models.
"""

from .base import BaseViewModel
from .card_base import BaseCardViewModel
from .list_base import BaseListViewModel
from .lookups import EnumLookup, EnumLookupRegistry, default_enum_registry, parse_lookup_filter
from .pending import (
    NumberValue,
    PendingFieldValues,
    PendingValue,
    ReferenceValue,
    TextValue,
    apply_pending,
    coerce_pending,
)
from .rendering import (
    CardField,
    CardFieldKind,
    CardRecord,
    ListCell,
    ListCellKind,
    ListColumn,
    ListColumnAlign,
    ListRecord,
    LookupItem,
    validate_records,
)
from .ribbon import (
    RibbonAction,
    RibbonItemSize,
    RibbonRegister,
    RibbonRegisterKind,
    RibbonTab,
    UiRibbonGroup,
    UiRibbonItem,
    find_action,
    sprite_icon,
    to_ui_groups,
)

__all__ = [
    "BaseViewModel",
    "BaseCardViewModel",
    "BaseListViewModel",
    "EnumLookup",
    "EnumLookupRegistry",
    "default_enum_registry",
    "parse_lookup_filter",
    "NumberValue",
    "PendingFieldValues",
    "PendingValue",
    "ReferenceValue",
    "TextValue",
    "apply_pending",
    "coerce_pending",
    "CardField",
    "CardFieldKind",
    "CardRecord",
    "ListCell",
    "ListCellKind",
    "ListColumn",
    "ListColumnAlign",
    "ListRecord",
    "LookupItem",
    "validate_records",
    "RibbonAction",
    "RibbonItemSize",
    "RibbonRegister",
    "RibbonRegisterKind",
    "RibbonTab",
    "UiRibbonGroup",
    "UiRibbonItem",
    "find_action",
    "sprite_icon",
    "to_ui_groups",
]
