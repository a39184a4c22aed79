"""
Ribbon (toolbar) records.

A view model describes its contextual actions as registers → tabs →
actions. The host renders ``to_ui_groups(registers)``, a flat list of
titled groups.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, List, Optional, Sequence

ActionCallback = Callable[[], Awaitable[None]]
FileCallback = Callable[[Any], Awaitable[None]]


class RibbonItemSize(Enum):
    SMALL = "Small"
    LARGE = "Large"


class RibbonRegisterKind(Enum):
    QUICK_ACCESS = "QuickAccess"
    ACTIONS = "Actions"
    LINKED_INFO = "LinkedInfo"
    REPORTS = "Reports"
    CUSTOM = "Custom"


@dataclass(frozen=True)
class RibbonAction:
    """
    One toolbar button.

    ``callback`` is awaited when the button is pressed. ``file_callback`` is
    set for buttons that open a file picker and receive the chosen file.
    """

    id: str
    label: str
    icon_markup: str = ""
    size: RibbonItemSize = RibbonItemSize.SMALL
    disabled: bool = False
    tooltip: Optional[str] = None
    callback: Optional[ActionCallback] = field(default=None, compare=False)
    file_callback: Optional[FileCallback] = field(default=None, compare=False)

    @property
    def action(self) -> str:
        """Older hosts dispatch on ``action``; it is the same value as ``id``."""
        return self.id

    async def invoke(self) -> None:
        if self.callback is not None and not self.disabled:
            await self.callback()


@dataclass
class RibbonTab:
    title: str
    items: List[RibbonAction] = field(default_factory=list)
    sort: int = 0


@dataclass
class RibbonRegister:
    kind: RibbonRegisterKind
    tabs: Optional[List[RibbonTab]] = None


@dataclass(frozen=True)
class UiRibbonItem:
    label: str
    icon: str
    size: RibbonItemSize
    disabled: bool
    action: str
    tooltip: Optional[str] = None
    callback: Optional[ActionCallback] = field(default=None, compare=False)
    file_callback: Optional[FileCallback] = field(default=None, compare=False)


@dataclass
class UiRibbonGroup:
    title: str
    items: List[UiRibbonItem] = field(default_factory=list)


def to_ui_groups(registers: Optional[Sequence[Optional[RibbonRegister]]]) -> List[UiRibbonGroup]:
    """
    Flatten registers into one group per tab.

    Tabs keep their register order and are then ordered by ``sort``
    (stable). None registers, tabs and items are skipped.
    """
    tabs: List[RibbonTab] = []
    for register in registers or []:
        if register is None or not register.tabs:
            continue
        tabs.extend(t for t in register.tabs if t is not None)

    groups: List[UiRibbonGroup] = []
    for tab in sorted(tabs, key=lambda t: t.sort):
        items = [
            UiRibbonItem(
                label=a.label,
                icon=a.icon_markup,
                size=a.size,
                disabled=a.disabled,
                action=a.action or a.id,
                tooltip=a.tooltip,
                callback=a.callback,
                file_callback=a.file_callback,
            )
            for a in tab.items
            if a is not None
        ]
        groups.append(UiRibbonGroup(title=tab.title, items=items))
    return groups


def find_action(registers: Optional[Sequence[Optional[RibbonRegister]]], action_id: str) -> Optional[RibbonAction]:
    """First action with ``action_id`` across all registers, or None."""
    for register in registers or []:
        if register is None:
            continue
        for tab in register.tabs or []:
            for action in tab.items:
                if action is not None and action.id == action_id:
                    return action
    return None


def sprite_icon(name: str) -> str:
    """SVG markup referencing ``name`` in the host's icon sprite."""
    return f"<svg><use href='/icons/sprite.svg#{name}'/></svg>"
