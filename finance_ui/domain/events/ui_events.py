"""
View model → view events.

Every view model exposes three channels:
- state_changed: payload-less "re-render me" signal
- authentication_required: the user must sign in (optional reason string)
- ui_action_requested: ask the host UI to do something the view model
  cannot do itself (navigate back, open an overlay, render a panel)

Channels are synchronous: ``emit`` calls every handler in subscription
order before returning. ``subscribe`` returns a ``Subscription`` handle so
parents can release the bubbling handlers of a child on disposal.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar, Union

from ...utils.logging_setup import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class Subscription:
    """Handle returned by EventChannel.subscribe(); call ``close()`` to unsubscribe."""

    __slots__ = ("_channel", "_handler")

    def __init__(self, channel: "EventChannel[Any]", handler: Callable[[Any], None]):
        self._channel: Optional[EventChannel[Any]] = channel
        self._handler = handler

    @property
    def active(self) -> bool:
        return self._channel is not None

    def close(self) -> None:
        if self._channel is not None:
            self._channel.unsubscribe(self._handler)
            self._channel = None


class EventChannel(Generic[T]):
    """
    Typed observer list.

    Handler errors are logged and do not stop delivery to the remaining
    handlers, so one broken view cannot silence its siblings.
    """

    def __init__(self, name: str):
        self.name = name
        self._handlers: List[Callable[[T], None]] = []

    def subscribe(self, handler: Callable[[T], None]) -> Subscription:
        self._handlers.append(handler)
        return Subscription(self, handler)

    def unsubscribe(self, handler: Callable[[T], None]) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    @property
    def handler_count(self) -> int:
        return len(self._handlers)

    def emit(self, payload: T) -> None:
        for handler in list(self._handlers):
            try:
                handler(payload)
            except Exception:
                logger.exception(f"Handler for '{self.name}' failed")

    def clear(self) -> None:
        self._handlers.clear()


class EmbeddedPanelPosition(Enum):
    AFTER_RIBBON = "AfterRibbon"
    AFTER_CARD = "AfterCard"


@dataclass
class UiOverlaySpec:
    """
    Overlay/modal the host should render.

    component_type is a component name the host resolves; parameters are
    passed to the component verbatim.
    """

    component_type: str
    parameters: Dict[str, Any] = field(default_factory=dict)
    modal: bool = True


@dataclass
class EmbeddedPanelSpec:
    """Inline panel the host should render at ``position``."""

    component_type: str
    parameters: Dict[str, Any] = field(default_factory=dict)
    position: EmbeddedPanelPosition = EmbeddedPanelPosition.AFTER_CARD
    visible: bool = True


@dataclass(frozen=True)
class UiActionEvent:
    """
    A named action for the host UI.

    payload is a plain string (an id, a URL) or a structured object
    (UiOverlaySpec, EmbeddedPanelSpec).
    """

    action: str
    payload: Union[str, UiOverlaySpec, EmbeddedPanelSpec, None] = None

    @property
    def payload_text(self) -> Optional[str]:
        return self.payload if isinstance(self.payload, str) else None

    @property
    def payload_object(self) -> Optional[Union[UiOverlaySpec, EmbeddedPanelSpec]]:
        return self.payload if not isinstance(self.payload, str) else None
