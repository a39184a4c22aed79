"""View model → view event channels and payloads."""

from .ui_events import (
    EmbeddedPanelPosition,
    EmbeddedPanelSpec,
    EventChannel,
    Subscription,
    UiActionEvent,
    UiOverlaySpec,
)

__all__ = [
    "EmbeddedPanelPosition",
    "EmbeddedPanelSpec",
    "EventChannel",
    "Subscription",
    "UiActionEvent",
    "UiOverlaySpec",
]
