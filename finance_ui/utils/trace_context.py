"""
Interaction context for correlating logs produced by one UI interaction.

An interaction is anything the host UI triggers on a view model: a page
initialization, a "load more", a ribbon action callback. Every log line
written while the interaction is active carries its 6-char hex id.

Usage:
    with new_interaction():
        await vm.initialize_async()

    from finance_ui.utils.trace_context import get_interaction_id
    logger.info(f"[{get_interaction_id()}] loading page")
"""

from __future__ import annotations

import secrets
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Generator, Optional

_interaction_id: ContextVar[Optional[str]] = ContextVar("interaction_id", default=None)


def generate_interaction_id() -> str:
    """Return a fresh 6-character hex id."""
    return secrets.token_hex(3)


def get_interaction_id() -> str:
    """
    Get the current interaction id.

    Returns:
        Current id, or "------" outside of an interaction.
    """
    interaction_id = _interaction_id.get()
    return interaction_id if interaction_id else "------"


@contextmanager
def new_interaction(interaction_id: Optional[str] = None) -> Generator[str, None, None]:
    """
    Open an interaction scope.

    Nested scopes shadow the outer id and restore it on exit. Safe across
    asyncio tasks since the id lives in a ContextVar.

    Args:
        interaction_id: Explicit id to use; generated when omitted.

    Yields:
        The active interaction id.
    """
    token = _interaction_id.set(interaction_id or generate_interaction_id())
    try:
        yield _interaction_id.get() or ""
    finally:
        _interaction_id.reset(token)
