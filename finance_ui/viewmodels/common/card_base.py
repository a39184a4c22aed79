"""
BaseCardViewModel - single-entity edit card.

A card loads one entity into a ``CardRecord``, records edits as pending
values keyed by field label, and applies them over freshly built records
until ``save_async`` persists them. Cards whose entity has a symbol
(icon/logo) also accept a symbol upload.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, BinaryIO, Optional, Tuple
from uuid import UUID

from ...domain.models import EMPTY_ID, AttachmentEntityKind, AttachmentRole, ParentLinkRequest
from ...utils.logging_setup import get_logger
from ...utils.perf_logger import timed
from .base import BaseViewModel
from .lookups import parse_guid
from .pending import PendingFieldValues, apply_pending
from .rendering import CardField, CardRecord, LookupItem

logger = get_logger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class BaseCardViewModel(BaseViewModel, ABC):
    """
    Base class for entity cards.

    Subclasses implement ``load_async`` and the symbol hooks; most override
    ``save_async``/``delete_async`` and report backend failures through
    ``set_error``.
    """

    def __init__(self, services):
        super().__init__(services)
        self.id: UUID = EMPTY_ID
        self.card_record: Optional[CardRecord] = None
        self.pending = PendingFieldValues()
        self.init_prefill: Optional[str] = None
        self.back_url: Optional[str] = None

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------

    @timed()
    async def initialize_async(self, entity_id: UUID) -> None:
        if not self.check_authentication():
            return
        await self.load_async(entity_id)

    @abstractmethod
    async def load_async(self, entity_id: UUID) -> None:
        """
        Fetch the entity (or prepare a blank one for EMPTY_ID) and build ``card_record``.

        Args:
            entity_id: Id from the card route; EMPTY_ID starts the create flow

        Failures are reported through ``set_error``, not raised.
        """

    async def reload_async(self) -> None:
        await self.initialize_async(self.id)

    def set_init_value(self, prefill: Optional[str]) -> None:
        self.init_prefill = prefill

    def set_back_navigation(self, back_url: Optional[str]) -> None:
        self.back_url = back_url

    @property
    def is_new(self) -> bool:
        return self.id == EMPTY_ID

    # ------------------------------------------------------------------
    # pending edits
    # ------------------------------------------------------------------

    @property
    def has_pending_changes(self) -> bool:
        return len(self.pending) > 0

    def clear_pending_changes(self) -> None:
        self.pending.clear()

    def validate_field_value(self, field: CardField, new_value: Any) -> None:
        """Record ``new_value`` as pending for ``field``. No business validation happens here."""
        self.pending.set(field, new_value)
        self.raise_state_changed()

    def validate_lookup_field(self, field: CardField, item: Optional[LookupItem]) -> None:
        if item is None:
            self.pending.remove(field.label_key)
        else:
            self.pending.set(field, item)
        self.raise_state_changed()

    def apply_pending_values(self, record: CardRecord) -> CardRecord:
        for field in record.fields:
            value = self.pending.get(field.label_key)
            if value is not None:
                apply_pending(field, value)
        return record

    def field(self, label_key: str) -> Optional[CardField]:
        return self.card_record.field(label_key) if self.card_record is not None else None

    def field_text(self, label_key: str, default: str = "") -> str:
        f = self.field(label_key)
        return f.text if f is not None and f.text is not None else default

    # ------------------------------------------------------------------
    # save / delete
    # ------------------------------------------------------------------

    async def save_async(self) -> bool:
        return True

    async def delete_async(self) -> bool:
        return False

    def set_api_error(self, fallback: str) -> None:
        """Copy the API client's last error into this card's error state."""
        api = self.api
        self.set_error(api.last_error_code, api.last_error or fallback)

    # ------------------------------------------------------------------
    # linked creation
    # ------------------------------------------------------------------

    def parent_link(self) -> Optional[ParentLinkRequest]:
        """
        Parent context of a linked-creation flow, read from the query string
        (``parentKind``, ``parentId``, ``parentField``).
        """
        navigation = self.navigation
        if navigation is None:
            return None
        kind = navigation.query_param("parentKind")
        parent_id = parse_guid(navigation.query_param("parentId")).unwrap_or(None)
        if not kind or parent_id is None:
            return None
        return ParentLinkRequest(
            parent_kind=kind,
            parent_id=parent_id,
            parent_field=navigation.query_param("parentField") or None,
        )

    # ------------------------------------------------------------------
    # symbol upload
    # ------------------------------------------------------------------

    @abstractmethod
    def is_symbol_upload_allowed(self) -> bool:
        """
        Whether ``validate_symbol_async`` may upload right now.

        Returns:
            False for unsaved entities and for cards without a symbol
        """

    @abstractmethod
    def get_symbol_parent(self) -> Tuple[AttachmentEntityKind, UUID]:
        """
        Attachment owner for an uploaded symbol.

        Returns:
            Tuple of (entity kind, entity id) passed to the attachment upload
        """

    @abstractmethod
    async def assign_new_symbol_async(self, attachment_id: Optional[UUID]) -> None:
        """
        Store the uploaded symbol on the entity and refresh the card.

        Args:
            attachment_id: Id of the uploaded attachment, None to clear the symbol
        """

    async def validate_symbol_async(self, stream: BinaryIO, file_name: str,
                                    content_type: Optional[str] = None) -> Optional[UUID]:
        """
        Upload ``stream`` as the entity's symbol.

        Returns the new attachment id, or None when the upload is not
        allowed or anything fails along the way.
        """
        try:
            if not self.is_symbol_upload_allowed():
                return None
            kind, parent_id = self.get_symbol_parent()
            attachment = await self.api.upload_attachment(
                kind, parent_id, stream, file_name, content_type or DEFAULT_CONTENT_TYPE, AttachmentRole.SYMBOL,
            )
            await self.assign_new_symbol_async(attachment.id)
            logger.info(f"{type(self).__name__}: symbol {attachment.id} assigned to {kind.name} {parent_id}")
            return attachment.id
        except Exception as e:
            logger.warning(f"{type(self).__name__}: symbol upload '{file_name}' failed: {e}")
            return None
