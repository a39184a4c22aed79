"""
Security list and card view models.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple
from uuid import UUID

from ..domain.models import (
    EMPTY_ID,
    AttachmentEntityKind,
    CategoryDto,
    SecurityDto,
    SecurityRequest,
)
from ..utils.logging_setup import get_logger
from .common import (
    BaseCardViewModel,
    BaseListViewModel,
    CardField,
    CardFieldKind,
    CardRecord,
    ListCell,
    ListColumn,
    ListRecord,
    LookupItem,
    RibbonAction,
    RibbonItemSize,
    RibbonRegister,
    RibbonRegisterKind,
    RibbonTab,
    sprite_icon,
)

logger = get_logger(__name__)

DEFAULT_CURRENCY = "EUR"
MAX_LOOKUP_TAKE = 200

F_NAME = "Card_Caption_Security_Name"
F_IDENTIFIER = "Card_Caption_Security_Identifier"
F_ALPHA_VANTAGE = "Card_Caption_Security_AlphaVantage"
F_CURRENCY = "Card_Caption_Security_Currency"
F_CATEGORY = "Card_Caption_Security_Category"
F_DESCRIPTION = "Card_Caption_Security_Description"
F_SYMBOL = "Card_Caption_Security_Symbol"


class SecuritiesListViewModel(BaseListViewModel[SecurityDto]):
    """
    Securities in one page. Rows without their own symbol show the symbol
    of their category.
    """

    allow_range_filtering = False

    def __init__(self, services):
        super().__init__(services)
        self.only_active = True
        self._display_symbols: Dict[UUID, Optional[UUID]] = {}

    async def load_page_async(self, reset_paging: bool) -> None:
        self.can_load_more = False
        api = self.api
        try:
            securities = await api.list_securities(only_active=self.only_active)
        except Exception as e:
            self.set_error(api.last_error_code, api.last_error or str(e))
            self.items.clear()
            self._display_symbols.clear()
            return

        needle = self.search.strip().lower()
        self.items.clear()
        self.items.extend(
            s for s in securities
            if not needle or needle in (s.name or "").lower() or needle in (s.identifier or "").lower()
        )

        category_symbols: Dict[UUID, Optional[UUID]] = {}
        try:
            for c in await api.list_security_categories():
                if c.id != EMPTY_ID:
                    category_symbols[c.id] = c.symbol_attachment_id
        except Exception as e:
            logger.debug(f"Security category symbols unavailable: {e}")

        self._display_symbols = {
            s.id: s.symbol_attachment_id or (category_symbols.get(s.category_id) if s.category_id else None)
            for s in self.items
        }

    def display_symbol(self, security: SecurityDto) -> Optional[UUID]:
        """Security symbol, or its category's symbol when it has none."""
        return self._display_symbols.get(security.id)

    async def toggle_active_async(self) -> None:
        self.only_active = not self.only_active
        await self.initialize_async()

    def get_navigate_url(self, item: SecurityDto) -> Optional[str]:
        return f"/card/securities/{item.id}"

    def build_records(self) -> None:
        active = self.localize("StatusActive")
        archived = self.localize("StatusArchived")
        columns = [
            ListColumn("symbol", "", "56px"),
            ListColumn("name", self.localize("List_Th_Name")),
            ListColumn("identifier", self.localize("List_Th_Identifier")),
            ListColumn("alphavantage", self.localize("List_Th_AlphaVantage")),
            ListColumn("category", self.localize("List_Th_Category")),
            ListColumn("status", self.localize("List_Th_Status"), "120px"),
        ]
        records = [
            ListRecord([
                ListCell.of_symbol(self.display_symbol(s)),
                ListCell.of_text(s.name),
                ListCell.of_text(s.identifier),
                ListCell.of_text(s.alpha_vantage_code or "-", muted=not s.alpha_vantage_code),
                ListCell.of_text(s.category_name or "-", muted=not s.category_name),
                ListCell.of_text(active if s.is_active else archived),
            ], s)
            for s in self.items
        ]
        self.set_records(columns, records)

    def get_ribbon_register_definition(self, L) -> Optional[List[RibbonRegister]]:
        actions = RibbonTab(L["Ribbon_Group_Actions"].value, [
            RibbonAction("New", L["Ribbon_New"].value, sprite_icon("plus"), RibbonItemSize.LARGE,
                         callback=self.action_callback("New")),
            RibbonAction("Categories", L["Ribbon_Categories"].value, sprite_icon("groups"),
                         callback=self.action_callback("OpenCategories")),
        ])
        filters = RibbonTab(L["Ribbon_Group_Filter"].value, [
            RibbonAction("ToggleActive", L["Ribbon_ToggleActive"].value, sprite_icon("check"),
                         callback=self.toggle_active_async),
        ])
        return [
            RibbonRegister(RibbonRegisterKind.ACTIONS, [actions]),
            RibbonRegister(RibbonRegisterKind.CUSTOM, [filters]),
        ]


class SecurityCardViewModel(BaseCardViewModel):
    """Security card. Name and identifier are required before saving."""

    def __init__(self, services):
        super().__init__(services)
        self.security: Optional[SecurityDto] = None
        self.categories: List[CategoryDto] = []

    @property
    def title(self) -> str:
        return self.security.name if self.security is not None and self.security.name else super().title

    @property
    def chart_endpoint(self) -> str:
        return f"/api/securities/{self.id}/aggregates" if self.id != EMPTY_ID else ""

    async def load_categories_async(self) -> None:
        try:
            self.categories = await self.api.list_security_categories()
        except Exception as e:
            logger.debug(f"Security categories unavailable: {e}")
            self.categories = []

    async def load_async(self, entity_id: UUID) -> None:
        self.id = entity_id
        self.loading = True
        self.clear_error()
        self.raise_state_changed()
        api = self.api
        try:
            if entity_id == EMPTY_ID:
                self.security = SecurityDto(id=EMPTY_ID, name=self.init_prefill or "")
                self.card_record = self._build_card_record(self.security)
                return
            dto = await api.get_security(entity_id)
            if dto is None:
                self.set_error(api.last_error_code, api.last_error or "Security not found")
                self.card_record = CardRecord([])
                return
            self.id = dto.id
            self.security = dto
            self.card_record = self._build_card_record(dto)
        except Exception as e:
            self.card_record = CardRecord([])
            self.set_error(api.last_error_code, api.last_error or str(e))
        finally:
            self.loading = False
            self.raise_state_changed()

    def _build_card_record(self, s: SecurityDto) -> CardRecord:
        record = CardRecord([
            CardField(F_NAME, CardFieldKind.TEXT, text=s.name, editable=True),
            CardField(F_IDENTIFIER, CardFieldKind.TEXT, text=s.identifier, editable=True),
            CardField(F_ALPHA_VANTAGE, CardFieldKind.TEXT, text=s.alpha_vantage_code or "", editable=True),
            CardField(F_CURRENCY, CardFieldKind.TEXT, text=s.currency_code or DEFAULT_CURRENCY, editable=True),
            CardField(F_CATEGORY, CardFieldKind.TEXT, text=s.category_name or "", editable=True,
                      lookup_type="SecurityCategory", value_id=s.category_id),
            CardField(F_DESCRIPTION, CardFieldKind.TEXT, text=s.description or "", editable=True),
            CardField(F_SYMBOL, CardFieldKind.SYMBOL, symbol_id=s.symbol_attachment_id, editable=s.id != EMPTY_ID),
        ], s)
        return self.apply_pending_values(record)

    def _current_text(self, label_key: str) -> str:
        pending = self.pending.text(label_key)
        return pending if pending is not None else self.field_text(label_key)

    @property
    def has_required_values(self) -> bool:
        return bool(self._current_text(F_NAME).strip()) and bool(self._current_text(F_IDENTIFIER).strip())

    def _build_request(self) -> SecurityRequest:
        s = self.security
        self.apply_pending_values(self.card_record or CardRecord([]))
        category = self.field(F_CATEGORY)
        currency = self.field_text(F_CURRENCY).strip()
        return SecurityRequest(
            name=self.field_text(F_NAME, s.name),
            identifier=self.field_text(F_IDENTIFIER, s.identifier),
            description=self.field_text(F_DESCRIPTION).strip() or None,
            alpha_vantage_code=self.field_text(F_ALPHA_VANTAGE).strip() or None,
            currency_code=currency or DEFAULT_CURRENCY,
            category_id=category.value_id if category is not None and category.value_id else s.category_id,
            parent=self.parent_link() if self.id == EMPTY_ID else None,
        )

    async def save_async(self) -> bool:
        if self.security is None:
            return False
        api = self.api
        self.clear_error()
        try:
            request = self._build_request()
            if self.id == EMPTY_ID:
                dto = await api.create_security(request)
            else:
                dto = await api.update_security(self.id, request)
            if dto is None:
                self.set_api_error("Save failed")
                return False
            self.id = dto.id
            self.security = dto
            self.clear_pending_changes()
            self.card_record = self._build_card_record(dto)
            self.raise_ui_action_requested("Saved", str(self.id))
            return True
        except Exception as e:
            self.set_error(api.last_error_code, api.last_error or str(e))
            return False
        finally:
            self.raise_state_changed()

    async def archive_async(self) -> bool:
        if self.id == EMPTY_ID:
            return False
        api = self.api
        self.loading = True
        self.clear_error()
        self.raise_state_changed()
        try:
            if not await api.archive_security(self.id):
                self.set_api_error("Archive failed")
                return False
            await self.load_async(self.id)
            self.raise_ui_action_requested("Archived")
            return True
        except Exception as e:
            self.set_error(api.last_error_code, api.last_error or str(e))
            return False
        finally:
            self.loading = False
            self.raise_state_changed()

    async def delete_async(self) -> bool:
        if self.id == EMPTY_ID:
            return False
        api = self.api
        self.loading = True
        self.clear_error()
        self.raise_state_changed()
        try:
            if not await api.delete_security(self.id):
                self.set_api_error("Delete failed")
                return False
            self.raise_ui_action_requested("Deleted")
            return True
        except Exception as e:
            self.set_error(api.last_error_code, api.last_error or str(e))
            return False
        finally:
            self.loading = False
            self.raise_state_changed()

    async def query_lookup_async(self, field: CardField, q: Optional[str] = None,
                                 skip: int = 0, take: int = 20) -> List[LookupItem]:
        if (field.lookup_type or "").lower() == "securitycategory":
            if not self.categories:
                await self.load_categories_async()
            term = (q or "").strip().lower()
            matches = sorted(
                (c for c in self.categories if not term or term in (c.name or "").lower()),
                key=lambda c: c.name,
            )
            start = max(0, skip)
            return [LookupItem(c.id, c.name) for c in matches[start:start + max(0, min(MAX_LOOKUP_TAKE, take))]]
        return await super().query_lookup_async(field, q, skip, take)

    def is_symbol_upload_allowed(self) -> bool:
        return self.id != EMPTY_ID

    def get_symbol_parent(self) -> Tuple[AttachmentEntityKind, UUID]:
        return AttachmentEntityKind.SECURITY, self.id

    async def assign_new_symbol_async(self, attachment_id: Optional[UUID]) -> None:
        if attachment_id is None:
            return
        await self.api.set_security_symbol(self.id, attachment_id)
        await self.load_async(self.id)

    def get_ribbon_register_definition(self, L) -> Optional[List[RibbonRegister]]:
        existing = self.id != EMPTY_ID
        active = self.security is not None and self.security.is_active
        can_save = self.has_pending_changes and self.has_required_values

        async def save() -> None:
            await self.save_async()

        async def archive() -> None:
            await self.archive_async()

        async def delete() -> None:
            await self.delete_async()

        async def open_attachments() -> None:
            self.request_open_attachments(AttachmentEntityKind.SECURITY, self.id)

        tabs = [
            RibbonTab(L["Ribbon_Group_Navigation"].value, [
                RibbonAction("Back", L["Ribbon_Back"].value, sprite_icon("back"), RibbonItemSize.LARGE,
                             callback=self.action_callback("Back", self.back_url)),
            ]),
            RibbonTab(L["Ribbon_Group_Manage"].value, [
                RibbonAction("Save", L["Ribbon_Save"].value, sprite_icon("save"), RibbonItemSize.LARGE,
                             disabled=not can_save, callback=save),
                RibbonAction("Archive", L["Ribbon_Archive"].value, sprite_icon("archive"),
                             disabled=not (existing and active), callback=archive),
                # only archived securities can be deleted
                RibbonAction("Delete", L["Ribbon_Delete"].value, sprite_icon("delete"),
                             disabled=not (existing and self.security is not None and not active), callback=delete),
            ]),
            RibbonTab(L["Ribbon_Group_Linked"].value, [
                RibbonAction("Postings", L["Ribbon_Postings"].value, sprite_icon("postings"), disabled=not existing,
                             callback=self.action_callback("OpenPostings", f"/list/postings/security/{self.id}")),
                RibbonAction("Prices", L["Ribbon_Prices"].value, sprite_icon("postings"), disabled=not existing,
                             callback=self.action_callback("OpenPrices", f"/list/securities/prices/{self.id}")),
                RibbonAction("Attachments", L["Ribbon_Attachments"].value, sprite_icon("attachment"),
                             disabled=not existing, callback=open_attachments),
            ]),
        ]
        return [RibbonRegister(RibbonRegisterKind.ACTIONS, tabs)]
