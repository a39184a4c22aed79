"""
Contact list and card view models.

The list pages through the server with a server-side name filter. The
card creates, updates and deletes contacts and resolves the contact
category and contact type pickers.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple
from uuid import UUID

from ..domain.events import UiOverlaySpec
from ..domain.models import (
    EMPTY_ID,
    AttachmentEntityKind,
    BooleanSelection,
    ContactCreateRequest,
    ContactDto,
    ContactType,
    ContactUpdateRequest,
    display_name,
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

PAGE_SIZE = 50

F_NAME = "Card_Caption_Contact_Name"
F_TYPE = "Card_Caption_Contact_Type"
F_CATEGORY = "Card_Caption_Contact_Category"
F_DESCRIPTION = "Card_Caption_Contact_Description"
F_SYMBOL = "Card_Caption_Contact_Symbol"
F_PAYMENT_INTERMEDIARY = "Card_Caption_Contact_IsPaymentIntermediary"

CONTACT_TYPE_LOOKUP = "Enum:ContactType"
BOOLEAN_LOOKUP = "Enum:BooleanSelection"


class ContactListViewModel(BaseListViewModel[ContactDto]):
    allow_range_filtering = False

    def __init__(self, services):
        super().__init__(services)
        self._skip = 0
        self._category_names: Dict[UUID, str] = {}

    async def load_page_async(self, reset_paging: bool) -> None:
        if reset_paging:
            self._skip = 0
            self._category_names = await self._load_category_names_async()
        api = self.api
        try:
            page = await api.list_contacts(
                skip=self._skip,
                take=PAGE_SIZE,
                type=None,
                all=False,
                name_filter=self.search.strip() or None,
            )
            if reset_paging:
                self.items.clear()
            self.items.extend(page)
            self._skip += PAGE_SIZE
            self.can_load_more = page is not None and len(page) >= PAGE_SIZE
        except Exception as e:
            self.set_error(api.last_error_code, api.last_error or str(e))
            self.can_load_more = False
        finally:
            self.raise_state_changed()

    async def _load_category_names_async(self) -> Dict[UUID, str]:
        try:
            return {c.id: c.name for c in await self.api.list_contact_categories()}
        except Exception as e:
            logger.debug(f"Contact categories unavailable: {e}")
            return {}

    def get_navigate_url(self, item: ContactDto) -> Optional[str]:
        return f"/card/contacts/{item.id}"

    def build_records(self) -> None:
        columns = [
            ListColumn("symbol", "", "56px"),
            ListColumn("name", self.localize("List_Th_Contact_Name"), "40%"),
            ListColumn("group", self.localize("List_Th_Contact_Group"), "30%"),
            ListColumn("type", self.localize("List_Th_Contact_Type"), "20%"),
        ]
        records = [
            ListRecord([
                ListCell.of_symbol(c.symbol_attachment_id),
                ListCell.of_text(c.name),
                ListCell.of_text(self._category_names.get(c.category_id, "") if c.category_id else ""),
                ListCell.of_text(display_name(c.type)),
            ], c)
            for c in self.items
        ]
        self.set_records(columns, records)

    def get_ribbon_register_definition(self, L) -> Optional[List[RibbonRegister]]:
        tab = RibbonTab(L["Ribbon_Group_Navigate"].value, [
            RibbonAction("New", L["Ribbon_New"].value, sprite_icon("plus"), RibbonItemSize.LARGE,
                         callback=self.action_callback("New")),
            RibbonAction("Reload", L["Ribbon_Reload"].value, sprite_icon("refresh"),
                         callback=self.action_callback("Reload")),
            RibbonAction("ClearFilter", L["Ribbon_ClearSearch"].value, sprite_icon("clear"),
                         disabled=not self.search.strip(), callback=self.action_callback("ClearSearch")),
        ])
        return [RibbonRegister(RibbonRegisterKind.ACTIONS, [tab])]


class ContactCardViewModel(BaseCardViewModel):
    def __init__(self, services):
        super().__init__(services)
        self.contact: Optional[ContactDto] = None

    @property
    def title(self) -> str:
        return self.contact.name if self.contact is not None else ""

    async def load_async(self, entity_id: UUID) -> None:
        self.id = entity_id
        self.loading = True
        self.clear_error()
        self.raise_state_changed()
        api = self.api
        try:
            if entity_id == EMPTY_ID:
                self.contact = ContactDto(id=EMPTY_ID, name=self.init_prefill or "", type=ContactType.ORGANIZATION)
                self.card_record = await self._build_card_record_async(self.contact)
                return

            self.contact = await api.get_contact(entity_id)
            if self.contact is None:
                self.set_error(api.last_error_code, api.last_error or "Contact not found")
                self.card_record = CardRecord([])
                return
            self.card_record = await self._build_card_record_async(self.contact)
        except Exception as e:
            self.card_record = CardRecord([])
            self.set_error(api.last_error_code, api.last_error or str(e))
        finally:
            self.loading = False
            self.raise_state_changed()

    async def _build_card_record_async(self, c: ContactDto) -> CardRecord:
        category_name = ""
        if c.category_id and c.category_id != EMPTY_ID:
            try:
                categories = await self.api.list_contact_categories()
                category_name = next((x.name for x in categories if x.id == c.category_id), "")
            except Exception as e:
                logger.debug(f"Contact category {c.category_id} not resolved: {e}")

        record = CardRecord([
            CardField(F_NAME, CardFieldKind.TEXT, text=c.name, editable=True),
            CardField(F_TYPE, CardFieldKind.TEXT, text=display_name(c.type), editable=True,
                      lookup_type=CONTACT_TYPE_LOOKUP),
            CardField(F_CATEGORY, CardFieldKind.TEXT, text=category_name, editable=True,
                      lookup_type="ContactCategory", value_id=c.category_id),
            CardField(F_DESCRIPTION, CardFieldKind.TEXT, text=c.description or "", editable=True),
            CardField(F_SYMBOL, CardFieldKind.SYMBOL, symbol_id=c.symbol_attachment_id,
                      editable=c.id != EMPTY_ID),
            CardField(F_PAYMENT_INTERMEDIARY, CardFieldKind.TEXT,
                      text=display_name(BooleanSelection.of(c.is_payment_intermediary)), editable=True,
                      lookup_type=BOOLEAN_LOOKUP),
        ], c)
        return self.apply_pending_values(self.apply_enum_translations(record))

    async def query_lookup_async(self, field: CardField, q: Optional[str] = None,
                                 skip: int = 0, take: int = 20) -> List[LookupItem]:
        if (field.lookup_type or "").lower() == "contactcategory":
            try:
                categories = await self.api.list_contact_categories()
            except Exception as e:
                logger.warning(f"Contact category lookup failed: {e}")
                return []
            term = (q or "").strip().lower()
            return [LookupItem(c.id, c.name) for c in categories if not term or term in (c.name or "").lower()]
        return await super().query_lookup_async(field, q, skip, take)

    def validate_lookup_field(self, field: CardField, item: Optional[LookupItem]) -> None:
        if (field.lookup_type or "").lower() == CONTACT_TYPE_LOOKUP.lower():
            field.text = item.name if item is not None else field.text
            self.validate_field_value(field, field.text)
            return
        super().validate_lookup_field(field, item)

    def _read_card(self) -> Tuple[str, ContactType, Optional[UUID], Optional[str], bool]:
        c = self.contact
        record = self.apply_pending_values(self.card_record or CardRecord([]))
        name = self.field_text(F_NAME, c.name)
        contact_type = self.resolve_enum_member(CONTACT_TYPE_LOOKUP, self.field_text(F_TYPE))
        if contact_type is None:
            contact_type = c.type
        category = record.field(F_CATEGORY)
        category_id = category.value_id if category is not None and category.value_id else c.category_id
        description = self.field_text(F_DESCRIPTION, c.description or "") or None
        payment = self.resolve_enum_member(BOOLEAN_LOOKUP, self.field_text(F_PAYMENT_INTERMEDIARY))
        is_payment = payment is BooleanSelection.TRUE if payment is not None else c.is_payment_intermediary
        return name, contact_type, category_id, description, is_payment

    async def save_async(self) -> bool:
        if self.contact is None:
            return False
        api = self.api
        name, contact_type, category_id, description, is_payment = self._read_card()
        self.loading = True
        self.clear_error()
        self.raise_state_changed()
        try:
            if self.id == EMPTY_ID:
                saved = await api.create_contact(ContactCreateRequest(
                    name=name, type=contact_type, category_id=category_id, description=description,
                    is_payment_intermediary=is_payment, parent=self.parent_link(),
                ))
            else:
                saved = await api.update_contact(self.id, ContactUpdateRequest(
                    name=name, type=contact_type, category_id=category_id, description=description,
                    is_payment_intermediary=is_payment,
                ))
            if saved is None:
                self.set_api_error("Save failed")
                return False
            self.id = saved.id
            self.contact = saved
            self.clear_pending_changes()
            self.card_record = await self._build_card_record_async(saved)
            self.raise_ui_action_requested("Saved", str(self.id))
            return True
        except Exception as e:
            self.set_error(api.last_error_code, api.last_error or str(e))
            return False
        finally:
            self.loading = False
            self.raise_state_changed()

    async def delete_async(self) -> bool:
        if self.contact is None:
            return False
        api = self.api
        self.loading = True
        self.clear_error()
        self.raise_state_changed()
        try:
            if not await api.delete_contact(self.id):
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

    def request_open_merge(self) -> None:
        spec = UiOverlaySpec("ContactMergePanel", {
            "Visible": True,
            "SourceId": self.id,
            "SourceType": display_name(self.contact.type) if self.contact is not None else "",
            "OverlayTitle": self.localize("Merge_Title"),
        })
        self.raise_ui_action_requested("OpenMerge", spec)

    def is_symbol_upload_allowed(self) -> bool:
        return self.id != EMPTY_ID

    def get_symbol_parent(self) -> Tuple[AttachmentEntityKind, UUID]:
        return AttachmentEntityKind.CONTACT, self.id

    async def assign_new_symbol_async(self, attachment_id: Optional[UUID]) -> None:
        if attachment_id is None:
            return
        await self.api.set_contact_symbol(self.id, attachment_id)
        await self.reload_async()

    def get_ribbon_register_definition(self, L) -> Optional[List[RibbonRegister]]:
        missing = self.contact is None or self.id == EMPTY_ID

        async def save() -> None:
            await self.save_async()

        async def open_merge() -> None:
            self.request_open_merge()

        async def open_attachments() -> None:
            self.request_open_attachments(AttachmentEntityKind.CONTACT, self.id)

        nav = RibbonTab(L["Ribbon_Group_Navigation"].value, [
            RibbonAction("Back", L["Ribbon_Back"].value, sprite_icon("back"), RibbonItemSize.LARGE,
                         callback=self.action_callback("Back", self.back_url)),
        ])
        manage = RibbonTab(L["Ribbon_Group_Manage"].value, [
            RibbonAction("Save", L["Ribbon_Save"].value, sprite_icon("save"), RibbonItemSize.LARGE,
                         disabled=not self.has_pending_changes, callback=save),
            RibbonAction("Delete", L["Ribbon_Delete"].value, sprite_icon("delete"),
                         disabled=missing, callback=self.action_callback("Delete")),
        ])
        linked = RibbonTab(L["Ribbon_Group_Linked"].value, [
            RibbonAction("OpenPostings", L["Ribbon_Postings"].value, sprite_icon("postings"), disabled=missing,
                         callback=self.action_callback("OpenPostings", f"/list/postings/contact/{self.id}")),
            RibbonAction("OpenMerge", L["Ribbon_Merge"].value, sprite_icon("merge"), disabled=missing,
                         callback=open_merge),
            RibbonAction("Attachments", L["Ribbon_Attachments"].value, sprite_icon("attachment"),
                         disabled=missing, callback=open_attachments),
        ])
        return [RibbonRegister(RibbonRegisterKind.ACTIONS, [nav, manage, linked])]
