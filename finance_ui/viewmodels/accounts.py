"""
Bank account list and card view models.
"""

from __future__ import annotations

from typing import List, Optional, Tuple
from uuid import UUID

from ..domain.models import (
    EMPTY_ID,
    AccountDto,
    AccountUpdateRequest,
    AttachmentEntityKind,
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
    ListColumnAlign,
    ListRecord,
    RibbonAction,
    RibbonItemSize,
    RibbonRegister,
    RibbonRegisterKind,
    RibbonTab,
    sprite_icon,
)

logger = get_logger(__name__)

PAGE_SIZE = 50

F_NAME = "Card_Caption_Account_Name"
F_IBAN = "Card_Caption_Account_Iban"
F_TYPE = "Card_Caption_Account_Type"
F_BALANCE = "Card_Caption_Account_Balance"
F_SYMBOL = "Card_Caption_Account_Symbol"
F_CONTACT = "Card_Caption_Account_Contact"


class BankAccountListViewModel(BaseListViewModel[AccountDto]):
    """Accounts, paged by the server and filtered by name/IBAN on the client."""

    allow_range_filtering = False

    def __init__(self, services):
        super().__init__(services)
        self._skip = 0

    async def load_page_async(self, reset_paging: bool) -> None:
        if reset_paging:
            self._skip = 0
        api = self.api
        try:
            page = await api.list_accounts(skip=self._skip, take=PAGE_SIZE)
        except Exception as e:
            self.set_error(api.last_error_code, api.last_error or str(e))
            self.can_load_more = False
            return

        needle = self.search.strip().lower()
        self.items.extend(
            a for a in page
            if not needle or needle in (a.name or "").lower() or needle in (a.iban or "").lower()
        )
        self._skip += len(page)
        self.can_load_more = len(page) >= PAGE_SIZE

    def get_navigate_url(self, item: AccountDto) -> Optional[str]:
        return f"/card/accounts/{item.id}"

    def build_records(self) -> None:
        columns = [
            ListColumn("symbol", "", "48px"),
            ListColumn("name", self.localize("List_Th_Account_Name"), "30%"),
            ListColumn("type", self.localize("List_Th_Account_Type"), "14%"),
            ListColumn("iban", self.localize("List_Th_Account_Iban"), "30%"),
            ListColumn("balance", self.localize("List_Th_Account_Balance"), "14%", ListColumnAlign.RIGHT),
        ]
        records = [
            ListRecord([
                ListCell.of_symbol(a.symbol_attachment_id),
                ListCell.of_text(a.name),
                ListCell.of_text(self.localize(f"EnumType_AccountType_{display_name(a.type)}")),
                ListCell.of_text(a.iban or "-", muted=not a.iban),
                ListCell.of_currency(a.current_balance),
            ], a)
            for a in self.items
        ]
        self.set_records(columns, records)

    def get_ribbon_register_definition(self, L) -> Optional[List[RibbonRegister]]:
        tab = RibbonTab(L["Ribbon_Group_Navigate"].value, [
            RibbonAction("Back", L["Ribbon_Back"].value, sprite_icon("back"), RibbonItemSize.LARGE,
                         callback=self.action_callback("Back")),
            RibbonAction("New", L["Ribbon_New"].value, sprite_icon("plus"), RibbonItemSize.LARGE,
                         callback=self.action_callback("New")),
            RibbonAction("ClearSearch", L["Ribbon_ClearSearch"].value, sprite_icon("clear"),
                         disabled=not self.search.strip(), callback=self.action_callback("ClearSearch")),
        ])
        return [RibbonRegister(RibbonRegisterKind.ACTIONS, [tab])]


class BankAccountCardViewModel(BaseCardViewModel):
    """Bank account card: name, IBAN, bank contact and symbol are editable."""

    def __init__(self, services):
        super().__init__(services)
        self.account: Optional[AccountDto] = None

    @property
    def title(self) -> str:
        return self.account.name if self.account is not None else ""

    async def load_async(self, entity_id: UUID) -> None:
        self.id = entity_id
        self.loading = True
        self.clear_error()
        self.raise_state_changed()
        api = self.api
        try:
            self.account = await api.get_account(entity_id)
            if self.account is None:
                self.set_error(api.last_error_code, api.last_error or "Account not found")
                self.card_record = CardRecord([])
                return
            self.card_record = await self._build_card_record_async(self.account)
        except Exception as e:
            self.card_record = CardRecord([])
            self.set_error(api.last_error_code, api.last_error or str(e))
        finally:
            self.loading = False
            self.raise_state_changed()

    async def _build_card_record_async(self, a: AccountDto) -> CardRecord:
        bank_contact_name = ""
        if a.bank_contact_id != EMPTY_ID:
            try:
                contact = await self.api.get_contact(a.bank_contact_id)
                if contact is not None:
                    bank_contact_name = contact.name
            except Exception as e:
                logger.debug(f"Bank contact {a.bank_contact_id} not resolved: {e}")

        record = CardRecord([
            CardField(F_NAME, CardFieldKind.TEXT, text=a.name, editable=True),
            CardField(F_IBAN, CardFieldKind.TEXT, text=a.iban or "", editable=True),
            CardField(F_TYPE, CardFieldKind.TEXT, text=f"$Card_Value_AccountType_{display_name(a.type)}"),
            CardField(F_BALANCE, CardFieldKind.CURRENCY, amount=a.current_balance),
            CardField(F_SYMBOL, CardFieldKind.SYMBOL, symbol_id=a.symbol_attachment_id, editable=True),
            CardField(F_CONTACT, CardFieldKind.TEXT, text=bank_contact_name or "-", editable=True,
                      lookup_type="Contact", lookup_field="Name", lookup_filter="Type=Bank",
                      value_id=a.bank_contact_id),
        ], a)
        return self.apply_pending_values(record)

    def _build_update_request(self) -> AccountUpdateRequest:
        a = self.account
        record = self.apply_pending_values(self.card_record or CardRecord([]))
        contact = record.field(F_CONTACT)
        symbol = record.field(F_SYMBOL)
        return AccountUpdateRequest(
            name=self.field_text(F_NAME, a.name),
            type=a.type,
            iban=self.field_text(F_IBAN, a.iban or "") or None,
            bank_contact_id=contact.value_id if contact is not None and contact.value_id else a.bank_contact_id,
            symbol_attachment_id=symbol.symbol_id if symbol is not None else a.symbol_attachment_id,
            savings_plan_expectation=a.savings_plan_expectation,
            security_processing_enabled=False,
        )

    async def save_async(self) -> bool:
        if self.account is None:
            return False
        if not self.has_pending_changes:
            return True

        previous_account = self.account
        previous_record = self.card_record
        self.loading = True
        self.clear_error()
        self.raise_state_changed()
        api = self.api
        try:
            updated = await api.update_account(self.id, self._build_update_request())
            if updated is None:
                self.set_api_error("Update failed")
                self.account = previous_account
                self.card_record = previous_record or CardRecord([])
                self.clear_pending_changes()
                return False
            self.account = updated
            self.clear_pending_changes()
            self.card_record = await self._build_card_record_async(updated)
            return True
        except Exception as e:
            self.set_error(api.last_error_code, api.last_error or str(e))
            self.account = previous_account
            self.card_record = previous_record or CardRecord([])
            return False
        finally:
            self.loading = False
            self.raise_state_changed()

    async def reset_async(self) -> None:
        """Discard pending edits and rebuild from the loaded account."""
        self.clear_pending_changes()
        if self.account is not None:
            self.card_record = await self._build_card_record_async(self.account)
        self.raise_state_changed()

    def is_symbol_upload_allowed(self) -> bool:
        return self.id != EMPTY_ID

    def get_symbol_parent(self) -> Tuple[AttachmentEntityKind, UUID]:
        return AttachmentEntityKind.ACCOUNT, self.id

    async def assign_new_symbol_async(self, attachment_id: Optional[UUID]) -> None:
        if attachment_id is None:
            return
        await self.api.set_account_symbol(self.id, attachment_id)
        await self.reload_async()

    def get_ribbon_register_definition(self, L) -> Optional[List[RibbonRegister]]:
        no_changes = not self.has_pending_changes
        missing = self.account is None

        async def save() -> None:
            await self.save_async()

        async def open_attachments() -> None:
            self.request_open_attachments(AttachmentEntityKind.ACCOUNT, self.id)

        tabs = [
            RibbonTab(L["Ribbon_Group_Navigation"].value, [
                RibbonAction("Back", L["Ribbon_Back"].value, sprite_icon("back"), RibbonItemSize.LARGE,
                             callback=self.action_callback("Back", self.back_url)),
            ]),
            RibbonTab(L["Ribbon_Group_Manage"].value, [
                RibbonAction("Save", L["Ribbon_Save"].value, sprite_icon("save"), RibbonItemSize.LARGE,
                             disabled=no_changes, callback=save),
                RibbonAction("Reset", L["Ribbon_Reset"].value, sprite_icon("undo"),
                             disabled=no_changes, callback=self.reset_async),
            ]),
            RibbonTab(L["Ribbon_Group_Linked"].value, [
                RibbonAction("OpenPostings", L["Ribbon_OpenPostings"].value, sprite_icon("postings"),
                             disabled=missing,
                             callback=self.action_callback("OpenPostings", f"/list/postings/account/{self.id}")),
                RibbonAction("Attachments", L["Ribbon_Attachments"].value, sprite_icon("attachment"),
                             disabled=missing, callback=open_attachments),
            ]),
        ]
        return [RibbonRegister(RibbonRegisterKind.ACTIONS, tabs)]
