"""
Posting lists for one account, contact, savings plan or security.

Postings are read-only here: rows navigate to the posting card and the
ribbon offers CSV/XLSX export links carrying the current filters.
"""

from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from typing import List, Optional
from urllib.parse import quote
from uuid import UUID

from ..domain.interfaces import FinanceApi
from ..domain.models import EMPTY_ID, PostingDto, PostingKind, display_name
from ..utils.logging_setup import get_logger
from .common import (
    BaseListViewModel,
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

POSTINGS_PAGE_SIZE = 50


def posting_kind_text(p: PostingDto) -> str:
    """``Security-Buy`` style text for security postings with a sub type, else the kind name."""
    if p.kind is PostingKind.SECURITY and p.security_sub_type is not None:
        return f"Security-{display_name(p.security_sub_type)}"
    return display_name(p.kind)


class BasePostingsListViewModel(BaseListViewModel[PostingDto]):
    """
    Paged posting list.

    Subclasses bind the list to one parent entity and implement
    ``query_page_async``; a None page means the query failed and ends paging.
    """

    export_kind: str = ""
    page_size = POSTINGS_PAGE_SIZE

    def __init__(self, services, entity_id: UUID = EMPTY_ID):
        super().__init__(services)
        self.entity_id = entity_id
        self._skip = 0

    def set_parent(self, entity_id: UUID) -> None:
        self.entity_id = entity_id

    def reset_paging(self) -> None:
        self._skip = 0
        self.can_load_more = True

    async def load_page_async(self, reset_paging: bool) -> None:
        if reset_paging:
            self.reset_paging()
            self.items.clear()

        page = await self.query_page_async(
            self.api, self._skip, self.page_size, self.search, self.range_from, self.range_to,
        )
        if page:
            self.items.extend(page)
            self._skip += len(page)
            self.can_load_more = len(page) >= self.page_size
        else:
            self.can_load_more = False

    @abstractmethod
    async def query_page_async(self, api: FinanceApi, skip: int, take: int, search: str,
                               date_from: Optional[datetime], date_to: Optional[datetime]) -> Optional[List[PostingDto]]:
        ...

    def get_navigate_url(self, item: PostingDto) -> Optional[str]:
        return f"/card/postings/{item.id}"

    def build_records(self) -> None:
        columns = [
            ListColumn("date", self.localize("List_Th_Postings_Date"), "8rem"),
            ListColumn("valuta", self.localize("List_Th_Postings_Valuta"), "8rem"),
            ListColumn("amount", self.localize("List_Th_Postings_Amount"), "10rem", ListColumnAlign.RIGHT),
            ListColumn("kind", self.localize("List_Th_Postings_Kind"), "9rem"),
            ListColumn("recipient", self.localize("List_Th_Postings_Recipient")),
            ListColumn("subject", self.localize("List_Th_Postings_Subject"), "22%"),
            ListColumn("description", self.localize("List_Th_Postings_Description")),
        ]
        records = [
            ListRecord([
                ListCell.of_text(p.booking_date.date().isoformat()),
                ListCell.of_text(p.valuta_date.date().isoformat()),
                ListCell.of_currency(p.amount),
                ListCell.of_text(posting_kind_text(p)),
                ListCell.of_text(p.recipient_name or ""),
                ListCell.of_text(p.subject or ""),
                ListCell.of_text(p.description or ""),
            ], p)
            for p in self.items
        ]
        self.set_records(columns, records)

    def build_export_url(self, base_path: str, format: str) -> str:
        """``base_path`` with format, search and date range as query parameters."""
        parts = []
        if format and format.strip():
            parts.append(f"format={quote(format, safe='')}")
        if self.search and self.search.strip():
            parts.append(f"q={quote(self.search, safe='')}")
        if self.range_from is not None:
            parts.append(f"from={self.range_from:%Y-%m-%d}")
        if self.range_to is not None:
            parts.append(f"to={self.range_to:%Y-%m-%d}")
        return f"{base_path}?{'&'.join(parts)}" if parts else base_path

    def get_export_url(self, format: str) -> str:
        if not self.export_kind:
            return ""
        return self.build_export_url(f"/api/postings/{self.export_kind}/{self.entity_id}/export", format)

    def get_ribbon_register_definition(self, L) -> Optional[List[RibbonRegister]]:
        tabs = [
            RibbonTab(L["Ribbon_Group_Navigation"].value, [
                RibbonAction("Back", L["Ribbon_Back"].value, sprite_icon("back"), RibbonItemSize.LARGE,
                             callback=self.action_callback("Back")),
            ]),
            RibbonTab(L["Ribbon_Group_Export"].value, [
                RibbonAction("ExportCsv", L["Ribbon_ExportCsv"].value, sprite_icon("download"),
                             disabled=self.loading,
                             callback=self.action_callback("ExportCsv", self.get_export_url("csv"))),
                RibbonAction("ExportXlsx", L["Ribbon_ExportExcel"].value, sprite_icon("download"),
                             disabled=self.loading,
                             callback=self.action_callback("ExportXlsx", self.get_export_url("xlsx"))),
            ]),
        ]
        return [RibbonRegister(RibbonRegisterKind.ACTIONS, tabs)]


class AccountPostingsListViewModel(BasePostingsListViewModel):
    export_kind = "account"

    async def query_page_async(self, api, skip, take, search, date_from, date_to):
        try:
            return await api.list_account_postings(self.entity_id, skip, take, search, date_from, date_to)
        except Exception as e:
            logger.warning(f"Account postings {self.entity_id} failed: {e}")
            return None


class ContactPostingsListViewModel(BasePostingsListViewModel):
    export_kind = "contact"

    async def query_page_async(self, api, skip, take, search, date_from, date_to):
        try:
            return await api.list_contact_postings(self.entity_id, skip, take, search, date_from, date_to)
        except Exception as e:
            logger.warning(f"Contact postings {self.entity_id} failed: {e}")
            return None


class SavingsPlanPostingsListViewModel(BasePostingsListViewModel):
    export_kind = "savings-plan"

    async def query_page_async(self, api, skip, take, search, date_from, date_to):
        try:
            return await api.list_savings_plan_postings(self.entity_id, skip, take, search, date_from, date_to)
        except Exception as e:
            logger.warning(f"Savings plan postings {self.entity_id} failed: {e}")
            return None


class SecurityPostingsListViewModel(BasePostingsListViewModel):
    """Security postings; the backend offers no text search for them."""

    export_kind = "security"
    allow_search_filtering = False

    async def query_page_async(self, api, skip, take, search, date_from, date_to):
        try:
            return await api.list_security_postings(self.entity_id, skip, take, date_from, date_to)
        except Exception as e:
            logger.warning(f"Security postings {self.entity_id} failed: {e}")
            return None
