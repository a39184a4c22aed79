"""
Savings plan list and card view models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from ..domain.models import (
    EMPTY_ID,
    AttachmentEntityKind,
    CategoryDto,
    SavingsPlanCreateRequest,
    SavingsPlanDto,
    SavingsPlanInterval,
    SavingsPlanType,
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
    LookupItem,
    RibbonAction,
    RibbonItemSize,
    RibbonRegister,
    RibbonRegisterKind,
    RibbonTab,
    sprite_icon,
)
from .common.pending import parse_decimal

logger = get_logger(__name__)

F_NAME = "Card_Caption_SavingsPlan_Name"
F_CATEGORY = "Card_Caption_SavingsPlan_Category"
F_TYPE = "Card_Caption_SavingsPlan_Type"
F_INTERVAL = "Card_Caption_SavingsPlan_Interval"
F_TARGET_AMOUNT = "Card_Caption_SavingsPlan_TargetAmount"
F_TARGET_DATE = "Card_Caption_SavingsPlan_TargetDate"
F_CONTRACT_NUMBER = "Card_Caption_SavingsPlan_ContractNumber"
F_SYMBOL = "Card_Caption_SavingsPlan_Symbol"

TYPE_LOOKUP = "Enum:SavingsPlanType"
INTERVAL_LOOKUP = "Enum:SavingsPlanInterval"


def _parse_date(text: Optional[str]) -> Optional[datetime]:
    if not text or not text.strip():
        return None
    try:
        return datetime.fromisoformat(text.strip())
    except ValueError:
        return None


class SavingsPlansListViewModel(BaseListViewModel[SavingsPlanDto]):
    """All savings plans in one page; ``only_active`` hides archived plans."""

    allow_range_filtering = False

    def __init__(self, services):
        super().__init__(services)
        self.only_active = True
        self._category_names: Dict[UUID, str] = {}

    async def load_page_async(self, reset_paging: bool) -> None:
        api = self.api
        try:
            plans = await api.list_savings_plans(only_active=self.only_active)
            categories = await api.list_savings_plan_categories()
            self._category_names = {c.id: c.name for c in categories}
            needle = self.search.strip().lower()
            if reset_paging:
                self.items.clear()
            self.items.extend(p for p in plans if not needle or needle in (p.name or "").lower())
        except Exception as e:
            self.set_error(api.last_error_code, api.last_error or str(e))
            self.items.clear()
        self.can_load_more = False

    async def toggle_active_async(self) -> None:
        self.only_active = not self.only_active
        await self.initialize_async()

    def get_navigate_url(self, item: SavingsPlanDto) -> Optional[str]:
        return f"/card/savings-plans/{item.id}"

    def _date_text(self, p: SavingsPlanDto) -> str:
        text = p.target_date.date().isoformat() if p.target_date else ""
        if p.type is SavingsPlanType.RECURRING and p.interval is not None:
            every = self.localize("List_Value_EveryMonths").replace("{0}", str(p.interval.months))
            text = f"{text} {every}".strip()
        return text

    def build_records(self) -> None:
        columns = [
            ListColumn("symbol", "", "48px"),
            ListColumn("name", self.localize("List_Th_SavingsPlan_Name"), "28%"),
            ListColumn("category", self.localize("List_Th_SavingsPlan_Category"), "14%"),
            ListColumn("target", self.localize("List_Th_TargetAmount"), "12%", ListColumnAlign.RIGHT),
            ListColumn("balance", self.localize("List_Th_Balance"), "12%", ListColumnAlign.RIGHT),
            ListColumn("remaining", self.localize("List_Th_Remaining"), "12%", ListColumnAlign.RIGHT),
            ListColumn("date", self.localize("List_Th_TargetDate"), "14%"),
        ]
        records = [
            ListRecord([
                ListCell.of_symbol(p.symbol_attachment_id),
                ListCell.of_text(p.name),
                ListCell.of_text(self._category_names.get(p.category_id, "") if p.category_id else ""),
                ListCell.of_currency(p.target_amount),
                ListCell.of_currency(p.current_amount),
                ListCell.of_currency(p.remaining_amount if p.target_amount is not None else None),
                ListCell.of_text(self._date_text(p)),
            ], p, hint=None if p.is_active else self.localize("StatusArchived"))
            for p in self.items
        ]
        self.set_records(columns, records)

    def get_ribbon_register_definition(self, L) -> Optional[List[RibbonRegister]]:
        toggle_label = L["Ribbon_ShowAll"].value if self.only_active else L["Ribbon_OnlyActive"].value
        manage = RibbonTab(L["Ribbon_Group_Manage"].value, [
            RibbonAction("New", L["Ribbon_New"].value, sprite_icon("plus"), RibbonItemSize.LARGE,
                         callback=self.action_callback("New")),
            RibbonAction("Categories", L["Ribbon_Categories"].value, sprite_icon("groups"),
                         callback=self.action_callback("Categories", "/list/savings-plans/categories")),
        ])
        filters = RibbonTab(L["Ribbon_Group_Filter"].value, [
            RibbonAction("ToggleActive", toggle_label, sprite_icon("filter"), callback=self.toggle_active_async),
        ])
        return [
            RibbonRegister(RibbonRegisterKind.ACTIONS, [manage]),
            RibbonRegister(RibbonRegisterKind.CUSTOM, [filters]),
        ]


class SavingsPlanCardViewModel(BaseCardViewModel):
    def __init__(self, services):
        super().__init__(services)
        self.plan: Optional[SavingsPlanDto] = None
        self.categories: List[CategoryDto] = []

    @property
    def title(self) -> str:
        return self.plan.name if self.plan is not None else ""

    async def load_categories_async(self) -> None:
        try:
            self.categories = await self.api.list_savings_plan_categories()
        except Exception as e:
            logger.debug(f"Savings plan categories unavailable: {e}")
            self.categories = []

    async def load_async(self, entity_id: UUID) -> None:
        self.id = entity_id
        self.loading = True
        self.clear_error()
        self.raise_state_changed()
        api = self.api
        try:
            await self.load_categories_async()
            if entity_id == EMPTY_ID:
                self.plan = SavingsPlanDto(id=EMPTY_ID, name=self.init_prefill or "")
            else:
                self.plan = await api.get_savings_plan(entity_id)
                if self.plan is None:
                    self.set_error(api.last_error_code, api.last_error or "Savings plan not found")
                    self.card_record = CardRecord([])
                    return
            self.card_record = self._build_card_record(self.plan)
        except Exception as e:
            self.card_record = CardRecord([])
            self.set_error(api.last_error_code, api.last_error or str(e))
        finally:
            self.loading = False
            self.raise_state_changed()

    def _effective_type(self, p: SavingsPlanDto) -> SavingsPlanType:
        pending_type = self.resolve_enum_member(TYPE_LOOKUP, self.pending.text(F_TYPE))
        return pending_type if pending_type is not None else p.type

    def _build_card_record(self, p: SavingsPlanDto) -> CardRecord:
        plan_type = self._effective_type(p)
        category_name = next((c.name for c in self.categories if c.id == p.category_id), "")
        fields = [
            CardField(F_NAME, CardFieldKind.TEXT, text=p.name, editable=True),
            CardField(F_CATEGORY, CardFieldKind.TEXT, text=category_name, editable=True,
                      lookup_type="SavingsPlanCategory", value_id=p.category_id),
            CardField(F_TYPE, CardFieldKind.TEXT, text=display_name(p.type), editable=True, lookup_type=TYPE_LOOKUP),
        ]
        if plan_type is SavingsPlanType.RECURRING:
            fields.append(CardField(F_INTERVAL, CardFieldKind.TEXT,
                                    text=display_name(p.interval) if p.interval is not None else "",
                                    editable=True, lookup_type=INTERVAL_LOOKUP))
        fields.append(CardField(F_TARGET_AMOUNT, CardFieldKind.CURRENCY, amount=p.target_amount, editable=True))
        if plan_type is not SavingsPlanType.OPEN:
            fields.append(CardField(F_TARGET_DATE, CardFieldKind.DATE,
                                    text=p.target_date.date().isoformat() if p.target_date else "", editable=True))
        fields.append(CardField(F_CONTRACT_NUMBER, CardFieldKind.TEXT, text=p.contract_number or "", editable=True))
        fields.append(CardField(F_SYMBOL, CardFieldKind.SYMBOL, symbol_id=p.symbol_attachment_id,
                                editable=p.id != EMPTY_ID))
        return self.apply_pending_values(self.apply_enum_translations(CardRecord(fields, p)))

    async def query_lookup_async(self, field: CardField, q: Optional[str] = None,
                                 skip: int = 0, take: int = 20) -> List[LookupItem]:
        if (field.lookup_type or "").lower() == "savingsplancategory":
            if not self.categories:
                await self.load_categories_async()
            term = (q or "").strip().lower()
            matches = [c for c in self.categories if not term or term in (c.name or "").lower()]
            return [LookupItem(c.id, c.name) for c in matches[skip:skip + take]]
        return await super().query_lookup_async(field, q, skip, take)

    def validate_lookup_field(self, field: CardField, item: Optional[LookupItem]) -> None:
        super().validate_lookup_field(field, item)
        if field.label_key == F_TYPE and self.plan is not None:
            # interval/target date fields depend on the plan type
            self.card_record = self._build_card_record(self.plan)

    def _build_request(self) -> SavingsPlanCreateRequest:
        p = self.plan
        record = self.apply_pending_values(self.card_record or CardRecord([]))

        plan_type = self._effective_type(p)
        interval = self.resolve_enum_member(INTERVAL_LOOKUP, self.field_text(F_INTERVAL)) \
            if plan_type is SavingsPlanType.RECURRING else None
        if plan_type is SavingsPlanType.RECURRING and interval is None:
            interval = p.interval or SavingsPlanInterval.MONTHLY

        target = record.field(F_TARGET_AMOUNT)
        target_amount = target.amount if target is not None else p.target_amount
        if target is not None and target.amount is None and target.text:
            target_amount = parse_decimal(target.text).unwrap_or(p.target_amount)

        category = record.field(F_CATEGORY)
        return SavingsPlanCreateRequest(
            name=self.field_text(F_NAME, p.name),
            type=plan_type,
            target_amount=target_amount,
            target_date=_parse_date(self.field_text(F_TARGET_DATE)) if record.field(F_TARGET_DATE) is not None else None,
            interval=interval,
            category_id=category.value_id if category is not None and category.value_id else p.category_id,
            contract_number=self.field_text(F_CONTRACT_NUMBER, p.contract_number or "") or None,
            parent=self.parent_link() if self.id == EMPTY_ID else None,
        )

    async def save_async(self) -> bool:
        if self.plan is None:
            return False
        api = self.api
        request = self._build_request()
        self.loading = True
        self.clear_error()
        self.raise_state_changed()
        try:
            if self.id == EMPTY_ID:
                saved = await api.create_savings_plan(request)
            else:
                saved = await api.update_savings_plan(self.id, request)
            if saved is None:
                self.set_api_error("Save failed")
                return False
            created = self.id == EMPTY_ID
            self.id = saved.id
            self.plan = saved
            self.clear_pending_changes()
            self.card_record = self._build_card_record(saved)
            if created:
                self.raise_ui_action_requested("Saved", str(self.id))
            return True
        except Exception as e:
            self.set_error(api.last_error_code, api.last_error or str(e))
            return False
        finally:
            self.loading = False
            self.raise_state_changed()

    async def archive_async(self) -> bool:
        if self.plan is None or self.id == EMPTY_ID:
            return False
        api = self.api
        try:
            if not await api.archive_savings_plan(self.id):
                self.set_api_error("Archive failed")
                return False
        except Exception as e:
            self.set_error(api.last_error_code, api.last_error or str(e))
            return False
        await self.load_async(self.id)
        return True

    async def delete_async(self) -> bool:
        if self.plan is None or self.id == EMPTY_ID:
            return False
        api = self.api
        try:
            if not await api.delete_savings_plan(self.id):
                self.set_api_error("Delete failed")
                return False
            self.raise_ui_action_requested("Deleted")
            return True
        except Exception as e:
            self.set_error(api.last_error_code, api.last_error or str(e))
            return False

    def is_symbol_upload_allowed(self) -> bool:
        return self.id != EMPTY_ID

    def get_symbol_parent(self) -> Tuple[AttachmentEntityKind, UUID]:
        return AttachmentEntityKind.SAVINGS_PLAN, self.id

    async def assign_new_symbol_async(self, attachment_id: Optional[UUID]) -> None:
        if attachment_id is None:
            return
        await self.api.set_savings_plan_symbol(self.id, attachment_id)
        await self.load_async(self.id)

    def get_ribbon_register_definition(self, L) -> Optional[List[RibbonRegister]]:
        existing = self.plan is not None and self.id != EMPTY_ID
        archived = self.plan is not None and not self.plan.is_active
        category_id = self.plan.category_id if self.plan is not None else None

        async def save() -> None:
            await self.save_async()

        async def archive() -> None:
            await self.archive_async()

        async def delete() -> None:
            await self.delete_async()

        async def open_attachments() -> None:
            self.request_open_attachments(AttachmentEntityKind.SAVINGS_PLAN, self.id)

        tabs = [
            RibbonTab(L["Ribbon_Group_Navigation"].value, [
                RibbonAction("Back", L["Ribbon_Back"].value, sprite_icon("back"), RibbonItemSize.LARGE,
                             callback=self.action_callback("Back", self.back_url)),
            ]),
            RibbonTab(L["Ribbon_Group_Manage"].value, [
                RibbonAction("Save", L["Ribbon_Save"].value, sprite_icon("save"), RibbonItemSize.LARGE,
                             disabled=not self.has_pending_changes, callback=save),
                RibbonAction("Archive", L["Ribbon_Archive"].value, sprite_icon("archive"),
                             disabled=not existing or archived, callback=archive),
                RibbonAction("Delete", L["Ribbon_Delete"].value, sprite_icon("delete"),
                             disabled=not existing, callback=delete),
            ]),
            RibbonTab(L["Ribbon_Group_Linked"].value, [
                RibbonAction("Category", L["Ribbon_Category"].value, sprite_icon("groups"),
                             disabled=category_id is None,
                             callback=self.action_callback("OpenCategory",
                                                           f"/card/savings-plans/categories/{category_id}")),
                RibbonAction("OpenPostings", L["Ribbon_Postings"].value, sprite_icon("postings"),
                             disabled=not existing,
                             callback=self.action_callback("OpenPostings", f"/list/postings/savings-plan/{self.id}")),
                RibbonAction("OpenAttachments", L["Ribbon_Attachments"].value, sprite_icon("attachment"),
                             disabled=not existing, callback=open_attachments),
            ]),
        ]
        return [RibbonRegister(RibbonRegisterKind.ACTIONS, tabs)]
