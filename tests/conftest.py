"""Pytest configuration and fixtures."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, BinaryIO, Dict, List, Optional, Tuple
from uuid import UUID, uuid4

import pytest

from finance_ui.domain.interfaces import CurrentUser, FinanceApi, Localizer, Navigation
from finance_ui.domain.models import (
    AccountCreateRequest,
    AccountDto,
    AccountUpdateRequest,
    AttachmentDto,
    AttachmentEntityKind,
    AttachmentRole,
    BackupDto,
    BackupRestoreStatusDto,
    CategoryDto,
    ContactCreateRequest,
    ContactDto,
    ContactType,
    ContactUpdateRequest,
    CreateUserRequest,
    PostingDto,
    SavingsPlanCreateRequest,
    SavingsPlanDto,
    SecurityDto,
    SecurityRequest,
    UpdateUserRequest,
    UserAdminDto,
)
from finance_ui.infrastructure import NavigationContext, ServiceProvider, SessionUser, YamlLocalizer


class FakeApiError(Exception):
    """Raised by FakeFinanceApi for calls configured to fail."""


class FakeFinanceApi:
    """
    In-memory FinanceApi.

    Entities live in plain dicts/lists. ``fail(name, message, code)`` makes
    the next calls of ``name`` raise after setting last_error, the way
    ApiClient does for a failed response. Every call is recorded in
    ``calls`` as ``(name, kwargs)``.
    """

    def __init__(self) -> None:
        self.last_error: Optional[str] = None
        self.last_error_code: Optional[str] = None
        self.calls: List[Tuple[str, Dict[str, Any]]] = []
        self.failures: Dict[str, Tuple[str, Optional[str]]] = {}

        self.accounts: List[AccountDto] = []
        self.contacts: List[ContactDto] = []
        self.contact_categories: List[CategoryDto] = []
        self.savings_plans: List[SavingsPlanDto] = []
        self.savings_plan_categories: List[CategoryDto] = []
        self.securities: List[SecurityDto] = []
        self.security_categories: List[CategoryDto] = []
        self.postings: Dict[UUID, List[PostingDto]] = {}
        self.users: List[UserAdminDto] = []
        self.attachments: List[AttachmentDto] = []
        self.symbols: Dict[UUID, UUID] = {}
        self.backups: List[BackupDto] = []
        self.restore_running = True

    # plumbing

    def fail(self, name: str, message: str = "boom", code: Optional[str] = None) -> None:
        self.failures[name] = (message, code)

    def called(self, name: str) -> List[Dict[str, Any]]:
        return [kwargs for call, kwargs in self.calls if call == name]

    def _enter(self, name: str, **kwargs: Any) -> None:
        self.last_error = None
        self.last_error_code = None
        self.calls.append((name, kwargs))
        if name in self.failures:
            message, code = self.failures[name]
            self.last_error = message
            self.last_error_code = code
            raise FakeApiError(message)

    @staticmethod
    def _find(items: List[Any], entity_id: UUID) -> Optional[Any]:
        return next((i for i in items if i.id == entity_id), None)

    def _replace(self, items: List[Any], updated: Any) -> None:
        for index, item in enumerate(items):
            if item.id == updated.id:
                items[index] = updated
                return

    def _remove(self, items: List[Any], entity_id: UUID) -> bool:
        item = self._find(items, entity_id)
        if item is None:
            return False
        items.remove(item)
        return True

    # accounts

    async def list_accounts(self, skip: int = 0, take: int = 100,
                            bank_contact_id: Optional[UUID] = None) -> List[AccountDto]:
        self._enter("list_accounts", skip=skip, take=take, bank_contact_id=bank_contact_id)
        items = [a for a in self.accounts if bank_contact_id is None or a.bank_contact_id == bank_contact_id]
        return items[skip:skip + take]

    async def get_account(self, account_id: UUID) -> Optional[AccountDto]:
        self._enter("get_account", account_id=account_id)
        return self._find(self.accounts, account_id)

    async def create_account(self, request: AccountCreateRequest) -> AccountDto:
        self._enter("create_account", request=request)
        dto = AccountDto(id=uuid4(), name=request.name, type=request.type, iban=request.iban)
        self.accounts.append(dto)
        return dto

    async def update_account(self, account_id: UUID, request: AccountUpdateRequest) -> Optional[AccountDto]:
        self._enter("update_account", account_id=account_id, request=request)
        current = self._find(self.accounts, account_id)
        if current is None:
            return None
        updated = current.model_copy(update={
            "name": request.name,
            "iban": request.iban,
            "bank_contact_id": request.bank_contact_id or current.bank_contact_id,
            "symbol_attachment_id": request.symbol_attachment_id,
        })
        self._replace(self.accounts, updated)
        return updated

    async def delete_account(self, account_id: UUID) -> bool:
        self._enter("delete_account", account_id=account_id)
        return self._remove(self.accounts, account_id)

    async def set_account_symbol(self, account_id: UUID, attachment_id: UUID) -> None:
        self._enter("set_account_symbol", account_id=account_id, attachment_id=attachment_id)
        self.symbols[account_id] = attachment_id
        current = self._find(self.accounts, account_id)
        if current is not None:
            self._replace(self.accounts, current.model_copy(update={"symbol_attachment_id": attachment_id}))

    # contacts

    async def list_contacts(self, skip: int = 0, take: int = 50, type: Optional[ContactType] = None,
                            all: bool = False, name_filter: Optional[str] = None) -> List[ContactDto]:
        self._enter("list_contacts", skip=skip, take=take, type=type, all=all, name_filter=name_filter)
        needle = (name_filter or "").lower()
        items = [
            c for c in self.contacts
            if (type is None or c.type == type) and (not needle or needle in c.name.lower())
        ]
        return items if all else items[skip:skip + take]

    async def get_contact(self, contact_id: UUID) -> Optional[ContactDto]:
        self._enter("get_contact", contact_id=contact_id)
        return self._find(self.contacts, contact_id)

    async def create_contact(self, request: ContactCreateRequest) -> ContactDto:
        self._enter("create_contact", request=request)
        dto = ContactDto(
            id=uuid4(), name=request.name, type=request.type, category_id=request.category_id,
            description=request.description, is_payment_intermediary=request.is_payment_intermediary,
        )
        self.contacts.append(dto)
        return dto

    async def update_contact(self, contact_id: UUID, request: ContactUpdateRequest) -> Optional[ContactDto]:
        self._enter("update_contact", contact_id=contact_id, request=request)
        current = self._find(self.contacts, contact_id)
        if current is None:
            return None
        updated = current.model_copy(update=request.model_dump())
        self._replace(self.contacts, updated)
        return updated

    async def delete_contact(self, contact_id: UUID) -> bool:
        self._enter("delete_contact", contact_id=contact_id)
        return self._remove(self.contacts, contact_id)

    async def set_contact_symbol(self, contact_id: UUID, attachment_id: UUID) -> None:
        self._enter("set_contact_symbol", contact_id=contact_id, attachment_id=attachment_id)
        self.symbols[contact_id] = attachment_id

    async def list_contact_categories(self) -> List[CategoryDto]:
        self._enter("list_contact_categories")
        return list(self.contact_categories)

    # savings plans

    async def list_savings_plans(self, only_active: bool = True) -> List[SavingsPlanDto]:
        self._enter("list_savings_plans", only_active=only_active)
        return [p for p in self.savings_plans if p.is_active or not only_active]

    async def get_savings_plan(self, plan_id: UUID) -> Optional[SavingsPlanDto]:
        self._enter("get_savings_plan", plan_id=plan_id)
        return self._find(self.savings_plans, plan_id)

    async def create_savings_plan(self, request: SavingsPlanCreateRequest) -> SavingsPlanDto:
        self._enter("create_savings_plan", request=request)
        dto = SavingsPlanDto(id=uuid4(), **request.model_dump(exclude={"parent"}))
        self.savings_plans.append(dto)
        return dto

    async def update_savings_plan(self, plan_id: UUID, request: SavingsPlanCreateRequest) -> Optional[SavingsPlanDto]:
        self._enter("update_savings_plan", plan_id=plan_id, request=request)
        current = self._find(self.savings_plans, plan_id)
        if current is None:
            return None
        updated = current.model_copy(update=request.model_dump(exclude={"parent"}))
        self._replace(self.savings_plans, updated)
        return updated

    async def archive_savings_plan(self, plan_id: UUID) -> bool:
        self._enter("archive_savings_plan", plan_id=plan_id)
        current = self._find(self.savings_plans, plan_id)
        if current is None:
            return False
        self._replace(self.savings_plans, current.model_copy(update={"is_active": False}))
        return True

    async def delete_savings_plan(self, plan_id: UUID) -> bool:
        self._enter("delete_savings_plan", plan_id=plan_id)
        return self._remove(self.savings_plans, plan_id)

    async def set_savings_plan_symbol(self, plan_id: UUID, attachment_id: UUID) -> None:
        self._enter("set_savings_plan_symbol", plan_id=plan_id, attachment_id=attachment_id)
        self.symbols[plan_id] = attachment_id

    async def list_savings_plan_categories(self) -> List[CategoryDto]:
        self._enter("list_savings_plan_categories")
        return list(self.savings_plan_categories)

    # securities

    async def list_securities(self, only_active: bool = True) -> List[SecurityDto]:
        self._enter("list_securities", only_active=only_active)
        return [s for s in self.securities if s.is_active or not only_active]

    async def get_security(self, security_id: UUID) -> Optional[SecurityDto]:
        self._enter("get_security", security_id=security_id)
        return self._find(self.securities, security_id)

    async def create_security(self, request: SecurityRequest) -> SecurityDto:
        self._enter("create_security", request=request)
        dto = SecurityDto(id=uuid4(), **request.model_dump(exclude={"parent"}))
        self.securities.append(dto)
        return dto

    async def update_security(self, security_id: UUID, request: SecurityRequest) -> Optional[SecurityDto]:
        self._enter("update_security", security_id=security_id, request=request)
        current = self._find(self.securities, security_id)
        if current is None:
            return None
        updated = current.model_copy(update=request.model_dump(exclude={"parent"}))
        self._replace(self.securities, updated)
        return updated

    async def archive_security(self, security_id: UUID) -> bool:
        self._enter("archive_security", security_id=security_id)
        current = self._find(self.securities, security_id)
        if current is None:
            return False
        self._replace(self.securities, current.model_copy(update={"is_active": False}))
        return True

    async def delete_security(self, security_id: UUID) -> bool:
        self._enter("delete_security", security_id=security_id)
        return self._remove(self.securities, security_id)

    async def set_security_symbol(self, security_id: UUID, attachment_id: UUID) -> None:
        self._enter("set_security_symbol", security_id=security_id, attachment_id=attachment_id)
        self.symbols[security_id] = attachment_id

    async def list_security_categories(self) -> List[CategoryDto]:
        self._enter("list_security_categories")
        return list(self.security_categories)

    # postings

    def _postings(self, name: str, entity_id: UUID, skip: int, take: int, **filters: Any) -> List[PostingDto]:
        self._enter(name, entity_id=entity_id, skip=skip, take=take, **filters)
        return self.postings.get(entity_id, [])[skip:skip + take]

    async def list_account_postings(self, account_id: UUID, skip: int = 0, take: int = 50,
                                    q: Optional[str] = None, date_from: Optional[datetime] = None,
                                    date_to: Optional[datetime] = None) -> List[PostingDto]:
        return self._postings("list_account_postings", account_id, skip, take,
                              q=q, date_from=date_from, date_to=date_to)

    async def list_contact_postings(self, contact_id: UUID, skip: int = 0, take: int = 50,
                                    q: Optional[str] = None, date_from: Optional[datetime] = None,
                                    date_to: Optional[datetime] = None) -> List[PostingDto]:
        return self._postings("list_contact_postings", contact_id, skip, take,
                              q=q, date_from=date_from, date_to=date_to)

    async def list_savings_plan_postings(self, plan_id: UUID, skip: int = 0, take: int = 50,
                                         q: Optional[str] = None, date_from: Optional[datetime] = None,
                                         date_to: Optional[datetime] = None) -> List[PostingDto]:
        return self._postings("list_savings_plan_postings", plan_id, skip, take,
                              q=q, date_from=date_from, date_to=date_to)

    async def list_security_postings(self, security_id: UUID, skip: int = 0, take: int = 50,
                                     date_from: Optional[datetime] = None,
                                     date_to: Optional[datetime] = None) -> List[PostingDto]:
        return self._postings("list_security_postings", security_id, skip, take,
                              date_from=date_from, date_to=date_to)

    # attachments

    async def upload_attachment(self, entity_kind: AttachmentEntityKind, entity_id: UUID,
                                stream: BinaryIO, file_name: str, content_type: str,
                                role: Optional[AttachmentRole] = None) -> AttachmentDto:
        self._enter("upload_attachment", entity_kind=entity_kind, entity_id=entity_id,
                    file_name=file_name, content_type=content_type, role=role)
        data = stream.read()
        dto = AttachmentDto(
            id=uuid4(), entity_kind=entity_kind, entity_id=entity_id, file_name=file_name,
            content_type=content_type, size_bytes=len(data), role=role or AttachmentRole.REGULAR,
        )
        self.attachments.append(dto)
        return dto

    # users

    async def list_users(self) -> List[UserAdminDto]:
        self._enter("list_users")
        return list(self.users)

    async def get_user(self, user_id: UUID) -> Optional[UserAdminDto]:
        self._enter("get_user", user_id=user_id)
        return self._find(self.users, user_id)

    async def create_user(self, request: CreateUserRequest) -> UserAdminDto:
        self._enter("create_user", request=request)
        dto = UserAdminDto(id=uuid4(), username=request.username, is_admin=request.is_admin)
        self.users.append(dto)
        return dto

    async def update_user(self, user_id: UUID, request: UpdateUserRequest) -> Optional[UserAdminDto]:
        self._enter("update_user", user_id=user_id, request=request)
        current = self._find(self.users, user_id)
        if current is None:
            return None
        updated = current.model_copy(update=request.model_dump(exclude_none=True))
        self._replace(self.users, updated)
        return updated

    async def delete_user(self, user_id: UUID) -> bool:
        self._enter("delete_user", user_id=user_id)
        return self._remove(self.users, user_id)

    async def unlock_user(self, user_id: UUID) -> bool:
        self._enter("unlock_user", user_id=user_id)
        current = self._find(self.users, user_id)
        if current is None:
            return False
        self._replace(self.users, current.model_copy(update={"lockout_end": None}))
        return True

    # backups and maintenance

    async def list_backups(self) -> List[BackupDto]:
        self._enter("list_backups")
        return list(self.backups)

    async def create_backup(self) -> BackupDto:
        self._enter("create_backup")
        dto = BackupDto(id=uuid4(), created_utc=datetime(2026, 3, 1, 12, 0), file_name="backup.zip",
                        size_bytes=2048, source="Manual")
        self.backups.insert(0, dto)
        return dto

    async def upload_backup(self, stream: BinaryIO, file_name: str) -> BackupDto:
        self._enter("upload_backup", file_name=file_name)
        data = stream.read()
        dto = BackupDto(id=uuid4(), created_utc=datetime(2026, 3, 2, 9, 30), file_name=file_name,
                        size_bytes=len(data), source="Upload")
        self.backups.insert(0, dto)
        return dto

    async def start_apply_backup(self, backup_id: UUID) -> BackupRestoreStatusDto:
        self._enter("start_apply_backup", backup_id=backup_id)
        return BackupRestoreStatusDto(running=self.restore_running, total=1)

    async def delete_backup(self, backup_id: UUID) -> bool:
        self._enter("delete_backup", backup_id=backup_id)
        return self._remove(self.backups, backup_id)

    async def rebuild_aggregates(self, allow_duplicate: bool = False) -> None:
        self._enter("rebuild_aggregates", allow_duplicate=allow_duplicate)


def _posting(index: int = 0, amount: str = "10.00", **overrides: Any) -> PostingDto:
    day = datetime(2026, 1, index % 28 + 1)
    values: Dict[str, Any] = {
        "id": uuid4(),
        "booking_date": day,
        "valuta_date": day,
        "amount": Decimal(amount),
        "subject": f"Posting {index}",
    }
    values.update(overrides)
    return PostingDto(**values)


RESOURCES = {
    "Ribbon_Back": "Back",
    "Ribbon_New": "New",
    "Ribbon_Save": "Save",
    "Ribbon_Delete": "Delete",
    "Ribbon_Archive": "Archive",
    "Ribbon_Group_Navigation": "Navigation",
    "Ribbon_Group_Navigate": "Navigate",
    "Ribbon_Group_Manage": "Manage",
    "Ribbon_Group_Linked": "Linked",
    "Ribbon_Group_Export": "Export",
    "Ribbon_ShowAll": "Show all",
    "Ribbon_OnlyActive": "Only active",
    "Err_NotFound": "The record was not found.",
    "StatusActive": "Active",
    "StatusArchived": "Archived",
    "Value_Yes": "Yes",
    "Value_No": "No",
    "List_Value_EveryMonths": "every {0} month(s)",
    "EnumType_ContactType_Bank": "Bank",
    "EnumType_ContactType_Person": "Person",
    "EnumType_ContactType_Organization": "Organisation",
    "EnumType_SavingsPlanType_Recurring": "Recurring",
    "EnumType_BooleanSelection_True": "Yes",
    "EnumType_BooleanSelection_False": "No",
    "EnumType_AccountType_Giro": "Current account",
    "Ribbon_Group_Actions": "Actions",
    "Setup_Title": "Setup",
    "Setup_Section_Users": "Users",
    "Setup_Section_Backup": "Backup",
    "Ribbon_CreateBackup": "Create backup",
    "Ribbon_UploadBackup": "Upload backup",
    "Ribbon_RebuildAggregates": "Rebuild aggregates",
}


@pytest.fixture
def fake_api() -> FakeFinanceApi:
    return FakeFinanceApi()


@pytest.fixture
def session_user() -> SessionUser:
    user = SessionUser()
    user.sign_in(uuid4(), "alice", is_admin=True, preferred_language="en")
    return user


@pytest.fixture
def localizer() -> YamlLocalizer:
    return YamlLocalizer(RESOURCES)


@pytest.fixture
def navigation() -> NavigationContext:
    return NavigationContext("/")


@pytest.fixture
def services(fake_api, session_user, localizer, navigation) -> ServiceProvider:
    """Service provider with a signed-in admin, the fake API and English resources."""
    provider = ServiceProvider()
    provider.register(FinanceApi, fake_api)
    provider.register(CurrentUser, session_user)
    provider.register(Localizer, localizer)
    provider.register(Navigation, navigation)
    return provider


@pytest.fixture
def events():
    """Collects events raised by a view model: ``events.attach(vm)``."""

    class Recorder:
        def __init__(self) -> None:
            self.state_changes = 0
            self.auth_requests: List[Optional[str]] = []
            self.actions: List[Any] = []

        def attach(self, vm) -> "Recorder":
            vm.state_changed.subscribe(lambda _: self._state())
            vm.authentication_required.subscribe(self.auth_requests.append)
            vm.ui_action_requested.subscribe(self.actions.append)
            return self

        def _state(self) -> None:
            self.state_changes += 1

        def action_names(self) -> List[str]:
            return [a.action for a in self.actions]

    return Recorder()


@pytest.fixture
def make_posting():
    """Factory: ``make_posting(index, amount, **fields)`` books on 2026-01-{index % 28 + 1}."""
    return _posting
