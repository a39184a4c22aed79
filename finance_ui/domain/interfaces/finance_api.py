"""Finance Manager backend API protocol."""

from __future__ import annotations

from datetime import datetime
from typing import BinaryIO, List, Optional, Protocol, runtime_checkable
from uuid import UUID

from ..models import (
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


@runtime_checkable
class FinanceApi(Protocol):
    """
    Protocol for the backend API used by view models.

    Implementations:
    - ApiClient (httpx)
    - FakeFinanceApi (tests)

    Conventions:
    - get_* returns None when the entity does not exist (HTTP 404)
    - delete_* returns False when the entity does not exist
    - any other failure raises after last_error / last_error_code have been
      populated from the response body
    - last_error / last_error_code describe the most recent call only
    """

    last_error: Optional[str]
    last_error_code: Optional[str]

    # Accounts
    async def list_accounts(self, skip: int = 0, take: int = 100,
                            bank_contact_id: Optional[UUID] = None) -> List[AccountDto]: ...

    async def get_account(self, account_id: UUID) -> Optional[AccountDto]: ...

    async def create_account(self, request: AccountCreateRequest) -> AccountDto: ...

    async def update_account(self, account_id: UUID, request: AccountUpdateRequest) -> Optional[AccountDto]: ...

    async def delete_account(self, account_id: UUID) -> bool: ...

    async def set_account_symbol(self, account_id: UUID, attachment_id: UUID) -> None: ...

    # Contacts
    async def list_contacts(self, skip: int = 0, take: int = 50, type: Optional[ContactType] = None,
                            all: bool = False, name_filter: Optional[str] = None) -> List[ContactDto]: ...

    async def get_contact(self, contact_id: UUID) -> Optional[ContactDto]: ...

    async def create_contact(self, request: ContactCreateRequest) -> ContactDto: ...

    async def update_contact(self, contact_id: UUID, request: ContactUpdateRequest) -> Optional[ContactDto]: ...

    async def delete_contact(self, contact_id: UUID) -> bool: ...

    async def set_contact_symbol(self, contact_id: UUID, attachment_id: UUID) -> None: ...

    async def list_contact_categories(self) -> List[CategoryDto]: ...

    # Savings plans
    async def list_savings_plans(self, only_active: bool = True) -> List[SavingsPlanDto]: ...

    async def get_savings_plan(self, plan_id: UUID) -> Optional[SavingsPlanDto]: ...

    async def create_savings_plan(self, request: SavingsPlanCreateRequest) -> SavingsPlanDto: ...

    async def update_savings_plan(self, plan_id: UUID, request: SavingsPlanCreateRequest) -> Optional[SavingsPlanDto]: ...

    async def archive_savings_plan(self, plan_id: UUID) -> bool: ...

    async def delete_savings_plan(self, plan_id: UUID) -> bool: ...

    async def set_savings_plan_symbol(self, plan_id: UUID, attachment_id: UUID) -> None: ...

    async def list_savings_plan_categories(self) -> List[CategoryDto]: ...

    # Securities
    async def list_securities(self, only_active: bool = True) -> List[SecurityDto]: ...

    async def get_security(self, security_id: UUID) -> Optional[SecurityDto]: ...

    async def create_security(self, request: SecurityRequest) -> SecurityDto: ...

    async def update_security(self, security_id: UUID, request: SecurityRequest) -> Optional[SecurityDto]: ...

    async def archive_security(self, security_id: UUID) -> bool: ...

    async def delete_security(self, security_id: UUID) -> bool: ...

    async def set_security_symbol(self, security_id: UUID, attachment_id: UUID) -> None: ...

    async def list_security_categories(self) -> List[CategoryDto]: ...

    # Postings
    async def list_account_postings(self, account_id: UUID, skip: int = 0, take: int = 50,
                                    q: Optional[str] = None, date_from: Optional[datetime] = None,
                                    date_to: Optional[datetime] = None) -> List[PostingDto]: ...

    async def list_contact_postings(self, contact_id: UUID, skip: int = 0, take: int = 50,
                                    q: Optional[str] = None, date_from: Optional[datetime] = None,
                                    date_to: Optional[datetime] = None) -> List[PostingDto]: ...

    async def list_savings_plan_postings(self, plan_id: UUID, skip: int = 0, take: int = 50,
                                         q: Optional[str] = None, date_from: Optional[datetime] = None,
                                         date_to: Optional[datetime] = None) -> List[PostingDto]: ...

    async def list_security_postings(self, security_id: UUID, skip: int = 0, take: int = 50,
                                     date_from: Optional[datetime] = None,
                                     date_to: Optional[datetime] = None) -> List[PostingDto]: ...

    # Attachments
    async def upload_attachment(self, entity_kind: AttachmentEntityKind, entity_id: UUID,
                                stream: BinaryIO, file_name: str, content_type: str,
                                role: Optional[AttachmentRole] = None) -> AttachmentDto: ...

    # Admin: users
    async def list_users(self) -> List[UserAdminDto]: ...

    async def get_user(self, user_id: UUID) -> Optional[UserAdminDto]: ...

    async def create_user(self, request: CreateUserRequest) -> UserAdminDto: ...

    async def update_user(self, user_id: UUID, request: UpdateUserRequest) -> Optional[UserAdminDto]: ...

    async def delete_user(self, user_id: UUID) -> bool: ...

    async def unlock_user(self, user_id: UUID) -> bool: ...

    # Setup: backups and maintenance
    async def list_backups(self) -> List[BackupDto]: ...

    async def create_backup(self) -> BackupDto: ...

    async def upload_backup(self, stream: BinaryIO, file_name: str) -> BackupDto: ...

    async def start_apply_backup(self, backup_id: UUID) -> BackupRestoreStatusDto: ...

    async def delete_backup(self, backup_id: UUID) -> bool: ...

    async def rebuild_aggregates(self, allow_duplicate: bool = False) -> None: ...
