"""
Backend DTOs consumed by the view models.

The view-model layer treats these as opaque pass-through shapes: it reads
the fields it renders and builds request models for saves. JSON on the wire
is camelCase; Python attributes are snake_case.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .enums import (
    AccountType,
    AttachmentEntityKind,
    AttachmentRole,
    ContactType,
    PostingKind,
    SavingsPlanExpectation,
    SavingsPlanInterval,
    SavingsPlanType,
    SecurityPostingSubType,
)

EMPTY_ID = UUID(int=0)


class ApiModel(BaseModel):
    """Base for all wire models: camelCase aliases, extra fields ignored."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class ParentLinkRequest(ApiModel):
    """Links a newly created entity back to the card that asked for it."""

    parent_kind: str = Field(description="Route kind of the parent card (e.g. 'statement-drafts/entries')")
    parent_id: UUID = Field(description="Id of the parent entity")
    parent_field: Optional[str] = Field(default=None, description="Field on the parent to assign")


# --- Accounts ---

class AccountDto(ApiModel):
    id: UUID
    name: str = ""
    type: AccountType = AccountType.GIRO
    iban: Optional[str] = None
    current_balance: Decimal = Decimal("0")
    bank_contact_id: UUID = EMPTY_ID
    symbol_attachment_id: Optional[UUID] = None
    savings_plan_expectation: SavingsPlanExpectation = SavingsPlanExpectation.OPTIONAL


class AccountCreateRequest(ApiModel):
    name: str
    type: AccountType
    iban: Optional[str] = None
    bank_contact_id: Optional[UUID] = None
    new_bank_contact_name: Optional[str] = None
    symbol_attachment_id: Optional[UUID] = None
    savings_plan_expectation: SavingsPlanExpectation = SavingsPlanExpectation.OPTIONAL


class AccountUpdateRequest(AccountCreateRequest):
    security_processing_enabled: bool = False


# --- Contacts ---

class ContactDto(ApiModel):
    id: UUID
    name: str = ""
    type: ContactType = ContactType.ORGANIZATION
    category_id: Optional[UUID] = None
    description: Optional[str] = None
    is_payment_intermediary: bool = False
    symbol_attachment_id: Optional[UUID] = None


class ContactCreateRequest(ApiModel):
    name: str
    type: ContactType
    category_id: Optional[UUID] = None
    description: Optional[str] = None
    is_payment_intermediary: bool = False
    parent: Optional[ParentLinkRequest] = None


class ContactUpdateRequest(ApiModel):
    name: str
    type: ContactType
    category_id: Optional[UUID] = None
    description: Optional[str] = None
    is_payment_intermediary: bool = False


class CategoryDto(ApiModel):
    """Contact, savings plan and security categories share this shape."""

    id: UUID
    name: str = ""
    symbol_attachment_id: Optional[UUID] = None


# --- Savings plans ---

class SavingsPlanDto(ApiModel):
    id: UUID
    name: str = ""
    type: SavingsPlanType = SavingsPlanType.ONE_TIME
    target_amount: Optional[Decimal] = None
    target_date: Optional[datetime] = None
    interval: Optional[SavingsPlanInterval] = None
    is_active: bool = True
    created_utc: Optional[datetime] = None
    archived_utc: Optional[datetime] = None
    category_id: Optional[UUID] = None
    contract_number: Optional[str] = None
    symbol_attachment_id: Optional[UUID] = None
    remaining_amount: Decimal = Decimal("0")
    current_amount: Decimal = Decimal("0")


class SavingsPlanCreateRequest(ApiModel):
    name: str
    type: SavingsPlanType
    target_amount: Optional[Decimal] = None
    target_date: Optional[datetime] = None
    interval: Optional[SavingsPlanInterval] = None
    category_id: Optional[UUID] = None
    contract_number: Optional[str] = None
    parent: Optional[ParentLinkRequest] = None


# --- Securities ---

class SecurityDto(ApiModel):
    id: UUID
    name: str = ""
    description: Optional[str] = None
    identifier: str = ""
    alpha_vantage_code: Optional[str] = None
    currency_code: str = "EUR"
    category_id: Optional[UUID] = None
    category_name: Optional[str] = None
    is_active: bool = True
    created_utc: Optional[datetime] = None
    archived_utc: Optional[datetime] = None
    symbol_attachment_id: Optional[UUID] = None


class SecurityRequest(ApiModel):
    name: str
    identifier: str
    currency_code: str = "EUR"
    description: Optional[str] = None
    alpha_vantage_code: Optional[str] = None
    category_id: Optional[UUID] = None
    parent: Optional[ParentLinkRequest] = None


# --- Postings ---

class PostingDto(ApiModel):
    id: UUID
    kind: PostingKind = PostingKind.BANK
    account_id: Optional[UUID] = None
    contact_id: Optional[UUID] = None
    savings_plan_id: Optional[UUID] = None
    security_id: Optional[UUID] = None
    booking_date: datetime
    valuta_date: datetime
    amount: Decimal = Decimal("0")
    subject: Optional[str] = None
    recipient_name: Optional[str] = None
    description: Optional[str] = None
    security_sub_type: Optional[SecurityPostingSubType] = None
    quantity: Optional[Decimal] = None
    group_id: Optional[UUID] = None


# --- Attachments ---

class AttachmentDto(ApiModel):
    id: UUID
    entity_kind: AttachmentEntityKind = AttachmentEntityKind.NONE
    entity_id: UUID = EMPTY_ID
    file_name: str = ""
    content_type: str = "application/octet-stream"
    size_bytes: int = 0
    category_id: Optional[UUID] = None
    uploaded_utc: Optional[datetime] = None
    is_url: bool = False
    role: AttachmentRole = AttachmentRole.REGULAR


# --- Users (admin) ---

class UserAdminDto(ApiModel):
    id: UUID
    username: str = ""
    is_admin: bool = False
    active: bool = True
    lockout_end: Optional[datetime] = None
    last_login_utc: Optional[datetime] = None
    preferred_language: Optional[str] = None

    @classmethod
    def new(cls, username: str = "") -> "UserAdminDto":
        """Blank user for the create flow; the backend assigns the id."""
        return cls(id=EMPTY_ID, username=username, is_admin=False, active=True)


class CreateUserRequest(ApiModel):
    username: str
    password: str
    is_admin: bool = False


class UpdateUserRequest(ApiModel):
    username: Optional[str] = None
    is_admin: Optional[bool] = None
    active: Optional[bool] = None
    preferred_language: Optional[str] = None


# --- Backups (setup) ---

class BackupDto(ApiModel):
    id: UUID
    created_utc: datetime
    file_name: str = ""
    size_bytes: int = 0
    source: str = ""


class BackupRestoreStatusDto(ApiModel):
    running: bool = False
    processed: int = 0
    total: int = 0
    message: Optional[str] = None
    error: Optional[str] = None
    processed2: int = 0
    total2: int = 0
    message2: Optional[str] = None
