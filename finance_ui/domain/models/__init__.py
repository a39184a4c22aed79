"""Backend DTOs and domain enums."""

from .enums import (
    AccountType,
    AttachmentEntityKind,
    AttachmentRole,
    BooleanSelection,
    ContactType,
    PostingKind,
    SavingsPlanExpectation,
    SavingsPlanInterval,
    SavingsPlanType,
    SecurityPostingSubType,
    display_name,
)
from .dtos import (
    EMPTY_ID,
    AccountCreateRequest,
    AccountDto,
    AccountUpdateRequest,
    AttachmentDto,
    BackupDto,
    BackupRestoreStatusDto,
    CategoryDto,
    ContactCreateRequest,
    ContactDto,
    ContactUpdateRequest,
    CreateUserRequest,
    ParentLinkRequest,
    PostingDto,
    SavingsPlanCreateRequest,
    SavingsPlanDto,
    SecurityDto,
    SecurityRequest,
    UpdateUserRequest,
    UserAdminDto,
)

__all__ = [
    "AccountType",
    "AttachmentEntityKind",
    "AttachmentRole",
    "BooleanSelection",
    "ContactType",
    "PostingKind",
    "SavingsPlanExpectation",
    "SavingsPlanInterval",
    "SavingsPlanType",
    "SecurityPostingSubType",
    "display_name",
    "EMPTY_ID",
    "AccountCreateRequest",
    "AccountDto",
    "AccountUpdateRequest",
    "AttachmentDto",
    "BackupDto",
    "BackupRestoreStatusDto",
    "CategoryDto",
    "ContactCreateRequest",
    "ContactDto",
    "ContactUpdateRequest",
    "CreateUserRequest",
    "ParentLinkRequest",
    "PostingDto",
    "SavingsPlanCreateRequest",
    "SavingsPlanDto",
    "SecurityDto",
    "SecurityRequest",
    "UpdateUserRequest",
    "UserAdminDto",
]
