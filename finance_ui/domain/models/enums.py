"""Domain enums shared by DTOs, lookups and card fields."""

from __future__ import annotations

from enum import Enum, IntEnum


class ContactType(IntEnum):
    SELF = 0
    BANK = 1
    PERSON = 2
    ORGANIZATION = 3
    OTHER = 4


class AccountType(IntEnum):
    GIRO = 0
    SAVINGS = 1


class SavingsPlanExpectation(IntEnum):
    NONE = 0
    OPTIONAL = 1
    REQUIRED = 2


class SavingsPlanType(IntEnum):
    ONE_TIME = 0
    RECURRING = 1
    OPEN = 2


class SavingsPlanInterval(IntEnum):
    MONTHLY = 0
    BI_MONTHLY = 1
    QUARTERLY = 2
    SEMI_ANNUALLY = 3
    ANNUALLY = 4

    @property
    def months(self) -> int:
        return _INTERVAL_MONTHS[self]


_INTERVAL_MONTHS = {
    SavingsPlanInterval.MONTHLY: 1,
    SavingsPlanInterval.BI_MONTHLY: 2,
    SavingsPlanInterval.QUARTERLY: 3,
    SavingsPlanInterval.SEMI_ANNUALLY: 6,
    SavingsPlanInterval.ANNUALLY: 12,
}


class PostingKind(IntEnum):
    BANK = 0
    CONTACT = 1
    SAVINGS_PLAN = 2
    SECURITY = 3


class SecurityPostingSubType(IntEnum):
    BUY = 0
    SELL = 1
    DIVIDEND = 2
    FEE = 3
    TAX = 4


class AttachmentEntityKind(IntEnum):
    """Parent entity an attachment belongs to (wire values of the backend)."""

    NONE = -1
    STATEMENT_DRAFT_ENTRY = 0
    STATEMENT_ENTRY = 1
    CONTACT = 2
    SAVINGS_PLAN = 3
    SECURITY = 4
    ACCOUNT = 5
    STATEMENT_IMPORT = 6
    POSTING = 7
    STATEMENT_DRAFT = 8
    CONTACT_CATEGORY = 9
    SAVINGS_PLAN_CATEGORY = 10
    SECURITY_CATEGORY = 11


class AttachmentRole(IntEnum):
    REGULAR = 0
    SYMBOL = 1


class BooleanSelection(Enum):
    """Yes/no picker values for boolean card fields rendered as lookups."""

    TRUE = "True"
    FALSE = "False"

    @classmethod
    def of(cls, value: bool) -> "BooleanSelection":
        return cls.TRUE if value else cls.FALSE


def display_name(member: Enum) -> str:
    """
    Member name as shown to users and used in resource keys.

    ``SavingsPlanInterval.SEMI_ANNUALLY`` → ``"SemiAnnually"``.
    """
    return "".join(part.capitalize() for part in member.name.split("_"))
