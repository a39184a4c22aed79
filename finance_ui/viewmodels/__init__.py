"""
Headless view models for the finance manager UI.
"""

from .accounts import BankAccountCardViewModel, BankAccountListViewModel
from .contacts import ContactCardViewModel, ContactListViewModel
from .postings import (
    AccountPostingsListViewModel,
    BasePostingsListViewModel,
    ContactPostingsListViewModel,
    SavingsPlanPostingsListViewModel,
    SecurityPostingsListViewModel,
)
from .registry import (
    CardRoute,
    CardViewModelRegistry,
    ListViewModelFactory,
    default_card_registry,
    default_list_factory,
)
from .savings_plans import SavingsPlanCardViewModel, SavingsPlansListViewModel
from .securities import SecuritiesListViewModel, SecurityCardViewModel
from .setup import SetupBackupsViewModel, SetupCardViewModel
from .users import UserCardViewModel, UserListViewModel

__all__ = [
    "BankAccountCardViewModel",
    "BankAccountListViewModel",
    "ContactCardViewModel",
    "ContactListViewModel",
    "AccountPostingsListViewModel",
    "BasePostingsListViewModel",
    "ContactPostingsListViewModel",
    "SavingsPlanPostingsListViewModel",
    "SecurityPostingsListViewModel",
    "CardRoute",
    "CardViewModelRegistry",
    "ListViewModelFactory",
    "default_card_registry",
    "default_list_factory",
    "SavingsPlanCardViewModel",
    "SavingsPlansListViewModel",
    "SecuritiesListViewModel",
    "SecurityCardViewModel",
    "SetupBackupsViewModel",
    "SetupCardViewModel",
    "UserCardViewModel",
    "UserListViewModel",
]
