"""Protocols for the collaborators view models consume."""

from .current_user import CurrentUser
from .finance_api import FinanceApi
from .localizer import LocalizedString, Localizer
from .navigation import Navigation

__all__ = [
    "CurrentUser",
    "FinanceApi",
    "LocalizedString",
    "Localizer",
    "Navigation",
]
