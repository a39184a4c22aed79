"""
Route tables mapping URL kinds to view model factories.

Card routes look like ``/card/{kind}[/{subkind}]/{id}`` and list routes
like ``/list/{kind}[/{subkind}]/{id}``. Both registries are populated
explicitly; nothing is discovered by scanning modules.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from ..domain.exceptions import UnknownViewModelKindError
from ..infrastructure.service_provider import ServiceProvider
from ..utils.logging_setup import get_logger
from .accounts import BankAccountCardViewModel, BankAccountListViewModel
from .common import BaseCardViewModel, BaseListViewModel
from .contacts import ContactCardViewModel, ContactListViewModel
from .postings import (
    AccountPostingsListViewModel,
    ContactPostingsListViewModel,
    SavingsPlanPostingsListViewModel,
    SecurityPostingsListViewModel,
)
from .savings_plans import SavingsPlanCardViewModel, SavingsPlansListViewModel
from .securities import SecuritiesListViewModel, SecurityCardViewModel
from .setup import SetupCardViewModel
from .users import UserCardViewModel, UserListViewModel

logger = get_logger(__name__)

CardFactory = Callable[[ServiceProvider], BaseCardViewModel]
ListFactory = Callable[..., BaseListViewModel]


def _normalize(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip().lower()
    return value or None


@dataclass(frozen=True)
class CardRoute:
    kind: str
    subkind: Optional[str] = None

    @classmethod
    def of(cls, kind: str, subkind: Optional[str] = None) -> "CardRoute":
        return cls(_normalize(kind) or "", _normalize(subkind))

    def __str__(self) -> str:
        return self.kind if self.subkind is None else f"{self.kind}/{self.subkind}"


class CardViewModelRegistry:
    """
    Card factories keyed by ``CardRoute``.

    ``resolve`` tries the exact (kind, subkind) route first and then the
    kind-only route.
    """

    def __init__(self) -> None:
        self._factories: Dict[CardRoute, CardFactory] = {}

    def register(self, kind: str, factory: CardFactory, subkind: Optional[str] = None) -> "CardViewModelRegistry":
        self._factories[CardRoute.of(kind, subkind)] = factory
        return self

    def resolve(self, kind: str, subkind: Optional[str] = None) -> Optional[CardFactory]:
        route = CardRoute.of(kind, subkind)
        factory = self._factories.get(route)
        if factory is None and route.subkind is not None:
            factory = self._factories.get(CardRoute(route.kind))
        return factory

    def create(self, kind: str, services: ServiceProvider, subkind: Optional[str] = None) -> BaseCardViewModel:
        factory = self.resolve(kind, subkind)
        if factory is None:
            raise UnknownViewModelKindError(kind, subkind)
        vm = factory(services)
        logger.debug(f"Card view model {type(vm).__name__} created for {CardRoute.of(kind, subkind)}")
        return vm

    def routes(self) -> List[CardRoute]:
        return list(self._factories)

    def __contains__(self, kind: object) -> bool:
        return isinstance(kind, str) and self.resolve(kind) is not None


class ListViewModelFactory:
    """List factories keyed by normalized kind, e.g. ``accounts`` or ``postings/account``."""

    def __init__(self) -> None:
        self._factories: Dict[str, ListFactory] = {}

    def register(self, kind: str, factory: ListFactory) -> "ListViewModelFactory":
        self._factories[_normalize(kind) or ""] = factory
        return self

    def create(self, kind: str, services: ServiceProvider, **kwargs: Any) -> BaseListViewModel:
        factory = self._factories.get(_normalize(kind) or "")
        if factory is None:
            raise UnknownViewModelKindError(kind)
        return factory(services, **kwargs)

    def kinds(self) -> List[str]:
        return sorted(self._factories)

    def __contains__(self, kind: object) -> bool:
        return isinstance(kind, str) and _normalize(kind) in self._factories


def default_card_registry() -> CardViewModelRegistry:
    return (
        CardViewModelRegistry()
        .register("accounts", BankAccountCardViewModel)
        .register("contacts", ContactCardViewModel)
        .register("savings-plans", SavingsPlanCardViewModel)
        .register("securities", SecurityCardViewModel)
        .register("users", UserCardViewModel)
        .register("setup", SetupCardViewModel)
    )


def default_list_factory() -> ListViewModelFactory:
    return (
        ListViewModelFactory()
        .register("accounts", BankAccountListViewModel)
        .register("contacts", ContactListViewModel)
        .register("savings-plans", SavingsPlansListViewModel)
        .register("securities", SecuritiesListViewModel)
        .register("users", UserListViewModel)
        .register("postings/account", AccountPostingsListViewModel)
        .register("postings/contact", ContactPostingsListViewModel)
        .register("postings/savings-plan", SavingsPlanPostingsListViewModel)
        .register("postings/security", SecurityPostingsListViewModel)
    )
