"""
Minimal service provider for constructor injection of view models.

Services are keyed by type (usually a Protocol from
finance_ui.domain.interfaces). Instances are shared; factories run on every
resolution, which is how per-page view models get fresh state.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Type, TypeVar, cast

from ..domain.exceptions import ServiceNotRegisteredError
from ..utils.logging_setup import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class ServiceProvider:
    """
    Usage:
        services = ServiceProvider()
        services.register(FinanceApi, ApiClient(config.api))
        services.register_factory(BankAccountListViewModel, BankAccountListViewModel)

        api = services.get_required_service(FinanceApi)
        vm = services.get_required_service(BankAccountListViewModel)
    """

    def __init__(self) -> None:
        self._instances: Dict[type, Any] = {}
        self._factories: Dict[type, Callable[["ServiceProvider"], Any]] = {}

    def register(self, service_type: Type[T], instance: T) -> "ServiceProvider":
        self._instances[service_type] = instance
        self._factories.pop(service_type, None)
        logger.debug(f"Registered instance for {service_type.__name__}")
        return self

    def register_factory(self, service_type: Type[T], factory: Callable[["ServiceProvider"], T]) -> "ServiceProvider":
        self._factories[service_type] = factory
        self._instances.pop(service_type, None)
        logger.debug(f"Registered factory for {service_type.__name__}")
        return self

    def is_registered(self, service_type: type) -> bool:
        return service_type in self._instances or service_type in self._factories

    def get_service(self, service_type: Type[T]) -> Optional[T]:
        """Resolve a service or return None when nothing is registered."""
        if service_type in self._instances:
            return cast(T, self._instances[service_type])
        factory = self._factories.get(service_type)
        if factory is not None:
            return factory(self)
        return None

    def get_required_service(self, service_type: Type[T]) -> T:
        """
        Resolve a service.

        Raises:
            ServiceNotRegisteredError: If nothing is registered for the type.
        """
        service = self.get_service(service_type)
        if service is None:
            raise ServiceNotRegisteredError(service_type)
        return service
