"""
Infrastructure layer: concrete implementations of the collaborator protocols.
"""

from .adapters import ApiClient
from .current_user import SessionUser
from .localization import YamlLocalizer
from .navigation import NavigationContext
from .service_provider import ServiceProvider

__all__ = [
    "ApiClient",
    "NavigationContext",
    "ServiceProvider",
    "SessionUser",
    "YamlLocalizer",
]
