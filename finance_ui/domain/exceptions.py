"""
Exceptions for the Finance Manager view-model layer.

Recoverable errors leave the view model usable (the UI shows a message and
the user retries); fatal errors indicate wiring or configuration problems
that no user action fixes.
"""

from __future__ import annotations

from typing import Optional


class FinanceUiError(Exception):
    """Base class for all finance_ui exceptions."""
    pass


class RecoverableError(FinanceUiError):
    """
    Errors a view model can surface and recover from.

    Examples:
    - Backend rejected a save (validation, conflict)
    - Entity not found
    - Temporary network failure
    """
    pass


class FatalError(FinanceUiError):
    """
    Errors caused by wiring or configuration.

    Examples:
    - Required service missing from the service provider
    - Unknown list or card kind requested by the router
    - Malformed config files
    """
    pass


class ApiError(RecoverableError):
    """Backend call failed; carries what the API client extracted from the response."""

    def __init__(self, message: str, code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code


class DuplicateFieldError(RecoverableError):
    """A CardRecord was built with two fields sharing one label key."""

    def __init__(self, label_key: str):
        super().__init__(f"Duplicate card field label key: {label_key}")
        self.label_key = label_key


class RecordShapeError(RecoverableError):
    """A ListRecord does not have one cell per column."""

    def __init__(self, index: int, cells: int, columns: int):
        super().__init__(f"Record {index} has {cells} cells but list has {columns} columns")
        self.index = index
        self.cells = cells
        self.columns = columns


class ConfigurationError(FatalError):
    """Invalid configuration."""
    pass


class ServiceNotRegisteredError(FatalError):
    """get_required_service() was asked for a service nobody registered."""

    def __init__(self, service_type: type):
        super().__init__(f"No service registered for {service_type.__name__}")
        self.service_type = service_type


class UnknownViewModelKindError(FatalError):
    """No list/card view model is registered for the requested route kind."""

    def __init__(self, kind: str, subkind: Optional[str] = None):
        route = kind if not subkind else f"{kind}/{subkind}"
        super().__init__(f"No view model registered for '{route}'")
        self.kind = kind
        self.subkind = subkind
