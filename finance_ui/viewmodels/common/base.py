"""
BaseViewModel - root of the list/card view-model hierarchy.

Provides:
- Service access (API client, current user, localizer, navigation)
- Authentication gate raising ``authentication_required``
- Localized error state (``last_error`` / ``last_error_code``)
- Lookup dispatch for card pickers (enums, contacts, savings plans,
  securities, accounts)
- Child view models whose events bubble to the parent and whose ribbon
  registers are aggregated with the parent's own

View models are headless: hosts subscribe to the three event channels and
re-render on ``state_changed``. Nothing here guards against overlapping
calls; the last load to finish wins.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar, Union
from uuid import UUID

from ...domain.events import (
    EmbeddedPanelSpec,
    EventChannel,
    Subscription,
    UiActionEvent,
    UiOverlaySpec,
)
from ...domain.interfaces import CurrentUser, FinanceApi, Localizer, Navigation
from ...domain.models import EMPTY_ID, AttachmentEntityKind, ContactType, display_name
from ...infrastructure.localization import YamlLocalizer
from ...infrastructure.service_provider import ServiceProvider
from ...utils.logging_setup import get_logger
from .lookups import (
    EnumLookup,
    EnumLookupRegistry,
    default_enum_registry,
    enum_lookup_name,
    filter_value,
    parse_bool,
    parse_enum_member,
    parse_guid,
)
from .rendering import CardField, CardRecord, LookupItem
from .ribbon import ActionCallback, RibbonRegister

logger = get_logger(__name__)

VM = TypeVar("VM", bound="BaseViewModel")

Payload = Union[str, UiOverlaySpec, EmbeddedPanelSpec, None]


class BaseViewModel:
    """
    Base class for all view models.

    Subclasses override ``get_ribbon_register_definition`` to contribute
    toolbar actions and ``is_child_view_model_active`` to hide the
    ribbons of inactive children (e.g. a collapsed chart panel).
    """

    def __init__(self, services: ServiceProvider):
        self.services = services
        self.state_changed: EventChannel[None] = EventChannel("StateChanged")
        self.authentication_required: EventChannel[Optional[str]] = EventChannel("AuthenticationRequired")
        self.ui_action_requested: EventChannel[UiActionEvent] = EventChannel("UiActionRequested")

        self.loading = False
        self.last_error: Optional[str] = None
        self.last_error_code: Optional[str] = None

        self._children: List[BaseViewModel] = []
        self._singletons: Dict[type, BaseViewModel] = {}
        self._child_subscriptions: List[Subscription] = []
        self._active_tab: Any = None
        self._localizer: Optional[Localizer] = None

    # ------------------------------------------------------------------
    # services
    # ------------------------------------------------------------------

    @property
    def api(self) -> FinanceApi:
        return self.services.get_required_service(FinanceApi)

    @property
    def localizer(self) -> Optional[Localizer]:
        if self._localizer is None:
            self._localizer = self.services.get_service(Localizer)
        return self._localizer

    @property
    def navigation(self) -> Optional[Navigation]:
        return self.services.get_service(Navigation)

    @property
    def enum_lookups(self) -> EnumLookupRegistry:
        return self.services.get_service(EnumLookupRegistry) or default_enum_registry()

    def localize(self, key: str) -> str:
        """Localized text for ``key``, or the key itself when no resource exists."""
        localizer = self.localizer
        return localizer[key].value if localizer is not None else key

    @property
    def title(self) -> str:
        return ""

    # ------------------------------------------------------------------
    # authentication
    # ------------------------------------------------------------------

    def _current_user(self) -> Optional[CurrentUser]:
        try:
            return self.services.get_service(CurrentUser)
        except Exception as e:
            logger.warning(f"Current user service unavailable: {e}")
            return None

    def _read_authentication(self) -> bool:
        user = self._current_user()
        if user is None:
            return True
        try:
            return bool(user.is_authenticated)
        except Exception as e:
            logger.warning(f"Reading authentication state failed: {e}")
            return True

    @property
    def is_authenticated(self) -> bool:
        """True when signed in; an unavailable identity service counts as signed in."""
        return self._read_authentication()

    def check_authentication(self, reason: Optional[str] = None) -> bool:
        """
        True when the user is signed in or no identity service is available.

        Otherwise raises ``authentication_required`` once and returns False.
        """
        if self._read_authentication():
            return True
        logger.info(f"{type(self).__name__}: authentication required")
        self.authentication_required.emit(reason)
        return False

    # ------------------------------------------------------------------
    # error state and events
    # ------------------------------------------------------------------

    def set_error(self, code: Optional[str], message: Optional[str]) -> None:
        """Store an error; a code with a resource entry replaces the message."""
        self.last_error_code = code
        self.last_error = message
        if code and self.localizer is not None:
            entry = self.localizer[code]
            if not entry.resource_not_found:
                self.last_error = entry.value
        logger.warning(f"{type(self).__name__} error: code={self.last_error_code} message={self.last_error}")

    def clear_error(self) -> None:
        self.last_error = None
        self.last_error_code = None

    def raise_state_changed(self) -> None:
        self.state_changed.emit(None)

    def raise_ui_action_requested(self, action: str, payload: Payload = None) -> None:
        logger.debug(f"{type(self).__name__} requests UI action '{action}'")
        self.ui_action_requested.emit(UiActionEvent(action, payload))

    def raise_embedded_panel_requested(self, spec: EmbeddedPanelSpec) -> None:
        self.raise_ui_action_requested("EmbeddedPanel", spec)

    def request_open_attachments(self, parent_kind: AttachmentEntityKind, parent_id: UUID) -> None:
        spec = UiOverlaySpec("AttachmentsPanel", {"ParentKind": parent_kind, "ParentId": parent_id})
        self.raise_ui_action_requested("OpenAttachments", spec)

    def action_callback(self, action: str, payload: Payload = None) -> ActionCallback:
        """Ribbon callback that just forwards ``action`` to the host."""
        async def callback() -> None:
            self.raise_ui_action_requested(action, payload)
        return callback

    # ------------------------------------------------------------------
    # child view models
    # ------------------------------------------------------------------

    def create_sub_view_model(
        self,
        vm_type: Type[VM],
        singleton_per_type: bool = False,
        configure: Optional[Callable[[VM], None]] = None,
    ) -> VM:
        """
        Create a child whose events bubble to this view model.

        With ``singleton_per_type`` an existing child of the same type is
        returned instead; ``configure`` runs either way.
        """
        if singleton_per_type and vm_type in self._singletons:
            existing = self._singletons[vm_type]
            if configure is not None:
                configure(existing)  # type: ignore[arg-type]
            return existing  # type: ignore[return-value]

        vm = vm_type(self.services)
        self._child_subscriptions.extend([
            vm.state_changed.subscribe(lambda _: self.raise_state_changed()),
            vm.authentication_required.subscribe(self.authentication_required.emit),
            vm.ui_action_requested.subscribe(self.ui_action_requested.emit),
        ])
        self._singletons.setdefault(vm_type, vm)
        self._children.append(vm)
        if configure is not None:
            configure(vm)
        return vm

    @property
    def children(self) -> List["BaseViewModel"]:
        return list(self._children)

    def is_child_view_model_active(self, child: "BaseViewModel") -> bool:
        """
        Whether ``child`` contributes to the aggregated ribbon.

        Args:
            child: A view model created through ``create_sub_view_model``

        Returns:
            True by default; parents showing one child at a time override this
        """
        return True

    async def dispose_async(self) -> None:
        """Dispose children and release the handlers they bubble through."""
        for child in self._children:
            await child.dispose_async()
        for subscription in self._child_subscriptions:
            subscription.close()
        self._child_subscriptions.clear()
        self._children.clear()
        self._singletons.clear()

    # ------------------------------------------------------------------
    # ribbon
    # ------------------------------------------------------------------

    def get_ribbon_register_definition(self, localizer: Localizer) -> Optional[List[RibbonRegister]]:
        """
        Own ribbon registers, without children.

        Args:
            localizer: Source of the action labels

        Returns:
            Registers to show, or None when this view model has no actions
        """
        return None

    def get_ribbon_registers(self, localizer: Optional[Localizer] = None) -> Optional[List[RibbonRegister]]:
        """
        Own registers followed by those of every active child.

        None (not an empty list) when nothing contributes.
        """
        localizer = localizer or self.localizer or YamlLocalizer({})
        registers: List[RibbonRegister] = list(self.get_ribbon_register_definition(localizer) or [])
        for child in self._children:
            if not self.is_child_view_model_active(child):
                continue
            child_registers = child.get_ribbon_registers(localizer)
            if child_registers:
                registers.extend(child_registers)
        return registers or None

    def get_ribbon(self, localizer: Optional[Localizer] = None) -> Optional[List[RibbonRegister]]:
        """Own ribbon definition only, without children."""
        return self.get_ribbon_register_definition(localizer or self.localizer or YamlLocalizer({}))

    def set_active_tab(self, tab: Any) -> None:
        self._active_tab = tab

    @property
    def active_tab(self) -> Any:
        return self._active_tab

    # ------------------------------------------------------------------
    # lookups
    # ------------------------------------------------------------------

    async def query_lookup_async(self, field: CardField, q: Optional[str] = None,
                                 skip: int = 0, take: int = 20) -> List[LookupItem]:
        lookup_type = (field.lookup_type or "").strip()
        enum_name = enum_lookup_name(lookup_type)
        if enum_name is not None:
            entry = self.enum_lookups.resolve(enum_name)
            return self._query_enum_lookup(entry, q) if entry is not None else []

        query = {
            "contact": self._query_contact_lookup_async,
            "savingsplan": self._query_savings_plan_lookup_async,
            "security": self._query_security_lookup_async,
            "bankaccount": self._query_account_lookup_async,
            "account": self._query_account_lookup_async,
        }.get(lookup_type.lower())
        if query is None:
            return []
        try:
            return await query(field, q, skip, take)
        except Exception as e:
            logger.warning(f"Lookup '{lookup_type}' failed: {e}")
            return []

    def enum_label(self, entry: EnumLookup, member: Enum) -> str:
        raw = display_name(member)
        localizer = self.localizer
        if localizer is not None:
            entry_text = localizer[entry.resource_key(raw)]
            if not entry_text.resource_not_found and entry_text.value.strip():
                return entry_text.value
        return raw

    def _query_enum_lookup(self, entry: EnumLookup, q: Optional[str]) -> List[LookupItem]:
        needle = (q or "").strip().lower()
        items = [LookupItem(EMPTY_ID, self.enum_label(entry, m)) for m in entry.members()]
        return [i for i in items if not needle or needle in i.name.lower()]

    def resolve_enum_member(self, lookup_type: Optional[str], text: Optional[str]) -> Optional[Enum]:
        """Member of an ``Enum:`` lookup by raw or localized name."""
        entry = self.enum_lookups.resolve(enum_lookup_name(lookup_type))
        if entry is None or not text:
            return None
        parsed = parse_enum_member(entry.enum_type, text)
        if parsed.is_ok():
            return parsed.unwrap()
        wanted = text.strip().lower()
        for member in entry.members():
            if self.enum_label(entry, member).lower() == wanted:
                return member
        return None

    async def _query_contact_lookup_async(self, field: CardField, q: Optional[str],
                                          skip: int, take: int) -> List[LookupItem]:
        type_filter = parse_enum_member(ContactType, filter_value(field.lookup_filter, "type")).unwrap_or(None)
        contacts = await self.api.list_contacts(skip=skip, take=take, type=type_filter, all=False, name_filter=q)
        return [LookupItem(c.id, c.name) for c in contacts]

    async def _query_savings_plan_lookup_async(self, field: CardField, q: Optional[str],
                                               skip: int, take: int) -> List[LookupItem]:
        only_active = parse_bool(filter_value(field.lookup_filter, "onlyactive")).unwrap_or(True)
        needle = (q or "").strip().lower()
        plans = await self.api.list_savings_plans(only_active=only_active)
        matches = [p for p in plans if not needle or needle in (p.name or "").lower()]
        return [LookupItem(p.id, p.name) for p in matches[skip:skip + take]]

    async def _query_security_lookup_async(self, field: CardField, q: Optional[str],
                                           skip: int, take: int) -> List[LookupItem]:
        only_active = parse_bool(filter_value(field.lookup_filter, "onlyactive")).unwrap_or(True)
        needle = (q or "").strip().lower()
        securities = await self.api.list_securities(only_active=only_active)
        matches = [
            s for s in securities
            if not needle or needle in (s.name or "").lower() or needle in (s.identifier or "").lower()
        ]
        return [LookupItem(s.id, s.name) for s in matches[skip:skip + take]]

    async def _query_account_lookup_async(self, field: CardField, q: Optional[str],
                                          skip: int, take: int) -> List[LookupItem]:
        bank_contact_id = parse_guid(filter_value(field.lookup_filter, "bankcontactid")).unwrap_or(None)
        needle = (q or "").strip().lower()
        accounts = await self.api.list_accounts(skip=skip, take=take, bank_contact_id=bank_contact_id)
        return [
            LookupItem(a.id, f"{a.name} ({a.iban})" if a.iban and a.iban.strip() else a.name)
            for a in accounts
            if not needle or needle in (a.name or "").lower() or needle in (a.iban or "").lower()
        ]

    # ------------------------------------------------------------------
    # records
    # ------------------------------------------------------------------

    def apply_enum_translations(self, record: CardRecord) -> CardRecord:
        """Replace the raw member text of ``Enum:`` fields with its localized label."""
        localizer = self.localizer
        if localizer is None:
            return record
        for field in record.fields:
            entry = self.enum_lookups.resolve(enum_lookup_name(field.lookup_type))
            if entry is None or field.text is None:
                continue
            translated = localizer[entry.resource_key(field.text)]
            if not translated.resource_not_found and translated.value.strip():
                field.text = translated.value
        return record
