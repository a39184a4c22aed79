"""
User administration list and card.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional, Tuple
from uuid import UUID, uuid4

from ..domain.events import UiOverlaySpec
from ..domain.models import (
    EMPTY_ID,
    AttachmentEntityKind,
    CreateUserRequest,
    UpdateUserRequest,
    UserAdminDto,
)
from ..utils.logging_setup import get_logger
from .common import (
    BaseCardViewModel,
    BaseListViewModel,
    CardField,
    CardFieldKind,
    CardRecord,
    ListCell,
    ListColumn,
    ListRecord,
    RibbonAction,
    RibbonItemSize,
    RibbonRegister,
    RibbonRegisterKind,
    RibbonTab,
    sprite_icon,
)

logger = get_logger(__name__)

F_USERNAME = "Card_Caption_User_Username"
F_IS_ADMIN = "Card_Caption_User_IsAdmin"
F_ACTIVE = "Card_Caption_User_Active"
F_LOCKED_UNTIL = "Card_Caption_User_LockedUntil"
F_LAST_LOGIN = "Card_Caption_User_LastLogin"

CHECK_MARK = "✓"


def format_timestamp(value: Optional[datetime]) -> str:
    """``2026-01-31 08:15:00Z`` style; empty for None."""
    if value is None:
        return ""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.strftime("%Y-%m-%d %H:%M:%SZ")


def _is_locked(user: UserAdminDto) -> bool:
    if user.lockout_end is None:
        return False
    end = user.lockout_end
    now = datetime.now(timezone.utc)
    if end.tzinfo is None:
        now = now.replace(tzinfo=None)
    return end > now


class UserListViewModel(BaseListViewModel[UserAdminDto]):
    allow_range_filtering = False

    async def load_page_async(self, reset_paging: bool) -> None:
        api = self.api
        try:
            users = await api.list_users()
        except Exception as e:
            logger.warning(f"User list failed: {e}")
            users = []
        needle = self.search.strip().lower()
        self.items.clear()
        self.items.extend(u for u in users if not needle or needle in u.username.lower())
        self.can_load_more = False

    def get_navigate_url(self, item: UserAdminDto) -> Optional[str]:
        return f"/card/users/{item.id}"

    def build_records(self) -> None:
        yes, no = self.localize("Value_Yes"), self.localize("Value_No")
        columns = [
            ListColumn("username", self.localize("UserList_Th_Username")),
            ListColumn("admin", self.localize("UserList_Th_Admin"), "80px"),
            ListColumn("active", self.localize("UserList_Th_Active"), "80px"),
            ListColumn("lockedUntil", self.localize("UserList_Th_LockedUntil"), "160px"),
            ListColumn("lastLogin", self.localize("UserList_Th_LastLogin"), "160px"),
        ]
        records = [
            ListRecord([
                ListCell.of_text(u.username),
                ListCell.of_text(yes if u.is_admin else no),
                ListCell.of_text(yes if u.active else no),
                ListCell.of_text(format_timestamp(u.lockout_end) or "-"),
                ListCell.of_text(format_timestamp(u.last_login_utc) or "-"),
            ], u)
            for u in self.items
        ]
        self.set_records(columns, records)

    def get_ribbon_register_definition(self, L) -> Optional[List[RibbonRegister]]:
        tab = RibbonTab(L["Ribbon_Group_Manage"].value, [
            RibbonAction("New", L["Ribbon_New"].value, sprite_icon("plus"), RibbonItemSize.LARGE,
                         callback=self.action_callback("New")),
        ])
        return [RibbonRegister(RibbonRegisterKind.ACTIONS, [tab])]


class UserCardViewModel(BaseCardViewModel):
    """
    Admin view of one user.

    Username and admin flag can only be set while creating. A new user is
    created with a random password and then updated with the remaining
    settings; the password is set afterwards through the SetPassword overlay.
    """

    def __init__(self, services):
        super().__init__(services)
        self.user: Optional[UserAdminDto] = None

    @property
    def title(self) -> str:
        if self.user is not None and self.user.username:
            return self.user.username
        return self.localize("Users_Title")

    async def load_async(self, entity_id: UUID) -> None:
        self.loading = True
        self.clear_error()
        self.raise_state_changed()
        api = self.api
        try:
            self.id = entity_id
            if entity_id == EMPTY_ID:
                self.user = UserAdminDto.new(self.init_prefill or "")
            else:
                user = await api.get_user(entity_id)
                if user is not None:
                    self.user = user
                else:
                    self.set_error("Err_NotFound", "Not found")
            self.card_record = self._build_card_record(self.user)
        except Exception as e:
            self.set_error(api.last_error_code, api.last_error or str(e))
        finally:
            self.loading = False
            self.raise_state_changed()

    def _build_card_record(self, u: Optional[UserAdminDto]) -> CardRecord:
        creating = self.id == EMPTY_ID
        is_admin = u is not None and u.is_admin
        active = u is not None and u.active
        record = CardRecord([
            CardField(F_USERNAME, CardFieldKind.TEXT, text=u.username if u is not None else "", editable=creating),
            CardField(F_IS_ADMIN, CardFieldKind.BOOLEAN, text=CHECK_MARK if is_admin else "",
                      bool_value=u.is_admin if u is not None else None, editable=creating),
            CardField(F_ACTIVE, CardFieldKind.BOOLEAN, text=CHECK_MARK if active else "",
                      bool_value=u.active if u is not None else None),
            CardField(F_LOCKED_UNTIL, CardFieldKind.TEXT, text=format_timestamp(u.lockout_end if u else None)),
            CardField(F_LAST_LOGIN, CardFieldKind.TEXT, text=format_timestamp(u.last_login_utc if u else None)),
        ], u)
        return self.apply_pending_values(record)

    def _field_bool(self, label_key: str, default: bool) -> bool:
        f = self.field(label_key)
        return f.bool_value if f is not None and f.bool_value is not None else default

    async def save_async(self) -> bool:
        if self.user is None:
            return False
        api = self.api
        try:
            creating = self.id == EMPTY_ID
            if self.card_record is not None:
                self.apply_pending_values(self.card_record)
            username = self.field_text(F_USERNAME).strip() or self.user.username
            is_admin = self._field_bool(F_IS_ADMIN, self.user.is_admin)
            language = self.user.preferred_language or ""

            if creating:
                created = await api.create_user(CreateUserRequest(
                    username=username, password=str(uuid4()), is_admin=is_admin,
                ))
                if created is None:
                    return False
                self.user = created
                self.id = created.id
                self.card_record = self._build_card_record(created)

            updated = await api.update_user(self.user.id, UpdateUserRequest(
                username=username, is_admin=is_admin, active=self.user.active, preferred_language=language,
            ))
            if updated is None:
                return False
            self.user = updated
            self.clear_pending_changes()
            self.card_record = self._build_card_record(updated)
            if creating:
                self.raise_ui_action_requested("Saved", str(updated.id))
            return True
        except Exception as e:
            self.set_error(api.last_error_code, api.last_error or str(e))
            return False

    async def delete_async(self) -> bool:
        if self.user is None:
            return False
        api = self.api
        try:
            ok = await api.delete_user(self.user.id)
            if ok:
                self.raise_ui_action_requested("Deleted")
            return ok
        except Exception as e:
            self.set_error(api.last_error_code, api.last_error or str(e))
            return False

    async def _set_active_async(self, active: bool) -> bool:
        if self.user is None:
            return False
        api = self.api
        try:
            updated = await api.update_user(self.user.id, UpdateUserRequest(
                username=self.user.username,
                is_admin=self.user.is_admin,
                active=active,
                preferred_language=self.user.preferred_language or "",
            ))
            if updated is None:
                return False
            self.user = updated
            self.card_record = self._build_card_record(updated)
            self.raise_state_changed()
            return True
        except Exception as e:
            self.set_error(api.last_error_code, api.last_error or str(e))
            return False

    async def enable_async(self) -> bool:
        return await self._set_active_async(True)

    async def disable_async(self) -> bool:
        return await self._set_active_async(False)

    async def unblock_async(self) -> bool:
        if self.user is None:
            return False
        api = self.api
        try:
            ok = await api.unlock_user(self.user.id)
            if ok:
                await self.load_async(self.user.id)
            return ok
        except Exception as e:
            self.set_error(api.last_error_code, api.last_error or str(e))
            return False

    def request_set_password(self, overlay_title: str = "") -> None:
        if self.user is None or self.id == EMPTY_ID:
            return
        self.raise_ui_action_requested("SetPassword", UiOverlaySpec(
            "SetPasswordOverlay", {"UserId": self.user.id, "OverlayTitle": overlay_title},
        ))

    # users carry no symbol
    def is_symbol_upload_allowed(self) -> bool:
        return False

    def get_symbol_parent(self) -> Tuple[AttachmentEntityKind, UUID]:
        return AttachmentEntityKind.NONE, EMPTY_ID

    async def assign_new_symbol_async(self, attachment_id: Optional[UUID]) -> None:
        return None

    def get_ribbon_register_definition(self, L) -> Optional[List[RibbonRegister]]:
        existing = self.id != EMPTY_ID and self.user is not None

        async def save() -> None:
            await self.save_async()

        async def delete() -> None:
            await self.delete_async()

        async def enable() -> None:
            await self.enable_async()

        async def disable() -> None:
            await self.disable_async()

        async def unblock() -> None:
            await self.unblock_async()

        async def set_password() -> None:
            self.request_set_password(L["Users_SetPassword_Title"].value)

        manage = [
            RibbonAction("Save", L["Ribbon_Save"].value, sprite_icon("save"), RibbonItemSize.LARGE,
                         disabled=existing, callback=save),
            RibbonAction("Delete", L["Ribbon_Delete"].value, sprite_icon("delete"),
                         disabled=not existing, callback=delete),
        ]
        if self.user is not None:
            if not self.user.is_admin:
                if self.user.active:
                    manage.append(RibbonAction("Deactivate", L["Ribbon_Deactivate"].value, sprite_icon("archive"),
                                               disabled=not existing, callback=disable))
                else:
                    manage.append(RibbonAction("Activate", L["Ribbon_Activate"].value, sprite_icon("check"),
                                               disabled=not existing, callback=enable))
            if _is_locked(self.user):
                manage.append(RibbonAction("Unblock", L["Ribbon_Unblock"].value, sprite_icon("unlock"),
                                           disabled=not existing, callback=unblock))
            if existing:
                manage.append(RibbonAction("SetPassword", L["Ribbon_SetPassword"].value, sprite_icon("key"),
                                           callback=set_password))

        tabs = [
            RibbonTab(L["Ribbon_Group_Navigation"].value, [
                RibbonAction("Back", L["Ribbon_Back"].value, sprite_icon("back"), RibbonItemSize.LARGE,
                             callback=self.action_callback("Back")),
            ]),
            RibbonTab(L["Ribbon_Group_Manage"].value, manage),
        ]
        return [RibbonRegister(RibbonRegisterKind.ACTIONS, tabs)]
