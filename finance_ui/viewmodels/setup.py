"""
Setup area: a card hosting one section panel at a time.

Sections are child view models created on first use and reused afterwards.
Only the child of the selected section contributes to the card's ribbon.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO, List, Optional, Tuple, Type
from uuid import UUID

from ..domain.events import EmbeddedPanelPosition, EmbeddedPanelSpec, EventChannel
from ..domain.models import EMPTY_ID, AttachmentEntityKind, BackupDto
from ..utils.logging_setup import get_logger
from .common import (
    BaseCardViewModel,
    BaseViewModel,
    RibbonAction,
    RibbonItemSize,
    RibbonRegister,
    RibbonRegisterKind,
    RibbonTab,
    sprite_icon,
)
from .users import UserListViewModel

logger = get_logger(__name__)

SETUP_PANEL = "SetupPanel"
LAST_TAB = 2 ** 31 - 1


class SetupBackupsViewModel(BaseViewModel):
    """
    Backups section: list, create, upload, delete and restore.

    ``backups`` is None until the first load. Hosts subscribe to
    ``upload_requested`` to open a file picker and pass the chosen file to
    ``upload_async``.
    """

    def __init__(self, services):
        super().__init__(services)
        self.backups: Optional[List[BackupDto]] = None
        self.busy = False
        self.has_active_restore = False
        self.upload_requested: EventChannel[None] = EventChannel("UploadRequested")

    async def initialize_async(self) -> None:
        if not self.check_authentication():
            return
        await self.load_backups_async()

    async def load_backups_async(self) -> None:
        api = self.api
        try:
            self.clear_error()
            self.backups = await api.list_backups()
        except Exception as e:
            self.set_error(api.last_error_code, api.last_error or str(e))
            self.backups = []
        finally:
            self.raise_state_changed()

    def add_backup(self, backup: BackupDto) -> None:
        if self.backups is None:
            self.backups = []
        self.backups.insert(0, backup)
        self.raise_state_changed()

    async def _run_busy(self, operation) -> None:
        api = self.api
        self.busy = True
        self.clear_error()
        self.raise_state_changed()
        try:
            await operation()
        except Exception as e:
            self.set_error(api.last_error_code, api.last_error or str(e))
        finally:
            self.busy = False
            self.raise_state_changed()

    async def create_async(self) -> None:
        async def create() -> None:
            self.add_backup(await self.api.create_backup())
        await self._run_busy(create)

    async def upload_async(self, stream: BinaryIO, file_name: str) -> None:
        if stream is None:
            raise ValueError("stream is required")

        async def upload() -> None:
            self.add_backup(await self.api.upload_backup(stream, file_name))
        await self._run_busy(upload)

    async def delete_async(self, backup_id: UUID) -> None:
        async def delete() -> None:
            if await self.api.delete_backup(backup_id) and self.backups is not None:
                self.backups = [b for b in self.backups if b.id != backup_id]
        await self._run_busy(delete)

    async def start_apply_async(self, backup_id: UUID) -> None:
        if backup_id == EMPTY_ID:
            return
        api = self.api
        try:
            status = await api.start_apply_backup(backup_id)
            self.has_active_restore = status.running
            logger.info(f"Restore of backup {backup_id} started: running={status.running}")
        except Exception as e:
            self.set_error(api.last_error_code, api.last_error or str(e))
        finally:
            self.raise_state_changed()

    def trigger_upload_request(self) -> None:
        self.upload_requested.emit(None)

    def get_ribbon_register_definition(self, L) -> Optional[List[RibbonRegister]]:
        async def create() -> None:
            await self.create_async()

        async def request_upload() -> None:
            self.trigger_upload_request()

        actions = [
            RibbonAction("CreateBackup", L["Ribbon_CreateBackup"].value, sprite_icon("save"), RibbonItemSize.LARGE,
                         disabled=self.busy, tooltip=L["Hint_CreateBackup"].value, callback=create),
            RibbonAction("UploadBackup", L["Ribbon_UploadBackup"].value, sprite_icon("upload"), RibbonItemSize.LARGE,
                         disabled=self.busy, tooltip=L["Hint_UploadBackup"].value, callback=request_upload),
        ]
        return [RibbonRegister(RibbonRegisterKind.ACTIONS, [RibbonTab(L["Ribbon_Group_Actions"].value, actions, LAST_TAB)])]


@dataclass(frozen=True)
class SetupSection:
    key: str
    resource_key: str
    vm_type: Type[BaseViewModel]
    component_type: str
    admin_only: bool = False


SECTIONS: Tuple[SetupSection, ...] = (
    SetupSection("users", "Setup_Section_Users", UserListViewModel, "SetupUsersTab", admin_only=True),
    SetupSection("backup", "Setup_Section_Backup", SetupBackupsViewModel, "SetupBackupTab"),
)


def find_section(key: Optional[str]) -> Optional[SetupSection]:
    wanted = (key or "").strip().lower()
    return next((s for s in SECTIONS if s.key == wanted), None)


class SetupCardViewModel(BaseCardViewModel):
    """
    Card for the setup area.

    Loading asks the host for the section navigation panel after the
    ribbon. ``change_view_async`` selects a section: it clears the panel
    after the card, creates (or reuses) the section's child, loads it and
    asks the host to render it.
    """

    @property
    def title(self) -> str:
        return self.localize("Setup_Title")

    @property
    def selected_section(self) -> Optional[str]:
        return self.active_tab

    def _is_admin(self) -> bool:
        user = self._current_user()
        try:
            return bool(user is not None and user.is_admin)
        except Exception as e:
            logger.warning(f"Reading admin flag failed: {e}")
            return False

    def available_sections(self) -> List[SetupSection]:
        admin = self._is_admin()
        return [s for s in SECTIONS if admin or not s.admin_only]

    @property
    def setting_sections(self) -> List[Tuple[str, str]]:
        """(key, localized name) pairs for the section navigation."""
        return [(s.key, self.localize(s.resource_key)) for s in self.available_sections()]

    async def load_async(self, entity_id: UUID) -> None:
        self.loading = True
        self.clear_error()
        self.raise_state_changed()
        try:
            self.id = entity_id
            self.card_record = None
            self.raise_embedded_panel_requested(EmbeddedPanelSpec(
                SETUP_PANEL,
                {"InnerComponentType": "SetupSections", "InnerParameters": {"Provider": self}},
                EmbeddedPanelPosition.AFTER_RIBBON,
            ))
        finally:
            self.loading = False
            self.raise_state_changed()

    async def change_view_async(self, key: Optional[str]) -> Optional[BaseViewModel]:
        """
        Switch to the section ``key`` (case-insensitive).

        Args:
            key: Section key, e.g. ``"backup"``

        Returns:
            The section's child view model, or None for blank, unknown or
            unavailable keys (the selection is left unchanged)
        """
        section = find_section(key)
        if section is None or section not in self.available_sections():
            logger.debug(f"Setup section '{key}' ignored")
            return None
        self.set_active_tab(section.key)
        self.raise_state_changed()
        self.raise_ui_action_requested("ClearEmbeddedPanel", EmbeddedPanelPosition.AFTER_CARD.value)

        child = self.create_sub_view_model(section.vm_type, singleton_per_type=True)
        self.raise_embedded_panel_requested(EmbeddedPanelSpec(
            SETUP_PANEL,
            {"InnerComponentType": section.component_type, "InnerParameters": {"ViewModel": child}},
            EmbeddedPanelPosition.AFTER_CARD,
        ))
        await child.initialize_async()
        return child

    def is_child_view_model_active(self, child: BaseViewModel) -> bool:
        section = find_section(self.selected_section)
        return section is not None and isinstance(child, section.vm_type)

    async def rebuild_aggregates_async(self) -> bool:
        api = self.api
        try:
            await api.rebuild_aggregates(allow_duplicate=False)
            return True
        except Exception as e:
            self.set_error(api.last_error_code, api.last_error or str(e))
            return False

    def get_ribbon_register_definition(self, L) -> Optional[List[RibbonRegister]]:
        async def rebuild() -> None:
            await self.rebuild_aggregates_async()

        tab = RibbonTab(L["Ribbon_Group_Actions"].value, [
            RibbonAction("RebuildAggregates", L["Ribbon_RebuildAggregates"].value, sprite_icon("refresh"),
                         RibbonItemSize.LARGE, tooltip=L["Hint_RebuildAggregates"].value, callback=rebuild),
        ], LAST_TAB)
        return [RibbonRegister(RibbonRegisterKind.ACTIONS, [tab])]

    # setup has no symbol
    def is_symbol_upload_allowed(self) -> bool:
        return False

    def get_symbol_parent(self) -> Tuple[AttachmentEntityKind, UUID]:
        return AttachmentEntityKind.NONE, EMPTY_ID

    async def assign_new_symbol_async(self, attachment_id: Optional[UUID]) -> None:
        return None
