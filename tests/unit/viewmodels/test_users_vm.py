"""Unit tests for the user administration list and card."""

import io
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from finance_ui.domain.models import EMPTY_ID, UserAdminDto
from finance_ui.viewmodels import UserCardViewModel, UserListViewModel
from finance_ui.viewmodels.common import find_action
from finance_ui.viewmodels.users import CHECK_MARK, F_ACTIVE, F_IS_ADMIN, F_LOCKED_UNTIL, F_USERNAME, format_timestamp


def user(username="bob", **kwargs) -> UserAdminDto:
    return UserAdminDto(id=uuid4(), username=username, **kwargs)


def action_ids(registers):
    return [a.id for r in registers for t in r.tabs for a in t.items]


class TestFormatTimestamp:
    def test_naive_and_aware(self):
        assert format_timestamp(None) == ""
        assert format_timestamp(datetime(2026, 1, 31, 8, 15)) == "2026-01-31 08:15:00Z"
        cet = timezone(timedelta(hours=1))
        assert format_timestamp(datetime(2026, 1, 31, 9, 15, tzinfo=cet)) == "2026-01-31 08:15:00Z"


class TestUserList:
    @pytest.mark.asyncio
    async def test_records(self, services, fake_api):
        fake_api.users = [
            user("alice", is_admin=True, last_login_utc=datetime(2026, 3, 1, 12, 0)),
            user("bob", active=False),
        ]
        vm = UserListViewModel(services)

        await vm.initialize_async()

        alice, bob = vm.records
        assert [c.text for c in alice.cells] == ["alice", "Yes", "Yes", "-", "2026-03-01 12:00:00Z"]
        assert [c.text for c in bob.cells] == ["bob", "No", "No", "-", "-"]
        assert vm.get_navigate_url(bob.item) == f"/card/users/{bob.item.id}"
        assert not vm.can_load_more

    @pytest.mark.asyncio
    async def test_search(self, services, fake_api):
        fake_api.users = [user("alice"), user("bob")]
        vm = UserListViewModel(services)
        vm.set_search("AL")
        await vm.initialize_async()
        assert [u.username for u in vm.items] == ["alice"]

    @pytest.mark.asyncio
    async def test_failure_yields_empty_list(self, services, fake_api):
        fake_api.fail("list_users", "forbidden")
        vm = UserListViewModel(services)

        await vm.initialize_async()

        assert vm.items == []
        assert vm.is_empty
        assert vm.last_error is None


class TestUserCardLoad:
    @pytest.mark.asyncio
    async def test_existing_user(self, services, fake_api):
        locked = datetime.now(timezone.utc) + timedelta(hours=1)
        u = user("bob", is_admin=True, lockout_end=locked)
        fake_api.users = [u]
        vm = UserCardViewModel(services)

        await vm.initialize_async(u.id)

        assert vm.title == "bob"
        assert vm.field_text(F_IS_ADMIN) == CHECK_MARK
        assert vm.field(F_IS_ADMIN).bool_value is True
        assert vm.field(F_ACTIVE).bool_value is True
        assert vm.field_text(F_LOCKED_UNTIL) == format_timestamp(locked)
        assert not vm.field(F_USERNAME).editable

    @pytest.mark.asyncio
    async def test_new_user(self, services):
        vm = UserCardViewModel(services)
        vm.set_init_value("carol")

        await vm.initialize_async(EMPTY_ID)

        assert vm.user.id == EMPTY_ID
        assert vm.field_text(F_USERNAME) == "carol"
        assert vm.field(F_USERNAME).editable
        assert vm.field(F_IS_ADMIN).editable

    @pytest.mark.asyncio
    async def test_not_found_is_localized(self, services):
        vm = UserCardViewModel(services)
        await vm.initialize_async(uuid4())
        assert vm.user is None
        assert vm.last_error == "The record was not found."
        assert vm.last_error_code == "Err_NotFound"
        assert vm.field_text(F_USERNAME) == ""


class TestUserCardSave:
    """New users are created and then updated with the remaining settings."""

    @pytest.mark.asyncio
    async def test_create_then_update(self, services, fake_api, events):
        vm = UserCardViewModel(services)
        await vm.initialize_async(EMPTY_ID)
        events.attach(vm)
        vm.validate_field_value(vm.field(F_USERNAME), "  carol ")
        vm.validate_field_value(vm.field(F_IS_ADMIN), True)

        assert await vm.save_async()

        create = fake_api.called("create_user")[0]["request"]
        assert create.username == "carol"
        assert create.is_admin is True
        assert len(create.password) >= 32
        update = fake_api.called("update_user")[0]
        assert update["user_id"] == vm.id
        assert update["request"].active is True
        assert vm.id != EMPTY_ID
        assert events.actions[-1].action == "Saved"
        assert events.actions[-1].payload_text == str(vm.id)
        assert not vm.has_pending_changes

    @pytest.mark.asyncio
    async def test_create_failure(self, services, fake_api):
        fake_api.fail("create_user", "Username taken", "Err_Duplicate")
        vm = UserCardViewModel(services)
        vm.set_init_value("alice")
        await vm.initialize_async(EMPTY_ID)

        assert not await vm.save_async()
        assert vm.last_error == "Username taken"
        assert vm.is_new
        assert fake_api.called("update_user") == []

    @pytest.mark.asyncio
    async def test_update_existing_does_not_raise_saved(self, services, fake_api, events):
        u = user("bob")
        fake_api.users = [u]
        vm = UserCardViewModel(services)
        await vm.initialize_async(u.id)
        events.attach(vm)

        assert await vm.save_async()
        assert fake_api.called("create_user") == []
        assert events.action_names() == []

    @pytest.mark.asyncio
    async def test_delete(self, services, fake_api, events):
        u = user("bob")
        fake_api.users = [u]
        vm = UserCardViewModel(services)
        await vm.initialize_async(u.id)
        events.attach(vm)

        assert await vm.delete_async()
        assert events.action_names() == ["Deleted"]

        fake_api.fail("delete_user", "gone")
        assert not await vm.delete_async()
        assert vm.last_error == "gone"


class TestUserCardStatus:
    @pytest.mark.asyncio
    async def test_disable_then_enable(self, services, fake_api, localizer):
        u = user("bob")
        fake_api.users = [u]
        vm = UserCardViewModel(services)
        await vm.initialize_async(u.id)

        assert "Deactivate" in action_ids(vm.get_ribbon_registers(localizer))
        await find_action(vm.get_ribbon_registers(localizer), "Deactivate").invoke()

        assert vm.user.active is False
        assert vm.field(F_ACTIVE).bool_value is False
        ids = action_ids(vm.get_ribbon_registers(localizer))
        assert "Activate" in ids and "Deactivate" not in ids

        assert await vm.enable_async()
        assert vm.user.active is True
        assert fake_api.called("update_user")[-1]["request"].username == "bob"

    @pytest.mark.asyncio
    async def test_admins_cannot_be_deactivated(self, services, fake_api, localizer):
        u = user("root", is_admin=True)
        fake_api.users = [u]
        vm = UserCardViewModel(services)
        await vm.initialize_async(u.id)
        ids = action_ids(vm.get_ribbon_registers(localizer))
        assert "Deactivate" not in ids and "Activate" not in ids

    @pytest.mark.asyncio
    async def test_unblock_locked_user(self, services, fake_api, localizer):
        u = user("bob", lockout_end=datetime.now(timezone.utc) + timedelta(minutes=30))
        fake_api.users = [u]
        vm = UserCardViewModel(services)
        await vm.initialize_async(u.id)

        await find_action(vm.get_ribbon_registers(localizer), "Unblock").invoke()

        assert vm.user.lockout_end is None
        assert "Unblock" not in action_ids(vm.get_ribbon_registers(localizer))

    @pytest.mark.asyncio
    async def test_expired_lockout_has_no_unblock(self, services, fake_api, localizer):
        u = user("bob", lockout_end=datetime(2020, 1, 1))
        fake_api.users = [u]
        vm = UserCardViewModel(services)
        await vm.initialize_async(u.id)
        assert "Unblock" not in action_ids(vm.get_ribbon_registers(localizer))


class TestUserCardRibbon:
    @pytest.mark.asyncio
    async def test_new_user_ribbon(self, services, localizer):
        vm = UserCardViewModel(services)
        await vm.initialize_async(EMPTY_ID)
        registers = vm.get_ribbon_registers(localizer)
        assert not find_action(registers, "Save").disabled
        assert find_action(registers, "Delete").disabled
        assert "SetPassword" not in action_ids(registers)

    @pytest.mark.asyncio
    async def test_set_password_overlay(self, services, fake_api, localizer, events):
        u = user("bob")
        fake_api.users = [u]
        vm = UserCardViewModel(services)
        await vm.initialize_async(u.id)
        events.attach(vm)
        registers = vm.get_ribbon_registers(localizer)
        assert find_action(registers, "Save").disabled

        await find_action(registers, "SetPassword").invoke()

        spec = events.actions[-1].payload_object
        assert events.actions[-1].action == "SetPassword"
        assert spec.component_type == "SetPasswordOverlay"
        assert spec.parameters["UserId"] == u.id

    @pytest.mark.asyncio
    async def test_no_symbol_upload(self, services, fake_api):
        u = user("bob")
        fake_api.users = [u]
        vm = UserCardViewModel(services)
        await vm.initialize_async(u.id)
        assert await vm.validate_symbol_async(io.BytesIO(b"x"), "me.png") is None
        assert fake_api.called("upload_attachment") == []
