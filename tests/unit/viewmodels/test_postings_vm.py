"""Unit tests for posting list view models."""

from datetime import datetime
from decimal import Decimal
from uuid import uuid4

import pytest

from finance_ui.domain.models import PostingKind, SecurityPostingSubType
from finance_ui.viewmodels import (
    AccountPostingsListViewModel,
    ContactPostingsListViewModel,
    SavingsPlanPostingsListViewModel,
    SecurityPostingsListViewModel,
)
from finance_ui.viewmodels.common import find_action
from finance_ui.viewmodels.postings import POSTINGS_PAGE_SIZE, posting_kind_text


class TestPaging:
    """Postings page by skip/take with the page length driving can_load_more."""

    @pytest.mark.asyncio
    async def test_account_postings_page_by_skip(self, services, fake_api, make_posting):
        account_id = uuid4()
        fake_api.postings[account_id] = [make_posting(i) for i in range(POSTINGS_PAGE_SIZE + 5)]
        vm = AccountPostingsListViewModel(services, entity_id=account_id)

        await vm.initialize_async()
        assert len(vm.items) == POSTINGS_PAGE_SIZE
        assert vm.can_load_more

        await vm.load_more_async()
        assert len(vm.items) == POSTINGS_PAGE_SIZE + 5
        assert not vm.can_load_more

        calls = fake_api.called("list_account_postings")
        assert [c["skip"] for c in calls] == [0, POSTINGS_PAGE_SIZE]
        assert all(c["take"] == POSTINGS_PAGE_SIZE for c in calls)

    @pytest.mark.asyncio
    async def test_reload_restarts_at_zero(self, services, fake_api, make_posting):
        contact_id = uuid4()
        fake_api.postings[contact_id] = [make_posting(i) for i in range(3)]
        vm = ContactPostingsListViewModel(services, entity_id=contact_id)

        await vm.initialize_async()
        await vm.reload_async()

        assert len(vm.items) == 3
        assert [c["skip"] for c in fake_api.called("list_contact_postings")] == [0, 0]

    @pytest.mark.asyncio
    async def test_failed_page_ends_paging(self, services, fake_api):
        fake_api.fail("list_savings_plan_postings", "timeout")
        vm = SavingsPlanPostingsListViewModel(services, entity_id=uuid4())

        await vm.initialize_async()

        assert vm.items == []
        assert not vm.can_load_more
        assert vm.is_empty

    @pytest.mark.asyncio
    async def test_filters_are_passed(self, services, fake_api):
        vm = AccountPostingsListViewModel(services, entity_id=uuid4())
        vm.set_search("rent")
        vm.set_range(datetime(2026, 1, 1), datetime(2026, 3, 31))

        await vm.initialize_async()

        call = fake_api.called("list_account_postings")[0]
        assert call["q"] == "rent"
        assert call["date_from"] == datetime(2026, 1, 1)
        assert call["date_to"] == datetime(2026, 3, 31)

    @pytest.mark.asyncio
    async def test_security_postings_have_no_search(self, services, fake_api):
        vm = SecurityPostingsListViewModel(services, entity_id=uuid4())
        vm.set_search("ignored")

        await vm.initialize_async()

        call = fake_api.called("list_security_postings")[0]
        assert "q" not in call
        assert not vm.allow_search_filtering

    def test_set_parent(self, services):
        vm = AccountPostingsListViewModel(services)
        entity_id = uuid4()
        vm.set_parent(entity_id)
        assert vm.entity_id == entity_id


class TestRecords:
    @pytest.mark.asyncio
    async def test_columns_and_cells(self, services, fake_api, make_posting):
        account_id = uuid4()
        posting = make_posting(4, "-12.34", recipient_name="Landlord", description=None)
        fake_api.postings[account_id] = [posting]
        vm = AccountPostingsListViewModel(services, entity_id=account_id)

        await vm.initialize_async()

        assert [c.key for c in vm.columns] == [
            "date", "valuta", "amount", "kind", "recipient", "subject", "description",
        ]
        cells = vm.records[0].cells
        assert cells[0].text == "2026-01-05"
        assert cells[2].amount == Decimal("-12.34")
        assert cells[4].text == "Landlord"
        assert cells[6].text == ""
        assert vm.records[0].item is posting
        assert vm.get_navigate_url(posting) == f"/card/postings/{posting.id}"

    def test_kind_text(self, make_posting):
        buy = make_posting(0, kind=PostingKind.SECURITY, security_sub_type=SecurityPostingSubType.BUY)
        plain = make_posting(0, kind=PostingKind.SECURITY)
        bank = make_posting(0, kind=PostingKind.BANK)
        assert posting_kind_text(buy) == "Security-Buy"
        assert posting_kind_text(plain) == "Security"
        assert posting_kind_text(bank) == "Bank"


class TestExport:
    """Export links carry format, search and date range."""

    def test_url_with_filters(self, services):
        entity_id = uuid4()
        vm = AccountPostingsListViewModel(services, entity_id=entity_id)
        vm.set_search("rent x")
        vm.set_range(datetime(2026, 1, 1), datetime(2026, 2, 28))

        assert vm.get_export_url("csv") == (
            f"/api/postings/account/{entity_id}/export?format=csv&q=rent%20x&from=2026-01-01&to=2026-02-28"
        )

    def test_url_without_filters(self, services):
        entity_id = uuid4()
        vm = SavingsPlanPostingsListViewModel(services, entity_id=entity_id)
        assert vm.get_export_url("xlsx") == f"/api/postings/savings-plan/{entity_id}/export?format=xlsx"
        assert vm.build_export_url("/x", "") == "/x"

    @pytest.mark.asyncio
    async def test_ribbon_buttons_forward_urls(self, services, localizer, events):
        entity_id = uuid4()
        vm = ContactPostingsListViewModel(services, entity_id=entity_id)
        events.attach(vm)
        await vm.initialize_async()

        registers = vm.get_ribbon_registers(localizer)
        csv = find_action(registers, "ExportCsv")
        assert not csv.disabled

        await csv.invoke()

        assert events.actions[-1].action == "ExportCsv"
        assert events.actions[-1].payload_text == f"/api/postings/contact/{entity_id}/export?format=csv"

    def test_export_disabled_while_loading(self, services, localizer):
        vm = AccountPostingsListViewModel(services, entity_id=uuid4())
        vm.loading = True
        registers = vm.get_ribbon_registers(localizer)
        assert find_action(registers, "ExportCsv").disabled
        assert find_action(registers, "ExportXlsx").disabled
        assert not find_action(registers, "Back").disabled
