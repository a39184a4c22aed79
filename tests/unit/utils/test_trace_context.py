"""Unit tests for interaction id tracking."""

import asyncio

import pytest

from finance_ui.utils.trace_context import generate_interaction_id, get_interaction_id, new_interaction


class TestInteractionId:
    """Tests for the interaction scope."""

    def test_placeholder_outside_interaction(self):
        assert get_interaction_id() == "------"

    def test_generated_id_is_six_hex_chars(self):
        interaction_id = generate_interaction_id()
        assert len(interaction_id) == 6
        int(interaction_id, 16)

    def test_scope_sets_and_restores(self):
        with new_interaction("abc123") as outer:
            assert outer == "abc123"
            assert get_interaction_id() == "abc123"
            with new_interaction() as inner:
                assert get_interaction_id() == inner
                assert inner != "abc123"
            assert get_interaction_id() == "abc123"
        assert get_interaction_id() == "------"

    @pytest.mark.asyncio
    async def test_tasks_keep_their_own_id(self):
        async def run(name: str) -> str:
            with new_interaction(name):
                await asyncio.sleep(0)
                return get_interaction_id()

        assert await asyncio.gather(run("aaaaaa"), run("bbbbbb")) == ["aaaaaa", "bbbbbb"]
