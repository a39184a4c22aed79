"""Unit tests for the Ok/Err result type."""

from uuid import UUID

import pytest

from finance_ui.utils.result import Err, Ok, try_result


class TestOk:
    """Tests for successful results."""

    def test_unwrap_and_flags(self):
        result = Ok(5)
        assert result.is_ok()
        assert not result.is_err()
        assert result.unwrap() == 5
        assert result.unwrap_or(0) == 5
        assert result.error is None

    def test_map_and_then(self):
        assert Ok(2).map(lambda v: v * 3) == Ok(6)
        assert Ok(2).and_then(lambda v: Err("no") if v < 3 else Ok(v)) == Err("no")

    def test_pattern_matching(self):
        match Ok("x"):
            case Ok(value):
                assert value == "x"
            case Err():
                pytest.fail("Ok matched Err")


class TestErr:
    """Tests for failed results."""

    def test_unwrap_or_returns_default(self):
        result = Err("bad")
        assert result.is_err()
        assert result.unwrap_or(7) == 7
        assert result.value is None

    def test_unwrap_raises(self):
        with pytest.raises(ValueError, match="bad"):
            Err("bad").unwrap()

    def test_map_is_noop(self):
        err = Err("bad")
        assert err.map(lambda v: v + 1) is err
        assert err.and_then(lambda v: Ok(v)) is err


class TestTryResult:
    def test_captures_matching_exception(self):
        result = try_result(lambda: UUID("not-a-guid"), ValueError)
        assert result.is_err()
        assert "hexadecimal" in result.error

    def test_passes_value_through(self):
        assert try_result(lambda: 1 + 1) == Ok(2)

    def test_other_exceptions_propagate(self):
        def boom():
            raise KeyError("k")

        with pytest.raises(KeyError):
            try_result(boom, ValueError)
