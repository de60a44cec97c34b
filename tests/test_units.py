"""Tests for amount parsing and formatting."""

import pytest

from uniswap_mcp.errors import ChainError, ErrorKind
from uniswap_mcp.units import format_units, parse_units


class TestParseUnits:
    """Decimal string -> minimal units."""

    def test_whole_ether(self):
        assert parse_units("1", 18) == 10**18
        assert parse_units("1.0", 18) == 10**18

    def test_fractional_ether(self):
        assert parse_units("0.5", 18) == 5 * 10**17
        assert parse_units("0.000000000000000001", 18) == 1

    def test_large_amount_is_exact(self):
        """No rounding beyond the default 28-digit decimal context."""
        assert parse_units("123456789012.123456789012345678", 18) == 123456789012123456789012345678

    def test_whitespace_is_ignored(self):
        assert parse_units("  2.5 ", 6) == 2_500_000

    @pytest.mark.parametrize("amount", ["", "abc", "1,5", "NaN", "Infinity"])
    def test_malformed_amount(self, amount):
        with pytest.raises(ChainError) as exc_info:
            parse_units(amount, 18)
        assert exc_info.value.kind == ErrorKind.INPUT

    @pytest.mark.parametrize("amount", ["0", "-1", "0.0"])
    def test_non_positive_amount(self, amount):
        with pytest.raises(ChainError) as exc_info:
            parse_units(amount, 18)
        assert exc_info.value.kind == ErrorKind.INPUT
        assert "positive" in exc_info.value.message

    def test_too_many_decimals(self):
        with pytest.raises(ChainError) as exc_info:
            parse_units("1.0000001", 6)
        assert "decimal places" in exc_info.value.message


class TestFormatUnits:
    """Minimal units -> decimal string."""

    def test_whole_value_has_no_fraction(self):
        assert format_units(10**18, 18) == "1"
        assert format_units(0, 18) == "0"

    def test_trailing_zeros_removed(self):
        assert format_units(1_500_000_000_000_000_000, 18) == "1.5"

    def test_usdc_precision(self):
        assert format_units(250_123_456, 6) == "250.123456"

    def test_small_value_is_zero_padded(self):
        assert format_units(1, 18) == "0.000000000000000001"
        assert format_units(1_000, 6) == "0.001"

    def test_negative_value(self):
        assert format_units(-1_500_000, 6) == "-1.5"

    def test_zero_decimals(self):
        assert format_units(42, 0) == "42"
