"""
Test suite for monetary amount handling

Validates that amounts are parsed exactly, never rounded silently, and
that nothing float-based reaches the ledger.
"""

import pytest
from decimal import Decimal

from wallet_ledger.errors import InvalidAmount
from wallet_ledger.money import ZERO, decimal_from_string, format_amount, to_amount


class TestDecimalFromString:
    """Test tolerant string parsing"""

    @pytest.mark.parametrize("value,expected", [
        ("100", Decimal('100')),
        ("  42.50 ", Decimal('42.50')),
        ("$1,250.00", Decimal('1250.00')),
        ("1,000", Decimal('1000')),
        ("12,50", Decimal('12.50')),
        ("€ 3.10", Decimal('3.10')),
        ("1,000,000", Decimal('1000000')),
        ("-7.25", Decimal('-7.25')),
    ])
    def test_valid_strings(self, value, expected):
        assert decimal_from_string(value) == expected

    @pytest.mark.parametrize("value", ["", "abc", "12abc", "1.2.3"])
    def test_invalid_strings(self, value):
        with pytest.raises(InvalidAmount):
            decimal_from_string(value)

    def test_invalid_amount_is_value_error(self):
        with pytest.raises(ValueError):
            decimal_from_string("not a number")


class TestToAmount:
    """Test amount validation and normalization"""

    def test_decimal_is_quantized(self):
        amount = to_amount(Decimal('5'))
        assert amount == Decimal('5.00')
        assert str(amount) == '5.00'

    def test_int_and_string_inputs(self):
        assert to_amount(7) == Decimal('7.00')
        assert to_amount("0.01") == Decimal('0.01')

    @pytest.mark.parametrize("value", [0, -1, Decimal('0'), Decimal('-0.01'), "0", "-3"])
    def test_non_positive_rejected(self, value):
        with pytest.raises(InvalidAmount, match="positive"):
            to_amount(value)

    @pytest.mark.parametrize("value", [1.5, 0.1, True, False])
    def test_float_and_bool_rejected(self, value):
        with pytest.raises(InvalidAmount):
            to_amount(value)

    @pytest.mark.parametrize("value", [None, [1], {"amount": 1}])
    def test_unsupported_types_rejected(self, value):
        with pytest.raises(InvalidAmount, match="Unsupported"):
            to_amount(value)

    @pytest.mark.parametrize("value", [Decimal('NaN'), Decimal('Infinity'), "NaN", "Infinity"])
    def test_non_finite_rejected(self, value):
        with pytest.raises(InvalidAmount, match="finite"):
            to_amount(value)

    def test_excess_precision_rejected(self):
        with pytest.raises(InvalidAmount, match="decimal places"):
            to_amount(Decimal('10.005'))

    def test_trailing_zeros_allowed(self):
        assert to_amount(Decimal('10.500')) == Decimal('10.50')

    def test_custom_precision(self):
        assert to_amount(Decimal('0.001'), precision=3) == Decimal('0.001')
        assert to_amount(250, precision=0) == Decimal('250')

    def test_max_amount(self):
        assert to_amount(Decimal('100'), max_amount=Decimal('100')) == Decimal('100.00')
        with pytest.raises(InvalidAmount, match="exceeds maximum"):
            to_amount(Decimal('100.01'), max_amount=Decimal('100'))

    def test_absurdly_large_amount_rejected(self):
        with pytest.raises(InvalidAmount):
            to_amount(Decimal('1E+40'))

    def test_error_details_include_value(self):
        with pytest.raises(InvalidAmount) as exc_info:
            to_amount("-5")
        assert exc_info.value.details["value"] == "-5"
        assert exc_info.value.to_dict()["error"] == "invalid_amount"


class TestFormatAmount:
    """Test display formatting"""

    def test_grouping_and_precision(self):
        assert format_amount(Decimal('1234567.5')) == "1,234,567.50"
        assert format_amount(ZERO) == "0.00"
        assert format_amount(Decimal('1500'), precision=0) == "1,500"
