"""Tests for the Decimal money helpers."""

from decimal import Decimal

import pytest

from finance.exceptions import InvalidAmount
from finance.money import format_money, signed_amount, split_installments, to_money


class TestToMoney:
    """Tests for to_money()."""

    def test_quantizes_to_cents(self):
        """Should return a two-place Decimal."""
        assert to_money("30") == Decimal("30.00")
        assert str(to_money(Decimal("12.5"))) == "12.50"

    def test_float_goes_through_str(self):
        """Should not carry binary float noise."""
        assert to_money(0.1) == Decimal("0.10")

    def test_rounds_half_up(self):
        """Should round a half cent up."""
        assert to_money("2.675") == Decimal("2.68")
        assert to_money("2.665") == Decimal("2.67")

    @pytest.mark.parametrize("value", ["abc", None, "NaN", "Infinity"])
    def test_rejects_non_numbers(self, value):
        """Should raise InvalidAmount for non-finite or non-numeric input."""
        with pytest.raises(InvalidAmount):
            to_money(value)


class TestSplitInstallments:
    """Tests for split_installments()."""

    def test_even_split(self):
        assert split_installments(Decimal("300.00"), 3) == Decimal("100.00")

    def test_share_is_rounded_without_remainder(self):
        """Should round each share; the shares may not add up to the total."""
        share = split_installments(Decimal("100.00"), 3)

        assert share == Decimal("33.33")
        assert share * 3 == Decimal("99.99")

    def test_share_rounds_half_up(self):
        assert split_installments(Decimal("0.05"), 2) == Decimal("0.03")


class TestSignedAmount:
    def test_income_is_positive(self):
        assert signed_amount(Decimal("10"), "income") == Decimal("10.00")

    def test_expense_is_negative(self):
        assert signed_amount(Decimal("10"), "expense") == Decimal("-10.00")


def test_format_money():
    """Should render thousands separators and two decimals."""
    assert format_money(Decimal("1234.5")) == "1,234.50"
