"""
Decimal money helpers.

Amounts are ``decimal.Decimal`` with two decimal places everywhere. Float
input is converted through ``str`` so 0.1 stays 0.10.

Usage:
    from finance.money import to_money, split_installments

    to_money("30")                             # Decimal("30.00")
    split_installments(Decimal("100.00"), 3)   # Decimal("33.33")
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .exceptions import InvalidAmount

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    """
    Coerce a number or numeric string to a two-place Decimal.

    Raises:
        InvalidAmount: If the value is not a finite number
    """
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError) as exc:
            raise InvalidAmount(
                f"Invalid amount: {value!r}",
                details={"amount": str(value)},
            ) from exc
    if not amount.is_finite():
        raise InvalidAmount(
            f"Invalid amount: {value!r}",
            details={"amount": str(value)},
        )
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def split_installments(total: Decimal, count: int) -> Decimal:
    """
    Per-installment share of ``total`` over ``count`` installments.

    Rounded half-up to the cent with no remainder distribution, so the shares
    can add up to a cent more or less than the total. Reversal uses the same
    share, which keeps create-then-delete exact.
    """
    return (to_money(total) / count).quantize(CENT, rounding=ROUND_HALF_UP)


def signed_amount(amount: Decimal, transaction_type: str) -> Decimal:
    """Income counts positive, expense negative."""
    amount = to_money(amount)
    return amount if transaction_type == "income" else -amount


def format_money(amount: Decimal) -> str:
    """Render an amount for notification text, e.g. ``1,234.50``."""
    return f"{to_money(amount):,.2f}"
