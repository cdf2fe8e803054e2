"""
Investment model.

A position the user records manually (a CDB, a fund, a stock lot). Values
are typed in by the user; nothing here is priced or accrued automatically,
and investments are independent from account balances.
"""

from __future__ import annotations

from decimal import Decimal

from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin, UserOwnedMixin
from core.models import BaseModel


class Investment(UUIDPrimaryKeyMixin, UserOwnedMixin, BaseModel):
    """
    A manually tracked investment.

    Fields:
        name: Display name
        type: Free-form kind of investment ("cdb", "stocks", "fund")
        principal: Amount originally invested
        current_value: Latest value entered by the user
        return_rate: Expected or observed yearly return, in percent
        start_date: Date the money was invested
    """

    name = models.CharField(max_length=100)
    type = models.CharField(max_length=50, help_text="Kind of investment")
    principal = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        help_text="Amount originally invested",
    )
    current_value = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        help_text="Latest value entered by the user",
    )
    return_rate = models.DecimalField(
        max_digits=7,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Yearly return in percent",
    )
    start_date = models.DateField()

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(principal__gte=0),
                name="investment_principal_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(current_value__gte=0),
                name="investment_current_value_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.type})"

    @property
    def gain(self) -> Decimal:
        """Current value minus principal; negative for a loss."""
        return self.current_value - self.principal
