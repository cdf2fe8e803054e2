"""
Goal model.

A savings goal the user tracks by hand: how much they want to reach, how
much they have put aside so far and an optional deadline. Goals are not
linked to accounts and never move money.
"""

from __future__ import annotations

from decimal import Decimal

from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin, UserOwnedMixin
from core.models import BaseModel


class Goal(UUIDPrimaryKeyMixin, UserOwnedMixin, BaseModel):
    """
    A user-defined savings target.

    Fields:
        name: Display name ("Emergency fund")
        target_amount: Amount to reach, greater than zero
        current_amount: Amount saved so far, never negative
        deadline: Optional date the user wants to reach the target by
        icon: Icon identifier used by the client
    """

    name = models.CharField(max_length=100)
    target_amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        help_text="Amount the user wants to reach",
    )
    current_amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Amount saved so far",
    )
    deadline = models.DateField(null=True, blank=True)
    icon = models.CharField(max_length=50, blank=True, default="")

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(target_amount__gt=0),
                name="goal_target_amount_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(current_amount__gte=0),
                name="goal_current_amount_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return self.name

    @property
    def is_reached(self) -> bool:
        return self.current_amount >= self.target_amount
