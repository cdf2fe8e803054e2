"""
Category model.

Categories group transactions for reporting ("Groceries", "Salary"). Each
category is tied to one transaction type. Transfer legs carry no category.
"""

from __future__ import annotations

from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin, UserOwnedMixin
from core.models import BaseModel


class Category(UUIDPrimaryKeyMixin, UserOwnedMixin, BaseModel):
    """
    A user-defined income or expense category.

    Fields:
        name: Display name
        icon: Icon identifier used by the client
        type: income or expense (see TransactionType)
    """

    name = models.CharField(max_length=100)
    icon = models.CharField(max_length=50, blank=True, default="")
    type = models.CharField(
        max_length=10,
        choices=[("income", "Income"), ("expense", "Expense")],
        help_text="Transaction type this category applies to",
    )

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "categories"

    def __str__(self) -> str:
        return self.name
