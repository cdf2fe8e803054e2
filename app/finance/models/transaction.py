"""
Transaction model.

A Transaction is one income or expense entry. It is attributed to exactly
one of an account (the balance moves immediately) or a credit card (the
amount accrues into an invoice bucket). Transfer legs are account-attributed
rows without a category.

A row with ``recurring=True`` is a recurring *definition*. The sweep
materializes concrete occurrences from it, each tagged with
``recurrence_group_id`` pointing back at the definition's id. Definitions
move through three states:

    ACTIVE   recurring=True,  recurrence_paused=False
    PAUSED   recurring=True,  recurrence_paused=True
    FINISHED recurring=False, next_due_date=None (terminal)

Financial fields (amount, type, date, account, credit_card, installments)
are only ever changed through LedgerService.update, which reverses the
stored effect before applying the new one.
"""

from __future__ import annotations

from django.db import models
from django.db.models import Q

from core.model_mixins import OwnedQuerySet, UUIDPrimaryKeyMixin, UserOwnedMixin
from core.models import BaseModel


class TransactionType(models.TextChoices):
    """Direction of a transaction's effect on an account."""

    INCOME = "income", "Income"
    EXPENSE = "expense", "Expense"


class Recurrence(models.TextChoices):
    """
    Cadence of a recurring definition.

    Values:
        DAILY: +1 day
        WEEKLY: +7 days
        MONTHLY: +1 calendar month (end-of-month clamped)
        YEARLY: +1 calendar year
    """

    DAILY = "daily", "Daily"
    WEEKLY = "weekly", "Weekly"
    MONTHLY = "monthly", "Monthly"
    YEARLY = "yearly", "Yearly"


class RecurrenceState(models.TextChoices):
    """Lifecycle state of a recurring definition (derived, not stored)."""

    ACTIVE = "active", "Active"
    PAUSED = "paused", "Paused"
    FINISHED = "finished", "Finished"


class TransactionQuerySet(OwnedQuerySet):
    """QuerySet helpers for the recurrence sweep and group listings."""

    def recurring_due(self, today) -> TransactionQuerySet:
        """Active definitions whose next due date is on or before ``today``."""
        return self.filter(
            recurring=True,
            recurrence_paused=False,
            next_due_date__isnull=False,
            next_due_date__lte=today,
        )

    def in_group(self, definition_id) -> TransactionQuerySet:
        """Occurrences materialized from the given definition."""
        return self.filter(recurrence_group_id=definition_id)


class Transaction(UUIDPrimaryKeyMixin, UserOwnedMixin, BaseModel):
    """
    An income or expense entry.

    Fields:
        account: Account whose balance this moves (null for card rows)
        credit_card: Card whose invoice this accrues into (null for account rows)
        category: Optional reporting category
        description: Free text label
        amount: Strictly positive amount
        type: income or expense
        date: Date the entry applies to (drives invoice bucketing)

    Recurrence fields (definitions only, except recurrence_group_id):
        recurring: True while the definition is Active or Paused
        recurrence: Cadence
        next_due_date: Date of the next occurrence, None once Finished
        recurrence_count: Cap on occurrences, None for unlimited
        recurrence_current: Occurrences fired so far (the definition counts as 1)
        recurrence_group_id: On occurrences, the id of the originating definition
        recurrence_paused: Excludes the definition from the sweep

    Installment fields (card rows only):
        installments: Number of monthly invoice buckets the amount is spread over
        installment_current: Which installment this row represents
    """

    account = models.ForeignKey(
        "finance.Account",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="transactions",
    )
    credit_card = models.ForeignKey(
        "finance.CreditCard",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="transactions",
    )
    category = models.ForeignKey(
        "finance.Category",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="transactions",
    )
    description = models.CharField(max_length=255, blank=True, default="")
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    type = models.CharField(max_length=10, choices=TransactionType.choices)
    date = models.DateField(db_index=True)

    # Recurrence
    recurring = models.BooleanField(default=False)
    recurrence = models.CharField(
        max_length=10,
        choices=Recurrence.choices,
        null=True,
        blank=True,
    )
    next_due_date = models.DateField(null=True, blank=True)
    recurrence_count = models.PositiveIntegerField(null=True, blank=True)
    recurrence_current = models.PositiveIntegerField(default=0)
    recurrence_group_id = models.UUIDField(null=True, blank=True, db_index=True)
    recurrence_paused = models.BooleanField(default=False)

    # Installments
    installments = models.PositiveIntegerField(null=True, blank=True)
    installment_current = models.PositiveIntegerField(null=True, blank=True)

    objects = TransactionQuerySet.as_manager()

    class Meta:
        ordering = ["-date", "-created_at"]
        indexes = [
            models.Index(fields=["user", "date"], name="transaction_user_date_idx"),
            models.Index(
                fields=["recurring", "recurrence_paused", "next_due_date"],
                name="transaction_recurring_due_idx",
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount__gt=0),
                name="transaction_amount_positive",
            ),
            models.CheckConstraint(
                condition=Q(account__isnull=True) | Q(credit_card__isnull=True),
                name="transaction_single_attribution",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.type} {self.amount} on {self.date} ({self.description})"

    @property
    def is_definition(self) -> bool:
        """True for rows that own (or owned) a recurrence schedule."""
        return self.recurrence is not None and self.recurrence_group_id is None

    @property
    def recurrence_state(self) -> RecurrenceState | None:
        if not self.is_definition:
            return None
        if not self.recurring:
            return RecurrenceState.FINISHED
        if self.recurrence_paused:
            return RecurrenceState.PAUSED
        return RecurrenceState.ACTIVE
