"""
Credit card and invoice models.

A CreditCard has a closing day. Purchases dated after the closing day roll
into the following month's invoice. Each (card, reference month) pair has
at most one CreditCardInvoice bucket that accumulates the purchases (or
installment shares) falling into that month.

Buckets are created on first accrual and never deleted, only reduced
(never below zero). Paying a bucket is the only path by which card spending
reaches an account balance.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q, Sum
from django.db.models.functions import Coalesce

from core.model_mixins import OwnedQuerySet, UUIDPrimaryKeyMixin, UserOwnedMixin
from core.models import BaseModel


class CreditCardQuerySet(OwnedQuerySet):
    """QuerySet adding the unpaid-invoice usage aggregate."""

    def with_used_amount(self) -> CreditCardQuerySet:
        return self.annotate(
            used_amount=Coalesce(
                Sum("invoices__total", filter=Q(invoices__paid=False)),
                Decimal("0.00"),
                output_field=models.DecimalField(max_digits=14, decimal_places=2),
            )
        )


class CreditCard(UUIDPrimaryKeyMixin, UserOwnedMixin, BaseModel):
    """
    A user's credit card.

    Fields:
        name: Display name
        limit: Total credit limit
        closing_day: Day of month the statement closes (1-31)
        due_day: Day of month the invoice is due (1-31)
        color: Display color for the client

    Derived values (see CreditCardQuerySet.with_used_amount):
        used_amount: Sum of totals of unpaid invoices
        available_limit: limit - used_amount
    """

    name = models.CharField(max_length=100)
    limit = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        help_text="Total credit limit",
    )
    closing_day = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(31)],
        help_text="Day of month the statement closes",
    )
    due_day = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(31)],
        help_text="Day of month the invoice is due",
    )
    color = models.CharField(max_length=20, blank=True, default="")

    objects = CreditCardQuerySet.as_manager()

    class Meta:
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(
                condition=Q(closing_day__gte=1) & Q(closing_day__lte=31),
                name="credit_card_closing_day_range",
            ),
            models.CheckConstraint(
                condition=Q(due_day__gte=1) & Q(due_day__lte=31),
                name="credit_card_due_day_range",
            ),
        ]

    def __str__(self) -> str:
        return self.name

    def get_used_amount(self) -> Decimal:
        """Sum of the totals of this card's unpaid invoices."""
        annotated = getattr(self, "used_amount", None)
        if annotated is not None:
            return annotated
        result = self.invoices.filter(paid=False).aggregate(
            used=Coalesce(
                Sum("total"),
                Decimal("0.00"),
                output_field=models.DecimalField(max_digits=14, decimal_places=2),
            )
        )
        return result["used"]

    def get_available_limit(self) -> Decimal:
        return self.limit - self.get_used_amount()


class CreditCardInvoice(UUIDPrimaryKeyMixin, UserOwnedMixin, BaseModel):
    """
    A monthly invoice bucket for a credit card.

    Fields:
        credit_card: Card this bucket belongs to
        reference_month: Bucket key in ``YYYY-MM`` form
        total: Accumulated amount for the month, never negative
        paid: Whether the bucket has been paid
        paid_at: When it was paid
        paid_with_account: Account the payment was debited from

    Constraints:
        - One bucket per (credit_card, reference_month)
        - total >= 0
    """

    credit_card = models.ForeignKey(
        CreditCard,
        on_delete=models.CASCADE,
        related_name="invoices",
    )
    reference_month = models.CharField(
        max_length=7,
        help_text="Invoice month in YYYY-MM form",
    )
    total = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    paid = models.BooleanField(default=False, db_index=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    paid_with_account = models.ForeignKey(
        "finance.Account",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta:
        ordering = ["-reference_month"]
        constraints = [
            models.UniqueConstraint(
                fields=["credit_card", "reference_month"],
                name="unique_invoice_per_card_month",
            ),
            models.CheckConstraint(
                condition=Q(total__gte=0),
                name="credit_card_invoice_total_non_negative",
            ),
        ]

    def __str__(self) -> str:
        state = "paid" if self.paid else "open"
        return f"{self.credit_card_id} {self.reference_month} ({state})"
