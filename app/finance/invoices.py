"""
Credit card invoice accrual.

Card purchases never touch an account balance directly. They accumulate in
monthly invoice buckets keyed by (card, ``YYYY-MM``), and reach an account
only when the invoice is paid.

Bucketing:
    A purchase dated after the card's closing day belongs to the next
    month's invoice; otherwise to the current month's. December purchases
    after the closing day roll into January of the following year.

Installments:
    A purchase in N installments puts ``round(amount / N, 2)`` into the
    buckets of the purchase date and of the dates 1..N-1 calendar months
    later. Reversal recomputes exactly the same buckets and share from the
    stored row, so no record of touched buckets is kept.

Usage:
    from finance.invoices import bucket_for, invoices

    bucket_for(date(2024, 12, 26), closing_day=25)  # "2025-01"

    with BaseService.atomic():
        invoices.apply(effect)
"""

from __future__ import annotations

import datetime
import uuid
from decimal import Decimal
from typing import TYPE_CHECKING

from dateutil.relativedelta import relativedelta
from django.db.models import F, Value
from django.db.models.functions import Greatest
from django.utils import timezone

from core.services import BaseService

from .balances import AccountBalanceStore, balances
from .exceptions import CreditCardNotFound, InvoiceAlreadyPaid, InvoiceNotFound
from .models import CreditCard, CreditCardInvoice
from .money import ZERO, split_installments, to_money

if TYPE_CHECKING:
    from .effects import FinancialEffect


def bucket_for(transaction_date: datetime.date, closing_day: int) -> str:
    """
    Reference month (``YYYY-MM``) of the invoice a purchase falls into.

    Example:
        bucket_for(date(2024, 3, 25), 25)   # "2024-03"
        bucket_for(date(2024, 3, 26), 25)   # "2024-04"
        bucket_for(date(2024, 12, 26), 25)  # "2025-01"
    """
    year, month = transaction_date.year, transaction_date.month
    if transaction_date.day > closing_day:
        month += 1
        if month > 12:
            month = 1
            year += 1
    return f"{year:04d}-{month:02d}"


def installment_dates(first_date: datetime.date, count: int) -> list[datetime.date]:
    """Purchase date plus each following calendar month, end-of-month clamped."""
    return [first_date + relativedelta(months=i) for i in range(count)]


def installment_buckets(
    first_date: datetime.date,
    closing_day: int,
    count: int,
) -> list[str]:
    return [bucket_for(d, closing_day) for d in installment_dates(first_date, count)]


class InvoiceAccrual(BaseService):
    """
    Adds to and subtracts from invoice buckets, and pays invoices.

    All methods must run inside the caller's unit of work.
    """

    def __init__(self, balance_store: AccountBalanceStore | None = None):
        self.balances = balance_store or balances

    def get_card(self, card_id: uuid.UUID, user_id=None) -> CreditCard:
        queryset = CreditCard.objects.all()
        if user_id is not None:
            queryset = queryset.owned_by(user_id)
        try:
            return queryset.get(id=card_id)
        except CreditCard.DoesNotExist:
            raise CreditCardNotFound(
                f"Credit card {card_id} not found",
                details={"credit_card_id": str(card_id)},
            )

    def accrue(
        self,
        card: CreditCard,
        reference_month: str,
        amount: Decimal,
    ) -> CreditCardInvoice:
        """
        Add ``amount`` to the card's bucket for ``reference_month``.

        Creates the bucket (unpaid) if it does not exist yet.
        """
        amount = to_money(amount)
        invoice, created = CreditCardInvoice.objects.get_or_create(
            credit_card=card,
            reference_month=reference_month,
            defaults={"user_id": card.user_id, "total": amount},
        )
        if not created:
            CreditCardInvoice.objects.filter(pk=invoice.pk).update(
                total=F("total") + amount
            )
            if invoice.paid:
                self.get_logger().warning(
                    "Accrued into an already paid invoice",
                    extra={
                        "invoice_id": str(invoice.id),
                        "reference_month": reference_month,
                        "amount": str(amount),
                    },
                )
        return invoice

    def spread_installments(
        self,
        card: CreditCard,
        first_date: datetime.date,
        per_installment: Decimal,
        count: int,
    ) -> list[str]:
        """Accrue ``per_installment`` into ``count`` consecutive buckets."""
        months = installment_buckets(first_date, card.closing_day, count)
        for month in months:
            self.accrue(card, month, per_installment)
        return months

    def subtract(self, card: CreditCard, reference_month: str, amount: Decimal) -> None:
        """Subtract from a bucket, clamping its total at zero."""
        amount = to_money(amount)
        CreditCardInvoice.objects.filter(
            credit_card=card,
            reference_month=reference_month,
        ).update(total=Greatest(F("total") - amount, Value(ZERO)))

    def apply(self, effect: FinancialEffect) -> None:
        """Accrue a card-attributed effect into its bucket(s)."""
        card = self.get_card(effect.credit_card_id, effect.user_id)
        count = effect.installment_count
        if count > 1:
            self.spread_installments(
                card,
                effect.date,
                split_installments(effect.amount, count),
                count,
            )
        else:
            self.accrue(card, bucket_for(effect.date, card.closing_day), effect.amount)

    def reverse(self, effect: FinancialEffect) -> None:
        """
        Undo ``apply`` for the same effect.

        Buckets and share are re-derived from the stored date, amount and
        installment count together with the card's current closing day.
        """
        card = self.get_card(effect.credit_card_id, effect.user_id)
        count = effect.installment_count
        share = split_installments(effect.amount, count) if count > 1 else effect.amount
        for month in installment_buckets(effect.date, card.closing_day, count):
            self.subtract(card, month, share)

    def pay_invoice(
        self,
        invoice_id: uuid.UUID,
        paying_account_id: uuid.UUID,
        user_id,
    ) -> CreditCardInvoice:
        """
        Debit the paying account by the invoice total and mark it paid.

        Raises:
            InvoiceNotFound: If the invoice does not exist for this user
            InvoiceAlreadyPaid: If it was paid before
            AccountNotFound: If the paying account does not exist for this user
        """
        with self.atomic():
            try:
                invoice = (
                    CreditCardInvoice.objects.select_for_update()
                    .owned_by(user_id)
                    .get(id=invoice_id)
                )
            except CreditCardInvoice.DoesNotExist:
                raise InvoiceNotFound(
                    f"Invoice {invoice_id} not found",
                    details={"invoice_id": str(invoice_id)},
                )

            if invoice.paid:
                raise InvoiceAlreadyPaid(
                    "Invoice already paid",
                    details={"invoice_id": str(invoice.id)},
                )

            self.balances.apply_delta(paying_account_id, -invoice.total, user_id=user_id)

            invoice.paid = True
            invoice.paid_at = timezone.now()
            invoice.paid_with_account_id = paying_account_id
            invoice.save(update_fields=["paid", "paid_at", "paid_with_account", "updated_at"])

        self.get_logger().info(
            "Invoice paid",
            extra={
                "invoice_id": str(invoice.id),
                "account_id": str(paying_account_id),
                "total": str(invoice.total),
            },
        )
        return invoice


invoices = InvoiceAccrual()
