"""
Tests for invoice bucketing, accrual and payment.

Card fixture closes on the 25th unless a test builds its own card.
"""

import datetime
import uuid
from decimal import Decimal

import pytest

from finance.effects import FinancialEffect
from finance.exceptions import (
    AccountNotFound,
    CreditCardNotFound,
    InvoiceAlreadyPaid,
    InvoiceNotFound,
)
from finance.invoices import (
    InvoiceAccrual,
    bucket_for,
    installment_buckets,
    installment_dates,
)
from finance.models import CreditCardInvoice, TransactionType

from .factories import CreditCardFactory, CreditCardInvoiceFactory


def card_effect(card, amount="100.00", date=datetime.date(2024, 3, 10), installments=None):
    return FinancialEffect(
        user_id=card.user_id,
        amount=Decimal(amount),
        type=TransactionType.EXPENSE,
        date=date,
        credit_card_id=card.id,
        installments=installments,
    )


def totals(card):
    return dict(
        CreditCardInvoice.objects.filter(credit_card=card).values_list(
            "reference_month", "total"
        )
    )


class TestBucketFor:
    """Tests for bucket_for()."""

    def test_on_closing_day_stays_in_month(self):
        assert bucket_for(datetime.date(2024, 3, 25), 25) == "2024-03"

    def test_after_closing_day_moves_to_next_month(self):
        assert bucket_for(datetime.date(2024, 3, 26), 25) == "2024-04"

    def test_december_rolls_into_next_year(self):
        """Should roll a late-December purchase into January."""
        assert bucket_for(datetime.date(2024, 12, 26), 25) == "2025-01"

    def test_closing_day_31(self):
        """Should keep every day of the month in the same bucket."""
        assert bucket_for(datetime.date(2024, 1, 31), 31) == "2024-01"
        assert bucket_for(datetime.date(2024, 2, 29), 31) == "2024-02"

    def test_early_closing_day(self):
        assert bucket_for(datetime.date(2024, 3, 2), 1) == "2024-04"


class TestInstallmentSchedule:
    def test_dates_clamp_to_month_end(self):
        """Should clamp Jan 31 + 1 month to the end of February."""
        dates = installment_dates(datetime.date(2024, 1, 31), 3)

        assert dates == [
            datetime.date(2024, 1, 31),
            datetime.date(2024, 2, 29),
            datetime.date(2024, 3, 31),
        ]

    def test_buckets_cross_year(self):
        buckets = installment_buckets(datetime.date(2024, 11, 26), 25, 3)

        assert buckets == ["2024-12", "2025-01", "2025-02"]


class TestAccrue:
    """Tests for InvoiceAccrual.accrue() and apply()."""

    def test_creates_bucket_on_first_accrual(self, db, card):
        InvoiceAccrual().accrue(card, "2024-03", Decimal("40.00"))

        invoice = CreditCardInvoice.objects.get(credit_card=card, reference_month="2024-03")
        assert invoice.total == Decimal("40.00")
        assert invoice.paid is False
        assert invoice.user_id == card.user_id

    def test_adds_to_existing_bucket(self, db, card):
        accrual = InvoiceAccrual()
        accrual.accrue(card, "2024-03", Decimal("40.00"))
        accrual.accrue(card, "2024-03", Decimal("2.50"))

        assert totals(card) == {"2024-03": Decimal("42.50")}

    def test_accrues_into_paid_bucket(self, db, card):
        """Should still accrue into a bucket that was already paid."""
        CreditCardInvoiceFactory(
            credit_card=card, reference_month="2024-03", total=Decimal("10.00"), paid=True
        )

        InvoiceAccrual().accrue(card, "2024-03", Decimal("5.00"))

        assert totals(card) == {"2024-03": Decimal("15.00")}

    def test_apply_single_purchase(self, db, card):
        InvoiceAccrual().apply(card_effect(card, date=datetime.date(2024, 3, 26)))

        assert totals(card) == {"2024-04": Decimal("100.00")}

    def test_apply_installments(self, db, card):
        """Should put the rounded share into N consecutive buckets."""
        InvoiceAccrual().apply(card_effect(card, amount="100.00", installments=3))

        assert totals(card) == {
            "2024-03": Decimal("33.33"),
            "2024-04": Decimal("33.33"),
            "2024-05": Decimal("33.33"),
        }

    def test_apply_unknown_card(self, db, user):
        effect = FinancialEffect(
            user_id=user.id,
            amount=Decimal("1.00"),
            type=TransactionType.EXPENSE,
            date=datetime.date(2024, 3, 1),
            credit_card_id=uuid.uuid4(),
        )

        with pytest.raises(CreditCardNotFound):
            InvoiceAccrual().apply(effect)


class TestReverse:
    """Tests for InvoiceAccrual.reverse()."""

    def test_reverse_restores_totals(self, db, card):
        accrual = InvoiceAccrual()
        effect = card_effect(card, amount="100.00", installments=3)
        accrual.apply(card_effect(card, amount="20.00"))

        accrual.apply(effect)
        accrual.reverse(effect)

        assert totals(card) == {
            "2024-03": Decimal("20.00"),
            "2024-04": Decimal("0.00"),
            "2024-05": Decimal("0.00"),
        }

    def test_reverse_clamps_at_zero(self, db, card):
        """Should never leave a bucket below zero."""
        CreditCardInvoiceFactory(
            credit_card=card, reference_month="2024-03", total=Decimal("10.00")
        )

        InvoiceAccrual().reverse(card_effect(card, amount="25.00"))

        assert totals(card) == {"2024-03": Decimal("0.00")}

    def test_reverse_without_bucket_is_noop(self, db, card):
        InvoiceAccrual().reverse(card_effect(card))

        assert totals(card) == {}

    def test_reverse_uses_current_closing_day(self, db, card):
        """Should bucket the reversal with the card's closing day at reversal time."""
        accrual = InvoiceAccrual()
        effect = card_effect(card, date=datetime.date(2024, 3, 20))
        accrual.apply(effect)

        card.closing_day = 15
        card.save()
        accrual.reverse(effect)

        assert totals(card) == {"2024-03": Decimal("100.00")}


class TestPayInvoice:
    """Tests for InvoiceAccrual.pay_invoice()."""

    def test_pays_from_account(self, db, user, card, account):
        invoice = CreditCardInvoiceFactory(credit_card=card, total=Decimal("60.00"))

        paid = InvoiceAccrual().pay_invoice(invoice.id, account.id, user.id)

        account.refresh_from_db()
        assert account.balance == Decimal("40.00")
        assert paid.paid is True
        assert paid.paid_at is not None
        assert paid.paid_with_account_id == account.id

    def test_already_paid(self, db, user, card, account):
        invoice = CreditCardInvoiceFactory(credit_card=card, total=Decimal("60.00"), paid=True)

        with pytest.raises(InvoiceAlreadyPaid) as exc_info:
            InvoiceAccrual().pay_invoice(invoice.id, account.id, user.id)

        assert exc_info.value.http_status == 409
        account.refresh_from_db()
        assert account.balance == Decimal("100.00")

    def test_missing_invoice(self, db, user, account):
        with pytest.raises(InvoiceNotFound):
            InvoiceAccrual().pay_invoice(uuid.uuid4(), account.id, user.id)

    def test_other_users_invoice(self, db, account, other_user):
        """Should not find an invoice that belongs to another user."""
        invoice = CreditCardInvoiceFactory(credit_card=CreditCardFactory(user=other_user))

        with pytest.raises(InvoiceNotFound):
            InvoiceAccrual().pay_invoice(invoice.id, account.id, account.user_id)

    def test_missing_account_rolls_back(self, db, user, card):
        """Should leave the invoice unpaid when the account does not exist."""
        invoice = CreditCardInvoiceFactory(credit_card=card, total=Decimal("60.00"))

        with pytest.raises(AccountNotFound):
            InvoiceAccrual().pay_invoice(invoice.id, uuid.uuid4(), user.id)

        invoice.refresh_from_db()
        assert invoice.paid is False

    def test_paid_invoice_leaves_used_amount(self, db, user, card, account):
        invoice = CreditCardInvoiceFactory(credit_card=card, total=Decimal("60.00"))
        assert card.get_used_amount() == Decimal("60.00")

        InvoiceAccrual().pay_invoice(invoice.id, account.id, user.id)

        assert card.get_used_amount() == Decimal("0.00")
