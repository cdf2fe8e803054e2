"""Tests for CreditCardService."""

import datetime
import uuid
from decimal import Decimal

import pytest

from core.exceptions import ValidationError
from finance.exceptions import (
    CreditCardNotFound,
    InvalidAmount,
    InvoiceAlreadyPaid,
    ResourceInUse,
)
from finance.models import CreditCard, CreditCardInvoice
from finance.services import credit_cards, ledger

from .factories import CreditCardFactory, CreditCardInvoiceFactory


class TestCreateCard:
    def test_create(self, db, user):
        card = credit_cards.create_card(
            user.id, name="Visa", limit="5000", closing_day=25, due_day=5
        )

        assert card.limit == Decimal("5000.00")
        assert card.get_used_amount() == Decimal("0.00")
        assert card.get_available_limit() == Decimal("5000.00")

    @pytest.mark.parametrize("closing_day", [0, 32])
    def test_day_out_of_range(self, db, user, closing_day):
        with pytest.raises(ValidationError) as exc_info:
            credit_cards.create_card(
                user.id, name="Visa", limit="100", closing_day=closing_day, due_day=5
            )

        assert exc_info.value.error_code == "INVALID_CARD_DAY"
        assert not CreditCard.objects.exists()

    def test_negative_limit(self, db, user):
        with pytest.raises(InvalidAmount):
            credit_cards.create_card(user.id, name="Visa", limit="-1", closing_day=1, due_day=5)


class TestCardQueries:
    def test_used_amount_follows_purchases(self, db, user, card, expense_input):
        """Should report unpaid invoice totals as used."""
        ledger.create(user.id, expense_input(credit_card_id=card.id, amount=Decimal("120.00")))

        fetched = credit_cards.get_card(card.id, user.id)

        assert fetched.used_amount == Decimal("120.00")
        assert fetched.get_available_limit() == Decimal("4880.00")

    def test_list_is_scoped(self, db, user, card, other_user):
        CreditCardFactory(user=other_user)

        assert [c.id for c in credit_cards.list_cards(user.id)] == [card.id]

    def test_get_other_users_card(self, db, card, other_user):
        with pytest.raises(CreditCardNotFound):
            credit_cards.get_card(card.id, other_user.id)

    def test_list_invoices_newest_first(self, db, user, card):
        CreditCardInvoiceFactory(credit_card=card, reference_month="2024-02")
        CreditCardInvoiceFactory(credit_card=card, reference_month="2024-04")
        CreditCardInvoiceFactory(credit_card=card, reference_month="2024-03")

        months = [i.reference_month for i in credit_cards.list_invoices(card.id, user.id)]

        assert months == ["2024-04", "2024-03", "2024-02"]


class TestUpdateCard:
    def test_update_limit_and_closing_day(self, db, user, card):
        updated = credit_cards.update_card(card.id, user.id, limit="800", closing_day=10)

        assert updated.limit == Decimal("800.00")
        assert updated.closing_day == 10

    def test_unknown_field(self, db, user, card):
        with pytest.raises(ValidationError):
            credit_cards.update_card(card.id, user.id, used_amount=0)

    def test_closing_day_does_not_move_existing_buckets(self, db, user, card, expense_input):
        """Should leave already accrued buckets where they are."""
        ledger.create(
            user.id, expense_input(credit_card_id=card.id, date=datetime.date(2024, 3, 20))
        )

        credit_cards.update_card(card.id, user.id, closing_day=15)

        invoice = CreditCardInvoice.objects.get(credit_card=card)
        assert invoice.reference_month == "2024-03"
        assert invoice.total == Decimal("30.00")


class TestDeleteCard:
    def test_delete_unused_card(self, db, user, card):
        CreditCardInvoiceFactory(credit_card=card)

        credit_cards.delete_card(card.id, user.id)

        assert not CreditCard.objects.filter(id=card.id).exists()
        assert not CreditCardInvoice.objects.exists()

    def test_card_in_use(self, db, user, card, expense_input):
        ledger.create(user.id, expense_input(credit_card_id=card.id))

        with pytest.raises(ResourceInUse):
            credit_cards.delete_card(card.id, user.id)

        assert CreditCard.objects.filter(id=card.id).exists()


class TestPayInvoice:
    """Tests for CreditCardService.pay_invoice()."""

    def test_pay_then_pay_again(self, db, user, card, account, expense_input):
        ledger.create(user.id, expense_input(credit_card_id=card.id, amount=Decimal("45.00")))
        invoice = CreditCardInvoice.objects.get(credit_card=card)

        credit_cards.pay_invoice(invoice.id, user.id, account.id)

        account.refresh_from_db()
        assert account.balance == Decimal("55.00")
        assert credit_cards.get_card(card.id, user.id).used_amount == Decimal("0.00")

        with pytest.raises(InvoiceAlreadyPaid):
            credit_cards.pay_invoice(invoice.id, user.id, account.id)

        account.refresh_from_db()
        assert account.balance == Decimal("55.00")

    def test_missing_card(self, db, user):
        with pytest.raises(CreditCardNotFound):
            credit_cards.list_invoices(uuid.uuid4(), user.id)
