"""
Credit card service.

Card CRUD, invoice listing and invoice payment. Used amount and available
limit are computed from unpaid invoice totals on read, never stored.

Usage:
    from finance.services import credit_cards

    card = credit_cards.create_card(user.id, name="Visa", limit=Decimal("5000"),
                                    closing_day=25, due_day=5)
    credit_cards.pay_invoice(invoice.id, user.id, account_id=checking.id)
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from django.db.models import ProtectedError

from core.exceptions import ValidationError
from core.services import BaseService

from ..exceptions import CreditCardNotFound, InvalidAmount, ResourceInUse
from ..invoices import InvoiceAccrual, invoices
from ..models import CreditCard, CreditCardInvoice
from ..money import to_money

if TYPE_CHECKING:
    from django.db.models import QuerySet

EDITABLE_FIELDS = ("name", "limit", "closing_day", "due_day", "color")


def _validate_day(field: str, value: int) -> None:
    if not 1 <= int(value) <= 31:
        raise ValidationError(
            f"{field} must be between 1 and 31",
            error_code="INVALID_CARD_DAY",
            details={field: value},
        )


def _validate_limit(value) -> Decimal:
    limit = to_money(value)
    if limit < 0:
        raise InvalidAmount("Card limit cannot be negative", details={"limit": str(limit)})
    return limit


class CreditCardService(BaseService):
    def __init__(self, accrual: InvoiceAccrual | None = None):
        self.invoices = accrual or invoices

    def list_cards(self, user_id) -> QuerySet[CreditCard]:
        return CreditCard.objects.owned_by(user_id).with_used_amount().order_by("name")

    def get_card(self, card_id, user_id) -> CreditCard:
        try:
            return CreditCard.objects.owned_by(user_id).with_used_amount().get(id=card_id)
        except CreditCard.DoesNotExist:
            raise CreditCardNotFound(
                f"Credit card {card_id} not found",
                details={"credit_card_id": str(card_id)},
            )

    def create_card(
        self,
        user_id,
        name: str,
        limit,
        closing_day: int,
        due_day: int,
        color: str = "",
    ) -> CreditCard:
        _validate_day("closing_day", closing_day)
        _validate_day("due_day", due_day)
        card = CreditCard.objects.create(
            user_id=user_id,
            name=name,
            limit=_validate_limit(limit),
            closing_day=closing_day,
            due_day=due_day,
            color=color,
        )
        self.get_logger().info(
            "Credit card created",
            extra={"credit_card_id": str(card.id), "user_id": str(user_id)},
        )
        return self.get_card(card.id, user_id)

    def update_card(self, card_id, user_id, **changes) -> CreditCard:
        """
        Update display fields, limit and billing days.

        Changing closing_day does not move existing accruals. Later reversals
        of older purchases are bucketed with the new closing day.
        """
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(
                "Unknown credit card fields",
                details={"fields": sorted(unknown)},
            )
        for field in ("closing_day", "due_day"):
            if field in changes:
                _validate_day(field, changes[field])
        if "limit" in changes:
            changes["limit"] = _validate_limit(changes["limit"])

        with self.atomic():
            card = self.get_card(card_id, user_id)
            for field, value in changes.items():
                setattr(card, field, value)
            card.save(update_fields=[*changes, "updated_at"])

        return self.get_card(card_id, user_id)

    def delete_card(self, card_id, user_id) -> None:
        """
        Delete a card and its invoices.

        Raises:
            ResourceInUse: While transactions still reference the card
        """
        with self.atomic():
            card = self.get_card(card_id, user_id)
            try:
                card.delete()
            except ProtectedError:
                raise ResourceInUse(
                    "Credit card still has transactions",
                    details={"credit_card_id": str(card_id)},
                )
        self.get_logger().info(
            "Credit card deleted",
            extra={"credit_card_id": str(card_id), "user_id": str(user_id)},
        )

    def list_invoices(self, card_id, user_id) -> QuerySet[CreditCardInvoice]:
        """Invoices of a card, most recent reference month first."""
        card = self.get_card(card_id, user_id)
        return CreditCardInvoice.objects.owned_by(user_id).filter(
            credit_card=card
        ).order_by("-reference_month")

    def pay_invoice(self, invoice_id, user_id, account_id) -> CreditCardInvoice:
        return self.invoices.pay_invoice(invoice_id, account_id, user_id)


credit_cards = CreditCardService()
