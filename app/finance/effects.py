"""
Financial effects of transactions.

A FinancialEffect is the part of a transaction that moves money: who it is
attributed to (account or card), the amount, the direction, the date and
the installment count. It is derived purely from stored fields, so the
effect of a row can always be recomputed for reversal.

EffectApplier.replace(old, new) is the single routine behind every
mutation:

    create   replace(None, new)
    update   replace(old, new)
    delete   replace(old, None)

Reversal always happens before reapplication, and both run inside the
caller's unit of work.
"""

from __future__ import annotations

import datetime
import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

from .balances import AccountBalanceStore, balances
from .invoices import InvoiceAccrual, invoices
from .money import signed_amount

if TYPE_CHECKING:
    from .models import Transaction
    from .types import TransactionInput


@dataclass(frozen=True)
class FinancialEffect:
    user_id: int
    amount: Decimal
    type: str
    date: datetime.date
    account_id: uuid.UUID | None = None
    credit_card_id: uuid.UUID | None = None
    installments: int | None = None

    @classmethod
    def of(cls, transaction: Transaction) -> FinancialEffect:
        return cls(
            user_id=transaction.user_id,
            amount=transaction.amount,
            type=transaction.type,
            date=transaction.date,
            account_id=transaction.account_id,
            credit_card_id=transaction.credit_card_id,
            installments=transaction.installments,
        )

    @classmethod
    def from_input(cls, data: TransactionInput, user_id) -> FinancialEffect:
        return cls(
            user_id=user_id,
            amount=data.amount,
            type=data.type,
            date=data.date,
            account_id=data.account_id,
            credit_card_id=data.credit_card_id,
            installments=data.installments,
        )

    @property
    def signed_amount(self) -> Decimal:
        return signed_amount(self.amount, self.type)

    @property
    def installment_count(self) -> int:
        return self.installments if self.installments and self.installments > 1 else 1

    @property
    def is_card(self) -> bool:
        return self.credit_card_id is not None


class EffectApplier:
    """Routes effects to the balance store or the invoice accrual."""

    def __init__(
        self,
        balance_store: AccountBalanceStore | None = None,
        accrual: InvoiceAccrual | None = None,
    ):
        self.balances = balance_store or balances
        self.invoices = accrual or invoices

    def apply(self, effect: FinancialEffect) -> None:
        if effect.is_card:
            self.invoices.apply(effect)
        elif effect.account_id is not None:
            self.balances.apply_delta(
                effect.account_id, effect.signed_amount, user_id=effect.user_id
            )

    def reverse(self, effect: FinancialEffect) -> None:
        if effect.is_card:
            self.invoices.reverse(effect)
        elif effect.account_id is not None:
            self.balances.apply_delta(
                effect.account_id, -effect.signed_amount, user_id=effect.user_id
            )

    def replace(
        self,
        old: FinancialEffect | None,
        new: FinancialEffect | None,
    ) -> None:
        """Reverse ``old`` (if any), then apply ``new`` (if any)."""
        if old is not None:
            self.reverse(old)
        if new is not None:
            self.apply(new)


effects = EffectApplier()
