"""
Ledger service: the public surface of the consistency engine.

Every money-moving operation on transactions goes through this service.
Each public method is one unit of work: the row change and its balance or
invoice effect commit together or not at all.

Mutation rule:
    The stored effect of a row is always reversed before the new effect is
    applied (EffectApplier.replace). No money-bearing field is ever written
    without going through that routine.

Usage:
    from finance.services import ledger
    from finance.types import TransactionInput, TransactionPatch

    tx = ledger.create(user.id, TransactionInput(
        type="expense",
        amount=Decimal("30.00"),
        date=date.today(),
        account_id=account.id,
    ))
    ledger.update(tx.id, user.id, TransactionPatch(amount=Decimal("50.00")))
    ledger.delete(tx.id, user.id)

    ledger.transfer(user.id, checking.id, savings.id, Decimal("200.00"))
"""

from __future__ import annotations

import datetime
import uuid
from decimal import Decimal
from typing import TYPE_CHECKING

from django.conf import settings
from django.utils import timezone

from core.services import BaseService

from ..balances import AccountBalanceStore, balances
from ..effects import EffectApplier, FinancialEffect, effects
from ..exceptions import (
    AccountNotFound,
    CategoryNotFound,
    CreditCardNotFound,
    InvalidAmount,
    InvalidRecurrence,
    InvalidTransfer,
    NotARecurringDefinition,
    TransactionNotFound,
)
from ..models import Account, Category, CreditCard, Transaction, TransactionType
from ..money import to_money
from ..recurrence import RecurrenceEngine, initial_schedule, recurrence
from ..types import SweepResult, TransactionInput, TransactionPatch, TransferResult

if TYPE_CHECKING:
    from django.db.models import QuerySet


class LedgerService(BaseService):
    """
    Orchestrates transaction create/update/delete, transfers and the
    recurrence operations exposed to clients.

    Collaborators are passed to the constructor; the module-level
    ``ledger`` instance uses the default ones.
    """

    def __init__(
        self,
        balance_store: AccountBalanceStore | None = None,
        effect_applier: EffectApplier | None = None,
        recurrence_engine: RecurrenceEngine | None = None,
    ):
        self.balances = balance_store or balances
        self.effects = effect_applier or effects
        self.recurrence = recurrence_engine or recurrence

    # =========================================================================
    # Lookups
    # =========================================================================

    def list_transactions(self, user_id) -> QuerySet[Transaction]:
        return Transaction.objects.owned_by(user_id).order_by("-date", "-created_at")

    def get_transaction(self, transaction_id, user_id, lock: bool = False) -> Transaction:
        """
        Raises:
            TransactionNotFound: If the row does not exist for this user
        """
        queryset = Transaction.objects.owned_by(user_id)
        if lock:
            queryset = queryset.select_for_update()
        try:
            return queryset.get(id=transaction_id)
        except Transaction.DoesNotExist:
            raise TransactionNotFound(
                f"Transaction {transaction_id} not found",
                details={"transaction_id": str(transaction_id)},
            )

    def _check_references(self, data: TransactionInput, user_id) -> None:
        """Make sure every referenced row exists and belongs to the user."""
        if data.account_id is not None and not (
            Account.objects.owned_by(user_id).filter(id=data.account_id).exists()
        ):
            raise AccountNotFound(
                f"Account {data.account_id} not found",
                details={"account_id": str(data.account_id)},
            )
        if data.credit_card_id is not None and not (
            CreditCard.objects.owned_by(user_id).filter(id=data.credit_card_id).exists()
        ):
            raise CreditCardNotFound(
                f"Credit card {data.credit_card_id} not found",
                details={"credit_card_id": str(data.credit_card_id)},
            )
        if data.category_id is not None and not (
            Category.objects.owned_by(user_id).filter(id=data.category_id).exists()
        ):
            raise CategoryNotFound(
                f"Category {data.category_id} not found",
                details={"category_id": str(data.category_id)},
            )

    @staticmethod
    def _installment_fields(data: TransactionInput) -> dict:
        if data.credit_card_id is None or not data.installments:
            return {"installments": None, "installment_current": None}
        return {"installments": data.installments, "installment_current": 1}

    # =========================================================================
    # Create / Update / Delete
    # =========================================================================

    def create(self, user_id, data: TransactionInput) -> Transaction:
        """
        Record a transaction and apply its effect.

        Account rows move the balance now; card rows accrue into the
        invoice bucket(s) of their date. A recurring request is stored as
        an Active definition that counts as its own first occurrence.

        Raises:
            AccountNotFound, CreditCardNotFound, CategoryNotFound: Bad reference
            InfrastructureError: Storage failure (nothing was written)
        """
        fields = {
            "user_id": user_id,
            "type": data.type,
            "amount": data.amount,
            "date": data.date,
            "description": data.description,
            "account_id": data.account_id,
            "credit_card_id": data.credit_card_id,
            "category_id": data.category_id,
            **self._installment_fields(data),
        }
        if data.recurring:
            fields.update(initial_schedule(data.date, data.recurrence, data.recurrence_count))

        with self.atomic():
            self._check_references(data, user_id)
            transaction = Transaction.objects.create(**fields)
            self.effects.replace(None, FinancialEffect.of(transaction))

        self.get_logger().info(
            "Transaction created",
            extra={
                "transaction_id": str(transaction.id),
                "user_id": str(user_id),
                "type": transaction.type,
                "amount": str(transaction.amount),
                "recurring": transaction.recurring,
            },
        )
        return transaction

    def update(self, transaction_id, user_id, patch: TransactionPatch) -> Transaction:
        """
        Apply a partial update.

        The stored effect is reversed using the stored amount, type, date,
        attribution and installments, then the effect of the merged row is
        applied. Moving a row between an account and a card works the same
        way.

        Raises:
            TransactionNotFound: If the row does not exist for this user
            NotARecurringDefinition: Recurrence fields sent for a plain row
            InvalidRecurrence: Cadence cleared on a recurring definition
            Validation errors from TransactionInput for the merged values
        """
        with self.atomic():
            transaction = self.get_transaction(transaction_id, user_id, lock=True)
            if patch.touches_recurrence() and not transaction.is_definition:
                raise NotARecurringDefinition(
                    "Only recurring definitions have recurrence settings",
                    details={"transaction_id": str(transaction_id)},
                )
            if "recurrence" in patch.provided() and patch.recurrence is None:
                raise InvalidRecurrence(
                    "A recurring definition must keep its cadence",
                    details={"transaction_id": str(transaction_id)},
                )

            merged = patch.merge(transaction)
            self._check_references(merged, user_id)
            old_effect = FinancialEffect.of(transaction)

            transaction.type = merged.type
            transaction.amount = merged.amount
            transaction.date = merged.date
            transaction.description = merged.description
            transaction.account_id = merged.account_id
            transaction.credit_card_id = merged.credit_card_id
            transaction.category_id = merged.category_id
            for name, value in self._installment_fields(merged).items():
                setattr(transaction, name, value)

            if patch.touches_recurrence():
                self._apply_recurrence_patch(transaction, merged)

            self.effects.replace(old_effect, FinancialEffect.of(transaction))
            transaction.save()

        self.get_logger().info(
            "Transaction updated",
            extra={
                "transaction_id": str(transaction.id),
                "fields": sorted(patch.provided()),
            },
        )
        return transaction

    @staticmethod
    def _apply_recurrence_patch(transaction: Transaction, merged: TransactionInput) -> None:
        transaction.recurrence = merged.recurrence
        transaction.recurrence_count = merged.recurrence_count
        count = transaction.recurrence_count
        if transaction.recurring and count is not None and transaction.recurrence_current >= count:
            transaction.recurring = False
            transaction.next_due_date = None

    def delete(self, transaction_id, user_id) -> None:
        """
        Delete a row and reverse exactly the effect it applied.

        Deleting a recurring definition this way leaves its occurrences in
        place; use delete_with_history to remove them too.
        """
        with self.atomic():
            transaction = self.get_transaction(transaction_id, user_id, lock=True)
            effect = FinancialEffect.of(transaction)
            transaction.delete()
            self.effects.replace(effect, None)

        self.get_logger().info(
            "Transaction deleted",
            extra={"transaction_id": str(transaction_id), "user_id": str(user_id)},
        )

    # =========================================================================
    # Transfers
    # =========================================================================

    def transfer(
        self,
        user_id,
        from_account_id: uuid.UUID,
        to_account_id: uuid.UUID,
        amount: Decimal,
        description: str | None = None,
        date: datetime.date | None = None,
    ) -> TransferResult:
        """
        Move money between two of the user's accounts.

        Debits the source, credits the destination, and records an expense
        leg and an income leg for history. The source balance may go
        negative.

        Raises:
            InvalidTransfer: Source and destination are the same account
            InvalidAmount: Amount is not positive
            AccountNotFound: Either account does not exist for this user
        """
        amount = to_money(amount)
        if amount <= 0:
            raise InvalidAmount(
                "Transfer amount must be greater than zero",
                details={"amount": str(amount)},
            )
        if from_account_id == to_account_id:
            raise InvalidTransfer(
                "Cannot transfer to the same account",
                details={"account_id": str(from_account_id)},
            )
        date = date or timezone.localdate()

        with self.atomic():
            # Lock in a stable order so opposite transfers cannot deadlock
            locked = {
                account.id: account
                for account in Account.objects.owned_by(user_id)
                .select_for_update()
                .filter(id__in=[from_account_id, to_account_id])
                .order_by("id")
            }
            for account_id in (from_account_id, to_account_id):
                if account_id not in locked:
                    raise AccountNotFound(
                        f"Account {account_id} not found",
                        details={"account_id": str(account_id)},
                    )

            self.balances.apply_delta(from_account_id, -amount, user_id=user_id)
            self.balances.apply_delta(to_account_id, amount, user_id=user_id)

            outgoing = Transaction.objects.create(
                user_id=user_id,
                account_id=from_account_id,
                type=TransactionType.EXPENSE,
                amount=amount,
                date=date,
                description=description or settings.FINANCE_TRANSFER_DEFAULT_OUT_DESCRIPTION,
            )
            incoming = Transaction.objects.create(
                user_id=user_id,
                account_id=to_account_id,
                type=TransactionType.INCOME,
                amount=amount,
                date=date,
                description=description or settings.FINANCE_TRANSFER_DEFAULT_IN_DESCRIPTION,
            )

        self.get_logger().info(
            "Transfer completed",
            extra={
                "from_account_id": str(from_account_id),
                "to_account_id": str(to_account_id),
                "amount": str(amount),
            },
        )
        return TransferResult(outgoing=outgoing, incoming=incoming)

    # =========================================================================
    # Recurrence
    # =========================================================================

    def list_definitions(self, user_id) -> QuerySet[Transaction]:
        """Recurring definitions in any state, including finished ones."""
        return (
            Transaction.objects.owned_by(user_id)
            .filter(recurrence__isnull=False, recurrence_group_id__isnull=True)
            .order_by("next_due_date", "-created_at")
        )

    def list_occurrences(self, definition_id, user_id) -> QuerySet[Transaction]:
        """Occurrences materialized from a definition, oldest first."""
        definition = self.recurrence.get_definition(definition_id, user_id)
        return (
            Transaction.objects.owned_by(user_id)
            .in_group(definition.id)
            .order_by("date", "created_at")
        )

    def toggle_pause(self, definition_id, user_id, paused: bool) -> Transaction:
        return self.recurrence.toggle(definition_id, user_id, paused)

    def delete_with_history(self, definition_id, user_id) -> int:
        return self.recurrence.delete_with_history(definition_id, user_id)

    def run_recurrence_sweep(self, today: datetime.date | None = None) -> SweepResult:
        return self.recurrence.sweep(today=today)


ledger = LedgerService()
