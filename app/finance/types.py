"""
Data types for ledger operations.

Dataclasses used to move validated input between the API layer and the
ledger services.

Types:
    TransactionInput: Validated fields for creating a transaction
    TransactionPatch: Partial update, distinguishing "not sent" from None
    TransferResult: The two audit legs recorded by a transfer
    SweepResult: Counters returned by a recurrence sweep

Usage:
    from finance.types import TransactionInput, TransactionPatch

    data = TransactionInput(
        type="expense",
        amount=Decimal("30.00"),
        date=date(2024, 3, 10),
        account_id=account.id,
    )
    patch = TransactionPatch(amount=Decimal("50.00"))
"""

from __future__ import annotations

import datetime
import uuid
from dataclasses import dataclass, field, fields, replace
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from core.exceptions import ValidationError

from .exceptions import (
    InvalidAmount,
    InvalidAttribution,
    InvalidInstallments,
    InvalidRecurrence,
)
from .models import Recurrence, TransactionType
from .money import to_money

if TYPE_CHECKING:
    from .models import Transaction


class _Unset:
    """Marker for patch fields the caller did not send."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


@dataclass
class TransactionInput:
    """
    Validated input for a transaction.

    Validation runs in ``__post_init__`` so an instance is always usable:

    - amount is coerced to a two-place Decimal and must be positive
    - expenses need exactly one of account or credit card
    - income needs an account and may not use a card
    - installments must be >= 1 and need a card when > 1
    - recurring input needs a known cadence, a count >= 1 if one is given,
      and cannot be combined with installments

    Raises:
        InvalidAmount, InvalidAttribution, InvalidInstallments,
        InvalidRecurrence, ValidationError
    """

    type: str
    amount: Decimal
    date: datetime.date
    description: str = ""
    account_id: uuid.UUID | None = None
    credit_card_id: uuid.UUID | None = None
    category_id: uuid.UUID | None = None
    recurring: bool = False
    recurrence: str | None = None
    recurrence_count: int | None = None
    installments: int | None = None

    def __post_init__(self) -> None:
        if self.type not in TransactionType.values:
            raise ValidationError(
                f"Unknown transaction type: {self.type!r}",
                error_code="INVALID_TRANSACTION_TYPE",
                details={"type": str(self.type)},
            )

        self.amount = to_money(self.amount)
        if self.amount <= 0:
            raise InvalidAmount(
                "Amount must be greater than zero",
                details={"amount": str(self.amount)},
            )

        self._validate_attribution()
        self._validate_installments()
        self._validate_recurrence()

    def _validate_attribution(self) -> None:
        has_account = self.account_id is not None
        has_card = self.credit_card_id is not None

        if has_account and has_card:
            raise InvalidAttribution(
                "A transaction uses either an account or a credit card, not both",
            )
        if self.type == TransactionType.INCOME and has_card:
            raise InvalidAttribution("Income cannot be charged to a credit card")
        if not has_account and not has_card:
            raise InvalidAttribution(
                "An account or a credit card is required",
                details={"type": self.type},
            )

    def _validate_installments(self) -> None:
        if self.installments is None:
            return
        if self.installments < 1:
            raise InvalidInstallments(
                "Installments must be at least 1",
                details={"installments": self.installments},
            )
        if self.installments > 1 and self.credit_card_id is None:
            raise InvalidInstallments("Only credit card purchases can have installments")

    def _validate_recurrence(self) -> None:
        if not self.recurring:
            return
        if self.recurrence not in Recurrence.values:
            raise InvalidRecurrence(
                f"Unknown recurrence: {self.recurrence!r}",
                details={"recurrence": str(self.recurrence)},
            )
        if self.recurrence_count is not None and self.recurrence_count < 1:
            raise InvalidRecurrence(
                "Recurrence count must be at least 1",
                details={"recurrence_count": self.recurrence_count},
            )
        if self.installments and self.installments > 1:
            raise InvalidRecurrence("Recurring transactions cannot have installments")


@dataclass
class TransactionPatch:
    """
    Partial update for a transaction.

    Every field defaults to UNSET. Only fields that were sent are merged.
    Setting ``credit_card_id`` without ``account_id`` detaches the account
    and vice versa, so a row can move between account and card in one call.

    Example:
        patch = TransactionPatch(amount=Decimal("50.00"))
        patch.provided()  # {"amount": Decimal("50.00")}
    """

    type: Any = UNSET
    amount: Any = UNSET
    date: Any = UNSET
    description: Any = UNSET
    account_id: Any = UNSET
    credit_card_id: Any = UNSET
    category_id: Any = UNSET
    installments: Any = UNSET
    recurrence: Any = UNSET
    recurrence_count: Any = UNSET

    def provided(self) -> dict[str, Any]:
        """Fields that were explicitly sent, including explicit None."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNSET
        }

    def touches_recurrence(self) -> bool:
        return self.recurrence is not UNSET or self.recurrence_count is not UNSET

    def merge(self, transaction: Transaction) -> TransactionInput:
        """
        Build the post-update input from the stored row plus this patch.

        Raises:
            Same validation errors as TransactionInput
        """
        base = TransactionInput.__new__(TransactionInput)
        base.type = transaction.type
        base.amount = transaction.amount
        base.date = transaction.date
        base.description = transaction.description
        base.account_id = transaction.account_id
        base.credit_card_id = transaction.credit_card_id
        base.category_id = transaction.category_id
        base.recurring = transaction.recurring
        base.recurrence = transaction.recurrence
        base.recurrence_count = transaction.recurrence_count
        base.installments = transaction.installments

        changes = self.provided()
        if changes.get("credit_card_id") is not None and "account_id" not in changes:
            changes["account_id"] = None
        if changes.get("account_id") is not None and "credit_card_id" not in changes:
            changes["credit_card_id"] = None
        if changes.get("credit_card_id", transaction.credit_card_id) is None:
            changes.setdefault("installments", None)

        # replace() re-runs __post_init__ on the merged values
        return replace(base, **changes)


@dataclass
class TransferResult:
    """The expense and income legs recorded by a transfer."""

    outgoing: Transaction
    incoming: Transaction


@dataclass
class SweepResult:
    """
    Outcome of one recurrence sweep run.

    Attributes:
        processed: Occurrences materialized
        finished: Definitions that reached their cap during this run
        failed: Definitions skipped because of an error
        failures: ``{definition_id: error}`` for each failure
    """

    processed: int = 0
    finished: int = 0
    failed: int = 0
    failures: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "processed": self.processed,
            "finished": self.finished,
            "failed": self.failed,
        }
