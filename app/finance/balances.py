"""
Account balance store.

The only code path that changes ``Account.balance``. Each change is a single
``UPDATE ... SET balance = balance + delta`` executed inside the caller's
unit of work, so there is no read-then-write window for a concurrent
request to race into.

Usage:
    from finance.balances import balances

    with BaseService.atomic():
        balances.apply_delta(account.id, Decimal("-30.00"))
"""

from __future__ import annotations

import logging
import uuid
from decimal import Decimal

from django.db.models import F

from .exceptions import AccountNotFound
from .models import Account
from .money import to_money

logger = logging.getLogger(__name__)


class AccountBalanceStore:
    """Atomic signed-delta updates of account balances."""

    def apply_delta(
        self,
        account_id: uuid.UUID,
        signed_amount: Decimal,
        user_id: int | None = None,
    ) -> None:
        """
        Add ``signed_amount`` to the account's balance.

        Args:
            account_id: Account to update
            signed_amount: Positive to credit, negative to debit
            user_id: When given, the account must belong to this user

        Raises:
            AccountNotFound: If no matching account exists. The enclosing
                unit of work is expected to roll back.
        """
        delta = to_money(signed_amount)
        queryset = Account.objects.filter(id=account_id)
        if user_id is not None:
            queryset = queryset.filter(user_id=user_id)

        updated = queryset.update(balance=F("balance") + delta)
        if updated == 0:
            raise AccountNotFound(
                f"Account {account_id} not found",
                details={"account_id": str(account_id)},
            )

        logger.debug(
            "Applied balance delta",
            extra={"account_id": str(account_id), "delta": str(delta)},
        )


balances = AccountBalanceStore()
