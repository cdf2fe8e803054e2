"""
Account model.

An Account is a place money lives (wallet, checking, digital bank,
brokerage). Its balance is the running sum of the signed effects of every
account-attributed transaction, plus the opening balance it was created with.

The balance column is never written wholesale after creation. All changes go
through finance.balances.AccountBalanceStore.apply_delta, which performs an
in-database ``balance = balance + delta`` update.
"""

from __future__ import annotations

from decimal import Decimal

from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin, UserOwnedMixin
from core.models import BaseModel


class AccountType(models.TextChoices):
    """
    Kinds of account a user can hold.

    Values:
        WALLET: Physical cash
        CHECKING: Traditional bank checking account
        DIGITAL: Digital-only bank account
        INVESTMENT: Brokerage or investment account
    """

    WALLET = "wallet", "Wallet"
    CHECKING = "checking", "Checking"
    DIGITAL = "digital", "Digital"
    INVESTMENT = "investment", "Investment"


class Account(UUIDPrimaryKeyMixin, UserOwnedMixin, BaseModel):
    """
    A user-owned account holding a signed decimal balance.

    Fields:
        id: UUID primary key (from UUIDPrimaryKeyMixin)
        user: Owning user (from UserOwnedMixin)
        name: Display name
        type: Account category
        balance: Current balance, two decimal places, may be negative
        color: Display color used by the mobile client
        created_at/updated_at: Timestamps (from BaseModel)
    """

    name = models.CharField(
        max_length=100,
        help_text="Display name of the account",
    )
    type = models.CharField(
        max_length=20,
        choices=AccountType.choices,
        default=AccountType.CHECKING,
        help_text="Category of this account",
    )
    balance = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Current balance; changed only through balance deltas",
    )
    color = models.CharField(
        max_length=20,
        blank=True,
        default="",
        help_text="Display color (hex) for the client",
    )

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["user", "created_at"], name="account_user_created_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.get_type_display()})"
