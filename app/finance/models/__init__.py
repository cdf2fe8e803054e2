"""
Finance models.

Usage:
    from finance.models import Account, Transaction, CreditCard, Goal
"""

from .account import Account, AccountType
from .category import Category
from .credit_card import CreditCard, CreditCardInvoice
from .goal import Goal
from .investment import Investment
from .push_token import PushToken
from .transaction import Recurrence, RecurrenceState, Transaction, TransactionType

__all__ = [
    "Account",
    "AccountType",
    "Category",
    "CreditCard",
    "CreditCardInvoice",
    "Goal",
    "Investment",
    "PushToken",
    "Recurrence",
    "RecurrenceState",
    "Transaction",
    "TransactionType",
]
