"""
Finance services.

This module provides:
- LedgerService: Transaction create/update/delete, transfers, recurrence
- CreditCardService: Card CRUD, invoices, invoice payment
- AccountService: Account and category management
- PlanningService: Savings goals and manually tracked investments
- PushTokenService: Device push token registration

Usage:
    from finance.services import ledger, credit_cards, accounts, planning, push_tokens

    account = accounts.create_account(user.id, "Checking", balance=Decimal("100"))
    ledger.transfer(user.id, account.id, savings.id, Decimal("25.00"))
"""

from finance.services.account_service import AccountService, accounts
from finance.services.credit_card_service import CreditCardService, credit_cards
from finance.services.ledger_service import LedgerService, ledger
from finance.services.planning_service import PlanningService, planning
from finance.services.push_token_service import PushTokenService, push_tokens

__all__ = [
    "AccountService",
    "CreditCardService",
    "LedgerService",
    "PlanningService",
    "PushTokenService",
    "accounts",
    "credit_cards",
    "ledger",
    "planning",
    "push_tokens",
]
