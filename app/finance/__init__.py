"""
Finance - Accounts, transactions, recurring entries and credit cards.

This app keeps three pieces of state mutually consistent:

- Account balances (changed only through AccountBalanceStore.apply_delta)
- Credit-card invoice buckets (changed only through InvoiceAccrual)
- Recurring definitions and the occurrences they materialize
  (changed only through RecurrenceEngine)

LedgerService composes all three inside one unit of work per request.

Public API:
    Services (import from finance.services):
        ledger - LedgerService singleton
        credit_cards - CreditCardService singleton
        accounts - AccountService singleton
        push_tokens - PushTokenService singleton

    Components:
        finance.balances.AccountBalanceStore
        finance.invoices.InvoiceAccrual, bucket_for
        finance.recurrence.RecurrenceEngine, advance
        finance.effects.FinancialEffect, EffectApplier

    Exceptions (import from finance.exceptions):
        Typed errors extending the core.exceptions categories

Usage:
    from finance.services import ledger
    from finance.types import TransactionInput

    tx = ledger.create(user.id, TransactionInput(
        description="Groceries",
        amount="30.00",
        type="expense",
        date=date(2025, 3, 10),
        account_id=checking.id,
    ))
    ledger.update(tx.id, user.id, TransactionPatch(amount="50.00"))
    ledger.delete(tx.id, user.id)

Note:
    Models and services are NOT imported here to avoid AppRegistryNotReady
    errors. Import them from their modules.
"""
