"""
Finance-specific exceptions.

Each exception extends one of the core categories so the API layer and
callers can tell "nothing happened, fix the input" (validation, not found,
conflict) apart from "storage failed, retry as-is" (InfrastructureError).

Exception Hierarchy:
    ValidationError
    ├── InvalidAttribution - Wrong account/card combination for the type
    ├── InvalidAmount - Non-positive or malformed amount
    ├── InvalidRecurrence - Unknown cadence or bad recurrence count
    ├── InvalidInstallments - Bad installment count or non-card installments
    └── InvalidTransfer - Same source and destination
    NotFoundError
    ├── TransactionNotFound
    ├── AccountNotFound
    ├── CreditCardNotFound
    ├── InvoiceNotFound
    ├── CategoryNotFound
    ├── GoalNotFound
    └── InvestmentNotFound
    ConflictError
    ├── InvoiceAlreadyPaid
    ├── NotARecurringDefinition - Recurrence operation on a plain row
    └── ResourceInUse - Delete refused while transactions reference the row

Usage:
    from finance.exceptions import AccountNotFound

    raise AccountNotFound(
        f"Account {account_id} not found",
        details={"account_id": str(account_id)},
    )
"""

from __future__ import annotations

from core.exceptions import ConflictError, NotFoundError, ValidationError


class InvalidAttribution(ValidationError):
    """
    Raised when a transaction's account/card attribution is not allowed.

    Expenses need exactly one of account or credit card, income needs an
    account.
    """

    default_error_code: str = "INVALID_ATTRIBUTION"


class InvalidAmount(ValidationError):
    default_error_code: str = "INVALID_AMOUNT"


class InvalidRecurrence(ValidationError):
    default_error_code: str = "INVALID_RECURRENCE"


class InvalidInstallments(ValidationError):
    default_error_code: str = "INVALID_INSTALLMENTS"


class InvalidTransfer(ValidationError):
    default_error_code: str = "INVALID_TRANSFER"


class TransactionNotFound(NotFoundError):
    default_error_code: str = "TRANSACTION_NOT_FOUND"


class AccountNotFound(NotFoundError):
    """
    Raised when an account does not exist for the requesting user.

    Also raised by the balance store when a delta targets a missing account,
    which aborts the enclosing unit of work.
    """

    default_error_code: str = "ACCOUNT_NOT_FOUND"


class CreditCardNotFound(NotFoundError):
    default_error_code: str = "CREDIT_CARD_NOT_FOUND"


class InvoiceNotFound(NotFoundError):
    default_error_code: str = "INVOICE_NOT_FOUND"


class CategoryNotFound(NotFoundError):
    default_error_code: str = "CATEGORY_NOT_FOUND"


class GoalNotFound(NotFoundError):
    default_error_code: str = "GOAL_NOT_FOUND"


class InvestmentNotFound(NotFoundError):
    default_error_code: str = "INVESTMENT_NOT_FOUND"


class InvoiceAlreadyPaid(ConflictError):
    """
    Raised when paying an invoice that is already marked paid.

    Example:
        if invoice.paid:
            raise InvoiceAlreadyPaid(
                "Invoice already paid",
                details={"invoice_id": str(invoice.id)},
            )
    """

    default_error_code: str = "INVOICE_ALREADY_PAID"


class NotARecurringDefinition(ConflictError):
    default_error_code: str = "NOT_A_RECURRING_DEFINITION"


class ResourceInUse(ConflictError):
    """Raised when deleting an account or card that transactions still reference."""

    default_error_code: str = "RESOURCE_IN_USE"
