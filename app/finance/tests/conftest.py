"""
Pytest fixtures for finance tests.

Provides:
- Users (owner and a second, unrelated user)
- Accounts, cards and categories owned by the primary user
- API clients authenticated as either user
- Helpers for building TransactionInput objects

Factories do not apply balance effects; fixtures that need an effect go
through the ledger service.
"""

import datetime
from decimal import Decimal
from unittest import mock

import pytest
from rest_framework.test import APIClient

from finance.models import AccountType, TransactionType
from finance.types import TransactionInput

from .factories import (
    AccountFactory,
    CategoryFactory,
    CreditCardFactory,
    UserFactory,
)

# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def user(db):
    """Primary user owning the fixtures below."""
    return UserFactory()


@pytest.fixture
def other_user(db):
    """A second user, used to check ownership scoping."""
    return UserFactory()


# =============================================================================
# Account / Card / Category Fixtures
# =============================================================================


@pytest.fixture
def account(user):
    """Checking account with a 100.00 opening balance."""
    return AccountFactory(user=user, name="Checking", balance=Decimal("100.00"))


@pytest.fixture
def savings(user):
    """Second account of the primary user, empty."""
    return AccountFactory(user=user, name="Savings", type=AccountType.INVESTMENT)


@pytest.fixture
def card(user):
    """Credit card closing on the 25th."""
    return CreditCardFactory(user=user, name="Visa", closing_day=25, due_day=5)


@pytest.fixture
def category(user):
    return CategoryFactory(user=user, name="Groceries", type=TransactionType.EXPENSE)


# =============================================================================
# Input Helpers
# =============================================================================


@pytest.fixture
def expense_input():
    """
    Build an expense TransactionInput.

    Usage:
        data = expense_input(account_id=account.id, amount="30.00")
    """

    def _build(**overrides):
        fields = {
            "type": TransactionType.EXPENSE,
            "amount": Decimal("30.00"),
            "date": datetime.date(2024, 3, 10),
            "description": "Groceries",
        }
        fields.update(overrides)
        return TransactionInput(**fields)

    return _build


@pytest.fixture
def income_input():
    def _build(**overrides):
        fields = {
            "type": TransactionType.INCOME,
            "amount": Decimal("1000.00"),
            "date": datetime.date(2024, 3, 1),
            "description": "Salary",
        }
        fields.update(overrides)
        return TransactionInput(**fields)

    return _build


# =============================================================================
# Notification Fixtures
# =============================================================================


@pytest.fixture
def push_delay():
    """Patch the push task's delay() so nothing reaches the broker."""
    with mock.patch("finance.tasks.send_push_notification.delay") as delay:
        yield delay


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def authenticated_client(user):
    """API client authenticated as the primary user."""
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def other_client(other_user):
    client = APIClient()
    client.force_authenticate(user=other_user)
    return client
