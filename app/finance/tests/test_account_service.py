"""Tests for AccountService (accounts and categories)."""

import uuid
from decimal import Decimal

import pytest

from core.exceptions import ValidationError
from finance.exceptions import AccountNotFound, CategoryNotFound, ResourceInUse
from finance.models import Account, AccountType, Transaction, TransactionType
from finance.services import accounts, ledger

from .factories import AccountFactory, CategoryFactory


class TestAccounts:
    """Tests for account management."""

    def test_create_with_opening_balance(self, db, user):
        account = accounts.create_account(
            user.id, "Wallet", type=AccountType.WALLET, balance="25.5"
        )

        assert account.balance == Decimal("25.50")
        assert account.type == AccountType.WALLET

    def test_create_unknown_type(self, db, user):
        with pytest.raises(ValidationError) as exc_info:
            accounts.create_account(user.id, "Wallet", type="crypto")

        assert exc_info.value.error_code == "INVALID_ACCOUNT_TYPE"

    def test_list_is_scoped(self, db, user, account, other_user):
        AccountFactory(user=other_user)

        assert list(accounts.list_accounts(user.id)) == [account]

    def test_get_other_users_account(self, db, account, other_user):
        with pytest.raises(AccountNotFound):
            accounts.get_account(account.id, other_user.id)

    def test_update_does_not_write_balance(self, db, user, account):
        """Should keep balance changes made after the row was loaded."""
        accounts.get_account(account.id, user.id)
        Account.objects.filter(id=account.id).update(balance=Decimal("42.00"))

        updated = accounts.update_account(account.id, user.id, name="Main")

        updated.refresh_from_db()
        assert updated.name == "Main"
        assert updated.balance == Decimal("42.00")

    def test_balance_is_not_editable(self, db, user, account):
        with pytest.raises(ValidationError):
            accounts.update_account(account.id, user.id, balance=Decimal("1000"))

    def test_delete_unused(self, db, user, account):
        accounts.delete_account(account.id, user.id)

        assert not Account.objects.filter(id=account.id).exists()

    def test_delete_in_use(self, db, user, account, expense_input):
        """Should refuse to delete an account with transactions."""
        ledger.create(user.id, expense_input(account_id=account.id))

        with pytest.raises(ResourceInUse):
            accounts.delete_account(account.id, user.id)

    def test_delete_missing(self, db, user):
        with pytest.raises(AccountNotFound):
            accounts.delete_account(uuid.uuid4(), user.id)


class TestCategories:
    """Tests for category management."""

    def test_create_and_filter(self, db, user):
        accounts.create_category(user.id, "Salary", TransactionType.INCOME)
        accounts.create_category(user.id, "Food", TransactionType.EXPENSE, icon="utensils")

        names = [c.name for c in accounts.list_categories(user.id, type="expense")]

        assert names == ["Food"]
        assert accounts.list_categories(user.id).count() == 2

    def test_unknown_type(self, db, user):
        with pytest.raises(ValidationError):
            accounts.create_category(user.id, "Misc", "other")

    def test_delete_keeps_transactions(self, db, user, account, category, expense_input):
        tx = ledger.create(
            user.id, expense_input(account_id=account.id, category_id=category.id)
        )

        accounts.delete_category(category.id, user.id)

        tx.refresh_from_db()
        assert tx.category_id is None
        assert Transaction.objects.filter(id=tx.id).exists()

    def test_delete_other_users_category(self, db, other_user):
        category = CategoryFactory()

        with pytest.raises(CategoryNotFound):
            accounts.delete_category(category.id, other_user.id)

    def test_update(self, db, user, category):
        updated = accounts.update_category(
            category.id, user.id, name="Supermarket", icon="cart"
        )

        updated.refresh_from_db()
        assert updated.name == "Supermarket"
        assert updated.icon == "cart"
        assert updated.type == TransactionType.EXPENSE

    def test_update_keeps_transactions_linked(self, db, user, account, category, expense_input):
        tx = ledger.create(
            user.id, expense_input(account_id=account.id, category_id=category.id)
        )

        accounts.update_category(category.id, user.id, type=TransactionType.INCOME)

        tx.refresh_from_db()
        assert tx.category_id == category.id

    def test_update_unknown_type(self, db, user, category):
        with pytest.raises(ValidationError) as exc_info:
            accounts.update_category(category.id, user.id, type="other")

        assert exc_info.value.error_code == "INVALID_CATEGORY_TYPE"

    def test_update_unknown_field(self, db, user, category):
        with pytest.raises(ValidationError):
            accounts.update_category(category.id, user.id, user_id=123)

    def test_update_other_users_category(self, db, category, other_user):
        with pytest.raises(CategoryNotFound):
            accounts.update_category(category.id, other_user.id, name="Mine")
