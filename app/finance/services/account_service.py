"""
Account and category service.

The opening balance is set once, at creation. After that the balance only
moves through the ledger, so update_account does not accept it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.db.models import ProtectedError

from core.exceptions import ValidationError
from core.services import BaseService

from ..exceptions import AccountNotFound, CategoryNotFound, ResourceInUse
from ..models import Account, AccountType, Category, TransactionType
from ..money import to_money

if TYPE_CHECKING:
    from django.db.models import QuerySet

ACCOUNT_EDITABLE_FIELDS = ("name", "type", "color")
CATEGORY_EDITABLE_FIELDS = ("name", "icon", "type")


class AccountService(BaseService):
    # =========================================================================
    # Accounts
    # =========================================================================

    def list_accounts(self, user_id) -> QuerySet[Account]:
        return Account.objects.owned_by(user_id).order_by("created_at")

    def get_account(self, account_id, user_id) -> Account:
        try:
            return Account.objects.owned_by(user_id).get(id=account_id)
        except Account.DoesNotExist:
            raise AccountNotFound(
                f"Account {account_id} not found",
                details={"account_id": str(account_id)},
            )

    def create_account(
        self,
        user_id,
        name: str,
        type: str = AccountType.CHECKING,
        balance=0,
        color: str = "",
    ) -> Account:
        if type not in AccountType.values:
            raise ValidationError(
                f"Unknown account type: {type!r}",
                error_code="INVALID_ACCOUNT_TYPE",
                details={"type": str(type)},
            )
        account = Account.objects.create(
            user_id=user_id,
            name=name,
            type=type,
            balance=to_money(balance),
            color=color,
        )
        self.get_logger().info(
            "Account created",
            extra={"account_id": str(account.id), "user_id": str(user_id)},
        )
        return account

    def update_account(self, account_id, user_id, **changes) -> Account:
        unknown = set(changes) - set(ACCOUNT_EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(
                "These account fields cannot be changed",
                details={"fields": sorted(unknown)},
            )
        if "type" in changes and changes["type"] not in AccountType.values:
            raise ValidationError(
                f"Unknown account type: {changes['type']!r}",
                error_code="INVALID_ACCOUNT_TYPE",
            )

        with self.atomic():
            account = self.get_account(account_id, user_id)
            for field, value in changes.items():
                setattr(account, field, value)
            # update_fields keeps a stale in-memory balance from being written back
            account.save(update_fields=[*changes, "updated_at"])
        return account

    def delete_account(self, account_id, user_id) -> None:
        """
        Raises:
            ResourceInUse: While transactions still reference the account
        """
        with self.atomic():
            account = self.get_account(account_id, user_id)
            try:
                account.delete()
            except ProtectedError:
                raise ResourceInUse(
                    "Account still has transactions",
                    details={"account_id": str(account_id)},
                )
        self.get_logger().info(
            "Account deleted",
            extra={"account_id": str(account_id), "user_id": str(user_id)},
        )

    # =========================================================================
    # Categories
    # =========================================================================

    def list_categories(self, user_id, type: str | None = None) -> QuerySet[Category]:
        queryset = Category.objects.owned_by(user_id)
        if type:
            queryset = queryset.filter(type=type)
        return queryset.order_by("name")

    def create_category(self, user_id, name: str, type: str, icon: str = "") -> Category:
        if type not in TransactionType.values:
            raise ValidationError(
                f"Unknown category type: {type!r}",
                error_code="INVALID_CATEGORY_TYPE",
            )
        return Category.objects.create(user_id=user_id, name=name, type=type, icon=icon)

    def get_category(self, category_id, user_id) -> Category:
        try:
            return Category.objects.owned_by(user_id).get(id=category_id)
        except Category.DoesNotExist:
            raise CategoryNotFound(
                f"Category {category_id} not found",
                details={"category_id": str(category_id)},
            )

    def update_category(self, category_id, user_id, **changes) -> Category:
        """Rename, re-icon or retype a category. Existing transactions keep it."""
        unknown = set(changes) - set(CATEGORY_EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(
                "These category fields cannot be changed",
                details={"fields": sorted(unknown)},
            )
        if "type" in changes and changes["type"] not in TransactionType.values:
            raise ValidationError(
                f"Unknown category type: {changes['type']!r}",
                error_code="INVALID_CATEGORY_TYPE",
            )

        with self.atomic():
            category = self.get_category(category_id, user_id)
            for field, value in changes.items():
                setattr(category, field, value)
            category.save(update_fields=[*changes, "updated_at"])
        return category

    def delete_category(self, category_id, user_id) -> None:
        """Transactions keep existing with no category."""
        deleted, _ = Category.objects.owned_by(user_id).filter(id=category_id).delete()
        if not deleted:
            raise CategoryNotFound(
                f"Category {category_id} not found",
                details={"category_id": str(category_id)},
            )


accounts = AccountService()
