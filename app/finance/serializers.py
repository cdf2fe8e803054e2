"""
DRF serializers for the finance app.

The mobile client speaks camelCase; fields map onto snake_case model
attributes through ``source``. Input serializers only shape and type-check
the payload. Business rules live in finance.types and the services.

Related files:
    - types.py: TransactionInput / TransactionPatch built from validated data
    - views.py: API views

Usage:
    serializer = TransactionCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    tx = ledger.create(request.user.id, serializer.to_input())
"""

from __future__ import annotations

from django.utils import timezone
from rest_framework import serializers

from .models import (
    Account,
    AccountType,
    Category,
    CreditCard,
    CreditCardInvoice,
    Goal,
    Investment,
    Recurrence,
    Transaction,
    TransactionType,
)
from .types import TransactionInput, TransactionPatch


def _money_field(**kwargs) -> serializers.DecimalField:
    return serializers.DecimalField(max_digits=14, decimal_places=2, **kwargs)


# =============================================================================
# Accounts and Categories
# =============================================================================


class AccountSerializer(serializers.ModelSerializer):
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = Account
        fields = ["id", "name", "type", "balance", "color", "createdAt"]
        read_only_fields = fields


class AccountCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    type = serializers.ChoiceField(choices=AccountType.choices, default=AccountType.CHECKING)
    balance = _money_field(required=False, default=0)
    color = serializers.CharField(max_length=20, required=False, allow_blank=True, default="")


class AccountUpdateSerializer(serializers.Serializer):
    """Balance is deliberately absent: it only moves through transactions."""

    name = serializers.CharField(max_length=100, required=False)
    type = serializers.ChoiceField(choices=AccountType.choices, required=False)
    color = serializers.CharField(max_length=20, required=False, allow_blank=True)


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ["id", "name", "icon", "type"]
        read_only_fields = ["id"]


class CategoryUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100, required=False)
    icon = serializers.CharField(max_length=50, required=False, allow_blank=True)
    type = serializers.ChoiceField(choices=TransactionType.choices, required=False)


# =============================================================================
# Transactions
# =============================================================================


class TransactionSerializer(serializers.ModelSerializer):
    accountId = serializers.UUIDField(source="account_id", read_only=True)
    creditCardId = serializers.UUIDField(source="credit_card_id", read_only=True)
    categoryId = serializers.UUIDField(source="category_id", read_only=True)
    nextDueDate = serializers.DateField(source="next_due_date", read_only=True)
    recurrenceCount = serializers.IntegerField(source="recurrence_count", read_only=True)
    recurrenceCurrent = serializers.IntegerField(source="recurrence_current", read_only=True)
    recurrenceGroupId = serializers.UUIDField(source="recurrence_group_id", read_only=True)
    recurrencePaused = serializers.BooleanField(source="recurrence_paused", read_only=True)
    recurrenceState = serializers.CharField(source="recurrence_state", read_only=True)
    installmentCurrent = serializers.IntegerField(source="installment_current", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = Transaction
        fields = [
            "id",
            "accountId",
            "creditCardId",
            "categoryId",
            "description",
            "amount",
            "type",
            "date",
            "recurring",
            "recurrence",
            "nextDueDate",
            "recurrenceCount",
            "recurrenceCurrent",
            "recurrenceGroupId",
            "recurrencePaused",
            "recurrenceState",
            "installments",
            "installmentCurrent",
            "createdAt",
        ]
        read_only_fields = fields


class TransactionCreateSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=TransactionType.choices)
    amount = _money_field()
    date = serializers.DateField(required=False)
    description = serializers.CharField(
        max_length=255, required=False, allow_blank=True, default=""
    )
    accountId = serializers.UUIDField(source="account_id", required=False, allow_null=True)
    creditCardId = serializers.UUIDField(
        source="credit_card_id", required=False, allow_null=True
    )
    categoryId = serializers.UUIDField(source="category_id", required=False, allow_null=True)
    recurring = serializers.BooleanField(required=False, default=False)
    recurrence = serializers.ChoiceField(
        choices=Recurrence.choices, required=False, allow_null=True
    )
    recurrenceCount = serializers.IntegerField(
        source="recurrence_count", required=False, allow_null=True, min_value=1
    )
    installments = serializers.IntegerField(required=False, allow_null=True, min_value=1)

    def to_input(self) -> TransactionInput:
        data = dict(self.validated_data)
        data.setdefault("date", timezone.localdate())
        return TransactionInput(**data)


class TransactionUpdateSerializer(serializers.Serializer):
    """Partial update. Omitted fields keep their stored value."""

    type = serializers.ChoiceField(choices=TransactionType.choices, required=False)
    amount = _money_field(required=False)
    date = serializers.DateField(required=False)
    description = serializers.CharField(max_length=255, required=False, allow_blank=True)
    accountId = serializers.UUIDField(source="account_id", required=False, allow_null=True)
    creditCardId = serializers.UUIDField(
        source="credit_card_id", required=False, allow_null=True
    )
    categoryId = serializers.UUIDField(source="category_id", required=False, allow_null=True)
    recurrence = serializers.ChoiceField(
        choices=Recurrence.choices, required=False, allow_null=True
    )
    recurrenceCount = serializers.IntegerField(
        source="recurrence_count", required=False, allow_null=True, min_value=1
    )
    installments = serializers.IntegerField(required=False, allow_null=True, min_value=1)

    def to_patch(self) -> TransactionPatch:
        return TransactionPatch(**self.validated_data)


class TransferSerializer(serializers.Serializer):
    fromAccountId = serializers.UUIDField(source="from_account_id")
    toAccountId = serializers.UUIDField(source="to_account_id")
    amount = _money_field()
    description = serializers.CharField(max_length=255, required=False, allow_blank=True)
    date = serializers.DateField(required=False)


class RecurrencePauseSerializer(serializers.Serializer):
    paused = serializers.BooleanField()


# =============================================================================
# Credit Cards
# =============================================================================


class CreditCardSerializer(serializers.ModelSerializer):
    closingDay = serializers.IntegerField(source="closing_day", read_only=True)
    dueDay = serializers.IntegerField(source="due_day", read_only=True)
    usedAmount = _money_field(source="get_used_amount", read_only=True)
    availableLimit = _money_field(source="get_available_limit", read_only=True)

    class Meta:
        model = CreditCard
        fields = [
            "id",
            "name",
            "limit",
            "closingDay",
            "dueDay",
            "color",
            "usedAmount",
            "availableLimit",
        ]
        read_only_fields = fields


class CreditCardCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    limit = _money_field(min_value=0)
    closingDay = serializers.IntegerField(source="closing_day", min_value=1, max_value=31)
    dueDay = serializers.IntegerField(source="due_day", min_value=1, max_value=31)
    color = serializers.CharField(max_length=20, required=False, allow_blank=True, default="")


class CreditCardUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100, required=False)
    limit = _money_field(min_value=0, required=False)
    closingDay = serializers.IntegerField(
        source="closing_day", min_value=1, max_value=31, required=False
    )
    dueDay = serializers.IntegerField(source="due_day", min_value=1, max_value=31, required=False)
    color = serializers.CharField(max_length=20, required=False, allow_blank=True)


class InvoiceSerializer(serializers.ModelSerializer):
    creditCardId = serializers.UUIDField(source="credit_card_id", read_only=True)
    referenceMonth = serializers.CharField(source="reference_month", read_only=True)
    paidAt = serializers.DateTimeField(source="paid_at", read_only=True)
    paidWithAccountId = serializers.UUIDField(source="paid_with_account_id", read_only=True)

    class Meta:
        model = CreditCardInvoice
        fields = [
            "id",
            "creditCardId",
            "referenceMonth",
            "total",
            "paid",
            "paidAt",
            "paidWithAccountId",
        ]
        read_only_fields = fields


class PayInvoiceSerializer(serializers.Serializer):
    accountId = serializers.UUIDField(source="account_id")


# =============================================================================
# Goals and Investments
# =============================================================================


class GoalSerializer(serializers.ModelSerializer):
    targetAmount = _money_field(source="target_amount", read_only=True)
    currentAmount = _money_field(source="current_amount", read_only=True)
    isReached = serializers.BooleanField(source="is_reached", read_only=True)

    class Meta:
        model = Goal
        fields = ["id", "name", "targetAmount", "currentAmount", "deadline", "icon", "isReached"]
        read_only_fields = fields


class GoalInputSerializer(serializers.Serializer):
    """Used with ``partial=True`` for PATCH, where defaults are not applied."""

    name = serializers.CharField(max_length=100)
    targetAmount = _money_field(source="target_amount")
    currentAmount = _money_field(source="current_amount", required=False, default=0)
    deadline = serializers.DateField(required=False, allow_null=True, default=None)
    icon = serializers.CharField(max_length=50, required=False, allow_blank=True, default="")


class InvestmentSerializer(serializers.ModelSerializer):
    currentValue = _money_field(source="current_value", read_only=True)
    returnRate = serializers.DecimalField(
        source="return_rate", max_digits=7, decimal_places=2, read_only=True
    )
    startDate = serializers.DateField(source="start_date", read_only=True)
    gain = _money_field(read_only=True)

    class Meta:
        model = Investment
        fields = [
            "id",
            "name",
            "type",
            "principal",
            "currentValue",
            "returnRate",
            "startDate",
            "gain",
        ]
        read_only_fields = fields


class InvestmentInputSerializer(serializers.Serializer):
    """Used with ``partial=True`` for PATCH, where defaults are not applied."""

    name = serializers.CharField(max_length=100)
    type = serializers.CharField(max_length=50)
    principal = _money_field()
    currentValue = _money_field(source="current_value")
    returnRate = serializers.DecimalField(
        source="return_rate", max_digits=7, decimal_places=2, required=False, default=0
    )
    startDate = serializers.DateField(source="start_date")


# =============================================================================
# Push Tokens
# =============================================================================


class PushTokenSerializer(serializers.Serializer):
    token = serializers.CharField(max_length=255)
    deviceName = serializers.CharField(
        source="device_name", max_length=100, required=False, allow_blank=True, default=""
    )
