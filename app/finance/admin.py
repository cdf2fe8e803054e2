"""
Django admin configuration for finance models.

Balances and invoice totals are read-only here; they only move through the
ledger services. Transactions are view-only.
"""

from django.contrib import admin

from .models import (
    Account,
    Category,
    CreditCard,
    CreditCardInvoice,
    Goal,
    Investment,
    PushToken,
    Transaction,
)


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = ["id", "name", "type", "balance", "user", "created_at"]
    list_filter = ["type"]
    search_fields = ["id", "name", "user__username"]
    readonly_fields = ["id", "balance", "created_at", "updated_at"]
    ordering = ["-created_at"]


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ["name", "type", "user"]
    list_filter = ["type"]
    search_fields = ["name"]


@admin.register(Goal)
class GoalAdmin(admin.ModelAdmin):
    list_display = ["name", "target_amount", "current_amount", "deadline", "user"]
    search_fields = ["name"]
    readonly_fields = ["id", "created_at", "updated_at"]


@admin.register(Investment)
class InvestmentAdmin(admin.ModelAdmin):
    list_display = ["name", "type", "principal", "current_value", "return_rate", "user"]
    list_filter = ["type"]
    search_fields = ["name"]
    readonly_fields = ["id", "created_at", "updated_at"]


class CreditCardInvoiceInline(admin.TabularInline):
    model = CreditCardInvoice
    extra = 0
    fields = ["reference_month", "total", "paid", "paid_at", "paid_with_account"]
    readonly_fields = fields
    can_delete = False
    ordering = ["-reference_month"]

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(CreditCard)
class CreditCardAdmin(admin.ModelAdmin):
    list_display = ["id", "name", "limit", "closing_day", "due_day", "used_amount_display", "user"]
    search_fields = ["id", "name"]
    readonly_fields = ["id", "used_amount_display", "created_at", "updated_at"]
    inlines = [CreditCardInvoiceInline]

    def get_queryset(self, request):
        return super().get_queryset(request).with_used_amount()

    @admin.display(description="Used")
    def used_amount_display(self, obj: CreditCard) -> str:
        return f"{obj.get_used_amount():,.2f}"


@admin.register(CreditCardInvoice)
class CreditCardInvoiceAdmin(admin.ModelAdmin):
    list_display = ["credit_card", "reference_month", "total", "paid", "paid_at"]
    list_filter = ["paid"]
    search_fields = ["credit_card__name", "reference_month"]
    readonly_fields = [
        "id",
        "credit_card",
        "reference_month",
        "total",
        "paid",
        "paid_at",
        "paid_with_account",
        "created_at",
    ]

    def has_add_permission(self, request):
        return False


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    """
    View-only: edits must go through the ledger so effects are reversed
    and reapplied.
    """

    list_display = [
        "date",
        "type",
        "amount",
        "description",
        "account",
        "credit_card",
        "recurring",
        "recurrence_paused",
    ]
    list_filter = ["type", "recurring", "recurrence", "recurrence_paused"]
    search_fields = ["id", "description", "recurrence_group_id"]
    date_hierarchy = "date"
    ordering = ["-date"]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(PushToken)
class PushTokenAdmin(admin.ModelAdmin):
    list_display = ["user", "device_name", "created_at"]
    search_fields = ["token", "device_name"]
