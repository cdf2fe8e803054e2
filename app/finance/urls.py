"""
URL configuration for the finance API.

All URLs are prefixed with /api/v1/finance/ in the main URL configuration.
See finance.views for the endpoint list.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from finance.views import (
    AccountViewSet,
    CategoryViewSet,
    CreditCardViewSet,
    CronRecurrenceView,
    GoalViewSet,
    InvestmentViewSet,
    InvoiceViewSet,
    PushTokenView,
    RecurrenceViewSet,
    TransactionViewSet,
    TransferView,
)

router = DefaultRouter()
router.register(r"accounts", AccountViewSet, basename="account")
router.register(r"categories", CategoryViewSet, basename="category")
router.register(r"transactions", TransactionViewSet, basename="transaction")
router.register(r"recurrences", RecurrenceViewSet, basename="recurrence")
router.register(r"credit-cards", CreditCardViewSet, basename="credit-card")
router.register(r"invoices", InvoiceViewSet, basename="invoice")
router.register(r"goals", GoalViewSet, basename="goal")
router.register(r"investments", InvestmentViewSet, basename="investment")

app_name = "finance"

urlpatterns = [
    path("transfers/", TransferView.as_view(), name="transfer"),
    path("push-tokens/", PushTokenView.as_view(), name="push-tokens"),
    path("cron/recurrences/", CronRecurrenceView.as_view(), name="cron-recurrences"),
    path("", include(router.urls)),
]
