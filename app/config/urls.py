"""
Root URL configuration for the personal-finance service.

URL Structure:
    /admin/                          - Django admin interface
    /health/                         - Health check endpoint (load balancers, Docker)
    /schema/                         - OpenAPI schema
    /api/v1/finance/                 - Finance endpoints (see finance.urls)
        accounts/                    - Account list/create, detail/update/delete
        transactions/                - Transaction list/create, detail/update/delete
        transfers/                   - Account-to-account transfer
        recurrences/{id}/...         - Toggle pause, occurrences, delete with history
        credit-cards/                - Card list/create, detail/update/delete
        credit-cards/{id}/invoices/  - Invoices of a card
        invoices/{id}/pay/           - Pay an invoice from an account
        push-tokens/                 - Register/unregister Expo push tokens
        cron/recurrences/            - Externally triggered recurrence sweep
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView

from core.views import health_check

api_v1_patterns = [
    path("finance/", include("finance.urls")),
]

urlpatterns = [
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("admin/", admin.site.urls),
    path("health/", health_check, name="health_check"),
    path("api/v1/", include(api_v1_patterns)),
]

admin.site.site_header = "Finance Admin"
admin.site.site_title = "Finance Admin Portal"
admin.site.index_title = "Accounts, cards and transactions"
