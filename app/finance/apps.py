"""
Finance app configuration.

Provides the personal-finance domain:
- Accounts and their balances
- Income/expense transactions, transfers and recurring definitions
- Credit cards with monthly invoice buckets
"""

from django.apps import AppConfig


class FinanceConfig(AppConfig):
    """Configuration for the finance application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "finance"
    verbose_name = "Finance"
