"""
Initial finance schema.

Creates:
    - Account, Category, CreditCard, CreditCardInvoice, Transaction, PushToken
    - Invoice uniqueness per (card, reference month)
    - Check constraints for positive amounts, single attribution,
      non-negative invoice totals and closing/due day ranges
"""

import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


def _id_field():
    return (
        "id",
        models.UUIDField(
            default=uuid.uuid4,
            editable=False,
            primary_key=True,
            serialize=False,
            help_text="Unique identifier for this record",
        ),
    )


def _timestamp_fields():
    return [
        (
            "created_at",
            models.DateTimeField(
                auto_now_add=True,
                db_index=True,
                help_text="Timestamp when this record was created",
            ),
        ),
        (
            "updated_at",
            models.DateTimeField(
                auto_now=True,
                help_text="Timestamp when this record was last modified",
            ),
        ),
    ]


def _user_field():
    return (
        "user",
        models.ForeignKey(
            on_delete=django.db.models.deletion.CASCADE,
            related_name="+",
            to=settings.AUTH_USER_MODEL,
            help_text="User who owns this record",
        ),
    )


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Account",
            fields=[
                _id_field(),
                *_timestamp_fields(),
                (
                    "name",
                    models.CharField(
                        max_length=100,
                        help_text="Display name of the account",
                    ),
                ),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("wallet", "Wallet"),
                            ("checking", "Checking"),
                            ("digital", "Digital"),
                            ("investment", "Investment"),
                        ],
                        default="checking",
                        max_length=20,
                        help_text="Category of this account",
                    ),
                ),
                (
                    "balance",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        max_digits=14,
                        help_text="Current balance; changed only through balance deltas",
                    ),
                ),
                (
                    "color",
                    models.CharField(
                        blank=True,
                        default="",
                        max_length=20,
                        help_text="Display color (hex) for the client",
                    ),
                ),
                _user_field(),
            ],
            options={
                "ordering": ["created_at"],
                "indexes": [
                    models.Index(
                        fields=["user", "created_at"],
                        name="account_user_created_idx",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Category",
            fields=[
                _id_field(),
                *_timestamp_fields(),
                ("name", models.CharField(max_length=100)),
                ("icon", models.CharField(blank=True, default="", max_length=50)),
                (
                    "type",
                    models.CharField(
                        choices=[("income", "Income"), ("expense", "Expense")],
                        max_length=10,
                        help_text="Transaction type this category applies to",
                    ),
                ),
                _user_field(),
            ],
            options={
                "ordering": ["name"],
                "verbose_name_plural": "categories",
            },
        ),
        migrations.CreateModel(
            name="CreditCard",
            fields=[
                _id_field(),
                *_timestamp_fields(),
                ("name", models.CharField(max_length=100)),
                (
                    "limit",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=14,
                        help_text="Total credit limit",
                    ),
                ),
                (
                    "closing_day",
                    models.PositiveSmallIntegerField(
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(31),
                        ],
                        help_text="Day of month the statement closes",
                    ),
                ),
                (
                    "due_day",
                    models.PositiveSmallIntegerField(
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(31),
                        ],
                        help_text="Day of month the invoice is due",
                    ),
                ),
                ("color", models.CharField(blank=True, default="", max_length=20)),
                _user_field(),
            ],
            options={
                "ordering": ["name"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(closing_day__gte=1)
                        & models.Q(closing_day__lte=31),
                        name="credit_card_closing_day_range",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(due_day__gte=1) & models.Q(due_day__lte=31),
                        name="credit_card_due_day_range",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="CreditCardInvoice",
            fields=[
                _id_field(),
                *_timestamp_fields(),
                (
                    "reference_month",
                    models.CharField(
                        max_length=7,
                        help_text="Invoice month in YYYY-MM form",
                    ),
                ),
                (
                    "total",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        max_digits=14,
                    ),
                ),
                ("paid", models.BooleanField(db_index=True, default=False)),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                (
                    "credit_card",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="invoices",
                        to="finance.creditcard",
                    ),
                ),
                (
                    "paid_with_account",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to="finance.account",
                    ),
                ),
                _user_field(),
            ],
            options={
                "ordering": ["-reference_month"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=["credit_card", "reference_month"],
                        name="unique_invoice_per_card_month",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(total__gte=0),
                        name="credit_card_invoice_total_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Transaction",
            fields=[
                _id_field(),
                *_timestamp_fields(),
                (
                    "description",
                    models.CharField(blank=True, default="", max_length=255),
                ),
                ("amount", models.DecimalField(decimal_places=2, max_digits=14)),
                (
                    "type",
                    models.CharField(
                        choices=[("income", "Income"), ("expense", "Expense")],
                        max_length=10,
                    ),
                ),
                ("date", models.DateField(db_index=True)),
                ("recurring", models.BooleanField(default=False)),
                (
                    "recurrence",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("daily", "Daily"),
                            ("weekly", "Weekly"),
                            ("monthly", "Monthly"),
                            ("yearly", "Yearly"),
                        ],
                        max_length=10,
                        null=True,
                    ),
                ),
                ("next_due_date", models.DateField(blank=True, null=True)),
                (
                    "recurrence_count",
                    models.PositiveIntegerField(blank=True, null=True),
                ),
                ("recurrence_current", models.PositiveIntegerField(default=0)),
                (
                    "recurrence_group_id",
                    models.UUIDField(blank=True, db_index=True, null=True),
                ),
                ("recurrence_paused", models.BooleanField(default=False)),
                ("installments", models.PositiveIntegerField(blank=True, null=True)),
                (
                    "installment_current",
                    models.PositiveIntegerField(blank=True, null=True),
                ),
                (
                    "account",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transactions",
                        to="finance.account",
                    ),
                ),
                (
                    "category",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="transactions",
                        to="finance.category",
                    ),
                ),
                (
                    "credit_card",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transactions",
                        to="finance.creditcard",
                    ),
                ),
                _user_field(),
            ],
            options={
                "ordering": ["-date", "-created_at"],
                "indexes": [
                    models.Index(
                        fields=["user", "date"],
                        name="transaction_user_date_idx",
                    ),
                    models.Index(
                        fields=["recurring", "recurrence_paused", "next_due_date"],
                        name="transaction_recurring_due_idx",
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(amount__gt=0),
                        name="transaction_amount_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(account__isnull=True)
                        | models.Q(credit_card__isnull=True),
                        name="transaction_single_attribution",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="PushToken",
            fields=[
                _id_field(),
                *_timestamp_fields(),
                ("token", models.CharField(max_length=255, unique=True)),
                (
                    "device_name",
                    models.CharField(blank=True, default="", max_length=100),
                ),
                _user_field(),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
    ]
