"""
Add savings goals and manually tracked investments.

Creates:
    - Goal with positive target and non-negative saved amount
    - Investment with non-negative principal and current value
"""

import uuid
from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


def _base_fields():
    return [
        (
            "id",
            models.UUIDField(
                default=uuid.uuid4,
                editable=False,
                primary_key=True,
                serialize=False,
                help_text="Unique identifier for this record",
            ),
        ),
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
    dependencies = [
        ("finance", "0002_add_recurrence_sweep_schedule"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Goal",
            fields=[
                *_base_fields(),
                ("name", models.CharField(max_length=100)),
                (
                    "target_amount",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=14,
                        help_text="Amount the user wants to reach",
                    ),
                ),
                (
                    "current_amount",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        max_digits=14,
                        help_text="Amount saved so far",
                    ),
                ),
                ("deadline", models.DateField(blank=True, null=True)),
                ("icon", models.CharField(blank=True, default="", max_length=50)),
                _user_field(),
            ],
            options={
                "ordering": ["created_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(target_amount__gt=0),
                        name="goal_target_amount_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(current_amount__gte=0),
                        name="goal_current_amount_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Investment",
            fields=[
                *_base_fields(),
                ("name", models.CharField(max_length=100)),
                ("type", models.CharField(max_length=50, help_text="Kind of investment")),
                (
                    "principal",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=14,
                        help_text="Amount originally invested",
                    ),
                ),
                (
                    "current_value",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=14,
                        help_text="Latest value entered by the user",
                    ),
                ),
                (
                    "return_rate",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        max_digits=7,
                        help_text="Yearly return in percent",
                    ),
                ),
                ("start_date", models.DateField()),
                _user_field(),
            ],
            options={
                "ordering": ["created_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(principal__gte=0),
                        name="investment_principal_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(current_value__gte=0),
                        name="investment_current_value_non_negative",
                    ),
                ],
            },
        ),
    ]
