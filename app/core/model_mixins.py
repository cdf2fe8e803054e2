"""
Model mixins providing reusable functionality for Django models.

Available Mixins:
    UUIDPrimaryKeyMixin: Use UUID as primary key
    UserOwnedMixin: Owning user foreign key plus per-user lookups

Usage:
    from core.models import BaseModel
    from core.model_mixins import UUIDPrimaryKeyMixin, UserOwnedMixin

    class CreditCard(UUIDPrimaryKeyMixin, UserOwnedMixin, BaseModel):
        name = models.CharField(max_length=100)

    card = CreditCard.objects.owned_by(user_id).get(id=card_id)

Note:
    - Always list mixins before BaseModel in inheritance
    - Mixins are abstract and don't create database tables
"""

from __future__ import annotations

import uuid

from django.conf import settings
from django.db import models


class UUIDPrimaryKeyMixin(models.Model):
    """
    Use UUID as primary key instead of auto-increment integer.

    IDs are non-guessable and can be handed to the mobile client without
    revealing record counts.

    Fields:
        id: UUIDField as primary key (auto-generated)
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for this record",
    )

    class Meta:
        abstract = True


class OwnedQuerySet(models.QuerySet):
    """QuerySet with a per-user filter used by every scoped lookup."""

    def owned_by(self, user_id) -> OwnedQuerySet:
        return self.filter(user_id=user_id)


class UserOwnedMixin(models.Model):
    """
    Attach a record to the user who owns it.

    All service lookups go through ``objects.owned_by(user_id)`` so a record
    belonging to another user is indistinguishable from a missing one.

    Fields:
        user: Owning user (cascade delete)
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="+",
        help_text="User who owns this record",
    )

    objects = OwnedQuerySet.as_manager()

    class Meta:
        abstract = True
