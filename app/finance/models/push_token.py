"""Expo push token registered by a user's device."""

from __future__ import annotations

from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin, UserOwnedMixin
from core.models import BaseModel


class PushToken(UUIDPrimaryKeyMixin, UserOwnedMixin, BaseModel):
    """
    A device push token.

    Fields:
        token: Expo token (``ExponentPushToken[...]``), unique across users
        device_name: Optional label shown in device listings
    """

    token = models.CharField(max_length=255, unique=True)
    device_name = models.CharField(max_length=100, blank=True, default="")

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"PushToken(user={self.user_id})"
