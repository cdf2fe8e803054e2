"""Registration of Expo push tokens."""

from __future__ import annotations

from core.exceptions import ValidationError
from core.services import BaseService

from ..models import PushToken
from ..push import is_expo_push_token


class PushTokenService(BaseService):
    def register(self, user_id, token: str, device_name: str = "") -> PushToken:
        """
        Register a device token for the user.

        A token already registered by another user moves to this one (the
        device changed hands or accounts).
        """
        if not is_expo_push_token(token):
            raise ValidationError(
                "Not a valid Expo push token",
                error_code="INVALID_PUSH_TOKEN",
            )
        push_token, created = PushToken.objects.update_or_create(
            token=token,
            defaults={"user_id": user_id, "device_name": device_name},
        )
        if created:
            self.get_logger().info(
                "Push token registered",
                extra={"user_id": str(user_id)},
            )
        return push_token

    def unregister(self, user_id, token: str) -> bool:
        deleted, _ = PushToken.objects.owned_by(user_id).filter(token=token).delete()
        return bool(deleted)


push_tokens = PushTokenService()
