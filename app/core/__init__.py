"""
Core Application - Infrastructure & Base Classes

Generic, reusable building blocks shared by the domain apps. Business logic
does not belong here.

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Model Mixins (import from core.model_mixins):
    - UUIDPrimaryKeyMixin: UUID as primary key
    - UserOwnedMixin: Owning user plus ``objects.owned_by(user_id)``

Services (import from core.services):
    - BaseService: Logging and unit-of-work boundary for services

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes
    - ValidationError: Input validation failures
    - NotFoundError: Resource not found
    - ConflictError: State conflicts
    - InfrastructureError: Storage failures, safe to retry

Note:
    Django models and model mixins are NOT imported here to avoid
    AppRegistryNotReady errors. Import them directly from their modules.
"""

from .exceptions import (
    BaseApplicationError,
    ConflictError,
    InfrastructureError,
    NotFoundError,
    ValidationError,
)

__all__ = [
    "BaseApplicationError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "InfrastructureError",
]
