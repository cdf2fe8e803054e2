"""
Base service layer patterns for business logic encapsulation.

Services encapsulate business logic separate from views and models.
Views handle HTTP concerns, models handle data, services handle logic.

Error Policy:
    - Expected failures (bad input, missing rows, state conflicts) raise the
      typed errors from core.exceptions and roll the unit of work back.
    - Database failures inside a unit of work surface as InfrastructureError
      so callers can tell "fix your input" from "retry as-is".

Usage:
    from core.services import BaseService

    class AccountService(BaseService):
        def create_account(self, user_id, name):
            with self.atomic():
                account = Account.objects.create(user_id=user_id, name=name)

            self.get_logger().info(f"Created account {account.id}")
            return account
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

from django.db import DatabaseError, transaction

from core.exceptions import InfrastructureError

if TYPE_CHECKING:
    from collections.abc import Generator


class BaseService:
    """
    Base class for service layer classes.

    Provides:
    - Logging named after the concrete service class
    - The unit-of-work boundary used by every public operation

    Design Notes:
        - Services hold collaborators, never per-request state
        - Collaborators are passed to the constructor
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """Get a logger named after the service class."""
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls) -> Generator[None, None, None]:
        """
        Run the enclosed operations as one unit of work.

        Everything inside commits together or rolls back together. Nested
        use joins the outer unit of work through a savepoint.

        Raises:
            InfrastructureError: If the database fails inside the block.
                The block has been rolled back when this is raised.

        Example:
            with cls.atomic():
                balances.apply_delta(account_id, -amount)
                Transaction.objects.create(...)
        """
        try:
            with transaction.atomic():
                yield
        except DatabaseError as exc:
            cls.get_logger().exception("Unit of work rolled back on database error")
            raise InfrastructureError(
                "Storage failure, no changes were applied",
                details={"reason": exc.__class__.__name__},
            ) from exc
