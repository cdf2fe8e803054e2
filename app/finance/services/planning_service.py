"""
Goal and investment service.

Goals and investments are bookkeeping the user maintains by hand. They do
not touch account balances or invoices, so these operations stay outside
the ledger.

Usage:
    from finance.services import planning

    goal = planning.create_goal(user.id, "Trip", target_amount=Decimal("3000"))
    planning.update_goal(goal.id, user.id, current_amount=Decimal("450"))

    planning.create_investment(
        user.id, "CDB", type="cdb", principal=Decimal("1000"),
        current_value=Decimal("1040"), start_date=date(2024, 1, 2),
    )
"""

from __future__ import annotations

import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from core.exceptions import ValidationError
from core.services import BaseService

from ..exceptions import GoalNotFound, InvalidAmount, InvestmentNotFound
from ..models import Goal, Investment
from ..money import to_money

if TYPE_CHECKING:
    from django.db.models import QuerySet

GOAL_EDITABLE_FIELDS = ("name", "target_amount", "current_amount", "deadline", "icon")
INVESTMENT_EDITABLE_FIELDS = (
    "name",
    "type",
    "principal",
    "current_value",
    "return_rate",
    "start_date",
)


def _non_negative(field: str, value) -> Decimal:
    amount = to_money(value)
    if amount < 0:
        raise InvalidAmount(f"{field} cannot be negative", details={field: str(amount)})
    return amount


def _positive(field: str, value) -> Decimal:
    amount = to_money(value)
    if amount <= 0:
        raise InvalidAmount(
            f"{field} must be greater than zero", details={field: str(amount)}
        )
    return amount


def _reject_unknown(changes: dict, editable: tuple[str, ...], label: str) -> None:
    unknown = set(changes) - set(editable)
    if unknown:
        raise ValidationError(
            f"Unknown {label} fields",
            details={"fields": sorted(unknown)},
        )


class PlanningService(BaseService):
    # =========================================================================
    # Goals
    # =========================================================================

    def list_goals(self, user_id) -> QuerySet[Goal]:
        return Goal.objects.owned_by(user_id).order_by("created_at")

    def get_goal(self, goal_id, user_id) -> Goal:
        try:
            return Goal.objects.owned_by(user_id).get(id=goal_id)
        except Goal.DoesNotExist:
            raise GoalNotFound(
                f"Goal {goal_id} not found",
                details={"goal_id": str(goal_id)},
            )

    def create_goal(
        self,
        user_id,
        name: str,
        target_amount,
        current_amount=0,
        deadline: datetime.date | None = None,
        icon: str = "",
    ) -> Goal:
        """
        Raises:
            InvalidAmount: Target not positive or saved amount negative
        """
        goal = Goal.objects.create(
            user_id=user_id,
            name=name,
            target_amount=_positive("target_amount", target_amount),
            current_amount=_non_negative("current_amount", current_amount),
            deadline=deadline,
            icon=icon,
        )
        self.get_logger().info(
            "Goal created",
            extra={"goal_id": str(goal.id), "user_id": str(user_id)},
        )
        return goal

    def update_goal(self, goal_id, user_id, **changes) -> Goal:
        _reject_unknown(changes, GOAL_EDITABLE_FIELDS, "goal")
        if "target_amount" in changes:
            changes["target_amount"] = _positive("target_amount", changes["target_amount"])
        if "current_amount" in changes:
            changes["current_amount"] = _non_negative(
                "current_amount", changes["current_amount"]
            )

        with self.atomic():
            goal = self.get_goal(goal_id, user_id)
            for field, value in changes.items():
                setattr(goal, field, value)
            goal.save(update_fields=[*changes, "updated_at"])
        return goal

    def delete_goal(self, goal_id, user_id) -> None:
        deleted, _ = Goal.objects.owned_by(user_id).filter(id=goal_id).delete()
        if not deleted:
            raise GoalNotFound(
                f"Goal {goal_id} not found",
                details={"goal_id": str(goal_id)},
            )

    # =========================================================================
    # Investments
    # =========================================================================

    def list_investments(self, user_id) -> QuerySet[Investment]:
        return Investment.objects.owned_by(user_id).order_by("created_at")

    def get_investment(self, investment_id, user_id) -> Investment:
        try:
            return Investment.objects.owned_by(user_id).get(id=investment_id)
        except Investment.DoesNotExist:
            raise InvestmentNotFound(
                f"Investment {investment_id} not found",
                details={"investment_id": str(investment_id)},
            )

    def create_investment(
        self,
        user_id,
        name: str,
        type: str,
        principal,
        current_value,
        start_date: datetime.date,
        return_rate=0,
    ) -> Investment:
        """
        Raises:
            InvalidAmount: Principal or current value negative
        """
        investment = Investment.objects.create(
            user_id=user_id,
            name=name,
            type=type,
            principal=_non_negative("principal", principal),
            current_value=_non_negative("current_value", current_value),
            return_rate=to_money(return_rate),
            start_date=start_date,
        )
        self.get_logger().info(
            "Investment created",
            extra={"investment_id": str(investment.id), "user_id": str(user_id)},
        )
        return investment

    def update_investment(self, investment_id, user_id, **changes) -> Investment:
        _reject_unknown(changes, INVESTMENT_EDITABLE_FIELDS, "investment")
        for field in ("principal", "current_value"):
            if field in changes:
                changes[field] = _non_negative(field, changes[field])
        if "return_rate" in changes:
            changes["return_rate"] = to_money(changes["return_rate"])

        with self.atomic():
            investment = self.get_investment(investment_id, user_id)
            for field, value in changes.items():
                setattr(investment, field, value)
            investment.save(update_fields=[*changes, "updated_at"])
        return investment

    def delete_investment(self, investment_id, user_id) -> None:
        deleted, _ = Investment.objects.owned_by(user_id).filter(id=investment_id).delete()
        if not deleted:
            raise InvestmentNotFound(
                f"Investment {investment_id} not found",
                details={"investment_id": str(investment_id)},
            )


planning = PlanningService()
