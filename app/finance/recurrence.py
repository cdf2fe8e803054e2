"""
Recurrence engine.

Turns recurring definitions into concrete occurrences and tracks each
definition's schedule.

State machine:
    ACTIVE  --(count reached)-->  FINISHED
    ACTIVE  <--(toggle)-->        PAUSED

    - Active definitions fire on their own next_due_date
    - Paused definitions are skipped by the sweep and keep next_due_date
    - Finished definitions have recurring=False and next_due_date=None

The definition row itself is the first occurrence: it carries its own
financial effect and starts with recurrence_current=1.

Sweep:
    Each due definition is handled independently. Every occurrence is
    materialized in its own unit of work after re-reading the definition
    under a row lock, and a definition that is several periods behind is
    caught up in the same run. A failing definition is logged and skipped.
    Running the sweep again for the same day finds nothing due.

Usage:
    from finance.recurrence import advance, recurrence

    advance("monthly", date(2024, 1, 31))  # date(2024, 2, 29)
    result = recurrence.sweep()
"""

from __future__ import annotations

import datetime
import uuid
from typing import TYPE_CHECKING

from dateutil.relativedelta import relativedelta
from django.conf import settings
from django.utils import timezone

from core.services import BaseService

from .effects import EffectApplier, FinancialEffect, effects
from .exceptions import InvalidRecurrence, NotARecurringDefinition, TransactionNotFound
from .models import Recurrence, Transaction, TransactionType
from .money import format_money
from .notifications import PushNotifier, notifier
from .types import SweepResult

if TYPE_CHECKING:
    from typing import Any

_STEPS = {
    Recurrence.DAILY: relativedelta(days=1),
    Recurrence.WEEKLY: relativedelta(days=7),
    Recurrence.MONTHLY: relativedelta(months=1),
    Recurrence.YEARLY: relativedelta(years=1),
}


def advance(cadence: str, from_date: datetime.date) -> datetime.date:
    """
    Next due date after ``from_date`` for the given cadence.

    Month and year steps clamp to the end of shorter months
    (Jan 31 -> Feb 28/29, Feb 29 -> Feb 28 next year).

    Raises:
        InvalidRecurrence: For an unknown cadence
    """
    try:
        step = _STEPS[Recurrence(cadence)]
    except ValueError:
        raise InvalidRecurrence(
            f"Unknown recurrence: {cadence!r}",
            details={"recurrence": str(cadence)},
        )
    return from_date + step


def initial_schedule(
    start_date: datetime.date,
    cadence: str,
    count: int | None,
) -> dict[str, Any]:
    """
    Recurrence fields for a new definition, which counts as occurrence 1.

    A definition capped at a single occurrence starts out Finished.
    """
    if count is not None and count <= 1:
        return {
            "recurring": False,
            "recurrence": cadence,
            "next_due_date": None,
            "recurrence_count": count,
            "recurrence_current": 1,
        }
    return {
        "recurring": True,
        "recurrence": cadence,
        "next_due_date": advance(cadence, start_date),
        "recurrence_count": count,
        "recurrence_current": 1,
    }


class RecurrenceEngine(BaseService):
    """
    Materializes occurrences and manages recurring definitions.

    Collaborators are injected so tests can swap the notifier.
    """

    def __init__(
        self,
        effect_applier: EffectApplier | None = None,
        push_notifier: PushNotifier | None = None,
    ):
        self.effects = effect_applier or effects
        self.notifier = push_notifier or notifier

    # =========================================================================
    # Single occurrence
    # =========================================================================

    def materialize_occurrence(self, definition: Transaction) -> Transaction:
        """
        Create the occurrence due on ``definition.next_due_date``.

        Applies the occurrence's financial effect and advances (or
        finishes) the definition. Must run inside a unit of work with the
        definition row locked.
        """
        occurrence = Transaction.objects.create(
            user_id=definition.user_id,
            account_id=definition.account_id,
            credit_card_id=definition.credit_card_id,
            category_id=definition.category_id,
            description=definition.description,
            amount=definition.amount,
            type=definition.type,
            date=definition.next_due_date,
            recurring=False,
            recurrence=None,
            next_due_date=None,
            recurrence_group_id=definition.id,
        )
        self.effects.apply(FinancialEffect.of(occurrence))

        definition.recurrence_current += 1
        count = definition.recurrence_count
        if count is not None and definition.recurrence_current >= count:
            definition.recurring = False
            definition.next_due_date = None
        else:
            definition.next_due_date = advance(definition.recurrence, occurrence.date)
        definition.save(
            update_fields=[
                "recurrence_current",
                "recurring",
                "next_due_date",
                "updated_at",
            ]
        )
        return occurrence

    def _notify_processed(self, definition: Transaction, occurrence: Transaction) -> None:
        kind = "income" if occurrence.type == TransactionType.INCOME else "expense"
        body = f"{occurrence.description}: {format_money(occurrence.amount)}"
        if definition.recurrence_count is not None:
            body += f" ({definition.recurrence_current}/{definition.recurrence_count})"
        self.notifier.notify(
            definition.user_id,
            f"Recurring {kind} processed",
            body,
            data={
                "transactionId": str(occurrence.id),
                "recurrenceGroupId": str(definition.id),
            },
        )

    # =========================================================================
    # Batch sweep
    # =========================================================================

    def _process_definition(
        self,
        definition_id: uuid.UUID,
        today: datetime.date,
        result: SweepResult,
    ) -> None:
        while True:
            with self.atomic():
                definition = (
                    Transaction.objects.select_for_update()
                    .recurring_due(today)
                    .filter(id=definition_id)
                    .first()
                )
                if definition is None:
                    return
                occurrence = self.materialize_occurrence(definition)
                self._notify_processed(definition, occurrence)

            result.processed += 1
            self.get_logger().info(
                "Materialized recurring occurrence",
                extra={
                    "definition_id": str(definition_id),
                    "transaction_id": str(occurrence.id),
                    "date": occurrence.date.isoformat(),
                },
            )
            if not definition.recurring:
                result.finished += 1
                return

    def sweep(
        self,
        today: datetime.date | None = None,
        limit: int | None = None,
    ) -> SweepResult:
        """
        Materialize every occurrence due on or before ``today``.

        Args:
            today: Cut-off date, defaults to the current local date
            limit: Max definitions per run, defaults to
                settings.FINANCE_RECURRENCE_SWEEP_BATCH_SIZE

        Returns:
            SweepResult with processed/finished/failed counters
        """
        today = today or timezone.localdate()
        if limit is None:
            limit = settings.FINANCE_RECURRENCE_SWEEP_BATCH_SIZE
        logger = self.get_logger()

        due_ids = list(
            Transaction.objects.recurring_due(today)
            .order_by("next_due_date", "created_at")
            .values_list("id", flat=True)[:limit]
        )
        logger.info(
            f"Recurrence sweep started: {len(due_ids)} due definitions",
            extra={"today": today.isoformat(), "due_count": len(due_ids)},
        )

        result = SweepResult()
        for definition_id in due_ids:
            try:
                self._process_definition(definition_id, today, result)
            except Exception as e:
                result.failed += 1
                result.failures[str(definition_id)] = str(e)
                logger.exception(
                    f"Failed to process recurring definition: {e}",
                    extra={"definition_id": str(definition_id)},
                )

        logger.info(
            f"Recurrence sweep complete: processed {result.processed}, "
            f"finished {result.finished}, failed {result.failed}",
            extra=result.to_dict(),
        )
        return result

    # =========================================================================
    # Definition management
    # =========================================================================

    def get_definition(self, definition_id, user_id, lock: bool = False) -> Transaction:
        """
        Raises:
            TransactionNotFound: If the row does not exist for this user
            NotARecurringDefinition: If the row is not a recurring definition
        """
        queryset = Transaction.objects.owned_by(user_id)
        if lock:
            queryset = queryset.select_for_update()
        try:
            definition = queryset.get(id=definition_id)
        except Transaction.DoesNotExist:
            raise TransactionNotFound(
                f"Transaction {definition_id} not found",
                details={"transaction_id": str(definition_id)},
            )
        if not definition.is_definition:
            raise NotARecurringDefinition(
                "Transaction is not a recurring definition",
                details={"transaction_id": str(definition_id)},
            )
        return definition

    def toggle(self, definition_id, user_id, paused: bool) -> Transaction:
        """Set the paused flag. next_due_date and counts are left alone."""
        with self.atomic():
            definition = self.get_definition(definition_id, user_id, lock=True)
            definition.recurrence_paused = paused
            definition.save(update_fields=["recurrence_paused", "updated_at"])

        self.get_logger().info(
            f"Recurring definition {'paused' if paused else 'resumed'}",
            extra={"definition_id": str(definition_id)},
        )
        return definition

    def delete_with_history(self, definition_id, user_id) -> int:
        """
        Delete a definition and every occurrence it produced.

        Each row's effect is reversed exactly as a single delete would.
        All or nothing.

        Returns:
            Number of rows deleted, definition included
        """
        with self.atomic():
            definition = self.get_definition(definition_id, user_id, lock=True)
            occurrences = list(
                Transaction.objects.owned_by(user_id)
                .in_group(definition.id)
                .select_for_update()
                .order_by("date")
            )
            for occurrence in occurrences:
                self.effects.reverse(FinancialEffect.of(occurrence))
                occurrence.delete()

            self.effects.reverse(FinancialEffect.of(definition))
            definition.delete()

        deleted = len(occurrences) + 1
        self.get_logger().info(
            "Deleted recurring definition with history",
            extra={"definition_id": str(definition_id), "deleted": deleted},
        )
        return deleted


recurrence = RecurrenceEngine()
