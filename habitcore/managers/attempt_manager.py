"""Attempt Manager - Reset and repair of duration counter attempts."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .. import const
from ..engines.attempt_engine import AttemptEngine
from ..utils.dt_utils import dt_now_utc
from .base_manager import BaseManager

if TYPE_CHECKING:
    from datetime import datetime

    from ..engines.attempt_engine import AttemptResetPlan
    from ..type_defs import AttemptData, AttemptSummary, DurationCounterHabit


class AttemptManager(BaseManager):
    """Orchestrates attempts of duration counter habits."""

    async def reset(
        self,
        habit_id: str,
        reason: str | None = None,
        now: datetime | None = None,
    ) -> AttemptResetPlan:
        """Close the current attempt and open the next one.

        Raises:
            MissingAttemptError: If the habit has no open attempt. Callers
                offer ensure_seed_attempt() as the repair action.
        """
        async with self.habit_lock(habit_id):
            attempts = await self.store.list_attempts(habit_id)
            plan = AttemptEngine.plan_reset(
                attempts, habit_id, reason, now or dt_now_utc()
            )
            await self.store.reset_attempt(plan)

        const.LOGGER.info(
            "Attempt %s of habit %s reset after %d days (%s)",
            plan.closed_attempt_id,
            habit_id,
            plan.days_lasted,
            reason,
        )
        await self.emit(
            const.SIGNAL_SUFFIX_ATTEMPT_RESET,
            habit_id=habit_id,
            closed_attempt_id=plan.closed_attempt_id,
            days_lasted=plan.days_lasted,
            reset_reason=reason,
            new_attempt_id=plan.new_attempt[const.DATA_ATTEMPT_ID],
        )
        return plan

    async def ensure_seed_attempt(
        self, habit: DurationCounterHabit, now: datetime | None = None
    ) -> AttemptData | None:
        """Create an open attempt if the habit has none.

        The first attempt starts at the habit's start_date; a repair after
        earlier attempts starts now.

        Returns:
            The created attempt, or None when one was already open.
        """
        habit_id = habit[const.DATA_HABIT_ID]
        async with self.habit_lock(habit_id):
            attempts = await self.store.list_attempts(habit_id)
            if AttemptEngine.current_attempt(attempts) is not None:
                return None

            start = (
                habit.get(const.DATA_HABIT_START_DATE) if not attempts else None
            ) or now or dt_now_utc()
            attempt = AttemptEngine.plan_seed_attempt(habit_id, start)
            await self.store.create_attempt(attempt)

        if attempts:
            const.LOGGER.warning(
                "Habit %s had no open attempt, seeded %s",
                habit_id,
                attempt[const.DATA_ATTEMPT_ID],
            )
        await self.emit(
            const.SIGNAL_SUFFIX_ATTEMPT_SEEDED,
            habit_id=habit_id,
            attempt_id=attempt[const.DATA_ATTEMPT_ID],
        )
        return attempt

    async def summary(
        self, habit: DurationCounterHabit, now: datetime | None = None
    ) -> AttemptSummary:
        """Display summary recomputed from the stored attempts."""
        attempts = await self.store.list_attempts(habit[const.DATA_HABIT_ID])
        return AttemptEngine.summarize(
            attempts, habit, now or dt_now_utc(), self.settings.milestone_days
        )
