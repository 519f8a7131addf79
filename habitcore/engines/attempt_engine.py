"""Attempt Engine - Pure logic for duration counter attempts.

A duration counter habit ("days without smoking") is tracked as a series of
attempts. Exactly one attempt is open at a time; a reset closes it and opens
the next one at the same instant.

This engine provides stateless, pure Python functions for:
- Current attempt lookup and the missing-attempt integrity check
- Reset planning (close current + open next)
- Longest streak, milestone ladder progress, money saved
- A combined summary for display

ARCHITECTURE: This is a pure logic engine with NO store dependencies.
All functions are static methods that operate on passed-in data.
Applying an AttemptResetPlan atomically belongs in AttemptManager and the store.
"""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import TYPE_CHECKING

from .. import const
from ..data_builders import HabitCoreError, build_attempt
from ..utils.dt_utils import dt_elapsed, dt_format_elapsed, dt_now_utc, dt_to_utc
from ..utils.math_utils import clamp, round_value

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from ..type_defs import (
        AttemptData,
        AttemptSummary,
        DurationCounterHabit,
        MilestoneProgress,
    )


class MissingAttemptError(HabitCoreError):
    """Raised when a duration counter habit has no open attempt.

    This is a data-integrity gap, not a user error. Callers surface it as a
    repair action (seed a new attempt via AttemptEngine.plan_seed_attempt).

    Attributes:
        habit_id: The duration counter habit missing its open attempt
    """

    def __init__(self, habit_id: str) -> None:
        """Initialize MissingAttemptError.

        Args:
            habit_id: The duration counter habit missing its open attempt
        """
        self.habit_id = habit_id
        super().__init__(f"No open attempt for habit {habit_id}")


@dataclass
class AttemptResetPlan:
    """Writes for one reset, applied atomically by the store.

    Returned by AttemptEngine.plan_reset().

    Attributes:
        habit_id: The duration counter habit being reset
        closed_attempt_id: Attempt to close
        end_date: Close instant (ISO 8601), also the next attempt's start
        days_lasted: Whole days of the closed attempt
        reset_reason: Free-form reason ("relapse", ...)
        new_attempt: The attempt record to create
    """

    habit_id: str
    closed_attempt_id: str
    end_date: str
    days_lasted: int
    reset_reason: str | None
    new_attempt: AttemptData


class AttemptEngine:
    """Pure logic engine for attempt lifecycle and milestones.

    All methods are static - no instance state.
    """

    # =========================================================================
    # Current Attempt
    # =========================================================================

    @staticmethod
    def current_attempt(attempts: Sequence[AttemptData]) -> AttemptData | None:
        """Return the attempt with no end_date, or None.

        If several are open the latest start_date wins and a warning is logged.
        """
        open_attempts = [a for a in attempts if not a.get(const.DATA_ATTEMPT_END_DATE)]
        if not open_attempts:
            return None
        if len(open_attempts) > 1:
            const.LOGGER.warning(
                "Found %d open attempts for habit %s, using the latest",
                len(open_attempts),
                open_attempts[0].get(const.DATA_ATTEMPT_HABIT_ID),
            )
        return max(open_attempts, key=AttemptEngine._start_sort_key)

    @staticmethod
    def require_current_attempt(
        attempts: Sequence[AttemptData], habit_id: str
    ) -> AttemptData:
        """Return the open attempt.

        Raises:
            MissingAttemptError: If the habit has no open attempt
        """
        attempt = AttemptEngine.current_attempt(attempts)
        if attempt is None:
            raise MissingAttemptError(habit_id)
        return attempt

    # =========================================================================
    # Planning
    # =========================================================================

    @staticmethod
    def plan_seed_attempt(
        habit_id: str, start_date: datetime | str | None = None
    ) -> AttemptData:
        """Build a fresh open attempt (the repair action for a missing one)."""
        start_utc = dt_to_utc(start_date) if start_date else None
        return build_attempt(
            {
                const.DATA_ATTEMPT_HABIT_ID: habit_id,
                const.DATA_ATTEMPT_START_DATE: start_utc or dt_now_utc(),
            }
        )

    @staticmethod
    def plan_reset(
        attempts: Sequence[AttemptData],
        habit_id: str,
        reason: str | None = None,
        now: datetime | None = None,
    ) -> AttemptResetPlan:
        """Plan closing the current attempt and opening the next at now.

        days_lasted is the whole-day part of elapsed(start, now). A start in
        the future (clock skew) records 0 days.

        Raises:
            MissingAttemptError: If the habit has no open attempt

        Example:
            start 2026-01-01, reset 2026-01-11 → days_lasted 10
        """
        current = AttemptEngine.require_current_attempt(attempts, habit_id)
        now_utc = now or dt_now_utc()

        elapsed = dt_elapsed(current.get(const.DATA_ATTEMPT_START_DATE), now_utc)
        if elapsed is None:
            const.LOGGER.warning(
                "Attempt %s has an invalid or future start %s, recording 0 days",
                current.get(const.DATA_ATTEMPT_ID),
                current.get(const.DATA_ATTEMPT_START_DATE),
            )
            days_lasted = 0
        else:
            days_lasted = elapsed["days"]

        return AttemptResetPlan(
            habit_id=habit_id,
            closed_attempt_id=current[const.DATA_ATTEMPT_ID],
            end_date=now_utc.isoformat(),
            days_lasted=days_lasted,
            reset_reason=reason,
            new_attempt=AttemptEngine.plan_seed_attempt(habit_id, now_utc),
        )

    # =========================================================================
    # Streaks and Milestones
    # =========================================================================

    @staticmethod
    def longest_streak(attempts: Sequence[AttemptData]) -> int:
        """Return max(days_lasted) over closed attempts, 0 if none."""
        lasted = [
            a.get(const.DATA_ATTEMPT_DAYS_LASTED) or 0
            for a in attempts
            if a.get(const.DATA_ATTEMPT_END_DATE)
        ]
        return max(lasted, default=0)

    @staticmethod
    def milestone_label(days: int) -> str:
        """Return the display label for a milestone day count."""
        return const.MILESTONE_LABELS.get(days, f"{days} Days")

    @staticmethod
    def milestone_progress(
        days: int,
        ladder: Sequence[int] = const.DEFAULT_MILESTONE_DAYS,
    ) -> MilestoneProgress | None:
        """Progress toward the next milestone.

        The next milestone is the first one strictly greater than days. Past
        the last milestone, progress is 100 against the final label.

        Examples:
            milestone_progress(3) → {"label": "1 Week", "target_days": 7, "progress": 42.86}
            milestone_progress(400) → {"label": "1 Year", "target_days": 365, "progress": 100.0}
        """
        steps = sorted(set(ladder))
        if not steps:
            return None

        target = next((m for m in steps if days < m), None)
        if target is None:
            final = steps[-1]
            return {
                "label": AttemptEngine.milestone_label(final),
                "target_days": final,
                "progress": 100.0,
            }

        return {
            "label": AttemptEngine.milestone_label(target),
            "target_days": target,
            "progress": round_value(clamp(days / target * 100, 0.0, 100.0)),
        }

    @staticmethod
    def reached_milestone(
        days: int,
        ladder: Sequence[int] = const.DEFAULT_MILESTONE_DAYS,
    ) -> str | None:
        """Return the label of the highest milestone reached, or None."""
        reached = [m for m in ladder if m <= days]
        if not reached:
            return None
        return AttemptEngine.milestone_label(max(reached))

    @staticmethod
    def is_new_milestone(
        previous_days: int,
        days: int,
        ladder: Sequence[int] = const.DEFAULT_MILESTONE_DAYS,
    ) -> bool:
        """Whether a milestone was crossed going from previous_days to days."""
        return any(previous_days < m <= days for m in ladder)

    @staticmethod
    def money_saved(days: int, cost_per_day: float | None) -> int | None:
        """Return floor(days * cost_per_day), or None without a cost."""
        if not cost_per_day:
            return None
        return math.floor(days * cost_per_day)

    # =========================================================================
    # Summary
    # =========================================================================

    @staticmethod
    def summarize(
        attempts: Sequence[AttemptData],
        habit: DurationCounterHabit,
        now: datetime | None = None,
        ladder: Sequence[int] = const.DEFAULT_MILESTONE_DAYS,
    ) -> AttemptSummary:
        """Build the display summary of a duration counter habit.

        Does not raise when the open attempt is missing; the elapsed fields
        are None and the caller decides whether to offer the repair action.
        """
        habit_id = habit[const.DATA_HABIT_ID]
        current = AttemptEngine.current_attempt(attempts)
        elapsed = (
            dt_elapsed(current.get(const.DATA_ATTEMPT_START_DATE), now or dt_now_utc())
            if current
            else None
        )
        days = elapsed["days"] if elapsed else None

        return {
            "habit_id": habit_id,
            "current_attempt_id": current[const.DATA_ATTEMPT_ID] if current else None,
            "elapsed": elapsed,
            "elapsed_text": (
                dt_format_elapsed(elapsed["days"], elapsed["hours"], elapsed["minutes"])
                if elapsed
                else None
            ),
            "longest_streak": AttemptEngine.longest_streak(attempts),
            "attempt_count": len(attempts),
            "milestone": (
                AttemptEngine.milestone_progress(days, ladder)
                if days is not None
                else None
            ),
            "reached_milestone": (
                AttemptEngine.reached_milestone(days, ladder)
                if days is not None
                else None
            ),
            "money_saved": (
                AttemptEngine.money_saved(days, habit.get(const.DATA_HABIT_COST_PER_DAY))
                if days is not None
                else None
            ),
        }

    @staticmethod
    def _start_sort_key(attempt: AttemptData) -> float:
        start = dt_to_utc(attempt.get(const.DATA_ATTEMPT_START_DATE))
        return start.timestamp() if start else float("-inf")
