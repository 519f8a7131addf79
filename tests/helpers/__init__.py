"""Test helpers for habitcore tests.

Minimal record builders so tests only spell out the fields they care about:

    from tests.helpers import make_attempt, make_event, make_habit, make_window, utc
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from typing import Any, cast
import uuid

from habitcore import const
from habitcore.store import MemoryEventStore
from habitcore.type_defs import (
    AttemptData,
    CompletionEvent,
    FastingWindowData,
    Habit,
)

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=UTC)


def utc(
    year: int, month: int, day: int, hour: int = 0, minute: int = 0
) -> datetime:
    """Shorthand for an aware UTC datetime."""
    return datetime(year, month, day, hour, minute, tzinfo=UTC)


def iso(
    year: int, month: int, day: int, hour: int = 0, minute: int = 0
) -> str:
    """Shorthand for an ISO 8601 UTC timestamp."""
    return utc(year, month, day, hour, minute).isoformat()


def make_habit(
    *,
    habit_id: str | None = None,
    name: str = "Test Habit",
    habit_type: str = const.HABIT_TYPE_DAILY_CHECK,
    category: str = "fitness",
    time_of_day: str = const.TIME_OF_DAY_MORNING,
    xp_reward: int = 10,
    difficulty: str = const.DIFFICULTY_MEDIUM,
    is_active: bool = True,
    created_at: str = "2026-01-01T00:00:00+00:00",
    **variant: Any,
) -> Habit:
    """Build a habit of any variant; variant fields go in **variant."""
    habit: dict[str, Any] = {
        const.DATA_HABIT_ID: habit_id or str(uuid.uuid4()),
        const.DATA_HABIT_NAME: name,
        const.DATA_HABIT_TYPE: habit_type,
        const.DATA_HABIT_CATEGORY: category,
        const.DATA_HABIT_TIME_OF_DAY: time_of_day,
        const.DATA_HABIT_XP_REWARD: xp_reward,
        const.DATA_HABIT_DIFFICULTY: difficulty,
        const.DATA_HABIT_IS_ACTIVE: is_active,
        const.DATA_HABIT_CREATED_AT: created_at,
    }
    habit.update(variant)
    return cast("Habit", habit)


def make_fasting_habit(
    *, habit_id: str = "fast-1", target_minutes: int = 960, **kwargs: Any
) -> Habit:
    """Fasting tracker habit with a 16:8 default."""
    return make_habit(
        habit_id=habit_id,
        name="Intermittent Fasting",
        habit_type=const.HABIT_TYPE_FASTING_TRACKER,
        fasting_mode="16:8",
        target_minutes=target_minutes,
        **kwargs,
    )


def make_counter_habit(
    *,
    habit_id: str = "quit-1",
    start_date: str = "2026-01-01T00:00:00+00:00",
    cost_per_day: float | None = None,
    **kwargs: Any,
) -> Habit:
    """Duration counter habit."""
    return make_habit(
        habit_id=habit_id,
        name="Quit Smoking",
        habit_type=const.HABIT_TYPE_DURATION_COUNTER,
        start_date=start_date,
        cost_per_day=cost_per_day,
        **kwargs,
    )


def make_event(
    habit_id: str, completed_at: datetime | str, xp_reward: int | None = 10
) -> CompletionEvent:
    """Completion event."""
    if isinstance(completed_at, datetime):
        completed_at = completed_at.isoformat()
    event: dict[str, Any] = {
        const.DATA_COMPLETION_HABIT_ID: habit_id,
        const.DATA_COMPLETION_COMPLETED_AT: completed_at,
    }
    if xp_reward is not None:
        event[const.DATA_COMPLETION_XP_REWARD] = xp_reward
    return cast("CompletionEvent", event)


def make_window(
    *,
    window_id: str | None = None,
    habit_id: str = "fast-1",
    start_time: str,
    eating_transition_time: str | None = None,
    end_time: str | None = None,
    target_minutes: int = 960,
    fasting_duration: int | None = None,
) -> FastingWindowData:
    """Fasting window."""
    return {
        const.DATA_FASTING_WINDOW_ID: window_id or str(uuid.uuid4()),
        const.DATA_FASTING_WINDOW_HABIT_ID: habit_id,
        const.DATA_FASTING_WINDOW_START_TIME: start_time,
        const.DATA_FASTING_WINDOW_EATING_TRANSITION_TIME: eating_transition_time,
        const.DATA_FASTING_WINDOW_END_TIME: end_time,
        const.DATA_FASTING_WINDOW_TARGET_MINUTES: target_minutes,
        const.DATA_FASTING_WINDOW_FASTING_DURATION: fasting_duration,
    }


def make_attempt(
    *,
    attempt_id: str | None = None,
    habit_id: str = "quit-1",
    start_date: str,
    end_date: str | None = None,
    days_lasted: int | None = None,
    reset_reason: str | None = None,
) -> AttemptData:
    """Attempt of a duration counter habit."""
    return {
        const.DATA_ATTEMPT_ID: attempt_id or str(uuid.uuid4()),
        const.DATA_ATTEMPT_HABIT_ID: habit_id,
        const.DATA_ATTEMPT_START_DATE: start_date,
        const.DATA_ATTEMPT_END_DATE: end_date,
        const.DATA_ATTEMPT_DAYS_LASTED: days_lasted,
        const.DATA_ATTEMPT_RESET_REASON: reset_reason,
    }


class YieldingMemoryStore(MemoryEventStore):
    """Memory store whose reads hand control back to the event loop.

    Lets concurrently scheduled managers interleave between a read and the
    write planned from it.
    """

    async def list_fasting_windows(self, habit_id: str) -> list[FastingWindowData]:
        """Yield once, then read."""
        await asyncio.sleep(0)
        return await super().list_fasting_windows(habit_id)

    async def list_attempts(self, habit_id: str) -> list[AttemptData]:
        """Yield once, then read."""
        await asyncio.sleep(0)
        return await super().list_attempts(habit_id)


__all__ = [
    "NOW",
    "YieldingMemoryStore",
    "iso",
    "make_attempt",
    "make_counter_habit",
    "make_event",
    "make_fasting_habit",
    "make_habit",
    "make_window",
    "utc",
]
