"""Fasting Manager - Applies fasting transitions to the event store.

Reads the habit's windows, asks FastingEngine for a transition plan and writes
it. Illegal transitions come back from the engine as None and are returned
as-is; nothing is written.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .. import const
from ..data_builders import build_fasting_window
from ..engines.fasting_engine import FastingEngine
from ..utils.dt_utils import dt_now_utc
from .base_manager import BaseManager

if TYPE_CHECKING:
    from datetime import datetime

    from ..type_defs import (
        FastingHistoryStats,
        FastingStatus,
        FastingTrackerHabit,
        FastingTransition,
    )


class FastingManager(BaseManager):
    """Orchestrates the fasting state machine for fasting tracker habits."""

    async def start_fasting(
        self, habit: FastingTrackerHabit, now: datetime | None = None
    ) -> FastingTransition | None:
        """Open a new fasting window if the habit is inactive."""
        habit_id = habit[const.DATA_HABIT_ID]
        target = habit.get(const.DATA_HABIT_TARGET_MINUTES) or (
            FastingEngine.resolve_mode_target(
                habit.get(const.DATA_HABIT_FASTING_MODE, const.DEFAULT_FASTING_PRESET)
            )
            or 0
        )
        async with self.habit_lock(habit_id):
            windows = await self.store.list_fasting_windows(habit_id)
            plan = FastingEngine.plan_start_fasting(
                windows, habit_id, target, now or dt_now_utc()
            )
            if plan is None:
                return None

            window = build_fasting_window(
                {
                    const.DATA_FASTING_WINDOW_HABIT_ID: habit_id,
                    const.DATA_FASTING_WINDOW_START_TIME: plan["timestamp"],
                    const.DATA_FASTING_WINDOW_TARGET_MINUTES: target,
                }
            )
            await self.store.create_fasting_window(window)
            plan["window_id"] = window[const.DATA_FASTING_WINDOW_ID]

        const.LOGGER.info("Fast started for habit %s (target %s min)", habit_id, target)
        await self.emit(const.SIGNAL_SUFFIX_FASTING_CHANGED, **plan)
        return plan

    async def start_eating(
        self, habit_id: str, now: datetime | None = None
    ) -> FastingTransition | None:
        """Move the open window from fasting to eating."""
        async with self.habit_lock(habit_id):
            windows = await self.store.list_fasting_windows(habit_id)
            plan = FastingEngine.plan_start_eating(windows, now or dt_now_utc())
            if plan is None:
                return None
            await self.store.transition_fasting_window(
                plan["window_id"], plan["timestamp"]
            )

        const.LOGGER.info(
            "Eating window started for habit %s after %s min",
            habit_id,
            plan.get("fasting_duration"),
        )
        await self.emit(const.SIGNAL_SUFFIX_FASTING_CHANGED, **plan)
        return plan

    async def end_eating(
        self, habit_id: str, now: datetime | None = None
    ) -> FastingTransition | None:
        """Close the open window once the eating window ends."""
        async with self.habit_lock(habit_id):
            windows = await self.store.list_fasting_windows(habit_id)
            plan = FastingEngine.plan_end_eating(windows, now or dt_now_utc())
            if plan is None:
                return None
            await self.store.close_fasting_window(
                plan["window_id"], plan["timestamp"], plan.get("fasting_duration")
            )

        const.LOGGER.info("Fasting cycle closed for habit %s", habit_id)
        await self.emit(const.SIGNAL_SUFFIX_FASTING_CHANGED, **plan)
        return plan

    async def status(
        self, habit_id: str, now: datetime | None = None
    ) -> FastingStatus:
        """Live status recomputed from the stored windows."""
        windows = await self.store.list_fasting_windows(habit_id)
        return FastingEngine.compute_status(windows, now or dt_now_utc())

    async def motivation(
        self, habit: FastingTrackerHabit, now: datetime | None = None
    ) -> str | None:
        """Current motivation message while fasting, if any."""
        status = await self.status(habit[const.DATA_HABIT_ID], now)
        if status["mode"] != const.FASTING_MODE_FASTING:
            return None
        return FastingEngine.get_motivation(
            habit.get(const.DATA_HABIT_MOTIVATION_MILESTONES) or [],
            status["duration_minutes"],
        )

    async def history(self, habit_id: str) -> FastingHistoryStats:
        """Aggregates over the habit's closed windows."""
        windows = await self.store.list_fasting_windows(habit_id)
        return FastingEngine.history_stats(windows)
