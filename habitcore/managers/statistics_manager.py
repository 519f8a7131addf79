"""Statistics Manager - Builds the dashboard view model.

Fetches raw events for a habit set, then runs the snapshot, analytics and
classification engines over them. Everything is recomputed per call.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .. import const
from ..engines.classifier_engine import ClassifierEngine
from ..engines.snapshot_engine import SnapshotEngine
from ..engines.statistics_engine import StatisticsEngine
from ..utils.dt_utils import dt_now_utc
from .base_manager import BaseManager

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from ..type_defs import (
        AttemptData,
        Dashboard,
        FastingWindowData,
        Habit,
        HabitSnapshot,
    )


class StatisticsManager(BaseManager):
    """Read-only analytics over the event log."""

    async def snapshots(
        self, habits: Sequence[Habit], now: datetime | None = None
    ) -> list[HabitSnapshot]:
        """Snapshot every habit from the stored events."""
        now_utc = now or dt_now_utc()
        events = await self.store.list_completions()
        windows_by_habit: dict[str, list[FastingWindowData]] = {}
        attempts_by_habit: dict[str, list[AttemptData]] = {}

        for habit in habits:
            habit_id = habit[const.DATA_HABIT_ID]
            habit_type = habit.get(const.DATA_HABIT_TYPE)
            if habit_type == const.HABIT_TYPE_FASTING_TRACKER:
                windows_by_habit[habit_id] = await self.store.list_fasting_windows(
                    habit_id
                )
            elif habit_type == const.HABIT_TYPE_DURATION_COUNTER:
                attempts_by_habit[habit_id] = await self.store.list_attempts(habit_id)

        return SnapshotEngine.build_snapshots(
            habits,
            events,
            windows_by_habit,
            attempts_by_habit,
            now_utc,
            self.settings.trend_window_days,
            self.settings.at_risk_completion_rate,
            self.settings.default_xp_reward,
        )

    async def build_dashboard(
        self, habits: Sequence[Habit], now: datetime | None = None
    ) -> Dashboard:
        """Assemble snapshots, groups and analytics for the dashboard."""
        now_utc = now or dt_now_utc()
        events = await self.store.list_completions()
        snapshots = await self.snapshots(habits, now_utc)
        window_days = self.settings.trend_window_days

        dashboard: Dashboard = {
            "snapshots": snapshots,
            "groups": ClassifierEngine.classify(
                snapshots, self.settings.at_risk_completion_rate
            ),
            "overview": StatisticsEngine.overview(habits, events, now_utc, window_days),
            "trend": StatisticsEngine.completion_trend(events, window_days, now_utc),
            "time_of_day": StatisticsEngine.time_of_day_stats(habits, events),
            "categories": StatisticsEngine.category_stats(habits),
            "top_habits": StatisticsEngine.top_habits(
                habits,
                events,
                const.DEFAULT_TOP_HABITS,
                self.settings.default_xp_reward,
            ),
        }
        const.LOGGER.debug(
            "Dashboard built for %d habits (%d at risk)",
            len(habits),
            len(dashboard["groups"][const.GROUP_AT_RISK]),
        )
        return dashboard
