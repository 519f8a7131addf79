"""Snapshot Engine - Per-habit derived view.

Dispatches on the habit variant and assembles a HabitSnapshot from the
subsystem that owns the habit's events:
- daily_check / numeric_counter / daily_measurement → StatisticsEngine
- duration_counter → AttemptEngine
- fasting_tracker → FastingEngine

ARCHITECTURE: Snapshots are derived, never persisted. They are rebuilt from
raw events on every read; nothing here caches.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.dt_utils import (
    MINUTES_PER_DAY,
    as_local,
    dt_elapsed,
    dt_local_date,
    dt_now_utc,
)
from ..utils.math_utils import calculate_percentage
from .attempt_engine import AttemptEngine
from .classifier_engine import ClassifierEngine
from .fasting_engine import FastingEngine
from .statistics_engine import StatisticsEngine

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from datetime import datetime

    from ..type_defs import (
        AttemptData,
        CompletionEvent,
        FastingWindowData,
        Habit,
        HabitSnapshot,
    )


class SnapshotEngine:
    """Pure logic engine building HabitSnapshot views.

    All methods are static - no instance state.
    """

    @staticmethod
    def build_snapshot(
        habit: Habit,
        events: Sequence[CompletionEvent] = (),
        windows: Sequence[FastingWindowData] = (),
        attempts: Sequence[AttemptData] = (),
        now: datetime | None = None,
        window_days: int = const.DEFAULT_TREND_WINDOW_DAYS,
        at_risk_rate: float = const.DEFAULT_AT_RISK_COMPLETION_RATE,
        default_xp: int = const.DEFAULT_XP_REWARD,
    ) -> HabitSnapshot:
        """Build the snapshot of one habit.

        Records of other habits in events, windows or attempts are ignored.
        default_xp stands in for a missing xp_reward on the habit and on its
        completion events.
        """
        now_utc = now or dt_now_utc()
        habit_id = habit[const.DATA_HABIT_ID]
        habit_type = habit.get(const.DATA_HABIT_TYPE)

        snapshot: dict[str, Any] = {
            "habit_id": habit_id,
            "habit_type": habit_type,
            "name": habit.get(const.DATA_HABIT_NAME, const.DISPLAY_UNKNOWN),
            "time_of_day": ClassifierEngine.time_of_day_bucket(habit),
            "mode": None,
            "elapsed_minutes": None,
            "elapsed_days": None,
            "streak": 0,
            "completion_rate": 0.0,
            "trend": const.TREND_STABLE,
            "xp_reward": habit.get(const.DATA_HABIT_XP_REWARD, default_xp),
            "total_xp_earned": 0,
            "completed_today": False,
            "total_completions": 0,
        }

        if habit_type == const.HABIT_TYPE_DURATION_COUNTER:
            own_attempts = [
                a for a in attempts if a.get(const.DATA_ATTEMPT_HABIT_ID) == habit_id
            ]
            snapshot.update(SnapshotEngine._attempt_fields(own_attempts, now_utc))
        elif habit_type == const.HABIT_TYPE_FASTING_TRACKER:
            own_windows = [
                w
                for w in windows
                if w.get(const.DATA_FASTING_WINDOW_HABIT_ID) == habit_id
            ]
            snapshot.update(SnapshotEngine._fasting_fields(own_windows, now_utc))
        else:
            own_events = StatisticsEngine.events_for_habit(events, habit_id)
            stats = StatisticsEngine.habit_stats(
                habit, own_events, window_days, now_utc, default_xp
            )
            snapshot.update(
                {
                    "streak": stats["current_streak"],
                    "completion_rate": stats["completion_rate"],
                    "trend": StatisticsEngine.trend_direction(own_events, now_utc),
                    "completed_today": stats["completed_today"],
                    "total_completions": stats["total_completions"],
                    "total_xp_earned": stats["total_xp_earned"],
                }
            )

        snapshot["card_state"] = ClassifierEngine.card_state(snapshot, at_risk_rate)
        return snapshot  # type: ignore[return-value]

    @staticmethod
    def _attempt_fields(
        attempts: Sequence[AttemptData], now: datetime
    ) -> dict[str, Any]:
        current = AttemptEngine.current_attempt(attempts)
        if current is None:
            const.LOGGER.debug("No open attempt, snapshot has no elapsed time")
            return {}
        elapsed = dt_elapsed(current.get(const.DATA_ATTEMPT_START_DATE), now)
        if elapsed is None:
            return {}
        return {
            "elapsed_minutes": elapsed["total_minutes"],
            "elapsed_days": elapsed["days"],
            "streak": elapsed["days"],
        }

    @staticmethod
    def _fasting_fields(
        windows: Sequence[FastingWindowData], now: datetime
    ) -> dict[str, Any]:
        status = FastingEngine.compute_status(windows, now)
        history = FastingEngine.history_stats(windows)
        duration = status["duration_minutes"]
        today = as_local(now).date()
        fasted_today = any(
            dt_local_date(w.get(const.DATA_FASTING_WINDOW_EATING_TRANSITION_TIME))
            == today
            for w in windows
        )
        return {
            "mode": status["mode"],
            "elapsed_minutes": duration,
            "elapsed_days": duration // MINUTES_PER_DAY if duration is not None else None,
            "streak": history["goal_streak"],
            "completion_rate": calculate_percentage(
                history["goals_met"], history["total_sessions"]
            ),
            "completed_today": fasted_today,
            "total_completions": history["total_sessions"],
        }

    @staticmethod
    def build_snapshots(
        habits: Sequence[Habit],
        events: Sequence[CompletionEvent] = (),
        windows_by_habit: Mapping[str, Sequence[FastingWindowData]] | None = None,
        attempts_by_habit: Mapping[str, Sequence[AttemptData]] | None = None,
        now: datetime | None = None,
        window_days: int = const.DEFAULT_TREND_WINDOW_DAYS,
        at_risk_rate: float = const.DEFAULT_AT_RISK_COMPLETION_RATE,
        default_xp: int = const.DEFAULT_XP_REWARD,
    ) -> list[HabitSnapshot]:
        """Snapshot every habit, in input order."""
        now_utc = now or dt_now_utc()
        windows_by_habit = windows_by_habit or {}
        attempts_by_habit = attempts_by_habit or {}
        return [
            SnapshotEngine.build_snapshot(
                habit,
                events,
                windows_by_habit.get(habit[const.DATA_HABIT_ID], ()),
                attempts_by_habit.get(habit[const.DATA_HABIT_ID], ()),
                now_utc,
                window_days,
                at_risk_rate,
                default_xp,
            )
            for habit in habits
        ]
