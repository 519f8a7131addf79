"""Classifier Engine - Grouping, risk and card state of habits.

This engine provides stateless, pure Python functions for:
- Grouping habits (or snapshots) by their static time_of_day tag
- The at-risk predicate and the at_risk overlay group
- Card state selection for a snapshot
- Habit sentiment (positive / negative / neutral)

ARCHITECTURE: This is a pure logic engine with NO store dependencies.
All functions are static methods that operate on passed-in data.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, TypeVar

from .. import const

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from ..type_defs import Habit, HabitGroups, HabitSnapshot

_T = TypeVar("_T", bound=Mapping[str, Any])


class ClassifierEngine:
    """Pure logic engine for habit classification.

    All methods are static - no instance state.
    """

    @staticmethod
    def time_of_day_bucket(item: Mapping[str, Any]) -> str:
        """Bucket of a habit or snapshot; unknown or missing tags are anytime."""
        bucket = item.get(const.DATA_HABIT_TIME_OF_DAY)
        if bucket in const.TIME_OF_DAY_BUCKETS:
            return bucket
        return const.TIME_OF_DAY_ANYTIME

    @staticmethod
    def group_by_time_of_day(items: Iterable[_T]) -> dict[str, list[_T]]:
        """Group habits or snapshots into the five time-of-day buckets.

        Every bucket is present, in display order, even when empty.
        """
        groups: dict[str, list[_T]] = {
            bucket: [] for bucket in const.TIME_OF_DAY_BUCKETS
        }
        for item in items:
            groups[ClassifierEngine.time_of_day_bucket(item)].append(item)
        return groups

    @staticmethod
    def is_at_risk(
        stats: Mapping[str, Any],
        threshold: float = const.DEFAULT_AT_RISK_COMPLETION_RATE,
    ) -> bool:
        """Whether a habit's statistics mark it as at risk.

        At risk means completion_rate below the threshold, or a broken streak
        (current streak 0) on a habit that has been completed before.
        Accepts HabitStats (current_streak) or HabitSnapshot (streak).
        """
        rate = stats.get("completion_rate") or 0.0
        streak = stats.get("current_streak", stats.get("streak")) or 0
        completions = stats.get("total_completions") or 0
        return rate < threshold or (streak == 0 and completions > 0)

    @staticmethod
    def classify(
        snapshots: Sequence[HabitSnapshot],
        threshold: float = const.DEFAULT_AT_RISK_COMPLETION_RATE,
    ) -> HabitGroups:
        """Time-of-day groups plus the at_risk overlay group.

        A habit may appear in both its time-of-day group and at_risk. Only
        completion-driven habits are risk-checked; duration counters and
        fasting trackers have no completion rate.
        """
        groups: HabitGroups = ClassifierEngine.group_by_time_of_day(snapshots)
        groups[const.GROUP_AT_RISK] = [
            snapshot
            for snapshot in snapshots
            if snapshot.get(const.DATA_HABIT_TYPE) in const.COMPLETION_HABIT_TYPES
            and ClassifierEngine.is_at_risk(snapshot, threshold)
        ]
        return groups

    @staticmethod
    def card_state(
        snapshot: Mapping[str, Any],
        threshold: float = const.DEFAULT_AT_RISK_COMPLETION_RATE,
    ) -> str:
        """Pick the display state of a habit card.

        Order: completed today, missed (streak broken after completions),
        at risk (low rate after more than CARD_AT_RISK_MIN_COMPLETIONS),
        in progress (running attempt or fast), not started.

        Missed and at risk apply to completion-type habits only. A fasting
        tracker's streak counts met goals, not days.
        """
        habit_type = snapshot.get(const.DATA_HABIT_TYPE)
        completions = snapshot.get("total_completions") or 0
        if snapshot.get("completed_today"):
            return const.CARD_STATE_COMPLETED
        if habit_type in const.COMPLETION_HABIT_TYPES:
            if (snapshot.get("streak") or 0) == 0 and completions > 0:
                return const.CARD_STATE_MISSED
            if (
                completions > const.CARD_AT_RISK_MIN_COMPLETIONS
                and (snapshot.get("completion_rate") or 0.0) < threshold
            ):
                return const.CARD_STATE_AT_RISK
            return const.CARD_STATE_NOT_STARTED

        if (
            habit_type == const.HABIT_TYPE_DURATION_COUNTER
            and snapshot.get("elapsed_minutes") is not None
        ):
            return const.CARD_STATE_IN_PROGRESS
        if habit_type == const.HABIT_TYPE_FASTING_TRACKER and snapshot.get("mode") in (
            const.FASTING_MODE_FASTING,
            const.FASTING_MODE_EATING,
        ):
            return const.CARD_STATE_IN_PROGRESS
        return const.CARD_STATE_NOT_STARTED

    @staticmethod
    def sentiment(habit: Habit) -> str:
        """Positive, negative or neutral.

        An explicit sentiment wins, then name keywords (negative first), then
        the category.
        """
        explicit = habit.get(const.DATA_HABIT_SENTIMENT)
        if explicit in const.SENTIMENTS:
            return explicit

        name = (habit.get(const.DATA_HABIT_NAME) or "").lower()
        if any(keyword in name for keyword in const.SENTIMENT_NEGATIVE_KEYWORDS):
            return const.SENTIMENT_NEGATIVE
        if any(keyword in name for keyword in const.SENTIMENT_POSITIVE_KEYWORDS):
            return const.SENTIMENT_POSITIVE

        category = (habit.get(const.DATA_HABIT_CATEGORY) or "").lower()
        if category in const.SENTIMENT_POSITIVE_CATEGORIES:
            return const.SENTIMENT_POSITIVE
        return const.SENTIMENT_NEUTRAL
