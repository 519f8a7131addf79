"""Unit tests for ClassifierEngine - grouping, risk, card state, sentiment."""

from __future__ import annotations

from typing import Any

import pytest

from habitcore import const
from habitcore.engines.classifier_engine import ClassifierEngine
from tests.helpers import make_habit


def snapshot(**fields: Any) -> dict[str, Any]:
    """Snapshot-shaped mapping with neutral defaults."""
    base: dict[str, Any] = {
        "habit_id": "h1",
        "habit_type": const.HABIT_TYPE_DAILY_CHECK,
        "time_of_day": const.TIME_OF_DAY_MORNING,
        "mode": None,
        "elapsed_minutes": None,
        "streak": 0,
        "completion_rate": 0.0,
        "completed_today": False,
        "total_completions": 0,
    }
    base.update(fields)
    return base


class TestGrouping:
    """Tests for time-of-day grouping."""

    def test_all_buckets_present(self) -> None:
        """Empty buckets still appear, in display order."""
        groups = ClassifierEngine.group_by_time_of_day([])

        assert list(groups) == const.TIME_OF_DAY_BUCKETS
        assert all(items == [] for items in groups.values())

    def test_unknown_tag_is_anytime(self) -> None:
        """Missing and unknown tags land in anytime."""
        habits = [
            make_habit(habit_id="a", time_of_day="evening"),
            make_habit(habit_id="b", time_of_day="brunch"),
        ]
        groups = ClassifierEngine.group_by_time_of_day(habits)

        assert [h["id"] for h in groups["evening"]] == ["a"]
        assert [h["id"] for h in groups["anytime"]] == ["b"]


class TestRisk:
    """Tests for is_at_risk and the at_risk overlay."""

    @pytest.mark.parametrize(
        ("stats", "expected"),
        [
            ({"completion_rate": 80.0, "current_streak": 3, "total_completions": 9}, False),
            ({"completion_rate": 40.0, "current_streak": 3, "total_completions": 9}, True),
            ({"completion_rate": 80.0, "current_streak": 0, "total_completions": 9}, True),
            ({"completion_rate": 80.0, "streak": 0, "total_completions": 9}, True),
            ({"completion_rate": 50.0, "streak": 2, "total_completions": 1}, False),
        ],
    )
    def test_predicate(self, stats: dict, expected: bool) -> None:
        """Low rate or a broken streak after completions."""
        assert ClassifierEngine.is_at_risk(stats, 50.0) is expected

    def test_overlay_keeps_time_of_day_membership(self) -> None:
        """At-risk habits also stay in their time-of-day group."""
        risky = snapshot(habit_id="risky", completion_rate=10.0, streak=1)
        healthy = snapshot(habit_id="ok", completion_rate=90.0, streak=5)
        fasting = snapshot(
            habit_id="fast",
            habit_type=const.HABIT_TYPE_FASTING_TRACKER,
            completion_rate=0.0,
        )

        groups = ClassifierEngine.classify([risky, healthy, fasting], 50.0)

        assert [s["habit_id"] for s in groups["at_risk"]] == ["risky"]
        assert [s["habit_id"] for s in groups["morning"]] == ["risky", "ok", "fast"]


class TestCardState:
    """Tests for card state priority."""

    def test_completed_wins(self) -> None:
        """Completed today beats everything else."""
        state = ClassifierEngine.card_state(
            snapshot(completed_today=True, total_completions=3)
        )
        assert state == const.CARD_STATE_COMPLETED

    def test_missed(self) -> None:
        """A broken streak after completions."""
        state = ClassifierEngine.card_state(snapshot(streak=0, total_completions=3))
        assert state == const.CARD_STATE_MISSED

    def test_at_risk_needs_history(self) -> None:
        """Low rate only counts after more than five completions."""
        risky = snapshot(streak=1, total_completions=6, completion_rate=20.0)
        young = snapshot(streak=1, total_completions=5, completion_rate=20.0)

        assert ClassifierEngine.card_state(risky) == const.CARD_STATE_AT_RISK
        assert ClassifierEngine.card_state(young) == const.CARD_STATE_NOT_STARTED

    def test_in_progress(self) -> None:
        """A running attempt or an open fast."""
        counter = snapshot(
            habit_type=const.HABIT_TYPE_DURATION_COUNTER, elapsed_minutes=90
        )
        fast = snapshot(
            habit_type=const.HABIT_TYPE_FASTING_TRACKER,
            mode=const.FASTING_MODE_EATING,
        )
        idle_fast = snapshot(
            habit_type=const.HABIT_TYPE_FASTING_TRACKER,
            mode=const.FASTING_MODE_INACTIVE,
        )

        assert ClassifierEngine.card_state(counter) == const.CARD_STATE_IN_PROGRESS
        assert ClassifierEngine.card_state(fast) == const.CARD_STATE_IN_PROGRESS
        assert ClassifierEngine.card_state(idle_fast) == const.CARD_STATE_NOT_STARTED

    @pytest.mark.parametrize(
        "habit_type",
        [const.HABIT_TYPE_FASTING_TRACKER, const.HABIT_TYPE_DURATION_COUNTER],
    )
    def test_history_rules_skip_tracked_habits(self, habit_type: str) -> None:
        """Missed and at risk only apply to completion-type habits."""
        running = snapshot(
            habit_type=habit_type,
            mode=const.FASTING_MODE_FASTING,
            elapsed_minutes=300,
            streak=0,
            total_completions=8,
            completion_rate=10.0,
        )
        idle = snapshot(
            habit_type=habit_type,
            mode=const.FASTING_MODE_INACTIVE,
            streak=0,
            total_completions=8,
            completion_rate=10.0,
        )

        assert ClassifierEngine.card_state(running) == const.CARD_STATE_IN_PROGRESS
        assert ClassifierEngine.card_state(idle) == const.CARD_STATE_NOT_STARTED


class TestSentiment:
    """Tests for sentiment detection."""

    @pytest.mark.parametrize(
        ("fields", "expected"),
        [
            ({"name": "Quit Smoking"}, const.SENTIMENT_NEGATIVE),
            ({"name": "Evening Walk", "category": "other"}, const.SENTIMENT_POSITIVE),
            ({"name": "Stop running late"}, const.SENTIMENT_NEGATIVE),
            ({"name": "Journal", "category": "fitness"}, const.SENTIMENT_POSITIVE),
            ({"name": "Journal", "category": "other"}, const.SENTIMENT_NEUTRAL),
            (
                {"name": "Quit Smoking", "sentiment": const.SENTIMENT_NEUTRAL},
                const.SENTIMENT_NEUTRAL,
            ),
        ],
    )
    def test_sentiment(self, fields: dict, expected: str) -> None:
        """Explicit value, then negative keywords, positive keywords, category."""
        assert ClassifierEngine.sentiment(make_habit(**fields)) == expected
