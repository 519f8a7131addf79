"""Unit tests for StatisticsEngine - analytics over the completion log.

All days are local calendar days of the default timezone (UTC unless a test
sets another one; conftest resets it).
"""

from __future__ import annotations

from datetime import date
from zoneinfo import ZoneInfo

import pytest

from habitcore import const
from habitcore.engines.statistics_engine import StatisticsEngine
from habitcore.utils import dt_utils
from tests.helpers import NOW, make_event, make_fasting_habit, make_habit, utc

TODAY = date(2026, 3, 15)


@pytest.fixture
def two_habits() -> list:
    """Two active daily check habits."""
    return [
        make_habit(habit_id="h1", name="Morning Run", time_of_day="morning"),
        make_habit(habit_id="h2", name="Read", time_of_day="evening"),
    ]


@pytest.fixture
def history() -> list:
    """Three-day run, a gap, a perfect day, then a two-day run ending today."""
    return [
        make_event("h1", utc(2026, 3, 1, 5)),
        make_event("h1", utc(2026, 3, 2, 12)),
        make_event("h1", utc(2026, 3, 3, 23, 30)),
        make_event("h1", utc(2026, 3, 10, 9)),
        make_event("h2", utc(2026, 3, 10, 10)),
        make_event("h1", utc(2026, 3, 14, 9)),
        make_event("h1", utc(2026, 3, 15, 9)),
    ]


# =============================================================================
# Test: streaks
# =============================================================================


class TestStreaks:
    """Tests for streak helpers."""

    def test_streak_including_today(self) -> None:
        """A run ending today counts today."""
        dates = {date(2026, 3, 13), date(2026, 3, 14), TODAY}
        assert StatisticsEngine.calculate_streak(dates, TODAY) == 3

    def test_unfinished_today_keeps_streak(self) -> None:
        """Not yet completing today does not break yesterday's run."""
        dates = {date(2026, 3, 13), date(2026, 3, 14)}
        assert StatisticsEngine.calculate_streak(dates, TODAY) == 2

    def test_gap_breaks_streak(self) -> None:
        """Missing yesterday and today is a broken streak."""
        assert StatisticsEngine.calculate_streak({date(2026, 3, 13)}, TODAY) == 0
        assert StatisticsEngine.calculate_streak(set(), TODAY) == 0

    def test_runs_and_longest(self) -> None:
        """Runs are chronological; duplicates collapse."""
        dates = [
            date(2026, 3, 1),
            date(2026, 3, 2),
            date(2026, 3, 2),
            date(2026, 3, 5),
        ]
        assert StatisticsEngine.streak_runs(dates) == [2, 1]
        assert StatisticsEngine.longest_streak(dates) == 2
        assert StatisticsEngine.longest_streak([]) == 0


# =============================================================================
# Test: trend
# =============================================================================


class TestTrend:
    """Tests for the dense trend and its direction."""

    def test_trend_is_dense_and_ascending(self) -> None:
        """Every day of the window appears, zero-filled."""
        events = [
            make_event("h1", utc(2026, 3, 13, 8)),
            make_event("h1", utc(2026, 3, 15, 8)),
            make_event("h2", utc(2026, 3, 15, 9)),
            make_event("h1", utc(2026, 1, 1, 9)),
        ]

        assert StatisticsEngine.completion_trend(events, 3, NOW) == [
            {"date": "2026-03-13", "count": 1},
            {"date": "2026-03-14", "count": 0},
            {"date": "2026-03-15", "count": 2},
        ]

    def test_empty_window(self) -> None:
        """A zero-day window has no points."""
        assert StatisticsEngine.completion_trend([], 0, NOW) == []

    def test_trend_follows_local_days(self) -> None:
        """A late UTC completion lands on the next local day in Berlin."""
        dt_utils.set_default_timezone(ZoneInfo("Europe/Berlin"))
        events = [make_event("h1", utc(2026, 3, 14, 23, 30))]

        points = StatisticsEngine.completion_trend(events, 2, NOW)

        assert points == [
            {"date": "2026-03-14", "count": 0},
            {"date": "2026-03-15", "count": 1},
        ]

    @pytest.mark.parametrize(
        ("recent_days", "earlier_days", "expected"),
        [
            ((10, 11), (3,), const.TREND_UP),
            ((10,), (3, 4), const.TREND_DOWN),
            ((10,), (3,), const.TREND_STABLE),
        ],
    )
    def test_direction(
        self, recent_days: tuple, earlier_days: tuple, expected: str
    ) -> None:
        """Last seven days against the seven before them."""
        events = [
            make_event("h1", utc(2026, 3, day, 9))
            for day in (*recent_days, *earlier_days)
        ]
        assert StatisticsEngine.trend_direction(events, NOW) == expected


# =============================================================================
# Test: distributions
# =============================================================================


class TestDistributions:
    """Tests for time of day, categories and top habits."""

    def test_time_of_day_buckets(self, two_habits: list) -> None:
        """All buckets present; unknown habits and tags count as anytime."""
        habits = [
            *two_habits,
            make_habit(habit_id="h3", time_of_day="brunch"),
        ]
        events = [
            make_event("h1", NOW),
            make_event("h1", NOW),
            make_event("h2", NOW),
            make_event("h3", NOW),
            make_event("ghost", NOW),
        ]

        assert StatisticsEngine.time_of_day_stats(habits, events) == {
            "morning": 2,
            "afternoon": 0,
            "evening": 1,
            "night": 0,
            "anytime": 2,
        }

    def test_category_percentages_sum_to_100(self) -> None:
        """Three equal categories split 34/33/33."""
        habits = [
            make_habit(category="mindfulness"),
            make_habit(category="health"),
            make_habit(category="fitness"),
        ]

        assert StatisticsEngine.category_stats(habits) == [
            {"category": "fitness", "count": 1, "percentage": 34},
            {"category": "health", "count": 1, "percentage": 33},
            {"category": "mindfulness", "count": 1, "percentage": 33},
        ]

    def test_category_sorted_by_count(self) -> None:
        """Larger categories first."""
        habits = [
            make_habit(category="health"),
            make_habit(category="fitness"),
            make_habit(category="fitness"),
        ]
        stats = StatisticsEngine.category_stats(habits)

        assert [(s["category"], s["percentage"]) for s in stats] == [
            ("fitness", 67),
            ("health", 33),
        ]
        assert StatisticsEngine.category_stats([]) == []

    def test_top_habits_ranking(self, two_habits: list) -> None:
        """Ties on completions break on XP; uncompleted habits are skipped."""
        habits = [*two_habits, make_habit(habit_id="h3", name="Stretch")]
        events = [
            make_event("h1", NOW, xp_reward=10),
            make_event("h1", NOW, xp_reward=10),
            make_event("h2", NOW, xp_reward=20),
            make_event("h2", NOW, xp_reward=20),
        ]

        top = StatisticsEngine.top_habits(habits, events)

        assert [entry["habit_id"] for entry in top] == ["h2", "h1"]
        assert top[0]["total_xp"] == 40
        assert [e["habit_id"] for e in StatisticsEngine.top_habits(habits, events, 1)] == [
            "h2"
        ]


# =============================================================================
# Test: per-habit statistics
# =============================================================================


class TestHabitStats:
    """Tests for habit_stats."""

    def test_window_starts_at_creation(self) -> None:
        """A ten-day-old habit is rated over ten days, not thirty."""
        habit = make_habit(habit_id="h1", created_at="2026-03-06T08:00:00+00:00")
        events = [make_event("h1", utc(2026, 3, day, 9)) for day in (13, 14, 15)]

        stats = StatisticsEngine.habit_stats(habit, events, 30, NOW)

        assert stats["total_completions"] == 3
        assert stats["completion_rate"] == 30.0
        assert stats["current_streak"] == 3
        assert stats["longest_streak"] == 3
        assert stats["completed_today"] is True
        assert stats["last_completed_at"] == utc(2026, 3, 15, 9).isoformat()
        assert stats["total_xp_earned"] == 30

    def test_other_habits_ignored(self) -> None:
        """Events of other habits never count."""
        habit = make_habit(habit_id="h1")
        stats = StatisticsEngine.habit_stats(habit, [make_event("h2", NOW)], 30, NOW)

        assert stats["total_completions"] == 0
        assert stats["completion_rate"] == 0.0
        assert stats["last_completed_at"] is None

    def test_stats_by_habit(self, two_habits: list, history: list) -> None:
        """Keyed by habit id."""
        by_habit = StatisticsEngine.stats_by_habit(two_habits, history, 30, NOW)

        assert set(by_habit) == {"h1", "h2"}
        assert by_habit["h2"]["total_completions"] == 1

    def test_stats_by_habit_default_xp(self, two_habits: list) -> None:
        """Events without xp_reward earn the given default."""
        events = [make_event("h1", NOW, xp_reward=None), make_event("h2", NOW)]

        by_habit = StatisticsEngine.stats_by_habit(
            two_habits, events, 30, NOW, default_xp=7
        )

        assert by_habit["h1"]["total_xp_earned"] == 7
        assert by_habit["h2"]["total_xp_earned"] == 10


# =============================================================================
# Test: aggregates
# =============================================================================


class TestAggregates:
    """Tests for perfect days, the statistics map and the overview."""

    def test_perfect_day_ignores_non_completion_habits(
        self, two_habits: list
    ) -> None:
        """Fasting trackers are not required for a perfect day."""
        habits = [*two_habits, make_fasting_habit()]
        events = [make_event("h1", NOW), make_event("h2", NOW)]

        assert StatisticsEngine.is_perfect_day(habits, events, TODAY) is True
        assert StatisticsEngine.is_perfect_day(habits, events[:1], TODAY) is False
        assert StatisticsEngine.is_perfect_day([], events, TODAY) is False

    def test_inactive_habits_not_required(self, two_habits: list) -> None:
        """Paused habits do not block a perfect day."""
        habits = [*two_habits, make_habit(habit_id="h3", is_active=False)]
        events = [make_event("h1", NOW), make_event("h2", NOW)]

        assert StatisticsEngine.is_perfect_day(habits, events, TODAY) is True

    def test_aggregate_stats(self, two_habits: list, history: list) -> None:
        """Every statistic achievements can require."""
        stats = StatisticsEngine.aggregate_stats(two_habits, history, NOW)

        assert stats == {
            const.STAT_CURRENT_STREAK: 2,
            const.STAT_LONGEST_STREAK: 3,
            const.STAT_TOTAL_COMPLETIONS: 7,
            const.STAT_PERFECT_DAYS: 1,
            const.STAT_DAILY_COMPLETIONS: 2,
            const.STAT_ACTIVE_HABITS: 2,
            const.STAT_EARLY_COMPLETIONS: 1,
            const.STAT_LATE_COMPLETIONS: 1,
            const.STAT_STREAK_RECOVERIES: 1,
            const.STAT_TOTAL_XP: 70,
        }

    def test_aggregate_stats_empty(self) -> None:
        """An empty log is all zeros."""
        stats = StatisticsEngine.aggregate_stats([], [], NOW)

        assert all(value == 0 for value in stats.values())

    def test_overview(self, two_habits: list) -> None:
        """Header totals for today."""
        habits = [*two_habits, make_habit(habit_id="h3", is_active=False)]
        events = [
            make_event("h1", NOW),
            make_event("h1", utc(2026, 3, 14, 9)),
            make_event("h2", utc(2026, 3, 13, 9)),
            make_event("h2", utc(2026, 3, 12, 9)),
            make_event("h2", utc(2026, 3, 11, 9)),
        ]

        overview = StatisticsEngine.overview(habits, events, NOW, 10)

        assert overview == {
            "total_habits": 3,
            "active_habits": 2,
            "completed_today": 1,
            "today_completion_rate": 50.0,
            "total_completions": 5,
            "average_per_day": 0.5,
        }
