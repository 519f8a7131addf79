"""Unit tests for SnapshotEngine - per-variant habit snapshots."""

from __future__ import annotations

from habitcore import const
from habitcore.engines.snapshot_engine import SnapshotEngine
from tests.helpers import (
    NOW,
    iso,
    make_attempt,
    make_counter_habit,
    make_event,
    make_fasting_habit,
    make_habit,
    make_window,
    utc,
)


class TestCompletionSnapshot:
    """Snapshots of completion-driven habits."""

    def test_values_from_habit_stats(self) -> None:
        """Streak, rate and today's state come from the event log."""
        habit = make_habit(
            habit_id="h1", name="Read", created_at="2026-03-06T00:00:00+00:00"
        )
        events = [make_event("h1", utc(2026, 3, day, 9)) for day in (13, 14, 15)]
        events.append(make_event("other", NOW))

        snap = SnapshotEngine.build_snapshot(habit, events, now=NOW)

        assert snap["habit_id"] == "h1"
        assert snap["name"] == "Read"
        assert snap["streak"] == 3
        assert snap["completion_rate"] == 30.0
        assert snap["completed_today"] is True
        assert snap["total_completions"] == 3
        assert snap["trend"] == const.TREND_UP
        assert snap["mode"] is None
        assert snap["card_state"] == const.CARD_STATE_COMPLETED

    def test_default_xp_fills_missing_rewards(self) -> None:
        """Events and habits without xp_reward earn the configured default."""
        habit = make_habit(habit_id="h1")
        del habit["xp_reward"]
        events = [
            make_event("h1", utc(2026, 3, 14, 9), xp_reward=None),
            make_event("h1", utc(2026, 3, 15, 9), xp_reward=None),
            make_event("h1", utc(2026, 3, 13, 9), xp_reward=5),
        ]

        snap = SnapshotEngine.build_snapshot(habit, events, now=NOW, default_xp=25)

        assert snap["xp_reward"] == 25
        assert snap["total_xp_earned"] == 55

    def test_never_completed(self) -> None:
        """A fresh habit is not started."""
        snap = SnapshotEngine.build_snapshot(make_habit(habit_id="h1"), now=NOW)

        assert snap["streak"] == 0
        assert snap["card_state"] == const.CARD_STATE_NOT_STARTED


class TestDurationCounterSnapshot:
    """Snapshots of duration counters."""

    def test_elapsed_from_open_attempt(self) -> None:
        """Streak is whole days since the attempt started."""
        habit = make_counter_habit()
        attempts = [make_attempt(start_date=iso(2026, 3, 12, 12))]

        snap = SnapshotEngine.build_snapshot(habit, attempts=attempts, now=NOW)

        assert snap["elapsed_minutes"] == 3 * 1440
        assert snap["elapsed_days"] == 3
        assert snap["streak"] == 3
        assert snap["card_state"] == const.CARD_STATE_IN_PROGRESS

    def test_missing_attempt(self) -> None:
        """Without an open attempt nothing is elapsed."""
        snap = SnapshotEngine.build_snapshot(make_counter_habit(), now=NOW)

        assert snap["elapsed_minutes"] is None
        assert snap["card_state"] == const.CARD_STATE_NOT_STARTED


class TestFastingSnapshot:
    """Snapshots of fasting trackers."""

    def test_open_fast_with_history(self) -> None:
        """Mode and elapsed from the open window, streak from history."""
        windows = [
            make_window(
                start_time=iso(2026, 3, 13, 20),
                eating_transition_time=iso(2026, 3, 14, 13),
                end_time=iso(2026, 3, 14, 20),
                fasting_duration=1020,
            ),
            make_window(start_time=iso(2026, 3, 15, 4)),
            make_window(habit_id="someone-else", start_time=iso(2026, 3, 1)),
        ]

        snap = SnapshotEngine.build_snapshot(
            make_fasting_habit(), windows=windows, now=NOW
        )

        assert snap["mode"] == const.FASTING_MODE_FASTING
        assert snap["elapsed_minutes"] == 480
        assert snap["elapsed_days"] == 0
        assert snap["streak"] == 1
        assert snap["completion_rate"] == 100.0
        assert snap["total_completions"] == 1
        assert snap["completed_today"] is False
        assert snap["card_state"] == const.CARD_STATE_IN_PROGRESS

    def test_fast_finished_today_is_completed(self) -> None:
        """Reaching the eating phase today completes the card."""
        windows = [
            make_window(
                start_time=iso(2026, 3, 14, 19),
                eating_transition_time=iso(2026, 3, 15, 11),
            )
        ]

        snap = SnapshotEngine.build_snapshot(
            make_fasting_habit(), windows=windows, now=NOW
        )

        assert snap["mode"] == const.FASTING_MODE_EATING
        assert snap["elapsed_minutes"] == 60
        assert snap["card_state"] == const.CARD_STATE_COMPLETED

    def test_missed_goal_does_not_hide_running_fast(self) -> None:
        """A short earlier fast leaves the running one in progress."""
        windows = [
            make_window(
                start_time=iso(2026, 3, 13, 20),
                eating_transition_time=iso(2026, 3, 14, 6),
                end_time=iso(2026, 3, 14, 20),
                fasting_duration=600,
            ),
            make_window(start_time=iso(2026, 3, 15, 7)),
        ]

        snap = SnapshotEngine.build_snapshot(
            make_fasting_habit(), windows=windows, now=NOW
        )

        assert snap["mode"] == const.FASTING_MODE_FASTING
        assert snap["elapsed_minutes"] == 300
        assert snap["streak"] == 0
        assert snap["total_completions"] == 1
        assert snap["card_state"] == const.CARD_STATE_IN_PROGRESS


class TestBuildSnapshots:
    """Tests for the batch builder."""

    def test_input_order_and_routing(self) -> None:
        """Each habit gets only its own records, in input order."""
        habits = [
            make_fasting_habit(),
            make_counter_habit(),
            make_habit(habit_id="h1", time_of_day="teatime"),
        ]
        snaps = SnapshotEngine.build_snapshots(
            habits,
            [make_event("h1", NOW)],
            {"fast-1": [make_window(start_time=iso(2026, 3, 15, 10))]},
            {"quit-1": [make_attempt(start_date=iso(2026, 3, 15))]},
            NOW,
        )

        assert [s["habit_id"] for s in snaps] == ["fast-1", "quit-1", "h1"]
        assert snaps[0]["elapsed_minutes"] == 120
        assert snaps[1]["elapsed_minutes"] == 720
        assert snaps[2]["completed_today"] is True
        assert snaps[2]["time_of_day"] == const.TIME_OF_DAY_ANYTIME
