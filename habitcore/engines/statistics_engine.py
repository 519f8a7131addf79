"""Statistics Engine - Analytics over the completion event log.

This engine derives every analytics figure the dashboard shows from raw
completion events:
- Dense completion trend over a trailing window of local days
- Completions per time-of-day bucket
- Category distribution with integer percentages summing to 100
- Top habits ranking
- Per-habit statistics (rate, streaks, completed today)
- The aggregate statistics map consumed by achievement requirements

Design Principles:
    - Stateless: No store reference, operates on passed data structures
    - Consistent: Every "day" is a local calendar day (dt_utils default tz)
    - Deterministic: All rankings have a total order (name as last tiebreak)
"""

from __future__ import annotations

from collections import Counter, defaultdict
from datetime import date, timedelta
from typing import TYPE_CHECKING

from .. import const
from ..utils.dt_utils import (
    as_local,
    dt_day_range,
    dt_local_date,
    dt_now_utc,
    dt_parse_hhmm,
    dt_to_utc,
)
from ..utils.math_utils import (
    calculate_percentage,
    clamp,
    largest_remainder_percentages,
    round_value,
)
from .progression_engine import ProgressionEngine

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence
    from datetime import datetime

    from ..type_defs import (
        AnalyticsOverview,
        CategoryStat,
        CompletionEvent,
        Habit,
        HabitStats,
        StatsMap,
        TopHabitEntry,
        TrendPoint,
    )


class StatisticsEngine:
    """Stateless engine for completion analytics.

    All methods are static - they operate on data structures passed as
    arguments. Nothing is cached; callers recompute on every read.
    """

    # =========================================================================
    # Day Helpers
    # =========================================================================

    @staticmethod
    def event_date(event: CompletionEvent) -> date | None:
        """Local calendar day of a completion, or None if unparseable."""
        return dt_local_date(event.get(const.DATA_COMPLETION_COMPLETED_AT))

    @staticmethod
    def completion_dates(events: Iterable[CompletionEvent]) -> set[date]:
        """Distinct local days with at least one completion."""
        dates = {StatisticsEngine.event_date(event) for event in events}
        dates.discard(None)
        return dates  # type: ignore[return-value]

    @staticmethod
    def events_for_habit(
        events: Iterable[CompletionEvent], habit_id: str
    ) -> list[CompletionEvent]:
        """Filter events down to one habit."""
        return [e for e in events if e.get(const.DATA_COMPLETION_HABIT_ID) == habit_id]

    @staticmethod
    def _today(now: datetime | None) -> date:
        return as_local(now or dt_now_utc()).date()

    # =========================================================================
    # Streaks
    # =========================================================================

    @staticmethod
    def calculate_streak(dates: Iterable[date], today: date) -> int:
        """Consecutive completed days ending today.

        If today is not completed yet the streak may still end yesterday, so
        an unfinished today does not break it.

        Examples:
            {today, yesterday, 2 days ago} → 3
            {yesterday, 2 days ago} → 2
            {2 days ago} → 0
        """
        done = set(dates)
        if today in done:
            cursor = today
        elif today - timedelta(days=1) in done:
            cursor = today - timedelta(days=1)
        else:
            return 0

        streak = 0
        while cursor in done:
            streak += 1
            cursor -= timedelta(days=1)
        return streak

    @staticmethod
    def streak_runs(dates: Iterable[date]) -> list[int]:
        """Lengths of consecutive-day runs in chronological order."""
        runs: list[int] = []
        previous: date | None = None
        for day in sorted(set(dates)):
            if previous is not None and day - previous == timedelta(days=1):
                runs[-1] += 1
            else:
                runs.append(1)
            previous = day
        return runs

    @staticmethod
    def longest_streak(dates: Iterable[date]) -> int:
        """Longest consecutive-day run, 0 if no dates."""
        return max(StatisticsEngine.streak_runs(dates), default=0)

    # =========================================================================
    # Trend
    # =========================================================================

    @staticmethod
    def completion_trend(
        events: Iterable[CompletionEvent],
        window_days: int = const.DEFAULT_TREND_WINDOW_DAYS,
        now: datetime | None = None,
    ) -> list[TrendPoint]:
        """Dense, zero-filled completion counts per local day.

        Every day of the trailing window appears exactly once, in ascending
        order, including days without completions.
        """
        days = dt_day_range(StatisticsEngine._today(now), window_days)
        counts = Counter(StatisticsEngine.event_date(event) for event in events)
        return [{"date": day.isoformat(), "count": counts.get(day, 0)} for day in days]

    @staticmethod
    def trend_direction(
        events: Iterable[CompletionEvent], now: datetime | None = None
    ) -> str:
        """Compare the last 7 days with the 7 days before them."""
        points = StatisticsEngine.completion_trend(
            events, const.TREND_COMPARISON_DAYS * 2, now
        )
        previous = sum(p["count"] for p in points[: const.TREND_COMPARISON_DAYS])
        recent = sum(p["count"] for p in points[const.TREND_COMPARISON_DAYS :])
        if recent > previous:
            return const.TREND_UP
        if recent < previous:
            return const.TREND_DOWN
        return const.TREND_STABLE

    # =========================================================================
    # Distributions
    # =========================================================================

    @staticmethod
    def time_of_day_stats(
        habits: Iterable[Habit], events: Iterable[CompletionEvent]
    ) -> dict[str, int]:
        """Completions per time-of-day bucket.

        Unknown or missing tags (and events of unknown habits) count as
        anytime. Every bucket is present in the result.
        """
        bucket_by_habit = {
            habit[const.DATA_HABIT_ID]: habit.get(const.DATA_HABIT_TIME_OF_DAY)
            for habit in habits
        }
        totals = dict.fromkeys(const.TIME_OF_DAY_BUCKETS, 0)
        for event in events:
            bucket = bucket_by_habit.get(event.get(const.DATA_COMPLETION_HABIT_ID))
            if bucket not in totals:
                bucket = const.TIME_OF_DAY_ANYTIME
            totals[bucket] += 1
        return totals

    @staticmethod
    def category_stats(habits: Iterable[Habit]) -> list[CategoryStat]:
        """Habit count and integer percentage per category.

        Percentages always sum to exactly 100 for a non-empty habit set
        (largest-remainder allocation). Sorted by count, then name.
        """
        counts: Counter[str] = Counter(
            habit.get(const.DATA_HABIT_CATEGORY) or const.CATEGORY_UNCATEGORIZED
            for habit in habits
        )
        if not counts:
            return []

        percentages = largest_remainder_percentages(counts)
        return [
            {"category": category, "count": count, "percentage": percentages[category]}
            for category, count in sorted(counts.items(), key=lambda i: (-i[1], i[0]))
        ]

    @staticmethod
    def top_habits(
        habits: Iterable[Habit],
        events: Iterable[CompletionEvent],
        n: int = const.DEFAULT_TOP_HABITS,
        default_xp: int = const.DEFAULT_XP_REWARD,
    ) -> list[TopHabitEntry]:
        """Habits ranked by completions, then XP earned, then name.

        Habits without completions are not ranked.
        """
        completions: Counter[str] = Counter()
        xp: defaultdict[str, int] = defaultdict(int)
        for event in events:
            habit_id = event.get(const.DATA_COMPLETION_HABIT_ID)
            completions[habit_id] += 1
            xp[habit_id] += ProgressionEngine.event_xp(event, default_xp)

        entries: list[TopHabitEntry] = [
            {
                "habit_id": habit[const.DATA_HABIT_ID],
                "name": habit.get(const.DATA_HABIT_NAME, const.DISPLAY_UNKNOWN),
                "completions": completions[habit[const.DATA_HABIT_ID]],
                "total_xp": xp[habit[const.DATA_HABIT_ID]],
            }
            for habit in habits
            if completions[habit[const.DATA_HABIT_ID]] > 0
        ]
        entries.sort(key=lambda e: (-e["completions"], -e["total_xp"], e["name"]))
        return entries[: max(0, n)]

    # =========================================================================
    # Per-Habit Statistics
    # =========================================================================

    @staticmethod
    def habit_stats(
        habit: Habit,
        events: Iterable[CompletionEvent],
        window_days: int = const.DEFAULT_TREND_WINDOW_DAYS,
        now: datetime | None = None,
        default_xp: int = const.DEFAULT_XP_REWARD,
    ) -> HabitStats:
        """Statistics of one habit from its completion events.

        completion_rate is the share of days completed in the trailing
        window, where the window never starts before the habit was created.
        """
        habit_id = habit[const.DATA_HABIT_ID]
        own_events = StatisticsEngine.events_for_habit(events, habit_id)
        today = StatisticsEngine._today(now)
        dates = StatisticsEngine.completion_dates(own_events)

        window_start = today - timedelta(days=max(1, window_days) - 1)
        created = dt_local_date(habit.get(const.DATA_HABIT_CREATED_AT))
        if created is not None and window_start < created <= today:
            window_start = created
        window_length = (today - window_start).days + 1
        days_done = sum(1 for day in dates if window_start <= day <= today)

        timestamps = [
            ts
            for ts in (
                dt_to_utc(e.get(const.DATA_COMPLETION_COMPLETED_AT)) for e in own_events
            )
            if ts is not None
        ]

        return {
            "habit_id": habit_id,
            "total_completions": len(own_events),
            "completion_rate": round_value(
                clamp(calculate_percentage(days_done, window_length), 0.0, 100.0)
            ),
            "current_streak": StatisticsEngine.calculate_streak(dates, today),
            "longest_streak": StatisticsEngine.longest_streak(dates),
            "completed_today": today in dates,
            "last_completed_at": max(timestamps).isoformat() if timestamps else None,
            "total_xp_earned": ProgressionEngine.total_xp(own_events, default_xp),
        }

    # =========================================================================
    # Aggregates
    # =========================================================================

    @staticmethod
    def completion_habits(habits: Iterable[Habit]) -> list[Habit]:
        """Active habits that are completed by check-in events."""
        return [
            habit
            for habit in habits
            if habit.get(const.DATA_HABIT_IS_ACTIVE, True)
            and habit.get(const.DATA_HABIT_TYPE) in const.COMPLETION_HABIT_TYPES
        ]

    @staticmethod
    def habits_completed_by_day(
        events: Iterable[CompletionEvent],
    ) -> dict[date, set[str]]:
        """Local day → ids of habits completed that day."""
        by_day: defaultdict[date, set[str]] = defaultdict(set)
        for event in events:
            day = StatisticsEngine.event_date(event)
            if day is not None:
                by_day[day].add(event.get(const.DATA_COMPLETION_HABIT_ID))
        return dict(by_day)

    @staticmethod
    def is_perfect_day(
        habits: Iterable[Habit], events: Iterable[CompletionEvent], day: date
    ) -> bool:
        """Whether every active completion habit was completed on day."""
        required = {h[const.DATA_HABIT_ID] for h in StatisticsEngine.completion_habits(habits)}
        if not required:
            return False
        done = StatisticsEngine.habits_completed_by_day(events).get(day, set())
        return required <= done

    @staticmethod
    def aggregate_stats(
        habits: Sequence[Habit],
        events: Sequence[CompletionEvent],
        now: datetime | None = None,
        default_xp: int = const.DEFAULT_XP_REWARD,
    ) -> StatsMap:
        """Build the statistics map consumed by achievement requirements.

        Streaks are counted over days with any completion. A streak recovery
        is a new run starting after a run of at least two days was broken.
        perfect_days counts days on which every currently active completion
        habit was completed.
        """
        today = StatisticsEngine._today(now)
        dates = StatisticsEngine.completion_dates(events)
        by_day = StatisticsEngine.habits_completed_by_day(events)
        required = {
            h[const.DATA_HABIT_ID] for h in StatisticsEngine.completion_habits(habits)
        }

        early_before = dt_parse_hhmm(const.EARLY_COMPLETION_BEFORE)
        late_after = dt_parse_hhmm(const.LATE_COMPLETION_AFTER)
        early = late = 0
        for event in events:
            completed_at = dt_to_utc(event.get(const.DATA_COMPLETION_COMPLETED_AT))
            if completed_at is None:
                continue
            local_time = as_local(completed_at).time()
            if early_before and local_time < early_before:
                early += 1
            if late_after and local_time >= late_after:
                late += 1

        runs = StatisticsEngine.streak_runs(dates)
        recoveries = sum(1 for previous in runs[:-1] if previous >= 2)

        stats: StatsMap = {
            const.STAT_CURRENT_STREAK: StatisticsEngine.calculate_streak(dates, today),
            const.STAT_LONGEST_STREAK: max(runs, default=0),
            const.STAT_TOTAL_COMPLETIONS: len(events),
            const.STAT_PERFECT_DAYS: (
                sum(1 for done in by_day.values() if required <= done)
                if required
                else 0
            ),
            const.STAT_DAILY_COMPLETIONS: max(
                (len(done) for done in by_day.values()), default=0
            ),
            const.STAT_ACTIVE_HABITS: sum(
                1 for h in habits if h.get(const.DATA_HABIT_IS_ACTIVE, True)
            ),
            const.STAT_EARLY_COMPLETIONS: early,
            const.STAT_LATE_COMPLETIONS: late,
            const.STAT_STREAK_RECOVERIES: recoveries,
            const.STAT_TOTAL_XP: ProgressionEngine.total_xp(events, default_xp),
        }
        const.LOGGER.debug("Aggregate stats: %s", stats)
        return stats

    @staticmethod
    def overview(
        habits: Sequence[Habit],
        events: Sequence[CompletionEvent],
        now: datetime | None = None,
        window_days: int = const.DEFAULT_TREND_WINDOW_DAYS,
    ) -> AnalyticsOverview:
        """Dashboard header totals.

        average_per_day is the mean daily completion count over the trailing
        window.
        """
        today = StatisticsEngine._today(now)
        trackable = StatisticsEngine.completion_habits(habits)
        done_today = StatisticsEngine.habits_completed_by_day(events).get(today, set())
        completed_today = sum(
            1 for h in trackable if h[const.DATA_HABIT_ID] in done_today
        )
        trend = StatisticsEngine.completion_trend(events, window_days, now)

        return {
            "total_habits": len(habits),
            "active_habits": sum(
                1 for h in habits if h.get(const.DATA_HABIT_IS_ACTIVE, True)
            ),
            "completed_today": completed_today,
            "today_completion_rate": calculate_percentage(
                completed_today, len(trackable)
            ),
            "total_completions": len(events),
            "average_per_day": (
                round_value(sum(p["count"] for p in trend) / len(trend))
                if trend
                else 0.0
            ),
        }

    @staticmethod
    def stats_by_habit(
        habits: Iterable[Habit],
        events: Sequence[CompletionEvent],
        window_days: int = const.DEFAULT_TREND_WINDOW_DAYS,
        now: datetime | None = None,
        default_xp: int = const.DEFAULT_XP_REWARD,
    ) -> Mapping[str, HabitStats]:
        """habit_stats() for every habit, keyed by habit id."""
        return {
            habit[const.DATA_HABIT_ID]: StatisticsEngine.habit_stats(
                habit, events, window_days, now, default_xp
            )
            for habit in habits
        }
