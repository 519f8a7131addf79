"""Type definitions for habitcore data structures.

ARCHITECTURE DECISION: TypedDict over plain dict records
========================================================

Raw events come from an external store as plain dicts, and derived results are
handed to a UI layer that serializes them. TypedDicts describe those dicts
without wrapping them, so records flow through engines untouched.

1. **TypedDict for STATIC structures** (fixed keys known at design time):
   - Raw records: FastingWindowData, AttemptData, CompletionEvent
   - Derived results: FastingStatus, LevelProgress, HabitSnapshot, ...

2. **Tagged union for habits**: each habit variant is its own TypedDict with a
   Literal `habit_type` discriminator and only the fields its subsystem needs.
   `Habit` is the union of the five variants.

3. **dict[str, Any] / Mapping for DYNAMIC structures** (keys known at runtime):
   - Aggregate statistics consumed by achievement requirements

IMPORTANT: This file must NOT import from engines, managers or builders.
Only import from typing (type machinery).

NOTE: TypedDict is STATIC ANALYSIS ONLY. Runtime validation of raw records
lives in data_builders.py.
"""

from typing import Literal, NotRequired, TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

HabitId = str  # UUID string
AttemptId = str  # UUID string
WindowId = str  # UUID string
AchievementId = str  # Catalog slug, e.g. "streak_7"
UserId = str
ISODatetime = str  # ISO 8601 datetime string "2026-01-18T12:30:00+00:00"
ISODate = str  # ISO 8601 date string (no time) "2026-01-18"

StatsMap = dict[str, float]  # Aggregate statistic key → value


# =============================================================================
# Time Arithmetic
# =============================================================================


class ElapsedTime(TypedDict):
    """Whole-minute elapsed decomposition returned by dt_utils.dt_elapsed()."""

    days: int
    hours: int  # 0-23
    minutes: int  # 0-59
    total_minutes: int


# =============================================================================
# Habits (tagged union)
# =============================================================================


class _HabitBase(TypedDict):
    """Fields shared by every habit variant."""

    id: HabitId
    name: str
    category: str
    time_of_day: str  # One of const.TIME_OF_DAY_BUCKETS
    xp_reward: int
    difficulty: str  # One of const.DIFFICULTY_LEVELS
    is_active: bool
    created_at: ISODatetime
    sentiment: NotRequired[str]  # Explicit override of keyword detection


class DailyCheckHabit(_HabitBase):
    """Simple daily checkbox habit."""

    habit_type: Literal["daily_check"]


class DurationCounterHabit(_HabitBase):
    """Time since start habit (e.g. "days without smoking")."""

    habit_type: Literal["duration_counter"]
    start_date: ISODatetime
    cost_per_day: NotRequired[float | None]


class MotivationMilestone(TypedDict):
    """A message shown once a fast passes `minutes`."""

    minutes: int
    message: str


class FastingTrackerHabit(_HabitBase):
    """Intermittent fasting habit."""

    habit_type: Literal["fasting_tracker"]
    fasting_mode: str  # Preset key from const.FASTING_PRESETS or "custom"
    target_minutes: int
    motivation_milestones: NotRequired[list[MotivationMilestone]]


class NumericCounterHabit(_HabitBase):
    """Count-based habit (e.g. 8 glasses of water)."""

    habit_type: Literal["numeric_counter"]
    target_value: float | None
    target_unit: str | None


class DailyMeasurementHabit(_HabitBase):
    """Daily value tracking habit (e.g. weight)."""

    habit_type: Literal["daily_measurement"]
    target_value: float | None
    target_unit: str | None


Habit = (
    DailyCheckHabit
    | DurationCounterHabit
    | FastingTrackerHabit
    | NumericCounterHabit
    | DailyMeasurementHabit
)


# =============================================================================
# Raw Event Records
# =============================================================================


class FastingWindowData(TypedDict):
    """One fast → eat cycle of a fasting tracker habit."""

    id: WindowId
    habit_id: HabitId
    start_time: ISODatetime
    eating_transition_time: ISODatetime | None  # Set once at "eating started"
    end_time: ISODatetime | None  # Set once when the cycle closes
    target_minutes: int
    fasting_duration: NotRequired[int | None]  # Minutes, set on close


class AttemptData(TypedDict):
    """One continuous streak interval of a duration counter habit."""

    id: AttemptId
    habit_id: HabitId
    start_date: ISODatetime
    end_date: ISODatetime | None
    days_lasted: int | None
    reset_reason: str | None


class CompletionEvent(TypedDict):
    """One check-in. Immutable and append-only."""

    habit_id: HabitId
    completed_at: ISODatetime
    value: NotRequired[float | None]
    xp_reward: NotRequired[int | None]


class AchievementRequirement(TypedDict):
    """Threshold test against the aggregate statistics map."""

    stat_key: str
    value: float


class AchievementDefinition(TypedDict):
    """Static catalog entry."""

    id: AchievementId
    name: str
    description: str
    category: str
    icon: str
    rarity: str
    requirement: AchievementRequirement
    xp_reward: int


class AchievementUnlock(TypedDict):
    """Recorded the first time a user's statistic crosses a requirement."""

    achievement_id: AchievementId
    user_id: UserId
    unlocked_at: ISODatetime


# =============================================================================
# Fasting Results
# =============================================================================


class FastingStatus(TypedDict):
    """Current fasting state, recomputed from the window list."""

    mode: str  # const.FASTING_MODE_*
    window_id: WindowId | None
    started_at: ISODatetime | None  # Start of the current phase
    duration_minutes: int | None  # None when timestamps are invalid
    target_minutes: int | None
    progress_percent: float | None  # None when no target or not fasting
    overachieved: bool
    phase: str | None  # Metabolic phase while fasting


class FastingHistoryStats(TypedDict):
    """Aggregate over closed fasting windows (minutes)."""

    total_sessions: int
    best: int | None
    average: float | None
    total_minutes: int
    goals_met: int
    goal_streak: int


class FastingTransition(TypedDict):
    """Planned write for one fasting state machine transition."""

    action: str  # const.FASTING_ACTION_*
    habit_id: HabitId | None
    window_id: WindowId | None  # None for a new window
    timestamp: ISODatetime
    target_minutes: NotRequired[int]
    fasting_duration: NotRequired[int | None]
    new_mode: str


# =============================================================================
# Attempt Results
# =============================================================================


class MilestoneProgress(TypedDict):
    """Progress toward the next milestone on the ladder."""

    label: str
    target_days: int
    progress: float  # 0-100


class AttemptSummary(TypedDict):
    """Derived view of a duration counter habit."""

    habit_id: HabitId
    current_attempt_id: AttemptId | None
    elapsed: ElapsedTime | None
    elapsed_text: str | None
    longest_streak: int
    attempt_count: int
    milestone: MilestoneProgress | None
    reached_milestone: str | None
    money_saved: int | None


# =============================================================================
# Progression Results
# =============================================================================


class LevelProgress(TypedDict):
    """Linear level curve position for a total XP amount."""

    total_xp: int
    level: int
    xp_into_level: int
    xp_to_next: int
    progress_percent: float


class CompletionReward(TypedDict):
    """XP and celebration outcome of recording one completion."""

    habit_id: HabitId
    xp_earned: int
    old_level: int
    new_level: int
    level_up: bool
    streak: int
    celebration: str  # const.CELEBRATION_*
    new_achievements: list[AchievementId]


# =============================================================================
# Achievement Results
# =============================================================================


class EvaluationResult(TypedDict):
    """The raw verdict on one achievement.

    This is the RAW evaluation result - the manager decides what to record.
    """

    entity_id: AchievementId
    entity_name: str
    criteria_met: bool
    progress: float  # 0-100
    current_value: float
    threshold: float
    reason: str


class CatalogEvaluation(TypedDict):
    """Catalog split into newly unlocked, already unlocked and locked."""

    newly_unlocked: list[AchievementDefinition]
    unlocked: list[AchievementDefinition]
    locked: list[EvaluationResult]
    xp_from_new: int


# =============================================================================
# Analytics Results
# =============================================================================


class TrendPoint(TypedDict):
    """One day of the dense completion trend."""

    date: ISODate
    count: int


class CategoryStat(TypedDict):
    """Share of habits in one category."""

    category: str
    count: int
    percentage: int


class TopHabitEntry(TypedDict):
    """One ranked entry of the top habits list."""

    habit_id: HabitId
    name: str
    completions: int
    total_xp: int


class HabitStats(TypedDict):
    """Per-habit statistics derived from completion events."""

    habit_id: HabitId
    total_completions: int
    completion_rate: float  # 0-100 over the trailing window
    current_streak: int
    longest_streak: int
    completed_today: bool
    last_completed_at: ISODatetime | None
    total_xp_earned: int


class AnalyticsOverview(TypedDict):
    """Dashboard header totals."""

    total_habits: int
    active_habits: int
    completed_today: int
    today_completion_rate: float
    total_completions: int
    average_per_day: float


# =============================================================================
# Snapshot and Classification
# =============================================================================


class HabitSnapshot(TypedDict):
    """Derived, never persisted per-habit view. Recomputed on every read."""

    habit_id: HabitId
    habit_type: str
    name: str
    time_of_day: str
    mode: str | None  # Fasting mode for fasting trackers
    elapsed_minutes: int | None
    elapsed_days: int | None
    streak: int
    completion_rate: float
    trend: str  # const.TREND_*
    xp_reward: int
    total_xp_earned: int  # Completion-type habits; 0 otherwise
    completed_today: bool
    total_completions: int
    card_state: str  # const.CARD_STATE_*


HabitGroups = dict[str, list[HabitSnapshot]]


class Dashboard(TypedDict):
    """Everything the dashboard renders, rebuilt on every read."""

    snapshots: list[HabitSnapshot]
    groups: HabitGroups
    overview: AnalyticsOverview
    trend: list[TrendPoint]
    time_of_day: dict[str, int]
    categories: list[CategoryStat]
    top_habits: list[TopHabitEntry]
