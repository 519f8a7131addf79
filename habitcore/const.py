# File: const.py
"""Constants for the habitcore engine.

This file centralizes record keys, habit types, state names, defaults and
policy constants for consistency across engines, managers and builders.
"""

import logging

# ------------------------------------------------------------------------------------------------
# General / Package Information
# ------------------------------------------------------------------------------------------------
HABITCORE_TITLE = "habitcore"

# Logger
LOGGER = logging.getLogger(__package__)

# Float precision for rounding percentages and averages
DATA_FLOAT_PRECISION = 2

# ------------------------------------------------------------------------------------------------
# Habit Types (tagged union discriminator)
# ------------------------------------------------------------------------------------------------
HABIT_TYPE_DAILY_CHECK = "daily_check"
HABIT_TYPE_DURATION_COUNTER = "duration_counter"
HABIT_TYPE_FASTING_TRACKER = "fasting_tracker"
HABIT_TYPE_NUMERIC_COUNTER = "numeric_counter"
HABIT_TYPE_DAILY_MEASUREMENT = "daily_measurement"

HABIT_TYPES = [
    HABIT_TYPE_DAILY_CHECK,
    HABIT_TYPE_DURATION_COUNTER,
    HABIT_TYPE_FASTING_TRACKER,
    HABIT_TYPE_NUMERIC_COUNTER,
    HABIT_TYPE_DAILY_MEASUREMENT,
]

# Habit types whose snapshot is driven by completion events
COMPLETION_HABIT_TYPES = frozenset(
    {
        HABIT_TYPE_DAILY_CHECK,
        HABIT_TYPE_NUMERIC_COUNTER,
        HABIT_TYPE_DAILY_MEASUREMENT,
    }
)

# ------------------------------------------------------------------------------------------------
# Time of Day Buckets
# ------------------------------------------------------------------------------------------------
TIME_OF_DAY_MORNING = "morning"
TIME_OF_DAY_AFTERNOON = "afternoon"
TIME_OF_DAY_EVENING = "evening"
TIME_OF_DAY_NIGHT = "night"
TIME_OF_DAY_ANYTIME = "anytime"

TIME_OF_DAY_BUCKETS = [
    TIME_OF_DAY_MORNING,
    TIME_OF_DAY_AFTERNOON,
    TIME_OF_DAY_EVENING,
    TIME_OF_DAY_NIGHT,
    TIME_OF_DAY_ANYTIME,
]

# Overlay group surfaced in addition to the time-of-day buckets
GROUP_AT_RISK = "at_risk"

# ------------------------------------------------------------------------------------------------
# Habit Categories / Difficulty / Sentiment
# ------------------------------------------------------------------------------------------------
CATEGORY_UNCATEGORIZED = "uncategorized"

DIFFICULTY_EASY = "easy"
DIFFICULTY_MEDIUM = "medium"
DIFFICULTY_HARD = "hard"
DIFFICULTY_LEVELS = [DIFFICULTY_EASY, DIFFICULTY_MEDIUM, DIFFICULTY_HARD]

SENTIMENT_POSITIVE = "positive"
SENTIMENT_NEGATIVE = "negative"
SENTIMENT_NEUTRAL = "neutral"
SENTIMENTS = [SENTIMENT_POSITIVE, SENTIMENT_NEGATIVE, SENTIMENT_NEUTRAL]

SENTIMENT_NEGATIVE_KEYWORDS = (
    "quit",
    "stop",
    "avoid",
    "smoking",
    "drinking",
    "alcohol",
    "sugar",
    "junk food",
    "soda",
    "screen time",
    "social media",
    "procrastination",
)
SENTIMENT_POSITIVE_KEYWORDS = (
    "exercise",
    "workout",
    "run",
    "walk",
    "meditation",
    "yoga",
    "reading",
    "learning",
    "practice",
    "study",
    "water",
    "sleep",
    "fitness",
    "health",
)
SENTIMENT_POSITIVE_CATEGORIES = frozenset(
    {"fitness", "nutrition", "sleep", "mindfulness", "learning"}
)

# ------------------------------------------------------------------------------------------------
# Card States
# ------------------------------------------------------------------------------------------------
CARD_STATE_COMPLETED = "completed"
CARD_STATE_MISSED = "missed"
CARD_STATE_AT_RISK = "at_risk"
CARD_STATE_IN_PROGRESS = "in_progress"
CARD_STATE_NOT_STARTED = "not_started"

# Minimum completions before a low completion rate marks a card "at risk"
CARD_AT_RISK_MIN_COMPLETIONS = 5

# ------------------------------------------------------------------------------------------------
# Fasting State Machine
# ------------------------------------------------------------------------------------------------
FASTING_MODE_INACTIVE = "inactive"
FASTING_MODE_FASTING = "fasting"
FASTING_MODE_EATING = "eating"

FASTING_ACTION_START_FASTING = "start_fasting"
FASTING_ACTION_START_EATING = "start_eating"
FASTING_ACTION_END_EATING = "end_eating"

# Preset fasting schedules: key -> (fasting hours, eating hours)
FASTING_PRESETS: dict[str, tuple[int, int]] = {
    "16:8": (16, 8),
    "18:6": (18, 6),
    "20:4": (20, 4),
    "OMAD": (23, 1),
    "36h": (36, 0),
    "48h": (48, 0),
}
DEFAULT_FASTING_PRESET = "16:8"

# Metabolic phases: (phase key, lower bound in hours); upper bound is next entry
FASTING_PHASE_DIGESTION = "digestion"
FASTING_PHASE_TRANSITION = "transition"
FASTING_PHASE_FAT_BURNING = "fat_burning"
FASTING_PHASE_KETOSIS = "ketosis"
FASTING_PHASE_DEEP_KETOSIS = "deep_ketosis"
FASTING_PHASE_AUTOPHAGY = "autophagy"

FASTING_PHASES: list[tuple[str, int]] = [
    (FASTING_PHASE_DIGESTION, 0),
    (FASTING_PHASE_TRANSITION, 4),
    (FASTING_PHASE_FAT_BURNING, 12),
    (FASTING_PHASE_KETOSIS, 16),
    (FASTING_PHASE_DEEP_KETOSIS, 24),
    (FASTING_PHASE_AUTOPHAGY, 36),
]

# Motivation milestone messages stay visible this long after their mark
FASTING_MOTIVATION_WINDOW_MINUTES = 30

# ------------------------------------------------------------------------------------------------
# Attempt / Milestones
# ------------------------------------------------------------------------------------------------
DEFAULT_MILESTONE_DAYS: tuple[int, ...] = (1, 7, 30, 90, 180, 365)

MILESTONE_LABELS: dict[int, str] = {
    1: "1 Day",
    7: "1 Week",
    14: "2 Weeks",
    30: "1 Month",
    90: "3 Months",
    100: "100 Days",
    180: "6 Months",
    365: "1 Year",
}

# ------------------------------------------------------------------------------------------------
# Progression / XP
# ------------------------------------------------------------------------------------------------
DEFAULT_LEVEL_SIZE = 1000
DEFAULT_XP_REWARD = 10

XP_STREAK_BONUS_PER_WEEK = 5
XP_STREAK_BONUS_MAX = 20
XP_DIFFICULTY_HARD_BONUS = 5
XP_FIRST_OF_DAY_BONUS = 5
XP_PERFECT_DAY_BONUS = 20

CELEBRATION_COMPLETION = "completion"
CELEBRATION_STREAK = "streak"
CELEBRATION_MILESTONE = "milestone"
CELEBRATION_LEVEL_UP = "level_up"

# Streak lengths that count as a milestone celebration
STREAK_MILESTONES: tuple[int, ...] = (3, 7, 14, 30, 50, 100, 365)

# ------------------------------------------------------------------------------------------------
# Analytics / Classification
# ------------------------------------------------------------------------------------------------
DEFAULT_TREND_WINDOW_DAYS = 30
DEFAULT_TOP_HABITS = 5
TREND_COMPARISON_DAYS = 7

DEFAULT_AT_RISK_COMPLETION_RATE = 50.0

TREND_UP = "up"
TREND_DOWN = "down"
TREND_STABLE = "stable"

# Local clock boundaries for special achievements ("HH:MM")
EARLY_COMPLETION_BEFORE = "06:00"
LATE_COMPLETION_AFTER = "23:00"

# ------------------------------------------------------------------------------------------------
# Aggregate Statistic Keys (consumed by achievement requirements)
# ------------------------------------------------------------------------------------------------
STAT_CURRENT_STREAK = "current_streak"
STAT_LONGEST_STREAK = "longest_streak"
STAT_TOTAL_COMPLETIONS = "total_completions"
STAT_PERFECT_DAYS = "perfect_days"
STAT_DAILY_COMPLETIONS = "daily_completions"
STAT_ACTIVE_HABITS = "active_habits"
STAT_EARLY_COMPLETIONS = "early_completions"
STAT_LATE_COMPLETIONS = "late_completions"
STAT_STREAK_RECOVERIES = "streak_recoveries"
STAT_TOTAL_XP = "total_xp"

# ------------------------------------------------------------------------------------------------
# Achievements
# ------------------------------------------------------------------------------------------------
ACHIEVEMENT_RARITY_COMMON = "common"
ACHIEVEMENT_RARITY_RARE = "rare"
ACHIEVEMENT_RARITY_EPIC = "epic"
ACHIEVEMENT_RARITY_LEGENDARY = "legendary"
ACHIEVEMENT_RARITIES = [
    ACHIEVEMENT_RARITY_COMMON,
    ACHIEVEMENT_RARITY_RARE,
    ACHIEVEMENT_RARITY_EPIC,
    ACHIEVEMENT_RARITY_LEGENDARY,
]

ACHIEVEMENT_CATEGORY_STREAK = "streak"
ACHIEVEMENT_CATEGORY_COMPLETION = "completion"
ACHIEVEMENT_CATEGORY_CONSISTENCY = "consistency"
ACHIEVEMENT_CATEGORY_SPECIAL = "special"
ACHIEVEMENT_CATEGORIES = [
    ACHIEVEMENT_CATEGORY_STREAK,
    ACHIEVEMENT_CATEGORY_COMPLETION,
    ACHIEVEMENT_CATEGORY_CONSISTENCY,
    ACHIEVEMENT_CATEGORY_SPECIAL,
]

# ------------------------------------------------------------------------------------------------
# Record Keys: Habit
# ------------------------------------------------------------------------------------------------
DATA_HABIT_ID = "id"
DATA_HABIT_NAME = "name"
DATA_HABIT_TYPE = "habit_type"
DATA_HABIT_CATEGORY = "category"
DATA_HABIT_TIME_OF_DAY = "time_of_day"
DATA_HABIT_XP_REWARD = "xp_reward"
DATA_HABIT_DIFFICULTY = "difficulty"
DATA_HABIT_IS_ACTIVE = "is_active"
DATA_HABIT_CREATED_AT = "created_at"
DATA_HABIT_SENTIMENT = "sentiment"
DATA_HABIT_START_DATE = "start_date"
DATA_HABIT_COST_PER_DAY = "cost_per_day"
DATA_HABIT_FASTING_MODE = "fasting_mode"
DATA_HABIT_TARGET_MINUTES = "target_minutes"
DATA_HABIT_TARGET_VALUE = "target_value"
DATA_HABIT_TARGET_UNIT = "target_unit"
DATA_HABIT_MOTIVATION_MILESTONES = "motivation_milestones"

# ------------------------------------------------------------------------------------------------
# Record Keys: Fasting Window
# ------------------------------------------------------------------------------------------------
DATA_FASTING_WINDOW_ID = "id"
DATA_FASTING_WINDOW_HABIT_ID = "habit_id"
DATA_FASTING_WINDOW_START_TIME = "start_time"
DATA_FASTING_WINDOW_EATING_TRANSITION_TIME = "eating_transition_time"
DATA_FASTING_WINDOW_END_TIME = "end_time"
DATA_FASTING_WINDOW_TARGET_MINUTES = "target_minutes"
DATA_FASTING_WINDOW_FASTING_DURATION = "fasting_duration"

# ------------------------------------------------------------------------------------------------
# Record Keys: Attempt
# ------------------------------------------------------------------------------------------------
DATA_ATTEMPT_ID = "id"
DATA_ATTEMPT_HABIT_ID = "habit_id"
DATA_ATTEMPT_START_DATE = "start_date"
DATA_ATTEMPT_END_DATE = "end_date"
DATA_ATTEMPT_DAYS_LASTED = "days_lasted"
DATA_ATTEMPT_RESET_REASON = "reset_reason"

# ------------------------------------------------------------------------------------------------
# Record Keys: Completion Event
# ------------------------------------------------------------------------------------------------
DATA_COMPLETION_HABIT_ID = "habit_id"
DATA_COMPLETION_COMPLETED_AT = "completed_at"
DATA_COMPLETION_VALUE = "value"
DATA_COMPLETION_XP_REWARD = "xp_reward"

# ------------------------------------------------------------------------------------------------
# Record Keys: Achievement Definition / Unlock
# ------------------------------------------------------------------------------------------------
DATA_ACHIEVEMENT_ID = "id"
DATA_ACHIEVEMENT_NAME = "name"
DATA_ACHIEVEMENT_DESCRIPTION = "description"
DATA_ACHIEVEMENT_CATEGORY = "category"
DATA_ACHIEVEMENT_ICON = "icon"
DATA_ACHIEVEMENT_RARITY = "rarity"
DATA_ACHIEVEMENT_REQUIREMENT = "requirement"
DATA_ACHIEVEMENT_REQUIREMENT_STAT_KEY = "stat_key"
DATA_ACHIEVEMENT_REQUIREMENT_VALUE = "value"
DATA_ACHIEVEMENT_XP_REWARD = "xp_reward"

DATA_UNLOCK_ACHIEVEMENT_ID = "achievement_id"
DATA_UNLOCK_USER_ID = "user_id"
DATA_UNLOCK_UNLOCKED_AT = "unlocked_at"

# ------------------------------------------------------------------------------------------------
# Store Buckets
# ------------------------------------------------------------------------------------------------
STORE_FASTING_WINDOWS = "fasting_windows"
STORE_ATTEMPTS = "attempts"
STORE_COMPLETIONS = "completions"
STORE_ACHIEVEMENT_UNLOCKS = "achievement_unlocks"

# ------------------------------------------------------------------------------------------------
# Settings Keys
# ------------------------------------------------------------------------------------------------
CONF_LEVEL_SIZE = "level_size"
CONF_MILESTONE_DAYS = "milestone_days"
CONF_TREND_WINDOW_DAYS = "trend_window_days"
CONF_AT_RISK_COMPLETION_RATE = "at_risk_completion_rate"
CONF_DEFAULT_XP_REWARD = "default_xp_reward"
CONF_TIME_ZONE = "time_zone"

DEFAULT_TIME_ZONE_NAME = "UTC"

# ------------------------------------------------------------------------------------------------
# Display
# ------------------------------------------------------------------------------------------------
DISPLAY_UNKNOWN = "Unknown"

# ------------------------------------------------------------------------------------------------
# Manager Signals (EventBus suffixes)
# ------------------------------------------------------------------------------------------------
SIGNAL_SUFFIX_FASTING_CHANGED = "fasting_changed"
SIGNAL_SUFFIX_ATTEMPT_RESET = "attempt_reset"
SIGNAL_SUFFIX_ATTEMPT_SEEDED = "attempt_seeded"
SIGNAL_SUFFIX_COMPLETION_RECORDED = "completion_recorded"
SIGNAL_SUFFIX_LEVEL_UP = "level_up"
SIGNAL_SUFFIX_ACHIEVEMENT_UNLOCKED = "achievement_unlocked"
