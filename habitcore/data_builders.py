"""Record validation and construction helpers.

This module is the SINGLE SOURCE OF TRUTH for:
- Record field defaults
- Raw record validation (voluptuous schemas)
- Complete record structure building

### Build Functions
Each record type has a `build_<record>()` function that:
- Takes a raw mapping as returned by the store (or typed by a caller)
- Validates it against the record schema
- Generates an id (UUID) when the record does not carry one
- Normalizes timestamps to ISO 8601 UTC strings
- Returns a complete record dict ready for the engines

### Habit Variants
Habits are a tagged union on `habit_type`. `build_habit()` validates the
shared fields, then the variant fields, and drops fields that belong to other
variants so each habit only carries what its subsystem needs.

Consumers:
- FastingManager.start_fasting (new fasting windows)
- AttemptEngine.plan_seed_attempt (new attempts, seeded or after a reset)
- GamificationManager.record_completion (completions and unlocks)
- embedders (build_habit on habit definitions from their own storage)
- achievement_catalog.py (static catalog)
- config.py shares the voluptuous idiom for settings
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, cast
import uuid

import voluptuous as vol

from . import const
from .type_defs import (
    AchievementDefinition,
    AchievementUnlock,
    AttemptData,
    CompletionEvent,
    FastingWindowData,
    Habit,
)
from .utils.dt_utils import dt_now_iso, dt_to_utc

# ==============================================================================
# EXCEPTIONS
# ==============================================================================


class HabitCoreError(Exception):
    """Base class for errors raised by habitcore."""


class EntityValidationError(HabitCoreError):
    """Validation error with field-specific information.

    Raised when a raw record fails schema validation. The field attribute
    identifies the record key that caused the failure.

    Attributes:
        field: Record key that failed validation (DATA_* constant value)
        message: Human-readable description of the failure

    Example:
        raise EntityValidationError(
            field=const.DATA_HABIT_TYPE,
            message="value must be one of daily_check, ...",
        )
    """

    def __init__(self, field: str, message: str) -> None:
        """Initialize EntityValidationError.

        Args:
            field: Record key that failed validation
            message: Description of the failure
        """
        self.field = field
        self.message = message
        super().__init__(f"Invalid value for '{field}': {message}")


# ==============================================================================
# VALIDATORS
# ==============================================================================


def iso_timestamp(value: Any) -> str:
    """Voluptuous validator: parseable timestamp → ISO 8601 UTC string."""
    parsed = dt_to_utc(value)
    if parsed is None:
        raise vol.Invalid(f"not a valid timestamp: {value!r}")
    return parsed.isoformat()


def optional_iso_timestamp(value: Any) -> str | None:
    """Voluptuous validator: like iso_timestamp but None passes through."""
    if value is None or value == "":
        return None
    return iso_timestamp(value)


def _stripped_text(value: Any) -> str:
    text = str(value).strip()
    if not text:
        raise vol.Invalid("must not be empty")
    return text


_NON_NEGATIVE_INT = vol.All(vol.Coerce(int), vol.Range(min=0))
_NON_NEGATIVE_FLOAT = vol.All(vol.Coerce(float), vol.Range(min=0))
_OPTIONAL_NON_NEGATIVE_FLOAT = vol.Any(None, _NON_NEGATIVE_FLOAT)


def _validate(schema: vol.Schema, raw: Mapping[str, Any]) -> dict[str, Any]:
    """Run a schema and translate voluptuous errors to EntityValidationError."""
    try:
        return cast("dict[str, Any]", schema(dict(raw)))
    except vol.MultipleInvalid as err:
        first = err.errors[0]
        field = str(first.path[0]) if first.path else const.DISPLAY_UNKNOWN
        const.LOGGER.debug("Record validation failed on %s: %s", field, first.msg)
        raise EntityValidationError(field=field, message=first.msg) from err


# ==============================================================================
# HABITS
# ==============================================================================

HABIT_BASE_SCHEMA = vol.Schema(
    {
        vol.Optional(const.DATA_HABIT_ID): vol.All(str, vol.Length(min=1)),
        vol.Required(const.DATA_HABIT_NAME): _stripped_text,
        vol.Required(const.DATA_HABIT_TYPE): vol.In(const.HABIT_TYPES),
        vol.Optional(
            const.DATA_HABIT_CATEGORY, default=const.CATEGORY_UNCATEGORIZED
        ): vol.Any(None, str),
        vol.Optional(
            const.DATA_HABIT_TIME_OF_DAY, default=const.TIME_OF_DAY_ANYTIME
        ): vol.Any(None, str),
        vol.Optional(
            const.DATA_HABIT_XP_REWARD, default=const.DEFAULT_XP_REWARD
        ): vol.Any(None, _NON_NEGATIVE_INT),
        vol.Optional(
            const.DATA_HABIT_DIFFICULTY, default=const.DIFFICULTY_MEDIUM
        ): vol.Any(None, vol.In(const.DIFFICULTY_LEVELS)),
        vol.Optional(const.DATA_HABIT_IS_ACTIVE, default=True): vol.Boolean(),
        vol.Optional(const.DATA_HABIT_CREATED_AT): optional_iso_timestamp,
        vol.Optional(const.DATA_HABIT_SENTIMENT): vol.In(const.SENTIMENTS),
    },
    extra=vol.ALLOW_EXTRA,
)

_MOTIVATION_MILESTONE_SCHEMA = vol.Schema(
    {
        vol.Required("minutes"): _NON_NEGATIVE_INT,
        vol.Required("message"): str,
    }
)

HABIT_VARIANT_SCHEMAS: dict[str, vol.Schema] = {
    const.HABIT_TYPE_DAILY_CHECK: vol.Schema({}, extra=vol.REMOVE_EXTRA),
    const.HABIT_TYPE_DURATION_COUNTER: vol.Schema(
        {
            vol.Optional(const.DATA_HABIT_START_DATE): optional_iso_timestamp,
            vol.Optional(
                const.DATA_HABIT_COST_PER_DAY, default=None
            ): _OPTIONAL_NON_NEGATIVE_FLOAT,
        },
        extra=vol.REMOVE_EXTRA,
    ),
    const.HABIT_TYPE_FASTING_TRACKER: vol.Schema(
        {
            vol.Optional(
                const.DATA_HABIT_FASTING_MODE, default=const.DEFAULT_FASTING_PRESET
            ): str,
            vol.Optional(const.DATA_HABIT_TARGET_MINUTES): vol.Any(
                None, _NON_NEGATIVE_INT
            ),
            vol.Optional(const.DATA_HABIT_MOTIVATION_MILESTONES, default=list): [
                _MOTIVATION_MILESTONE_SCHEMA
            ],
        },
        extra=vol.REMOVE_EXTRA,
    ),
    const.HABIT_TYPE_NUMERIC_COUNTER: vol.Schema(
        {
            vol.Optional(
                const.DATA_HABIT_TARGET_VALUE, default=None
            ): _OPTIONAL_NON_NEGATIVE_FLOAT,
            vol.Optional(const.DATA_HABIT_TARGET_UNIT, default=None): vol.Any(
                None, str
            ),
        },
        extra=vol.REMOVE_EXTRA,
    ),
    const.HABIT_TYPE_DAILY_MEASUREMENT: vol.Schema(
        {
            vol.Optional(
                const.DATA_HABIT_TARGET_VALUE, default=None
            ): _OPTIONAL_NON_NEGATIVE_FLOAT,
            vol.Optional(const.DATA_HABIT_TARGET_UNIT, default=None): vol.Any(
                None, str
            ),
        },
        extra=vol.REMOVE_EXTRA,
    ),
}

_HABIT_BASE_KEYS: frozenset[str] = frozenset(
    {
        const.DATA_HABIT_ID,
        const.DATA_HABIT_NAME,
        const.DATA_HABIT_TYPE,
        const.DATA_HABIT_CATEGORY,
        const.DATA_HABIT_TIME_OF_DAY,
        const.DATA_HABIT_XP_REWARD,
        const.DATA_HABIT_DIFFICULTY,
        const.DATA_HABIT_IS_ACTIVE,
        const.DATA_HABIT_CREATED_AT,
        const.DATA_HABIT_SENTIMENT,
    }
)


def build_habit(raw: Mapping[str, Any]) -> Habit:
    """Validate a raw habit record and narrow it to its variant.

    Applies defaults for shared fields, validates the variant-specific fields
    and discards fields belonging to other variants.

    Args:
        raw: Habit record as stored (may carry legacy fields of any variant)

    Returns:
        Habit TypedDict of the variant named by `habit_type`

    Raises:
        EntityValidationError: If any field fails validation

    Examples:
        build_habit({"name": "Walk", "habit_type": "daily_check"})
        build_habit({"name": "16:8", "habit_type": "fasting_tracker",
                     "fasting_mode": "18:6"})  # target_minutes → 1080
    """
    base = _validate(HABIT_BASE_SCHEMA, raw)
    habit_type = base[const.DATA_HABIT_TYPE]

    variant_fields = {
        key: value for key, value in raw.items() if key not in _HABIT_BASE_KEYS
    }
    variant = _validate(HABIT_VARIANT_SCHEMAS[habit_type], variant_fields)

    habit: dict[str, Any] = {
        const.DATA_HABIT_ID: base.get(const.DATA_HABIT_ID) or str(uuid.uuid4()),
        const.DATA_HABIT_NAME: base[const.DATA_HABIT_NAME],
        const.DATA_HABIT_TYPE: habit_type,
        const.DATA_HABIT_CATEGORY: (
            base[const.DATA_HABIT_CATEGORY] or const.CATEGORY_UNCATEGORIZED
        ),
        const.DATA_HABIT_TIME_OF_DAY: _normalize_time_of_day(
            base[const.DATA_HABIT_TIME_OF_DAY]
        ),
        const.DATA_HABIT_XP_REWARD: (
            const.DEFAULT_XP_REWARD
            if base[const.DATA_HABIT_XP_REWARD] is None
            else base[const.DATA_HABIT_XP_REWARD]
        ),
        const.DATA_HABIT_DIFFICULTY: (
            base[const.DATA_HABIT_DIFFICULTY] or const.DIFFICULTY_MEDIUM
        ),
        const.DATA_HABIT_IS_ACTIVE: base[const.DATA_HABIT_IS_ACTIVE],
        const.DATA_HABIT_CREATED_AT: (
            base.get(const.DATA_HABIT_CREATED_AT) or dt_now_iso()
        ),
    }
    if const.DATA_HABIT_SENTIMENT in base:
        habit[const.DATA_HABIT_SENTIMENT] = base[const.DATA_HABIT_SENTIMENT]

    if habit_type == const.HABIT_TYPE_DURATION_COUNTER:
        # Attempts are anchored on start_date; fall back to creation time
        variant[const.DATA_HABIT_START_DATE] = (
            variant.get(const.DATA_HABIT_START_DATE)
            or habit[const.DATA_HABIT_CREATED_AT]
        )
    elif habit_type == const.HABIT_TYPE_FASTING_TRACKER:
        variant[const.DATA_HABIT_TARGET_MINUTES] = _resolve_fasting_target(
            variant[const.DATA_HABIT_FASTING_MODE],
            variant.get(const.DATA_HABIT_TARGET_MINUTES),
        )

    habit.update(variant)
    return cast("Habit", habit)


def _normalize_time_of_day(value: str | None) -> str:
    """Map a free-form tag to a known bucket; unknown tags become anytime."""
    if value and value.strip().lower() in const.TIME_OF_DAY_BUCKETS:
        return value.strip().lower()
    return const.TIME_OF_DAY_ANYTIME


def _resolve_fasting_target(mode: str, explicit: int | None) -> int:
    """Explicit target wins; otherwise the preset's fasting hours."""
    if explicit is not None:
        return explicit
    preset = const.FASTING_PRESETS.get(mode)
    if preset is None:
        const.LOGGER.warning(
            "Unknown fasting mode '%s' without target, using %s",
            mode,
            const.DEFAULT_FASTING_PRESET,
        )
        preset = const.FASTING_PRESETS[const.DEFAULT_FASTING_PRESET]
    return preset[0] * 60


# ==============================================================================
# FASTING WINDOWS
# ==============================================================================

FASTING_WINDOW_SCHEMA = vol.Schema(
    {
        vol.Optional(const.DATA_FASTING_WINDOW_ID): vol.All(str, vol.Length(min=1)),
        vol.Required(const.DATA_FASTING_WINDOW_HABIT_ID): str,
        vol.Required(const.DATA_FASTING_WINDOW_START_TIME): iso_timestamp,
        vol.Optional(
            const.DATA_FASTING_WINDOW_EATING_TRANSITION_TIME, default=None
        ): optional_iso_timestamp,
        vol.Optional(
            const.DATA_FASTING_WINDOW_END_TIME, default=None
        ): optional_iso_timestamp,
        vol.Optional(const.DATA_FASTING_WINDOW_TARGET_MINUTES, default=0): vol.Any(
            None, _NON_NEGATIVE_INT
        ),
        vol.Optional(
            const.DATA_FASTING_WINDOW_FASTING_DURATION, default=None
        ): vol.Any(None, _NON_NEGATIVE_INT),
    },
    extra=vol.REMOVE_EXTRA,
)


def build_fasting_window(raw: Mapping[str, Any]) -> FastingWindowData:
    """Validate a raw fasting window record.

    Raises:
        EntityValidationError: If any field fails validation
    """
    window = _validate(FASTING_WINDOW_SCHEMA, raw)
    window[const.DATA_FASTING_WINDOW_ID] = window.get(
        const.DATA_FASTING_WINDOW_ID
    ) or str(uuid.uuid4())
    if window[const.DATA_FASTING_WINDOW_TARGET_MINUTES] is None:
        window[const.DATA_FASTING_WINDOW_TARGET_MINUTES] = 0
    return cast("FastingWindowData", window)


# ==============================================================================
# ATTEMPTS
# ==============================================================================

ATTEMPT_SCHEMA = vol.Schema(
    {
        vol.Optional(const.DATA_ATTEMPT_ID): vol.All(str, vol.Length(min=1)),
        vol.Required(const.DATA_ATTEMPT_HABIT_ID): str,
        vol.Required(const.DATA_ATTEMPT_START_DATE): iso_timestamp,
        vol.Optional(const.DATA_ATTEMPT_END_DATE, default=None): optional_iso_timestamp,
        vol.Optional(const.DATA_ATTEMPT_DAYS_LASTED, default=None): vol.Any(
            None, _NON_NEGATIVE_INT
        ),
        vol.Optional(const.DATA_ATTEMPT_RESET_REASON, default=None): vol.Any(
            None, str
        ),
    },
    extra=vol.REMOVE_EXTRA,
)


def build_attempt(raw: Mapping[str, Any]) -> AttemptData:
    """Validate a raw attempt record.

    Raises:
        EntityValidationError: If any field fails validation
    """
    attempt = _validate(ATTEMPT_SCHEMA, raw)
    attempt[const.DATA_ATTEMPT_ID] = attempt.get(const.DATA_ATTEMPT_ID) or str(
        uuid.uuid4()
    )
    return cast("AttemptData", attempt)


# ==============================================================================
# COMPLETIONS
# ==============================================================================

COMPLETION_SCHEMA = vol.Schema(
    {
        vol.Required(const.DATA_COMPLETION_HABIT_ID): str,
        vol.Required(const.DATA_COMPLETION_COMPLETED_AT): iso_timestamp,
        vol.Optional(const.DATA_COMPLETION_VALUE, default=None): vol.Any(
            None, vol.Coerce(float)
        ),
        vol.Optional(const.DATA_COMPLETION_XP_REWARD, default=None): vol.Any(
            None, _NON_NEGATIVE_INT
        ),
    },
    extra=vol.REMOVE_EXTRA,
)


def build_completion(raw: Mapping[str, Any]) -> CompletionEvent:
    """Validate a raw completion event.

    Raises:
        EntityValidationError: If any field fails validation
    """
    return cast("CompletionEvent", _validate(COMPLETION_SCHEMA, raw))


# ==============================================================================
# ACHIEVEMENTS
# ==============================================================================

ACHIEVEMENT_SCHEMA = vol.Schema(
    {
        vol.Required(const.DATA_ACHIEVEMENT_ID): vol.All(str, vol.Length(min=1)),
        vol.Required(const.DATA_ACHIEVEMENT_NAME): _stripped_text,
        vol.Optional(const.DATA_ACHIEVEMENT_DESCRIPTION, default=""): str,
        vol.Optional(
            const.DATA_ACHIEVEMENT_CATEGORY,
            default=const.ACHIEVEMENT_CATEGORY_SPECIAL,
        ): vol.In(const.ACHIEVEMENT_CATEGORIES),
        vol.Optional(const.DATA_ACHIEVEMENT_ICON, default=""): str,
        vol.Optional(
            const.DATA_ACHIEVEMENT_RARITY, default=const.ACHIEVEMENT_RARITY_COMMON
        ): vol.In(const.ACHIEVEMENT_RARITIES),
        vol.Required(const.DATA_ACHIEVEMENT_REQUIREMENT): {
            vol.Required(const.DATA_ACHIEVEMENT_REQUIREMENT_STAT_KEY): vol.All(
                str, vol.Length(min=1)
            ),
            vol.Required(const.DATA_ACHIEVEMENT_REQUIREMENT_VALUE): _NON_NEGATIVE_FLOAT,
        },
        vol.Optional(const.DATA_ACHIEVEMENT_XP_REWARD, default=0): _NON_NEGATIVE_INT,
    },
    extra=vol.REMOVE_EXTRA,
)


def build_achievement_definition(raw: Mapping[str, Any]) -> AchievementDefinition:
    """Validate a catalog entry.

    Raises:
        EntityValidationError: If any field fails validation
    """
    return cast("AchievementDefinition", _validate(ACHIEVEMENT_SCHEMA, raw))


def build_achievement_unlock(
    user_id: str, achievement_id: str, unlocked_at: str | None = None
) -> AchievementUnlock:
    """Build an unlock record stamped now unless a time is given."""
    return {
        const.DATA_UNLOCK_ACHIEVEMENT_ID: achievement_id,
        const.DATA_UNLOCK_USER_ID: user_id,
        const.DATA_UNLOCK_UNLOCKED_AT: unlocked_at or dt_now_iso(),
    }
