# File: utils/dt_utils.py
"""Date and time utilities for habitcore.

Pure Python date/time functions. Uses standard library datetime, zoneinfo and
dateutil. Nothing here raises on bad temporal input: parsing helpers return
None so callers can suppress the dependent value instead of crashing.

Functions:
    - set_default_timezone / get_default_timezone: Local timezone configuration
    - dt_now_utc / dt_now_iso: Current time helpers
    - as_utc / as_local: Timezone conversion
    - dt_parse_date / dt_parse / dt_to_utc: Normalize datetime inputs
    - dt_local_date: Local calendar day of a timestamp
    - dt_parse_hhmm: Parse "HH:MM" clock strings
    - dt_elapsed / dt_elapsed_minutes: Whole-minute elapsed decomposition
    - dt_format_elapsed: Compact "2d 5h 3m" rendering
    - dt_day_range: Dense trailing list of local calendar days
"""

from __future__ import annotations

from datetime import UTC, date, datetime, time, timedelta
import logging
from typing import TYPE_CHECKING, cast
from zoneinfo import ZoneInfo

# Third-party date utilities
from dateutil.relativedelta import relativedelta

if TYPE_CHECKING:
    from datetime import tzinfo

    from ..type_defs import ElapsedTime

# Module-level logger
_LOGGER = logging.getLogger(__name__)

# ==============================================================================
# Constants (local copies to avoid circular imports)
# ==============================================================================

# Default timezone - can be overridden by caller
DEFAULT_TIME_ZONE: ZoneInfo = ZoneInfo("UTC")

# Return type constants
HELPER_RETURN_DATETIME = "datetime"
HELPER_RETURN_DATETIME_UTC = "datetime_utc"
HELPER_RETURN_DATETIME_LOCAL = "datetime_local"
HELPER_RETURN_DATE = "date"
HELPER_RETURN_ISO_DATETIME = "iso_datetime"
HELPER_RETURN_ISO_DATE = "iso_date"

MINUTES_PER_HOUR = 60
MINUTES_PER_DAY = 1440


# ==============================================================================
# Timezone Configuration
# ==============================================================================


def set_default_timezone(tz: ZoneInfo) -> None:
    """Set the default timezone for all dt_utils functions.

    Call this once when settings are applied to configure the user's timezone.

    Args:
        tz: ZoneInfo object representing the default timezone
    """
    global DEFAULT_TIME_ZONE  # noqa: PLW0603
    DEFAULT_TIME_ZONE = tz


def get_default_timezone() -> ZoneInfo:
    """Get the current default timezone."""
    return DEFAULT_TIME_ZONE


# ==============================================================================
# Current Date/Time Functions
# ==============================================================================


def dt_now_utc() -> datetime:
    """Return the current datetime in UTC (timezone-aware)."""
    return datetime.now(UTC)


def dt_now_iso() -> str:
    """Return the current UTC datetime as an ISO 8601 string.

    Example:
        "2026-04-07T14:30:00+00:00"
    """
    return dt_now_utc().isoformat()


# ==============================================================================
# Timezone Conversion
# ==============================================================================


def as_utc(dt_obj: datetime) -> datetime:
    """Convert a datetime to UTC timezone.

    Naive datetimes are assumed to be in the default timezone.
    """
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=DEFAULT_TIME_ZONE)
    return dt_obj.astimezone(UTC)


def as_local(dt_obj: datetime, tz: ZoneInfo | None = None) -> datetime:
    """Convert a datetime to local timezone.

    Args:
        dt_obj: Datetime object (naive values are assumed to be UTC)
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.

    Returns:
        Datetime in local timezone
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=UTC)
    return dt_obj.astimezone(tz_info)


# ==============================================================================
# Date/Time Parsing
# ==============================================================================


def dt_parse_date(date_str: str | None) -> date | None:
    """Safely parse a date string into a `datetime.date`.

    Accepts "2026-04-07" (ISO), "04/07/2026" (US) and "2026/04/07".

    Returns:
        datetime.date or None if parsing fails.
    """
    if not date_str or not isinstance(date_str, str):
        return None

    try:
        return date.fromisoformat(date_str)
    except ValueError:
        pass

    for fmt in ("%m/%d/%Y", "%d/%m/%Y", "%Y/%m/%d"):
        try:
            return datetime.strptime(date_str, fmt).date()
        except ValueError:
            continue

    return None


def dt_parse(
    dt_input: str | date | datetime | None,
    default_tzinfo: tzinfo | None = None,
    return_type: str | None = HELPER_RETURN_DATETIME,
) -> datetime | date | str | None:
    """Normalize various datetime input formats to a consistent format.

    Handles strings, dates and datetimes, ensuring timezone awareness.

    Args:
        dt_input: String, date or datetime to normalize, or None
        default_tzinfo: Timezone to use if the input is naive
                        (defaults to DEFAULT_TIME_ZONE if None)
        return_type: Format for the returned value:
            - HELPER_RETURN_DATETIME: returns a datetime object (default)
            - HELPER_RETURN_DATETIME_UTC: returns a datetime object in UTC
            - HELPER_RETURN_DATETIME_LOCAL: returns a datetime object in local tz
            - HELPER_RETURN_DATE: returns a date object
            - HELPER_RETURN_ISO_DATETIME: returns an ISO-formatted datetime string
            - HELPER_RETURN_ISO_DATE: returns an ISO-formatted date string

    Returns:
        Normalized datetime, date, or string based on return_type, or None if
        the input could not be parsed.

    Example:
        >>> dt_parse("2026-04-15", return_type=HELPER_RETURN_ISO_DATETIME)
        '2026-04-15T00:00:00+00:00'
    """
    if not dt_input:
        return None

    tz_info = default_tzinfo or DEFAULT_TIME_ZONE
    result: datetime | None = None

    if isinstance(dt_input, str):
        try:
            result = datetime.fromisoformat(dt_input)
        except ValueError:
            parsed_date = dt_parse_date(dt_input)
            if parsed_date:
                result = datetime.combine(parsed_date, datetime.min.time())
            else:
                return None

    elif isinstance(dt_input, datetime):
        result = dt_input

    elif isinstance(dt_input, date):
        result = datetime.combine(dt_input, datetime.min.time())

    else:
        return None

    if result.tzinfo is None:
        result = result.replace(tzinfo=tz_info)

    return dt_format(result, return_type)


def dt_to_utc(dt_input: str | date | datetime | None) -> datetime | None:
    """Parse a datetime input, apply timezone if naive, and convert to UTC.

    Returns:
        UTC-aware datetime object, or None if parsing fails.

    Example:
        "2026-04-07T14:30:00-05:00" → datetime.datetime(2026, 4, 7, 19, 30, tzinfo=UTC)
    """
    if not dt_input:
        return None

    result = dt_parse(
        dt_input,
        default_tzinfo=DEFAULT_TIME_ZONE,
        return_type=HELPER_RETURN_DATETIME_UTC,
    )
    return cast("datetime | None", result)


def dt_local_date(
    dt_input: str | date | datetime | None, tz: ZoneInfo | None = None
) -> date | None:
    """Return the local calendar day a timestamp falls on, or None."""
    parsed = dt_to_utc(dt_input)
    if parsed is None:
        return None
    return as_local(parsed, tz).date()


def dt_parse_hhmm(value: str | None) -> time | None:
    """Parse an "HH:MM" clock string.

    Examples:
        dt_parse_hhmm("06:00") → datetime.time(6, 0)
        dt_parse_hhmm("25:00") → None
    """
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.strptime(value.strip(), "%H:%M").time()
    except ValueError:
        _LOGGER.warning("Invalid time format: %s - expected HH:MM", value)
        return None


# ==============================================================================
# Date/Time Formatting
# ==============================================================================


def dt_format(
    dt_obj: datetime,
    return_type: str | None = HELPER_RETURN_DATETIME,
) -> datetime | date | str:
    """Format a datetime object according to the specified return_type."""
    if return_type == HELPER_RETURN_DATETIME:
        return dt_obj
    if return_type == HELPER_RETURN_DATETIME_UTC:
        return as_utc(dt_obj)
    if return_type == HELPER_RETURN_DATETIME_LOCAL:
        return as_local(dt_obj)
    if return_type == HELPER_RETURN_DATE:
        return dt_obj.date()
    if return_type == HELPER_RETURN_ISO_DATETIME:
        return dt_obj.isoformat()
    if return_type == HELPER_RETURN_ISO_DATE:
        return dt_obj.date().isoformat()
    return dt_obj


# ==============================================================================
# Elapsed Time Arithmetic
# ==============================================================================


def dt_elapsed_minutes(
    start: str | date | datetime | None,
    now: str | date | datetime | None = None,
) -> int | None:
    """Return whole minutes between start and now, or None when invalid.

    Invalid means start (or an explicit now) does not parse, or now < start.
    """
    start_utc = dt_to_utc(start)
    if start_utc is None:
        _LOGGER.debug("Unparseable start timestamp: %s", start)
        return None

    now_utc = dt_now_utc() if now is None else dt_to_utc(now)
    if now_utc is None:
        _LOGGER.debug("Unparseable reference timestamp: %s", now)
        return None

    if now_utc < start_utc:
        _LOGGER.debug("Start %s is after reference time %s", start_utc, now_utc)
        return None

    return int((now_utc - start_utc).total_seconds() // 60)


def dt_elapsed(
    start: str | date | datetime | None,
    now: str | date | datetime | None = None,
) -> ElapsedTime | None:
    """Decompose the elapsed time between start and now.

    days = total // 1440, hours = (total // 60) % 24, minutes = total % 60,
    so days * 1440 + hours * 60 + minutes == total_minutes.

    Args:
        start: Start instant (ISO string, date or datetime)
        now: Reference instant; defaults to the current UTC time

    Returns:
        ElapsedTime dict, or None when start is invalid or in the future.

    Example:
        dt_elapsed("2026-01-01T00:00:00+00:00", "2026-01-02T05:03:00+00:00")
        → {"days": 1, "hours": 5, "minutes": 3, "total_minutes": 1743}
    """
    total = dt_elapsed_minutes(start, now)
    if total is None:
        return None

    return {
        "days": total // MINUTES_PER_DAY,
        "hours": (total // MINUTES_PER_HOUR) % 24,
        "minutes": total % MINUTES_PER_HOUR,
        "total_minutes": total,
    }


def dt_format_elapsed(days: int, hours: int, minutes: int) -> str:
    """Format an elapsed decomposition as compact text.

    Zero days is omitted; zero days and zero hours shows only minutes.

    Examples:
        dt_format_elapsed(2, 0, 5) → "2d 0h 5m"
        dt_format_elapsed(0, 3, 5) → "3h 5m"
        dt_format_elapsed(0, 0, 5) → "5m"
    """
    if days > 0:
        return f"{days}d {hours}h {minutes}m"
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


# ==============================================================================
# Calendar Ranges
# ==============================================================================


def dt_day_range(end_date: date, days: int) -> list[date]:
    """Return the dense, ascending list of `days` calendar days ending at end_date.

    Examples:
        dt_day_range(date(2026, 3, 2), 3) → [2026-02-28, 2026-03-01, 2026-03-02]
        dt_day_range(date(2026, 3, 2), 0) → []
    """
    if days <= 0:
        return []

    start_date = end_date - relativedelta(days=days - 1)
    return [start_date + timedelta(days=offset) for offset in range(days)]
