# File: config.py
"""Engine settings.

Settings arrive as a plain mapping (e.g. loaded from a host application's
options) and are validated with a voluptuous schema. Unset keys fall back to
the const.DEFAULT_* values.

Usage:
    settings = EngineSettings.from_mapping({"level_size": 500, "time_zone": "Europe/Berlin"})
    settings.apply()  # configures dt_utils' local timezone
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import voluptuous as vol

from . import const
from .data_builders import EntityValidationError
from .utils import dt_utils


def _time_zone(value: Any) -> str:
    """Voluptuous validator: an IANA timezone name zoneinfo can load."""
    name = str(value).strip()
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as err:
        raise vol.Invalid(f"unknown time zone: {value}") from err
    return name


def _milestone_ladder(value: Any) -> tuple[int, ...]:
    """Voluptuous validator: a non-empty ladder of positive day counts."""
    days = sorted({int(v) for v in value})
    if not days or days[0] <= 0:
        raise vol.Invalid("milestone days must be positive")
    return tuple(days)


SETTINGS_SCHEMA = vol.Schema(
    {
        vol.Optional(
            const.CONF_LEVEL_SIZE, default=const.DEFAULT_LEVEL_SIZE
        ): vol.All(vol.Coerce(int), vol.Range(min=1)),
        vol.Optional(
            const.CONF_MILESTONE_DAYS, default=list(const.DEFAULT_MILESTONE_DAYS)
        ): vol.All([vol.Coerce(int)], _milestone_ladder),
        vol.Optional(
            const.CONF_TREND_WINDOW_DAYS, default=const.DEFAULT_TREND_WINDOW_DAYS
        ): vol.All(vol.Coerce(int), vol.Range(min=1, max=366)),
        vol.Optional(
            const.CONF_AT_RISK_COMPLETION_RATE,
            default=const.DEFAULT_AT_RISK_COMPLETION_RATE,
        ): vol.All(vol.Coerce(float), vol.Range(min=0, max=100)),
        vol.Optional(
            const.CONF_DEFAULT_XP_REWARD, default=const.DEFAULT_XP_REWARD
        ): vol.All(vol.Coerce(int), vol.Range(min=0)),
        vol.Optional(
            const.CONF_TIME_ZONE, default=const.DEFAULT_TIME_ZONE_NAME
        ): _time_zone,
    },
    extra=vol.REMOVE_EXTRA,
)


@dataclass(frozen=True)
class EngineSettings:
    """Validated engine settings shared by the managers."""

    level_size: int = const.DEFAULT_LEVEL_SIZE
    milestone_days: tuple[int, ...] = const.DEFAULT_MILESTONE_DAYS
    trend_window_days: int = const.DEFAULT_TREND_WINDOW_DAYS
    at_risk_completion_rate: float = const.DEFAULT_AT_RISK_COMPLETION_RATE
    default_xp_reward: int = const.DEFAULT_XP_REWARD
    time_zone: str = const.DEFAULT_TIME_ZONE_NAME

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any] | None = None) -> EngineSettings:
        """Validate options and build settings.

        Raises:
            EntityValidationError: If an option fails validation
        """
        try:
            validated = SETTINGS_SCHEMA(dict(options or {}))
        except vol.MultipleInvalid as err:
            first = err.errors[0]
            key = str(first.path[0]) if first.path else const.DISPLAY_UNKNOWN
            raise EntityValidationError(field=key, message=first.msg) from err

        return cls(
            level_size=validated[const.CONF_LEVEL_SIZE],
            milestone_days=validated[const.CONF_MILESTONE_DAYS],
            trend_window_days=validated[const.CONF_TREND_WINDOW_DAYS],
            at_risk_completion_rate=validated[const.CONF_AT_RISK_COMPLETION_RATE],
            default_xp_reward=validated[const.CONF_DEFAULT_XP_REWARD],
            time_zone=validated[const.CONF_TIME_ZONE],
        )

    @property
    def tzinfo(self) -> ZoneInfo:
        """The configured local timezone."""
        return ZoneInfo(self.time_zone)

    def apply(self) -> None:
        """Make the configured timezone the dt_utils default.

        Local calendar days (streaks, trends, "completed today") are computed
        in this timezone from then on.
        """
        dt_utils.set_default_timezone(self.tzinfo)
        const.LOGGER.debug("Applied settings: %s", self)
