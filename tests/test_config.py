"""Tests for EngineSettings."""

from __future__ import annotations

from zoneinfo import ZoneInfo

import pytest

from habitcore import const
from habitcore.config import EngineSettings
from habitcore.data_builders import EntityValidationError
from habitcore.utils import dt_utils


class TestEngineSettings:
    """Tests for settings validation and application."""

    def test_defaults(self) -> None:
        """An empty mapping yields the defaults."""
        settings = EngineSettings.from_mapping({})

        assert settings == EngineSettings()
        assert settings.level_size == const.DEFAULT_LEVEL_SIZE
        assert settings.milestone_days == const.DEFAULT_MILESTONE_DAYS
        assert settings.time_zone == "UTC"

    def test_coercion_and_ladder_normalization(self) -> None:
        """Strings coerce; the ladder is sorted and deduplicated."""
        settings = EngineSettings.from_mapping(
            {
                "level_size": "500",
                "milestone_days": [30, 7, 7, 1],
                "at_risk_completion_rate": 40,
                "unknown_option": True,
            }
        )

        assert settings.level_size == 500
        assert settings.milestone_days == (1, 7, 30)
        assert settings.at_risk_completion_rate == 40.0

    @pytest.mark.parametrize(
        ("options", "field"),
        [
            ({"level_size": 0}, "level_size"),
            ({"milestone_days": [0, 7]}, "milestone_days"),
            ({"milestone_days": []}, "milestone_days"),
            ({"trend_window_days": 0}, "trend_window_days"),
            ({"at_risk_completion_rate": 150}, "at_risk_completion_rate"),
            ({"time_zone": "Mars/Olympus"}, "time_zone"),
        ],
    )
    def test_invalid_options(self, options: dict, field: str) -> None:
        """Invalid options raise with the option name."""
        with pytest.raises(EntityValidationError) as err:
            EngineSettings.from_mapping(options)

        assert err.value.field == field

    def test_apply_sets_default_timezone(self) -> None:
        """apply() makes the configured zone the local day boundary."""
        settings = EngineSettings.from_mapping({"time_zone": "Asia/Tokyo"})
        settings.apply()

        assert settings.tzinfo == ZoneInfo("Asia/Tokyo")
        assert dt_utils.get_default_timezone() == ZoneInfo("Asia/Tokyo")

    def test_settings_are_frozen(self) -> None:
        """Settings cannot be mutated after validation."""
        settings = EngineSettings()

        with pytest.raises(AttributeError):
            settings.level_size = 5  # type: ignore[misc]
