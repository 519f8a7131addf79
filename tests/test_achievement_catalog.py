"""Tests for the default achievement catalog."""

from __future__ import annotations

from habitcore import const
from habitcore.achievement_catalog import default_catalog, get_achievement


class TestDefaultCatalog:
    """Tests for catalog content and isolation."""

    def test_ids_are_unique(self) -> None:
        """Every entry has a distinct id."""
        ids = [d["id"] for d in default_catalog()]

        assert len(ids) == len(set(ids))
        assert {"streak_7", "first_habit", "perfect_day", "comeback_kid"} <= set(ids)

    def test_requirements_use_known_stats(self) -> None:
        """Every requirement targets a key of the aggregate statistics map."""
        known = {
            const.STAT_CURRENT_STREAK,
            const.STAT_LONGEST_STREAK,
            const.STAT_TOTAL_COMPLETIONS,
            const.STAT_PERFECT_DAYS,
            const.STAT_DAILY_COMPLETIONS,
            const.STAT_ACTIVE_HABITS,
            const.STAT_EARLY_COMPLETIONS,
            const.STAT_LATE_COMPLETIONS,
            const.STAT_STREAK_RECOVERIES,
            const.STAT_TOTAL_XP,
        }

        for definition in default_catalog():
            assert definition["requirement"]["stat_key"] in known
            assert definition["xp_reward"] > 0

    def test_catalog_is_a_fresh_copy(self) -> None:
        """Mutating a returned catalog does not affect later calls."""
        catalog = default_catalog()
        catalog[0]["requirement"]["value"] = 999
        catalog.clear()

        assert default_catalog()[0]["requirement"]["value"] != 999

    def test_get_achievement(self) -> None:
        """Lookup by id."""
        streak = get_achievement("streak_7")

        assert streak is not None
        assert streak["name"] == "Week Warrior"
        assert streak["requirement"] == {"stat_key": "current_streak", "value": 7.0}
        assert get_achievement("does_not_exist") is None
