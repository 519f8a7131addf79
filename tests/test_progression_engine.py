"""Unit tests for ProgressionEngine - XP totals, levels and rewards."""

from __future__ import annotations

import pytest

from habitcore import const
from habitcore.engines.progression_engine import ProgressionEngine
from tests.helpers import NOW, make_event


class TestLevels:
    """Tests for the linear level curve."""

    def test_level_from_total(self) -> None:
        """2450 XP with 1000 per level is level 3."""
        assert ProgressionEngine.level_progress(2450, 1000) == {
            "total_xp": 2450,
            "level": 3,
            "xp_into_level": 450,
            "xp_to_next": 550,
            "progress_percent": 45.0,
        }

    @pytest.mark.parametrize("level_size", [1, 7, 100, 1000])
    def test_level_never_decreases(self, level_size: int) -> None:
        """Level grows with XP and the split always adds up to one level."""
        previous = 0
        for total in range(5 * level_size + 3):
            progress = ProgressionEngine.level_progress(total, level_size)

            assert progress["level"] >= previous
            assert progress["xp_into_level"] + progress["xp_to_next"] == level_size
            previous = progress["level"]

    def test_zero_xp_is_level_one(self) -> None:
        """Everyone starts at level 1."""
        progress = ProgressionEngine.level_progress(0)

        assert progress["level"] == 1
        assert progress["xp_to_next"] == const.DEFAULT_LEVEL_SIZE
        assert progress["progress_percent"] == 0.0

    def test_exact_boundary(self) -> None:
        """Landing on a boundary starts the next level."""
        progress = ProgressionEngine.level_progress(1000, 1000)

        assert progress["level"] == 2
        assert progress["xp_into_level"] == 0

    def test_invalid_level_size(self) -> None:
        """A non-positive level size is a configuration error."""
        with pytest.raises(ValueError):
            ProgressionEngine.level_progress(10, 0)

    def test_is_level_up(self) -> None:
        """Crossing a boundary is a level up."""
        assert ProgressionEngine.is_level_up(990, 1010, 1000) is True
        assert ProgressionEngine.is_level_up(1010, 1020, 1000) is False


class TestTotals:
    """Tests for XP totals."""

    def test_total_uses_default_for_missing_reward(self) -> None:
        """Events without xp_reward earn the default."""
        events = [
            make_event("h1", NOW, xp_reward=25),
            make_event("h1", NOW, xp_reward=None),
        ]

        assert ProgressionEngine.total_xp(events) == 35
        assert ProgressionEngine.total_xp(events, default_xp=5) == 30
        assert ProgressionEngine.total_xp([]) == 0


class TestCompletionXp:
    """Tests for per-completion rewards."""

    @pytest.mark.parametrize(
        ("kwargs", "expected"),
        [
            ({}, 10),
            ({"streak": 6}, 10),
            ({"streak": 7}, 15),
            ({"streak": 14, "difficulty": const.DIFFICULTY_HARD}, 25),
            ({"streak": 100}, 30),
            ({"difficulty": const.DIFFICULTY_EASY}, 10),
            ({"is_first_today": True}, 15),
            ({"is_perfect_day": True}, 30),
        ],
    )
    def test_bonuses(self, kwargs: dict, expected: int) -> None:
        """Bonuses stack on the base reward."""
        assert ProgressionEngine.completion_xp(10, **kwargs) == expected


class TestCelebration:
    """Tests for celebration priority."""

    @pytest.mark.parametrize(
        ("args", "expected"),
        [
            ((1, 2, 2, 3), const.CELEBRATION_LEVEL_UP),
            ((1, 1, 2, 3), const.CELEBRATION_MILESTONE),
            ((1, 1, 20, 21), const.CELEBRATION_STREAK),
            ((1, 1, 4, 5), const.CELEBRATION_COMPLETION),
            ((1, 1, 3, 3), const.CELEBRATION_COMPLETION),
        ],
    )
    def test_priority(self, args: tuple[int, int, int, int], expected: str) -> None:
        """Level up beats milestone beats weekly streak beats completion."""
        assert ProgressionEngine.celebration_type(*args) == expected
