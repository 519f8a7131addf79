"""Progression Engine - XP totals, levels and completion rewards.

This engine provides stateless, pure Python functions for:
- Total XP from completion events
- Linear level curve (level = total // level_size + 1)
- XP earned by one completion (streak, difficulty, first-of-day, perfect day)
- Celebration selection after a completion

ARCHITECTURE: This is a pure logic engine with NO store dependencies.
All functions are static methods that operate on passed-in data.
The level is never stored: level-up detection is the caller comparing
level_progress() before and after a write (see GamificationManager).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .. import const
from ..utils.math_utils import calculate_percentage

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ..type_defs import CompletionEvent, LevelProgress


class ProgressionEngine:
    """Pure logic engine for XP and levels.

    All methods are static - no instance state.
    """

    @staticmethod
    def event_xp(event: CompletionEvent, default_xp: int = const.DEFAULT_XP_REWARD) -> int:
        """XP carried by one event; events without xp_reward earn default_xp."""
        xp = event.get(const.DATA_COMPLETION_XP_REWARD)
        return default_xp if xp is None else int(xp)

    @staticmethod
    def total_xp(
        events: Iterable[CompletionEvent],
        default_xp: int = const.DEFAULT_XP_REWARD,
    ) -> int:
        """Sum the xp_reward of every completion event."""
        return sum(ProgressionEngine.event_xp(event, default_xp) for event in events)

    @staticmethod
    def level_progress(
        total_xp: int, level_size: int = const.DEFAULT_LEVEL_SIZE
    ) -> LevelProgress:
        """Position of total_xp on the linear level curve.

        Examples:
            level_progress(2450) → level 3, 450 into level, 550 to next, 45.0%
            level_progress(0) → level 1, 0 into level, 1000 to next, 0.0%

        Raises:
            ValueError: If level_size is not positive
        """
        if level_size <= 0:
            raise ValueError(f"level_size must be positive, got {level_size}")

        total = max(0, int(total_xp))
        xp_into_level = total % level_size
        return {
            "total_xp": total,
            "level": total // level_size + 1,
            "xp_into_level": xp_into_level,
            "xp_to_next": level_size - xp_into_level,
            "progress_percent": calculate_percentage(xp_into_level, level_size),
        }

    @staticmethod
    def is_level_up(
        old_total: int, new_total: int, level_size: int = const.DEFAULT_LEVEL_SIZE
    ) -> bool:
        """Whether moving from old_total to new_total crosses a level boundary."""
        old_level = ProgressionEngine.level_progress(old_total, level_size)["level"]
        new_level = ProgressionEngine.level_progress(new_total, level_size)["level"]
        return new_level > old_level

    @staticmethod
    def completion_xp(
        base_xp: int,
        streak: int = 0,
        difficulty: str | None = None,
        is_first_today: bool = False,
        is_perfect_day: bool = False,
    ) -> int:
        """XP earned by one completion.

        base + 5 per full week of streak (max 20) + 5 for hard difficulty
        + 5 for the first completion of the day + 20 for completing every
        active habit today.

        Examples:
            completion_xp(10) → 10
            completion_xp(10, streak=14, difficulty="hard") → 25
            completion_xp(10, streak=100) → 30
        """
        xp = base_xp
        xp += min(
            (max(0, streak) // 7) * const.XP_STREAK_BONUS_PER_WEEK,
            const.XP_STREAK_BONUS_MAX,
        )
        if difficulty == const.DIFFICULTY_HARD:
            xp += const.XP_DIFFICULTY_HARD_BONUS
        if is_first_today:
            xp += const.XP_FIRST_OF_DAY_BONUS
        if is_perfect_day:
            xp += const.XP_PERFECT_DAY_BONUS
        return xp

    @staticmethod
    def celebration_type(
        old_level: int,
        new_level: int,
        previous_streak: int,
        new_streak: int,
    ) -> str:
        """Pick the celebration to show after a completion.

        Priority: level up, streak milestone, weekly streak, plain completion.
        """
        if new_level > old_level:
            return const.CELEBRATION_LEVEL_UP
        if new_streak > previous_streak:
            if new_streak in const.STREAK_MILESTONES:
                return const.CELEBRATION_MILESTONE
            if new_streak % 7 == 0:
                return const.CELEBRATION_STREAK
        return const.CELEBRATION_COMPLETION
