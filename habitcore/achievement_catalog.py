# File: achievement_catalog.py
"""Default achievement catalog.

Static, immutable definitions. Every requirement is a threshold on one key of
the statistics map built by StatisticsEngine.aggregate_stats().

Entries are declared compactly below and normalized through
data_builders.build_achievement_definition() so the catalog obeys the same
schema as catalogs supplied by an embedder.
"""

from __future__ import annotations

import copy
from functools import cache
from typing import TYPE_CHECKING

from . import const
from .data_builders import build_achievement_definition

if TYPE_CHECKING:
    from .type_defs import AchievementDefinition

# (id, name, description, category, icon, rarity, stat_key, value, xp_reward)
_CATALOG_ENTRIES: tuple[tuple[str, str, str, str, str, str, str, int, int], ...] = (
    # Streaks
    ("streak_3", "Getting Started", "Keep a 3 day streak",
     const.ACHIEVEMENT_CATEGORY_STREAK, "flame", const.ACHIEVEMENT_RARITY_COMMON,
     const.STAT_CURRENT_STREAK, 3, 20),
    ("streak_7", "Week Warrior", "Keep a 7 day streak",
     const.ACHIEVEMENT_CATEGORY_STREAK, "flame", const.ACHIEVEMENT_RARITY_COMMON,
     const.STAT_CURRENT_STREAK, 7, 50),
    ("streak_14", "Two Week Champion", "Keep a 14 day streak",
     const.ACHIEVEMENT_CATEGORY_STREAK, "flame", const.ACHIEVEMENT_RARITY_RARE,
     const.STAT_CURRENT_STREAK, 14, 100),
    ("streak_30", "Monthly Master", "Keep a 30 day streak",
     const.ACHIEVEMENT_CATEGORY_STREAK, "trophy", const.ACHIEVEMENT_RARITY_RARE,
     const.STAT_CURRENT_STREAK, 30, 200),
    ("streak_50", "Unstoppable", "Keep a 50 day streak",
     const.ACHIEVEMENT_CATEGORY_STREAK, "trophy", const.ACHIEVEMENT_RARITY_EPIC,
     const.STAT_CURRENT_STREAK, 50, 500),
    ("streak_100", "Century Club", "Keep a 100 day streak",
     const.ACHIEVEMENT_CATEGORY_STREAK, "crown", const.ACHIEVEMENT_RARITY_EPIC,
     const.STAT_CURRENT_STREAK, 100, 1000),
    ("streak_365", "Year of Dedication", "Keep a 365 day streak",
     const.ACHIEVEMENT_CATEGORY_STREAK, "crown", const.ACHIEVEMENT_RARITY_LEGENDARY,
     const.STAT_CURRENT_STREAK, 365, 5000),
    # Completions
    ("first_habit", "First Step", "Complete your first habit",
     const.ACHIEVEMENT_CATEGORY_COMPLETION, "check", const.ACHIEVEMENT_RARITY_COMMON,
     const.STAT_TOTAL_COMPLETIONS, 1, 10),
    ("completions_10", "Getting Into It", "Complete 10 habits",
     const.ACHIEVEMENT_CATEGORY_COMPLETION, "check", const.ACHIEVEMENT_RARITY_COMMON,
     const.STAT_TOTAL_COMPLETIONS, 10, 30),
    ("completions_50", "Habit Builder", "Complete 50 habits",
     const.ACHIEVEMENT_CATEGORY_COMPLETION, "target", const.ACHIEVEMENT_RARITY_RARE,
     const.STAT_TOTAL_COMPLETIONS, 50, 80),
    ("completions_100", "Centurion", "Complete 100 habits",
     const.ACHIEVEMENT_CATEGORY_COMPLETION, "target", const.ACHIEVEMENT_RARITY_RARE,
     const.STAT_TOTAL_COMPLETIONS, 100, 150),
    ("completions_500", "Habit Master", "Complete 500 habits",
     const.ACHIEVEMENT_CATEGORY_COMPLETION, "medal", const.ACHIEVEMENT_RARITY_EPIC,
     const.STAT_TOTAL_COMPLETIONS, 500, 400),
    ("completions_1000", "Legend", "Complete 1000 habits",
     const.ACHIEVEMENT_CATEGORY_COMPLETION, "medal", const.ACHIEVEMENT_RARITY_LEGENDARY,
     const.STAT_TOTAL_COMPLETIONS, 1000, 1000),
    # Consistency
    ("perfect_day", "Perfect Day", "Complete every habit in one day",
     const.ACHIEVEMENT_CATEGORY_CONSISTENCY, "star", const.ACHIEVEMENT_RARITY_COMMON,
     const.STAT_PERFECT_DAYS, 1, 50),
    ("perfect_week", "Perfect Week", "Have 7 perfect days",
     const.ACHIEVEMENT_CATEGORY_CONSISTENCY, "star", const.ACHIEVEMENT_RARITY_EPIC,
     const.STAT_PERFECT_DAYS, 7, 300),
    ("perfect_month", "Perfect Month", "Have 30 perfect days",
     const.ACHIEVEMENT_CATEGORY_CONSISTENCY, "sparkles", const.ACHIEVEMENT_RARITY_LEGENDARY,
     const.STAT_PERFECT_DAYS, 30, 1500),
    # Special
    ("early_bird", "Early Bird", "Complete a habit before 6 AM",
     const.ACHIEVEMENT_CATEGORY_SPECIAL, "sunrise", const.ACHIEVEMENT_RARITY_RARE,
     const.STAT_EARLY_COMPLETIONS, 1, 50),
    ("night_owl", "Night Owl", "Complete a habit after 11 PM",
     const.ACHIEVEMENT_CATEGORY_SPECIAL, "moon", const.ACHIEVEMENT_RARITY_RARE,
     const.STAT_LATE_COMPLETIONS, 1, 50),
    ("comeback_kid", "Comeback Kid", "Start a new streak after losing one",
     const.ACHIEVEMENT_CATEGORY_SPECIAL, "rotate", const.ACHIEVEMENT_RARITY_RARE,
     const.STAT_STREAK_RECOVERIES, 1, 75),
    ("multi_habit", "Multitasker", "Complete 5 different habits in one day",
     const.ACHIEVEMENT_CATEGORY_SPECIAL, "layers", const.ACHIEVEMENT_RARITY_RARE,
     const.STAT_DAILY_COMPLETIONS, 5, 60),
    ("super_user", "Super User", "Keep 10 habits active",
     const.ACHIEVEMENT_CATEGORY_SPECIAL, "zap", const.ACHIEVEMENT_RARITY_EPIC,
     const.STAT_ACTIVE_HABITS, 10, 250),
)  # fmt: skip


@cache
def _build_catalog() -> tuple[AchievementDefinition, ...]:
    return tuple(
        build_achievement_definition(
            {
                const.DATA_ACHIEVEMENT_ID: achievement_id,
                const.DATA_ACHIEVEMENT_NAME: name,
                const.DATA_ACHIEVEMENT_DESCRIPTION: description,
                const.DATA_ACHIEVEMENT_CATEGORY: category,
                const.DATA_ACHIEVEMENT_ICON: icon,
                const.DATA_ACHIEVEMENT_RARITY: rarity,
                const.DATA_ACHIEVEMENT_REQUIREMENT: {
                    const.DATA_ACHIEVEMENT_REQUIREMENT_STAT_KEY: stat_key,
                    const.DATA_ACHIEVEMENT_REQUIREMENT_VALUE: value,
                },
                const.DATA_ACHIEVEMENT_XP_REWARD: xp_reward,
            }
        )
        for (
            achievement_id,
            name,
            description,
            category,
            icon,
            rarity,
            stat_key,
            value,
            xp_reward,
        ) in _CATALOG_ENTRIES
    )


def default_catalog() -> list[AchievementDefinition]:
    """Return a fresh list of the default achievement definitions."""
    return copy.deepcopy(list(_build_catalog()))


def get_achievement(achievement_id: str) -> AchievementDefinition | None:
    """Look up a default catalog entry by id."""
    for definition in _build_catalog():
        if definition[const.DATA_ACHIEVEMENT_ID] == achievement_id:
            return copy.deepcopy(definition)
    return None
