"""Gamification Engine - Pure logic for achievement evaluation.

This engine provides stateless, pure Python functions for:
- Requirement checks against the aggregate statistics map
- Achievement progress (0-100, clamped)
- Catalog evaluation split into newly unlocked / unlocked / locked

ARCHITECTURE: This is a pure logic engine with NO store dependencies.
All functions are static methods that operate on passed-in data.

PURITY REQUIREMENT: This engine receives ALL data via parameters. The
statistics map is pre-computed by StatisticsEngine.aggregate_stats(), and the
set of already recorded unlocks comes from the store via GamificationManager.

Monotonicity: an achievement recorded as unlocked is never re-evaluated to
locked. evaluate_catalog() honours the recorded set it is given; recording
each unlock exactly once is the manager/store's job.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .. import const
from ..utils.math_utils import clamp, round_value

if TYPE_CHECKING:
    from collections.abc import Collection, Mapping, Sequence

    from ..type_defs import AchievementDefinition, CatalogEvaluation, EvaluationResult


class GamificationEngine:
    """Pure logic engine for achievement evaluation.

    All methods are static - no instance state.
    """

    @staticmethod
    def _requirement(definition: AchievementDefinition) -> tuple[str, float]:
        requirement = definition.get(const.DATA_ACHIEVEMENT_REQUIREMENT) or {}
        return (
            requirement.get(const.DATA_ACHIEVEMENT_REQUIREMENT_STAT_KEY, ""),
            float(requirement.get(const.DATA_ACHIEVEMENT_REQUIREMENT_VALUE, 0)),
        )

    @staticmethod
    def is_unlocked(
        definition: AchievementDefinition, stats: Mapping[str, float]
    ) -> bool:
        """Whether stats[stat_key] >= value. A missing key is never met."""
        stat_key, threshold = GamificationEngine._requirement(definition)
        if stat_key not in stats:
            return False
        return stats[stat_key] >= threshold

    @staticmethod
    def progress(
        definition: AchievementDefinition, stats: Mapping[str, float]
    ) -> float:
        """Percent progress toward the requirement, clamped to [0, 100].

        A missing key yields 0. A zero threshold is met as soon as the key
        exists.
        """
        stat_key, threshold = GamificationEngine._requirement(definition)
        if stat_key not in stats:
            return 0.0
        if threshold <= 0:
            return 100.0
        return round_value(clamp(stats[stat_key] / threshold * 100, 0.0, 100.0))

    @staticmethod
    def evaluate_achievement(
        definition: AchievementDefinition, stats: Mapping[str, float]
    ) -> EvaluationResult:
        """Evaluate one achievement against the statistics map.

        Returns:
            EvaluationResult with criteria_met, progress and a short reason
        """
        stat_key, threshold = GamificationEngine._requirement(definition)
        current_value = float(stats.get(stat_key, 0))
        criteria_met = GamificationEngine.is_unlocked(definition, stats)

        if stat_key not in stats:
            reason = f"No value for {stat_key}"
        else:
            reason = f"{stat_key}: {current_value:g}/{threshold:g}"

        return GamificationEngine._make_result(
            entity_id=definition.get(const.DATA_ACHIEVEMENT_ID, const.DISPLAY_UNKNOWN),
            entity_name=definition.get(
                const.DATA_ACHIEVEMENT_NAME, const.DISPLAY_UNKNOWN
            ),
            criteria_met=criteria_met,
            progress=GamificationEngine.progress(definition, stats),
            current_value=current_value,
            threshold=threshold,
            reason=reason,
        )

    @staticmethod
    def evaluate_catalog(
        catalog: Sequence[AchievementDefinition],
        stats: Mapping[str, float],
        unlocked_ids: Collection[str] = (),
    ) -> CatalogEvaluation:
        """Split the catalog by unlock state.

        Already recorded achievements stay unlocked whatever the current stats
        say. The rest are evaluated; those meeting their requirement are newly
        unlocked and contribute their xp_reward to xp_from_new.
        """
        newly_unlocked: list[AchievementDefinition] = []
        unlocked: list[AchievementDefinition] = []
        locked: list[EvaluationResult] = []

        for definition in catalog:
            achievement_id = definition.get(const.DATA_ACHIEVEMENT_ID)
            if achievement_id in unlocked_ids:
                unlocked.append(definition)
                continue

            result = GamificationEngine.evaluate_achievement(definition, stats)
            if result["criteria_met"]:
                newly_unlocked.append(definition)
            else:
                locked.append(result)

        if newly_unlocked:
            const.LOGGER.debug(
                "Achievements newly unlocked: %s",
                [d.get(const.DATA_ACHIEVEMENT_ID) for d in newly_unlocked],
            )

        return {
            "newly_unlocked": newly_unlocked,
            "unlocked": unlocked,
            "locked": locked,
            "xp_from_new": sum(
                d.get(const.DATA_ACHIEVEMENT_XP_REWARD, 0) for d in newly_unlocked
            ),
        }

    @staticmethod
    def _make_result(
        entity_id: str,
        entity_name: str,
        criteria_met: bool,
        progress: float,
        current_value: float,
        threshold: float,
        reason: str = "",
    ) -> EvaluationResult:
        """Create a standardized EvaluationResult."""
        return {
            "entity_id": entity_id,
            "entity_name": entity_name,
            "criteria_met": criteria_met,
            "progress": progress,
            "current_value": current_value,
            "threshold": threshold,
            "reason": reason,
        }
