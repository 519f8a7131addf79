"""Gamification Manager - Completion rewards, levels and achievement unlocks.

Recording a completion is the only write that moves XP. The manager:
1. Reads the event log and the user's recorded unlocks
2. Computes the XP this completion earns (ProgressionEngine.completion_xp)
3. Appends the completion event carrying that XP
4. Rebuilds aggregate statistics and evaluates the catalog
5. Records each new unlock exactly once (never revoked)
6. Compares levels before and after to detect a level up

Level is never stored: total XP is completion XP plus the XP of recorded
unlocks, and level_progress() is recomputed from it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .. import const
from ..achievement_catalog import default_catalog
from ..data_builders import build_achievement_unlock, build_completion
from ..engines.gamification_engine import GamificationEngine
from ..engines.progression_engine import ProgressionEngine
from ..engines.statistics_engine import StatisticsEngine
from ..utils.dt_utils import as_local, dt_now_utc
from .base_manager import BaseManager, EventBus

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from ..config import EngineSettings
    from ..store import EventStore
    from ..type_defs import (
        AchievementDefinition,
        CatalogEvaluation,
        CompletionEvent,
        CompletionReward,
        Habit,
        LevelProgress,
    )


class GamificationManager(BaseManager):
    """Orchestrates XP, levels and achievements for one event log."""

    def __init__(
        self,
        store: EventStore,
        settings: EngineSettings | None = None,
        bus: EventBus | None = None,
        catalog: Sequence[AchievementDefinition] | None = None,
    ) -> None:
        """Initialize manager.

        Args:
            store: Event store holding the raw event log
            settings: Engine settings (defaults when omitted)
            bus: Shared event bus
            catalog: Achievement catalog (default catalog when omitted)
        """
        super().__init__(store, settings, bus)
        self.catalog: list[AchievementDefinition] = (
            list(catalog) if catalog is not None else default_catalog()
        )

    # =========================================================================
    # XP and Levels
    # =========================================================================

    def _unlock_xp(self, unlocked_ids: set[str]) -> int:
        return sum(
            d.get(const.DATA_ACHIEVEMENT_XP_REWARD, 0)
            for d in self.catalog
            if d[const.DATA_ACHIEVEMENT_ID] in unlocked_ids
        )

    async def _unlocked_ids(self, user_id: str) -> set[str]:
        unlocks = await self.store.list_achievement_unlocks(user_id)
        return {u[const.DATA_UNLOCK_ACHIEVEMENT_ID] for u in unlocks}

    def _total_xp(
        self, events: Sequence[CompletionEvent], unlocked_ids: set[str]
    ) -> int:
        return ProgressionEngine.total_xp(
            events, self.settings.default_xp_reward
        ) + self._unlock_xp(unlocked_ids)

    async def level_progress(self, user_id: str) -> LevelProgress:
        """Current level of the user, recomputed from the log."""
        events = await self.store.list_completions()
        unlocked_ids = await self._unlocked_ids(user_id)
        return ProgressionEngine.level_progress(
            self._total_xp(events, unlocked_ids), self.settings.level_size
        )

    # =========================================================================
    # Completion
    # =========================================================================

    async def record_completion(
        self,
        user_id: str,
        habit: Habit,
        habits: Sequence[Habit],
        value: float | None = None,
        now: datetime | None = None,
    ) -> CompletionReward:
        """Record one completion and grant its rewards.

        Args:
            user_id: Owner of achievement unlocks
            habit: The habit being completed
            habits: All of the user's habits (perfect day and achievements)
            value: Measured value for numeric and measurement habits
            now: Completion instant (defaults to now)

        Returns:
            CompletionReward with XP earned, levels and new achievement ids

        Raises:
            EntityValidationError: If the completion record is malformed
        """
        now_utc = now or dt_now_utc()
        habit_id = habit[const.DATA_HABIT_ID]
        today = as_local(now_utc).date()
        level_size = self.settings.level_size
        default_xp = self.settings.default_xp_reward

        async with self.habit_lock(habit_id):
            events = await self.store.list_completions()
            unlocked_ids = await self._unlocked_ids(user_id)
            old_total = self._total_xp(events, unlocked_ids)

            own_events = StatisticsEngine.events_for_habit(events, habit_id)
            previous_streak = StatisticsEngine.calculate_streak(
                StatisticsEngine.completion_dates(own_events), today
            )

            provisional = build_completion(
                {
                    const.DATA_COMPLETION_HABIT_ID: habit_id,
                    const.DATA_COMPLETION_COMPLETED_AT: now_utc,
                    const.DATA_COMPLETION_VALUE: value,
                }
            )
            events_after = [*events, provisional]
            new_streak = StatisticsEngine.calculate_streak(
                StatisticsEngine.completion_dates([*own_events, provisional]), today
            )
            is_first_today = not any(
                StatisticsEngine.event_date(e) == today for e in events
            )
            is_perfect_day = StatisticsEngine.is_perfect_day(
                habits, events_after, today
            ) and not StatisticsEngine.is_perfect_day(habits, events, today)

            xp_earned = ProgressionEngine.completion_xp(
                habit.get(const.DATA_HABIT_XP_REWARD, default_xp),
                new_streak,
                habit.get(const.DATA_HABIT_DIFFICULTY),
                is_first_today,
                is_perfect_day,
            )
            event: CompletionEvent = {
                **provisional,
                const.DATA_COMPLETION_XP_REWARD: xp_earned,
            }
            await self.store.record_completion(event)
            events_after[-1] = event

            new_achievements = await self._record_new_unlocks(
                user_id, habits, events_after, unlocked_ids, now_utc
            )
            new_total = self._total_xp(events_after, unlocked_ids)

        old_level = ProgressionEngine.level_progress(old_total, level_size)["level"]
        new_level = ProgressionEngine.level_progress(new_total, level_size)["level"]
        reward: CompletionReward = {
            "habit_id": habit_id,
            "xp_earned": xp_earned,
            "old_level": old_level,
            "new_level": new_level,
            "level_up": new_level > old_level,
            "streak": new_streak,
            "celebration": ProgressionEngine.celebration_type(
                old_level, new_level, previous_streak, new_streak
            ),
            "new_achievements": new_achievements,
        }

        const.LOGGER.debug(
            "Completion of %s earned %d XP (streak %d, level %d)",
            habit_id,
            xp_earned,
            new_streak,
            new_level,
        )
        await self.emit(
            const.SIGNAL_SUFFIX_COMPLETION_RECORDED, user_id=user_id, **reward
        )
        if reward["level_up"]:
            await self.emit(
                const.SIGNAL_SUFFIX_LEVEL_UP,
                user_id=user_id,
                old_level=old_level,
                new_level=new_level,
            )
        return reward

    async def _record_new_unlocks(
        self,
        user_id: str,
        habits: Sequence[Habit],
        events: Sequence[CompletionEvent],
        unlocked_ids: set[str],
        now: datetime,
    ) -> list[str]:
        """Evaluate the catalog and record unlocks not seen before.

        unlocked_ids is updated in place with every id recorded here.
        """
        stats = StatisticsEngine.aggregate_stats(
            habits, events, now, self.settings.default_xp_reward
        )
        evaluation = GamificationEngine.evaluate_catalog(
            self.catalog, stats, unlocked_ids
        )

        recorded: list[str] = []
        for definition in evaluation["newly_unlocked"]:
            achievement_id = definition[const.DATA_ACHIEVEMENT_ID]
            unlock = build_achievement_unlock(user_id, achievement_id, now.isoformat())
            if not await self.store.record_achievement_unlock(unlock):
                continue
            unlocked_ids.add(achievement_id)
            recorded.append(achievement_id)
            const.LOGGER.info(
                "Achievement '%s' unlocked for user %s", achievement_id, user_id
            )
            await self.emit(
                const.SIGNAL_SUFFIX_ACHIEVEMENT_UNLOCKED,
                user_id=user_id,
                achievement_id=achievement_id,
                xp_reward=definition.get(const.DATA_ACHIEVEMENT_XP_REWARD, 0),
            )
        return recorded

    # =========================================================================
    # Achievements
    # =========================================================================

    async def achievements(
        self,
        user_id: str,
        habits: Sequence[Habit],
        now: datetime | None = None,
    ) -> CatalogEvaluation:
        """Current catalog view of a user. Read-only: records nothing."""
        events = await self.store.list_completions()
        stats = StatisticsEngine.aggregate_stats(
            habits, events, now or dt_now_utc(), self.settings.default_xp_reward
        )
        return GamificationEngine.evaluate_catalog(
            self.catalog, stats, await self._unlocked_ids(user_id)
        )
