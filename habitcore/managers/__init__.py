"""Manager modules for habitcore.

Managers orchestrate workflows and coordinate between engines and the store.
They hold no derived state and emit events for embedders on every write.
"""

from .attempt_manager import AttemptManager
from .base_manager import BaseManager, EventBus
from .fasting_manager import FastingManager
from .gamification_manager import GamificationManager
from .statistics_manager import StatisticsManager

__all__ = [
    "AttemptManager",
    "BaseManager",
    "EventBus",
    "FastingManager",
    "GamificationManager",
    "StatisticsManager",
]
