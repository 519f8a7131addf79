# File: __init__.py
"""habitcore - temporal state and progression engine for habit tracking.

Turns an append-only event log (completions, attempts, fasting windows) into
the derived state a habit tracker displays:
- Fasting window state machine and status
- Duration counter attempts with reset and milestone semantics
- XP and level progression
- Achievement unlocks, analytics and time-of-day / risk grouping

Engines (habitcore.engines) are pure and synchronous. Managers
(habitcore.managers) apply engine plans through an EventStore.
"""

from __future__ import annotations

from .config import EngineSettings
from .data_builders import EntityValidationError, HabitCoreError
from .engines import MissingAttemptError
from .managers import (
    AttemptManager,
    EventBus,
    FastingManager,
    GamificationManager,
    StatisticsManager,
)
from .store import (
    EventStore,
    MemoryEventStore,
    OpenRecordConflictError,
    RecordNotFoundError,
)

__version__ = "0.1.0"

__all__ = [
    "AttemptManager",
    "EngineSettings",
    "EntityValidationError",
    "EventBus",
    "EventStore",
    "FastingManager",
    "GamificationManager",
    "HabitCoreError",
    "MemoryEventStore",
    "MissingAttemptError",
    "OpenRecordConflictError",
    "RecordNotFoundError",
    "StatisticsManager",
]
