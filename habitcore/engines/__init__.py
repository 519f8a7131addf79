"""Engine modules for habitcore.

Contains specialized computation engines:
- fasting_engine: Fasting window state machine and status
- attempt_engine: Duration counter attempts, resets and milestones
- progression_engine: XP totals, level curve and completion rewards
- gamification_engine: Achievement evaluation
- statistics_engine: Completion analytics and aggregate statistics
- classifier_engine: Time-of-day grouping, risk and card state
- snapshot_engine: Per-habit derived view
"""

# Use relative imports within package to avoid mypy module resolution issues
from .attempt_engine import AttemptEngine, AttemptResetPlan, MissingAttemptError
from .classifier_engine import ClassifierEngine
from .fasting_engine import FastingEngine
from .gamification_engine import GamificationEngine
from .progression_engine import ProgressionEngine
from .snapshot_engine import SnapshotEngine
from .statistics_engine import StatisticsEngine

__all__ = [
    "AttemptEngine",
    "AttemptResetPlan",
    "ClassifierEngine",
    "FastingEngine",
    "GamificationEngine",
    "MissingAttemptError",
    "ProgressionEngine",
    "SnapshotEngine",
    "StatisticsEngine",
]
