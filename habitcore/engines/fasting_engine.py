"""Fasting Engine - Pure logic for the intermittent fasting state machine.

This engine provides stateless, pure Python functions for:
- Mode derivation from the fasting window list (INACTIVE / FASTING / EATING)
- Transition planning (start fasting, start eating, end eating)
- Live status (duration, target progress, metabolic phase)
- History aggregates over closed windows

ARCHITECTURE: This is a pure logic engine with NO store dependencies.
All functions are static methods that operate on passed-in data.
The mode is never stored; it is recomputed from the windows on every call.
Persisting planned transitions belongs in FastingManager.

State machine:
    INACTIVE --start_fasting--> FASTING --start_eating--> EATING
    EATING --end_eating--> INACTIVE
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .. import const
from ..utils.dt_utils import dt_elapsed_minutes, dt_now_utc, dt_to_utc
from ..utils.math_utils import round_value, safe_mean

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from ..type_defs import (
        FastingHistoryStats,
        FastingStatus,
        FastingTransition,
        FastingWindowData,
        MotivationMilestone,
    )


class FastingEngine:
    """Pure logic engine for the fasting window state machine.

    All methods are static - no instance state.
    """

    # Valid transitions: mode -> {action: resulting mode}
    VALID_TRANSITIONS: dict[str, dict[str, str]] = {
        const.FASTING_MODE_INACTIVE: {
            const.FASTING_ACTION_START_FASTING: const.FASTING_MODE_FASTING,
        },
        const.FASTING_MODE_FASTING: {
            const.FASTING_ACTION_START_EATING: const.FASTING_MODE_EATING,
        },
        const.FASTING_MODE_EATING: {
            const.FASTING_ACTION_END_EATING: const.FASTING_MODE_INACTIVE,
        },
    }

    # =========================================================================
    # Mode Derivation
    # =========================================================================

    @staticmethod
    def open_window(
        windows: Sequence[FastingWindowData],
    ) -> FastingWindowData | None:
        """Return the window with no end_time, or None.

        At most one window should be open. If the store broke that rule the
        latest by start_time wins and a warning is logged.
        """
        open_windows = [
            w for w in windows if not w.get(const.DATA_FASTING_WINDOW_END_TIME)
        ]
        if not open_windows:
            return None
        if len(open_windows) > 1:
            const.LOGGER.warning(
                "Found %d open fasting windows for habit %s, using the latest",
                len(open_windows),
                open_windows[0].get(const.DATA_FASTING_WINDOW_HABIT_ID),
            )
        return max(open_windows, key=FastingEngine._start_sort_key)

    @staticmethod
    def get_mode(windows: Sequence[FastingWindowData]) -> str:
        """Derive the current mode from the window list.

        Returns:
            FASTING_MODE_FASTING for an open window without a transition,
            FASTING_MODE_EATING for an open window with one,
            FASTING_MODE_INACTIVE otherwise.
        """
        window = FastingEngine.open_window(windows)
        if window is None:
            return const.FASTING_MODE_INACTIVE
        if window.get(const.DATA_FASTING_WINDOW_EATING_TRANSITION_TIME):
            return const.FASTING_MODE_EATING
        return const.FASTING_MODE_FASTING

    @staticmethod
    def can_transition(mode: str, action: str) -> bool:
        """Validate if an action is allowed from the given mode."""
        return action in FastingEngine.VALID_TRANSITIONS.get(mode, {})

    # =========================================================================
    # Transition Planning
    # =========================================================================

    @staticmethod
    def plan_start_fasting(
        windows: Sequence[FastingWindowData],
        habit_id: str,
        target_minutes: int,
        now: datetime | None = None,
    ) -> FastingTransition | None:
        """Plan a new fasting window starting at now.

        Only allowed from INACTIVE, so a habit never has two open windows.

        Returns:
            FastingTransition describing the window to create, or None when
            the habit is already fasting or eating.
        """
        mode = FastingEngine.get_mode(windows)
        action = const.FASTING_ACTION_START_FASTING
        if not FastingEngine.can_transition(mode, action):
            const.LOGGER.debug(
                "Ignoring %s for habit %s while %s", action, habit_id, mode
            )
            return None

        now_utc = now or dt_now_utc()
        return {
            "action": action,
            "habit_id": habit_id,
            "window_id": None,
            "timestamp": now_utc.isoformat(),
            "target_minutes": target_minutes,
            "new_mode": FastingEngine.VALID_TRANSITIONS[mode][action],
        }

    @staticmethod
    def plan_start_eating(
        windows: Sequence[FastingWindowData],
        now: datetime | None = None,
    ) -> FastingTransition | None:
        """Plan the FASTING → EATING transition on the open window.

        Returns:
            FastingTransition setting eating_transition_time, or None when
            the habit is not fasting.
        """
        mode = FastingEngine.get_mode(windows)
        action = const.FASTING_ACTION_START_EATING
        if not FastingEngine.can_transition(mode, action):
            const.LOGGER.debug("Ignoring %s while %s", action, mode)
            return None

        window = FastingEngine.open_window(windows)
        if window is None:
            return None
        now_utc = now or dt_now_utc()
        return {
            "action": action,
            "habit_id": window.get(const.DATA_FASTING_WINDOW_HABIT_ID),
            "window_id": window[const.DATA_FASTING_WINDOW_ID],
            "timestamp": now_utc.isoformat(),
            "fasting_duration": dt_elapsed_minutes(
                window.get(const.DATA_FASTING_WINDOW_START_TIME), now_utc
            ),
            "new_mode": FastingEngine.VALID_TRANSITIONS[mode][action],
        }

    @staticmethod
    def plan_end_eating(
        windows: Sequence[FastingWindowData],
        now: datetime | None = None,
    ) -> FastingTransition | None:
        """Plan closing the open window (EATING → INACTIVE).

        The recorded fasting_duration is always eating_transition_time minus
        start_time; the eating phase does not count toward it.

        Returns:
            FastingTransition setting end_time and fasting_duration, or None
            when the habit is not eating.
        """
        mode = FastingEngine.get_mode(windows)
        action = const.FASTING_ACTION_END_EATING
        if not FastingEngine.can_transition(mode, action):
            const.LOGGER.debug("Ignoring %s while %s", action, mode)
            return None

        window = FastingEngine.open_window(windows)
        if window is None:
            return None
        now_utc = now or dt_now_utc()
        return {
            "action": action,
            "habit_id": window.get(const.DATA_FASTING_WINDOW_HABIT_ID),
            "window_id": window[const.DATA_FASTING_WINDOW_ID],
            "timestamp": now_utc.isoformat(),
            "fasting_duration": FastingEngine.fasting_duration(window),
            "new_mode": FastingEngine.VALID_TRANSITIONS[mode][action],
        }

    # =========================================================================
    # Status
    # =========================================================================

    @staticmethod
    def fasting_duration(window: FastingWindowData) -> int | None:
        """Authoritative fasting minutes of a window.

        Uses eating_transition_time - start_time. A window that never reached
        the eating phase has no duration yet.
        """
        transition = window.get(const.DATA_FASTING_WINDOW_EATING_TRANSITION_TIME)
        if not transition:
            return None
        return dt_elapsed_minutes(
            window.get(const.DATA_FASTING_WINDOW_START_TIME), transition
        )

    @staticmethod
    def compute_status(
        windows: Sequence[FastingWindowData],
        now: datetime | None = None,
    ) -> FastingStatus:
        """Compute the live fasting status.

        duration_minutes counts from the last transition: start_time while
        fasting, eating_transition_time while eating. Progress and phase are
        only reported while fasting. A zero or missing target suppresses the
        progress bar (progress_percent None), and unparseable timestamps
        suppress the duration.
        """
        status: FastingStatus = {
            "mode": const.FASTING_MODE_INACTIVE,
            "window_id": None,
            "started_at": None,
            "duration_minutes": None,
            "target_minutes": None,
            "progress_percent": None,
            "overachieved": False,
            "phase": None,
        }
        window = FastingEngine.open_window(windows)
        if window is None:
            return status

        now_utc = now or dt_now_utc()
        transition = window.get(const.DATA_FASTING_WINDOW_EATING_TRANSITION_TIME)
        status["window_id"] = window.get(const.DATA_FASTING_WINDOW_ID)

        if transition:
            status["mode"] = const.FASTING_MODE_EATING
            status["started_at"] = transition
            status["duration_minutes"] = dt_elapsed_minutes(transition, now_utc)
            return status

        started_at = window.get(const.DATA_FASTING_WINDOW_START_TIME)
        duration = dt_elapsed_minutes(started_at, now_utc)
        target = window.get(const.DATA_FASTING_WINDOW_TARGET_MINUTES) or None

        status["mode"] = const.FASTING_MODE_FASTING
        status["started_at"] = started_at
        status["duration_minutes"] = duration
        status["target_minutes"] = target
        if duration is not None:
            status["phase"] = FastingEngine.get_phase(duration)
            if target:
                status["progress_percent"] = round_value(
                    min(100.0, duration / target * 100)
                )
                status["overachieved"] = duration > target
        return status

    @staticmethod
    def get_phase(duration_minutes: int) -> str:
        """Return the metabolic phase for a fasting duration.

        Examples:
            get_phase(60) → "digestion"
            get_phase(17 * 60) → "ketosis"
        """
        phase = const.FASTING_PHASES[0][0]
        for key, lower_hours in const.FASTING_PHASES:
            if duration_minutes >= lower_hours * 60:
                phase = key
        return phase

    @staticmethod
    def get_motivation(
        milestones: Sequence[MotivationMilestone],
        duration_minutes: int | None,
    ) -> str | None:
        """Return the message of a milestone passed within the last 30 minutes.

        When several match, the latest milestone wins.
        """
        if duration_minutes is None:
            return None
        message: str | None = None
        best_mark = -1
        for milestone in milestones:
            mark = milestone["minutes"]
            if (
                mark <= duration_minutes
                < mark + const.FASTING_MOTIVATION_WINDOW_MINUTES
                and mark > best_mark
            ):
                best_mark = mark
                message = milestone["message"]
        return message

    @staticmethod
    def resolve_mode_target(mode_key: str) -> int | None:
        """Return the target fasting minutes of a preset, or None if unknown.

        Examples:
            resolve_mode_target("16:8") → 960
            resolve_mode_target("OMAD") → 1380
        """
        preset = const.FASTING_PRESETS.get(mode_key)
        if preset is None:
            return None
        return preset[0] * 60

    # =========================================================================
    # History
    # =========================================================================

    @staticmethod
    def history_stats(windows: Sequence[FastingWindowData]) -> FastingHistoryStats:
        """Aggregate closed windows.

        Closed windows without a computable duration are skipped. goal_streak
        counts consecutive most recent sessions meeting their target.
        """
        closed = sorted(
            (w for w in windows if w.get(const.DATA_FASTING_WINDOW_END_TIME)),
            key=FastingEngine._start_sort_key,
        )
        sessions: list[tuple[int, int]] = []
        for window in closed:
            duration = window.get(const.DATA_FASTING_WINDOW_FASTING_DURATION)
            if duration is None:
                duration = FastingEngine.fasting_duration(window)
            if duration is None:
                const.LOGGER.debug(
                    "Skipping fasting window %s without a duration",
                    window.get(const.DATA_FASTING_WINDOW_ID),
                )
                continue
            target = window.get(const.DATA_FASTING_WINDOW_TARGET_MINUTES) or 0
            sessions.append((duration, target))

        durations = [duration for duration, _ in sessions]
        goals = [bool(target) and duration >= target for duration, target in sessions]

        goal_streak = 0
        for met in reversed(goals):
            if not met:
                break
            goal_streak += 1

        return {
            "total_sessions": len(sessions),
            "best": max(durations) if durations else None,
            "average": safe_mean(durations) if durations else None,
            "total_minutes": sum(durations),
            "goals_met": sum(goals),
            "goal_streak": goal_streak,
        }

    @staticmethod
    def _start_sort_key(window: FastingWindowData) -> float:
        start = dt_to_utc(window.get(const.DATA_FASTING_WINDOW_START_TIME))
        return start.timestamp() if start else float("-inf")
