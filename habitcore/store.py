# File: store.py
"""Event storage boundary for habitcore.

The engines never touch storage. Managers read raw events and apply planned
writes through an object implementing the EventStore protocol. Persistence,
authentication and remote transport live behind that protocol, outside this
package.

MemoryEventStore is the in-process implementation used by tests and by
embedders that keep the event log in memory. It keeps every bucket in one
plain dict (see get_default_structure) and serializes per-habit writes that
open a record with an asyncio.Lock per habit. A habit never holds more than
one open fasting window or attempt; writes that would break this raise
OpenRecordConflictError.

The store also owns the per-habit planning locks (get_habit_lock) that
managers hold across read, plan and write, so managers sharing a store are
serialized per habit.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
import copy
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from . import const
from .data_builders import HabitCoreError

if TYPE_CHECKING:
    from .engines.attempt_engine import AttemptResetPlan
    from .type_defs import (
        AchievementUnlock,
        AttemptData,
        CompletionEvent,
        FastingWindowData,
    )


class RecordNotFoundError(HabitCoreError):
    """Raised when a write targets a record id the store does not hold.

    Attributes:
        bucket: Store bucket searched (STORE_* constant)
        record_id: The missing record id
    """

    def __init__(self, bucket: str, record_id: str) -> None:
        """Initialize RecordNotFoundError."""
        self.bucket = bucket
        self.record_id = record_id
        super().__init__(f"No record {record_id} in {bucket}")


class OpenRecordConflictError(HabitCoreError):
    """Raised when a write would leave a habit with two open records.

    Covers a second open fasting window or attempt, and a reset planned
    against an attempt that has since been closed (a stale read).

    Attributes:
        bucket: Store bucket written (STORE_* constant)
        habit_id: Habit whose open record conflicts
    """

    def __init__(self, bucket: str, habit_id: str, message: str) -> None:
        """Initialize OpenRecordConflictError."""
        self.bucket = bucket
        self.habit_id = habit_id
        super().__init__(message)


@runtime_checkable
class EventStore(Protocol):
    """Read and write operations the managers need from storage."""

    def get_habit_lock(self, habit_id: str) -> asyncio.Lock:
        """Return the lock managers hold across a habit's read-plan-write."""
        ...

    async def list_fasting_windows(self, habit_id: str) -> list[FastingWindowData]:
        """Return every fasting window of a habit."""
        ...

    async def list_attempts(self, habit_id: str) -> list[AttemptData]:
        """Return every attempt of a duration counter habit."""
        ...

    async def list_completions(
        self, habit_id: str | None = None
    ) -> list[CompletionEvent]:
        """Return completion events, optionally for one habit."""
        ...

    async def list_achievement_unlocks(self, user_id: str) -> list[AchievementUnlock]:
        """Return the unlocks recorded for a user."""
        ...

    async def create_fasting_window(self, window: FastingWindowData) -> None:
        """Append a new (open) fasting window. Rejects a second open window."""
        ...

    async def transition_fasting_window(
        self, window_id: str, eating_transition_time: str
    ) -> None:
        """Set eating_transition_time on an open window."""
        ...

    async def close_fasting_window(
        self, window_id: str, end_time: str, fasting_duration: int | None
    ) -> None:
        """Set end_time and the final fasting_duration on a window."""
        ...

    async def create_attempt(self, attempt: AttemptData) -> None:
        """Append a new (open) attempt. Rejects a second open attempt."""
        ...

    async def close_attempt(
        self,
        attempt_id: str,
        end_date: str,
        days_lasted: int,
        reset_reason: str | None,
    ) -> None:
        """Close an attempt."""
        ...

    async def reset_attempt(self, plan: AttemptResetPlan) -> None:
        """Close the current attempt and create the next one atomically.

        Rejects a plan whose attempt is no longer the open one.
        """
        ...

    async def record_completion(self, event: CompletionEvent) -> None:
        """Append a completion event."""
        ...

    async def record_achievement_unlock(self, unlock: AchievementUnlock) -> bool:
        """Record an unlock once. Returns False if it was already recorded."""
        ...


class MemoryEventStore:
    """In-memory EventStore.

    Reads return deep copies so callers cannot mutate stored records. Writes
    that open a record of a habit, alone or after closing one, hold that
    habit's lock and check the open records first.
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        """Initialize the store.

        Args:
            data: Optional initial buckets (merged over the default structure).
        """
        self._data: dict[str, Any] = self.get_default_structure()
        if data:
            self._data.update(copy.deepcopy(data))
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._habit_locks: dict[str, asyncio.Lock] = {}

    @staticmethod
    def get_default_structure() -> dict[str, Any]:
        """Return canonical empty data structure.

        This is the SINGLE SOURCE OF TRUTH for the store bucket layout.

        Returns:
            dict: Default structure with all buckets initialized.
        """
        return {
            const.STORE_FASTING_WINDOWS: [],
            const.STORE_ATTEMPTS: [],
            const.STORE_COMPLETIONS: [],
            const.STORE_ACHIEVEMENT_UNLOCKS: [],
        }

    @property
    def data(self) -> dict[str, Any]:
        """Return a deep copy of all buckets."""
        return copy.deepcopy(self._data)

    def lock(self, habit_id: str) -> asyncio.Lock:
        """Return the lock serializing record-opening writes of one habit."""
        return self._locks[habit_id]

    def get_habit_lock(self, habit_id: str) -> asyncio.Lock:
        """Get or create the planning lock of one habit.

        Managers hold it while they read, plan and write, so two managers
        over this store never plan from the same read. It is separate from
        lock(), which the store's own writes take.
        """
        if habit_id not in self._habit_locks:
            self._habit_locks[habit_id] = asyncio.Lock()
        return self._habit_locks[habit_id]

    async def async_clear_data(self) -> None:
        """Reset every bucket to empty."""
        const.LOGGER.debug("Clearing all stored events")
        self._data = self.get_default_structure()

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def list_fasting_windows(self, habit_id: str) -> list[FastingWindowData]:
        """Return every fasting window of a habit."""
        return self._select(
            const.STORE_FASTING_WINDOWS, const.DATA_FASTING_WINDOW_HABIT_ID, habit_id
        )

    async def list_attempts(self, habit_id: str) -> list[AttemptData]:
        """Return every attempt of a duration counter habit."""
        return self._select(const.STORE_ATTEMPTS, const.DATA_ATTEMPT_HABIT_ID, habit_id)

    async def list_completions(
        self, habit_id: str | None = None
    ) -> list[CompletionEvent]:
        """Return completion events, optionally for one habit."""
        if habit_id is None:
            return copy.deepcopy(self._data[const.STORE_COMPLETIONS])
        return self._select(
            const.STORE_COMPLETIONS, const.DATA_COMPLETION_HABIT_ID, habit_id
        )

    async def list_achievement_unlocks(self, user_id: str) -> list[AchievementUnlock]:
        """Return the unlocks recorded for a user."""
        return self._select(
            const.STORE_ACHIEVEMENT_UNLOCKS, const.DATA_UNLOCK_USER_ID, user_id
        )

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def create_fasting_window(self, window: FastingWindowData) -> None:
        """Append a new (open) fasting window.

        Raises:
            OpenRecordConflictError: If the habit already has an open window.
        """
        habit_id = window[const.DATA_FASTING_WINDOW_HABIT_ID]
        async with self.lock(habit_id):
            open_ids = self._open_ids(
                const.STORE_FASTING_WINDOWS,
                const.DATA_FASTING_WINDOW_HABIT_ID,
                habit_id,
                const.DATA_FASTING_WINDOW_END_TIME,
                const.DATA_FASTING_WINDOW_ID,
            )
            if open_ids:
                raise OpenRecordConflictError(
                    const.STORE_FASTING_WINDOWS,
                    habit_id,
                    f"Habit {habit_id} already has open fasting window {open_ids[0]}",
                )
            self._data[const.STORE_FASTING_WINDOWS].append(copy.deepcopy(window))

    async def transition_fasting_window(
        self, window_id: str, eating_transition_time: str
    ) -> None:
        """Set eating_transition_time on an open window."""
        window = self._find(
            const.STORE_FASTING_WINDOWS, const.DATA_FASTING_WINDOW_ID, window_id
        )
        window[const.DATA_FASTING_WINDOW_EATING_TRANSITION_TIME] = eating_transition_time

    async def close_fasting_window(
        self, window_id: str, end_time: str, fasting_duration: int | None
    ) -> None:
        """Set end_time and the final fasting_duration on a window."""
        window = self._find(
            const.STORE_FASTING_WINDOWS, const.DATA_FASTING_WINDOW_ID, window_id
        )
        window[const.DATA_FASTING_WINDOW_END_TIME] = end_time
        window[const.DATA_FASTING_WINDOW_FASTING_DURATION] = fasting_duration

    async def create_attempt(self, attempt: AttemptData) -> None:
        """Append a new (open) attempt.

        Raises:
            OpenRecordConflictError: If the habit already has an open attempt.
        """
        habit_id = attempt[const.DATA_ATTEMPT_HABIT_ID]
        async with self.lock(habit_id):
            self._check_no_open_attempt(habit_id)
            self._data[const.STORE_ATTEMPTS].append(copy.deepcopy(attempt))

    async def close_attempt(
        self,
        attempt_id: str,
        end_date: str,
        days_lasted: int,
        reset_reason: str | None,
    ) -> None:
        """Close an attempt."""
        attempt = self._find(const.STORE_ATTEMPTS, const.DATA_ATTEMPT_ID, attempt_id)
        attempt[const.DATA_ATTEMPT_END_DATE] = end_date
        attempt[const.DATA_ATTEMPT_DAYS_LASTED] = days_lasted
        attempt[const.DATA_ATTEMPT_RESET_REASON] = reset_reason

    async def reset_attempt(self, plan: AttemptResetPlan) -> None:
        """Close the current attempt and create the next one atomically.

        Raises:
            RecordNotFoundError: If the attempt to close does not exist.
            OpenRecordConflictError: If the plan was made from a stale read:
                its attempt is already closed, or another attempt is open.
        """
        async with self.lock(plan.habit_id):
            # Every check runs before the first write
            attempt = self._find(
                const.STORE_ATTEMPTS, const.DATA_ATTEMPT_ID, plan.closed_attempt_id
            )
            if attempt.get(const.DATA_ATTEMPT_END_DATE) is not None:
                raise OpenRecordConflictError(
                    const.STORE_ATTEMPTS,
                    plan.habit_id,
                    f"Attempt {plan.closed_attempt_id} is already closed",
                )
            self._check_no_open_attempt(plan.habit_id, ignore=plan.closed_attempt_id)

            await self.close_attempt(
                plan.closed_attempt_id,
                plan.end_date,
                plan.days_lasted,
                plan.reset_reason,
            )
            self._data[const.STORE_ATTEMPTS].append(copy.deepcopy(plan.new_attempt))

    async def record_completion(self, event: CompletionEvent) -> None:
        """Append a completion event."""
        self._data[const.STORE_COMPLETIONS].append(copy.deepcopy(event))

    async def record_achievement_unlock(self, unlock: AchievementUnlock) -> bool:
        """Record an unlock once. Returns False if it was already recorded."""
        unlocks = self._data[const.STORE_ACHIEVEMENT_UNLOCKS]
        for existing in unlocks:
            if (
                existing[const.DATA_UNLOCK_USER_ID] == unlock[const.DATA_UNLOCK_USER_ID]
                and existing[const.DATA_UNLOCK_ACHIEVEMENT_ID]
                == unlock[const.DATA_UNLOCK_ACHIEVEMENT_ID]
            ):
                return False
        unlocks.append(copy.deepcopy(unlock))
        return True

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _select(self, bucket: str, key: str, value: str) -> list[Any]:
        return [copy.deepcopy(r) for r in self._data[bucket] if r.get(key) == value]

    def _open_ids(
        self, bucket: str, habit_key: str, habit_id: str, end_key: str, id_key: str
    ) -> list[str]:
        return [
            r[id_key]
            for r in self._data[bucket]
            if r.get(habit_key) == habit_id and r.get(end_key) is None
        ]

    def _check_no_open_attempt(self, habit_id: str, ignore: str | None = None) -> None:
        open_ids = [
            attempt_id
            for attempt_id in self._open_ids(
                const.STORE_ATTEMPTS,
                const.DATA_ATTEMPT_HABIT_ID,
                habit_id,
                const.DATA_ATTEMPT_END_DATE,
                const.DATA_ATTEMPT_ID,
            )
            if attempt_id != ignore
        ]
        if open_ids:
            raise OpenRecordConflictError(
                const.STORE_ATTEMPTS,
                habit_id,
                f"Habit {habit_id} already has open attempt {open_ids[0]}",
            )

    def _find(self, bucket: str, key: str, value: str) -> dict[str, Any]:
        for record in self._data[bucket]:
            if record.get(key) == value:
                return record
        raise RecordNotFoundError(bucket, value)
