"""Base manager class for habitcore managers."""

from __future__ import annotations

from collections import defaultdict
import inspect
from typing import TYPE_CHECKING, Any

from .. import const
from ..config import EngineSettings

if TYPE_CHECKING:
    import asyncio
    from collections.abc import Callable

    from ..store import EventStore


class EventBus:
    """In-process signal dispatcher shared by the managers.

    Embedders subscribe here to react to state changes (notifications, UI
    refresh). Listeners may be sync or async; async listeners are awaited in
    subscription order.
    """

    def __init__(self) -> None:
        """Initialize an empty bus."""
        self._listeners: defaultdict[str, list[Callable[..., Any]]] = defaultdict(list)

    def connect(self, signal: str, callback: Callable[..., Any]) -> Callable[[], None]:
        """Subscribe callback to signal. Returns the unsubscribe function."""
        self._listeners[signal].append(callback)

        def _unsubscribe() -> None:
            if callback in self._listeners[signal]:
                self._listeners[signal].remove(callback)

        return _unsubscribe

    async def send(self, signal: str, payload: dict[str, Any]) -> None:
        """Deliver payload to every listener of signal."""
        for callback in list(self._listeners.get(signal, ())):
            result = callback(payload)
            if inspect.isawaitable(result):
                await result


class BaseManager:
    """Base class for all habitcore managers with scoped event support.

    Provides:
    - Store and settings references (no derived state is ever held)
    - Event emitting (emit) and listening (listen) on the shared EventBus
    - Per-habit locks serializing read-plan-write sequences, shared by all
      managers of one store

    Data Persistence:
    - Engines plan, managers apply the plan through the store
    - A manager never caches what an engine can recompute
    """

    def __init__(
        self,
        store: EventStore,
        settings: EngineSettings | None = None,
        bus: EventBus | None = None,
    ) -> None:
        """Initialize manager.

        Args:
            store: Event store holding the raw event log
            settings: Engine settings (defaults when omitted)
            bus: Shared event bus; a private one is created when omitted
        """
        self.store = store
        self.settings = settings or EngineSettings()
        self.bus = bus or EventBus()

    def habit_lock(self, habit_id: str) -> asyncio.Lock:
        """Lock held while a habit's events are read, planned on and written.

        The lock is owned by the store, so every manager over the same store
        gets the same lock for a habit.
        """
        return self.store.get_habit_lock(habit_id)

    async def emit(self, suffix: str, **payload: Any) -> None:
        """Emit an event to listeners.

        Args:
            suffix: Signal suffix constant (e.g., const.SIGNAL_SUFFIX_LEVEL_UP)
            **payload: Event data dict passed to listeners

        Example:
            await self.emit(
                const.SIGNAL_SUFFIX_LEVEL_UP,
                user_id=user_id,
                old_level=2,
                new_level=3,
            )
        """
        const.LOGGER.debug(
            "Emitting event '%s' from %s with payload keys: %s",
            suffix,
            self.__class__.__name__,
            list(payload.keys()),
        )
        await self.bus.send(suffix, payload)

    def listen(self, suffix: str, callback: Callable[..., Any]) -> Callable[[], None]:
        """Subscribe to an event. Returns the unsubscribe function.

        Args:
            suffix: Signal suffix constant to listen for
            callback: Called with the payload dict; sync or async
        """
        const.LOGGER.debug(
            "Manager %s listening to event '%s'", self.__class__.__name__, suffix
        )
        return self.bus.connect(suffix, callback)
