"""Shared fixtures for habitcore tests."""

from collections.abc import Iterator
from zoneinfo import ZoneInfo

import pytest

from habitcore.managers import EventBus
from habitcore.store import MemoryEventStore
from habitcore.utils import dt_utils


@pytest.fixture(autouse=True)
def reset_default_timezone() -> Iterator[None]:
    """Run every test in UTC unless it sets a timezone itself."""
    dt_utils.set_default_timezone(ZoneInfo("UTC"))
    yield
    dt_utils.set_default_timezone(ZoneInfo("UTC"))


@pytest.fixture
def store() -> MemoryEventStore:
    """Empty in-memory event store."""
    return MemoryEventStore()


@pytest.fixture
def bus() -> EventBus:
    """Event bus shared by the managers under test."""
    return EventBus()
