import pytest

from adapters.config_store import MemoryConfigStore
from core.event_bus import EventBus
from core.scheduler import Scheduler


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def store():
    return MemoryConfigStore()


@pytest.fixture
def scheduler():
    """A scheduler whose loop is never started; tests drive it with run_pending"""
    return Scheduler()
