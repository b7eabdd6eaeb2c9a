"""
Pytest configuration for storelock tests.

Coroutine tests are marked with @pytest.mark.asyncio (pytest-asyncio).
"""

import pytest

from storelock.env import Env
from storelock.locking import LockManager
from storelock.stores import MemoryStore


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line(
        "markers", "asyncio: mark test as async"
    )


class FakeClock:
    """Manually advanced epoch-millisecond clock."""

    def __init__(self, now: int = 1_700_000_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, milliseconds: int):
        self.now += milliseconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def quiet_env() -> Env:
    return Env(
        STORELOCK_REACQUISITION_TIME=100,
        STORELOCK_TIMEOUT_TIME=1000,
        STORELOCK_LOG_LEVEL="fatal",
    )


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def lock_manager(memory_store: MemoryStore, quiet_env: Env) -> LockManager:
    return LockManager(memory_store, env=quiet_env)
