"""Pytest configuration and shared fixtures.

This module defines:
- Test markers (unit, integration, property)
- Fake port implementations for the host memory probe and reclaimer
- Settings isolation between tests
"""

import pytest
import structlog
from hypothesis import HealthCheck, settings

from heap_tester.adapters.config.settings import reload_settings
from heap_tester.application.harness import HarnessSession
from heap_tester.application.usage_sampler import UsageSampler
from heap_tester.domain.services import AllocationPool

# Small blocks keep unit tests fast; 10 MiB blocks are only used where
# the size itself matters.
TEST_BLOCK_SIZE = 1024

# The autouse settings fixture is function-scoped; examples do not depend on it.
settings.register_profile(
    "heap_tester",
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)
settings.load_profile("heap_tester")


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "unit: Fast unit tests with faked host boundaries",
    )
    config.addinivalue_line(
        "markers",
        "integration: Tests against the real host (psutil, gc, real allocations)",
    )
    config.addinivalue_line(
        "markers",
        "property: Hypothesis property-based tests",
    )


class FakeMemoryProbe:
    """HostMemoryPort fake with settable readings and call counters."""

    def __init__(self, used: int = 0, limit: int | None = None) -> None:
        self.used = used
        self.limit = limit
        self.used_calls = 0
        self.limit_calls = 0

    def used_bytes(self) -> int:
        self.used_calls += 1
        return self.used

    def limit_bytes(self) -> int | None:
        self.limit_calls += 1
        return self.limit


class RecordingReclaimer:
    """ReclamationPort fake counting reclamation hints."""

    def __init__(self) -> None:
        self.calls = 0

    def request_reclamation(self) -> None:
        self.calls += 1


class FailingFactory:
    """Block factory raising MemoryError once ``fail_after`` blocks were made."""

    def __init__(self, fail_after: int) -> None:
        self.fail_after = fail_after
        self.created = 0

    def __call__(self, size: int) -> bytearray:
        if self.created >= self.fail_after:
            raise MemoryError("simulated out of memory")
        self.created += 1
        return bytearray(size)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Run every test without a stray .env and with fresh settings."""
    monkeypatch.chdir(tmp_path)
    for name in [
        "HEAP_TESTER_POOL_BLOCK_SIZE_MB",
        "HEAP_TESTER_POOL_DEFAULT_COUNT",
        "HEAP_TESTER_POOL_MAX_COUNT",
        "HEAP_TESTER_SAMPLER_LIMIT_SOURCE",
        "HEAP_TESTER_SAMPLER_FIXED_LIMIT_MB",
        "HEAP_TESTER_SAMPLER_REFRESH_INTERVAL_SECONDS",
        "HEAP_TESTER_LOG_LEVEL",
        "HEAP_TESTER_LOG_JSON_OUTPUT",
    ]:
        monkeypatch.delenv(name, raising=False)
    reload_settings()


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo logging configuration done by CLI or logging tests."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def fake_probe() -> FakeMemoryProbe:
    """Probe reporting 250 of 1000 bytes used (25%, LOW)."""
    return FakeMemoryProbe(used=250, limit=1000)


@pytest.fixture
def reclaimer() -> RecordingReclaimer:
    return RecordingReclaimer()


@pytest.fixture
def pool(reclaimer: RecordingReclaimer) -> AllocationPool:
    """Empty pool wired to a recording reclaimer."""
    return AllocationPool(reclaimer=reclaimer)


@pytest.fixture
def sampler(fake_probe: FakeMemoryProbe) -> UsageSampler:
    return UsageSampler(fake_probe)


@pytest.fixture
def harness(pool: AllocationPool, sampler: UsageSampler) -> HarnessSession:
    return HarnessSession(pool=pool, sampler=sampler, block_size=TEST_BLOCK_SIZE)
