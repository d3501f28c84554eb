# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Integration tests against the real host: psutil probe, gc reclaimer, real blocks.

Release is only required to show up eventually: the allocator decides
when pages go back to the OS, so the decrease check polls with a bound.
"""

import sys
import time
from collections.abc import Iterator

import pytest

from heap_tester.adapters.outbound.gc_reclaimer import GcReclaimer
from heap_tester.adapters.outbound.psutil_memory_probe import PsutilMemoryProbe
from heap_tester.application.harness import HarnessSession
from heap_tester.application.usage_sampler import UsageSampler
from heap_tester.domain.entities import MIB
from heap_tester.domain.services import AllocationPool

pytestmark = pytest.mark.integration

BLOCKS = 5
BLOCK_SIZE = 10 * MIB


@pytest.fixture
def real_session() -> Iterator[HarnessSession]:
    session = HarnessSession(
        pool=AllocationPool(reclaimer=GcReclaimer()),
        sampler=UsageSampler(PsutilMemoryProbe(limit_source="system")),
        block_size=BLOCK_SIZE,
    )
    yield session
    session.release_all()


def _wait_for_used_below(sampler: UsageSampler, threshold: int, attempts: int = 20) -> int:
    used = sampler.sample().used_bytes
    for _ in range(attempts):
        if used < threshold:
            break
        time.sleep(0.1)
        used = sampler.sample().used_bytes
    return used


class TestRealAllocation:
    def test_allocation_raises_resident_memory(self, real_session: HarnessSession) -> None:
        before = real_session.sampler.sample().used_bytes
        real_session.allocate(BLOCKS)
        after = real_session.sampler.sample().used_bytes

        assert real_session.pool.size() == BLOCKS
        # Zero-filled buffers are resident; allow slack for allocator behavior.
        assert after - before >= (BLOCKS * BLOCK_SIZE) // 2

    @pytest.mark.skipif(sys.platform != "linux", reason="page return timing is platform-specific")
    def test_release_all_eventually_lowers_resident_memory(
        self, real_session: HarnessSession
    ) -> None:
        real_session.allocate(BLOCKS)
        peak = real_session.sampler.sample().used_bytes

        assert real_session.release_all() == BLOCKS
        used = _wait_for_used_below(real_session.sampler, peak - (BLOCKS * BLOCK_SIZE) // 2)

        assert used < peak - (BLOCKS * BLOCK_SIZE) // 2

    def test_status_is_bounded_by_system_memory(self, real_session: HarnessSession) -> None:
        status = real_session.status()
        assert status.sample.is_bounded
        assert status.sample.percentage is not None
        assert 0 <= status.sample.percentage <= 100
        assert status.tier is not None

    def test_unbounded_probe_sample(self) -> None:
        sampler = UsageSampler(PsutilMemoryProbe(limit_source="none"))
        sample = sampler.sample()
        assert sample.used_bytes > 0
        assert sample.percentage is None
        assert sampler.try_classify(sample) is None
