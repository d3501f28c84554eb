# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Memory leak detection tests using tracemalloc.

Verifies that AllocationPool drops its blocks on release: many
allocate/release cycles must not grow traced memory, and released
payloads must not stay referenced.
"""

import gc
import tracemalloc
import weakref

import pytest

from heap_tester.domain.services import AllocationPool

pytestmark = pytest.mark.unit


class _TrackedBuffer(bytearray):
    """bytearray subclass that supports weak references."""


class TestAllocationPoolMemoryLeaks:
    """Verify AllocationPool doesn't leak memory on allocate/release cycles."""

    def test_allocate_release_cycle_no_growth(self) -> None:
        """1000 allocate/release cycles of 64 KiB blocks should not grow memory."""
        pool = AllocationPool()

        tracemalloc.start()
        snapshot_before = tracemalloc.take_snapshot()

        for _ in range(1000):
            pool.allocate(block_size=64 * 1024, count=4)
            pool.release_all()

        snapshot_after = tracemalloc.take_snapshot()
        tracemalloc.stop()

        stats = snapshot_after.compare_to(snapshot_before, "lineno")
        total_growth = sum(s.size_diff for s in stats if s.size_diff > 0)

        assert total_growth < 1_000_000, (
            f"Memory grew {total_growth / 1024:.1f} KB over 1000 allocate/release cycles"
        )

    def test_released_payloads_are_unreferenced(self) -> None:
        refs: list[weakref.ref] = []

        def factory(size: int) -> bytearray:
            buf = _TrackedBuffer(size)
            refs.append(weakref.ref(buf))
            return buf

        pool = AllocationPool(block_factory=factory)
        pool.allocate(block_size=1024, count=3)
        pool.release(2)
        gc.collect()

        assert refs[0]() is not None
        assert refs[1]() is None
        assert refs[2]() is None

        pool.release_all()
        gc.collect()
        assert refs[0]() is None
