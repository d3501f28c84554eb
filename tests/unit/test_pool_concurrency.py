# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Concurrency tests for AllocationPool.

Tests that allocate/release from several threads never lose updates and
that readers always see a consistent block count.
"""

import threading

import pytest
from conftest import TEST_BLOCK_SIZE, RecordingReclaimer

from heap_tester.domain.services import AllocationPool

pytestmark = pytest.mark.unit


@pytest.fixture
def shared_pool() -> AllocationPool:
    return AllocationPool(reclaimer=RecordingReclaimer())


class TestPoolConcurrency:
    """Tests for thread-safe pool mutation."""

    def test_concurrent_allocations_are_all_counted(self, shared_pool: AllocationPool) -> None:
        """10 threads x 20 allocations of 3 blocks -> 600 blocks, unique ids."""
        errors: list[Exception] = []

        def allocate_many() -> None:
            try:
                for _ in range(20):
                    shared_pool.allocate(TEST_BLOCK_SIZE, 3)
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=allocate_many) for _ in range(10)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(errors) == 0, f"Errors occurred: {errors}"
        assert shared_pool.size() == 600
        ids = shared_pool.block_ids()
        assert len(set(ids)) == 600
        assert ids == sorted(ids)

    def test_concurrent_allocate_and_release_net_count(self, shared_pool: AllocationPool) -> None:
        """Allocators add 200 blocks while releasers remove up to 100."""
        shared_pool.allocate(TEST_BLOCK_SIZE, 100)
        released: list[int] = []
        lock = threading.Lock()

        def allocator() -> None:
            for _ in range(50):
                shared_pool.allocate(TEST_BLOCK_SIZE, 1)

        def releaser() -> None:
            for _ in range(25):
                n = shared_pool.release(1)
                with lock:
                    released.append(n)

        threads = [threading.Thread(target=allocator) for _ in range(4)]
        threads += [threading.Thread(target=releaser) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        # Pool never empties (100 pre-allocated >= 100 possible releases),
        # so every release removed exactly one block.
        assert sum(released) == 100
        assert shared_pool.size() == 100 + 200 - 100

    def test_readers_see_whole_batches(self, shared_pool: AllocationPool) -> None:
        """Sizes observed while batches of 5 are added are multiples of 5."""
        observed: list[int] = []
        done = threading.Event()

        def reader() -> None:
            while not done.is_set():
                observed.append(shared_pool.size())

        reader_thread = threading.Thread(target=reader)
        reader_thread.start()
        for _ in range(100):
            shared_pool.allocate(TEST_BLOCK_SIZE, 5)
        done.set()
        reader_thread.join()

        assert all(size % 5 == 0 for size in observed)
        assert shared_pool.size() == 500

    def test_concurrent_release_all_releases_each_block_once(
        self, shared_pool: AllocationPool
    ) -> None:
        shared_pool.allocate(TEST_BLOCK_SIZE, 250)
        results: list[int] = []
        lock = threading.Lock()

        def clear() -> None:
            n = shared_pool.release_all()
            with lock:
                results.append(n)

        threads = [threading.Thread(target=clear) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sum(results) == 250
        assert shared_pool.size() == 0
