# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Domain services for synthetic allocation and usage classification.

Services encapsulate domain logic that doesn't belong to entities.
classify_usage is stateless - it operates on the sample passed in.

AllocationPool is an exception: it maintains state (the ordered blocks
it holds) but has no identity. The driver owns the pool and injects it
wherever it is needed; there is no module-level instance.
"""

import threading
from collections.abc import Callable
from typing import TYPE_CHECKING

from heap_tester.domain.entities import MemoryBlock
from heap_tester.domain.errors import (
    BlockOperationError,
    MemoryExhaustedError,
    UnboundedSampleError,
)
from heap_tester.domain.value_objects import (
    HIGH_THRESHOLD_PERCENT,
    MEDIUM_THRESHOLD_PERCENT,
    Tier,
    UsageSample,
)

if TYPE_CHECKING:
    from heap_tester.ports.outbound import ReclamationPort

BlockFactory = Callable[[int], bytearray]


class AllocationPool:
    """Holds fixed-size memory blocks to simulate memory pressure.

    Blocks are appended in batches and removed last-in-first-out, which
    mirrors an "undo last allocation" control surface.

    Thread safety:
    - THREAD-SAFE: All operations protected by internal lock.
    - Reads acquire the same lock, so they never see a partially
      updated sequence.
    - The reclamation hint runs after the lock is released.

    Attributes:
        block_factory: Creates the payload for one block of a given size.
            Defaults to ``bytearray`` (zero-filled, so pages are touched).
        reclaimer: Optional host reclamation hint fired after release.

    Example:
        >>> pool = AllocationPool()
        >>> pool.allocate(block_size=1024, count=3)
        3
        >>> pool.release(2)
        2
        >>> pool.size()
        1
        >>> pool.release_all()
        1
    """

    def __init__(
        self,
        block_factory: BlockFactory = bytearray,
        reclaimer: "ReclamationPort | None" = None,
    ) -> None:
        self.block_factory = block_factory
        self.reclaimer = reclaimer

        self._lock = threading.Lock()
        self._blocks: list[MemoryBlock] = []
        self._next_block_id = 0

    def allocate(self, block_size: int, count: int) -> int:
        """Append ``count`` new blocks of ``block_size`` bytes.

        Thread-safe: Multiple threads can call concurrently.

        Args:
            block_size: Size of each block in bytes.
            count: Number of blocks to append.

        Returns:
            Number of blocks appended (always ``count`` on success).

        Raises:
            BlockOperationError: If block_size <= 0 or count <= 0.
            MemoryExhaustedError: If the host cannot satisfy a block. Blocks
                appended before the failure are kept (no rollback).
        """
        if block_size <= 0:
            raise BlockOperationError(f"block_size must be > 0, got {block_size}")
        if count <= 0:
            raise BlockOperationError(f"count must be > 0, got {count}")

        with self._lock:
            for created in range(count):
                try:
                    data = self.block_factory(block_size)
                except (MemoryError, OverflowError) as e:
                    raise MemoryExhaustedError(
                        f"Out of memory after {created} of {count} blocks "
                        f"({block_size} bytes each). Pool holds {len(self._blocks)} blocks.",
                        requested=count,
                        allocated=created,
                    ) from e

                self._blocks.append(
                    MemoryBlock(block_id=self._next_block_id, size_bytes=block_size, data=data)
                )
                self._next_block_id += 1

            return count

    def release(self, count: int) -> int:
        """Remove up to ``count`` of the most recently added blocks.

        Releasing more blocks than are held is clamped, not an error.
        The reclamation hint is fired on every call, even when nothing was
        removed; the host may reclaim the memory later or not at all.

        Args:
            count: Maximum number of blocks to remove.

        Returns:
            Number of blocks actually removed.

        Raises:
            BlockOperationError: If count < 0.
        """
        if count < 0:
            raise BlockOperationError(f"count must be >= 0, got {count}")

        with self._lock:
            removed = self._pop_tail(count)
        return self._drop(removed)

    def release_all(self) -> int:
        """Remove every block. Equivalent to ``release(size())``."""
        with self._lock:
            removed = self._pop_tail(len(self._blocks))
        return self._drop(removed)

    def _pop_tail(self, count: int) -> list[MemoryBlock]:
        """Detach up to ``count`` blocks from the tail. Caller holds the lock."""
        n_release = min(count, len(self._blocks))
        if n_release == 0:
            return []
        removed = self._blocks[-n_release:]
        del self._blocks[-n_release:]
        return removed

    def _drop(self, removed: list[MemoryBlock]) -> int:
        """Discard payloads of detached blocks and fire the reclamation hint."""
        n_released = len(removed)
        for block in removed:
            block.discard()
        removed.clear()

        if self.reclaimer is not None:
            self.reclaimer.request_reclamation()
        return n_released

    def size(self) -> int:
        """Get count of blocks currently held."""
        with self._lock:
            return len(self._blocks)

    def held_bytes(self) -> int:
        """Sum of block sizes currently held (bytes)."""
        with self._lock:
            return sum(block.size_bytes for block in self._blocks)

    def block_ids(self) -> list[int]:
        """Block identifiers in insertion order (oldest first)."""
        with self._lock:
            return [block.block_id for block in self._blocks]


def classify_usage(sample: UsageSample) -> Tier:
    """Classify a bounded usage sample into a Tier.

    Thresholds on the floored percentage: below 50 is LOW, 50 up to 74 is
    MEDIUM, 75 and above is HIGH.

    Args:
        sample: Sample with a memory limit.

    Returns:
        Tier for the sample's percentage.

    Raises:
        UnboundedSampleError: If the sample has no memory limit. Callers
            must check ``sample.is_bounded`` first.
    """
    percentage = sample.percentage
    if percentage is None:
        raise UnboundedSampleError(
            f"Cannot classify unbounded sample (used_bytes={sample.used_bytes}, no limit)"
        )
    if percentage < MEDIUM_THRESHOLD_PERCENT:
        return Tier.LOW
    if percentage < HIGH_THRESHOLD_PERCENT:
        return Tier.MEDIUM
    return Tier.HIGH
