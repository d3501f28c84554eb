# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Domain entities for synthetic memory allocation.

Entities represent objects with identity and lifecycle in the domain.
Unlike value objects, entities are mutable and can change over time.
"""

from dataclasses import dataclass, field

from heap_tester.domain.errors import BlockValidationError

MIB = 1024 * 1024
DEFAULT_BLOCK_SIZE_BYTES = 10 * MIB


@dataclass(eq=False)
class MemoryBlock:
    """Single fixed-size buffer held by an AllocationPool.

    Attributes:
        block_id: Identifier unique within the owning pool (monotonic).
        size_bytes: Buffer size in bytes.
        data: Opaque payload. The pool is its only owner; dropping the
            block drops the last reference to the buffer.

    Example:
        >>> block = MemoryBlock(block_id=0, size_bytes=16, data=bytearray(16))
        >>> len(block)
        16
    """

    block_id: int
    size_bytes: int
    data: bytearray | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        """Validate block invariants."""
        if self.block_id < 0:
            raise BlockValidationError(f"block_id must be >= 0, got {self.block_id}")
        if self.size_bytes <= 0:
            raise BlockValidationError(f"size_bytes must be > 0, got {self.size_bytes}")
        if self.data is not None and len(self.data) != self.size_bytes:
            raise BlockValidationError(
                f"data length ({len(self.data)}) must equal size_bytes ({self.size_bytes})"
            )

    def __len__(self) -> int:
        return self.size_bytes

    def discard(self) -> None:
        """Drop the payload reference so the buffer can be reclaimed."""
        self.data = None
