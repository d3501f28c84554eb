# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Domain exception hierarchy.

All domain-level errors inherit from HeapTesterError.
This allows clean exception handling at adapter boundaries.
"""


class HeapTesterError(Exception):
    """Base exception for all domain errors."""


class MemoryExhaustedError(HeapTesterError):
    """Host could not satisfy a block allocation (out of memory).

    Blocks created before the failure stay in the pool; ``allocated``
    tells the caller how many of the ``requested`` blocks were appended.
    """

    def __init__(self, message: str, requested: int = 0, allocated: int = 0) -> None:
        super().__init__(message)
        self.requested = requested
        self.allocated = allocated


class BlockOperationError(HeapTesterError):
    """Pool operation called with invalid arguments (size, count)."""


class BlockValidationError(HeapTesterError):
    """MemoryBlock entity validation failed (block_id, size_bytes out of range)."""


class SampleValidationError(HeapTesterError):
    """UsageSample validation failed (negative used bytes, non-positive limit)."""


class UnboundedSampleError(HeapTesterError):
    """Tier classification requested for a sample without a memory limit."""
