# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Inbound port interfaces (driving adapters).

These ports describe the surface a driver (CLI, GUI, test harness)
calls into. AllocationPool and UsageSampler satisfy them structurally.
"""

from typing import Protocol

from heap_tester.domain.value_objects import Tier, UsageSample


class AllocationPoolPort(Protocol):
    """Driver-facing contract for synthetic allocation."""

    def allocate(self, block_size: int, count: int) -> int:
        """Append ``count`` blocks of ``block_size`` bytes.

        Raises:
            MemoryExhaustedError: If the host runs out of memory. Blocks
                created before the failure are kept.
        """
        ...

    def release(self, count: int) -> int:
        """Remove up to ``count`` most recent blocks; returns number removed."""
        ...

    def release_all(self) -> int:
        """Remove every block; returns number removed."""
        ...

    def size(self) -> int:
        """Number of blocks held."""
        ...

    def held_bytes(self) -> int:
        """Total bytes held by the pool's blocks."""
        ...


class UsageSamplerPort(Protocol):
    """Driver-facing contract for usage sampling."""

    def sample(self) -> UsageSample:
        """Query the host once and return a fresh sample."""
        ...

    def classify(self, sample: UsageSample) -> Tier:
        """Classify a bounded sample.

        Raises:
            UnboundedSampleError: If the sample has no memory limit.
        """
        ...
