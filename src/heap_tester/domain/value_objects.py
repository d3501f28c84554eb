# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Domain value objects (immutable data structures).

Value objects have no identity - two instances with the same values
are considered equal. A UsageSample is created fresh on every sample
call and never mutated afterwards.
"""

from dataclasses import dataclass
from enum import Enum

from heap_tester.domain.errors import SampleValidationError

# Tier thresholds on the integer usage percentage
MEDIUM_THRESHOLD_PERCENT = 50
HIGH_THRESHOLD_PERCENT = 75


class Tier(Enum):
    """Coarse classification of memory usage percentage."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        """Ordinal position (LOW=0, MEDIUM=1, HIGH=2) for comparisons."""
        return _TIER_ORDER.index(self)


_TIER_ORDER = (Tier.LOW, Tier.MEDIUM, Tier.HIGH)


@dataclass(frozen=True)
class UsageSample:
    """Snapshot of used and maximum memory at one point in time.

    Attributes:
        used_bytes: Memory currently in use, as reported by the host.
        max_bytes: Configured memory limit, or None when the host
            reports no limit (unbounded).

    Example:
        >>> sample = UsageSample(used_bytes=750, max_bytes=1000)
        >>> sample.percentage
        75
        >>> UsageSample(used_bytes=100, max_bytes=None).percentage is None
        True
    """

    used_bytes: int
    max_bytes: int | None = None

    def __post_init__(self) -> None:
        """Validate sample invariants."""
        if self.used_bytes < 0:
            raise SampleValidationError(f"used_bytes must be >= 0, got {self.used_bytes}")
        if self.max_bytes is not None and self.max_bytes <= 0:
            raise SampleValidationError(
                f"max_bytes must be > 0 or None (unbounded), got {self.max_bytes}"
            )

    @property
    def is_bounded(self) -> bool:
        """True when the host reported a memory limit."""
        return self.max_bytes is not None

    @property
    def percentage(self) -> int | None:
        """Usage as an integer percentage of max_bytes (floored, 0-100).

        Resident memory can exceed a soft limit, so the value is clamped
        to 100. None when the sample is unbounded.
        """
        if self.max_bytes is None:
            return None
        return min(100, self.used_bytes * 100 // self.max_bytes)


@dataclass(frozen=True)
class HarnessStatus:
    """Combined pool and usage snapshot for a driver to render.

    Attributes:
        block_count: Blocks currently held by the pool.
        held_bytes: Sum of sizes of blocks currently held.
        sample: Host memory sample taken for this snapshot.
        tier: Usage tier, or None when the sample is unbounded.
    """

    block_count: int
    held_bytes: int
    sample: UsageSample
    tier: Tier | None = None
