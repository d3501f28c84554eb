# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""HarnessSession: glue between an AllocationPool and a UsageSampler.

Drivers create one pool and one sampler, inject both here, and call
the session from their event loop. The session adds logging and a
combined status snapshot; it adds no retry or remediation policy.
"""

import structlog

from heap_tester.domain.errors import BlockOperationError, MemoryExhaustedError
from heap_tester.domain.value_objects import HarnessStatus
from heap_tester.ports.inbound import AllocationPoolPort, UsageSamplerPort

logger = structlog.get_logger(__name__)


class HarnessSession:
    """Driver-facing facade over an injected pool and sampler.

    Attributes:
        pool: Pool holding the synthetic blocks.
        sampler: Sampler reporting host memory usage.
        block_size: Size in bytes of each block this session allocates.
    """

    def __init__(
        self,
        pool: AllocationPoolPort,
        sampler: UsageSamplerPort,
        block_size: int,
    ) -> None:
        if block_size <= 0:
            raise BlockOperationError(f"block_size must be > 0, got {block_size}")
        self.pool = pool
        self.sampler = sampler
        self.block_size = block_size

    def allocate(self, count: int) -> int:
        """Allocate ``count`` blocks of the session's block size.

        Raises:
            MemoryExhaustedError: Propagated unchanged; the blocks created
                before the failure stay in the pool.
        """
        try:
            allocated = self.pool.allocate(self.block_size, count)
        except MemoryExhaustedError as e:
            logger.warning(
                "allocation_exhausted",
                requested=e.requested,
                allocated=e.allocated,
                block_size=self.block_size,
                pool_size=self.pool.size(),
            )
            raise
        logger.info(
            "blocks_allocated",
            blocks_allocated=allocated,
            block_size=self.block_size,
            pool_size=self.pool.size(),
        )
        return allocated

    def release(self, count: int) -> int:
        """Release up to ``count`` most recent blocks."""
        released = self.pool.release(count)
        logger.info("blocks_released", blocks_released=released, pool_size=self.pool.size())
        return released

    def release_all(self) -> int:
        """Release every block."""
        released = self.pool.release_all()
        logger.info("pool_cleared", blocks_released=released)
        return released

    def status(self) -> HarnessStatus:
        """Sample the host and combine it with the pool's current size."""
        block_count = self.pool.size()
        held_bytes = self.pool.held_bytes()
        sample = self.sampler.sample()
        tier = self.sampler.classify(sample) if sample.is_bounded else None
        return HarnessStatus(
            block_count=block_count,
            held_bytes=held_bytes,
            sample=sample,
            tier=tier,
        )
