# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Reclamation hint backed by the cyclic garbage collector.

Released blocks are freed by reference counting as soon as the pool
drops them; gc.collect() additionally sweeps reference cycles. Neither
guarantees the allocator returns pages to the OS, so resident memory
may fall later than the call, or not at all.
"""

import gc

import structlog

logger = structlog.get_logger(__name__)


class GcReclaimer:
    """ReclamationPort implementation calling ``gc.collect()``."""

    def __init__(self, generation: int = 2) -> None:
        if generation not in (0, 1, 2):
            raise ValueError(f"generation must be 0, 1 or 2, got {generation}")
        self.generation = generation

    def request_reclamation(self) -> None:
        """Run a collection of the configured generation."""
        collected = gc.collect(self.generation)
        logger.debug("reclamation_requested", generation=self.generation, collected=collected)
