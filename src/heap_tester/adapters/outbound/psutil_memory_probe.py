# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Host memory probe backed by psutil.

Used memory is the resident set size of the current process. The limit
is taken from one of several sources, since a Python process has no
single configured heap maximum:

- ``rlimit``: soft RLIMIT_AS (address-space limit); unlimited -> None
- ``system``: total physical memory
- ``fixed``: a byte count supplied by configuration
- ``none``: always unbounded
"""

import psutil
import structlog

from heap_tester.adapters.config.settings import LimitSource, SamplerSettings
from heap_tester.domain.entities import MIB

try:
    import resource
except ImportError:  # Windows has no resource module; rlimit is then unbounded
    resource = None  # type: ignore[assignment]

logger = structlog.get_logger(__name__)


class PsutilMemoryProbe:
    """HostMemoryPort implementation using psutil.

    Every call queries the OS; nothing is cached.

    Args:
        limit_source: Where limit_bytes() reads the limit from.
        fixed_limit_bytes: Limit returned when limit_source is "fixed".
        process: Process to measure (default: the current process).
    """

    def __init__(
        self,
        limit_source: LimitSource = "system",
        fixed_limit_bytes: int | None = None,
        process: psutil.Process | None = None,
    ) -> None:
        if limit_source == "fixed" and (fixed_limit_bytes is None or fixed_limit_bytes <= 0):
            raise ValueError(
                f"fixed_limit_bytes must be > 0 for limit_source='fixed', got {fixed_limit_bytes}"
            )
        self.limit_source = limit_source
        self.fixed_limit_bytes = fixed_limit_bytes
        self._process = process if process is not None else psutil.Process()

    @classmethod
    def from_settings(cls, settings: SamplerSettings) -> "PsutilMemoryProbe":
        """Build a probe from sampler settings."""
        fixed = settings.fixed_limit_mb * MIB if settings.fixed_limit_mb is not None else None
        return cls(limit_source=settings.limit_source, fixed_limit_bytes=fixed)

    def used_bytes(self) -> int:
        """Resident set size of the measured process in bytes."""
        return int(self._process.memory_info().rss)

    def limit_bytes(self) -> int | None:
        """Memory limit in bytes, or None when unbounded."""
        if self.limit_source == "none":
            return None
        if self.limit_source == "fixed":
            return self.fixed_limit_bytes
        if self.limit_source == "system":
            return int(psutil.virtual_memory().total)
        return self._rlimit_bytes()

    def _rlimit_bytes(self) -> int | None:
        if resource is None:
            return None
        soft, _hard = resource.getrlimit(resource.RLIMIT_AS)
        if soft == resource.RLIM_INFINITY or soft <= 0:
            return None
        return int(soft)
