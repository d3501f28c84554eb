# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Outbound port interfaces (driven adapters).

These ports define the contracts for the core to query and nudge the
host runtime. Implementations are provided by outbound adapters
(psutil probe, gc reclaimer).

All interfaces use Protocol (PEP 544) for structural typing, allowing
implicit implementation without inheritance.
"""

from typing import Protocol


class HostMemoryPort(Protocol):
    """Port for host memory usage reporting.

    Read-only. Each call reflects the current moment; implementations
    must not cache.
    """

    def used_bytes(self) -> int:
        """Current memory in use by this process.

        Returns:
            Used memory in bytes (>= 0).
        """
        ...

    def limit_bytes(self) -> int | None:
        """Maximum memory this process may use.

        Returns:
            Limit in bytes (> 0), or None when no limit is configured.
        """
        ...


class ReclamationPort(Protocol):
    """Port for the host reclamation hint.

    Fire-and-forget: no return value, no guarantee of effect or timing.
    """

    def request_reclamation(self) -> None:
        """Suggest the host reclaim unreferenced memory now."""
        ...
