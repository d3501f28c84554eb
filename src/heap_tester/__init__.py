# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""heap-tester: Synthetic memory pressure and heap usage sampling.

Allocates and releases fixed-size memory blocks on demand and samples
process memory usage so a driver can display used/max/percentage and a
coarse usage tier.

Architecture: Hexagonal (Ports & Adapters)
- Domain core: Pure business logic (no external dependencies)
- Ports: Protocol-based interfaces
- Adapters: Infrastructure bindings (psutil, gc, pydantic-settings, structlog)
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
