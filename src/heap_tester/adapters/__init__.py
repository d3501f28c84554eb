# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Infrastructure adapters (configuration, host memory, reclamation)."""
