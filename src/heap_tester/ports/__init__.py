# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Port interfaces (Protocol-based) between the core and its drivers/hosts."""
