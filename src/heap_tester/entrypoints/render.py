# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Text rendering of harness status for the CLI driver.

Units and colors live here, not in the core: bytes are shown as whole
MiB, tiers as green/yellow/red.
"""

import typer

from heap_tester.domain.entities import MIB
from heap_tester.domain.value_objects import HarnessStatus, Tier

TIER_COLORS = {
    Tier.LOW: typer.colors.GREEN,
    Tier.MEDIUM: typer.colors.YELLOW,
    Tier.HIGH: typer.colors.RED,
}

BAR_WIDTH = 30


def to_mib(n_bytes: int) -> int:
    """Whole MiB, truncated."""
    return n_bytes // MIB


def progress_bar(percentage: int | None, width: int = BAR_WIDTH) -> str:
    """Fixed-width text bar, e.g. ``[#######.......]``."""
    if percentage is None:
        return "[" + "?" * width + "]"
    filled = width * percentage // 100
    return "[" + "#" * filled + "." * (width - filled) + "]"


def _tier_label(tier: Tier | None) -> str:
    if tier is None:
        return "n/a"
    return typer.style(tier.value.upper(), fg=TIER_COLORS[tier], bold=True)


def format_status(status: HarnessStatus) -> str:
    """Multi-line status panel: used, max, usage, bar, pool."""
    sample = status.sample
    max_text = f"{to_mib(sample.max_bytes)} MB" if sample.max_bytes is not None else "unbounded"
    usage_text = f"{sample.percentage}%" if sample.percentage is not None else "n/a"

    bar = progress_bar(sample.percentage)
    if status.tier is not None:
        bar = typer.style(bar, fg=TIER_COLORS[status.tier])

    return "\n".join(
        [
            f"Used: {to_mib(sample.used_bytes)} MB",
            f"Max: {max_text}",
            f"Usage: {usage_text} ({_tier_label(status.tier)})",
            bar,
            f"Blocks held: {status.block_count} ({to_mib(status.held_bytes)} MB)",
        ]
    )


def format_line(status: HarnessStatus) -> str:
    """Single-line status for periodic output."""
    sample = status.sample
    max_text = f"{to_mib(sample.max_bytes)} MB" if sample.max_bytes is not None else "unbounded"
    usage_text = f"{sample.percentage}%" if sample.percentage is not None else "n/a"
    return (
        f"Used: {to_mib(sample.used_bytes)} MB | Max: {max_text} | "
        f"Usage: {usage_text} {_tier_label(status.tier)} | Blocks: {status.block_count}"
    )
