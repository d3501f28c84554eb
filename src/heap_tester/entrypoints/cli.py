# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""CLI entrypoint for heap-tester.

Usage:
    heap-tester status
    heap-tester monitor --interval 1 --iterations 10
    heap-tester session --count 3
    heap-tester ramp --step 2 --max-blocks 200 --stop-at high
"""

import time
from dataclasses import dataclass

import typer

from heap_tester import __version__
from heap_tester.adapters.config.logging import configure_logging, get_logger
from heap_tester.adapters.config.settings import Settings, get_settings
from heap_tester.adapters.outbound.gc_reclaimer import GcReclaimer
from heap_tester.adapters.outbound.psutil_memory_probe import PsutilMemoryProbe
from heap_tester.application.harness import HarnessSession
from heap_tester.application.usage_sampler import UsageSampler
from heap_tester.domain.entities import MIB
from heap_tester.domain.errors import HeapTesterError, MemoryExhaustedError
from heap_tester.domain.services import AllocationPool
from heap_tester.domain.value_objects import Tier
from heap_tester.entrypoints.render import format_line, format_status
from heap_tester.ports.outbound import HostMemoryPort

app = typer.Typer(
    name="heap-tester",
    help="Allocate and release memory blocks and watch process memory usage",
    add_completion=False,
)

OUT_OF_MEMORY_MESSAGE = "Out of memory! Try releasing some memory first."

# LOW would end a ramp before its first allocation.
RAMP_STOP_TIERS = {tier.value: tier for tier in (Tier.MEDIUM, Tier.HIGH)}

SESSION_HELP = """Commands:
  allocate [n]   allocate n blocks (default: current count)
  release [n]    release the n most recent blocks (default: current count)
  clear          release all blocks
  count <n>      set the default block count
  status         show memory usage
  help           show this help
  quit           leave the session"""


def build_probe(settings: Settings) -> HostMemoryPort:
    """Create the host memory probe for the configured limit source."""
    return PsutilMemoryProbe.from_settings(settings.sampler)


def build_session(settings: Settings, block_size_mb: int | None = None) -> HarnessSession:
    """Compose pool, sampler and reclaimer into a HarnessSession."""
    pool = AllocationPool(reclaimer=GcReclaimer())
    sampler = UsageSampler(build_probe(settings))
    size_mb = block_size_mb or settings.pool.block_size_mb
    return HarnessSession(pool=pool, sampler=sampler, block_size=size_mb * MIB)


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Log level (default: from settings)",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Render logs as JSON (default: from settings)",
    ),
) -> None:
    """Configure logging before any command runs."""
    settings = get_settings()
    configure_logging(
        log_level or settings.logging.level,
        json_output=json_logs or settings.logging.json_output,
    )


@app.command()
def status() -> None:
    """Take one memory sample and print it."""
    settings = get_settings()
    try:
        harness = build_session(settings)
        typer.echo(format_status(harness.status()))
    except HeapTesterError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


@app.command()
def monitor(
    interval: float = typer.Option(
        None,
        "--interval",
        "-i",
        min=0.0,
        help="Seconds between samples (default: from settings)",
    ),
    iterations: int = typer.Option(
        0,
        "--iterations",
        "-n",
        min=0,
        help="Number of samples to print (0 = until interrupted)",
    ),
) -> None:
    """Print a memory sample periodically.

    Example:
        $ heap-tester monitor
        $ heap-tester monitor --interval 0.5 --iterations 20
    """
    settings = get_settings()
    final_interval = settings.sampler.refresh_interval_seconds if interval is None else interval
    harness = build_session(settings)

    taken = 0
    try:
        while True:
            typer.echo(format_line(harness.status()))
            taken += 1
            if iterations and taken >= iterations:
                break
            time.sleep(final_interval)
    except KeyboardInterrupt:
        typer.echo("Stopped.")


@dataclass
class SessionState:
    """Mutable state of an interactive session (the block count control)."""

    count: int
    max_count: int


def _parse_count(arg: str | None, state: SessionState) -> int:
    if arg is None:
        return state.count
    value = int(arg)
    if value < 1 or value > state.max_count:
        raise ValueError(f"count must be between 1 and {state.max_count}")
    return value


def handle_command(harness: HarnessSession, state: SessionState, line: str) -> bool:
    """Run one interactive command.

    Returns:
        False when the session should end, True otherwise.
    """
    parts = line.split()
    if not parts:
        return True
    command, args = parts[0].lower(), parts[1:]
    arg = args[0] if args else None

    try:
        if command in ("quit", "q", "exit"):
            return False
        if command in ("help", "h", "?"):
            typer.echo(SESSION_HELP)
        elif command in ("allocate", "a"):
            try:
                harness.allocate(_parse_count(arg, state))
            except MemoryExhaustedError:
                typer.echo(OUT_OF_MEMORY_MESSAGE, err=True)
            typer.echo(format_status(harness.status()))
        elif command in ("release", "r"):
            released = harness.release(_parse_count(arg, state))
            typer.echo(f"Released {released} block(s)")
            typer.echo(format_status(harness.status()))
        elif command in ("clear", "c"):
            released = harness.release_all()
            typer.echo(f"Released {released} block(s)")
            typer.echo(format_status(harness.status()))
        elif command in ("count", "n"):
            if arg is None:
                typer.echo(f"Count: {state.count} (block size {harness.block_size // MIB} MB)")
            else:
                state.count = _parse_count(arg, state)
                typer.echo(f"Count set to {state.count}")
        elif command in ("status", "s"):
            typer.echo(format_status(harness.status()))
        else:
            typer.echo(f"Unknown command '{command}'. Type 'help' for commands.")
    except ValueError as e:
        typer.echo(f"Invalid argument: {e}")
    return True


@app.command()
def session(
    count: int = typer.Option(
        None,
        "--count",
        "-c",
        min=1,
        help="Default blocks per allocate/release (default: from settings)",
    ),
    block_size_mb: int = typer.Option(
        None,
        "--block-size-mb",
        "-b",
        min=1,
        help="Block size in MiB (default: from settings)",
    ),
) -> None:
    """Allocate and release blocks interactively.

    Example:
        $ heap-tester session --count 3
        heap-tester> allocate
        heap-tester> release 2
        heap-tester> quit
    """
    settings = get_settings()
    max_count = max(settings.pool.max_count, count or 0)
    state = SessionState(count=count or settings.pool.default_count, max_count=max_count)
    harness = build_session(settings, block_size_mb=block_size_mb)
    logger = get_logger(__name__)
    logger.info("session_started", block_size=harness.block_size, count=state.count)

    typer.echo(format_status(harness.status()))
    typer.echo("Type 'help' for commands.")
    try:
        while True:
            try:
                line = typer.prompt(
                    "heap-tester", default="", show_default=False, prompt_suffix="> "
                )
            except typer.Abort:
                break
            if not handle_command(harness, state, line):
                break
    except KeyboardInterrupt:
        pass
    finally:
        released = harness.release_all()
        logger.info("session_ended", blocks_released=released)


@app.command()
def ramp(
    step: int = typer.Option(
        None,
        "--step",
        "-s",
        min=1,
        help="Blocks allocated per tick (default: from settings)",
    ),
    max_blocks: int = typer.Option(
        100,
        "--max-blocks",
        "-m",
        min=1,
        help="Stop once the pool holds this many blocks",
    ),
    interval: float = typer.Option(
        None,
        "--interval",
        "-i",
        min=0.0,
        help="Seconds between ticks (default: from settings)",
    ),
    stop_at: str = typer.Option(
        "high",
        "--stop-at",
        help="Stop once usage reaches this tier (medium or high)",
    ),
    block_size_mb: int = typer.Option(
        None,
        "--block-size-mb",
        "-b",
        min=1,
        help="Block size in MiB (default: from settings)",
    ),
) -> None:
    """Raise memory pressure step by step, then release everything.

    Example:
        $ heap-tester ramp --step 2 --max-blocks 200
        $ heap-tester ramp --stop-at medium --interval 0.2
    """
    target = RAMP_STOP_TIERS.get(stop_at.lower())
    if target is None:
        typer.echo(f"Error: --stop-at must be one of medium, high, got '{stop_at}'", err=True)
        raise typer.Exit(code=2)

    settings = get_settings()
    final_step = step or settings.pool.default_count
    final_interval = settings.sampler.refresh_interval_seconds if interval is None else interval
    harness = build_session(settings, block_size_mb=block_size_mb)

    reason = "max blocks reached"
    peak_blocks = 0
    try:
        while True:
            current = harness.status()
            typer.echo(format_line(current))
            peak_blocks = max(peak_blocks, current.block_count)
            if current.tier is not None and current.tier.rank >= target.rank:
                reason = f"usage reached {current.tier.value}"
                break
            if current.block_count >= max_blocks:
                break
            try:
                harness.allocate(min(final_step, max_blocks - current.block_count))
            except MemoryExhaustedError:
                typer.echo(OUT_OF_MEMORY_MESSAGE, err=True)
                peak_blocks = max(peak_blocks, harness.pool.size())
                reason = "memory exhausted"
                break
            time.sleep(final_interval)
    except KeyboardInterrupt:
        reason = "interrupted"
    finally:
        released = harness.release_all()

    typer.echo(f"Stopped: {reason}. Peak blocks: {peak_blocks}. Released {released} block(s).")


@app.command()
def version() -> None:
    """Show version information."""
    typer.echo(f"heap-tester v{__version__}")


@app.command()
def config() -> None:
    """Show current configuration."""
    settings = get_settings()

    typer.echo("=" * 60)
    typer.echo("heap-tester - Configuration")
    typer.echo("=" * 60)
    typer.echo()
    typer.echo("[Pool]")
    typer.echo(f"  Block size: {settings.pool.block_size_mb} MB")
    typer.echo(f"  Default count: {settings.pool.default_count}")
    typer.echo(f"  Max count: {settings.pool.max_count}")
    typer.echo()
    typer.echo("[Sampler]")
    typer.echo(f"  Limit source: {settings.sampler.limit_source}")
    if settings.sampler.fixed_limit_mb is not None:
        typer.echo(f"  Fixed limit: {settings.sampler.fixed_limit_mb} MB")
    typer.echo(f"  Refresh interval: {settings.sampler.refresh_interval_seconds} s")
    typer.echo()
    typer.echo("[Logging]")
    typer.echo(f"  Level: {settings.logging.level}")
    typer.echo(f"  JSON output: {settings.logging.json_output}")
    typer.echo("=" * 60)


def main() -> None:
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
