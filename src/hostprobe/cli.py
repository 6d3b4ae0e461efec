"""CLI interface for hostprobe."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading
import time

from . import __version__
from .collector.base import MetricRecord
from .config import ConfigError, load_config


def _print_records(records: list[MetricRecord]) -> None:
    for record in records:
        print(f"{record.name} {record.value}")


def print_table(records: list[MetricRecord]) -> None:
    """Pretty-print metric records to the terminal using Rich."""
    from rich.console import Console
    from rich.table import Table

    table = Table(title="hostprobe snapshot")
    table.add_column("Metric", style="green")
    table.add_column("Value", justify="right", style="cyan")
    for record in records:
        table.add_row(record.name, record.value)

    console = Console()
    console.print(table)
    if not records:
        console.print("  (no metrics collected)")


def _positive_float(text: str) -> float:
    try:
        value = float(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {text!r}") from None
    if not value > 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {text}")
    return value


def collect_seeded(collectors: list) -> None:
    """Seed every collector, then sample each one again after its own period.

    Rates are divided by the configured period, so each second sample must
    follow its seed by that collector's period and not the longest one.
    """
    due = []
    for collector in collectors:
        due.append((time.monotonic() + collector.period_ms / 1000.0, collector))
        collector.collect_once()
    for deadline, collector in sorted(due, key=lambda item: item[0]):
        remaining = deadline - time.monotonic()
        if remaining > 0:
            time.sleep(remaining)
        collector.collect_once()


def _cmd_collect(args: argparse.Namespace) -> None:
    """Run collectors in the background and print their snapshots."""
    cfg = load_config(args.config)

    from .collector.manager import CollectorManager

    manager = CollectorManager(cfg)
    stop = threading.Event()

    def _handle_signal(_sig: int, _frame: object) -> None:
        stop.set()

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    manager.start()
    print(f"hostprobe collecting ({len(manager.collectors)} collector(s))")
    print("Press Ctrl+C to stop.\n")
    try:
        while not stop.wait(args.print_every):
            _print_records(manager.metrics())
            print()
    finally:
        manager.stop()
    print("Collection stopped.")


def _cmd_snapshot(args: argparse.Namespace) -> None:
    """Take one snapshot of every enabled collector and print it."""
    cfg = load_config(args.config)

    from .collector.manager import CollectorManager

    manager = CollectorManager(cfg)
    # the first cycle only seeds the delta-based collectors
    collect_seeded(manager.collectors)

    records = manager.metrics()
    if args.table:
        print_table(records)
    else:
        _print_records(records)


def _cmd_version(_args: argparse.Namespace) -> None:
    print(f"hostprobe {__version__}")


def main(argv: list[str] | None = None) -> None:
    """Entry point for the hostprobe CLI."""
    parser = argparse.ArgumentParser(
        prog="hostprobe",
        description="Sample OS counters into scrapeable metric snapshots",
    )
    parser.add_argument("--config", "-c", default=None, help="Path to hostprobe.yaml")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")

    # collect
    collect_p = sub.add_parser("collect", help="Run collectors and print snapshots")
    collect_p.add_argument(
        "--print-every",
        type=_positive_float,
        default=10.0,
        help="Seconds between printed snapshots",
    )
    collect_p.set_defaults(func=_cmd_collect)

    # snapshot
    snap_p = sub.add_parser("snapshot", help="Print a single snapshot and exit")
    snap_p.add_argument("--table", action="store_true", help="Render as a rich table")
    snap_p.set_defaults(func=_cmd_snapshot)

    # version
    ver_p = sub.add_parser("version", help="Print version")
    ver_p.set_defaults(func=_cmd_version)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    try:
        args.func(args)
    except ConfigError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
