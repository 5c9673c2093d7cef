"""Command-line interface for the leverage rebalance engine."""
from __future__ import annotations

import argparse
import asyncio
import sys

from .config import load_config
from .logging_setup import configure_logging
from .services import RebalancePlanner
from .sources import SnapshotFileSource


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="leverage-engine",
        description="Leverage ratio recentering and rebalance sizing",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--snapshot",
        default=None,
        help="Position snapshot YAML (overrides position.snapshot_path)",
    )

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("plan", help="Plan one rebalance step from the current snapshot")
    sub.add_parser("engage", help="Plan the first lever trade of an unlevered position")
    sub.add_parser("disengage", help="Plan an unwind of the position to 1x")

    watch_parser = sub.add_parser("watch", help="Re-plan continuously")
    watch_parser.add_argument(
        "interval",
        nargs="?",
        type=int,
        default=None,
        help="Planning interval in minutes (overrides config)",
    )

    return parser


async def _run(args: argparse.Namespace) -> None:
    """Execute the selected command."""
    configure_logging(args.log_level)
    config = load_config(args.config)

    source = None
    if args.snapshot:
        source = SnapshotFileSource(args.snapshot, config.strategy.market)
    planner = RebalancePlanner(config, source=source)

    if args.command == "plan":
        await planner.plan()
    elif args.command == "engage":
        await planner.engage()
    elif args.command == "disengage":
        await planner.disengage()
    elif args.command == "watch":
        await planner.run_continuous(args.interval)
    else:
        build_parser().print_help()
        sys.exit(1)


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    asyncio.run(_run(args))
