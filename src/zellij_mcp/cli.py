"""Command-line entry point for driving a zellij session."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from .focus import get_focused_tab_name, with_focus_preservation
from .runner import ZellijError, ZellijRunner
from .settings import build_runner, load_settings

EXIT_NO_FOCUS = 3

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="zellij-mcp", description="Drive a zellij session from the shell"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging verbosity (DEBUG, INFO, WARNING, ERROR)",
    )
    parser.add_argument("--config", help="Path to a YAML settings file")
    parser.add_argument("--session", help="Target zellij session name")
    parser.add_argument(
        "--timeout", type=float, help="Per-command timeout in seconds"
    )
    parser.add_argument("--log", help="Structured invocation log file path")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("sessions", help="List running zellij sessions")
    commands.add_parser("focused-tab", help="Print the name of the focused tab")

    action = commands.add_parser("action", help="Run a session action")
    action.add_argument(
        "--keep-focus",
        action="store_true",
        help="Restore the previously focused tab once the action completes",
    )
    action.add_argument("args", nargs=argparse.REMAINDER)

    raw = commands.add_parser("raw", help="Run a top-level zellij command")
    raw.add_argument("args", nargs=argparse.REMAINDER)
    return parser


async def _dispatch(args: argparse.Namespace, runner: ZellijRunner) -> int:
    if args.command == "sessions":
        output = await runner.raw_or_throw(
            ["list-sessions", "--short", "--no-formatting"]
        )
    elif args.command == "focused-tab":
        name = await get_focused_tab_name(runner)
        if name is None:
            LOGGER.info("No tab reports focus in session '%s'", runner.session)
            return EXIT_NO_FOCUS
        output = name
    elif args.command == "action":
        verb_args: List[str] = list(args.args)

        async def perform() -> str:
            return await runner.action_or_throw(verb_args)

        output = await with_focus_preservation(runner, perform, args.keep_focus)
    else:
        output = await runner.raw_or_throw(list(args.args))

    if output:
        sys.stdout.write(output + "\n")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command in ("action", "raw") and not args.args:
        parser.error(f"{args.command} requires at least one argument")

    numeric_level = getattr(logging, args.log_level.upper(), logging.WARNING)
    logging.basicConfig(level=numeric_level)

    try:
        settings = load_settings(Path(args.config) if args.config else None)
        if args.session:
            settings.session = args.session
        if args.timeout is not None:
            settings.timeout = args.timeout
        if args.log:
            settings.log_path = Path(args.log)
        runner = build_runner(settings)
    except (TypeError, ValueError, KeyError, OSError, yaml.YAMLError) as exc:
        LOGGER.error("Invalid configuration: %s", exc)
        sys.stderr.write(f"invalid configuration: {exc}\n")
        return 1

    try:
        return asyncio.run(_dispatch(args, runner))
    except ZellijError as exc:
        LOGGER.error("%s", exc)
        sys.stderr.write(f"{exc}\n")
        return 1
    except Exception:
        LOGGER.exception("Unhandled error running '%s'", args.command)
        return 2


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    raise SystemExit(main())
