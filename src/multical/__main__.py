"""Command-line entry point: ``python -m multical``."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from collections.abc import Iterable, Sequence

from .config import settings_from_env
from .const import __version__
from .controller import CalendarController
from .exceptions import CalendarError
from .manager import CalendarManager
from .view import TextView

_LOGGER = logging.getLogger(__name__)

PROMPT = "> "


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="multical",
        description="Manage several timezone-aware calendars from text commands.",
    )
    parser.add_argument(
        "--mode",
        choices=("interactive", "headless"),
        default="interactive",
        help="read commands from stdin, or from a command file (default: %(default)s)",
    )
    parser.add_argument(
        "file",
        nargs="?",
        help="command file for headless mode",
    )
    parser.add_argument(
        "--timezone",
        help="zone of the default calendar (overrides MULTICAL_DEFAULT_TIMEZONE)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="logging verbosity (default: %(default)s)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def run_commands(controller: CalendarController, lines: Iterable[str]) -> bool:
    """Feed lines to the controller; returns True when ``exit`` was reached."""
    for line in lines:
        if not controller.process_command(line.rstrip("\n")):
            return True
    return False


def run_interactive(controller: CalendarController, view: TextView) -> None:
    while True:
        try:
            line = input(PROMPT)
        except EOFError:
            break
        if not controller.process_command(line):
            break
    view.display("Goodbye.")


def run_headless(controller: CalendarController, view: TextView, path: str) -> int:
    with open(path, encoding="utf-8") as handle:
        reached_exit = run_commands(controller, handle)
    if not reached_exit:
        view.display("Command file ended without an exit command.")
        return 1
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = settings_from_env()
        if args.timezone:
            settings = dataclasses.replace(settings, default_timezone=args.timezone)
        manager = CalendarManager(settings)
    except CalendarError as err:
        print(f"Error: {err}", file=sys.stderr)
        return 2

    view = TextView()
    controller = CalendarController(manager, view)

    if args.mode == "headless":
        if not args.file:
            print("Error: headless mode requires a command file", file=sys.stderr)
            return 2
        try:
            return run_headless(controller, view, args.file)
        except OSError as err:
            _LOGGER.error("Cannot read command file %s: %s", args.file, err)
            print(f"Error: cannot read {args.file}: {err}", file=sys.stderr)
            return 1

    run_interactive(controller, view)
    return 0


if __name__ == "__main__":
    sys.exit(main())
