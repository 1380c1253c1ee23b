from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from losh.context import PROGRAM, Context, Settings, configure_logging
from losh.executor import CommandExecutor


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROGRAM,
        description="Pluggable task runner. Run `losh list usage` to see the available commands.",
    )
    parser.add_argument(
        "--cwd",
        default=".",
        help="Directory to start project discovery from (default: current directory)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log diagnostics to stderr (same as LOSH_LOG_LEVEL=DEBUG).",
    )
    parser.add_argument(
        "argv",
        nargs=argparse.REMAINDER,
        help="Command name followed by its positional arguments.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = Settings.from_env()
    configure_logging("DEBUG" if args.verbose else settings.log_level)

    context = Context(settings=settings, cwd=Path(args.cwd).resolve())
    executor = CommandExecutor(context)
    try:
        return asyncio.run(executor.execute(args.argv))
    except KeyboardInterrupt:
        print("", file=sys.stderr)
        context.console.failed("Interrupted.")
        return 130
