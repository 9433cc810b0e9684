"""Command-line surface: argument parsing and top-level error handling.

Exit status: 0 on success, 1 on validation/not-found/resolution failures and
unexpected errors, 2 on usage errors.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from forkyou import __version__
from forkyou.commands import MODULES
from forkyou.commands.base import Context
from forkyou.config import ToolConfig, load_config
from forkyou.errors import CRMError
from forkyou.output import Output

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


class UsageError(CRMError):
    code = "usage"

    def __init__(self, message: str, usage: str = "") -> None:
        if "invalid choice" in message:
            code = "unknown_command"
        elif "unrecognized arguments" in message:
            code = "unknown_args"
        else:
            code = None
        super().__init__(message, code=code, message=message)
        self.usage = usage


class _Parser(argparse.ArgumentParser):
    """Raise instead of exiting so usage errors honour --json."""

    def error(self, message: str):
        raise UsageError(message, usage=self.format_usage())


def build_parser() -> argparse.ArgumentParser:
    parser = _Parser(
        prog="fork-you",
        description="fork-you: git-based CRM. Records live in .forkyou/ as JSON files.",
    )
    parser.add_argument("--json", action="store_true", default=False, help="Output as JSON")
    parser.add_argument("-q", "--quiet", action="store_true", default=False,
                        help="Suppress output")
    parser.add_argument("-v", "--version", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    for module in MODULES:
        module.register(subparsers)
    return parser


def run(argv: list[str] | None = None, *, cwd: Path | None = None,
        config: ToolConfig | None = None) -> int:
    """Parse ``argv``, dispatch to a handler and return the exit status."""
    config = config or load_config()
    argv = sys.argv[1:] if argv is None else list(argv)
    parser = build_parser()

    try:
        args = parser.parse_args(argv)
    except UsageError as e:
        out = Output(json=config.json_output or "--json" in argv)
        if not out.json:
            sys.stderr.write(e.usage)
        out.fail(e)
        return EXIT_USAGE

    out = Output(json=args.json or config.json_output, quiet=args.quiet)

    if args.version:
        out.emit({"version": __version__}, f"fork-you {__version__}")
        return EXIT_OK

    if not hasattr(args, "func"):
        if not out.quiet:
            parser.print_help()
        return EXIT_OK

    ctx = Context(cwd=cwd or Path.cwd(), out=out, settings=config)
    try:
        args.func(ctx, args)
    except CRMError as e:
        logger.debug("Command failed: %s (%s)", e.message, e.code)
        out.fail(e)
        return EXIT_FAILURE
    except Exception as e:
        logger.debug("Unhandled error", exc_info=True)
        if out.json:
            print(json.dumps({"success": False, "error": "fatal", "message": str(e)}, indent=2))
        else:
            print(f"Fatal error: {e}", file=sys.stderr)
        return EXIT_FAILURE
    return EXIT_OK
