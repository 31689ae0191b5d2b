"""Command line entry point.

Usage:
    prockill [-f] [-i] [-s] [-t SECONDS] [--port PORT] [--json] TARGET...

Targets are pids, process names or ``:<port>``. Exit codes: 0 success,
1 when at least one target could not be killed, 2 on bad configuration.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional, Sequence

import orjson

from .config import ConfigurationError, get_killer_settings
from .exceptions import ProcessKillError
from .logging_config import setup_logging
from .process_killer import ProcessKiller, kill_sync
from .process_killer_helpers.process_models import KillOptions, KillReport, OutcomeKind, Target

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def _console(message: str, *, quiet: bool, stream=None) -> None:
    """Emit console output unless quiet mode is on."""
    if quiet:
        return
    print(message, file=stream or sys.stdout)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="prockill",
        description="Kill processes by pid, name or :port",
    )
    parser.add_argument("targets", nargs="*", metavar="TARGET", help="pid, process name or :port")
    parser.add_argument("--port", action="append", type=int, default=[], help="kill the process listening on PORT")
    parser.add_argument("-f", "--force", action="store_true", help="send the unconditional kill signal")
    parser.add_argument("-i", "--ignore-case", action="store_true", help="match process names case-insensitively")
    parser.add_argument("-s", "--silent", action="store_true", help="never report failures")
    parser.add_argument(
        "-t",
        "--force-after-timeout",
        type=float,
        metavar="SECONDS",
        help="force kill targets still alive after SECONDS",
    )
    parser.add_argument(
        "--protect-ancestors",
        action="store_true",
        help="also refuse to kill the parent processes of prockill",
    )
    parser.add_argument("--json", action="store_true", help="print the per-target report as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="log resolution details")
    return parser


def _collect_targets(args: argparse.Namespace) -> List[object]:
    targets: List[object] = list(args.targets)
    targets.extend(Target.port(port) for port in args.port)
    return targets


def _options_from_args(args: argparse.Namespace) -> KillOptions:
    return KillOptions(
        force=args.force,
        ignore_case=args.ignore_case,
        silent=args.silent,
        force_after_timeout_seconds=args.force_after_timeout,
        protect_ancestors=args.protect_ancestors,
    )


def _print_report(report: KillReport, *, as_json: bool, quiet: bool) -> None:
    if as_json:
        print(orjson.dumps(report.as_dicts(), option=orjson.OPT_INDENT_2).decode())
        return
    for result in report:
        if result.outcome.kind is OutcomeKind.KILLED:
            _console(f"Killed {result.target.raw}", quiet=quiet)
        elif result.outcome.kind is OutcomeKind.SELF_PROTECTED:
            _console(f"Skipped {result.target.raw}: refusing to kill prockill itself", quiet=quiet)


def main(argv: Optional[Sequence[str]] = None, *, killer: Optional[ProcessKiller] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = get_killer_settings()
        options = _options_from_args(args)
    except ConfigurationError as exc:
        print(f"prockill: {exc}", file=sys.stderr)
        return EXIT_USAGE

    setup_logging(verbose=args.verbose, quiet=settings.quiet, log_file=settings.log_file)

    targets = _collect_targets(args)
    if not targets:
        parser.print_usage(sys.stderr)
        print("prockill: at least one TARGET or --port is required", file=sys.stderr)
        return EXIT_USAGE

    try:
        report = kill_sync(targets, options, killer=killer)
    except ProcessKillError as exc:
        _print_report(exc.report, as_json=args.json, quiet=settings.quiet)
        _console(str(exc), quiet=settings.quiet, stream=sys.stderr)
        return EXIT_FAILED

    _print_report(report, as_json=args.json, quiet=settings.quiet)
    return EXIT_OK


__all__ = ["build_parser", "main"]
