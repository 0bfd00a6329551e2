"""Entry point for the brew-doctor command line tool."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional, Sequence, Tuple

from rich.console import Console
from rich.logging import RichHandler

from .checks import default_registry
from .diagnostics import ProbeResult, RunContext, Warn
from .errors import UnknownProbe
from .registry import ProbeRegistry
from .report import ResultAggregator, render_profile
from .scheduler import DEFAULT_FORCED_LAST, Scheduler

logger = logging.getLogger("brew_doctor")

EXIT_OK = 0
EXIT_WARNINGS = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="brew-doctor",
        description="Check your system for potential problems with a Homebrew installation.",
    )
    parser.add_argument("checks", nargs="*", help="only run these checks, in this order")
    parser.add_argument("--list-checks", action="store_true", help="list all checks and exit")
    parser.add_argument(
        "-D", "--profile", action="store_true", help="print how long each check took, fastest first"
    )
    parser.add_argument("--json", action="store_true", help="print results as JSON instead of warnings")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="log more (repeat for debug)")
    return parser


def configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    return run_doctor(args, default_registry(), RunContext.create(), Console())


def run_doctor(
    args: argparse.Namespace,
    registry: ProbeRegistry,
    context: RunContext,
    console: Console,
    forced_last: Sequence[str] = DEFAULT_FORCED_LAST,
) -> int:
    if args.list_checks:
        for probe_id in registry.ids():
            console.print(probe_id, markup=False, highlight=False, soft_wrap=True)
        return EXIT_OK

    aggregator = None if args.json else ResultAggregator(console)
    scheduler = Scheduler(registry, sink=aggregator.add if aggregator else _record_failure)
    try:
        if args.checks:
            results = scheduler.run_selected(context, args.checks, timing=args.profile)
        else:
            results = scheduler.run_all(context, forced_last=forced_last, timing=args.profile)
    except UnknownProbe as exc:
        logger.error("%s", exc)
        return EXIT_USAGE

    profile = scheduler.profile() if args.profile else None
    if args.json:
        console.print_json(_to_json(results, context, profile))
    else:
        aggregator.finish(context)
        if profile is not None:
            render_profile(console, profile)
    return EXIT_WARNINGS if context.failed else EXIT_OK


def _record_failure(result: ProbeResult, context: RunContext) -> None:
    if result.warned:
        context.mark_failed()


def _to_json(
    results: List[ProbeResult], context: RunContext, profile: Optional[List[Tuple[str, float]]] = None
) -> str:
    payload: Dict[str, Any] = {
        "failed": context.failed,
        "results": [
            {
                "id": result.id,
                "status": "warning" if isinstance(result.outcome, Warn) else "pass",
                "text": result.outcome.text if isinstance(result.outcome, Warn) else None,
                "duration": result.duration,
            }
            for result in results
        ],
    }
    if profile is not None:
        payload["profile"] = [{"id": probe_id, "seconds": seconds} for probe_id, seconds in profile]
    return json.dumps(payload, ensure_ascii=False, indent=2)


if __name__ == "__main__":
    sys.exit(main())
