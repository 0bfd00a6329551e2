"""Render check results as they arrive."""

from __future__ import annotations

from typing import Iterable, Optional, Tuple

from rich.console import Console
from rich.text import Text

from .diagnostics import ProbeResult, RunContext, Warn
from .formatting import format_profile_line, undent

BANNER = undent(
    """
    Please note that these warnings are just used to help the Homebrew maintainers
    with debugging if you file an issue. If everything you use Homebrew for is
    working fine: please don't worry and just ignore them. Thanks!
    """
).rstrip("\n")

READY = "Your system is ready to brew."


class ResultAggregator:
    """Prints warnings with a one-time banner and keeps the run's failed flag."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()
        self.warnings = 0

    def add(self, result: ProbeResult, context: RunContext) -> None:
        if not isinstance(result.outcome, Warn):
            return
        if self.warnings == 0:
            self.console.print(Text(BANNER, style="bold"), soft_wrap=True)
        self.warnings += 1
        self.console.print()
        message = Text("Warning", style="bold yellow")
        message.append(": ")
        message.append(result.outcome.text.rstrip("\n"))
        self.console.print(message, soft_wrap=True)
        context.mark_failed()

    def finish(self, context: RunContext) -> None:
        if not context.failed:
            self.console.print(READY, markup=False, highlight=False, soft_wrap=True)


def render_profile(console: Console, entries: Iterable[Tuple[str, float]]) -> None:
    for probe_id, seconds in entries:
        console.print(format_profile_line(probe_id, seconds), markup=False, highlight=False, soft_wrap=True)
