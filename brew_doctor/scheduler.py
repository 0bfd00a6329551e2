"""Decide the order checks run in, run them one at a time, and time them if asked."""

from __future__ import annotations

import logging
import time
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from .diagnostics import ProbeResult, RunContext, Warn, as_outcome
from .registry import Probe, ProbeRegistry

logger = logging.getLogger(__name__)

# These look at the state every other check may already have complained about.
DEFAULT_FORCED_LAST: Tuple[str, ...] = ("check_for_linked_keg_only_brews", "check_for_outdated_homebrew")

ResultSink = Callable[[ProbeResult, RunContext], None]


def build_run_order(ids: Iterable[str], forced_last: Iterable[str] = ()) -> List[str]:
    """Append ``forced_last`` and keep only the right-most copy of every id."""
    ordered = list(ids) + list(forced_last)
    seen = set()
    kept: List[str] = []
    for probe_id in reversed(ordered):
        if probe_id in seen:
            continue
        seen.add(probe_id)
        kept.append(probe_id)
    kept.reverse()
    return kept


class Scheduler:
    def __init__(self, registry: ProbeRegistry, sink: Optional[ResultSink] = None) -> None:
        self.registry = registry
        self.sink = sink
        self._timings: List[Tuple[str, float]] = []

    def run_all(
        self,
        context: RunContext,
        forced_last: Sequence[str] = DEFAULT_FORCED_LAST,
        timing: bool = False,
    ) -> List[ProbeResult]:
        order = build_run_order(self.registry.ids(), forced_last)
        return self._run([self.registry.lookup(probe_id) for probe_id in order], context, timing)

    def run_selected(self, context: RunContext, ids: Sequence[str], timing: bool = False) -> List[ProbeResult]:
        # resolve everything first so a typo runs nothing
        probes = [self.registry.lookup(probe_id) for probe_id in ids]
        return self._run(probes, context, timing)

    def profile(self) -> List[Tuple[str, float]]:
        """Timings of the last timed run, fastest first."""
        return sorted(self._timings, key=lambda entry: entry[1])

    def _run(self, probes: List[Probe], context: RunContext, timing: bool) -> List[ProbeResult]:
        self._timings = []
        results: List[ProbeResult] = []
        for probe in probes:
            result = self._invoke(probe, context, timing)
            if result.duration is not None:
                self._timings.append((probe.id, result.duration))
            results.append(result)
            if self.sink is not None:
                self.sink(result, context)
        return results

    def _invoke(self, probe: Probe, context: RunContext, timing: bool) -> ProbeResult:
        started = time.perf_counter() if timing else None
        try:
            outcome = as_outcome(probe.run(context))
        except Exception as exc:
            logger.debug("check %s raised", probe.id, exc_info=True)
            outcome = Warn(f"{probe.id} raised {type(exc).__name__}: {exc}")
        duration = time.perf_counter() - started if started is not None else None
        return ProbeResult(id=probe.id, outcome=outcome, duration=duration)
