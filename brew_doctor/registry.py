"""The set of checks the doctor knows about."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Tuple

from .diagnostics import Outcome, RunContext
from .errors import UnknownProbe

CheckFunc = Callable[[RunContext], Outcome]


@dataclass(frozen=True)
class Probe:
    id: str
    run: CheckFunc


class ProbeRegistry:
    def __init__(self) -> None:
        self._probes: Dict[str, Probe] = {}

    def __contains__(self, probe_id: str) -> bool:
        return probe_id in self._probes

    def __len__(self) -> int:
        return len(self._probes)

    def register(self, probe_id: str, run: CheckFunc) -> Probe:
        if probe_id in self._probes:
            raise ValueError(f"check {probe_id!r} is already registered")
        probe = Probe(id=probe_id, run=run)
        self._probes[probe_id] = probe
        return probe

    def register_all(self, checks: Iterable[CheckFunc]) -> None:
        """Register plain functions under their own names."""
        for check in checks:
            self.register(check.__name__, check)

    def ids(self) -> Tuple[str, ...]:
        return tuple(sorted(self._probes))

    def lookup(self, probe_id: str) -> Probe:
        try:
            return self._probes[probe_id]
        except KeyError:
            raise UnknownProbe(probe_id) from None
