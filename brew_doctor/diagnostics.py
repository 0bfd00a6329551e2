"""Outcomes produced by checks and the state shared by one doctor run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, TypeVar, Union

from .catalog import CellarCatalog
from .config import DoctorConfig
from .system_state import Environment, FileSystem, ProcessRunner
from .volumes import MountLister, VolumeResolver

T = TypeVar("T")


@dataclass(frozen=True)
class Pass:
    pass


@dataclass(frozen=True)
class Warn:
    text: str


PASS = Pass()

Outcome = Union[Pass, Warn]


def as_outcome(value: Any) -> Outcome:
    """Normalize what a check returned. Nothing, or blank text, means the check passed."""
    if value is None or isinstance(value, Pass):
        return PASS
    if isinstance(value, Warn):
        return value if value.text.strip() else PASS
    if isinstance(value, str):
        return Warn(value) if value.strip() else PASS
    raise TypeError(f"check returned {type(value).__name__}, expected Pass or Warn")


@dataclass(frozen=True)
class ProbeResult:
    id: str
    outcome: Outcome
    duration: Optional[float] = None

    @property
    def warned(self) -> bool:
        return isinstance(self.outcome, Warn)


@dataclass
class RunContext:
    """Everything a check may consult during one invocation. Never reused across runs."""

    config: DoctorConfig
    runner: ProcessRunner
    fs: FileSystem
    env: Environment
    catalog: CellarCatalog
    failed: bool = False
    _memo: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def create(cls, env: Optional[Environment] = None, config: Optional[DoctorConfig] = None) -> "RunContext":
        env = env or Environment()
        config = config or DoctorConfig.from_environment(env)
        return cls(
            config=config,
            runner=ProcessRunner(timeout=config.command_timeout),
            fs=FileSystem(),
            env=env,
            catalog=CellarCatalog(config.cellar, config.repository),
        )

    def mark_failed(self) -> None:
        self.failed = True

    def memoize(self, key: str, factory: Callable[[], T]) -> T:
        if key not in self._memo:
            self._memo[key] = factory()
        return self._memo[key]

    @property
    def git_available(self) -> bool:
        # a wrapper script may put "git" on PATH, so ask the binary itself
        return self.memoize("git", lambda: self.runner.run(["git", "--version"]).ok)

    @property
    def volumes(self) -> VolumeResolver:
        return self.memoize("volumes", lambda: VolumeResolver(MountLister(self.runner)))
