from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from brew_doctor.catalog import CellarCatalog
from brew_doctor.config import DoctorConfig
from brew_doctor.diagnostics import RunContext
from brew_doctor.errors import ExternalCommandFailure
from brew_doctor.system_state import COMMAND_NOT_FOUND, CommandResult, Environment, FileSystem


class FakeRunner:
    """Answers commands from a table; anything unknown looks like a missing binary."""

    def __init__(self, responses=None, executables=None) -> None:
        self.responses: Dict[Tuple[str, ...], CommandResult] = {}
        for args, value in (responses or {}).items():
            self.responses[tuple(args)] = value if isinstance(value, CommandResult) else CommandResult(value, 0)
        self.executables: Dict[str, str] = dict(executables or {})
        self.calls: List[Tuple[Tuple[str, ...], Optional[str]]] = []

    def run(self, args: Sequence[str], cwd: Optional[str] = None) -> CommandResult:
        self.calls.append((tuple(args), cwd))
        return self.responses.get(tuple(args), CommandResult("", COMMAND_NOT_FOUND))

    def read(self, args: Sequence[str], cwd: Optional[str] = None) -> str:
        result = self.run(args, cwd=cwd)
        if not result.ok:
            raise ExternalCommandFailure(args, result.returncode)
        return result.stdout.strip()

    def which(self, name: str, paths: Sequence[str]) -> Optional[str]:
        return self.executables.get(name)


@pytest.fixture
def make_context(tmp_path):
    def _make(
        *,
        env=None,
        runner=None,
        is_mac: bool = False,
        prefix=None,
        temp=None,
        fs=None,
    ) -> RunContext:
        prefix = str(prefix or tmp_path / "prefix")
        values = {"HOMEBREW_PREFIX": prefix, "HOME": str(tmp_path / "home"), "PATH": ""}
        if temp is not None:
            values["HOMEBREW_TEMP"] = str(temp)
        values.update(env or {})
        environment = Environment(values)
        config = DoctorConfig.from_environment(environment, is_mac=is_mac)
        return RunContext(
            config=config,
            runner=runner or FakeRunner(),
            fs=fs or FileSystem(),
            env=environment,
            catalog=CellarCatalog(config.cellar, config.repository),
        )

    return _make
