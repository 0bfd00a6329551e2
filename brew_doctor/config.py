"""Locations of the Homebrew installation under inspection."""

from __future__ import annotations

import os
import platform
from dataclasses import dataclass
from typing import Optional

from .system_state import Environment


@dataclass(frozen=True)
class DoctorConfig:
    prefix: str
    repository: str
    cellar: str
    temp: str
    logs: str
    is_mac: bool
    command_timeout: Optional[float] = None

    @property
    def library(self) -> str:
        return os.path.join(self.repository, "Library")

    @classmethod
    def from_environment(cls, env: Environment, is_mac: Optional[bool] = None) -> "DoctorConfig":
        """Resolve every location from HOMEBREW_* variables, falling back to the stock layout."""
        prefix = env.get("HOMEBREW_PREFIX") or "/usr/local"
        repository = env.get("HOMEBREW_REPOSITORY") or prefix
        home = env.get("HOME") or os.path.expanduser("~")
        return cls(
            prefix=prefix,
            repository=repository,
            cellar=env.get("HOMEBREW_CELLAR") or os.path.join(prefix, "Cellar"),
            temp=env.get("HOMEBREW_TEMP") or "/tmp",
            logs=env.get("HOMEBREW_LOGS") or os.path.join(home, "Library", "Logs", "Homebrew"),
            is_mac=platform.system() == "Darwin" if is_mac is None else is_mac,
            command_timeout=_parse_timeout(env.get("HOMEBREW_DOCTOR_COMMAND_TIMEOUT")),
        )


def _parse_timeout(raw: Optional[str]) -> Optional[float]:
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if value > 0 else None
