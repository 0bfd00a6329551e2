"""Exceptions raised by the doctor core and its collaborators."""

from __future__ import annotations

from typing import Sequence


class DoctorError(Exception):
    """Base class for doctor errors."""


class UnknownProbe(DoctorError, KeyError):
    def __init__(self, probe_id: str) -> None:
        super().__init__(probe_id)
        self.probe_id = probe_id

    def __str__(self) -> str:
        return f"Unknown check: {self.probe_id}"


class ExternalCommandFailure(DoctorError):
    """An external command exited non-zero, timed out or could not be started."""

    def __init__(self, args: Sequence[str], returncode: int, stderr: str = "") -> None:
        super().__init__(f"{' '.join(args)} exited with status {returncode}")
        self.command = list(args)
        self.returncode = returncode
        self.stderr = stderr
