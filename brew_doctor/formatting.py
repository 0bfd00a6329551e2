"""Text helpers shared by the checks and the report."""

from __future__ import annotations

import textwrap
from typing import Iterable


def undent(text: str) -> str:
    """Strip the common indentation of a triple-quoted message and its leading newline."""
    return textwrap.dedent(text).lstrip("\n")


def inject_file_list(message: str, paths: Iterable[str]) -> str:
    lines = [message.rstrip("\n")]
    lines.extend(f"    {path}" for path in paths)
    return "\n".join(lines) + "\n"


def format_duration(seconds: float) -> str:
    return f"{seconds:.6f}"


def format_profile_line(probe_id: str, seconds: float) -> str:
    return f"{probe_id}: {format_duration(seconds)}"
