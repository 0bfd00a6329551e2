"""Narrow wrappers around the host: processes, the filesystem and the environment."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import Iterator, List, Mapping, NamedTuple, Optional, Sequence, Set

import psutil

from .errors import ExternalCommandFailure

logger = logging.getLogger(__name__)

COMMAND_NOT_FOUND = 127
COMMAND_TIMED_OUT = 124


class CommandResult(NamedTuple):
    stdout: str
    returncode: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class ProcessRunner:
    """Runs external commands synchronously and hands back their stdout."""

    def __init__(self, timeout: Optional[float] = None, env: Optional[Mapping[str, str]] = None) -> None:
        self.timeout = timeout
        self.env = dict(env) if env is not None else None

    def run(self, args: Sequence[str], cwd: Optional[str] = None) -> CommandResult:
        logger.debug("running %s", " ".join(args))
        try:
            proc = subprocess.run(
                list(args),
                capture_output=True,
                text=True,
                cwd=cwd,
                env=self.env,
                timeout=self.timeout,
            )
        except (FileNotFoundError, NotADirectoryError, PermissionError) as exc:
            logger.debug("could not start %s: %s", args[0], exc)
            return CommandResult("", COMMAND_NOT_FOUND)
        except subprocess.TimeoutExpired:
            logger.debug("%s timed out after %ss", args[0], self.timeout)
            return CommandResult("", COMMAND_TIMED_OUT)
        if proc.returncode != 0 and proc.stderr.strip():
            logger.debug("%s exited %d: %s", args[0], proc.returncode, proc.stderr.strip())
        return CommandResult(proc.stdout, proc.returncode)

    def read(self, args: Sequence[str], cwd: Optional[str] = None) -> str:
        """Return stripped stdout, raising ExternalCommandFailure on a non-zero exit."""
        result = self.run(args, cwd=cwd)
        if not result.ok:
            raise ExternalCommandFailure(args, result.returncode)
        return result.stdout.strip()

    def which(self, name: str, paths: Sequence[str]) -> Optional[str]:
        return shutil.which(name, path=os.pathsep.join(paths))


class FileSystem:
    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def is_writable(self, path: str) -> bool:
        return os.access(path, os.W_OK)

    def is_dir(self, path: str) -> bool:
        return os.path.isdir(path)

    def is_file(self, path: str) -> bool:
        return os.path.isfile(path)

    def is_symlink(self, path: str) -> bool:
        return os.path.islink(path)

    def realpath(self, path: str) -> str:
        return os.path.realpath(path)

    def mtime(self, path: str) -> float:
        return os.path.getmtime(path)

    def listdir(self, path: str) -> List[str]:
        try:
            return sorted(os.listdir(path))
        except OSError:
            return []

    def glob(self, directory: str, pattern: str) -> List[str]:
        """Match ``pattern`` under ``directory`` and return the hits relative to it."""
        root = Path(directory)
        return sorted(match.relative_to(root).as_posix() for match in root.glob(pattern))

    def walk_dirs(self, root: str) -> Iterator[str]:
        for dirpath, _, _ in os.walk(root):
            yield dirpath

    def broken_symlinks(self, root: str) -> Iterator[str]:
        for dirpath, dirnames, filenames in os.walk(root):
            for name in dirnames + filenames:
                candidate = os.path.join(dirpath, name)
                if os.path.islink(candidate) and not os.path.exists(candidate):
                    yield candidate

    def mount_options(self, path: str) -> Optional[Set[str]]:
        """Mount options of the partition that holds ``path``, or None if unknown."""
        target = os.path.realpath(path)
        best = None
        for partition in psutil.disk_partitions(all=True):
            mountpoint = partition.mountpoint
            if not _is_within(target, mountpoint):
                continue
            if best is None or len(mountpoint) > len(best.mountpoint):
                best = partition
        if best is None:
            return None
        return {opt.strip() for opt in best.opts.split(",") if opt.strip()}


class Environment:
    def __init__(self, values: Optional[Mapping[str, str]] = None) -> None:
        self._values = os.environ if values is None else dict(values)

    def get(self, name: str) -> Optional[str]:
        return self._values.get(name)

    def names(self) -> List[str]:
        return sorted(self._values)

    def paths(self) -> List[str]:
        raw = self.get("PATH") or ""
        return [entry for entry in raw.split(os.pathsep) if entry]


def _is_within(path: str, mountpoint: str) -> bool:
    if mountpoint == os.sep:
        return True
    return path == mountpoint or path.startswith(mountpoint.rstrip(os.sep) + os.sep)
