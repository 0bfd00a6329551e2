"""Resolve paths to the volume that holds them, using the output of ``df -P``."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

from .system_state import ProcessRunner

logger = logging.getLogger(__name__)

DF_COMMAND = ("/bin/df", "-P")

# /dev/disk0s2   489562928 440803616  48247312    91%    /
_DF_LINE = re.compile(r"^.+\s+[0-9]+\s+[0-9]+\s+[0-9]+\s+[0-9]{1,3}%\s+(.+)")


class _NotFound:
    """Marker for a path with no resolvable volume. Never equal to anything, itself included."""

    _instance: Optional["_NotFound"] = None

    def __new__(cls) -> "_NotFound":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __eq__(self, other: object) -> bool:
        return False

    def __ne__(self, other: object) -> bool:
        return True

    def __hash__(self) -> int:
        return id(self)

    def __repr__(self) -> str:
        return "NOT_FOUND"


NOT_FOUND = _NotFound()

VolumeIndex = Union[int, _NotFound]


@dataclass(frozen=True)
class MountEntry:
    mountpoint: str


@dataclass(frozen=True)
class VolumeTable:
    entries: Tuple[MountEntry, ...] = ()

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    @property
    def mountpoints(self) -> List[str]:
        return [entry.mountpoint for entry in self.entries]

    def index_of(self, mountpoint: str) -> VolumeIndex:
        for index, entry in enumerate(self.entries):
            if entry.mountpoint == mountpoint:
                return index
        return NOT_FOUND


def parse_df_output(text: str) -> List[MountEntry]:
    """Pick the mountpoint column out of every ``df -P`` line that looks like a filesystem row."""
    entries: List[MountEntry] = []
    for line in text.splitlines():
        match = _DF_LINE.match(line.rstrip("\r\n"))
        if match:
            entries.append(MountEntry(mountpoint=match.group(1)))
    return entries


class MountLister:
    def __init__(self, runner: ProcessRunner, command: Sequence[str] = DF_COMMAND) -> None:
        self.runner = runner
        self.command = tuple(command)

    def list_mounts(self, path: Optional[str] = None) -> List[MountEntry]:
        args = list(self.command)
        if path is not None:
            args.append(str(path))
        # df still prints rows for the paths it could resolve when it exits non-zero
        result = self.runner.run(args)
        if not result.ok:
            logger.debug("%s exited %d", " ".join(args), result.returncode)
        return parse_df_output(result.stdout)


class VolumeResolver:
    """Maps paths onto positions in a snapshot of the mount table.

    The snapshot is taken on first use and kept for the life of the resolver;
    ``which`` lists the path's own mount fresh on every call.
    """

    def __init__(self, lister: MountLister, table: Optional[VolumeTable] = None) -> None:
        self.lister = lister
        self._table = table

    @property
    def table(self) -> VolumeTable:
        if self._table is None:
            self._table = self.build_table()
        return self._table

    def build_table(self) -> VolumeTable:
        table = VolumeTable(tuple(self.lister.list_mounts()))
        if not table:
            logger.debug("mount listing returned no volumes")
        return table

    def get_mounts(self, path: str) -> List[str]:
        return [entry.mountpoint for entry in self.lister.list_mounts(path)]

    def which(self, path: str) -> VolumeIndex:
        mounts = self.get_mounts(path)
        if not mounts:
            return NOT_FOUND
        return self.table.index_of(mounts[0])


def same_volume(a: VolumeIndex, b: VolumeIndex) -> bool:
    if a is NOT_FOUND or b is NOT_FOUND:
        return False
    return a == b
