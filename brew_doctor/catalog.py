"""Read installed packages out of the Cellar."""

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

RECEIPT_NAME = "INSTALL_RECEIPT.json"


@dataclass(frozen=True)
class InstalledPackage:
    name: str
    version: str
    path: str
    keg_only: bool = False
    dependencies: Tuple[str, ...] = field(default_factory=tuple)
    options: Tuple[str, ...] = field(default_factory=tuple)


class CellarCatalog:
    """Every directory in the Cellar is a rack; its newest version directory is the keg."""

    def __init__(self, cellar: str, repository: str) -> None:
        self.cellar = cellar
        self.repository = repository
        self._installed: Optional[Dict[str, InstalledPackage]] = None

    def installed(self) -> List[InstalledPackage]:
        return list(self._load().values())

    def get(self, name: str) -> Optional[InstalledPackage]:
        return self._load().get(name)

    def is_keg_only(self, name: str) -> bool:
        package = self.get(name)
        return package.keg_only if package else False

    def is_linked(self, name: str) -> bool:
        return os.path.isdir(os.path.join(self.repository, "Library", "LinkedKegs", name))

    def keg_path(self, name: str) -> Optional[str]:
        package = self.get(name)
        return package.path if package else None

    def built_with(self, name: str, option: str) -> bool:
        """True when the installed keg was built with ``--with-<option>`` or ``--<option>``."""
        package = self.get(name)
        if package is None:
            return False
        return f"--with-{option}" in package.options or f"--{option}" in package.options

    def racks(self) -> List[str]:
        if not os.path.isdir(self.cellar):
            return []
        return sorted(
            entry for entry in os.listdir(self.cellar) if os.path.isdir(os.path.join(self.cellar, entry))
        )

    def missing_dependencies(self) -> Dict[str, List[str]]:
        installed = self._load()
        missing: Dict[str, List[str]] = {}
        for package in installed.values():
            absent = sorted(dep for dep in package.dependencies if dep not in installed)
            if absent:
                missing[package.name] = absent
        return missing

    def _load(self) -> Dict[str, InstalledPackage]:
        if self._installed is None:
            self._installed = {}
            for rack in self.racks():
                package = self._read_rack(rack)
                if package is not None:
                    self._installed[rack] = package
        return self._installed

    def _read_rack(self, rack: str) -> Optional[InstalledPackage]:
        rack_path = os.path.join(self.cellar, rack)
        try:
            entries = os.listdir(rack_path)
        except OSError as exc:
            logger.debug("skipping unreadable rack %s: %s", rack_path, exc)
            return None
        versions = [entry for entry in entries if os.path.isdir(os.path.join(rack_path, entry))]
        if not versions:
            return None
        version = max(versions, key=_version_key)
        keg = os.path.join(rack_path, version)
        receipt = _read_receipt(os.path.join(keg, RECEIPT_NAME))
        dependencies = receipt.get("dependencies") or []
        return InstalledPackage(
            name=rack,
            version=version,
            path=keg,
            keg_only=bool(receipt.get("keg_only", False)),
            dependencies=tuple(str(dep) for dep in dependencies if dep),
            options=tuple(str(option) for option in receipt.get("used_options") or []),
        )


def _read_receipt(path: str) -> Dict[str, object]:
    try:
        with open(path, encoding="utf-8") as handle:
            data = json.load(handle)
    except FileNotFoundError:
        return {}
    except (OSError, json.JSONDecodeError) as exc:
        logger.debug("unreadable install receipt %s: %s", path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def _version_key(version: str) -> Tuple[object, ...]:
    return tuple((0, int(part)) if part.isdigit() else (1, part) for part in re.split(r"[._-]", version))
