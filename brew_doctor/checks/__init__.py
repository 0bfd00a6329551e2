"""The doctor's battery of checks, registered explicitly by name."""

from __future__ import annotations

from ..registry import ProbeRegistry
from . import access, filesystem, git, packages, paths, stray_files

CHECK_MODULES = (access, filesystem, git, packages, paths, stray_files)


def register_default_checks(registry: ProbeRegistry) -> ProbeRegistry:
    for module in CHECK_MODULES:
        registry.register_all(module.CHECKS)
    return registry


def default_registry() -> ProbeRegistry:
    return register_default_checks(ProbeRegistry())
