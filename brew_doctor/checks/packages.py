"""Checks on the kegs installed in the Cellar."""

from __future__ import annotations

import os
from typing import Dict, List

from ..diagnostics import PASS, Outcome, RunContext, Warn
from ..formatting import undent


def linked_files(context: RunContext, keg: str) -> List[str]:
    """Files under the prefix that are symlinks straight into ``keg``.

    A directory linked as a whole is not descended into and is not reported.
    """
    prefix = context.config.prefix
    found: List[str] = []
    for dirpath, dirnames, filenames in os.walk(keg):
        kept = []
        for name in dirnames:
            src = os.path.join(dirpath, name)
            if not _links_to(context, os.path.join(prefix, os.path.relpath(src, keg)), src):
                kept.append(name)
        dirnames[:] = kept
        for name in filenames:
            src = os.path.join(dirpath, name)
            dst = os.path.join(prefix, os.path.relpath(src, keg))
            if _links_to(context, dst, src):
                found.append(dst)
    return sorted(found)


def _links_to(context: RunContext, dst: str, src: str) -> bool:
    fs = context.fs
    return fs.is_symlink(dst) and fs.exists(dst) and fs.realpath(dst) == fs.realpath(src)


def check_for_linked_keg_only_brews(context: RunContext) -> Outcome:
    if not context.fs.exists(context.config.cellar):
        return PASS
    warnings: Dict[str, List[str]] = {}
    for package in context.catalog.installed():
        if not package.keg_only:
            continue
        links = linked_files(context, package.path)
        if links:
            warnings[package.name] = links
    if not warnings:
        return PASS
    text = undent(
        """
        Some keg-only formula are linked into the Cellar.
        Linking a keg-only formula, such as gettext, into the cellar with
        `brew link <formula>` will cause other formulae to detect them during
        the `./configure` step. This may cause problems when compiling those
        other formulae.

        Binaries provided by keg-only formulae may override system binaries
        with other strange results.

        You may wish to `brew unlink` these brews:

        """
    )
    return Warn(text + "".join(f"    {name}\n" for name in sorted(warnings)))


def check_missing_deps(context: RunContext) -> Outcome:
    if not context.fs.exists(context.config.cellar):
        return PASS
    missing = set()
    for deps in context.catalog.missing_dependencies().values():
        missing.update(deps)
    if not missing:
        return PASS
    return Warn(
        "Some installed formula are missing dependencies.\n"
        "You should `brew install` the missing dependencies:\n\n"
        f"    brew install {' '.join(sorted(missing))}\n\n"
        "Run `brew missing` for more details.\n"
    )


def check_for_unlinked_but_not_keg_only(context: RunContext) -> Outcome:
    catalog = context.catalog
    if not context.fs.exists(context.config.cellar):
        return PASS
    unlinked = [
        rack for rack in catalog.racks() if not catalog.is_linked(rack) and not catalog.is_keg_only(rack)
    ]
    if not unlinked:
        return PASS
    listing = "\n        ".join(unlinked)
    return Warn(
        "You have unlinked kegs in your Cellar\n"
        "Leaving kegs unlinked can lead to build-trouble and cause brews that depend on\n"
        "those kegs to fail to run properly once built. Run `brew link` on these:\n\n"
        f"        {listing}\n"
    )


CHECKS = (
    check_for_linked_keg_only_brews,
    check_missing_deps,
    check_for_unlinked_but_not_keg_only,
)
