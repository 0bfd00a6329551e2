"""Checks on the volumes holding the Cellar and the temporary directory."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from typing import List

from ..diagnostics import PASS, Outcome, RunContext, Warn
from ..formatting import undent
from ..volumes import NOT_FOUND, same_volume

logger = logging.getLogger(__name__)


def check_for_multiple_volumes(context: RunContext) -> Outcome:
    config = context.config
    if not config.is_mac or not context.fs.exists(config.cellar):
        return PASS
    if not context.fs.is_dir(config.temp):
        logger.debug("skipping volume comparison, %s is missing", config.temp)
        return PASS

    real_cellar = context.fs.realpath(config.cellar)
    try:
        scratch = tempfile.mkdtemp(prefix="homebrew-brew-doctor-", dir=config.temp)
    except OSError as exc:
        logger.debug("skipping volume comparison, cannot write to %s: %s", config.temp, exc)
        return PASS
    try:
        real_temp = os.path.dirname(context.fs.realpath(scratch))
        where_cellar = context.volumes.which(real_cellar)
        where_temp = context.volumes.which(real_temp)
    finally:
        shutil.rmtree(scratch, ignore_errors=True)

    if same_volume(where_cellar, where_temp):
        return PASS
    return Warn(
        undent(
            """
            Your Cellar and TEMP directories are on different volumes.
            OS X won't move relative symlinks across volumes unless the target file already
            exists. Brews known to be affected by this are Git and Narwhal.

            You should set the "HOMEBREW_TEMP" environmental variable to a suitable
            directory on the same volume as your Cellar.
            """
        )
    )


def _is_case_sensitive(context: RunContext, directory: str) -> bool:
    # Both variants exist on a case-insensitive filesystem. A real /TMP next to
    # /tmp reads as case-insensitive too.
    if not context.fs.exists(directory):
        return False
    return not (context.fs.exists(directory.upper()) and context.fs.exists(directory.lower()))


def check_filesystem_case_sensitive(context: RunContext) -> Outcome:
    config = context.config
    if not config.is_mac:
        return PASS
    candidates = [config.prefix, config.repository, config.cellar, config.temp]
    affected = [directory for directory in candidates if _is_case_sensitive(context, directory)]
    if not affected:
        return PASS

    resolver = context.volumes
    volumes: List[str] = []
    for directory in affected:
        index = resolver.which(directory)
        if index is NOT_FOUND:
            mounts = resolver.get_mounts(directory)
            label = mounts[0] if mounts else directory
        else:
            label = resolver.table.entries[index].mountpoint
        if label not in volumes:
            volumes.append(label)
    return Warn(
        f"The filesystem on {','.join(volumes)} appears to be case-sensitive.\n"
        "The default OS X filesystem is case-insensitive. Please report any apparent problems.\n"
    )


def check_for_symlinked_cellar(context: RunContext) -> Outcome:
    cellar = context.config.cellar
    if not context.fs.exists(cellar) or not context.fs.is_symlink(cellar):
        return PASS
    return Warn(
        "Symlinked Cellars can cause problems.\n"
        f"Your Homebrew Cellar is a symlink: {cellar}\n"
        f"                which resolves to: {context.fs.realpath(cellar)}\n\n"
        "The recommended Homebrew installations are either:\n"
        "(A) Have Cellar be a real directory inside of your HOMEBREW_PREFIX\n"
        '(B) Symlink "bin/brew" into your prefix, but don\'t symlink "Cellar".\n\n'
        "Older installations of Homebrew may have created a symlinked Cellar, but this can\n"
        "cause problems when two formula install to locations that are mapped on top of each\n"
        "other during the linking step.\n"
    )


def check_homebrew_temp_executable(context: RunContext) -> Outcome:
    temp = context.config.temp
    if not context.fs.exists(temp):
        return PASS
    options = context.fs.mount_options(temp)
    if not options or "noexec" not in options:
        return PASS
    prefix = context.config.prefix
    return Warn(
        f"The disk volume of {temp} is not executable.\n"
        "Set the HOMEBREW_TEMP environment variable to a directory that is mounted on\n"
        "an executable volume.\n"
        "For example:\n"
        "  export HOMEBREW_TEMP=/var/tmp\n"
        "or\n"
        f"  export HOMEBREW_TEMP={prefix}/tmp\n"
    )


CHECKS = (
    check_for_multiple_volumes,
    check_filesystem_case_sensitive,
    check_for_symlinked_cellar,
    check_homebrew_temp_executable,
)
