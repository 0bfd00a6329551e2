"""Checks that the directories Homebrew links into are writable."""

from __future__ import annotations

import os

from ..diagnostics import PASS, Outcome, RunContext, Warn
from ..formatting import undent


def _check_subdir_access(context: RunContext, base: str) -> Outcome:
    target = os.path.join(context.config.prefix, base)
    if not context.fs.exists(target):
        return PASS
    cant_write = sorted(
        directory for directory in context.fs.walk_dirs(target) if not context.fs.is_writable(directory)
    )
    if not cant_write:
        return PASS
    text = (
        f"Some directories in {target} aren't writable.\n"
        'This can happen if you "sudo make install" software that isn\'t managed\n'
        "by Homebrew. If a brew tries to add locale information to one of these\n"
        "directories, then the install will fail during the link step.\n"
        "You should probably `chown` them:\n\n"
    )
    return Warn(text + "".join(f"    {directory}\n" for directory in cant_write))


def _check_dir_access(context: RunContext, relative: str) -> Outcome:
    directory = os.path.join(context.config.prefix, relative)
    if not context.fs.exists(directory) or context.fs.is_writable(directory):
        return PASS
    return Warn(
        f"{directory} isn't writable.\n\n"
        'This can happen if you "sudo make install" software that isn\'t managed by\n'
        "by Homebrew. If a formula tries to write a file to this directory, the\n"
        "install will fail during the link step.\n\n"
        f"You should probably `chown` {directory}\n"
    )


def check_access_share_locale(context: RunContext) -> Outcome:
    return _check_subdir_access(context, "share/locale")


def check_access_share_man(context: RunContext) -> Outcome:
    return _check_subdir_access(context, "share/man")


def check_access_include(context: RunContext) -> Outcome:
    return _check_dir_access(context, "include")


def check_access_etc(context: RunContext) -> Outcome:
    return _check_dir_access(context, "etc")


def check_access_lib(context: RunContext) -> Outcome:
    return _check_dir_access(context, "lib")


def check_access_lib_pkgconfig(context: RunContext) -> Outcome:
    return _check_dir_access(context, "lib/pkgconfig")


def check_access_share(context: RunContext) -> Outcome:
    return _check_dir_access(context, "share")


def check_access_site_packages(context: RunContext) -> Outcome:
    site_packages = os.path.join(context.config.prefix, "lib", "python2.7", "site-packages")
    if not context.fs.exists(site_packages) or context.fs.is_writable(site_packages):
        return PASS
    return Warn(
        f"{site_packages} isn't writable.\n"
        'This can happen if you "sudo pip install" software that isn\'t managed\n'
        "by Homebrew. If you install a formula with Python modules, the install\n"
        "will fail during the link step.\n\n"
        f"You should probably `chown` {site_packages}\n"
    )


def check_access_usr_local(context: RunContext) -> Outcome:
    if context.config.prefix != "/usr/local" or context.fs.is_writable("/usr/local"):
        return PASS
    return Warn(
        undent(
            """
            The /usr/local directory is not writable.
            Even if this directory was writable when you installed Homebrew, other
            software may change permissions on this directory. Some versions of the
            "InstantOn" component of Airfoil are known to do this.

            You should probably change the ownership and permissions of /usr/local
            back to your user account.
            """
        )
    )


def check_access_logs(context: RunContext) -> Outcome:
    logs = context.config.logs
    if not context.fs.exists(logs) or context.fs.is_writable(logs):
        return PASS
    return Warn(
        f"{logs} isn't writable.\n"
        'This can happen if you "sudo make install" software that isn\'t managed\n'
        "by Homebrew.\n\n"
        "Homebrew writes debugging logs to this location.\n\n"
        f"You should probably `chown` {logs}\n"
    )


def check_homebrew_prefix(context: RunContext) -> Outcome:
    if not context.config.is_mac or context.config.prefix == "/usr/local":
        return PASS
    return Warn(
        undent(
            """
            Your Homebrew is not installed to /usr/local
            You can install Homebrew anywhere you want, but some brews may only build
            correctly if you install in /usr/local. Sorry!
            """
        )
    )


CHECKS = (
    check_access_share_locale,
    check_access_share_man,
    check_access_include,
    check_access_etc,
    check_access_lib,
    check_access_lib_pkgconfig,
    check_access_share,
    check_access_site_packages,
    check_access_usr_local,
    check_access_logs,
    check_homebrew_prefix,
)
