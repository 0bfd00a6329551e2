"""Checks on Git and the Homebrew repository checkout."""

from __future__ import annotations

import logging
import os
import re
import time
from typing import Optional, Tuple

from ..diagnostics import PASS, Outcome, RunContext, Warn
from ..errors import ExternalCommandFailure
from ..formatting import undent

logger = logging.getLogger(__name__)

MINIMUM_GIT_VERSION = (1, 7, 10)
OUTDATED_AFTER_SECONDS = 60 * 60 * 24

_GIT_VERSION = re.compile(r"git version ((?:\d+\.?)+)")
_SHA = re.compile(r"^([a-f0-9]{40})", re.MULTILINE)


def github_repository(context: RunContext) -> str:
    return "homebrew" if context.config.is_mac else "linuxbrew"


def parse_git_version(output: str) -> Optional[Tuple[int, ...]]:
    match = _GIT_VERSION.search(output)
    if not match:
        return None
    return tuple(int(part) for part in match.group(1).split(".") if part)


def _has_checkout(context: RunContext) -> bool:
    return context.fs.exists(os.path.join(context.config.repository, ".git"))


def check_for_git(context: RunContext) -> Outcome:
    if not context.git_available:
        return Warn(
            undent(
                """
                Git could not be found in your PATH.
                Homebrew uses Git for several internal functions, and some formulae use Git
                checkouts instead of stable tarballs. You may want to install Git:
                  brew install git
                """
            )
        )
    version = parse_git_version(context.runner.run(["git", "--version"]).stdout)
    if version is None or version >= MINIMUM_GIT_VERSION:
        return PASS
    return Warn(
        undent(
            """
            An outdated version of Git was detected in your PATH.
            Git 1.7.10 or newer is required to perform checkouts over HTTPS from GitHub.
            Please upgrade: brew upgrade git
            """
        )
    )


def check_git_newline_settings(context: RunContext) -> Outcome:
    if not context.git_available:
        return PASS
    autocrlf = context.runner.run(["git", "config", "--get", "core.autocrlf"]).stdout.strip()
    if autocrlf != "true":
        return PASS
    return Warn(
        "Suspicious Git newline settings found.\n\n"
        "The detected Git newline settings will cause checkout problems:\n"
        f"  core.autocrlf = {autocrlf}\n\n"
        "If you are not routinely dealing with Windows-based projects,\n"
        "consider removing these by running:\n"
        "`git config --global core.autocrlf input`\n"
    )


def check_git_origin(context: RunContext) -> Outcome:
    if not context.git_available or not _has_checkout(context):
        return PASS
    repository = context.config.repository
    upstream = github_repository(context)
    origin = context.runner.run(["git", "config", "--get", "remote.origin.url"], cwd=repository).stdout.strip()
    if not origin:
        return Warn(
            "Missing git origin remote.\n\n"
            "Without a correctly configured origin, Homebrew won't update\n"
            "properly. You can solve this by adding the Homebrew remote:\n"
            f"  cd {repository}\n"
            f"  git remote add origin https://github.com/Homebrew/{upstream}.git\n"
        )
    if re.search(rf"(mxcl|Homebrew)/{upstream}(\.git)?$", origin):
        return PASS
    return Warn(
        "Suspicious git origin remote found.\n\n"
        "With a non-standard origin, Homebrew won't pull updates from\n"
        "the main repository. The current git origin is:\n"
        f"  {origin}\n\n"
        "Unless you have compelling reasons, consider setting the\n"
        "origin remote to point at the main repository, located at:\n"
        f"  https://github.com/Homebrew/{upstream}.git\n"
    )


def check_git_status(context: RunContext) -> Outcome:
    if not context.git_available or not context.fs.is_dir(context.config.repository):
        return PASS
    status = context.runner.run(
        ["git", "status", "--untracked-files=all", "--porcelain", "--", "Library/Homebrew/"],
        cwd=context.config.repository,
    )
    if not status.ok or not status.stdout.strip():
        return PASS
    return Warn(
        "You have uncommitted modifications to Homebrew\n"
        "If this a surprise to you, then you should stash these modifications.\n"
        "Stashing returns Homebrew to a pristine state but can be undone\n"
        "should you later need to do so for some reason.\n"
        f"    cd {context.config.library} && git stash && git clean -d -f\n"
    )


def check_for_outdated_homebrew(context: RunContext) -> Outcome:
    if not context.git_available:
        return PASS
    repository = context.config.repository
    runner = context.runner
    if _has_checkout(context):
        try:
            local = runner.read(["git", "rev-parse", "-q", "--verify", "refs/remotes/origin/master"], cwd=repository)
        except ExternalCommandFailure:
            local = ""
        remote = _SHA.search(runner.run(["git", "ls-remote", "origin", "refs/heads/master"], cwd=repository).stdout)
        if remote is None or local == remote.group(1):
            return PASS
        try:
            timestamp = int(runner.read(["git", "log", "-1", "--format=%ct", "HEAD"], cwd=repository))
        except (ExternalCommandFailure, ValueError) as exc:
            logger.debug("cannot read last commit time: %s", exc)
            return PASS
    else:
        library = context.config.library
        if not context.fs.exists(library):
            return PASS
        timestamp = int(context.fs.mtime(library))

    if time.time() - timestamp <= OUTDATED_AFTER_SECONDS:
        return PASS
    return Warn(
        undent(
            """
            Your Homebrew is outdated.
            You haven't updated for at least 24 hours. This is a long time in brewland!
            To update Homebrew, run `brew update`.
            """
        )
    )


CHECKS = (
    check_for_git,
    check_git_newline_settings,
    check_git_origin,
    check_git_status,
    check_for_outdated_homebrew,
)
