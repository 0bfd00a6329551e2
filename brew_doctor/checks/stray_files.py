"""Checks for files other software left in places Homebrew builds look at."""

from __future__ import annotations

import os
from typing import List, Sequence

from ..diagnostics import PASS, Outcome, RunContext, Warn
from ..formatting import inject_file_list, undent

SYSTEM_PREFIX = "/usr/local"
PRUNEABLE_DIRECTORIES = ("bin", "etc", "include", "lib", "sbin", "share", "Frameworks")

# Libraries which are generally OK, with the software they come with.
DYLIB_WHITELIST = (
    "libfuse.2.dylib",  # MacFuse
    "libfuse_ino64.2.dylib",  # MacFuse
    "libmacfuse_i32.2.dylib",  # OSXFuse MacFuse compatibility layer
    "libmacfuse_i64.2.dylib",  # OSXFuse MacFuse compatibility layer
    "libosxfuse_i32.2.dylib",  # OSXFuse
    "libosxfuse_i64.2.dylib",  # OSXFuse
    "libTrAPI.dylib",  # TrAPI / Endpoint Security VPN
)
STATIC_LIB_WHITELIST = (
    "libsecurity_agent_client.a",  # OS X 10.8.2 Supplemental Update
    "libsecurity_agent_server.a",  # OS X 10.8.2 Supplemental Update
)
PC_WHITELIST = (
    "fuse.pc",  # OSXFuse/MacFuse
    "macfuse.pc",  # OSXFuse MacFuse compatibility layer
    "osxfuse.pc",  # OSXFuse
)
LA_WHITELIST = (
    "libfuse.la",  # MacFuse
    "libfuse_ino64.la",  # MacFuse
    "libosxfuse_i32.la",  # OSXFuse
    "libosxfuse_i64.la",  # OSXFuse
)
HEADER_WHITELIST = (
    "fuse.h",  # MacFuse
    "fuse/**/*.h",  # MacFuse
    "macfuse/**/*.h",  # OSXFuse MacFuse compatibility layer
    "osxfuse/**/*.h",  # OSXFuse
)

STRAY_MESSAGE = """
Unbrewed {kind} were found in {directory}.
If you didn't put them there on purpose they could cause problems when
building Homebrew formulae, and may need to be deleted.

Unexpected {kind}:
"""


def find_stray_files(context: RunContext, directory: str, pattern: str, whitelist: Sequence[str]) -> List[str]:
    if not context.fs.is_dir(directory):
        return []
    allowed = set()
    for entry in whitelist:
        allowed.update(context.fs.glob(directory, entry))
    strays = []
    for relative in context.fs.glob(directory, pattern):
        if relative in allowed:
            continue
        candidate = os.path.join(directory, relative)
        if context.fs.is_file(candidate) and not context.fs.is_symlink(candidate):
            strays.append(candidate)
    return strays


def _stray_check(context: RunContext, directory: str, pattern: str, whitelist: Sequence[str], kind: str) -> Outcome:
    strays = find_stray_files(context, directory, pattern, whitelist)
    if not strays:
        return PASS
    message = STRAY_MESSAGE.lstrip("\n").format(kind=kind, directory=directory)
    return Warn(inject_file_list(message, strays))


def check_for_stray_dylibs(context: RunContext) -> Outcome:
    return _stray_check(context, "/usr/local/lib", "*.dylib", DYLIB_WHITELIST, "dylibs")


def check_for_stray_static_libs(context: RunContext) -> Outcome:
    return _stray_check(context, "/usr/local/lib", "*.a", STATIC_LIB_WHITELIST, "static libraries")


def check_for_stray_pcs(context: RunContext) -> Outcome:
    return _stray_check(context, "/usr/local/lib/pkgconfig", "*.pc", PC_WHITELIST, ".pc files")


def check_for_stray_las(context: RunContext) -> Outcome:
    return _stray_check(context, "/usr/local/lib", "*.la", LA_WHITELIST, ".la files")


def check_for_stray_headers(context: RunContext) -> Outcome:
    return _stray_check(context, "/usr/local/include", "**/*.h", HEADER_WHITELIST, "header files")


def check_for_macgpg2(context: RunContext) -> Outcome:
    # the real MacGPG2 ships this file; the package installer does not
    if context.fs.exists("/usr/local/MacGPG2/share/gnupg/VERSION"):
        return PASS
    suspects = (
        "/Applications/start-gpg-agent.app",
        "/Library/Receipts/libiconv1.pkg",
        "/usr/local/MacGPG2",
    )
    if not any(context.fs.exists(path) for path in suspects):
        return PASS
    return Warn(
        undent(
            """
            You may have installed MacGPG2 via the package installer.
            Several other checks in this script will turn up problems, such as stray
            dylibs in /usr/local and permissions issues with share and man in /usr/local/.
            """
        )
    )


def check_for_other_frameworks(context: RunContext) -> Outcome:
    frameworks = [
        f"/Library/Frameworks/{name}"
        for name in ("expat.framework", "libexpat.framework", "libcurl.framework")
        if context.fs.exists(f"/Library/Frameworks/{name}")
    ]
    if not frameworks:
        return PASS
    return Warn(
        "".join(
            f"{framework} detected\n"
            "This can be picked up by CMake's build system and likely cause the build to\n"
            "fail. You may need to move this file out of the way to compile CMake.\n"
            for framework in frameworks
        )
    )


def check_for_library_python(context: RunContext) -> Outcome:
    if not context.fs.exists("/Library/Frameworks/Python.framework"):
        return PASS
    return Warn(
        undent(
            """
            Python is installed at /Library/Frameworks/Python.framework

            Homebrew only supports building against the System-provided Python or a
            brewed Python. In particular, Pythons installed to /Library can interfere
            with other software installs.
            """
        )
    )


def check_for_other_package_managers(context: RunContext) -> Outcome:
    paths = context.env.paths()
    found = []
    if context.fs.exists("/opt/local/bin/port") or context.runner.which("port", paths):
        found.append("MacPorts")
    if context.fs.exists("/sw/bin/fink") or context.runner.which("fink", paths):
        found.append("Fink")
    if not found:
        return PASS
    return Warn(
        "You have MacPorts or Fink installed:\n"
        f"  {', '.join(found)}\n\n"
        "This can cause trouble. You don't have to uninstall them, but you may want to\n"
        "temporarily move them out of the way, e.g.\n\n"
        "  sudo mv /opt/local ~/macports\n"
    )


def check_for_broken_symlinks(context: RunContext) -> Outcome:
    roots = [os.path.join(context.config.prefix, name) for name in PRUNEABLE_DIRECTORIES]
    roots.append(os.path.join(context.config.library, "LinkedKegs"))
    broken: List[str] = []
    for root in roots:
        if context.fs.is_dir(root):
            broken.extend(context.fs.broken_symlinks(root))
    if not broken:
        return PASS
    listing = "\n  ".join(broken)
    return Warn(f"Broken symlinks were found. Remove them with `brew prune`:\n  {listing}\n")


def find_relative_paths(context: RunContext, *relative_paths: str) -> List[str]:
    """Existing files under the Homebrew prefix and /usr/local, in that order."""
    prefixes = [context.config.prefix]
    if SYSTEM_PREFIX not in prefixes:
        prefixes.append(SYSTEM_PREFIX)
    return [
        os.path.join(prefix, relative)
        for prefix in prefixes
        for relative in relative_paths
        if context.fs.exists(os.path.join(prefix, relative))
    ]


def check_for_gettext(context: RunContext) -> Outcome:
    if not context.config.is_mac:
        return PASS
    found = find_relative_paths(context, "lib/libgettextlib.dylib", "lib/libintl.dylib", "include/libintl.h")
    if not found:
        return PASS
    # a linked gettext keg is reported by check_for_linked_keg_only_brews
    rack = os.path.join(context.fs.realpath(context.config.cellar), "gettext") + os.sep
    if context.catalog.is_linked("gettext") and all(
        context.fs.realpath(path).startswith(rack) for path in found
    ):
        return PASS
    return Warn(
        inject_file_list(
            undent(
                """
                gettext files detected at a system prefix
                These files can cause compilation and link failures, especially if they
                are compiled with improper architectures. Consider removing these files:
                """
            ),
            found,
        )
    )


def check_for_iconv(context: RunContext) -> Outcome:
    if not context.config.is_mac:
        return PASS
    found = find_relative_paths(context, "lib/libiconv.dylib", "include/iconv.h")
    if not found:
        return PASS
    if context.catalog.is_linked("libiconv"):
        if context.catalog.is_keg_only("libiconv"):
            return PASS
        return Warn("A libiconv formula is installed and linked\nThis will break stuff. For serious. Unlink it.\n")
    return Warn(
        inject_file_list(
            undent(
                """
                libiconv files detected at a system prefix other than /usr
                Homebrew doesn't provide a libiconv formula, and expects to link against
                the system version in /usr. libiconv in other prefixes can cause
                compile or link failure, especially if compiled with improper
                architectures. OS X itself never installs anything to /usr/local so
                it was either installed by a user or some other third party software.

                tl;dr: delete these files:
                """
            ),
            found,
        )
    )


CHECKS = (
    check_for_stray_dylibs,
    check_for_stray_static_libs,
    check_for_stray_pcs,
    check_for_stray_las,
    check_for_stray_headers,
    check_for_macgpg2,
    check_for_other_frameworks,
    check_for_library_python,
    check_for_other_package_managers,
    check_for_broken_symlinks,
    check_for_gettext,
    check_for_iconv,
)
