"""Checks on PATH and other environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List

from ..diagnostics import PASS, Outcome, RunContext, Warn
from ..formatting import undent

CONFIG_SCRIPT_WHITELIST = (
    "/usr/bin",
    "/usr/sbin",
    "/usr/X11/bin",
    "/usr/X11R6/bin",
    "/opt/X11/bin",
    "/Applications/Server.app/Contents/ServerRoot/usr/bin",
    "/Applications/Server.app/Contents/ServerRoot/usr/sbin",
)


@dataclass
class PathScan:
    seen_prefix_bin: bool = False
    seen_prefix_sbin: bool = False
    conflicts: List[str] = field(default_factory=list)


def scan_user_path(context: RunContext) -> PathScan:
    """Walk PATH once per run; the user_path checks all read the same scan."""

    def _scan() -> PathScan:
        prefix = context.config.prefix
        prefix_bin = os.path.join(prefix, "bin")
        prefix_sbin = os.path.join(prefix, "sbin")
        scan = PathScan()
        for entry in context.env.paths():
            if entry == "/usr/bin":
                if not scan.seen_prefix_bin and not scan.conflicts:
                    scan.conflicts = [
                        name
                        for name in context.fs.listdir(prefix_bin)
                        if context.fs.exists(os.path.join("/usr/bin", name))
                    ]
            elif entry == prefix_bin:
                scan.seen_prefix_bin = True
            elif entry == prefix_sbin:
                scan.seen_prefix_sbin = True
        return scan

    return context.memoize("user_path", _scan)


def check_path_for_trailing_slashes(context: RunContext) -> Outcome:
    bad_paths = [entry for entry in context.env.paths() if entry.endswith("/")]
    if not bad_paths:
        return PASS
    text = undent(
        """
        Some directories in your path end in a slash.
        Directories in your path should not end in a slash. This can break other
        doctor checks. The following directories should be edited:
        """
    )
    return Warn(text + "".join(f"    {entry}\n" for entry in bad_paths))


def check_user_path_1(context: RunContext) -> Outcome:
    scan = scan_user_path(context)
    if not scan.conflicts:
        return PASS
    prefix = context.config.prefix
    tools = "\n".join(f"    {name}" for name in scan.conflicts)
    return Warn(
        f"/usr/bin occurs before {prefix}/bin\n"
        "This means that system-provided programs will be used instead of those\n"
        "provided by Homebrew. The following tools exist at both paths:\n\n"
        f"{tools}\n\n"
        f"Consider setting your PATH so that {prefix}/bin\n"
        "occurs before /usr/bin. Here is a one-liner:\n"
        f"    echo export PATH='{prefix}/bin:$PATH' >> ~/.bash_profile\n"
    )


def check_user_path_2(context: RunContext) -> Outcome:
    if scan_user_path(context).seen_prefix_bin:
        return PASS
    prefix = context.config.prefix
    return Warn(
        "Homebrew's bin was not found in your PATH.\n"
        "Consider setting the PATH for example like so\n"
        f"    echo export PATH='{prefix}/bin:$PATH' >> ~/.bash_profile\n"
    )


def check_user_path_3(context: RunContext) -> Outcome:
    sbin = os.path.join(context.config.prefix, "sbin")
    if not context.fs.is_dir(sbin) or not context.fs.listdir(sbin):
        return PASS
    if scan_user_path(context).seen_prefix_sbin:
        return PASS
    return Warn(
        "Homebrew's sbin was not found in your PATH but you have installed\n"
        f"formulae that put executables in {sbin}.\n"
        "Consider setting the PATH for example like so\n"
        f"    echo export PATH='{sbin}:$PATH' >> ~/.bash_profile\n"
    )


def check_for_old_homebrew_share_python_in_path(context: RunContext) -> Outcome:
    prefix = context.config.prefix
    paths = context.env.paths()
    found = [
        os.path.join(prefix, f"share/python{suffix}")
        for suffix in ("", "3")
        if os.path.join(prefix, f"share/python{suffix}") in paths
    ]
    if not found:
        return PASS
    text = "".join(f"{entry} is not needed in PATH.\n" for entry in found)
    return Warn(
        text
        + "Formerly homebrew put Python scripts you installed via `pip` or `pip3`\n"
        "(or `easy_install`) into that directory above but now it can be removed\n"
        "from your PATH variable.\n"
        f"Python scripts will now install into {prefix}/bin.\n"
        f"You can delete anything, except 'Extras', from the {prefix}/share/python\n"
        f"(and {prefix}/share/python3) dir and install affected Python packages\n"
        "anew with `pip install --upgrade`.\n"
    )


def check_for_config_scripts(context: RunContext) -> Outcome:
    cellar = context.config.cellar
    if not context.fs.exists(cellar):
        return PASS
    real_cellar = context.fs.realpath(cellar)
    prefix = context.config.prefix
    whitelist = {entry.lower() for entry in CONFIG_SCRIPT_WHITELIST}
    whitelist.update({os.path.join(prefix, "bin").lower(), os.path.join(prefix, "sbin").lower()})

    scripts: List[str] = []
    for entry in context.env.paths():
        if entry.lower() in whitelist or not context.fs.is_dir(entry):
            continue
        realpath = context.fs.realpath(entry)
        if realpath.startswith((real_cellar, cellar)):
            continue
        scripts.extend(os.path.join(entry, name) for name in context.fs.glob(entry, "*-config"))

    if not scripts:
        return PASS
    text = undent(
        """
        "config" scripts exist outside your system or Homebrew directories.
        `./configure` scripts often look for *-config scripts to determine if
        software packages are installed, and what additional flags to use when
        compiling and linking.

        Having additional scripts in your path can confuse software installed via
        Homebrew if the config script overrides a system or Homebrew provided
        script of the same name. We found the following "config" scripts:

        """
    )
    return Warn(text + "\n".join(f"  {script}" for script in scripts))


def check_which_pkg_config(context: RunContext) -> Outcome:
    binary = context.runner.which("pkg-config", context.env.paths())
    if binary is None:
        return PASS
    mono_config = "/usr/bin/pkg-config"
    if context.fs.exists(mono_config) and "Mono.framework" in context.fs.realpath(mono_config):
        return Warn(
            "You have a non-Homebrew 'pkg-config' in your PATH:\n"
            f"  {mono_config} => {context.fs.realpath(mono_config)}\n\n"
            "This was most likely created by the Mono installer. `./configure` may\n"
            "have problems finding brew-installed packages using this other pkg-config.\n\n"
            "Mono no longer installs this file as of 3.0.4. You should\n"
            "`sudo rm /usr/bin/pkg-config` and upgrade to the latest version of Mono.\n"
        )
    if binary != os.path.join(context.config.prefix, "bin", "pkg-config"):
        return Warn(
            "You have a non-Homebrew 'pkg-config' in your PATH:\n"
            f"  {binary}\n\n"
            "`./configure` may have problems finding brew-installed packages using\n"
            "this other pkg-config.\n"
        )
    return PASS


def check_for_enthought_python(context: RunContext) -> Outcome:
    if context.runner.which("enpkg", context.env.paths()) is None:
        return PASS
    return Warn(
        undent(
            """
            Enthought Python was found in your PATH.
            This can cause build problems, as this software installs its own
            copies of iconv and libxml2 into directories that are picked up by
            other build systems.
            """
        )
    )


def check_user_curlrc(context: RunContext) -> Outcome:
    for key in ("CURL_HOME", "HOME"):
        base = context.env.get(key)
        if base and context.fs.exists(os.path.join(base, ".curlrc")):
            return Warn(
                undent(
                    """
                    You have a curlrc file
                    If you have trouble downloading packages with Homebrew, then maybe this
                    is the problem? If the following command doesn't work, then try removing
                    your curlrc:
                      curl http://github.com
                    """
                )
            )
    return PASS


def check_DYLD_vars(context: RunContext) -> Outcome:
    found = [name for name in context.env.names() if name.startswith("DYLD_")]
    if not found:
        return PASS
    text = "Setting DYLD_* vars can break dynamic linking.\nSet variables:\n"
    text += "".join(f"    {name}: {context.env.get(name)}\n" for name in found)
    if "DYLD_INSERT_LIBRARIES" in found:
        text += undent(
            """

            Setting DYLD_INSERT_LIBRARIES can cause Go builds to fail.
            Having this set is common if you use this software:
              http://asepsis.binaryage.com/
            """
        )
    return Warn(text)


def check_tmpdir(context: RunContext) -> Outcome:
    tmpdir = context.env.get("TMPDIR")
    if tmpdir is None or context.fs.is_dir(tmpdir):
        return PASS
    return Warn(f"TMPDIR {tmpdir!r} doesn't exist.")


def check_for_old_env_vars(context: RunContext) -> Outcome:
    if not context.env.get("HOMEBREW_KEEP_INFO"):
        return PASS
    return Warn(
        undent(
            """
            `HOMEBREW_KEEP_INFO` is no longer used
            info files are no longer deleted by default; you may
            remove this environment variable.
            """
        )
    )


def check_for_pydistutils_cfg_in_home(context: RunContext) -> Outcome:
    home = context.env.get("HOME")
    if not home or not context.fs.exists(os.path.join(home, ".pydistutils.cfg")):
        return PASS
    return Warn(
        undent(
            """
            A .pydistutils.cfg file was found in $HOME, which may cause Python
            builds to fail. See:
              http://bugs.python.org/issue6138
              http://bugs.python.org/issue4655
            """
        )
    )


def check_for_non_prefixed_coreutils(context: RunContext) -> Outcome:
    gnubin = os.path.join(context.config.prefix, "opt", "coreutils", "libexec", "gnubin")
    if gnubin not in context.env.paths():
        return PASS
    return Warn("Putting non-prefixed coreutils in your path can cause gmp builds to fail.\n")


def check_for_non_prefixed_findutils(context: RunContext) -> Outcome:
    if not context.config.is_mac or not context.catalog.built_with("findutils", "default-names"):
        return PASS
    return Warn("Putting non-prefixed findutils in your path can cause python builds to fail.\n")


CHECKS = (
    check_path_for_trailing_slashes,
    check_user_path_1,
    check_user_path_2,
    check_user_path_3,
    check_for_old_homebrew_share_python_in_path,
    check_for_config_scripts,
    check_which_pkg_config,
    check_for_enthought_python,
    check_user_curlrc,
    check_DYLD_vars,
    check_tmpdir,
    check_for_old_env_vars,
    check_for_pydistutils_cfg_in_home,
    check_for_non_prefixed_coreutils,
    check_for_non_prefixed_findutils,
)
