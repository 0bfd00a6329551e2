import json
import os
import sys

import pytest

from brew_doctor.catalog import CellarCatalog
from brew_doctor.config import DoctorConfig
from brew_doctor.errors import ExternalCommandFailure
from brew_doctor.system_state import COMMAND_NOT_FOUND, Environment, FileSystem, ProcessRunner


def test_config_defaults_follow_prefix():
    config = DoctorConfig.from_environment(Environment({"HOMEBREW_PREFIX": "/opt/brew", "HOME": "/home/me"}), is_mac=True)
    assert config.repository == "/opt/brew"
    assert config.cellar == "/opt/brew/Cellar"
    assert config.library == "/opt/brew/Library"
    assert config.temp == "/tmp"
    assert config.logs == "/home/me/Library/Logs/Homebrew"
    assert config.command_timeout is None


def test_config_overrides_and_timeout():
    env = Environment(
        {
            "HOMEBREW_PREFIX": "/usr/local",
            "HOMEBREW_REPOSITORY": "/usr/local/Homebrew",
            "HOMEBREW_CELLAR": "/data/Cellar",
            "HOMEBREW_TEMP": "/var/tmp",
            "HOMEBREW_DOCTOR_COMMAND_TIMEOUT": "2.5",
        }
    )
    config = DoctorConfig.from_environment(env, is_mac=False)
    assert config.library == "/usr/local/Homebrew/Library"
    assert config.cellar == "/data/Cellar"
    assert config.temp == "/var/tmp"
    assert config.command_timeout == 2.5
    assert not config.is_mac


def test_bad_timeout_is_ignored():
    env = Environment({"HOMEBREW_DOCTOR_COMMAND_TIMEOUT": "soon"})
    assert DoctorConfig.from_environment(env).command_timeout is None


def test_environment_paths_skip_empty_entries():
    env = Environment({"PATH": os.pathsep.join(["/a", "", "/b"])})
    assert env.paths() == ["/a", "/b"]
    assert Environment({}).paths() == []


def test_missing_executable_reports_not_found():
    result = ProcessRunner().run(["brew-doctor-no-such-command-xyz"])
    assert result.returncode == COMMAND_NOT_FOUND
    assert not result.ok
    with pytest.raises(ExternalCommandFailure) as excinfo:
        ProcessRunner().read(["brew-doctor-no-such-command-xyz"])
    assert excinfo.value.returncode == COMMAND_NOT_FOUND


def test_runner_reads_stdout():
    assert ProcessRunner().read([sys.executable, "-c", "print(' hi ')"]) == "hi"


def test_glob_returns_relative_matches(tmp_path):
    (tmp_path / "a.pc").write_text("")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "b.pc").write_text("")
    assert FileSystem().glob(str(tmp_path), "*.pc") == ["a.pc"]
    assert FileSystem().glob(str(tmp_path), "**/*.pc") == ["a.pc", "sub/b.pc"]


def test_catalog_reads_newest_keg(tmp_path):
    cellar = tmp_path / "Cellar"
    for version, receipt in (("1.9", {}), ("1.10", {"keg_only": True, "dependencies": ["zlib"]})):
        keg = cellar / "openssl" / version
        keg.mkdir(parents=True)
        (keg / "INSTALL_RECEIPT.json").write_text(json.dumps(receipt))
    (cellar / "zlib" / "1.3").mkdir(parents=True)
    (cellar / "stray-file").write_text("")

    catalog = CellarCatalog(str(cellar), str(tmp_path))
    assert catalog.racks() == ["openssl", "zlib"]
    openssl = catalog.get("openssl")
    assert openssl.version == "1.10"
    assert catalog.is_keg_only("openssl")
    assert not catalog.is_keg_only("zlib")
    assert catalog.missing_dependencies() == {}
    assert catalog.keg_path("missing") is None


def test_catalog_reports_missing_dependencies_and_bad_receipts(tmp_path):
    cellar = tmp_path / "Cellar"
    keg = cellar / "wget" / "1.21"
    keg.mkdir(parents=True)
    (keg / "INSTALL_RECEIPT.json").write_text(json.dumps({"dependencies": ["openssl", "libidn2"]}))
    broken = cellar / "curl" / "8.0"
    broken.mkdir(parents=True)
    (broken / "INSTALL_RECEIPT.json").write_text("{not json")
    catalog = CellarCatalog(str(cellar), str(tmp_path))
    assert catalog.missing_dependencies() == {"wget": ["libidn2", "openssl"]}
    assert not catalog.is_linked("wget")
    (tmp_path / "Library" / "LinkedKegs" / "wget").mkdir(parents=True)
    assert catalog.is_linked("wget")


def test_unreadable_rack_is_skipped(tmp_path, monkeypatch):
    cellar = tmp_path / "Cellar"
    (cellar / "git" / "2.40").mkdir(parents=True)
    (cellar / "locked" / "1.0").mkdir(parents=True)
    locked = str(cellar / "locked")
    listdir = os.listdir

    def guarded(path):
        if str(path) == locked:
            raise PermissionError(13, "Permission denied", path)
        return listdir(path)

    monkeypatch.setattr(os, "listdir", guarded)
    catalog = CellarCatalog(str(cellar), str(tmp_path))
    assert [package.name for package in catalog.installed()] == ["git"]
    assert catalog.get("locked") is None


def test_catalog_reads_build_options(tmp_path):
    keg = tmp_path / "Cellar" / "findutils" / "4.9"
    keg.mkdir(parents=True)
    (keg / "INSTALL_RECEIPT.json").write_text(json.dumps({"used_options": ["--with-default-names"]}))
    catalog = CellarCatalog(str(tmp_path / "Cellar"), str(tmp_path))
    assert catalog.built_with("findutils", "default-names")
    assert not catalog.built_with("findutils", "universal")
    assert not catalog.built_with("coreutils", "default-names")
