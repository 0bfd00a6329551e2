from conftest import FakeRunner

from brew_doctor.system_state import CommandResult
from brew_doctor.volumes import (
    NOT_FOUND,
    MountEntry,
    MountLister,
    VolumeResolver,
    VolumeTable,
    parse_df_output,
    same_volume,
)

DF_ALL = """\
Filesystem    512-blocks      Used Available Capacity  Mounted on
/dev/disk1s1   489562928 440803616  48247312    91%    /
devfs                381       381         0   100%    /dev
/dev/disk2s1   976562500 100000000 876562500    11%    /Volumes/X
/dev/disk3s1   976562500 900000000  76562500    93%    /Volumes/Y
map auto_home          0         0         0   100%    /System/Volumes/Data/home
"""

DF_ROOT = """\
Filesystem    512-blocks      Used Available Capacity  Mounted on
/dev/disk1s1   489562928 440803616  48247312    91%    /
"""

DF_X = """\
Filesystem    512-blocks      Used Available Capacity  Mounted on
/dev/disk2s1   976562500 100000000 876562500    11%    /Volumes/X
"""


def make_resolver(extra=None) -> VolumeResolver:
    responses = {
        ("/bin/df", "-P"): DF_ALL,
        ("/bin/df", "-P", "/usr/local/Cellar"): DF_ROOT,
        ("/bin/df", "-P", "/Volumes/X/tmp"): DF_X,
        ("/bin/df", "-P", "/missing"): CommandResult("", 1),
    }
    responses.update(extra or {})
    return VolumeResolver(MountLister(FakeRunner(responses)))


def test_parse_keeps_mountpoints_in_listing_order():
    entries = parse_df_output(DF_ALL)
    assert [entry.mountpoint for entry in entries] == [
        "/",
        "/dev",
        "/Volumes/X",
        "/Volumes/Y",
        "/System/Volumes/Data/home",
    ]


def test_parse_drops_header_and_garbage():
    text = "Filesystem 512-blocks Used Available Capacity Mounted on\nnot a df line\n\n"
    assert parse_df_output(text) == []


def test_parse_keeps_spaces_in_mountpoint():
    line = "/dev/disk4s1   1000   500   500    50%    /Volumes/My Disk\n"
    assert parse_df_output(line) == [MountEntry(mountpoint="/Volumes/My Disk")]


def test_parse_rejects_four_digit_percentage():
    assert parse_df_output("/dev/x 1 1 1 1000% /odd\n") == []


def test_build_table_from_unfiltered_listing():
    resolver = make_resolver()
    table = resolver.build_table()
    assert table.mountpoints[:4] == ["/", "/dev", "/Volumes/X", "/Volumes/Y"]


def test_which_returns_table_position():
    resolver = make_resolver({("/bin/df", "-P"): DF_ROOT + DF_X.splitlines()[1] + "\n"})
    assert resolver.which("/usr/local/Cellar") == 0
    assert resolver.which("/Volumes/X/tmp") == 1


def test_which_without_listing_line_is_not_found():
    resolver = make_resolver()
    assert resolver.which("/missing") is NOT_FOUND


def test_which_mount_absent_from_table_is_not_found():
    resolver = VolumeResolver(
        MountLister(FakeRunner({("/bin/df", "-P", "/Volumes/X/tmp"): DF_X})),
        table=VolumeTable((MountEntry("/"),)),
    )
    assert resolver.which("/Volumes/X/tmp") is NOT_FOUND


def test_which_relists_mounts_on_every_call():
    runner = FakeRunner({("/bin/df", "-P"): DF_ALL, ("/bin/df", "-P", "/usr/local/Cellar"): DF_ROOT})
    resolver = VolumeResolver(MountLister(runner))
    resolver.which("/usr/local/Cellar")
    resolver.which("/usr/local/Cellar")
    scoped = [args for args, _ in runner.calls if args == ("/bin/df", "-P", "/usr/local/Cellar")]
    unscoped = [args for args, _ in runner.calls if args == ("/bin/df", "-P")]
    assert len(scoped) == 2
    assert len(unscoped) == 1


def test_failed_listing_gives_empty_table():
    resolver = VolumeResolver(MountLister(FakeRunner()))
    assert len(resolver.build_table()) == 0
    assert resolver.which("/anything") is NOT_FOUND


def test_not_found_never_matches():
    assert NOT_FOUND != NOT_FOUND
    assert not (NOT_FOUND == NOT_FOUND)
    assert not same_volume(NOT_FOUND, NOT_FOUND)
    assert not same_volume(NOT_FOUND, 0)
    assert same_volume(2, 2)
    assert not same_volume(0, 1)
