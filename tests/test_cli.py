import io
import json

from rich.console import Console

from brew_doctor.cli import EXIT_OK, EXIT_USAGE, EXIT_WARNINGS, build_parser, run_doctor
from brew_doctor.diagnostics import PASS, Warn
from brew_doctor.registry import ProbeRegistry
from brew_doctor.report import READY


def make_registry(calls, warn=()):
    registry = ProbeRegistry()
    for name in ("check_zulu", "check_alpha", "check_mike"):
        def run(context, name=name):
            calls.append(name)
            return Warn(f"{name} is unhappy") if name in warn else PASS

        registry.register(name, run)
    return registry


def invoke(argv, registry, context):
    console = Console(file=io.StringIO(), force_terminal=False, color_system=None, width=200)
    code = run_doctor(build_parser().parse_args(argv), registry, context, console, forced_last=())
    return code, console.file.getvalue()


def test_list_checks_runs_nothing(make_context):
    calls = []
    code, output = invoke(["--list-checks"], make_registry(calls), make_context())
    assert code == EXIT_OK
    assert output.splitlines() == ["check_alpha", "check_mike", "check_zulu"]
    assert calls == []


def test_full_run_is_sorted_and_ready(make_context):
    calls = []
    code, output = invoke([], make_registry(calls), make_context())
    assert code == EXIT_OK
    assert calls == ["check_alpha", "check_mike", "check_zulu"]
    assert READY in output


def test_warning_sets_exit_status(make_context):
    context = make_context()
    code, output = invoke([], make_registry([], warn={"check_mike"}), context)
    assert code == EXIT_WARNINGS
    assert context.failed
    assert "check_mike is unhappy" in output


def test_named_checks_run_in_given_order(make_context):
    calls = []
    invoke(["check_zulu", "check_alpha"], make_registry(calls), make_context())
    assert calls == ["check_zulu", "check_alpha"]


def test_unknown_check_is_a_usage_error(make_context):
    calls = []
    code, _ = invoke(["check_alpha", "check_missing"], make_registry(calls), make_context())
    assert code == EXIT_USAGE
    assert calls == []


def test_profile_prints_every_check(make_context):
    code, output = invoke(["-D"], make_registry([]), make_context())
    assert code == EXIT_OK
    profiled = [line.split(":")[0] for line in output.splitlines() if line.startswith("check_")]
    assert sorted(profiled) == ["check_alpha", "check_mike", "check_zulu"]


def test_json_output(make_context):
    code, output = invoke(["--json"], make_registry([], warn={"check_alpha"}), make_context())
    payload = json.loads(output)
    assert code == EXIT_WARNINGS
    assert payload["failed"] is True
    statuses = {entry["id"]: entry["status"] for entry in payload["results"]}
    assert statuses == {"check_alpha": "warning", "check_mike": "pass", "check_zulu": "pass"}


def test_profile_follows_the_ready_line(make_context):
    _, output = invoke(["-D"], make_registry([]), make_context())
    lines = output.splitlines()
    assert lines[0] == READY
    assert sorted(line.split(":")[0] for line in lines[1:]) == ["check_alpha", "check_mike", "check_zulu"]


def test_json_with_profile_stays_parseable(make_context):
    code, output = invoke(["--json", "-D"], make_registry([]), make_context())
    payload = json.loads(output)
    assert code == EXIT_OK
    seconds = [entry["seconds"] for entry in payload["profile"]]
    assert seconds == sorted(seconds)
    assert {entry["id"] for entry in payload["profile"]} == {"check_alpha", "check_mike", "check_zulu"}
