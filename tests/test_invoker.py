from __future__ import annotations

import io
import sys

import pytest

from entrylaunch.config import Settings
from entrylaunch.invoker import EntryInvoker
from entrylaunch.types import InvocationRequest, OutcomeKind


@pytest.fixture
def invoker() -> EntryInvoker:
    return EntryInvoker(Settings(search_path=[]))


def test_successful_entry_receives_user_args(write_module, invoker: EntryInvoker, capsys) -> None:
    write_module(
        "echo_unit",
        """
        def main(argv):
            print("args=" + ",".join(argv))
        """,
    )

    outcome = invoker.launch(InvocationRequest("echo_unit", ("a", "b c")))

    assert outcome.kind is OutcomeKind.SUCCESS
    assert outcome.exit_code == 0
    captured = capsys.readouterr()
    assert captured.out == "args=a,b c\n"
    assert captured.err == ""


def test_entry_receives_a_list(write_module, invoker: EntryInvoker) -> None:
    write_module(
        "list_unit",
        """
        seen = []


        def main(argv):
            seen.append(argv)
        """,
    )

    outcome = invoker.launch(InvocationRequest("list_unit"))

    assert outcome.ok
    assert sys.modules["list_unit"].seen == [[]]


def test_return_value_is_ignored(write_module, invoker: EntryInvoker) -> None:
    write_module("returning_unit", "def main(argv):\n    return 7\n")

    assert invoker.launch(InvocationRequest("returning_unit")).exit_code == 0


def test_user_failure_prints_the_users_own_traceback(write_module, invoker: EntryInvoker, capsys) -> None:
    path = write_module(
        "failing_unit",
        """
        def compute():
            raise ValueError("bad input from user code")


        def main(argv):
            print("before failure")
            compute()
        """,
    )

    outcome = invoker.launch(InvocationRequest("failing_unit"))

    assert outcome.kind is OutcomeKind.USER_CODE_FAILURE
    assert outcome.exit_code == 1
    assert isinstance(outcome.cause, ValueError)
    captured = capsys.readouterr()
    assert captured.out == "before failure\n"
    assert "ValueError: bad input from user code" in captured.err
    assert str(path) in captured.err
    assert "invoker.py" not in captured.err
    assert "Unexpected error" not in captured.err


def test_system_exit_from_user_code_propagates(write_module, invoker: EntryInvoker) -> None:
    write_module("exiting_unit", "import sys\n\n\ndef main(argv):\n    sys.exit(3)\n")

    with pytest.raises(SystemExit) as exc_info:
        invoker.launch(InvocationRequest("exiting_unit"))

    assert exc_info.value.code == 3


def test_unknown_unit_is_a_resolution_failure(invoker: EntryInvoker, capsys) -> None:
    outcome = invoker.launch(InvocationRequest("NoSuchUnit123"))

    assert outcome.kind is OutcomeKind.RESOLUTION_FAILURE
    assert outcome.exit_code == 2
    err = capsys.readouterr().err
    assert "Error: Could not find class 'NoSuchUnit123'." in err
    assert "ModuleNotFoundError" in err


def test_missing_entry_function_names_the_required_signature(write_module, invoker: EntryInvoker, capsys) -> None:
    write_module("mainless_unit", "VALUE = 1\n")

    outcome = invoker.launch(InvocationRequest("mainless_unit"))

    assert outcome.kind is OutcomeKind.RESOLUTION_FAILURE
    assert outcome.exit_code == 2
    err = capsys.readouterr().err
    assert "Error: 'mainless_unit' does not declare a method:" in err
    assert "def main(argv: list[str]) -> None" in err


def test_configured_entry_function_name_is_used(write_module, capsys) -> None:
    write_module("run_unit", "def run(argv):\n    print('ran', *argv)\n")

    outcome = EntryInvoker(Settings(search_path=[], entry_function="run")).launch(InvocationRequest("run_unit", ("x",)))

    assert outcome.ok
    assert capsys.readouterr().out == "ran x\n"


def test_instance_method_is_a_shape_mismatch(write_module, invoker: EntryInvoker, capsys) -> None:
    write_module(
        "needs_instance_unit",
        """
        class Main:
            def main(self, argv):
                pass
        """,
    )

    outcome = invoker.launch(InvocationRequest("needs_instance_unit:Main"))

    assert outcome.kind is OutcomeKind.SHAPE_MISMATCH
    assert outcome.exit_code == 2
    assert "must be static" in capsys.readouterr().err


def test_refused_lookup_is_an_access_failure(write_module, invoker: EntryInvoker, capsys) -> None:
    write_module(
        "sealed_unit",
        """
        def __getattr__(name):
            raise PermissionError("sealed")
        """,
    )

    outcome = invoker.launch(InvocationRequest("sealed_unit"))

    assert outcome.kind is OutcomeKind.ACCESS_FAILURE
    assert outcome.exit_code == 1
    err = capsys.readouterr().err
    assert "Unable to call main(argv) on sealed_unit" in err
    assert "PermissionError: sealed" in err


def test_import_time_failure_is_unexpected(write_module, invoker: EntryInvoker, capsys) -> None:
    write_module("import_boom_unit", "raise RuntimeError('static init failed')\n")

    outcome = invoker.launch(InvocationRequest("import_boom_unit"))

    assert outcome.kind is OutcomeKind.UNEXPECTED_FAILURE
    assert outcome.exit_code == 1
    err = capsys.readouterr().err
    assert "Unexpected error while launching import_boom_unit:" in err
    assert "RuntimeError: static init failed" in err


def test_launch_switches_argv_to_user_scope(write_module, invoker: EntryInvoker) -> None:
    write_module(
        "argv_unit",
        """
        import sys

        captured = []


        def main(argv):
            captured.extend(sys.argv)
        """,
    )

    invoker.launch(InvocationRequest("argv_unit", ("--flag", "value")))

    captured = sys.modules["argv_unit"].captured
    assert captured[0].endswith("argv_unit.py")
    assert captured[1:] == ["--flag", "value"]


def test_same_outcome_kind_maps_to_same_exit_code(invoker: EntryInvoker) -> None:
    first = invoker.launch(InvocationRequest("NoSuchUnit123"))
    second = invoker.launch(InvocationRequest("NoSuchUnit123"))

    assert first.kind is second.kind
    assert first.exit_code == second.exit_code == 2


class FlushRecorder(io.StringIO):
    def __init__(self) -> None:
        super().__init__()
        self.flushes = 0

    def flush(self) -> None:
        self.flushes += 1
        super().flush()


@pytest.mark.parametrize(
    ("entry_name", "source"),
    [
        ("NoSuchUnit123", None),
        ("flush_mainless_unit", "VALUE = 1\n"),
        ("flush_shape_unit:Main", "class Main:\n    def main(self, argv):\n        pass\n"),
        ("flush_failing_unit", "def main(argv):\n    raise ValueError('x')\n"),
    ],
)
def test_failed_launch_flushes_both_streams(
    write_module, invoker: EntryInvoker, monkeypatch: pytest.MonkeyPatch, entry_name: str, source: str | None
) -> None:
    if source is not None:
        write_module(entry_name.split(":")[0], source)
    stdout, stderr = FlushRecorder(), FlushRecorder()
    monkeypatch.setattr(sys, "stdout", stdout)
    monkeypatch.setattr(sys, "stderr", stderr)

    outcome = invoker.launch(InvocationRequest(entry_name))

    assert not outcome.ok
    assert stdout.flushes >= 1
    assert stderr.flushes >= 1


def test_user_base_exception_is_a_user_code_failure(write_module, invoker: EntryInvoker, capsys) -> None:
    write_module(
        "base_exception_unit",
        """
        class Halt(BaseException):
            pass


        def main(argv):
            raise Halt("stopped by user code")
        """,
    )

    outcome = invoker.launch(InvocationRequest("base_exception_unit"))

    assert outcome.kind is OutcomeKind.USER_CODE_FAILURE
    assert outcome.exit_code == 1
    err = capsys.readouterr().err
    assert "Halt: stopped by user code" in err
    assert "invoker.py" not in err


def test_keyboard_interrupt_from_user_code_propagates(write_module, invoker: EntryInvoker) -> None:
    write_module("interrupted_unit", "def main(argv):\n    raise KeyboardInterrupt\n")

    with pytest.raises(KeyboardInterrupt):
        invoker.launch(InvocationRequest("interrupted_unit"))
