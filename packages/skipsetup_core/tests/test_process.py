from __future__ import annotations

import io
import sys
from pathlib import Path

import pytest

from skipsetup_core.errors import CommandFailedError, CommandNotFoundError, CommandTimeoutError
from skipsetup_core.process import OutputMode, ProcessRunner
from skipsetup_core.reporting import Reporter


def _runner(timeout_seconds: float | None = None) -> tuple[ProcessRunner, io.StringIO, io.StringIO]:
    out = io.StringIO()
    err = io.StringIO()
    return ProcessRunner(reporter=Reporter(out=out, err=err), timeout_seconds=timeout_seconds), out, err


def _py(code: str) -> list[str]:
    return [sys.executable, "-c", code]


def test_capture_mode_is_silent_on_success(tmp_path: Path) -> None:
    runner, out, err = _runner()
    cp = runner.run(_py("print('hello')"), cwd=tmp_path, mode=OutputMode.CAPTURE)
    assert cp.returncode == 0
    assert cp.stdout.strip() == "hello"
    assert "hello" not in out.getvalue()
    assert err.getvalue().startswith(f"+ ({tmp_path})")


def test_relay_on_failure_surfaces_captured_output(tmp_path: Path) -> None:
    runner, out, err = _runner()
    code = "import sys; print('partial'); sys.stderr.write('boom\\n'); sys.exit(3)"
    cp = runner.run(_py(code), cwd=tmp_path, mode=OutputMode.RELAY_ON_FAILURE)
    assert cp.returncode == 3
    assert "partial" in out.getvalue()
    assert "boom" in err.getvalue()


def test_relay_on_failure_stays_quiet_on_success(tmp_path: Path) -> None:
    runner, out, _err = _runner()
    runner.run(_py("print('fine')"), cwd=tmp_path, mode=OutputMode.RELAY_ON_FAILURE)
    assert out.getvalue() == ""


def test_check_raises_after_relaying(tmp_path: Path) -> None:
    runner, _out, err = _runner()
    with pytest.raises(CommandFailedError) as exc:
        runner.check(
            _py("import sys; sys.stderr.write('nope\\n'); sys.exit(2)"),
            cwd=tmp_path,
            mode=OutputMode.RELAY_ON_FAILURE,
        )
    assert exc.value.returncode == 2
    assert "nope" in err.getvalue()


def test_missing_executable_raises_command_not_found(tmp_path: Path) -> None:
    runner, _out, _err = _runner()
    with pytest.raises(CommandNotFoundError):
        runner.run(["definitely-not-a-real-command-skipsetup"], cwd=tmp_path, mode=OutputMode.CAPTURE)


def test_timeout_is_opt_in(tmp_path: Path) -> None:
    runner, _out, _err = _runner(timeout_seconds=0.5)
    with pytest.raises(CommandTimeoutError):
        runner.run(_py("import time; time.sleep(5)"), cwd=tmp_path, mode=OutputMode.CAPTURE)


def test_runs_in_requested_directory(tmp_path: Path) -> None:
    runner, _out, _err = _runner()
    cp = runner.run(_py("import os; print(os.getcwd())"), cwd=tmp_path, mode=OutputMode.CAPTURE)
    assert Path(cp.stdout.strip()).resolve() == tmp_path.resolve()
