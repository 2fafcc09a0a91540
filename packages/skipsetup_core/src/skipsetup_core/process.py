from __future__ import annotations

import enum
import os
import shutil
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from skipsetup_core.errors import CommandFailedError, CommandNotFoundError, CommandTimeoutError, ScaffoldError
from skipsetup_core.reporting import Reporter


class OutputMode(enum.Enum):
    STREAM = "stream"
    CAPTURE = "capture"
    RELAY_ON_FAILURE = "relay_on_failure"


def _resolve_argv(argv: list[str]) -> list[str]:
    """Resolve argv[0] via PATH; `.cmd`/`.bat` shims on Windows go through `cmd.exe /c`."""
    if not argv:
        raise ScaffoldError("Internal error: empty argv")

    cmd = argv[0]
    if any(sep and sep in cmd for sep in ("/", "\\", os.path.sep, os.path.altsep)):
        return argv

    resolved = shutil.which(cmd)
    if resolved is None:
        return argv

    if os.name == "nt" and Path(resolved).suffix.lower() in {".cmd", ".bat"}:
        comspec = os.environ.get("ComSpec", "cmd.exe")
        return [comspec, "/d", "/c", resolved, *argv[1:]]
    return [resolved, *argv[1:]]


@dataclass(frozen=True)
class ProcessRunner:
    """
    Synchronous runner for external commands.

    Every call blocks until the child exits. `timeout_seconds=None` means no timeout, so a stalled
    child (e.g. a hung network install) stalls the caller as well.
    """

    reporter: Reporter = field(default_factory=Reporter)
    timeout_seconds: float | None = None

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path,
        mode: OutputMode = OutputMode.STREAM,
        env: Mapping[str, str] | None = None,
    ) -> subprocess.CompletedProcess[str]:
        argv_list = [str(a) for a in argv]
        resolved_argv = _resolve_argv(argv_list)
        self.reporter.command(argv_list, cwd=str(cwd))
        capture = mode is not OutputMode.STREAM
        try:
            cp = subprocess.run(
                resolved_argv,
                cwd=str(cwd),
                env=dict(env) if env is not None else None,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
                capture_output=capture,
                timeout=self.timeout_seconds,
            )
        except FileNotFoundError as exc:
            raise CommandNotFoundError(f"Command not found: {Path(argv_list[0]).name!r}") from exc
        except subprocess.TimeoutExpired as exc:
            raise CommandTimeoutError(argv_list, exc.timeout) from exc
        except OSError as exc:
            raise ScaffoldError(f"Failed to execute {argv_list[0]!r}: {exc}") from exc

        if mode is OutputMode.RELAY_ON_FAILURE and cp.returncode != 0:
            self.reporter.relay(stdout=cp.stdout, stderr=cp.stderr)
        return cp

    def check(
        self,
        argv: Sequence[str],
        *,
        cwd: Path,
        mode: OutputMode = OutputMode.STREAM,
        env: Mapping[str, str] | None = None,
    ) -> subprocess.CompletedProcess[str]:
        cp = self.run(argv, cwd=cwd, mode=mode, env=env)
        if cp.returncode != 0:
            raise CommandFailedError([str(a) for a in argv], cp.returncode)
        return cp
