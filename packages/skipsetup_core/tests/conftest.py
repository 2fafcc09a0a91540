from __future__ import annotations

import io
import json
import subprocess
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from skipsetup_core.errors import CommandFailedError
from skipsetup_core.process import OutputMode
from skipsetup_core.reporting import Reporter

Effect = Callable[[list[str], Path], None]


@dataclass
class _Rule:
    prefix: tuple[str, ...]
    returncode: int
    effect: Effect | None
    raises: Exception | None


@dataclass
class FakeRunner:
    """Stands in for `ProcessRunner`: records calls and answers by argv prefix (last rule wins)."""

    rules: list[_Rule] = field(default_factory=list)
    calls: list[tuple[list[str], Path, OutputMode]] = field(default_factory=list)

    def on(
        self,
        *prefix: str,
        returncode: int = 0,
        effect: Effect | None = None,
        raises: Exception | None = None,
    ) -> FakeRunner:
        self.rules.append(_Rule(prefix=tuple(prefix), returncode=returncode, effect=effect, raises=raises))
        return self

    def argvs(self) -> list[list[str]]:
        return [argv for argv, _cwd, _mode in self.calls]

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path,
        mode: OutputMode = OutputMode.STREAM,
        env: Mapping[str, str] | None = None,
    ) -> subprocess.CompletedProcess[str]:
        del env
        argv_list = [str(a) for a in argv]
        self.calls.append((argv_list, Path(cwd), mode))
        for rule in reversed(self.rules):
            if tuple(argv_list[: len(rule.prefix)]) != rule.prefix:
                continue
            if rule.raises is not None:
                raise rule.raises
            if rule.effect is not None:
                rule.effect(argv_list, Path(cwd))
            return subprocess.CompletedProcess(argv_list, rule.returncode, stdout="", stderr="")
        return subprocess.CompletedProcess(argv_list, 0, stdout="", stderr="")

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


def fake_generator_effect(argv: list[str], cwd: Path) -> None:
    """Mimic the base-project generator: argv[3] is the target directory."""
    del cwd
    project_dir = Path(argv[3])
    project_dir.mkdir(parents=True, exist_ok=True)
    (project_dir / "package.json").write_text(
        json.dumps({"name": project_dir.name, "dependencies": {"next": "^15.0.0"}}, indent=2),
        encoding="utf-8",
    )
    (project_dir / "tsconfig.json").write_text(
        '{\n  "compilerOptions": {\n    // generated\n    "verbatimModuleSyntax": true,\n'
        '    "moduleResolution": "bundler",\n    "resolveJsonModule": false\n  }\n}\n',
        encoding="utf-8",
    )


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def reporter() -> Reporter:
    return Reporter(out=io.StringIO(), err=io.StringIO())


@pytest.fixture
def generator(fake_runner: FakeRunner) -> FakeRunner:
    """A fake runner whose base-project generator writes a minimal project."""
    return fake_runner.on("pnpm", "create", effect=fake_generator_effect)
