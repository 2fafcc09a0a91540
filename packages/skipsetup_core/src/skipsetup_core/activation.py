from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator

from skipsetup_core.config import ScaffoldSettings
from skipsetup_core.errors import ScaffoldError
from skipsetup_core.process import OutputMode, ProcessRunner

MANIFEST_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "properties": {
        "hooks": {
            "type": "object",
            "properties": {
                "activate": {"type": "string", "minLength": 1},
            },
        },
    },
}


class ManifestError(ValueError):
    pass


@dataclass(frozen=True)
class ActivationManifest:
    hooks: Mapping[str, str] = field(default_factory=dict)

    @property
    def activate(self) -> str | None:
        return self.hooks.get("activate")


@dataclass(frozen=True)
class ActivationResult:
    attempted: bool
    succeeded: bool
    warning: str | None = None


def _schema_errors(data: Any) -> list[str]:
    validator = Draft202012Validator(MANIFEST_SCHEMA)
    errors = sorted(validator.iter_errors(data), key=lambda e: str(e.path))
    formatted: list[str] = []
    for error in errors:
        path = "$"
        for part in error.path:
            path += f"[{part!r}]" if isinstance(part, int) else f".{part}"
        formatted.append(f"{path}: {error.message}")
    return formatted


def load_activation_manifest(path: Path) -> ActivationManifest:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ManifestError(f"Failed to read {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise ManifestError(f"Manifest {path} is not valid UTF-8: {e}") from e
    except json.JSONDecodeError as e:
        raise ManifestError(f"Invalid JSON in {path}: {e}") from e

    errors = _schema_errors(raw)
    if errors:
        raise ManifestError(f"Invalid plugin manifest {path}: {'; '.join(errors)}")

    hooks_raw = raw.get("hooks") or {}
    hooks = {k: v for k, v in hooks_raw.items() if isinstance(v, str)}
    return ActivationManifest(hooks=hooks)


@dataclass(frozen=True)
class ActivationHookExecutor:
    """Runs the `hooks.activate` script an installed plugin package may declare."""

    settings: ScaffoldSettings
    runner: ProcessRunner

    def package_dir(self, package_name: str, project_dir: Path) -> Path:
        return project_dir / "node_modules" / Path(*package_name.split("/"))

    def activate(self, package_name: str, project_dir: Path) -> ActivationResult:
        package_dir = self.package_dir(package_name, project_dir)
        manifest_path = package_dir / self.settings.manifest_filename
        if not manifest_path.is_file():
            return ActivationResult(attempted=False, succeeded=False)

        try:
            manifest = load_activation_manifest(manifest_path)
        except ManifestError as e:
            return ActivationResult(attempted=False, succeeded=False, warning=f"{package_name}: {e}")

        hook_rel = manifest.activate
        if hook_rel is None:
            return ActivationResult(attempted=False, succeeded=False)

        hook_path = package_dir / hook_rel
        if not hook_path.is_file():
            return ActivationResult(
                attempted=False,
                succeeded=False,
                warning=f"{package_name}: activate hook not found: {hook_path}",
            )

        argv = [*self.settings.hook_interpreter, str(hook_path), str(project_dir)]
        try:
            cp = self.runner.run(argv, cwd=project_dir, mode=OutputMode.STREAM)
        except ScaffoldError as e:
            return ActivationResult(attempted=True, succeeded=False, warning=f"{package_name}: activation failed: {e}")
        if cp.returncode != 0:
            return ActivationResult(
                attempted=True,
                succeeded=False,
                warning=f"{package_name}: activation exited with {cp.returncode}",
            )
        return ActivationResult(attempted=True, succeeded=True)
