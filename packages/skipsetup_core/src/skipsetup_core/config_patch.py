from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from skipsetup_core.errors import StageError
from skipsetup_core.files import write_file

# tsconfig may contain comments, so it is patched as text rather than parsed.
_TSCONFIG_REPLACEMENTS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r'"verbatimModuleSyntax":\s*true,?\s*'), ""),
    (re.compile(r'"moduleResolution":\s*"bundler"'), '"moduleResolution": "node"'),
    (re.compile(r'"resolveJsonModule":\s*false'), '"resolveJsonModule": true'),
)


@dataclass(frozen=True)
class PatchResult:
    path: Path
    changed: bool
    warning: str | None = None


def patch_tsconfig_text(text: str) -> str:
    for pattern, replacement in _TSCONFIG_REPLACEMENTS:
        text = pattern.sub(replacement, text)
    return text


def patch_tsconfig(project_dir: Path) -> PatchResult:
    """Best effort: a missing tsconfig is skipped, an unreadable one yields a warning."""
    path = project_dir / "tsconfig.json"
    if not path.exists():
        return PatchResult(path=path, changed=False)
    try:
        original = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return PatchResult(path=path, changed=False, warning=f"failed to read {path}: {e}")

    patched = patch_tsconfig_text(original)
    if patched == original:
        return PatchResult(path=path, changed=False)
    result = write_file(path, patched)
    if not result.ok:
        return PatchResult(path=path, changed=False, warning=result.error)
    return PatchResult(path=path, changed=True)


def _load_package_manifest(path: Path) -> dict[str, Any]:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise StageError(f"Failed to read package manifest {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise StageError(f"Invalid JSON in package manifest {path}: {e}") from e
    if not isinstance(raw, dict):
        raise StageError(f"Package manifest {path} must be a JSON object")
    return raw


def add_dependencies(manifest: dict[str, Any], dependencies: list[str], *, version: str = "latest") -> list[str]:
    """Add missing `dependencies` entries in place; returns the names that were added."""
    deps = manifest.get("dependencies")
    if deps is None:
        deps = {}
        manifest["dependencies"] = deps
    if not isinstance(deps, dict):
        raise StageError("package.json: dependencies must be an object")

    dev_deps = manifest.get("devDependencies")
    present = set(deps) | (set(dev_deps) if isinstance(dev_deps, dict) else set())
    added: list[str] = []
    for name in dependencies:
        if name in present:
            continue
        deps[name] = version
        present.add(name)
        added.append(name)
    return added


def patch_package_manifest(project_dir: Path, dependencies: list[str]) -> PatchResult:
    """Merge `dependencies` into package.json. Any read, parse or write failure raises `StageError`."""
    path = project_dir / "package.json"
    if not path.is_file():
        raise StageError(f"Missing package manifest: {path}")

    manifest = _load_package_manifest(path)
    added = add_dependencies(manifest, dependencies)
    if not added:
        return PatchResult(path=path, changed=False)

    result = write_file(path, json.dumps(manifest, indent=2) + "\n")
    if not result.ok:
        raise StageError(result.error or f"Failed to write {path}")
    return PatchResult(path=path, changed=True)
