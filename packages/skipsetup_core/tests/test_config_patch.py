from __future__ import annotations

import json
from pathlib import Path

import pytest

from skipsetup_core.config_patch import (
    add_dependencies,
    patch_package_manifest,
    patch_tsconfig,
    patch_tsconfig_text,
)
from skipsetup_core.errors import StageError


def test_tsconfig_text_patch_keeps_comments() -> None:
    text = (
        "{\n  // keep me\n  \"compilerOptions\": {\n    \"verbatimModuleSyntax\": true,\n"
        "    \"moduleResolution\": \"bundler\",\n    \"resolveJsonModule\": false\n  }\n}\n"
    )
    patched = patch_tsconfig_text(text)
    assert "// keep me" in patched
    assert "verbatimModuleSyntax" not in patched
    assert '"moduleResolution": "node"' in patched
    assert '"resolveJsonModule": true' in patched


def test_missing_tsconfig_is_skipped(tmp_path: Path) -> None:
    result = patch_tsconfig(tmp_path)
    assert not result.changed
    assert result.warning is None


def test_undecodable_tsconfig_is_a_warning(tmp_path: Path) -> None:
    (tmp_path / "tsconfig.json").write_bytes(b'{"x": "\xff"}')

    result = patch_tsconfig(tmp_path)

    assert not result.changed
    assert result.warning is not None and "failed to read" in result.warning


def test_already_patched_tsconfig_is_untouched(tmp_path: Path) -> None:
    (tmp_path / "tsconfig.json").write_text('{"compilerOptions": {"moduleResolution": "node"}}', encoding="utf-8")
    assert not patch_tsconfig(tmp_path).changed


def test_add_dependencies_skips_existing_and_dev_entries() -> None:
    manifest = {"dependencies": {"prisma": "^5"}, "devDependencies": {"@prisma/client": "^5"}}
    added = add_dependencies(manifest, ["prisma", "@prisma/client", "better-auth"])
    assert added == ["better-auth"]
    assert manifest["dependencies"] == {"prisma": "^5", "better-auth": "latest"}


def test_add_dependencies_creates_section() -> None:
    manifest: dict = {"name": "app"}
    assert add_dependencies(manifest, ["stripe"]) == ["stripe"]
    assert manifest["dependencies"] == {"stripe": "latest"}


def test_patch_package_manifest_writes_json(tmp_path: Path) -> None:
    (tmp_path / "package.json").write_text(json.dumps({"name": "app"}), encoding="utf-8")

    result = patch_package_manifest(tmp_path, ["better-auth"])

    assert result.changed
    assert json.loads((tmp_path / "package.json").read_text(encoding="utf-8"))["dependencies"] == {
        "better-auth": "latest"
    }


def test_missing_package_manifest_raises(tmp_path: Path) -> None:
    with pytest.raises(StageError, match="Missing package manifest"):
        patch_package_manifest(tmp_path, ["stripe"])


def test_invalid_package_manifest_raises(tmp_path: Path) -> None:
    (tmp_path / "package.json").write_text("{oops", encoding="utf-8")
    with pytest.raises(StageError, match="Invalid JSON"):
        patch_package_manifest(tmp_path, ["stripe"])
