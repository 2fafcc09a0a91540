from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

_SOURCE_ROOT_ENV = "SKIPSETUP_SOURCE_ROOT"
_PACKAGE_MANAGER_ENV = "SKIPSETUP_PACKAGE_MANAGER"
_TIMEOUT_ENV = "SKIPSETUP_COMMAND_TIMEOUT_SECONDS"

_DEFAULT_GENERATOR_COMMAND: tuple[str, ...] = (
    "pnpm",
    "create",
    "t3-app@latest",
    "{project_dir}",
    "--CI",
    "--trpc",
    "--tailwind",
    "--prisma",
    "--eslint",
)


class SettingsError(ValueError):
    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}


@dataclass(frozen=True)
class ScaffoldSettings:
    package_manager: str = "pnpm"
    generator_command: tuple[str, ...] = _DEFAULT_GENERATOR_COMMAND
    plugin_package_template: str = "@forge/plugin-{name}"
    plugin_source_dir_template: str = "packages/plugins-{name}"
    manifest_filename: str = "manifest.json"
    hook_interpreter: tuple[str, ...] = ("node",)
    typecheck_command: tuple[str, ...] = ("npx", "tsc", "--noEmit")
    format_command: tuple[str, ...] = ("pnpm", "run", "format:write")
    source_root: Path = field(default_factory=Path.cwd)
    # None keeps every external command unbounded.
    command_timeout_seconds: float | None = None
    descriptor_filename: str = "forge.yaml"

    def plugin_package_name(self, plugin_name: str) -> str:
        return self.plugin_package_template.format(name=plugin_name)

    def plugin_source_dir(self, plugin_name: str, source_root: Path | None = None) -> Path:
        root = source_root if source_root is not None else self.source_root
        return root / self.plugin_source_dir_template.format(name=plugin_name)


_STR_KEYS = {
    "package_manager",
    "plugin_package_template",
    "plugin_source_dir_template",
    "manifest_filename",
    "descriptor_filename",
}
_ARGV_KEYS = {"generator_command", "hook_interpreter", "typecheck_command", "format_command"}
_ALLOWED_KEYS = _STR_KEYS | _ARGV_KEYS | {"source_root", "command_timeout_seconds", "meta"}


def _load_yaml_mapping(path: Path) -> dict[str, Any]:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise SettingsError(f"Failed to read {path}: {e}", code="read_failed") from e
    except yaml.YAMLError as e:
        raise SettingsError(f"Failed to parse YAML in {path}: {e}", code="invalid_yaml") from e

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise SettingsError(f"Expected a YAML mapping in {path}, got {type(raw).__name__}.")
    return raw


def _parse_argv(value: Any, *, field_name: str, path: Path) -> tuple[str, ...]:
    if not isinstance(value, list) or not value or not all(isinstance(x, str) and x for x in value):
        raise SettingsError(f"Expected a non-empty string list for {field_name} in {path}.")
    return tuple(value)


def _parse_timeout(value: Any, *, where: str) -> float | None:
    if value is None:
        return None
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        raise SettingsError(f"Expected a number for command_timeout_seconds in {where}.") from None
    if timeout <= 0:
        return None
    return timeout


def _parse_settings_file(path: Path, base: ScaffoldSettings) -> ScaffoldSettings:
    data = _load_yaml_mapping(path)
    unknown = set(data) - _ALLOWED_KEYS
    if unknown:
        raise SettingsError(
            f"Unknown keys in {path}: {', '.join(sorted(unknown))}. Allowed: {', '.join(sorted(_ALLOWED_KEYS))}.",
            code="unknown_keys",
            details={"unknown": sorted(unknown)},
        )

    updates: dict[str, Any] = {}
    for key in sorted(_STR_KEYS & set(data)):
        value = data[key]
        if not isinstance(value, str) or not value.strip():
            raise SettingsError(f"Expected non-empty string for {key} in {path}.")
        updates[key] = value.strip()
    for key in sorted(_ARGV_KEYS & set(data)):
        updates[key] = _parse_argv(data[key], field_name=key, path=path)

    if "source_root" in data:
        raw_root = data["source_root"]
        if not isinstance(raw_root, str) or not raw_root.strip():
            raise SettingsError(f"Expected non-empty string for source_root in {path}.")
        root = Path(raw_root)
        updates["source_root"] = root if root.is_absolute() else (path.parent / root).resolve()
    if "command_timeout_seconds" in data:
        updates["command_timeout_seconds"] = _parse_timeout(data["command_timeout_seconds"], where=str(path))

    for key in ("plugin_package_template", "plugin_source_dir_template"):
        template = updates.get(key)
        if template is not None and "{name}" not in template:
            raise SettingsError(f"{key} must contain a {{name}} placeholder in {path}.")

    return replace(base, **updates)


def load_settings(path: Path | None = None, env: Mapping[str, str] | None = None) -> ScaffoldSettings:
    """
    Build settings from defaults, an optional YAML file, then environment overrides.

    Relative `source_root` values in the file resolve against the file's directory.
    """
    environ = os.environ if env is None else env
    settings = ScaffoldSettings()
    if path is not None:
        settings = _parse_settings_file(path, settings)

    updates: dict[str, Any] = {}
    raw_root = environ.get(_SOURCE_ROOT_ENV, "").strip()
    if raw_root:
        updates["source_root"] = Path(raw_root).resolve()
    raw_pm = environ.get(_PACKAGE_MANAGER_ENV, "").strip()
    if raw_pm:
        updates["package_manager"] = raw_pm
    raw_timeout = environ.get(_TIMEOUT_ENV)
    if raw_timeout is not None and raw_timeout.strip():
        updates["command_timeout_seconds"] = _parse_timeout(raw_timeout.strip(), where=_TIMEOUT_ENV)

    return replace(settings, **updates) if updates else settings
