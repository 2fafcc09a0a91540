from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from skipsetup_core.activation import ActivationHookExecutor
from skipsetup_core.config import ScaffoldSettings
from skipsetup_core.process import OutputMode, ProcessRunner
from skipsetup_core.reporting import Reporter


class PluginSource(enum.Enum):
    LOCAL = "local"
    REGISTRY = "registry"


@dataclass
class PluginInstallOutcome:
    plugin_name: str
    package_name: str
    source_used: PluginSource = PluginSource.REGISTRY
    install_succeeded: bool = False
    activation_attempted: bool = False
    activation_succeeded: bool = False
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class PluginInstaller:
    """
    Installs one named plugin into a generated project.

    A local checkout under the source root is built and linked by file reference; anything else
    (including a failed local build or link) comes from the registry. Failures never propagate:
    they land in the returned outcome's `warnings`.
    """

    settings: ScaffoldSettings
    runner: ProcessRunner
    reporter: Reporter = field(default_factory=Reporter)

    def _executor(self) -> ActivationHookExecutor:
        return ActivationHookExecutor(settings=self.settings, runner=self.runner)

    def _install_local(self, local_dir: Path, project_dir: Path) -> None:
        pm = self.settings.package_manager
        self.runner.check([pm, "run", "build"], cwd=local_dir, mode=OutputMode.RELAY_ON_FAILURE)
        self.runner.check([pm, "add", f"file:{local_dir}"], cwd=project_dir, mode=OutputMode.STREAM)

    def _install_registry(self, package_name: str, project_dir: Path) -> None:
        self.runner.check(
            [self.settings.package_manager, "add", package_name],
            cwd=project_dir,
            mode=OutputMode.STREAM,
        )

    def install(self, plugin_name: str, project_dir: Path, source_root: Path) -> PluginInstallOutcome:
        package_name = self.settings.plugin_package_name(plugin_name)
        outcome = PluginInstallOutcome(plugin_name=plugin_name, package_name=package_name)
        self.reporter.info(f"Installing plugin: {plugin_name}")

        try:
            local_dir = self.settings.plugin_source_dir(plugin_name, source_root)
            installed = False
            if local_dir.is_dir():
                self.reporter.info(f"Using local source for {package_name}: {local_dir}")
                try:
                    self._install_local(local_dir, project_dir)
                    outcome.source_used = PluginSource.LOCAL
                    installed = True
                except Exception as e:  # noqa: BLE001
                    message = f"plugin {plugin_name}: local install failed ({e}); falling back to registry"
                    self.reporter.warn(message)
                    outcome.warnings.append(message)

            if not installed:
                self.reporter.info(f"Fetching {package_name} from registry")
                self._install_registry(package_name, project_dir)
                outcome.source_used = PluginSource.REGISTRY
            outcome.install_succeeded = True
        except Exception as e:  # noqa: BLE001
            message = f"Skipping plugin {plugin_name}: installation failed - {e}"
            self.reporter.warn(message)
            outcome.warnings.append(message)
            return outcome

        try:
            self._activate(outcome, project_dir)
        except Exception as e:  # noqa: BLE001
            outcome.activation_succeeded = False
            message = f"plugin {plugin_name}: activation failed - {e}"
            self.reporter.warn(message)
            outcome.warnings.append(message)

        self.reporter.ok(f"Plugin {plugin_name} installed from {outcome.source_used.value}")
        return outcome

    def _activate(self, outcome: PluginInstallOutcome, project_dir: Path) -> None:
        result = self._executor().activate(outcome.package_name, project_dir)
        outcome.activation_attempted = result.attempted
        outcome.activation_succeeded = result.succeeded
        if result.warning is not None:
            message = f"plugin {outcome.plugin_name}: {result.warning}"
            self.reporter.warn(message)
            outcome.warnings.append(message)
        elif result.succeeded:
            self.reporter.ok(f"Activated {outcome.plugin_name}")

    def install_all(
        self,
        plugin_names: Iterable[str],
        project_dir: Path,
        source_root: Path,
    ) -> list[PluginInstallOutcome]:
        return [self.install(name, project_dir, source_root) for name in plugin_names]
