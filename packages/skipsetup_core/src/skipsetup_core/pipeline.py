"""
Scaffolding pipeline.

A run resolves the tier's bundle once, then executes a fixed, ordered list of stages. Each stage
carries a failure policy:

- `ABORT`: any exception stops the run; later stages never start and the result is `FAILED`.
- `CONTINUE`: any exception is recorded as a warning and the run moves on.

The plugin stage is `CONTINUE` at two levels: the installer already isolates each plugin, so one
broken plugin never prevents the next from being attempted.
"""

from __future__ import annotations

import enum
import os
import shutil
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from skipsetup_core.api_layer import materialize_api_layer
from skipsetup_core.bundles import BundleDescriptor, bundle_dependencies, resolve_bundle
from skipsetup_core.config import ScaffoldSettings
from skipsetup_core.config_patch import patch_package_manifest, patch_tsconfig
from skipsetup_core.context_docs import generate_context_documents
from skipsetup_core.errors import ScaffoldError, StageError
from skipsetup_core.files import failed_writes
from skipsetup_core.infra import write_bundle_descriptor, write_infra_descriptor
from skipsetup_core.plugins import PluginInstaller, PluginInstallOutcome
from skipsetup_core.process import OutputMode, ProcessRunner
from skipsetup_core.reporting import Reporter


class FailurePolicy(enum.Enum):
    ABORT = "abort"
    CONTINUE = "continue"


class PipelineState(enum.Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass
class RunContext:
    bundle: BundleDescriptor
    template: str
    project_dir: Path
    source_root: Path
    reporter: Reporter
    warnings: list[str] = field(default_factory=list)
    plugin_outcomes: list[PluginInstallOutcome] = field(default_factory=list)

    def warn(self, message: str) -> None:
        self.reporter.warn(message)
        self.warnings.append(message)


@dataclass(frozen=True)
class PipelineStage:
    index: int
    total: int
    name: str
    action: Callable[[RunContext], None]
    policy: FailurePolicy


@dataclass(frozen=True)
class PipelineResult:
    status: PipelineState
    bundle: BundleDescriptor
    project_dir: Path
    warnings: tuple[str, ...]
    plugin_outcomes: tuple[PluginInstallOutcome, ...]
    stages_run: tuple[str, ...]
    failed_stage: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is PipelineState.COMPLETE


class ScaffoldPipeline:
    def __init__(
        self,
        settings: ScaffoldSettings | None = None,
        *,
        reporter: Reporter | None = None,
        runner: ProcessRunner | None = None,
    ) -> None:
        self.settings = settings or ScaffoldSettings()
        self.reporter = reporter or Reporter()
        self.runner = runner or ProcessRunner(
            reporter=self.reporter,
            timeout_seconds=self.settings.command_timeout_seconds,
        )
        self.installer = PluginInstaller(settings=self.settings, runner=self.runner, reporter=self.reporter)
        self.state = PipelineState.NOT_STARTED
        self.current_stage: int | None = None

    def stages(self) -> list[PipelineStage]:
        plan: list[tuple[str, Callable[[RunContext], None], FailurePolicy]] = [
            ("Clean target directory", self._clean_target, FailurePolicy.ABORT),
            ("Bootstrap base project", self._bootstrap, FailurePolicy.ABORT),
            ("Patch generated configuration", self._patch_configuration, FailurePolicy.ABORT),
            ("Install dependencies", self._install_dependencies, FailurePolicy.ABORT),
            ("Materialize API layer", self._materialize_api_layer, FailurePolicy.ABORT),
            ("Integrate plugins", self._integrate_plugins, FailurePolicy.CONTINUE),
            ("Generate AI context documents", self._generate_context, FailurePolicy.CONTINUE),
            ("Generate infrastructure descriptors", self._generate_infra, FailurePolicy.CONTINUE),
            ("Run quality gates", self._quality_gates, FailurePolicy.CONTINUE),
        ]
        total = len(plan)
        return [
            PipelineStage(index=i, total=total, name=name, action=action, policy=policy)
            for i, (name, action, policy) in enumerate(plan, start=1)
        ]

    def run(self, tier: str, template: str, project_dir: Path) -> PipelineResult:
        bundle = resolve_bundle(tier)
        target = Path(os.path.abspath(project_dir))
        ctx = RunContext(
            bundle=bundle,
            template=template,
            project_dir=target,
            source_root=self.settings.source_root,
            reporter=self.reporter,
        )
        self.reporter.banner(f"Scaffolding {tier} project in {target}")

        stages_run: list[str] = []
        self.state = PipelineState.RUNNING
        for stage in self.stages():
            self.current_stage = stage.index
            self.reporter.stage(stage.index, stage.total, stage.name)
            try:
                stage.action(ctx)
            except Exception as e:  # noqa: BLE001
                if stage.policy is FailurePolicy.ABORT:
                    self.state = PipelineState.FAILED
                    message = f"Scaffolding failed at stage {stage.index}/{stage.total} ({stage.name}): {e}"
                    self.reporter.summary(ok=False, headline=message, warnings=ctx.warnings)
                    return PipelineResult(
                        status=PipelineState.FAILED,
                        bundle=bundle,
                        project_dir=target,
                        warnings=tuple(ctx.warnings),
                        plugin_outcomes=tuple(ctx.plugin_outcomes),
                        stages_run=tuple(stages_run),
                        failed_stage=stage.name,
                        error=str(e),
                    )
                ctx.warn(f"{stage.name}: {e}")
            stages_run.append(stage.name)

        self.state = PipelineState.COMPLETE
        self.current_stage = None
        self.reporter.summary(
            ok=True,
            headline=f"Scaffolding complete: {target}",
            warnings=ctx.warnings,
            next_steps=(
                f"cd {target}",
                f"{self.settings.package_manager} db:push",
                f"{self.settings.package_manager} dev",
            ),
        )
        return PipelineResult(
            status=PipelineState.COMPLETE,
            bundle=bundle,
            project_dir=target,
            warnings=tuple(ctx.warnings),
            plugin_outcomes=tuple(ctx.plugin_outcomes),
            stages_run=tuple(stages_run),
        )

    def _clean_target(self, ctx: RunContext) -> None:
        target = ctx.project_dir
        if target.exists() or target.is_symlink():
            if target.is_dir() and not target.is_symlink():
                shutil.rmtree(target)
            else:
                target.unlink()
            self.reporter.info(f"Cleaned existing {target}")
        target.mkdir(parents=True)

    def _generator_context(self, ctx: RunContext) -> dict[str, str]:
        return {
            "project_dir": str(ctx.project_dir),
            "name": ctx.project_dir.name,
            "template": ctx.template,
            "tier": ctx.bundle.tier,
        }

    def _bootstrap(self, ctx: RunContext) -> None:
        context = self._generator_context(ctx)
        try:
            argv = [arg.format_map(context) for arg in self.settings.generator_command]
        except KeyError as e:
            raise StageError(f"Unknown placeholder in generator_command: {e}") from e

        env = dict(os.environ)
        for k, v in context.items():
            env[f"SKIPSETUP_VAR_{k.upper()}"] = v

        cp = self.runner.run(argv, cwd=ctx.project_dir.parent, mode=OutputMode.STREAM, env=env)
        if cp.returncode != 0:
            raise StageError(f"base project generator failed ({cp.returncode})")
        if not ctx.project_dir.is_dir():
            raise StageError(f"generator completed but destination does not exist: {ctx.project_dir}")

    def _patch_configuration(self, ctx: RunContext) -> None:
        ts = patch_tsconfig(ctx.project_dir)
        if ts.warning is not None:
            ctx.warn(f"tsconfig patch skipped: {ts.warning}")
        elif ts.changed:
            self.reporter.ok("Patched tsconfig.json")

        manifest = patch_package_manifest(ctx.project_dir, bundle_dependencies(ctx.bundle))
        if manifest.changed:
            self.reporter.ok("Patched package.json dependencies")

    def _install_dependencies(self, ctx: RunContext) -> None:
        self.runner.check([self.settings.package_manager, "install"], cwd=ctx.project_dir, mode=OutputMode.STREAM)

    def _materialize_api_layer(self, ctx: RunContext) -> None:
        failures = failed_writes(materialize_api_layer(ctx.bundle, ctx.project_dir))
        if failures:
            raise StageError("; ".join(f.error or str(f.path) for f in failures))
        self.reporter.ok(f"Created {len(ctx.bundle.modules)} module stub(s)")

    def _integrate_plugins(self, ctx: RunContext) -> None:
        if not ctx.bundle.plugins:
            self.reporter.info("No plugins requested.")
            return
        outcomes = self.installer.install_all(ctx.bundle.plugins, ctx.project_dir, ctx.source_root)
        for outcome in outcomes:
            ctx.plugin_outcomes.append(outcome)
            # The installer already reported these.
            ctx.warnings.extend(outcome.warnings)

    def _generate_context(self, ctx: RunContext) -> None:
        for failure in failed_writes(generate_context_documents(ctx.bundle, ctx.project_dir)):
            ctx.warn(f"context document not written: {failure.error}")

    def _generate_infra(self, ctx: RunContext) -> None:
        infra = write_infra_descriptor(ctx.bundle, ctx.project_dir)
        if infra is None:
            self.reporter.info("No compose services requested; skipping infrastructure descriptor.")
        elif not infra.ok:
            ctx.warn(f"infrastructure descriptor not written: {infra.error}")
        else:
            self.reporter.ok(f"Wrote {infra.path.name}")

        descriptor = write_bundle_descriptor(ctx.bundle, ctx.project_dir / self.settings.descriptor_filename)
        if not descriptor.ok:
            ctx.warn(f"bundle descriptor not written: {descriptor.error}")

    def _quality_gates(self, ctx: RunContext) -> None:
        gates = (
            ("Type check", self.settings.typecheck_command),
            ("Formatting", self.settings.format_command),
        )
        for label, argv in gates:
            try:
                cp = self.runner.run(argv, cwd=ctx.project_dir, mode=OutputMode.RELAY_ON_FAILURE)
            except ScaffoldError as e:
                ctx.warn(f"{label} skipped: {e}")
                continue
            if cp.returncode != 0:
                ctx.warn(f"{label} completed with warnings (exit {cp.returncode})")
            else:
                self.reporter.ok(f"{label} passed")


def scaffold_project(
    tier: str,
    template: str,
    project_dir: Path,
    *,
    settings: ScaffoldSettings | None = None,
    reporter: Reporter | None = None,
) -> PipelineResult:
    return ScaffoldPipeline(settings, reporter=reporter).run(tier, template, project_dir)
