from skipsetup_core.bundles import KNOWN_TIERS, BundleDescriptor, UnknownTierError, resolve_bundle
from skipsetup_core.config import ScaffoldSettings, SettingsError, load_settings
from skipsetup_core.errors import ScaffoldError
from skipsetup_core.pipeline import PipelineResult, PipelineState, ScaffoldPipeline, scaffold_project
from skipsetup_core.plugins import PluginInstaller, PluginInstallOutcome, PluginSource

__all__ = [
    "KNOWN_TIERS",
    "BundleDescriptor",
    "PipelineResult",
    "PipelineState",
    "PluginInstallOutcome",
    "PluginInstaller",
    "PluginSource",
    "ScaffoldError",
    "ScaffoldPipeline",
    "ScaffoldSettings",
    "SettingsError",
    "UnknownTierError",
    "load_settings",
    "resolve_bundle",
    "scaffold_project",
]
