from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from skipsetup_core.bundles import KNOWN_TIERS, BundleDescriptor
from skipsetup_core.files import WriteResult, write_file


@dataclass(frozen=True)
class ContextStrategy:
    focus: str
    agents: tuple[str, ...]
    guidance: tuple[str, ...]


CONTEXT_STRATEGIES: dict[str, ContextStrategy] = {
    "small": ContextStrategy(
        focus="Ship a working MVP quickly; keep the stack minimal.",
        agents=("fullstack-dev",),
        guidance=(
            "Prefer SQLite locally; run `pnpm prisma db push` after schema edits.",
            "Keep auth to email/password until the product needs more.",
        ),
    ),
    "medium": ContextStrategy(
        focus="SaaS readiness: billing, admin tooling and basic observability.",
        agents=("fullstack-dev", "billing-specialist"),
        guidance=(
            "Postgres and Redis run from the generated compose file.",
            "Stripe subscriptions are wired through the stripe-subscriptions plugin.",
            "Admin routes must check permissions server-side.",
        ),
    ),
    "large": ContextStrategy(
        focus="Enterprise scale: organizations, platform payments and queues.",
        agents=("fullstack-dev", "billing-specialist", "platform-architect"),
        guidance=(
            "Model every tenant-owned table with an organization id.",
            "Long-running work goes through the queue service, never request handlers.",
            "Object storage is S3-compatible (MinIO locally).",
        ),
    ),
}


def _check_exhaustive() -> None:
    missing = set(KNOWN_TIERS) - set(CONTEXT_STRATEGIES)
    extra = set(CONTEXT_STRATEGIES) - set(KNOWN_TIERS)
    if missing or extra:
        raise RuntimeError(
            f"CONTEXT_STRATEGIES out of sync with tiers (missing={sorted(missing)}, extra={sorted(extra)})"
        )


_check_exhaustive()


def render_blueprint(bundle: BundleDescriptor, strategy: ContextStrategy) -> str:
    lines: list[str] = []
    lines.append(f"# Project blueprint ({bundle.tier})")
    lines.append("")
    lines.append(bundle.description)
    lines.append("")
    lines.append(f"Focus: {strategy.focus}")
    lines.append("")
    lines.append("## Modules")
    lines.extend(f"- {m}" for m in bundle.modules)
    lines.append("")
    lines.append("## Plugins requested")
    lines.extend(f"- {p}" for p in bundle.plugins)
    lines.append("")
    lines.append("## Feature levels")
    lines.extend(f"- {k}: {v}" for k, v in bundle.feature_levels.items())
    lines.append("")
    lines.append("## Guidance")
    lines.extend(f"- {g}" for g in strategy.guidance)
    return "\n".join(lines) + "\n"


def render_agent(agent: str, bundle: BundleDescriptor) -> str:
    payload = {
        "name": agent,
        "tier": bundle.tier,
        "resources": ["file://.kiro/steering/project-blueprint.md"],
        "modules": list(bundle.modules),
    }
    return json.dumps(payload, indent=2) + "\n"


def generate_context_documents(bundle: BundleDescriptor, project_dir: Path) -> list[WriteResult]:
    strategy = CONTEXT_STRATEGIES[bundle.tier]
    kiro_dir = project_dir / ".kiro"
    results = [write_file(kiro_dir / "steering" / "project-blueprint.md", render_blueprint(bundle, strategy))]
    for agent in strategy.agents:
        results.append(write_file(kiro_dir / "agents" / f"{agent}.json", render_agent(agent, bundle)))
    return results
