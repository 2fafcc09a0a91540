from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Literal, get_args

SizeTier = Literal["small", "medium", "large"]

KNOWN_TIERS: tuple[str, ...] = get_args(SizeTier)


class UnknownTierError(ValueError):
    def __init__(
        self,
        tier: str,
        *,
        code: str | None = "unknown_tier",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(f"Unknown size tier: {tier!r} (expected one of: {', '.join(KNOWN_TIERS)})")
        self.tier = tier
        self.known = KNOWN_TIERS
        self.code = code
        self.details = details or {}


@dataclass(frozen=True)
class BundleDescriptor:
    tier: str
    description: str
    modules: tuple[str, ...]
    plugins: tuple[str, ...]
    infra_services: frozenset[str]
    feature_levels: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for module in self.modules:
            if module in seen:
                raise ValueError(f"Duplicate module in {self.tier} bundle: {module}")
            seen.add(module)
        object.__setattr__(self, "feature_levels", MappingProxyType(dict(self.feature_levels)))

    def to_dict(self) -> dict[str, Any]:
        """Plain, YAML-safe view of the bundle (infra sorted for stable output)."""
        return {
            "tier": self.tier,
            "description": self.description,
            "modules": list(self.modules),
            "plugins": list(self.plugins),
            "infra": sorted(self.infra_services),
            "featureLevels": dict(self.feature_levels),
        }


_BUNDLES: dict[str, BundleDescriptor] = {
    "small": BundleDescriptor(
        tier="small",
        description="Minimal MVP: Auth + DB basics.",
        modules=("auth", "db"),
        plugins=("better-auth-basic", "prisma-basic"),
        infra_services=frozenset({"local-db"}),
        feature_levels={
            "auth": "basic",
            "payments": "none",
            "communications": "basic",
            "realtime": "none",
        },
    ),
    "medium": BundleDescriptor(
        tier="medium",
        description="SaaS-ready: Admin + monitoring.",
        modules=("auth", "db", "admin", "monitoring"),
        plugins=(
            "better-auth-social",
            "prisma-postgres",
            "admin-panel",
            "monitoring-basic",
            "stripe-subscriptions",
        ),
        infra_services=frozenset({"postgres", "redis"}),
        feature_levels={
            "auth": "social",
            "payments": "subscriptions",
            "communications": "transactional",
            "realtime": "basic",
        },
    ),
    "large": BundleDescriptor(
        tier="large",
        description="Enterprise: Orgs + scale.",
        modules=("auth", "db", "admin", "orgs", "payments", "monitoring"),
        # `stripe` carries the platform payment features for now.
        plugins=("stripe",),
        infra_services=frozenset({"postgres", "redis", "queue", "s3"}),
        feature_levels={
            "auth": "enterprise",
            "payments": "platform",
            "communications": "marketing",
            "realtime": "enterprise",
        },
    ),
}

MODULE_DEPENDENCIES: dict[str, tuple[str, ...]] = {
    "auth": ("better-auth",),
    "db": ("@prisma/client", "prisma"),
    "admin": ("@tanstack/react-table",),
    "orgs": (),
    "payments": ("stripe",),
    "monitoring": ("@vercel/analytics",),
}


def resolve_bundle(tier: str) -> BundleDescriptor:
    try:
        return _BUNDLES[tier]
    except KeyError:
        raise UnknownTierError(tier) from None


def bundle_dependencies(bundle: BundleDescriptor) -> list[str]:
    """Dependencies needed by the bundle's modules, deduplicated in module order."""
    seen: set[str] = set()
    out: list[str] = []
    for module in bundle.modules:
        for dep in MODULE_DEPENDENCIES.get(module, ()):
            if dep in seen:
                continue
            seen.add(dep)
            out.append(dep)
    return out
