from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any

import yaml

from skipsetup_core.bundles import BundleDescriptor
from skipsetup_core.files import WriteResult, write_file

# Order here is the order services appear in the compose file.
_COMPOSE_SERVICES: dict[str, tuple[str, dict[str, Any]]] = {
    "postgres": (
        "postgres",
        {
            "image": "postgres:16",
            "environment": {"POSTGRES_PASSWORD": "password", "POSTGRES_DB": "app"},
            "ports": ["5432:5432"],
            "volumes": ["postgres_data:/var/lib/postgresql/data"],
        },
    ),
    "redis": (
        "redis",
        {
            "image": "redis:7",
            "ports": ["6379:6379"],
        },
    ),
    "queue": (
        "rabbitmq",
        {
            "image": "rabbitmq:3-management",
            "ports": ["5672:5672", "15672:15672"],
        },
    ),
    "s3": (
        "minio",
        {
            "image": "minio/minio",
            "command": "server /data",
            "ports": ["9000:9000"],
            "environment": {"MINIO_ROOT_USER": "minioadmin", "MINIO_ROOT_PASSWORD": "minioadmin"},
        },
    ),
}

# SQLite needs no container.
LOCAL_ONLY_SERVICES: frozenset[str] = frozenset({"local-db"})


def known_compose_services(services: Iterable[str]) -> list[str]:
    requested = set(services)
    return [name for name in _COMPOSE_SERVICES if name in requested]


def render_compose(services: Iterable[str]) -> dict[str, Any] | None:
    """Compose document for the known services requested, or None when there are none."""
    selected = known_compose_services(services)
    if not selected:
        return None

    doc: dict[str, Any] = {"services": {}}
    for name in selected:
        service_name, body = _COMPOSE_SERVICES[name]
        doc["services"][service_name] = body
    if "postgres" in selected:
        doc["volumes"] = {"postgres_data": None}
    return doc


def infra_descriptor_path(project_dir: Path, tier: str) -> Path:
    return project_dir / f"docker-compose.{tier}.yml"


def write_infra_descriptor(bundle: BundleDescriptor, project_dir: Path) -> WriteResult | None:
    doc = render_compose(bundle.infra_services)
    if doc is None:
        return None
    path = infra_descriptor_path(project_dir, bundle.tier)
    header = f"# Local infrastructure for the {bundle.tier} tier.\n# Start with: docker compose -f {path.name} up -d\n"
    return write_file(path, header + yaml.safe_dump(doc, sort_keys=False))


def write_bundle_descriptor(bundle: BundleDescriptor, path: Path) -> WriteResult:
    return write_file(path, yaml.safe_dump(bundle.to_dict(), sort_keys=False))
