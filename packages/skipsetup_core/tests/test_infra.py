from __future__ import annotations

from pathlib import Path

import yaml

from skipsetup_core.bundles import resolve_bundle
from skipsetup_core.infra import (
    infra_descriptor_path,
    render_compose,
    write_bundle_descriptor,
    write_infra_descriptor,
)


def test_local_only_services_render_nothing() -> None:
    assert render_compose(["local-db"]) is None
    assert render_compose([]) is None


def test_services_render_in_fixed_order() -> None:
    doc = render_compose(["s3", "redis", "queue", "postgres"])
    assert doc is not None
    assert list(doc["services"]) == ["postgres", "redis", "rabbitmq", "minio"]
    assert doc["volumes"] == {"postgres_data": None}


def test_redis_alone_has_no_volumes() -> None:
    doc = render_compose(["redis"])
    assert doc == {"services": {"redis": {"image": "redis:7", "ports": ["6379:6379"]}}}


def test_small_tier_writes_no_compose_file(tmp_path: Path) -> None:
    assert write_infra_descriptor(resolve_bundle("small"), tmp_path) is None
    assert list(tmp_path.iterdir()) == []


def test_large_tier_compose_file(tmp_path: Path) -> None:
    result = write_infra_descriptor(resolve_bundle("large"), tmp_path)

    assert result is not None and result.ok
    assert result.path == infra_descriptor_path(tmp_path, "large") == tmp_path / "docker-compose.large.yml"
    text = result.path.read_text(encoding="utf-8")
    assert text.startswith("# Local infrastructure for the large tier.")
    doc = yaml.safe_load(text)
    assert doc["services"]["postgres"]["image"] == "postgres:16"
    assert "rabbitmq" in doc["services"]


def test_bundle_descriptor_round_trips_through_yaml(tmp_path: Path) -> None:
    bundle = resolve_bundle("medium")
    result = write_bundle_descriptor(bundle, tmp_path / "forge.yaml")

    assert result.ok
    loaded = yaml.safe_load((tmp_path / "forge.yaml").read_text(encoding="utf-8"))
    assert loaded == bundle.to_dict()
    assert loaded["infra"] == ["postgres", "redis"]
