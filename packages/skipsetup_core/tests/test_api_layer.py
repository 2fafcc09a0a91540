from __future__ import annotations

from pathlib import Path

from skipsetup_core.api_layer import materialize_api_layer, module_identifier, render_module_index
from skipsetup_core.bundles import resolve_bundle


def test_module_identifier() -> None:
    assert module_identifier("auth") == "auth"
    assert module_identifier("email-resend") == "emailResend"
    assert module_identifier("2fa") == "m2fa"
    assert module_identifier("--") == "module"


def test_index_reexports_each_module() -> None:
    assert render_module_index(("auth", "db")) == (
        'export { auth } from "./auth";\nexport { db } from "./db";\n'
    )


def test_materialize_writes_one_stub_per_module(tmp_path: Path) -> None:
    bundle = resolve_bundle("medium")

    results = materialize_api_layer(bundle, tmp_path)

    assert all(r.ok for r in results)
    modules_dir = tmp_path / "src" / "modules"
    assert sorted(p.name for p in modules_dir.iterdir()) == sorted(
        [f"{m}.ts" for m in bundle.modules] + ["index.ts"]
    )
    assert "export function admin()" in (modules_dir / "admin.ts").read_text(encoding="utf-8")
