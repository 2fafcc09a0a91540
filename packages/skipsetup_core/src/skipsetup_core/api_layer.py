from __future__ import annotations

import re
from pathlib import Path

from skipsetup_core.bundles import BundleDescriptor
from skipsetup_core.files import WriteResult, write_file

_IDENT_NON_ALNUM_RE = re.compile(r"[^a-zA-Z0-9]+")


def module_identifier(module: str) -> str:
    """`email-resend` -> `emailResend`; a usable TypeScript identifier for a module name."""
    parts = [p for p in _IDENT_NON_ALNUM_RE.split(module) if p]
    if not parts:
        return "module"
    ident = parts[0].lower() + "".join(p[:1].upper() + p[1:] for p in parts[1:])
    if ident[0].isdigit():
        ident = f"m{ident}"
    return ident


def render_module_stub(module: str) -> str:
    ident = module_identifier(module)
    return (
        f"// {module} module stub\n"
        f"// Add your {module} implementation here\n"
        f"export function {ident}() {{\n"
        f'  return "{module} module";\n'
        "}\n"
    )


def render_module_index(modules: tuple[str, ...]) -> str:
    lines = [f'export {{ {module_identifier(m)} }} from "./{m}";' for m in modules]
    return "\n".join(lines) + "\n"


def materialize_api_layer(bundle: BundleDescriptor, project_dir: Path) -> list[WriteResult]:
    modules_dir = project_dir / "src" / "modules"
    results = [write_file(modules_dir / f"{m}.ts", render_module_stub(m)) for m in bundle.modules]
    results.append(write_file(modules_dir / "index.ts", render_module_index(bundle.modules)))
    return results
