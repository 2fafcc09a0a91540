from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any

try:
    import yaml  # noqa: F401
except ModuleNotFoundError as exc:
    raise SystemExit(
        "Missing dependency `pyyaml` (import name: `yaml`). Fix: `python -m pip install -e .`."
    ) from exc

try:
    from skipsetup_core import (
        KNOWN_TIERS,
        ScaffoldError,
        ScaffoldPipeline,
        SettingsError,
        UnknownTierError,
        load_settings,
        resolve_bundle,
    )
    from skipsetup_core.reporting import Reporter, format_config_table
except ModuleNotFoundError as exc:
    if exc.name == "skipsetup_core":
        raise SystemExit(
            "Missing import `skipsetup_core`.\n"
            "Install the project in editable mode from the repo root:\n"
            "  python -m pip install -e .\n"
        ) from exc
    raise


def build_parser() -> argparse.ArgumentParser:
    """Build the skipsetup CLI argument parser."""
    parser = argparse.ArgumentParser(prog="skipsetup")
    sub = parser.add_subparsers(dest="cmd", required=True)

    create_p = sub.add_parser("create", help="Scaffold a new project for a size tier.")
    create_p.add_argument("name", help="Target project directory (removed and recreated if it exists).")
    create_p.add_argument("--size", default="small", help=f"Size tier: {', '.join(KNOWN_TIERS)}.")
    create_p.add_argument(
        "--template",
        default="t3",
        help="Template identifier passed through to the base-project generator.",
    )
    create_p.add_argument("--config", type=Path, help="Optional YAML settings file.")
    create_p.add_argument(
        "--source-root",
        type=Path,
        help="Root searched for local plugin checkouts (overrides settings).",
    )

    sub.add_parser("sizes", help="List the available size tiers.")
    return parser


def _print_config_table(reporter: Reporter, tier: str) -> None:
    bundle = resolve_bundle(tier)
    rows: list[tuple[str, Any]] = [
        ("Modules", bundle.modules),
        ("Plugins", bundle.plugins),
        ("Infra", sorted(bundle.infra_services)),
    ]
    reporter.info(format_config_table(tier=tier, description=bundle.description, rows=rows))


def _cmd_create(args: argparse.Namespace) -> int:
    tier = str(args.size).strip().lower()
    if tier not in KNOWN_TIERS:
        raise UnknownTierError(tier)

    settings = load_settings(args.config)
    if args.source_root is not None:
        settings = replace(settings, source_root=args.source_root.resolve())

    reporter = Reporter()
    _print_config_table(reporter, tier)
    result = ScaffoldPipeline(settings, reporter=reporter).run(tier, args.template, Path(args.name))
    return 0 if result.ok else 1


def _cmd_sizes(args: argparse.Namespace) -> int:
    del args
    for tier in KNOWN_TIERS:
        bundle = resolve_bundle(tier)
        print(f"{tier}\t{bundle.description}")
    return 0


def main(argv: list[str] | None = None) -> None:
    """Run the CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        if args.cmd == "create":
            raise SystemExit(_cmd_create(args))
        if args.cmd == "sizes":
            raise SystemExit(_cmd_sizes(args))
    except (ScaffoldError, SettingsError, UnknownTierError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        raise SystemExit(2) from exc
    raise SystemExit(2)


if __name__ == "__main__":
    main()
