"""
Console reporting for the scaffolding pipeline.

`Reporter` holds no state besides its two sinks, so tests can pass `io.StringIO` objects and assert
on plain text. The `format_*` helpers are pure.
"""

from __future__ import annotations

import sys
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TextIO


def format_stage(index: int, total: int, name: str) -> str:
    return f"[{index}/{total}] {name}"


def format_tags(items: Sequence[str]) -> str:
    if not items:
        return "None"
    return " ".join(f"[{item}]" for item in items)


def format_config_table(*, tier: str, description: str, rows: Sequence[tuple[str, Sequence[str]]]) -> str:
    lines: list[str] = []
    lines.append("CONFIGURATION")
    lines.append("-" * 38)
    lines.append(f"{'Profile':<12} {tier.upper()}")
    lines.append(f"{'Description':<12} {description}")
    lines.append("")
    for label, items in rows:
        lines.append(f"{label:<12} {format_tags(items)}")
    lines.append("-" * 38)
    return "\n".join(lines)


def format_warning_list(warnings: Sequence[str]) -> str:
    return "\n".join(f"- {w}" for w in warnings)


@dataclass(frozen=True)
class Reporter:
    out: TextIO = field(default_factory=lambda: sys.stdout)
    err: TextIO = field(default_factory=lambda: sys.stderr)

    def _write(self, stream: TextIO, text: str) -> None:
        stream.write(text)
        if not text.endswith("\n"):
            stream.write("\n")

    def banner(self, text: str) -> None:
        self._write(self.out, text)

    def stage(self, index: int, total: int, name: str) -> None:
        self._write(self.out, format_stage(index, total, name))

    def info(self, text: str) -> None:
        self._write(self.out, text)

    def ok(self, text: str) -> None:
        self._write(self.out, f"OK: {text}")

    def warn(self, text: str) -> None:
        self._write(self.err, f"WARNING: {text}")

    def error(self, text: str) -> None:
        self._write(self.err, f"ERROR: {text}")

    def command(self, argv: Sequence[str], *, cwd: str) -> None:
        self._write(self.err, f"+ ({cwd}) {' '.join(argv)}")

    def relay(self, *, stdout: str | None, stderr: str | None) -> None:
        if stdout:
            self._write(self.out, stdout)
        if stderr:
            self._write(self.err, stderr)

    def summary(self, *, ok: bool, headline: str, warnings: Sequence[str], next_steps: Sequence[str] = ()) -> None:
        if not ok:
            self.error(headline)
            return
        self._write(self.out, headline)
        if warnings:
            self._write(self.out, f"Completed with {len(warnings)} warning(s):")
            self._write(self.out, format_warning_list(warnings))
        if next_steps:
            self._write(self.out, "Next steps:")
            for step in next_steps:
                self._write(self.out, f"  {step}")
