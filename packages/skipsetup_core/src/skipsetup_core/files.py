from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from skipsetup_core.reporting import Reporter


@dataclass(frozen=True)
class WriteResult:
    path: Path
    ok: bool
    error: str | None = None


def write_file(
    path: Path,
    content: str,
    *,
    append: bool = False,
    reporter: Reporter | None = None,
) -> WriteResult:
    """
    Write `content` to `path`, creating parent directories.

    With `append=True` the result is the existing bytes followed by `content` encoded as UTF-8
    (a missing file reads as empty). Write errors are never raised: they are reported and returned
    as `ok=False`.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        if append:
            try:
                existing = path.read_bytes()
            except FileNotFoundError:
                existing = b""
            path.write_bytes(existing + content.encode("utf-8"))
        else:
            path.write_text(content, encoding="utf-8", newline="\n")
    except OSError as exc:
        message = f"failed to write {path}: {exc}"
        if reporter is not None:
            reporter.warn(message)
        return WriteResult(path=path, ok=False, error=message)
    return WriteResult(path=path, ok=True)


def failed_writes(results: list[WriteResult]) -> list[WriteResult]:
    return [r for r in results if not r.ok]
