from __future__ import annotations

import hashlib
from collections.abc import Iterable
from pathlib import Path

_CHUNK_SIZE = 1024 * 1024


def sha256_file(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def checksums(directory: Path, exclude: Iterable[str] = ()) -> list[tuple[str, str]]:
    skipped = set(exclude)
    rows: list[tuple[str, str]] = []
    for path in sorted(p for p in directory.rglob("*") if p.is_file()):
        rel = path.relative_to(directory).as_posix()
        if rel in skipped:
            continue
        rows.append((sha256_file(path), f"./{rel}"))
    return rows


def render_checksums(rows: Iterable[tuple[str, str]]) -> str:
    # Same layout as `sha256sum`.
    return "\n".join(f"{digest}  {name}" for digest, name in rows)
