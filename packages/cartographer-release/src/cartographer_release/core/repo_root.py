"""Repository root detection helpers.

`Path.cwd()` is only allowed in this module.
"""

from __future__ import annotations

from pathlib import Path

from .errors import ScriptError
from .exit_codes import ERR_CONFIG


def _is_checkout(path: Path) -> bool:
    return (path / ".git").exists() and (path / "config").is_dir()


def find_repo_root(start: Path | None = None) -> Path:
    cur = (start or Path.cwd()).resolve()
    if cur.is_file():
        cur = cur.parent
    for candidate in (cur, *cur.parents):
        if _is_checkout(candidate):
            return candidate
    raise RuntimeError(f"no cartographer checkout above {cur}")


def try_find_repo_root(start: Path | None = None) -> Path | None:
    try:
        return find_repo_root(start)
    except RuntimeError:
        return None


def resolve_repo_root(configured: str | None) -> Path:
    if configured:
        root = Path(configured).resolve()
        if not root.is_dir():
            raise ScriptError(f"RELEASE_ROOT is not a directory: {root}", ERR_CONFIG, kind="config_error")
        return root
    found = try_find_repo_root()
    if found is None:
        raise ScriptError(
            "unable to resolve repository root; run inside a checkout or set RELEASE_ROOT",
            ERR_CONFIG,
            kind="config_error",
        )
    return found
