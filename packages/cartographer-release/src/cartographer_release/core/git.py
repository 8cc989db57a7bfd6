from __future__ import annotations

from pathlib import Path

from .process import run_command


def short_head(repo_root: Path) -> str:
    """Abbreviated HEAD commit, or `unknown` outside a usable checkout."""
    res = run_command(["git", "rev-parse", "--short", "HEAD"], repo_root)
    sha = res.stdout.strip() if res.code == 0 else ""
    return sha or "unknown"
