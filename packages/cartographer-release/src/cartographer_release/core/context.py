from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .clock import utc_now
from .git import short_head
from .repo_root import resolve_repo_root


@dataclass(frozen=True)
class RunContext:
    run_id: str
    repo_root: Path
    log_json: bool
    quiet: bool
    verbose: bool
    git_sha: str

    @property
    def release_dir(self) -> Path:
        return self.repo_root / "release"

    @classmethod
    def from_args(
        cls,
        run_id: str | None,
        repo_root: str | None = None,
        log_json: bool = False,
        quiet: bool = False,
        verbose: bool = False,
        env: Mapping[str, str] | None = None,
    ) -> "RunContext":
        environ = os.environ if env is None else env
        resolved_root = resolve_repo_root(repo_root or environ.get("RELEASE_ROOT"))
        sha = short_head(resolved_root)
        default_run = f"release-{utc_now().strftime('%Y%m%d-%H%M%S')}-{sha}"
        return cls(
            run_id=run_id or environ.get("RUN_ID", default_run),
            repo_root=resolved_root,
            log_json=log_json,
            quiet=quiet,
            verbose=verbose,
            git_sha=sha,
        )
