from __future__ import annotations

from pathlib import Path

from cartographer_release.adapters import CliAdapter, git
from cartographer_release.config import ReleaseConfig
from cartographer_release.core.context import RunContext
from cartographer_release.core.logging import log_event

from .changeset import changeset
from .checksums import checksums, render_checksums

CHANGELOG_NAME = "CHANGELOG.md"

RELEASE_NOTES_TEMPLATE = """
# 😎 Easy Installation

```
kubectl apply -f https://github.com/vmware-tanzu/cartographer/releases/download/<NEW_TAG>/cartographer.yaml
```

# 🚨 Breaking Changes

- <REPLACE_ME>

# 🚀 New Features

- <REPLACE_ME>

# 🐛 Bug Fixes

- <REPLACE_ME>

# ❤️ Thanks

Thanks to these contributors who contributed to <NEW_TAG>!
- <REPLACE_ME>

**Full Changelog**: https://github.com/vmware-tanzu/cartographer/compare/{previous_version}...<NEW_TAG>

# Change Set

{changeset}


# Checksums

```
{checksums}
```
"""


def render_release_notes(changes: str, checksum_list: str, previous_version: str) -> str:
    return RELEASE_NOTES_TEMPLATE.format(
        previous_version=previous_version,
        changeset=changes,
        checksums=checksum_list,
    )


def create_release_notes(ctx: RunContext, cfg: ReleaseConfig, vcs: CliAdapter = git) -> Path:
    changes = changeset(ctx, cfg.release_version, cfg.previous_version, vcs)
    ctx.release_dir.mkdir(parents=True, exist_ok=True)
    checksum_list = render_checksums(checksums(ctx.release_dir, exclude={CHANGELOG_NAME}))
    out = ctx.release_dir / CHANGELOG_NAME
    out.write_text(render_release_notes(changes, checksum_list, cfg.previous_version), encoding="utf-8")
    log_event(
        ctx,
        "info",
        "notes",
        "written",
        path=str(out.relative_to(ctx.repo_root)),
        commits=len(changes.splitlines()),
    )
    return out
