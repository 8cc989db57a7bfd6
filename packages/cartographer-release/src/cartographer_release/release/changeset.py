"""Git helpers for the release changeset and version discovery."""

from __future__ import annotations

import re

from cartographer_release.adapters import CliAdapter, git
from cartographer_release.core.context import RunContext
from cartographer_release.core.errors import ScriptError
from cartographer_release.core.exit_codes import ERR_CONFIG

SEMVER_TAG = re.compile(r"^v\d+\.\d+\.\d+$")
PREVIOUS_TAG_WINDOW = 30


def normalize_version(version: str) -> str:
    return version if version.startswith("v") else f"v{version}"


def head_commit(ctx: RunContext, vcs: CliAdapter = git) -> str:
    result = vcs.run(ctx, "rev-parse", "HEAD")
    return result.stdout.strip() if result.code == 0 else ""


def tag_exists(ctx: RunContext, tag: str, vcs: CliAdapter = git) -> bool:
    return bool(vcs.check(ctx, "tag", "-l", tag).stdout.strip())


def sorted_tags(ctx: RunContext, vcs: CliAdapter = git) -> list[str]:
    result = vcs.run(ctx, "tag", "--sort=-v:refname", "-l")
    if result.code != 0:
        return []
    return [line.strip() for line in result.stdout.splitlines() if line.strip()]


def select_previous_version(tags: list[str], current_version: str) -> str:
    """Pick the release preceding `current_version` from newest-first `tags`.

    When the current version is tagged only the tags right after it are
    considered; otherwise the newest release tag wins.
    """
    candidates = tags
    if current_version in tags:
        start = tags.index(current_version) + 1
        candidates = tags[start : start + PREVIOUS_TAG_WINDOW]
    for tag in candidates:
        if SEMVER_TAG.match(tag):
            return tag
    return ""


def previous_version(ctx: RunContext, current_version: str, vcs: CliAdapter = git) -> str:
    return select_previous_version(sorted_tags(ctx, vcs), current_version)


def changeset(ctx: RunContext, current_version: str, previous: str, vcs: CliAdapter = git) -> str:
    if not previous:
        raise ScriptError(
            "unable to determine PREVIOUS_VERSION from git tags; set it explicitly",
            ERR_CONFIG,
            kind="config_error",
        )
    current = normalize_version(current_version)
    previous = normalize_version(previous)
    if not tag_exists(ctx, current, vcs):
        current = "HEAD"
    result = vcs.check(
        ctx,
        "-c",
        "log.showSignature=false",
        "log",
        "--pretty=oneline",
        "--abbrev-commit",
        "--no-decorate",
        "--no-color",
        f"{previous}..{current}",
    )
    return result.stdout.rstrip("\n")
