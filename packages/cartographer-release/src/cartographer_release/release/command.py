from __future__ import annotations

import random
import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from cartographer_release.adapters import CliAdapter, docker, git
from cartographer_release.config import ReleaseConfig
from cartographer_release.core.context import RunContext
from cartographer_release.core.errors import ScriptError
from cartographer_release.core.exit_codes import ERR_CONFIG
from cartographer_release.core.logging import log_event

from .cluster import KubectlCluster
from .image import build_image
from .lever import require_success, submit_build, wait_for_build
from .manifest import generate_release
from .model import ClusterClient, TemplateRenderer
from .notes import create_release_notes
from .render import YttRenderer


@dataclass(frozen=True)
class ReleaseTools:
    renderer: TemplateRenderer
    cluster: ClusterClient | None
    vcs: CliAdapter
    builder: CliAdapter

    @classmethod
    def default(cls, cfg: ReleaseConfig) -> "ReleaseTools":
        cluster = KubectlCluster(cfg.lever_kubeconfig_path) if cfg.release_using_lever else None
        return cls(renderer=YttRenderer(), cluster=cluster, vcs=git, builder=docker)


@dataclass(frozen=True)
class ReleaseSummary:
    run_id: str
    version: str
    image: str
    build_mode: str
    build_name: str | None
    manifest: Path
    changelog: Path

    def to_payload(self, repo_root: Path) -> dict[str, object]:
        return {
            "schema_version": 1,
            "kind": "release-summary",
            "run_id": self.run_id,
            "version": self.version,
            "image": self.image,
            "build_mode": self.build_mode,
            "build_name": self.build_name,
            "manifest": self.manifest.relative_to(repo_root).as_posix(),
            "changelog": self.changelog.relative_to(repo_root).as_posix(),
        }


def run_release(
    ctx: RunContext,
    cfg: ReleaseConfig,
    tools: ReleaseTools,
    echo: Callable[[str], None] = print,
    rng: random.Random | None = None,
    cancel: threading.Event | None = None,
    sleep: Callable[[float], None] | None = None,
) -> ReleaseSummary:
    cfg.validate()
    build_name: str | None = None
    if cfg.release_using_lever:
        if tools.cluster is None:
            raise ScriptError("lever build selected but no cluster client configured", ERR_CONFIG, kind="config_error")
        echo("Building using lever")
        request = submit_build(ctx, tools.renderer, tools.cluster, cfg.lever_commit_sha, cfg.release_image, rng)
        outcome = wait_for_build(
            ctx,
            tools.cluster,
            request.name,
            cfg.lever_build_resource,
            interval_seconds=cfg.poll_interval_seconds,
            timeout_seconds=cfg.build_timeout_seconds,
            cancel=cancel,
            sleep=sleep,
            echo=echo,
        )
        require_success(outcome)
        build_name = request.name
    else:
        echo("Building locally")
        build_image(ctx, cfg.release_image, cfg.build_context, tools.builder)
    manifest = generate_release(ctx, cfg, tools.renderer)
    changelog = create_release_notes(ctx, cfg, tools.vcs)
    summary = ReleaseSummary(
        run_id=ctx.run_id,
        version=cfg.release_version,
        image=cfg.release_image,
        build_mode="lever" if cfg.release_using_lever else "local",
        build_name=build_name,
        manifest=manifest,
        changelog=changelog,
    )
    payload = summary.to_payload(ctx.repo_root)
    log_event(
        ctx,
        "info",
        "release",
        "complete",
        version=payload["version"],
        build_mode=payload["build_mode"],
        manifest=payload["manifest"],
        changelog=payload["changelog"],
    )
    return summary
