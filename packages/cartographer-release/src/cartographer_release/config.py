from __future__ import annotations

import math
import os
import socket
import tempfile
from collections.abc import Mapping
from dataclasses import dataclass

from .adapters import CliAdapter, git
from .core.clock import release_timestamp
from .core.context import RunContext
from .core.errors import ScriptError
from .core.exit_codes import ERR_CONFIG
from .release.changeset import head_commit, previous_version

YTT_VERSION = "0.42.0"
YTT_CHECKSUM = "aa7074d08dc35e588ab0e014f53e98aec0cfed6c3babf8a953c4225007e49ae7"

DEFAULT_RELEASE_VERSION = "v0.0.0-dev"
DEFAULT_REGISTRY_PORT = 5001
DEFAULT_BUILD_RESOURCE = "request.lever.tanzu.vmware.com"
DEFAULT_POLL_INTERVAL_SECONDS = 5.0

_TRUE_VALUES = {"1", "true", "yes", "on"}


def primary_host_ip() -> str:
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        # UDP connect only selects a route, nothing is sent.
        sock.connect(("10.255.255.255", 1))
        return str(sock.getsockname()[0])
    except OSError:
        return "127.0.0.1"
    finally:
        sock.close()


def _flag(raw: str | None) -> bool:
    return str(raw or "").strip().lower() in _TRUE_VALUES


def _positive_seconds(name: str, raw: str | None, default: float | None) -> float | None:
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ScriptError(f"{name} must be a number of seconds, got `{raw}`", ERR_CONFIG, kind="config_error") from None
    if not math.isfinite(value) or value <= 0:
        raise ScriptError(f"{name} must be a finite number greater than zero, got `{raw}`", ERR_CONFIG, kind="config_error")
    return value


@dataclass(frozen=True)
class ReleaseConfig:
    release_version: str
    release_image: str
    previous_version: str
    registry: str
    release_date: str
    scratch: str
    release_using_lever: bool
    lever_kubeconfig_path: str
    lever_commit_sha: str
    lever_build_resource: str
    poll_interval_seconds: float
    build_timeout_seconds: float | None
    build_context: str

    @classmethod
    def from_env(
        cls,
        ctx: RunContext,
        env: Mapping[str, str] | None = None,
        vcs: CliAdapter = git,
    ) -> "ReleaseConfig":
        environ = os.environ if env is None else env
        registry = environ.get("REGISTRY") or f"{primary_host_ip()}:{DEFAULT_REGISTRY_PORT}"
        release_version = environ.get("RELEASE_VERSION") or DEFAULT_RELEASE_VERSION
        poll_interval = _positive_seconds(
            "LEVER_POLL_INTERVAL", environ.get("LEVER_POLL_INTERVAL"), DEFAULT_POLL_INTERVAL_SECONDS
        )
        return cls(
            release_version=release_version,
            release_image=environ.get("RELEASE_IMAGE") or f"{registry}/cartographer:{release_version}",
            previous_version=environ.get("PREVIOUS_VERSION") or previous_version(ctx, release_version, vcs),
            registry=registry,
            release_date=environ.get("RELEASE_DATE") or release_timestamp(),
            scratch=environ.get("SCRATCH") or tempfile.mkdtemp(prefix="cartographer-release-"),
            release_using_lever=_flag(environ.get("RELEASE_USING_LEVER")),
            lever_kubeconfig_path=environ.get("LEVER_KUBECONFIG_PATH") or "",
            lever_commit_sha=environ.get("LEVER_COMMIT_SHA") or head_commit(ctx, vcs),
            lever_build_resource=environ.get("LEVER_BUILD_RESOURCE") or DEFAULT_BUILD_RESOURCE,
            poll_interval_seconds=poll_interval if poll_interval is not None else DEFAULT_POLL_INTERVAL_SECONDS,
            build_timeout_seconds=_positive_seconds("LEVER_BUILD_TIMEOUT", environ.get("LEVER_BUILD_TIMEOUT"), None),
            build_context=environ.get("BUILD_CONTEXT") or ".",
        )

    def validate(self) -> None:
        if not self.release_using_lever:
            return
        if not self.lever_kubeconfig_path:
            raise ScriptError(
                "LEVER_KUBECONFIG_PATH must be set when RELEASE_USING_LEVER is true",
                ERR_CONFIG,
                kind="config_error",
            )
        if not self.lever_commit_sha:
            raise ScriptError(
                "LEVER_COMMIT_SHA could not be resolved from git; set it when RELEASE_USING_LEVER is true",
                ERR_CONFIG,
                kind="config_error",
            )

    def rows(self, ctx: RunContext) -> list[tuple[str, str]]:
        timeout = "unbounded" if self.build_timeout_seconds is None else f"{self.build_timeout_seconds:g}s"
        return [
            ("PREVIOUS_VERSION", self.previous_version),
            ("REGISTRY", self.registry),
            ("RELEASE_DATE", self.release_date),
            ("RELEASE_VERSION", self.release_version),
            ("RELEASE_IMAGE", self.release_image),
            ("ROOT", str(ctx.repo_root)),
            ("SCRATCH", self.scratch),
            ("YTT_VERSION", YTT_VERSION),
            ("YTT_CHECKSUM", YTT_CHECKSUM),
            ("RELEASE_USING_LEVER", "true" if self.release_using_lever else "false"),
            ("LEVER_KUBECONFIG_PATH", self.lever_kubeconfig_path),
            ("LEVER_COMMIT_SHA", self.lever_commit_sha),
            ("LEVER_BUILD_RESOURCE", self.lever_build_resource),
            ("LEVER_POLL_INTERVAL", f"{self.poll_interval_seconds:g}s"),
            ("LEVER_BUILD_TIMEOUT", timeout),
        ]

    def render_vars(self, ctx: RunContext) -> str:
        rows = self.rows(ctx)
        width = max(len(name) for name, _ in rows) + 1
        return "\n".join(f"{(name + ':').ljust(width)} {value}".rstrip() for name, value in rows)
