"""Remote image builds through lever.

A build is submitted as a single `Request` resource and then observed through
its `status.conditions`. Lever orders the conditions as components-ready,
build-ready, ready; only the last one decides the outcome.
"""

from __future__ import annotations

import hashlib
import random
import threading
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

import jsonschema
import yaml

from cartographer_release.core.context import RunContext
from cartographer_release.core.errors import ScriptError
from cartographer_release.core.exit_codes import ERR_BUILD, ERR_CANCELLED, ERR_RENDER, ERR_TIMEOUT
from cartographer_release.core.logging import log_event
from cartographer_release.core.schema_utils import validate_json
from cartographer_release.core.yaml_utils import parse_yaml_documents

from .model import ClusterClient, TemplateRenderer

BUILD_NAME_PREFIX = "cartographer"
UNKNOWN = "-- "
READY_TRUE = "True"
READY_FALSE = "False"
READY_SLOT = 2

TEMPLATE_DIR = Path(__file__).resolve().parents[1] / "templates" / "lever"
TEMPLATE_FILES = (TEMPLATE_DIR / "values.yaml", TEMPLATE_DIR / "build-request.yaml")

STATUS_DOCUMENT_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "status": {
            "type": "object",
            "properties": {
                "conditions": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "type": {"type": "string"},
                            "status": {"type": "string"},
                            "reason": {"type": "string"},
                            "message": {"type": "string"},
                        },
                    },
                },
            },
        },
    },
}


@dataclass(frozen=True)
class BuildRequest:
    name: str
    suffix: str
    commit_sha: str
    release_image: str

    def data_values(self) -> dict[str, str]:
        return {
            "build_suffix": self.suffix,
            "commit_sha": self.commit_sha,
            "release_image": self.release_image,
        }


@dataclass(frozen=True)
class BuildProgress:
    components_ready: str = UNKNOWN
    build_ready: str = UNKNOWN
    ready: str = UNKNOWN

    def observe(self, statuses: Sequence[str | None]) -> "BuildProgress":
        """Advance the slots reported by lever; unreported slots keep their value."""
        slots = [self.components_ready, self.build_ready, self.ready]
        for index, value in enumerate(statuses[: len(slots)]):
            if value is not None:
                slots[index] = value
        return BuildProgress(*slots)

    @property
    def terminal(self) -> bool:
        return self.ready in (READY_TRUE, READY_FALSE)

    def describe(self, name: str) -> str:
        return (
            f"lever build {name}: components ready: {self.components_ready}"
            f" | build ready: {self.build_ready} | ready: {self.ready}"
        )


@dataclass(frozen=True)
class BuildOutcome:
    name: str
    succeeded: bool
    polls: int
    progress: BuildProgress
    error: str | None = None
    message: str | None = None


def make_build_suffix(commit_sha: str, rng: random.Random | None = None) -> str:
    source = rng if rng is not None else random.SystemRandom()
    nonce = source.getrandbits(64)
    digest = hashlib.sha256(f"{commit_sha}:{nonce}".encode("utf-8")).hexdigest()[:6]
    return f"{commit_sha[:6].lower()}-{digest}"


def new_build_request(commit_sha: str, release_image: str, rng: random.Random | None = None) -> BuildRequest:
    suffix = make_build_suffix(commit_sha, rng)
    return BuildRequest(
        name=f"{BUILD_NAME_PREFIX}-{suffix}",
        suffix=suffix,
        commit_sha=commit_sha,
        release_image=release_image,
    )


def render_build_request(ctx: RunContext, renderer: TemplateRenderer, request: BuildRequest) -> str:
    document = renderer.render(ctx, TEMPLATE_FILES, request.data_values())
    try:
        docs = parse_yaml_documents(document)
    except yaml.YAMLError as exc:
        raise ScriptError(f"rendered lever build request is not valid YAML: {exc}", ERR_RENDER, kind="render_error") from exc
    if len(docs) != 1 or not isinstance(docs[0], dict):
        raise ScriptError(
            f"rendered lever build request must hold exactly one resource, got {len(docs)}",
            ERR_RENDER,
            kind="render_error",
        )
    metadata = docs[0].get("metadata")
    rendered_name = metadata.get("name") if isinstance(metadata, dict) else None
    if rendered_name != request.name:
        raise ScriptError(
            f"rendered lever build request is named `{rendered_name}`, expected `{request.name}`",
            ERR_RENDER,
            kind="render_error",
        )
    return document


def submit_build(
    ctx: RunContext,
    renderer: TemplateRenderer,
    cluster: ClusterClient,
    commit_sha: str,
    release_image: str,
    rng: random.Random | None = None,
) -> BuildRequest:
    request = new_build_request(commit_sha, release_image, rng)
    log_event(ctx, "info", "lever", "submit", build=request.name, commit=commit_sha, image=release_image)
    document = render_build_request(ctx, renderer, request)
    applied = cluster.apply(ctx, document)
    log_event(ctx, "info", "lever", "submitted", build=request.name, result=applied or "applied")
    return request


def _conditions(document: dict[str, object]) -> list[dict[str, object]]:
    try:
        validate_json(document, STATUS_DOCUMENT_SCHEMA)
    except jsonschema.ValidationError as exc:
        raise ScriptError(
            f"lever build status document is malformed: {exc.message}",
            ERR_BUILD,
            kind="invalid_status_document",
        ) from exc
    status = document.get("status") or {}
    return list(status.get("conditions") or [])  # type: ignore[union-attr]


def condition_statuses(document: dict[str, object]) -> list[str | None]:
    return [condition.get("status") for condition in _conditions(document)]  # type: ignore[misc]


def condition_detail(document: dict[str, object], index: int = READY_SLOT) -> str | None:
    conditions = _conditions(document)
    if index >= len(conditions):
        return None
    detail = conditions[index].get("message") or conditions[index].get("reason")
    return str(detail) if detail else None


def _pause(seconds: float, cancel: threading.Event | None, sleep: Callable[[float], None] | None) -> None:
    if sleep is not None:
        sleep(seconds)
    elif cancel is not None:
        cancel.wait(seconds)
    else:
        time.sleep(seconds)


def wait_for_build(
    ctx: RunContext,
    cluster: ClusterClient,
    name: str,
    resource: str,
    interval_seconds: float = 5.0,
    timeout_seconds: float | None = None,
    cancel: threading.Event | None = None,
    sleep: Callable[[float], None] | None = None,
    clock: Callable[[], float] = time.monotonic,
    echo: Callable[[str], None] = print,
) -> BuildOutcome:
    deadline = None if timeout_seconds is None else clock() + timeout_seconds
    progress = BuildProgress()
    polls = 0
    while True:
        if cancel is not None and cancel.is_set():
            raise ScriptError(f"wait for lever build {name} was cancelled", ERR_CANCELLED, kind="build_cancelled")
        document = cluster.get(ctx, resource, name)
        polls += 1
        progress = progress.observe(condition_statuses(document))
        echo(progress.describe(name))
        log_event(ctx, "debug", "lever", "poll", build=name, poll=polls, ready=progress.ready)
        if progress.terminal:
            break
        if deadline is not None:
            remaining = deadline - clock()
            if remaining <= 0:
                raise ScriptError(
                    f"lever build {name} did not finish within {timeout_seconds:g}s (last ready: {progress.ready.strip()})",
                    ERR_TIMEOUT,
                    kind="build_timeout",
                )
            _pause(min(interval_seconds, remaining), cancel, sleep)
        else:
            _pause(interval_seconds, cancel, sleep)

    if progress.ready == READY_TRUE:
        log_event(ctx, "info", "lever", "build-succeeded", build=name, polls=polls)
        return BuildOutcome(name=name, succeeded=True, polls=polls, progress=progress)

    document = cluster.get(ctx, resource, name)
    statuses = condition_statuses(document)
    error = statuses[READY_SLOT] if len(statuses) > READY_SLOT and statuses[READY_SLOT] is not None else progress.ready
    message = condition_detail(document)
    echo(f"lever build {name} failed: {error}" + (f" ({message})" if message else ""))
    log_event(ctx, "error", "lever", "build-failed", build=name, polls=polls, error=error, message=message or "")
    return BuildOutcome(name=name, succeeded=False, polls=polls, progress=progress, error=error, message=message)


def require_success(outcome: BuildOutcome) -> None:
    if outcome.succeeded:
        return
    detail = f": {outcome.message}" if outcome.message else ""
    raise ScriptError(f"lever build {outcome.name} failed with ready={outcome.error}{detail}", ERR_BUILD, kind="build_failed")
