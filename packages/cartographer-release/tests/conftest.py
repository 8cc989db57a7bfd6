from __future__ import annotations

import socket
from pathlib import Path

import pytest
from hypothesis import HealthCheck, settings

from cartographer_release.core.context import RunContext

_ALLOWED_MARKERS = {"unit", "integration", "slow"}

settings.register_profile(
    "release",
    deadline=None,
    max_examples=50,
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)
settings.load_profile("release")


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        names = {mark.name for mark in item.iter_markers()}
        if not names.intersection(_ALLOWED_MARKERS):
            item.add_marker("unit")


@pytest.fixture(autouse=True)
def no_network_for_unit(request: pytest.FixtureRequest, monkeypatch: pytest.MonkeyPatch) -> None:
    if request.node.get_closest_marker("integration") or request.node.get_closest_marker("slow"):
        return

    def _blocked(*_args: object, **_kwargs: object) -> socket.socket:
        raise RuntimeError("network disabled in unit tests")

    def _blocked_connect(*_args: object, **_kwargs: object) -> None:
        raise RuntimeError("network disabled in unit tests")

    monkeypatch.setattr(socket, "create_connection", _blocked)
    monkeypatch.setattr(socket.socket, "connect", _blocked_connect)


@pytest.fixture
def release_repo(tmp_path: Path) -> Path:
    repo = tmp_path / "cartographer"
    (repo / ".git").mkdir(parents=True)
    (repo / "config").mkdir()
    (repo / "config" / "controller.yaml").write_text("kind: Deployment\n", encoding="utf-8")
    overlays = repo / "hack" / "overlays"
    overlays.mkdir(parents=True)
    (overlays / "webhook-configuration.yaml").write_text("#@ load(\"@ytt:overlay\", \"overlay\")\n", encoding="utf-8")
    (overlays / "component-labels.yaml").write_text("#@ load(\"@ytt:overlay\", \"overlay\")\n", encoding="utf-8")
    return repo


@pytest.fixture
def run_ctx(release_repo: Path) -> RunContext:
    return RunContext(
        run_id="pytest-run",
        repo_root=release_repo,
        log_json=False,
        quiet=False,
        verbose=False,
        git_sha="unknown",
    )


@pytest.fixture
def release_env(release_repo: Path, tmp_path: Path) -> dict[str, str]:
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    return {
        "RELEASE_ROOT": str(release_repo),
        "REGISTRY": "registry.test:5001",
        "RELEASE_VERSION": "v0.4.0",
        "PREVIOUS_VERSION": "v0.3.0",
        "RELEASE_DATE": "2026-10-19T00:00:00Z",
        "SCRATCH": str(scratch),
        "LEVER_COMMIT_SHA": "abc1234567",
        "RUN_ID": "pytest-run",
    }
