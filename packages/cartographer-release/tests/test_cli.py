from __future__ import annotations

import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

from cartographer_release.cli import main
from cartographer_release.release.command import ReleaseTools
from fakes import FakeCli, FakeCluster, FakeRenderer, status_document

SRC = Path(__file__).resolve().parents[1] / "src"


def _tools(cluster: FakeCluster | None = None) -> ReleaseTools:
    return ReleaseTools(renderer=FakeRenderer(), cluster=cluster, vcs=FakeCli("git"), builder=FakeCli("docker"))


def test_local_release_exits_zero_and_prints_vars(release_env: dict[str, str], capsys: pytest.CaptureFixture[str]) -> None:
    rc = main([], env=release_env, tools=_tools())
    assert rc == 0
    out = capsys.readouterr().out
    assert "RELEASE_IMAGE:" in out
    assert "Building locally" in out
    assert (Path(release_env["RELEASE_ROOT"]) / "release" / "CHANGELOG.md").is_file()


def test_lever_without_kubeconfig_exits_one(release_env: dict[str, str], capsys: pytest.CaptureFixture[str]) -> None:
    cluster = FakeCluster([])
    rc = main([], env={**release_env, "RELEASE_USING_LEVER": "true"}, tools=_tools(cluster))
    assert rc == 1
    assert "LEVER_KUBECONFIG_PATH must be set when RELEASE_USING_LEVER is true" in capsys.readouterr().err
    assert cluster.applied == []


def test_failed_lever_build_exits_one_with_json_error(release_env: dict[str, str], capsys: pytest.CaptureFixture[str]) -> None:
    env = {**release_env, "RELEASE_USING_LEVER": "true", "LEVER_KUBECONFIG_PATH": "/tmp/kc"}
    cluster = FakeCluster([status_document("True", "True", "False")])
    rc = main(["--log-json", "--quiet"], env=env, tools=_tools(cluster))
    assert rc == 1
    captured = capsys.readouterr()
    assert "lever build cartographer-abc123-" in captured.out
    assert "failed: False" in captured.out
    error_lines = [json.loads(line) for line in captured.err.splitlines() if line.startswith("{")]
    payload = error_lines[-1]
    assert payload["status"] == "fail"
    assert payload["error"]["kind"] == "build_failed"
    assert payload["error"]["code"] == 1


def test_successful_lever_build_exits_zero(release_env: dict[str, str]) -> None:
    env = {**release_env, "RELEASE_USING_LEVER": "1", "LEVER_KUBECONFIG_PATH": "/tmp/kc"}
    cluster = FakeCluster([status_document("True", "True", "True")])
    assert main(["--quiet"], env=env, tools=_tools(cluster)) == 0
    assert len(cluster.applied) == 1


def test_unknown_root_is_a_config_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rc = main([], env={"RELEASE_ROOT": str(tmp_path / "missing")}, tools=_tools())
    assert rc == 1
    assert "RELEASE_ROOT is not a directory" in capsys.readouterr().err


@pytest.mark.integration
def test_cli_version_subprocess() -> None:
    env = {**os.environ, "PYTHONPATH": str(SRC)}
    proc = subprocess.run(
        [sys.executable, "-m", "cartographer_release.cli", "--version"],
        env=env,
        text=True,
        capture_output=True,
        check=False,
    )
    assert proc.returncode == 0, proc.stderr
    assert proc.stdout.strip() == "cartographer-release 0.1.0"
