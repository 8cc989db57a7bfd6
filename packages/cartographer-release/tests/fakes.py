from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from cartographer_release.adapters import CliAdapter
from cartographer_release.core.context import RunContext
from cartographer_release.core.errors import ScriptError
from cartographer_release.core.process import CommandResult


def status_document(*statuses: str | None, messages: Mapping[int, str] | None = None) -> dict[str, object]:
    conditions: list[dict[str, str]] = []
    for index, value in enumerate(statuses):
        condition: dict[str, str] = {}
        if value is not None:
            condition["status"] = value
        if messages and index in messages:
            condition["message"] = messages[index]
        conditions.append(condition)
    return {"kind": "Request", "status": {"conditions": conditions}}


@dataclass
class FakeCluster:
    documents: list[dict[str, object]]
    applied: list[str] = field(default_factory=list)
    gets: list[tuple[str, str]] = field(default_factory=list)

    def apply(self, ctx: RunContext, document: str) -> str:
        self.applied.append(document)
        return "request.lever.tanzu.vmware.com/created"

    def get(self, ctx: RunContext, resource: str, name: str) -> dict[str, object]:
        self.gets.append((resource, name))
        index = min(len(self.gets), len(self.documents)) - 1
        return self.documents[index]


@dataclass
class FakeRenderer:
    output: str | None = None
    fail_with: ScriptError | None = None
    calls: list[tuple[list[Path], dict[str, str]]] = field(default_factory=list)

    def render(self, ctx: RunContext, files: Sequence[Path], data_values: Mapping[str, str]) -> str:
        self.calls.append((list(files), dict(data_values)))
        if self.fail_with is not None:
            raise self.fail_with
        if self.output is not None:
            return self.output
        if "build_suffix" in data_values:
            return yaml.safe_dump(
                {
                    "apiVersion": "lever.tanzu.vmware.com/v1alpha1",
                    "kind": "Request",
                    "metadata": {"name": f"cartographer-{data_values['build_suffix']}"},
                    "spec": {"revision": data_values["commit_sha"], "image": data_values["release_image"]},
                }
            )
        return "---\nkind: Deployment\nmetadata:\n  name: cartographer-controller\n"


@dataclass(frozen=True)
class FakeCli(CliAdapter):
    responses: dict[tuple[str, ...], CommandResult] = field(default_factory=dict)
    calls: list[list[str]] = field(default_factory=list)
    inputs: list[str | None] = field(default_factory=list)

    def run(self, ctx: RunContext, *args: str, input_text: str | None = None) -> CommandResult:
        self.calls.append([str(a) for a in args])
        self.inputs.append(input_text)
        return self.responses.get(tuple(str(a) for a in args), CommandResult(0, "", "", 0))


def ok(stdout: str = "") -> CommandResult:
    return CommandResult(code=0, stdout=stdout, stderr="", duration_ms=1)


def failed(code: int = 1, stderr: str = "boom") -> CommandResult:
    return CommandResult(code=code, stdout="", stderr=stderr, duration_ms=1)
