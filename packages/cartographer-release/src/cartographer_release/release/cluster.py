from __future__ import annotations

import json
from dataclasses import dataclass, field

from cartographer_release.adapters import CliAdapter, kubectl
from cartographer_release.core.context import RunContext
from cartographer_release.core.errors import ScriptError
from cartographer_release.core.exit_codes import ERR_BUILD


@dataclass(frozen=True)
class KubectlCluster:
    kubeconfig: str
    adapter: CliAdapter = field(default=kubectl)

    def apply(self, ctx: RunContext, document: str) -> str:
        result = self.adapter.check(ctx, "--kubeconfig", self.kubeconfig, "apply", "-f", "-", input_text=document)
        return result.stdout.strip()

    def get(self, ctx: RunContext, resource: str, name: str) -> dict[str, object]:
        result = self.adapter.check(ctx, "--kubeconfig", self.kubeconfig, "get", resource, name, "-o", "json")
        try:
            payload = json.loads(result.stdout)
        except json.JSONDecodeError as exc:
            raise ScriptError(
                f"kubectl returned non-JSON output for {resource}/{name}: {exc}",
                ERR_BUILD,
                kind="invalid_status_document",
            ) from exc
        if not isinstance(payload, dict):
            raise ScriptError(
                f"kubectl returned a non-object document for {resource}/{name}",
                ERR_BUILD,
                kind="invalid_status_document",
            )
        return payload
