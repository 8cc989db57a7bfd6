from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from cartographer_release.core.context import RunContext


@runtime_checkable
class TemplateRenderer(Protocol):
    def render(self, ctx: RunContext, files: Sequence[Path], data_values: Mapping[str, str]) -> str: ...


@runtime_checkable
class ClusterClient(Protocol):
    def apply(self, ctx: RunContext, document: str) -> str: ...

    def get(self, ctx: RunContext, resource: str, name: str) -> dict[str, object]: ...
