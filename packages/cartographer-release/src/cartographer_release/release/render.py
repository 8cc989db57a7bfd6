from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from cartographer_release.adapters import CliAdapter, ytt
from cartographer_release.core.context import RunContext


@dataclass(frozen=True)
class YttRenderer:
    adapter: CliAdapter = field(default=ytt)

    def render(self, ctx: RunContext, files: Sequence[Path], data_values: Mapping[str, str]) -> str:
        args = ["--ignore-unknown-comments"]
        for path in files:
            args.extend(["-f", str(path)])
        for key, value in data_values.items():
            args.extend(["--data-value", f"{key}={value}"])
        return self.adapter.check(ctx, *args).stdout
