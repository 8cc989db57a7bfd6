from __future__ import annotations

from dataclasses import dataclass

from cartographer_release.core.context import RunContext
from cartographer_release.core.errors import ScriptError
from cartographer_release.core.process import CommandResult, run_command


@dataclass(frozen=True)
class CliAdapter:
    bin_name: str

    def run(self, ctx: RunContext, *args: str, input_text: str | None = None) -> CommandResult:
        return run_command([self.bin_name, *[str(a) for a in args]], ctx.repo_root, input_text=input_text, ctx=ctx)

    def check(self, ctx: RunContext, *args: str, input_text: str | None = None) -> CommandResult:
        result = self.run(ctx, *args, input_text=input_text)
        if result.code != 0:
            detail = result.stderr.strip() or result.stdout.strip() or "no output"
            raise ScriptError(
                f"`{self.bin_name} {' '.join(str(a) for a in args)}` failed with exit code {result.code}: {detail}",
                result.code if result.code > 0 else 1,
                kind="command_failed",
            )
        return result
