from __future__ import annotations

import argparse
import json
import os
import sys
from collections.abc import Mapping

from . import __version__
from .config import ReleaseConfig
from .core.context import RunContext
from .core.errors import ScriptError
from .core.exit_codes import ERR_INTERNAL, OK
from .core.logging import log_event
from .release.command import ReleaseTools, run_release


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="cartographer-release",
        description="Build the cartographer image, render the release manifest and write the changelog.",
        epilog="Release inputs are read from the environment (RELEASE_VERSION, RELEASE_IMAGE, "
        "PREVIOUS_VERSION, RELEASE_USING_LEVER, LEVER_KUBECONFIG_PATH, LEVER_COMMIT_SHA, ...).",
    )
    p.add_argument("--version", action="version", version=f"cartographer-release {__version__}")
    p.add_argument("--run-id", help="run identifier used in log events")
    p.add_argument("--log-json", action="store_true", help="emit log events as JSON lines")
    vg = p.add_mutually_exclusive_group()
    vg.add_argument("--verbose", action="store_true", help="enable verbose diagnostics")
    vg.add_argument("--quiet", action="store_true", help="only emit errors")
    return p


def _emit_error(log_json: bool, exc: ScriptError) -> None:
    if log_json:
        print(json.dumps(exc.to_payload(), sort_keys=True), file=sys.stderr)
    else:
        print(str(exc), file=sys.stderr)


def main(argv: list[str] | None = None, env: Mapping[str, str] | None = None, tools: ReleaseTools | None = None) -> int:
    ns = build_parser().parse_args(argv)
    environ = os.environ if env is None else env
    try:
        ctx = RunContext.from_args(ns.run_id, None, ns.log_json, ns.quiet, ns.verbose, environ)
        log_event(ctx, "info", "cli", "start", root=str(ctx.repo_root), git_sha=ctx.git_sha)
        cfg = ReleaseConfig.from_env(ctx, environ)
        if not ctx.quiet:
            print(cfg.render_vars(ctx))
        run_release(ctx, cfg, tools or ReleaseTools.default(cfg))
        return OK
    except ScriptError as exc:
        _emit_error(ns.log_json, exc)
        return exc.code
    except Exception as exc:  # pragma: no cover
        _emit_error(ns.log_json, ScriptError(f"internal error: {exc}", ERR_INTERNAL, kind="internal_error"))
        return ERR_INTERNAL


if __name__ == "__main__":
    raise SystemExit(main())
