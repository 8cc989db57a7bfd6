from __future__ import annotations

from pathlib import Path

import yaml

from cartographer_release.config import ReleaseConfig
from cartographer_release.core.context import RunContext
from cartographer_release.core.errors import ScriptError
from cartographer_release.core.exit_codes import ERR_ARTIFACT, ERR_RENDER
from cartographer_release.core.logging import log_event
from cartographer_release.core.yaml_utils import parse_yaml_documents

from .model import TemplateRenderer

MANIFEST_NAME = "cartographer.yaml"
MANIFEST_SOURCES = (
    "config",
    "hack/overlays/webhook-configuration.yaml",
    "hack/overlays/component-labels.yaml",
)


def generate_release(ctx: RunContext, cfg: ReleaseConfig, renderer: TemplateRenderer) -> Path:
    sources = [ctx.repo_root / rel for rel in MANIFEST_SOURCES]
    missing = [str(path.relative_to(ctx.repo_root)) for path in sources if not path.exists()]
    if missing:
        raise ScriptError(f"missing manifest sources: {', '.join(missing)}", ERR_ARTIFACT, kind="artifact_error")
    rendered = renderer.render(
        ctx,
        sources,
        {"version": cfg.release_version, "controller_image": cfg.release_image},
    )
    try:
        docs = parse_yaml_documents(rendered)
    except yaml.YAMLError as exc:
        raise ScriptError(f"rendered release manifest is not valid YAML: {exc}", ERR_RENDER, kind="render_error") from exc
    if not docs:
        raise ScriptError("rendered release manifest is empty", ERR_RENDER, kind="render_error")
    ctx.release_dir.mkdir(parents=True, exist_ok=True)
    out = ctx.release_dir / MANIFEST_NAME
    out.write_text(rendered, encoding="utf-8")
    log_event(ctx, "info", "manifest", "generated", path=str(out.relative_to(ctx.repo_root)), documents=len(docs))
    return out
