from __future__ import annotations

from cartographer_release.adapters import CliAdapter, docker
from cartographer_release.core.context import RunContext
from cartographer_release.core.logging import log_event


def build_image(ctx: RunContext, image: str, build_context: str, builder: CliAdapter = docker) -> None:
    log_event(ctx, "info", "image", "build", image=image, context=build_context)
    builder.check(ctx, "build", build_context, "-t", image)
    builder.check(ctx, "push", image)
    log_event(ctx, "info", "image", "pushed", image=image)
