"""Transformation engine.

Runs a template's transform list in order against one shared context. Steps
run strictly one after another; the first failure stops the pipeline and is
re-raised as :class:`TransformError`. Nothing is rolled back, so a failure
can leave the project partially transformed.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..errors import TransformError
from ..models import (
    InstallationMode,
    Template,
    TemplateConfig,
    TemplateTransform,
    TransformContext,
    TransformType,
)
from .registry import TransformerRegistry

# Structural steps that must run before the template's own transforms.
MONOREPO_TRANSFORMERS: tuple[str, ...] = ("monorepo-adapt", "tsconfig-adapt")


async def run_transformations(
    ctx: TransformContext,
    registry: TransformerRegistry,
    logger: Optional[logging.Logger] = None,
) -> list[str]:
    """Apply ``ctx.template.transforms`` in order.

    Unknown transformer names are logged and skipped.

    Returns:
        Names of the transformers that ran, in order.

    Raises:
        TransformError: The first transformer that raised, wrapping its error.
    """
    log = logger or logging.getLogger(__name__)
    applied: list[str] = []

    for entry in ctx.template.transforms:
        transformer = registry.get(entry.transformer)
        if transformer is None:
            log.warning("Unknown transformer: %s, skipping...", entry.transformer)
            continue

        log.debug("Running transformer: %s", transformer.name)
        try:
            await transformer.transform(ctx, entry.options)
        except Exception as exc:
            log.error("Transformer %s failed: %s", transformer.name, exc)
            raise TransformError(transformer.name, exc) from exc
        log.debug("Completed transformer: %s", transformer.name)
        applied.append(transformer.name)

    return applied


def with_monorepo_transforms(
    template: Template,
    mode: InstallationMode,
    template_config: Optional[TemplateConfig],
) -> Template:
    """Prepend the monorepo steps when installing into a workspace.

    Applies only in monorepo mode and only when the template's config opts
    in with ``monorepo.enabled``. Returns a new descriptor; *template* is left
    unchanged.
    """
    if mode is not InstallationMode.MONOREPO:
        return template
    if template_config is None or template_config.monorepo is None:
        return template
    if not template_config.monorepo.enabled:
        return template

    structural = [
        TemplateTransform(type=TransformType.BUILTIN, transformer=name)
        for name in MONOREPO_TRANSFORMERS
    ]
    return template.model_copy(update={"transforms": structural + list(template.transforms)})
