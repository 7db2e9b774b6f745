"""Prune files belonging to features the user did not select.

The feature map (feature name -> paths to delete when unselected) is merged
from, lowest priority first: the ``features`` block of the template config,
the ``featureMap`` option, and ``.fast-dev/features.json`` in the project.
Example ``features.json``::

    {
      "auth": ["src/features/auth", "src/middleware/auth.ts"],
      "analytics": ["src/lib/analytics.ts"]
    }

The ``.fast-dev`` directory is removed afterwards. Running the step twice
with the same selection leaves the same tree.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from ...models import TransformContext
from ...templates.config_loader import LEGACY_CONFIG_DIR
from ...utils import load_json, remove_path, resolve_inside
from ..base import MissingPrecondition, Transformer

logger = logging.getLogger(__name__)

FEATURES_FILE = "features.json"
DEFAULT_FEATURE_KEY = "features"


def _selected(value: Any) -> set[str]:
    if value is None:
        return set()
    if isinstance(value, str):
        return {value}
    return {str(v) for v in value}


class ToggleFeatureTransformer(Transformer):
    name = "toggle-feature"
    description = "Removes files for unselected features"
    on_missing = MissingPrecondition.SKIP

    async def transform(
        self, ctx: TransformContext, options: Optional[dict[str, Any]] = None
    ) -> None:
        opts = options or {}
        feature_key = opts.get("featureKey") or DEFAULT_FEATURE_KEY
        selected = _selected(ctx.answers.get(feature_key))

        feature_map: dict[str, list[str]] = {}
        if ctx.template_config is not None and ctx.template_config.features:
            feature_map.update(ctx.template_config.features)
        feature_map.update(opts.get("featureMap") or {})
        feature_map.update(await self._load_feature_file(ctx))

        for feature, paths in feature_map.items():
            if feature in selected:
                continue
            for relative in paths:
                target = resolve_inside(ctx.project_path, relative)
                logger.debug("Removing %s (feature '%s' not selected)", relative, feature)
                await remove_path(target)

        await remove_path(ctx.project_path / LEGACY_CONFIG_DIR)

    async def _load_feature_file(self, ctx: TransformContext) -> dict[str, list[str]]:
        path = ctx.project_path / LEGACY_CONFIG_DIR / FEATURES_FILE
        try:
            data = await load_json(path)
        except (OSError, ValueError):
            return {}
        if not isinstance(data, dict):
            logger.debug("Ignoring %s: expected an object", path)
            return {}
        return {str(k): list(v) for k, v in data.items() if isinstance(v, list)}
