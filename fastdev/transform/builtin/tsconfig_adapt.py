"""Point a project's ``tsconfig.json`` at the workspace base config."""

from __future__ import annotations

import os
from typing import Any, Optional

from ...models import InstallationMode, TransformContext
from ...utils import load_json, path_exists, save_json
from ..base import MissingPrecondition, Transformer

TSCONFIG_FILE = "tsconfig.json"


class TsconfigAdaptTransformer(Transformer):
    name = "tsconfig-adapt"
    description = "Adapts TypeScript configuration for monorepo installation"
    on_missing = MissingPrecondition.SKIP

    async def transform(
        self, ctx: TransformContext, options: Optional[dict[str, Any]] = None
    ) -> None:
        monorepo = ctx.monorepo_context
        if ctx.mode is not InstallationMode.MONOREPO or monorepo is None:
            return

        config = ctx.template_config.monorepo if ctx.template_config else None
        settings = config.tsconfig if config else None
        if settings is None and monorepo.base_tsconfig is None:
            return

        tsconfig_path = ctx.project_path / TSCONFIG_FILE
        if not await path_exists(tsconfig_path):
            return
        try:
            tsconfig = await load_json(tsconfig_path)
        except (OSError, ValueError):
            return
        if not isinstance(tsconfig, dict):
            return

        if settings is not None and settings.extends:
            tsconfig["extends"] = settings.extends
        elif monorepo.base_tsconfig is not None:
            relative = os.path.relpath(monorepo.base_tsconfig, ctx.project_path)
            tsconfig["extends"] = relative.replace(os.sep, "/")

        if settings is not None and settings.overrides:
            tsconfig["compilerOptions"] = {
                **(tsconfig.get("compilerOptions") or {}),
                **settings.overrides,
            }

        await save_json(tsconfig, tsconfig_path)
