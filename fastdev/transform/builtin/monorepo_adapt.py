"""Adapt a template for installation inside a Turborepo workspace.

1. Remove files that do not belong in a workspace member.
2. Rename the package to ``<workspacePrefix>/<projectName>``.
3. Point configured dependencies at the workspace with ``workspace:*``.

Every precondition (monorepo mode, detected workspace, ``monorepo`` config
block, ``package.json``) is optional: if one is missing the step does nothing.
"""

from __future__ import annotations

from typing import Any, Optional

from ...models import InstallationMode, TransformContext
from ...utils import load_json, remove_path, resolve_inside, save_json
from ..base import MissingPrecondition, Transformer

DEFAULT_WORKSPACE_PREFIX = "@repo"
WORKSPACE_VERSION = "workspace:*"

_DEPENDENCY_FIELDS = ("dependencies", "devDependencies")


class MonorepoAdaptTransformer(Transformer):
    name = "monorepo-adapt"
    description = "Adapts template for Turborepo monorepo installation"
    on_missing = MissingPrecondition.SKIP

    async def transform(
        self, ctx: TransformContext, options: Optional[dict[str, Any]] = None
    ) -> None:
        if ctx.mode is not InstallationMode.MONOREPO or ctx.monorepo_context is None:
            return
        config = ctx.template_config.monorepo if ctx.template_config else None
        if config is None:
            return

        prefix = (options or {}).get("workspacePrefix") or DEFAULT_WORKSPACE_PREFIX

        for relative in config.remove_files:
            await remove_path(resolve_inside(ctx.project_path, relative))

        pkg_path = ctx.project_path / "package.json"
        try:
            pkg = await load_json(pkg_path)
        except (OSError, ValueError):
            return
        if not isinstance(pkg, dict):
            return

        pkg["name"] = f"{prefix}/{ctx.project_name}"

        for dep in config.workspace_deps:
            for field in _DEPENDENCY_FIELDS:
                deps = pkg.get(field)
                if isinstance(deps, dict) and deps.get(dep):
                    deps[dep] = WORKSPACE_VERSION

        await save_json(pkg, pkg_path)
