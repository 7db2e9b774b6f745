"""Rewrite ``package.json`` so the new project owns its identity."""

from __future__ import annotations

from typing import Any, Optional

from ...models import TransformContext
from ...utils import load_json, save_json
from ..base import MissingPrecondition, Transformer

INITIAL_VERSION = "0.0.1"

# Fields that point back at the template's own repository.
TEMPLATE_ONLY_FIELDS = ("repository", "bugs", "homepage")


class RenamePackageTransformer(Transformer):
    name = "rename-package"
    description = "Updates package.json name, version, and clears template-specific fields"
    on_missing = MissingPrecondition.FAIL

    async def transform(
        self, ctx: TransformContext, options: Optional[dict[str, Any]] = None
    ) -> None:
        pkg_path = ctx.project_path / "package.json"
        # A missing or unreadable manifest propagates.
        pkg = await load_json(pkg_path)

        pkg["name"] = ctx.project_name
        pkg["version"] = INITIAL_VERSION

        if ctx.answers.get("description"):
            pkg["description"] = str(ctx.answers["description"])
        if ctx.answers.get("author"):
            pkg["author"] = str(ctx.answers["author"])

        for field in TEMPLATE_ONLY_FIELDS:
            pkg.pop(field, None)

        await save_json(pkg, pkg_path)
