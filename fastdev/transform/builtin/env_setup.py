"""Materialise ``.env`` from ``.env.example``.

Both ``${NAME}`` and bare ``$NAME`` tokens are substituted. A bare token only
matches when it is not the prefix of a longer variable name, so ``$APP``
leaves ``$APP_URL`` alone.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from ...models import TransformContext
from ...utils import path_exists, read_text, write_text
from ..base import MissingPrecondition, Transformer

EXAMPLE_FILE = ".env.example"
ENV_FILE = ".env"


def substitute(content: str, substitutions: dict[str, str]) -> str:
    """Replace ``${KEY}`` and ``$KEY`` occurrences for every key."""
    for key, value in substitutions.items():
        name = re.escape(key)
        for pattern in (rf"\$\{{{name}\}}", rf"\${name}(?![A-Z_])"):
            content = re.sub(pattern, lambda _m, v=value: v, content)
    return content


class EnvSetupTransformer(Transformer):
    name = "env-setup"
    description = "Creates .env from .env.example with variable substitution"
    on_missing = MissingPrecondition.SKIP

    async def transform(
        self, ctx: TransformContext, options: Optional[dict[str, Any]] = None
    ) -> None:
        example_path = ctx.project_path / EXAMPLE_FILE
        if not await path_exists(example_path):
            return

        content = await read_text(example_path)

        substitutions: dict[str, str] = {
            str(k): str(v) for k, v in ((options or {}).get("substitutions") or {}).items()
        }
        if ctx.project_name:
            substitutions["PROJECT_NAME"] = ctx.project_name
            substitutions["APP_NAME"] = ctx.project_name

        await write_text(ctx.project_path / ENV_FILE, substitute(content, substitutions))
