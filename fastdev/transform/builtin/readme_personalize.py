"""Personalise ``README.md`` with the project's name and description."""

from __future__ import annotations

import re
from typing import Any, Optional

from ...models import TransformContext
from ...utils import path_exists, read_text, title_case, write_text
from ..base import MissingPrecondition, Transformer

README_FILE = "README.md"

_FIRST_H1 = re.compile(r"^#\s+(.+)$", re.MULTILINE)
_TEMPLATE_TITLE = re.compile(r"starter|template|boilerplate", re.IGNORECASE)


class ReadmePersonalizeTransformer(Transformer):
    name = "readme-personalize"
    description = "Updates README.md with project name and description"
    on_missing = MissingPrecondition.SKIP

    async def transform(
        self, ctx: TransformContext, options: Optional[dict[str, Any]] = None
    ) -> None:
        readme_path = ctx.project_path / README_FILE
        if not await path_exists(readme_path):
            return

        content = await read_text(readme_path)
        title = title_case(ctx.project_name)

        replacements = {
            "{{PROJECT_NAME}}": ctx.project_name,
            "{{DESCRIPTION}}": str(ctx.answers.get("description") or ""),
            "{{PROJECT_TITLE}}": title,
        }
        for placeholder, value in replacements.items():
            content = content.replace(placeholder, value)

        heading = _FIRST_H1.search(content)
        if heading and _TEMPLATE_TITLE.search(heading.group(1)):
            content = content[: heading.start()] + f"# {title}" + content[heading.end():]

        await write_text(readme_path, content)
