"""Template stacks: framework- or use-case-based groupings shown in the CLI."""

from __future__ import annotations

from typing import Optional

from ..config import STACKS
from ..models import TemplateStack

stacks: list[TemplateStack] = [
    TemplateStack(id=STACKS["NEXTJS"], name="Next.js", description="React framework for the web"),
    TemplateStack(id=STACKS["EXPO"], name="Expo", description="React Native apps for iOS and Android"),
    TemplateStack(id=STACKS["HONO"], name="Hono", description="Lightweight web APIs on any runtime"),
    TemplateStack(id=STACKS["CLI"], name="CLI", description="Command-line tools"),
    TemplateStack(id=STACKS["LIBRARY"], name="Library", description="Publishable TypeScript packages"),
    TemplateStack(id=STACKS["MONOREPO"], name="Monorepo", description="Turborepo workspaces"),
]


def get_stack_by_id(stack_id: str) -> Optional[TemplateStack]:
    return next((s for s in stacks if s.id == stack_id), None)
