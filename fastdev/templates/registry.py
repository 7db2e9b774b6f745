"""Local template catalog.

Templates registered here are available offline. Their prompts and
transforms act as defaults until the downloaded ``fast-dev.config.json`` is
merged in.
"""

from __future__ import annotations

from typing import Iterable, Optional

from ..models import Template


class TemplateCatalog:
    """In-memory, searchable list of template descriptors."""

    def __init__(self, templates: Iterable[Template] | None = None) -> None:
        self._templates: list[Template] = list(templates or [])

    def add(self, template: Template) -> None:
        """Add *template*, replacing any entry with the same slug."""
        self._templates = [t for t in self._templates if t.slug != template.slug]
        self._templates.append(template)

    def all(self) -> list[Template]:
        return list(self._templates)

    def get_by_slug(self, slug: str) -> Optional[Template]:
        return next((t for t in self._templates if t.slug == slug), None)

    def by_stack(self, stack_id: str) -> list[Template]:
        return [t for t in self._templates if t.stack_id == stack_id]

    def search(self, query: str) -> list[Template]:
        """Case-insensitive match on name, description or any tag."""
        return search_templates(self._templates, query)


def search_templates(templates: Iterable[Template], query: str) -> list[Template]:
    q = query.lower()
    return [
        t
        for t in templates
        if q in t.name.lower()
        or q in t.description.lower()
        or any(q in tag.lower() for tag in t.tags)
    ]


# Templates bundled with the CLI. The published catalog lives in the remote
# registry; this list stays empty unless a distribution ships its own.
default_catalog = TemplateCatalog()


def get_all_templates() -> list[Template]:
    return default_catalog.all()


def get_template_by_slug(slug: str) -> Optional[Template]:
    return default_catalog.get_by_slug(slug)


def get_templates_by_stack(stack_id: str) -> list[Template]:
    return default_catalog.by_stack(stack_id)
