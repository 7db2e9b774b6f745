"""Template resolution: catalogs, download, and the template config artifact.

Quick usage::

    from fastdev.templates import fetch_template, load_template_config

    result = await fetch_template(template, dir="/tmp/my-app")
    config = await load_template_config(result.dir)
"""

from .config_loader import (
    CONFIG_FILENAME,
    cleanup_template_config,
    create_fallback_template,
    create_template_from_config,
    load_template_config,
    merge_config_into_template,
)
from .fetcher import FetchResult, fetch_template, validate_template_url
from .registry import (
    TemplateCatalog,
    default_catalog,
    get_all_templates,
    get_template_by_slug,
    get_templates_by_stack,
    search_templates,
)
from .registry_remote import RemoteRegistry, registry_template_to_template
from .stacks import get_stack_by_id, stacks

__all__ = [
    "CONFIG_FILENAME",
    "FetchResult",
    "RemoteRegistry",
    "TemplateCatalog",
    "cleanup_template_config",
    "create_fallback_template",
    "create_template_from_config",
    "default_catalog",
    "fetch_template",
    "get_all_templates",
    "get_stack_by_id",
    "get_template_by_slug",
    "get_templates_by_stack",
    "load_template_config",
    "merge_config_into_template",
    "registry_template_to_template",
    "search_templates",
    "stacks",
    "validate_template_url",
]
