"""Template config artifact (``fast-dev.config.json``) handling.

A template repository may describe its own prompts, transforms and monorepo
behaviour in a JSON file at its root. After download the file is loaded,
merged into the template descriptor, and finally removed from the project
tree because it is build-time metadata only.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from ..models import Template, TemplateConfig, TemplatePrompt, TemplateTransform, TransformType
from ..utils import load_json, remove_path

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "fast-dev.config.json"
LEGACY_CONFIG_DIR = ".fast-dev"
SUPPORTED_VERSION = "1.0"

FALLBACK_TRANSFORMER = "rename-package"

_REQUIRED_BLOCKS = {"template"}
_ENTRY_MODELS: dict[str, type[BaseModel]] = {
    "prompts": TemplatePrompt,
    "transforms": TemplateTransform,
}


async def load_template_config(project_path: str | Path) -> Optional[TemplateConfig]:
    """Load ``fast-dev.config.json`` from a downloaded project.

    Parsing is best-effort: invalid ``prompts``/``transforms`` entries are
    dropped one by one, and any other optional block that does not match its
    shape is dropped as a whole, with a warning for each.

    Returns:
        The parsed config, or ``None`` if the file is missing, is not valid
        JSON, or lacks a usable ``template`` block. Never raises.
    """
    config_path = Path(project_path) / CONFIG_FILENAME

    try:
        raw = await load_json(config_path)
    except (OSError, ValueError):
        return None

    if not isinstance(raw, dict):
        return None

    version = raw.get("version")
    if version != SUPPORTED_VERSION:
        logger.warning("Unknown template config version: %s", version)

    data = _drop_invalid_entries(raw)
    try:
        return TemplateConfig.model_validate(data)
    except ValidationError as exc:
        bad_blocks = {err["loc"][0] for err in exc.errors() if err["loc"]}

    if bad_blocks & _REQUIRED_BLOCKS:
        logger.debug("Ignoring %s: no usable template block", CONFIG_FILENAME)
        return None

    for block in sorted(map(str, bad_blocks)):
        logger.warning("Ignoring invalid '%s' block in %s", block, CONFIG_FILENAME)
        data.pop(block, None)
    try:
        return TemplateConfig.model_validate(data)
    except ValidationError as exc:
        logger.debug("Ignoring invalid %s: %s", CONFIG_FILENAME, exc)
        return None


def _drop_invalid_entries(raw: dict[str, Any]) -> dict[str, Any]:
    data = dict(raw)
    for key, model in _ENTRY_MODELS.items():
        entries = data.get(key)
        if not isinstance(entries, list):
            continue
        kept = []
        for index, entry in enumerate(entries):
            try:
                model.model_validate(entry)
            except ValidationError:
                logger.warning("Ignoring invalid %s entry #%d in %s", key, index, CONFIG_FILENAME)
                continue
            kept.append(entry)
        data[key] = kept
    return data


def merge_config_into_template(base: Template, config: TemplateConfig) -> Template:
    """Overlay the artifact onto a catalog-sourced descriptor.

    Identity and metadata always come from the artifact. Prompts, transforms
    and post-action overrides are replaced only when the artifact supplies
    non-empty values, otherwise the base descriptor's values are kept. The
    base descriptor is not modified.
    """
    meta = config.template
    update = {
        "id": meta.id,
        "name": meta.name,
        "description": meta.description,
        "stack_id": meta.stack,
        "tags": list(meta.tags),
        "maintainer": meta.maintainer,
        "docs_url": meta.docs_url,
    }
    if config.prompts:
        update["prompts"] = list(config.prompts)
    if config.transforms:
        update["transforms"] = list(config.transforms)
    if config.post_actions is not None and not config.post_actions.is_empty():
        update["post_actions"] = config.post_actions

    return base.model_copy(update=update, deep=True)


def create_template_from_config(
    config: TemplateConfig, git_url: str, branch: Optional[str] = None
) -> Template:
    """Build a descriptor straight from an artifact (no catalog entry)."""
    meta = config.template
    return Template(
        id=meta.id,
        slug=meta.id,
        name=meta.name,
        description=meta.description,
        stack_id=meta.stack,
        git_url=git_url,
        branch=branch,
        prompts=list(config.prompts or []),
        transforms=list(config.transforms or []),
        post_actions=config.post_actions,
        tags=list(meta.tags),
        maintainer=meta.maintainer,
        docs_url=meta.docs_url,
    )


def create_fallback_template(git_url: str, branch: Optional[str] = None) -> Template:
    """Descriptor for a template that ships no config artifact.

    Carries exactly one transform, the package rename, so every scaffold at
    least gets its package identity corrected.
    """
    return Template(
        id="custom",
        slug="custom",
        name="Custom Template",
        description=f"Template without {CONFIG_FILENAME}",
        stack_id="custom",
        git_url=git_url,
        branch=branch,
        prompts=[],
        transforms=[
            TemplateTransform(type=TransformType.BUILTIN, transformer=FALLBACK_TRANSFORMER)
        ],
        tags=[],
    )


async def cleanup_template_config(project_path: str | Path) -> None:
    """Delete the artifact and the legacy ``.fast-dev`` directory, if present."""
    root = Path(project_path)
    for leftover in (root / CONFIG_FILENAME, root / LEGACY_CONFIG_DIR):
        try:
            await remove_path(leftover)
        except OSError as exc:
            logger.debug("Could not remove %s: %s", leftover, exc)
