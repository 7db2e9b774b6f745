"""Pydantic v2 models shared across create-fast-dev.

Covers the template descriptor (what to scaffold), the on-disk template config
artifact (``fast-dev.config.json``), the remote catalog payload, the detected
monorepo facts, and the per-invocation transform context.

JSON on disk and over the wire is camelCase; every model accepts either the
camelCase alias or the snake_case field name.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Callable, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict[str, Any]:
        """Dump with camelCase keys, dropping unset optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class PromptType(str, Enum):
    """Kinds of interactive question a template can ask."""
    TEXT = "text"
    SELECT = "select"
    MULTISELECT = "multiselect"
    CONFIRM = "confirm"


class TransformType(str, Enum):
    """Whether a transform entry names a built-in or a template-supplied transformer."""
    BUILTIN = "builtin"
    CUSTOM = "custom"


class PackageManager(str, Enum):
    NPM = "npm"
    YARN = "yarn"
    PNPM = "pnpm"
    BUN = "bun"


class InstallationMode(str, Enum):
    STANDALONE = "standalone"
    MONOREPO = "monorepo"


# ---------------------------------------------------------------------------
# Template descriptor
# ---------------------------------------------------------------------------

class PromptOption(_CamelModel):
    """One choice of a select/multiselect prompt."""
    value: str
    label: str
    hint: Optional[str] = None


class TemplatePrompt(_CamelModel):
    """A question asked after the template is downloaded.

    ``validate_fn`` only exists for templates registered in code; it never
    round-trips through JSON.
    """
    type: PromptType
    name: str = Field(..., description="Answer key")
    message: str
    default: Any = None
    options: Optional[list[PromptOption]] = None
    validate_fn: Optional[Callable[[Any], Union[bool, str]]] = Field(
        default=None, alias="validate", exclude=True
    )


class TemplateTransform(_CamelModel):
    """One step of a template's ordered transform list."""
    type: TransformType = TransformType.BUILTIN
    transformer: str
    options: Optional[dict[str, Any]] = None


class PostActionConfig(_CamelModel):
    """Template-level overrides for the post-scaffold steps."""
    skip_git_init: Optional[bool] = None
    skip_install: Optional[bool] = None
    custom_scripts: Optional[list[str]] = None

    def is_empty(self) -> bool:
        return not self.model_dump(exclude_none=True)


class TemplateStack(_CamelModel):
    """Grouping shown when picking a template (framework or use case)."""
    id: str
    name: str
    description: str


class Template(_CamelModel):
    """Resolved definition of a template, driving one scaffold operation."""
    id: str
    slug: str
    name: str
    description: str = ""
    stack_id: str
    git_url: str = Field(..., description="Source location, e.g. 'github:org/repo'")
    branch: Optional[str] = None
    prompts: list[TemplatePrompt] = Field(default_factory=list)
    transforms: list[TemplateTransform] = Field(default_factory=list)
    post_actions: Optional[PostActionConfig] = None
    tags: list[str] = Field(default_factory=list)
    maintainer: Optional[str] = None
    docs_url: Optional[str] = None


# ---------------------------------------------------------------------------
# Template config artifact (fast-dev.config.json)
# ---------------------------------------------------------------------------

class TemplateMeta(_CamelModel):
    id: str
    name: str
    description: str = ""
    stack: str = "custom"
    tags: list[str] = Field(default_factory=list)
    maintainer: Optional[str] = None
    docs_url: Optional[str] = None


class TsconfigSettings(_CamelModel):
    extends: Optional[str] = None
    overrides: Optional[dict[str, Any]] = None


class MonorepoConfig(_CamelModel):
    """How a template adapts itself when installed inside a workspace."""
    enabled: bool = False
    type: Literal["app", "package"] = "app"
    default_dir: Optional[str] = None
    remove_files: list[str] = Field(default_factory=list)
    workspace_deps: list[str] = Field(default_factory=list)
    tsconfig: Optional[TsconfigSettings] = None


class TemplateConfig(_CamelModel):
    """Parsed ``fast-dev.config.json`` shipped inside a template repository."""
    version: str = "1.0"
    template: TemplateMeta
    monorepo: Optional[MonorepoConfig] = None
    prompts: Optional[list[TemplatePrompt]] = None
    transforms: Optional[list[TemplateTransform]] = None
    features: Optional[dict[str, list[str]]] = None
    post_actions: Optional[PostActionConfig] = None


# ---------------------------------------------------------------------------
# Remote catalog
# ---------------------------------------------------------------------------

class RegistryTemplate(_CamelModel):
    """A catalog entry; prompts and transforms arrive later with the download."""
    id: str
    name: str
    description: str = ""
    stack: str
    tags: list[str] = Field(default_factory=list)
    git_url: str
    branch: Optional[str] = None


class TemplateRegistry(_CamelModel):
    version: str
    templates: list[RegistryTemplate]


# ---------------------------------------------------------------------------
# Monorepo & execution context
# ---------------------------------------------------------------------------

class MonorepoContext(_CamelModel):
    """Facts about the enclosing workspace, computed once per invocation."""
    model_config = ConfigDict(frozen=True)

    is_monorepo: bool = True
    root_dir: Path
    turbo_config_path: Optional[Path] = None
    workspace_config_path: Optional[Path] = None
    package_manager: PackageManager = PackageManager.PNPM
    base_tsconfig: Optional[Path] = None


class TransformContext(BaseModel):
    """State shared by every transformer during one scaffold invocation.

    Frozen: the project path and the template cannot be reassigned once the
    pipeline starts. Only the caller adds entries to ``answers``, and only
    before the engine runs.
    """
    model_config = ConfigDict(frozen=True)

    project_path: Path
    project_name: str
    answers: dict[str, Any] = Field(default_factory=dict)
    template: Template
    mode: InstallationMode = InstallationMode.STANDALONE
    monorepo_context: Optional[MonorepoContext] = None
    template_config: Optional[TemplateConfig] = None
