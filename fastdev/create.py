"""Project creation flow.

Ties the pieces together for one ``create`` invocation:

1. Detect an enclosing Turborepo workspace (unless disabled).
2. Resolve the template: local catalog, then the remote catalog, then a raw
   ``github:`` source.
3. Choose the project name and target directory.
4. Download the template and load its ``fast-dev.config.json``.
5. Ask the template's questions and decide the post actions.
6. Run the transformers, then remove the template config.
7. Initialise git and install dependencies (failures are warnings).

Usage::

    creator = ProjectCreator(CreateOptions(name="my-app", template="nextjs-starter", yes=True))
    result = await creator.run()
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from .config import UserConfigStore
from .errors import ScaffoldError
from .models import (
    InstallationMode,
    MonorepoContext,
    PackageManager,
    Template,
    TemplateConfig,
    TransformContext,
)
from .monorepo import detect_monorepo, get_target_dir
from .post_actions import detect_package_manager, initialize_git, install_dependencies
from .prompts import (
    ask_confirm,
    prompt_post_actions,
    prompt_project_name,
    prompt_template_selection,
    run_template_prompts,
    validate_project_name,
)
from .templates import (
    RemoteRegistry,
    TemplateCatalog,
    cleanup_template_config,
    create_fallback_template,
    create_template_from_config,
    default_catalog,
    fetch_template,
    load_template_config,
    merge_config_into_template,
    validate_template_url,
)
from .transform import (
    TransformerRegistry,
    create_default_registry,
    run_transformations,
    with_monorepo_transforms,
)
from .utils import console, path_exists, print_info, print_note, print_success, print_warning

RAW_SOURCE_ID = "custom"


class CreateOptions(BaseModel):
    """Inputs of one ``create`` invocation, mirroring the CLI flags."""

    name: Optional[str] = Field(default=None, description="Project name; prompted when omitted")
    template: Optional[str] = Field(default=None, description="Template slug or github: source")
    yes: bool = Field(default=False, description="Skip prompts and use defaults")
    output: Optional[Path] = Field(default=None, description="Parent directory in standalone mode")
    install: bool = True
    git: bool = True
    monorepo: bool = Field(default=False, description="Require a detected workspace")
    no_monorepo: bool = Field(default=False, description="Ignore any detected workspace")
    target: Optional[Literal["apps", "packages"]] = None
    cwd: Path = Field(default_factory=Path.cwd)


class CreateResult(BaseModel):
    project_name: str
    project_path: Path
    template: str
    mode: InstallationMode
    applied_transforms: list[str] = Field(default_factory=list)
    git_initialized: bool = False
    dependencies_installed: bool = False
    package_manager: PackageManager
    next_steps: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class ProjectCreator:
    """Runs the create flow for a single project.

    Args:
        options: Parsed CLI options.
        registry: Transformers available to the template; defaults to the
            built-ins.
        store: User preference store.
        logger: Logger for debug output; the ``fastdev`` logger by default.
        catalog: Local template catalog.
        remote: Remote catalog client.
    """

    def __init__(
        self,
        options: CreateOptions,
        registry: Optional[TransformerRegistry] = None,
        store: Optional[UserConfigStore] = None,
        logger: Optional[logging.Logger] = None,
        catalog: Optional[TemplateCatalog] = None,
        remote: Optional[RemoteRegistry] = None,
    ) -> None:
        self.options = options
        self.registry = registry or create_default_registry()
        self.store = store or UserConfigStore()
        self.logger = logger or logging.getLogger("fastdev")
        self.catalog = catalog or default_catalog
        self.remote = remote or RemoteRegistry()
        self.warnings: list[str] = []

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    async def run(self) -> CreateResult:
        """Create the project.

        Raises:
            ScaffoldError: Precondition failures (name, directory, template).
            TemplateFetchError: The download failed; nothing was transformed.
            TransformError: A transformer failed; the tree may be partial.
            PromptCancelled: The user cancelled a prompt.
        """
        opts = self.options
        monorepo_ctx = await self._detect_mode()
        mode = InstallationMode.MONOREPO if monorepo_ctx else InstallationMode.STANDALONE
        self.logger.debug("Installation mode: %s", mode.value)

        template, is_raw_source = await self._resolve_template()
        self.logger.debug("Selected template: %s", template.slug)

        project_name = self._project_name(template)
        project_path = self._target_path(project_name, monorepo_ctx)
        if await path_exists(project_path):
            raise ScaffoldError(f"Directory already exists: {project_path}")

        with console.status("Downloading template..."):
            self.logger.debug("Fetching template from %s", template.git_url)
            fetched = await fetch_template(template, project_path, force=False)
        print_success("Template downloaded")

        template_config = await load_template_config(fetched.dir)
        template = self._apply_config(template, template_config, is_raw_source)

        answers = run_template_prompts(template, skip_prompts=opts.yes, store=self.store)
        answers["projectName"] = project_name
        saved_author = self.store.get("author")
        if saved_author and not answers.get("author"):
            answers["author"] = saved_author
        self.logger.debug("Collected answers: %s", answers)

        install_deps, init_git = self._decide_post_actions(template, mode)

        template = with_monorepo_transforms(template, mode, template_config)
        ctx = TransformContext(
            project_path=fetched.dir,
            project_name=project_name,
            answers=answers,
            template=template,
            mode=mode,
            monorepo_context=monorepo_ctx,
            template_config=template_config,
        )

        with console.status("Applying customizations..."):
            applied = await run_transformations(ctx, self.registry, self.logger)
            await cleanup_template_config(fetched.dir)
        print_success("Customizations applied")

        git_ok = await self._init_git(fetched.dir) if init_git else False
        package_manager = await self._package_manager(fetched.dir, monorepo_ctx)
        installed = (
            await self._install(fetched.dir, project_name, monorepo_ctx, package_manager)
            if install_deps
            else False
        )

        next_steps = self._next_steps(project_name, mode, package_manager, installed)
        print_note(next_steps, title="Next steps")

        return CreateResult(
            project_name=project_name,
            project_path=fetched.dir,
            template=template.slug,
            mode=mode,
            applied_transforms=applied,
            git_initialized=git_ok,
            dependencies_installed=installed,
            package_manager=package_manager,
            next_steps=next_steps,
            warnings=list(self.warnings),
        )

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def _detect_mode(self) -> Optional[MonorepoContext]:
        opts = self.options
        if opts.no_monorepo:
            return None

        start = opts.output or opts.cwd
        ctx = await detect_monorepo(start)
        if ctx is None:
            if opts.monorepo:
                raise ScaffoldError(
                    "--monorepo flag set but no Turborepo detected",
                    hint="Make sure you're inside a directory with turbo.json",
                )
            return None

        print_info(f"Monorepo detected: {ctx.root_dir}")
        return ctx

    async def _resolve_template(self) -> tuple[Template, bool]:
        """Return the base descriptor and whether it came from a raw source."""
        requested = self.options.template
        if requested:
            found = self.catalog.get_by_slug(requested)
            if found is None and not validate_template_url(requested):
                found = await self.remote.get_template_by_slug(requested)
            if found is not None:
                return found, False
            if validate_template_url(requested):
                return _raw_source_template(requested), True
            raise ScaffoldError(
                f"Template not found: {requested}",
                hint="Run 'create-fast-dev list' to see available templates",
            )

        if self.options.yes:
            raise ScaffoldError(
                "No template given",
                hint="Pass --template <slug> when using --yes",
            )

        templates = self.catalog.all() or await self.remote.get_templates()
        return prompt_template_selection(templates), False

    def _project_name(self, template: Template) -> str:
        name = self.options.name
        if not name:
            name = template.slug if self.options.yes else prompt_project_name(template.slug)
        name = name.strip()
        error = validate_project_name(name)
        if error:
            raise ScaffoldError(f"Invalid project name '{name}': {error}")
        return name

    def _target_path(self, project_name: str, monorepo_ctx: Optional[MonorepoContext]) -> Path:
        if monorepo_ctx is not None:
            target_type = "package" if self.options.target == "packages" else "app"
            target = get_target_dir(monorepo_ctx.root_dir, target_type)
            self.logger.debug("Monorepo target: %s", target)
            return (target / project_name).resolve()
        base = self.options.output or self.options.cwd
        return (Path(base) / project_name).resolve()

    def _apply_config(
        self,
        template: Template,
        config: Optional[TemplateConfig],
        is_raw_source: bool,
    ) -> Template:
        if config is None:
            self.logger.debug("No fast-dev.config.json found, using fallback mode")
            return create_fallback_template(template.git_url, template.branch)
        self.logger.debug("Loaded template config from fast-dev.config.json")
        if is_raw_source:
            return create_template_from_config(config, template.git_url, template.branch)
        return merge_config_into_template(template, config)

    def _decide_post_actions(self, template: Template, mode: InstallationMode) -> tuple[bool, bool]:
        """Return ``(install_deps, init_git)``.

        Git is never initialised inside a workspace: the member belongs to the
        workspace's repository.
        """
        opts = self.options
        monorepo = mode is InstallationMode.MONOREPO
        overrides = template.post_actions

        install_deps = opts.install and not (overrides and overrides.skip_install)
        init_git = opts.git and not monorepo and not (overrides and overrides.skip_git_init)

        if opts.yes or not install_deps:
            return install_deps, init_git

        if monorepo:
            return ask_confirm("Install dependencies?", default=True), False
        if init_git:
            answers = prompt_post_actions(self.store)
            return answers.install_deps, answers.init_git
        return install_deps, init_git

    async def _init_git(self, project_path: Path) -> bool:
        with console.status("Initializing git repository..."):
            result = await initialize_git(project_path)
        if result.success:
            print_success("Git repository initialized")
            return True
        self.logger.warning("Git init failed: %s", result.error)
        self._warn(f"Git initialization skipped: {result.error}")
        return False

    async def _package_manager(
        self, project_path: Path, monorepo_ctx: Optional[MonorepoContext]
    ) -> PackageManager:
        if monorepo_ctx is not None:
            return monorepo_ctx.package_manager
        preferred = self.store.get("preferredPackageManager")
        if preferred:
            return PackageManager(preferred)
        return await detect_package_manager(project_path)

    async def _install(
        self,
        project_path: Path,
        project_name: str,
        monorepo_ctx: Optional[MonorepoContext],
        package_manager: PackageManager,
    ) -> bool:
        # Workspace members are installed from the workspace root.
        install_dir = monorepo_ctx.root_dir if monorepo_ctx is not None else project_path

        with console.status(f"Installing dependencies with {package_manager.value}..."):
            result = await install_dependencies(
                install_dir, package_manager=package_manager, capture=True
            )
        if result.success:
            print_success("Dependencies installed")
            return True

        self.logger.warning("Install failed: %s", result.error)
        where = "monorepo root" if monorepo_ctx is not None else project_name
        self._warn(f"Failed to install dependencies: {result.error}")
        print_info(f"You can install manually: cd {where} && {package_manager.value} install")
        return False

    def _next_steps(
        self,
        project_name: str,
        mode: InstallationMode,
        package_manager: PackageManager,
        installed: bool,
    ) -> list[str]:
        pm = package_manager.value
        if mode is InstallationMode.MONOREPO:
            folder = "packages" if self.options.target == "packages" else "apps"
            return [f"cd {folder}/{project_name}", f"{pm} dev"]

        steps = [f"cd {project_name}"]
        if not installed:
            steps.append(f"{pm} install")
        steps.append(f"{pm} dev")
        return steps

    def _warn(self, message: str) -> None:
        self.warnings.append(message)
        print_warning(message)


def _raw_source_template(source: str) -> Template:
    """Minimal descriptor for a source given directly on the command line."""
    location, _, branch = source.partition("#")
    return Template(
        id=RAW_SOURCE_ID,
        slug=RAW_SOURCE_ID,
        name=location.partition(":")[2] or location,
        stack_id=RAW_SOURCE_ID,
        git_url=location,
        branch=branch or None,
    )


def summarize(result: CreateResult) -> dict[str, Any]:
    """Rows for the final summary table."""
    return {
        "Project": result.project_name,
        "Location": str(result.project_path),
        "Template": result.template,
        "Mode": result.mode.value,
        "Transforms": ", ".join(result.applied_transforms) or "(none)",
        "Git": "initialized" if result.git_initialized else "skipped",
        "Dependencies": "installed" if result.dependencies_installed else "not installed",
    }
