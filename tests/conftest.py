"""Shared pytest fixtures for the create-fast-dev test suite.

Provides reusable fixtures for:
- An isolated per-test user config directory
- Temporary downloaded-project trees
- Template descriptors and template config artifacts
- Transform contexts for standalone and monorepo installs
- Tarball archives shaped like GitHub downloads
"""

from __future__ import annotations

import io
import json
import logging
import tarfile
from pathlib import Path
from typing import Any, Callable

import pytest

from fastdev.models import (
    InstallationMode,
    MonorepoContext,
    PackageManager,
    Template,
    TemplateConfig,
    TemplateTransform,
    TransformContext,
)


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def isolated_config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point preferences, logs and the registry cache at a temp directory."""
    config_dir = tmp_path / "fast-dev-config"
    monkeypatch.setenv("FAST_DEV_CONFIG_DIR", str(config_dir))
    monkeypatch.delenv("npm_config_user_agent", raising=False)
    return config_dir


@pytest.fixture(autouse=True)
def reset_fastdev_logger():
    """Undo ``create_logger`` so records propagate to caplog again."""
    yield
    logger = logging.getLogger("fastdev")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Project trees
# ---------------------------------------------------------------------------

def _write_json(path: Path, data: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    return path


def _read_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A downloaded template with a manifest and a README."""
    project = tmp_path / "my-app"
    project.mkdir()
    _write_json(
        project / "package.json",
        {
            "name": "tmpl",
            "version": "3.2.1",
            "description": "Template description",
            "repository": {"type": "git", "url": "https://github.com/org/tmpl"},
            "bugs": {"url": "https://github.com/org/tmpl/issues"},
            "homepage": "https://tmpl.dev",
            "scripts": {"dev": "next dev"},
        },
    )
    (project / "README.md").write_text("# Starter Template\n\nWelcome.\n", encoding="utf-8")
    return project


@pytest.fixture
def workspace_root(tmp_path: Path) -> Path:
    """A Turborepo workspace with a pnpm lockfile and a base tsconfig."""
    root = tmp_path / "workspace"
    (root / "apps").mkdir(parents=True)
    (root / "packages").mkdir()
    _write_json(root / "turbo.json", {"tasks": {}})
    (root / "pnpm-lock.yaml").write_text("lockfileVersion: '9.0'\n", encoding="utf-8")
    _write_json(root / "tsconfig.base.json", {"compilerOptions": {"strict": True}})
    return root


# ---------------------------------------------------------------------------
# Descriptors & contexts
# ---------------------------------------------------------------------------

@pytest.fixture
def base_template() -> Template:
    return Template(
        id="nextjs-starter",
        slug="nextjs-starter",
        name="Next.js Starter",
        description="Next.js with Tailwind",
        stack_id="nextjs",
        git_url="github:fastdotdev/nextjs-starter",
        transforms=[TemplateTransform(transformer="rename-package")],
        tags=["react"],
    )


@pytest.fixture
def template_config_data() -> dict[str, Any]:
    """A complete ``fast-dev.config.json`` payload."""
    return {
        "version": "1.0",
        "template": {
            "id": "nextjs-starter",
            "name": "Next.js Starter",
            "description": "From config",
            "stack": "nextjs",
            "tags": ["react", "tailwind"],
            "docsUrl": "https://docs.example.com",
        },
        "monorepo": {
            "enabled": True,
            "type": "app",
            "removeFiles": [".github", "pnpm-lock.yaml"],
            "workspaceDeps": ["@scope/ui"],
            "tsconfig": {"overrides": {"jsx": "preserve"}},
        },
        "prompts": [
            {"type": "text", "name": "description", "message": "Description?", "default": "A new app"},
            {
                "type": "multiselect",
                "name": "features",
                "message": "Features?",
                "default": ["auth"],
                "options": [
                    {"value": "auth", "label": "Auth"},
                    {"value": "analytics", "label": "Analytics"},
                ],
            },
        ],
        "transforms": [
            {"type": "builtin", "transformer": "rename-package"},
            {"type": "builtin", "transformer": "readme-personalize"},
        ],
        "features": {"analytics": ["src/analytics.ts"]},
        "postActions": {"skipGitInit": False},
    }


@pytest.fixture
def template_config(template_config_data: dict[str, Any]) -> TemplateConfig:
    return TemplateConfig.model_validate(template_config_data)


@pytest.fixture
def make_context(base_template: Template) -> Callable[..., TransformContext]:
    """Factory for ``TransformContext`` with sensible defaults."""

    def _make(project_path: Path, **overrides: Any) -> TransformContext:
        fields: dict[str, Any] = {
            "project_path": project_path,
            "project_name": "my-app",
            "answers": {},
            "template": base_template,
            "mode": InstallationMode.STANDALONE,
        }
        fields.update(overrides)
        return TransformContext(**fields)

    return _make


@pytest.fixture
def monorepo_context(workspace_root: Path) -> MonorepoContext:
    return MonorepoContext(
        root_dir=workspace_root,
        turbo_config_path=workspace_root / "turbo.json",
        package_manager=PackageManager.PNPM,
        base_tsconfig=workspace_root / "tsconfig.base.json",
    )


# ---------------------------------------------------------------------------
# Archives
# ---------------------------------------------------------------------------

def _make_tarball(files: dict[str, str], top: str = "repo-main") -> bytes:
    """Build a gzipped tarball whose members live under ``top/``."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        dir_info = tarfile.TarInfo(top)
        dir_info.type = tarfile.DIRTYPE
        dir_info.mode = 0o755
        tar.addfile(dir_info)
        for name, content in files.items():
            data = content.encode("utf-8")
            info = tarfile.TarInfo(f"{top}/{name}")
            info.size = len(data)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


# ---------------------------------------------------------------------------
# Helper fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def write_json() -> Callable[[Path, Any], Path]:
    """Write a JSON file, creating parent directories."""
    return _write_json


@pytest.fixture
def read_json() -> Callable[[Path], Any]:
    return _read_json


@pytest.fixture
def make_tarball() -> Callable[..., bytes]:
    """Build a GitHub-style ``.tar.gz`` from ``{relative path: content}``."""
    return _make_tarball
