"""Tests for the built-in transformers.

Covers:
- rename-package manifest rewrite and its fatal missing-manifest policy
- env-setup substitution of ${NAME} and $NAME tokens
- readme-personalize placeholders and template-title heading replacement
- toggle-feature pruning, map precedence and idempotency
- monorepo-adapt workspace naming and workspace:* dependencies
- tsconfig-adapt extends/override handling
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from fastdev.models import (
    InstallationMode,
    MonorepoConfig,
    TemplateConfig,
    TemplateMeta,
    TemplateTransform,
    TsconfigSettings,
)
from fastdev.transform import MissingPrecondition, create_default_registry, run_transformations
from fastdev.transform.builtin import (
    EnvSetupTransformer,
    MonorepoAdaptTransformer,
    ReadmePersonalizeTransformer,
    RenamePackageTransformer,
    ToggleFeatureTransformer,
    TsconfigAdaptTransformer,
    builtin_transformers,
)
from fastdev.transform.builtin.env_setup import substitute

pytestmark = pytest.mark.unit


def _config(**monorepo) -> TemplateConfig:
    return TemplateConfig(
        template=TemplateMeta(id="t", name="T", stack="nextjs"),
        monorepo=MonorepoConfig(enabled=True, **monorepo),
    )


def _tree(root: Path) -> set[str]:
    return {p.relative_to(root).as_posix() for p in root.rglob("*")}


# ---------------------------------------------------------------------------
# Missing-precondition policies
# ---------------------------------------------------------------------------


class TestPolicies:
    def test_only_rename_package_is_fatal(self):
        policies = {t.name: t.on_missing for t in builtin_transformers()}
        assert policies == {
            "rename-package": MissingPrecondition.FAIL,
            "env-setup": MissingPrecondition.SKIP,
            "readme-personalize": MissingPrecondition.SKIP,
            "toggle-feature": MissingPrecondition.SKIP,
            "monorepo-adapt": MissingPrecondition.SKIP,
            "tsconfig-adapt": MissingPrecondition.SKIP,
        }


# ---------------------------------------------------------------------------
# rename-package
# ---------------------------------------------------------------------------


class TestRenamePackage:
    @pytest.mark.asyncio
    async def test_rewrites_identity(self, project_dir, make_context, read_json):
        ctx = make_context(project_dir)
        await RenamePackageTransformer().transform(ctx)

        pkg = read_json(project_dir / "package.json")
        assert pkg["name"] == "my-app"
        assert pkg["version"] == "0.0.1"
        assert pkg["description"] == "Template description"
        assert pkg["scripts"] == {"dev": "next dev"}
        for field in ("repository", "bugs", "homepage"):
            assert field not in pkg

    @pytest.mark.asyncio
    async def test_applies_description_and_author(self, project_dir, make_context, read_json):
        ctx = make_context(project_dir, answers={"description": "My app", "author": "Jane"})
        await RenamePackageTransformer().transform(ctx)

        pkg = read_json(project_dir / "package.json")
        assert pkg["description"] == "My app"
        assert pkg["author"] == "Jane"

    @pytest.mark.asyncio
    async def test_preserves_key_order(self, project_dir, make_context):
        await RenamePackageTransformer().transform(make_context(project_dir))
        text = (project_dir / "package.json").read_text(encoding="utf-8")
        assert text.index('"name"') < text.index('"version"') < text.index('"scripts"')
        assert text.endswith("}\n")

    @pytest.mark.asyncio
    async def test_missing_manifest_raises(self, tmp_path, make_context):
        with pytest.raises(FileNotFoundError):
            await RenamePackageTransformer().transform(make_context(tmp_path))


# ---------------------------------------------------------------------------
# env-setup
# ---------------------------------------------------------------------------


class TestEnvSetup:
    def test_substitute_both_forms(self):
        content = "A=${PROJECT_NAME}\nB=$PROJECT_NAME\nC=$PROJECT_NAME_URL\n"
        result = substitute(content, {"PROJECT_NAME": "cool"})
        assert result == "A=cool\nB=cool\nC=$PROJECT_NAME_URL\n"

    def test_substitute_value_with_backslash(self):
        assert substitute("P=$DIR", {"DIR": r"C:\temp"}) == r"P=C:\temp"

    @pytest.mark.asyncio
    async def test_creates_env_from_example(self, tmp_path, make_context):
        (tmp_path / ".env.example").write_text(
            "APP_NAME=$APP_NAME\nDB=${DB_URL}\nSECRET=\n", encoding="utf-8"
        )
        ctx = make_context(tmp_path)
        await EnvSetupTransformer().transform(ctx, {"substitutions": {"DB_URL": "postgres://x"}})

        env = (tmp_path / ".env").read_text(encoding="utf-8")
        assert env == "APP_NAME=my-app\nDB=postgres://x\nSECRET=\n"
        assert (tmp_path / ".env.example").exists()

    @pytest.mark.asyncio
    async def test_project_name_wins_over_options(self, tmp_path, make_context):
        (tmp_path / ".env.example").write_text("N=${PROJECT_NAME}\n", encoding="utf-8")
        ctx = make_context(tmp_path)
        await EnvSetupTransformer().transform(ctx, {"substitutions": {"PROJECT_NAME": "other"}})
        assert (tmp_path / ".env").read_text(encoding="utf-8") == "N=my-app\n"

    @pytest.mark.asyncio
    async def test_missing_example_is_noop(self, tmp_path, make_context):
        await EnvSetupTransformer().transform(make_context(tmp_path))
        assert not (tmp_path / ".env").exists()


# ---------------------------------------------------------------------------
# readme-personalize
# ---------------------------------------------------------------------------


class TestReadmePersonalize:
    @pytest.mark.asyncio
    async def test_replaces_template_heading_and_placeholders(self, tmp_path, make_context):
        (tmp_path / "README.md").write_text(
            "# Starter Template\n\n{{PROJECT_NAME}}: {{DESCRIPTION}}\n## {{PROJECT_TITLE}}\n",
            encoding="utf-8",
        )
        ctx = make_context(tmp_path, project_name="cool-app", answers={"description": "Neat"})
        await ReadmePersonalizeTransformer().transform(ctx)

        readme = (tmp_path / "README.md").read_text(encoding="utf-8")
        assert readme == "# Cool App\n\ncool-app: Neat\n## Cool App\n"

    @pytest.mark.asyncio
    async def test_keeps_custom_heading(self, tmp_path, make_context):
        (tmp_path / "README.md").write_text("# Acme Portal\n{{DESCRIPTION}}\n", encoding="utf-8")
        await ReadmePersonalizeTransformer().transform(make_context(tmp_path))

        assert (tmp_path / "README.md").read_text(encoding="utf-8") == "# Acme Portal\n\n"

    @pytest.mark.asyncio
    async def test_heading_match_is_case_insensitive(self, tmp_path, make_context):
        (tmp_path / "README.md").write_text("intro\n# My BOILERPLATE\n", encoding="utf-8")
        await ReadmePersonalizeTransformer().transform(make_context(tmp_path))
        assert (tmp_path / "README.md").read_text(encoding="utf-8") == "intro\n# My App\n"

    @pytest.mark.asyncio
    async def test_missing_readme_is_noop(self, tmp_path, make_context):
        await ReadmePersonalizeTransformer().transform(make_context(tmp_path))
        assert not (tmp_path / "README.md").exists()


# ---------------------------------------------------------------------------
# toggle-feature
# ---------------------------------------------------------------------------


@pytest.fixture
def feature_tree(tmp_path: Path, write_json) -> Path:
    root = tmp_path / "features-app"
    for rel in ("src/auth/login.ts", "src/analytics.ts", "src/payments/stripe.ts", "src/index.ts"):
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("// code\n", encoding="utf-8")
    write_json(
        root / ".fast-dev" / "features.json",
        {"auth": ["src/auth"], "analytics": ["src/analytics.ts", "src/missing.ts"]},
    )
    return root


class TestToggleFeature:
    @pytest.mark.asyncio
    async def test_removes_unselected_feature_paths(self, feature_tree, make_context):
        ctx = make_context(feature_tree, answers={"features": ["auth"]})
        await ToggleFeatureTransformer().transform(ctx)

        assert (feature_tree / "src/auth/login.ts").exists()
        assert not (feature_tree / "src/analytics.ts").exists()
        assert not (feature_tree / ".fast-dev").exists()
        assert (feature_tree / "src/index.ts").exists()

    @pytest.mark.asyncio
    async def test_options_map_and_custom_key(self, feature_tree, make_context):
        ctx = make_context(feature_tree, answers={"extras": ["analytics", "auth"]})
        await ToggleFeatureTransformer().transform(
            ctx, {"featureKey": "extras", "featureMap": {"payments": ["src/payments"]}}
        )

        assert not (feature_tree / "src/payments").exists()
        assert (feature_tree / "src/analytics.ts").exists()
        assert (feature_tree / "src/auth").exists()

    @pytest.mark.asyncio
    async def test_file_map_overrides_options(self, feature_tree, make_context):
        ctx = make_context(feature_tree, answers={"features": []})
        await ToggleFeatureTransformer().transform(
            ctx, {"featureMap": {"auth": ["src/index.ts"]}}
        )

        # features.json maps "auth" to src/auth, replacing the option's entry.
        assert (feature_tree / "src/index.ts").exists()
        assert not (feature_tree / "src/auth").exists()

    @pytest.mark.asyncio
    async def test_template_config_features_are_used(self, tmp_path, make_context):
        (tmp_path / "docs").mkdir()
        config = TemplateConfig(
            template=TemplateMeta(id="t", name="T", stack="cli"),
            features={"docs": ["docs"]},
        )
        ctx = make_context(tmp_path, template_config=config)
        await ToggleFeatureTransformer().transform(ctx)
        assert not (tmp_path / "docs").exists()

    @pytest.mark.asyncio
    async def test_single_string_answer(self, feature_tree, make_context):
        ctx = make_context(feature_tree, answers={"features": "analytics"})
        await ToggleFeatureTransformer().transform(ctx)
        assert (feature_tree / "src/analytics.ts").exists()
        assert not (feature_tree / "src/auth").exists()

    @pytest.mark.asyncio
    async def test_idempotent(self, feature_tree, make_context):
        ctx = make_context(feature_tree, answers={"features": ["analytics"]})
        transformer = ToggleFeatureTransformer()

        await transformer.transform(ctx, {"featureMap": {"payments": ["src/payments"]}})
        once = _tree(feature_tree)
        await transformer.transform(ctx, {"featureMap": {"payments": ["src/payments"]}})
        assert _tree(feature_tree) == once

    @pytest.mark.asyncio
    async def test_rejects_paths_outside_project(self, tmp_path, make_context):
        project = tmp_path / "proj"
        project.mkdir()
        (tmp_path / "keep.txt").write_text("x", encoding="utf-8")
        ctx = make_context(project)

        with pytest.raises(ValueError):
            await ToggleFeatureTransformer().transform(ctx, {"featureMap": {"x": ["../keep.txt"]}})
        assert (tmp_path / "keep.txt").exists()

    @pytest.mark.asyncio
    async def test_invalid_feature_file_is_ignored(self, tmp_path, make_context):
        (tmp_path / ".fast-dev").mkdir()
        (tmp_path / ".fast-dev" / "features.json").write_text("{not json", encoding="utf-8")
        await ToggleFeatureTransformer().transform(make_context(tmp_path))
        assert not (tmp_path / ".fast-dev").exists()

    @pytest.mark.asyncio
    async def test_undecodable_feature_file_is_ignored(self, tmp_path, make_context):
        (tmp_path / ".fast-dev").mkdir()
        (tmp_path / ".fast-dev" / "features.json").write_bytes(b'{"docs": ["\xff"]}')
        await ToggleFeatureTransformer().transform(make_context(tmp_path))
        assert not (tmp_path / ".fast-dev").exists()

    @pytest.mark.asyncio
    async def test_symlinked_feature_path_removes_link_only(self, tmp_path, make_context):
        project = tmp_path / "proj"
        (project / "real").mkdir(parents=True)
        (project / "real" / "keep.txt").write_text("x", encoding="utf-8")
        (project / "link").symlink_to(project / "real", target_is_directory=True)
        outside = tmp_path / "shared"
        outside.mkdir()
        (project / "shared-link").symlink_to(outside, target_is_directory=True)

        await ToggleFeatureTransformer().transform(
            make_context(project), {"featureMap": {"docs": ["link", "shared-link"]}}
        )

        assert not (project / "link").is_symlink()
        assert not (project / "shared-link").is_symlink()
        assert (project / "real" / "keep.txt").exists()
        assert outside.exists()


# ---------------------------------------------------------------------------
# monorepo-adapt
# ---------------------------------------------------------------------------


class TestMonorepoAdapt:
    @pytest.mark.asyncio
    async def test_workspace_name_and_deps(self, tmp_path, make_context, monorepo_context, write_json, read_json):
        write_json(
            tmp_path / "package.json",
            {
                "name": "tmpl",
                "dependencies": {"@scope/ui": "^1.0.0", "react": "^19.0.0"},
                "devDependencies": {"@scope/ui": "^1.0.0"},
            },
        )
        ctx = make_context(
            tmp_path,
            mode=InstallationMode.MONOREPO,
            monorepo_context=monorepo_context,
            template_config=_config(workspace_deps=["@scope/ui", "@scope/absent"]),
        )
        await MonorepoAdaptTransformer().transform(ctx)

        pkg = read_json(tmp_path / "package.json")
        assert pkg["name"] == "@repo/my-app"
        assert pkg["dependencies"] == {"@scope/ui": "workspace:*", "react": "^19.0.0"}
        assert pkg["devDependencies"] == {"@scope/ui": "workspace:*"}

    @pytest.mark.asyncio
    async def test_custom_prefix_and_remove_files(self, tmp_path, make_context, monorepo_context, write_json, read_json):
        write_json(tmp_path / "package.json", {"name": "tmpl"})
        (tmp_path / ".github" / "workflows").mkdir(parents=True)
        (tmp_path / "pnpm-lock.yaml").write_text("", encoding="utf-8")
        ctx = make_context(
            tmp_path,
            mode=InstallationMode.MONOREPO,
            monorepo_context=monorepo_context,
            template_config=_config(remove_files=[".github", "pnpm-lock.yaml", "nope.txt"]),
        )
        await MonorepoAdaptTransformer().transform(ctx, {"workspacePrefix": "@acme"})

        assert read_json(tmp_path / "package.json")["name"] == "@acme/my-app"
        assert not (tmp_path / ".github").exists()
        assert not (tmp_path / "pnpm-lock.yaml").exists()

    @pytest.mark.asyncio
    async def test_noop_in_standalone_mode(self, tmp_path, make_context, monorepo_context, write_json, read_json):
        write_json(tmp_path / "package.json", {"name": "tmpl"})
        ctx = make_context(tmp_path, monorepo_context=monorepo_context, template_config=_config())
        await MonorepoAdaptTransformer().transform(ctx)
        assert read_json(tmp_path / "package.json")["name"] == "tmpl"

    @pytest.mark.asyncio
    async def test_noop_without_monorepo_block(self, tmp_path, make_context, monorepo_context, write_json, read_json):
        write_json(tmp_path / "package.json", {"name": "tmpl"})
        ctx = make_context(tmp_path, mode=InstallationMode.MONOREPO, monorepo_context=monorepo_context)
        await MonorepoAdaptTransformer().transform(ctx)
        assert read_json(tmp_path / "package.json")["name"] == "tmpl"

    @pytest.mark.asyncio
    async def test_missing_manifest_is_noop(self, tmp_path, make_context, monorepo_context):
        ctx = make_context(
            tmp_path,
            mode=InstallationMode.MONOREPO,
            monorepo_context=monorepo_context,
            template_config=_config(),
        )
        await MonorepoAdaptTransformer().transform(ctx)
        assert not (tmp_path / "package.json").exists()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "content",
        [b'["not", "an", "object"]', b'{"name": "\xff"}', b"{broken"],
        ids=["array", "undecodable", "malformed"],
    )
    async def test_unusable_manifest_is_left_alone(self, tmp_path, make_context, monorepo_context, content):
        (tmp_path / "package.json").write_bytes(content)
        ctx = make_context(
            tmp_path,
            mode=InstallationMode.MONOREPO,
            monorepo_context=monorepo_context,
            template_config=_config(workspace_deps=["@scope/ui"]),
        )
        await MonorepoAdaptTransformer().transform(ctx)
        assert (tmp_path / "package.json").read_bytes() == content

    @pytest.mark.asyncio
    async def test_symlinked_remove_file_keeps_target(self, tmp_path, make_context, monorepo_context, write_json):
        project = tmp_path / "proj"
        write_json(project / "package.json", {"name": "tmpl"})
        (project / "config").mkdir()
        (project / "config" / "ci.yml").write_text("x", encoding="utf-8")
        (project / ".github").symlink_to(project / "config", target_is_directory=True)
        ctx = make_context(
            project,
            mode=InstallationMode.MONOREPO,
            monorepo_context=monorepo_context,
            template_config=_config(remove_files=[".github"]),
        )
        await MonorepoAdaptTransformer().transform(ctx)

        assert not (project / ".github").is_symlink()
        assert (project / "config" / "ci.yml").exists()


# ---------------------------------------------------------------------------
# tsconfig-adapt
# ---------------------------------------------------------------------------


class TestTsconfigAdapt:
    @pytest.mark.asyncio
    async def test_extends_base_config(self, workspace_root, make_context, monorepo_context, write_json, read_json):
        project = workspace_root / "apps" / "my-app"
        write_json(project / "tsconfig.json", {"compilerOptions": {"strict": False}})
        ctx = make_context(
            project,
            mode=InstallationMode.MONOREPO,
            monorepo_context=monorepo_context,
            template_config=_config(),
        )
        await TsconfigAdaptTransformer().transform(ctx)

        assert read_json(project / "tsconfig.json") == {
            "compilerOptions": {"strict": False},
            "extends": "../../tsconfig.base.json",
        }

    @pytest.mark.asyncio
    async def test_explicit_extends_and_overrides(self, workspace_root, make_context, monorepo_context, write_json, read_json):
        project = workspace_root / "packages" / "lib"
        write_json(
            project / "tsconfig.json",
            {"extends": "./old.json", "compilerOptions": {"target": "es2017", "strict": True}, "include": ["src"]},
        )
        ctx = make_context(
            project,
            mode=InstallationMode.MONOREPO,
            monorepo_context=monorepo_context,
            template_config=_config(
                tsconfig=TsconfigSettings(extends="@repo/tsconfig/lib.json", overrides={"target": "es2022", "jsx": "react-jsx"})
            ),
        )
        await TsconfigAdaptTransformer().transform(ctx)

        tsconfig = read_json(project / "tsconfig.json")
        assert tsconfig["extends"] == "@repo/tsconfig/lib.json"
        assert tsconfig["compilerOptions"] == {"target": "es2022", "strict": True, "jsx": "react-jsx"}
        assert tsconfig["include"] == ["src"]

    @pytest.mark.asyncio
    async def test_preserves_keys_outside_overrides(self, workspace_root, make_context, monorepo_context, write_json, read_json):
        project = workspace_root / "apps" / "web"
        existing = {"a": 1, "b": 2, "c": 3}
        overrides = {"b": 20, "d": 40}
        write_json(project / "tsconfig.json", {"compilerOptions": existing})
        ctx = make_context(
            project,
            mode=InstallationMode.MONOREPO,
            monorepo_context=monorepo_context,
            template_config=_config(tsconfig=TsconfigSettings(overrides=overrides)),
        )
        await TsconfigAdaptTransformer().transform(ctx)

        options = read_json(project / "tsconfig.json")["compilerOptions"]
        for key in existing.keys() - overrides.keys():
            assert options[key] == existing[key]
        for key, value in overrides.items():
            assert options[key] == value

    @pytest.mark.asyncio
    async def test_relative_path_from_outside_workspace(self, project_dir, make_context, monorepo_context, write_json, read_json):
        write_json(project_dir / "tsconfig.json", {})
        ctx = make_context(
            project_dir,
            mode=InstallationMode.MONOREPO,
            monorepo_context=monorepo_context,
            template_config=_config(),
        )
        await TsconfigAdaptTransformer().transform(ctx)

        expected = os.path.relpath(monorepo_context.base_tsconfig, project_dir).replace(os.sep, "/")
        assert read_json(project_dir / "tsconfig.json")["extends"] == expected

    @pytest.mark.asyncio
    async def test_invalid_json_is_left_alone(self, tmp_path, make_context, monorepo_context):
        (tmp_path / "tsconfig.json").write_text("{ // comment\n}", encoding="utf-8")
        ctx = make_context(
            tmp_path,
            mode=InstallationMode.MONOREPO,
            monorepo_context=monorepo_context,
            template_config=_config(),
        )
        await TsconfigAdaptTransformer().transform(ctx)
        assert (tmp_path / "tsconfig.json").read_text(encoding="utf-8") == "{ // comment\n}"

    @pytest.mark.asyncio
    async def test_undecodable_file_is_left_alone(self, tmp_path, make_context, monorepo_context, base_template):
        (tmp_path / "tsconfig.json").write_bytes(b'{"a": "\xff"}')
        template = base_template.model_copy(
            update={"transforms": [TemplateTransform(transformer="tsconfig-adapt")]}
        )
        ctx = make_context(
            tmp_path,
            template=template,
            mode=InstallationMode.MONOREPO,
            monorepo_context=monorepo_context,
            template_config=_config(),
        )

        applied = await run_transformations(ctx, create_default_registry())

        assert applied == ["tsconfig-adapt"]
        assert (tmp_path / "tsconfig.json").read_bytes() == b'{"a": "\xff"}'

    @pytest.mark.asyncio
    async def test_noop_without_settings_or_base(self, tmp_path, make_context, write_json, read_json):
        from fastdev.models import MonorepoContext

        write_json(tmp_path / "tsconfig.json", {"compilerOptions": {}})
        ctx = make_context(
            tmp_path,
            mode=InstallationMode.MONOREPO,
            monorepo_context=MonorepoContext(root_dir=tmp_path.parent),
            template_config=_config(),
        )
        await TsconfigAdaptTransformer().transform(ctx)
        assert read_json(tmp_path / "tsconfig.json") == {"compilerOptions": {}}

    @pytest.mark.asyncio
    async def test_noop_in_standalone_mode(self, tmp_path, make_context, monorepo_context, write_json, read_json):
        write_json(tmp_path / "tsconfig.json", {})
        ctx = make_context(tmp_path, monorepo_context=monorepo_context, template_config=_config())
        await TsconfigAdaptTransformer().transform(ctx)
        assert read_json(tmp_path / "tsconfig.json") == {}
