"""Built-in transformers."""

from .env_setup import EnvSetupTransformer
from .monorepo_adapt import MonorepoAdaptTransformer
from .readme_personalize import ReadmePersonalizeTransformer
from .rename_package import RenamePackageTransformer
from .toggle_feature import ToggleFeatureTransformer
from .tsconfig_adapt import TsconfigAdaptTransformer
from ..base import Transformer


def builtin_transformers() -> list[Transformer]:
    """Fresh instances of every built-in, in registration order."""
    return [
        RenamePackageTransformer(),
        EnvSetupTransformer(),
        ReadmePersonalizeTransformer(),
        ToggleFeatureTransformer(),
        MonorepoAdaptTransformer(),
        TsconfigAdaptTransformer(),
    ]


__all__ = [
    "EnvSetupTransformer",
    "MonorepoAdaptTransformer",
    "ReadmePersonalizeTransformer",
    "RenamePackageTransformer",
    "ToggleFeatureTransformer",
    "TsconfigAdaptTransformer",
    "builtin_transformers",
]
