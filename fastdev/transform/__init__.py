"""Transformation pipeline: transformer interface, registry and engine.

Quick usage::

    from fastdev.transform import create_default_registry, run_transformations

    registry = create_default_registry()
    await run_transformations(ctx, registry, logger)
"""

from .base import FunctionTransformer, MissingPrecondition, Transformer
from .engine import (
    MONOREPO_TRANSFORMERS,
    run_transformations,
    with_monorepo_transforms,
)
from .registry import TransformerRegistry, create_default_registry

__all__ = [
    "FunctionTransformer",
    "MONOREPO_TRANSFORMERS",
    "MissingPrecondition",
    "Transformer",
    "TransformerRegistry",
    "create_default_registry",
    "run_transformations",
    "with_monorepo_transforms",
]
