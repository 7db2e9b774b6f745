"""Transformer interface.

A transformer is a named, side-effecting step applied to the downloaded
project tree. Each one declares what it does when its input is missing
(``on_missing``), so callers and tests can rely on the policy instead of
discovering it by reading the implementation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from ..models import TransformContext

TransformFunc = Callable[[TransformContext, Optional[dict[str, Any]]], Awaitable[None]]


class MissingPrecondition(str, Enum):
    """What a transformer does when the file or context it needs is absent."""
    SKIP = "skip"   # silent no-op
    FAIL = "fail"   # raises, aborting the pipeline


class Transformer(ABC):
    """Base class for transformation steps."""

    name: str = ""
    description: str = ""
    on_missing: MissingPrecondition = MissingPrecondition.SKIP

    @abstractmethod
    async def transform(
        self, ctx: TransformContext, options: Optional[dict[str, Any]] = None
    ) -> None:
        """Apply the step to ``ctx.project_path``.

        Transformers read the context; they never modify it.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class FunctionTransformer(Transformer):
    """Wraps a coroutine function so it can be registered as a transformer.

    Example::

        async def add_license(ctx, options=None):
            ...

        registry.register(FunctionTransformer("add-license", "Adds LICENSE", add_license))
    """

    def __init__(
        self,
        name: str,
        description: str,
        func: TransformFunc,
        on_missing: MissingPrecondition = MissingPrecondition.SKIP,
    ) -> None:
        if not name:
            raise ValueError("Transformer name must not be empty")
        self.name = name
        self.description = description
        self.on_missing = on_missing
        self._func = func

    async def transform(
        self, ctx: TransformContext, options: Optional[dict[str, Any]] = None
    ) -> None:
        await self._func(ctx, options)
