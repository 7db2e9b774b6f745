"""Name -> transformer mapping.

The registry is an ordinary object owned by the caller and handed to the
engine; there is no process-wide transformer table.
"""

from __future__ import annotations

from typing import Iterable, Optional

from .base import Transformer


class TransformerRegistry:
    """Mutable mapping of transformer names to transformers."""

    def __init__(self, transformers: Iterable[Transformer] | None = None) -> None:
        self._transformers: dict[str, Transformer] = {}
        for transformer in transformers or []:
            self.register(transformer)

    def register(self, transformer: Transformer) -> None:
        """Add *transformer*; a later registration replaces one with the same name."""
        if not transformer.name:
            raise ValueError(f"{transformer!r} has no name")
        self._transformers[transformer.name] = transformer

    def get(self, name: str) -> Optional[Transformer]:
        return self._transformers.get(name)

    def list(self) -> list[Transformer]:
        """All transformers in registration order."""
        return list(self._transformers.values())

    def names(self) -> list[str]:
        return list(self._transformers)

    def __contains__(self, name: object) -> bool:
        return name in self._transformers

    def __len__(self) -> int:
        return len(self._transformers)


def create_default_registry() -> TransformerRegistry:
    """A fresh registry seeded with every built-in transformer."""
    from .builtin import builtin_transformers

    return TransformerRegistry(builtin_transformers())
