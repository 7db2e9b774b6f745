"""Exception hierarchy for create-fast-dev.

Configuration-load failures are deliberately absent: a missing or unreadable
template config is treated as "no config" and never raised.
"""

from __future__ import annotations


class FastDevError(Exception):
    """Base class for every error raised by create-fast-dev."""


class TemplateFetchError(FastDevError):
    """Raised when a template cannot be downloaded into the target directory."""

    def __init__(self, message: str, source: str = "") -> None:
        self.source = source
        super().__init__(message)


class TransformError(FastDevError):
    """Raised when a transformer fails; the remaining pipeline is aborted.

    Mutations applied by earlier transformers are kept, so the project tree
    may be partially transformed when this is raised.
    """

    def __init__(self, transformer: str, cause: BaseException) -> None:
        self.transformer = transformer
        self.cause = cause
        super().__init__(f"Transformer '{transformer}' failed: {cause}")


class ScaffoldError(FastDevError):
    """Raised when the create flow cannot proceed (bad name, existing dir, ...)."""

    def __init__(self, message: str, hint: str = "") -> None:
        self.hint = hint
        super().__init__(message)


class PromptCancelled(FastDevError):
    """Raised when the user cancels an interactive prompt.

    This is a termination signal, not a failure.
    """

    def __init__(self, message: str = "Operation cancelled") -> None:
        super().__init__(message)


class ConfigKeyError(FastDevError, KeyError):
    """Raised for an unknown user configuration key."""

    def __init__(self, key: str, valid_keys: list[str]) -> None:
        self.key = key
        self.valid_keys = valid_keys
        super().__init__(f"Unknown config key: {key}")

    def __str__(self) -> str:
        return self.args[0]


class ConfigValueError(FastDevError, ValueError):
    """Raised when a user configuration value is not acceptable for its key."""
