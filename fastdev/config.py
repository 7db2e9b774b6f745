"""create-fast-dev configuration.

Holds the CLI-wide constants and the persisted user preferences. Preferences
are a Pydantic v2 model so they are validated when loaded from disk and
serialised back to JSON without boiler-plate.
"""

from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError

from .errors import ConfigKeyError, ConfigValueError
from .models import PackageManager

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

CLI_NAME = "create-fast-dev"
CLI_VERSION = "0.0.1"

CONFIG_DIR_NAME = "fast-dev"
CONFIG_FILE_NAME = "config.json"
LOG_DIR_NAME = "logs"

DEFAULT_BRANCH = "main"
DEFAULT_PACKAGE_MANAGER = PackageManager.PNPM

EXIT_CODE: dict[str, int] = {
    "SUCCESS": 0,
    "ERROR": 1,
    "CANCELLED": 130,
}

PROJECT_NAME_PATTERN = re.compile(r"^[a-z0-9]([a-z0-9-]*[a-z0-9])?$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

STACKS: dict[str, str] = {
    "NEXTJS": "nextjs",
    "EXPO": "expo",
    "HONO": "hono",
    "CLI": "cli",
    "LIBRARY": "library",
    "MONOREPO": "monorepo",
}

_TRUTHY = {"true", "1", "yes"}


def get_config_dir() -> Path:
    """Root of the per-user config directory.

    ``FAST_DEV_CONFIG_DIR`` overrides the default ``~/.config/fast-dev``.
    """
    override = os.environ.get("FAST_DEV_CONFIG_DIR")
    if override:
        return Path(override)
    return Path.home() / ".config" / CONFIG_DIR_NAME


# ---------------------------------------------------------------------------
# User preferences
# ---------------------------------------------------------------------------


class UserConfig(BaseModel):
    """Persisted user preferences used to pre-fill answers and post actions."""

    author: Optional[str] = Field(default=None, description="Default author for new projects")
    email: Optional[str] = Field(default=None, description="Default author email")
    preferredPackageManager: Optional[PackageManager] = Field(default=DEFAULT_PACKAGE_MANAGER)
    defaultGitInit: Optional[bool] = Field(default=True)
    defaultInstallDeps: Optional[bool] = Field(default=True)


VALID_KEYS: list[str] = list(UserConfig.model_fields)
VALID_PACKAGE_MANAGERS: list[str] = [pm.value for pm in PackageManager]


class UserConfigStore:
    """JSON-file backed store for :class:`UserConfig`.

    Every operation reads the file fresh and writes it back immediately, so
    two CLI runs never hold stale copies for long. A missing or corrupted
    file reads as the defaults.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path) if path else get_config_dir() / CONFIG_FILE_NAME

    # -- Persistence -------------------------------------------------------

    def load(self) -> UserConfig:
        if not self.path.exists():
            return UserConfig()
        try:
            return UserConfig.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (ValidationError, OSError):
            return UserConfig()

    def save(self, config: UserConfig) -> Path:
        """Persist *config*; only explicitly set keys are written."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = config.model_dump(mode="json", exclude_unset=True)
        self.path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
        return self.path

    # -- Public API --------------------------------------------------------

    def get(self, key: str) -> Any:
        _check_key(key)
        value = getattr(self.load(), key)
        if isinstance(value, PackageManager):
            return value.value
        return value

    def set(self, key: str, value: Any) -> Any:
        """Set *key*, coercing CLI strings to the key's type.

        Returns the stored value.
        """
        _check_key(key)
        coerced = _coerce(key, value)
        current = self.load()
        data = current.model_dump(exclude_unset=True)
        data[key] = coerced
        self.save(UserConfig(**data))
        return coerced

    def all(self) -> dict[str, Any]:
        return self.load().model_dump(mode="json")

    def delete(self, key: str) -> None:
        _check_key(key)
        current = self.load()
        data = current.model_dump(exclude_unset=True)
        data.pop(key, None)
        self.save(UserConfig(**data))

    def reset(self) -> None:
        """Drop every stored value; subsequent reads return the defaults."""
        self.path.unlink(missing_ok=True)


def _check_key(key: str) -> None:
    if key not in VALID_KEYS:
        raise ConfigKeyError(key, VALID_KEYS)


def _coerce(key: str, value: Any) -> Any:
    if key in ("defaultGitInit", "defaultInstallDeps"):
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in _TRUTHY
    if key == "preferredPackageManager":
        raw = value.value if isinstance(value, PackageManager) else str(value)
        if raw not in VALID_PACKAGE_MANAGERS:
            raise ConfigValueError(
                f"Invalid package manager: {raw}. "
                f"Valid options: {', '.join(VALID_PACKAGE_MANAGERS)}"
            )
        return raw
    return str(value)
