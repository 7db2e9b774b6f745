"""Pick the package manager used to install a new project's dependencies.

Priority:
    1. Lockfile in the target directory.
    2. ``packageManager`` field in its ``package.json``.
    3. ``npm_config_user_agent`` (how the CLI itself was launched).
    4. The default, pnpm.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Optional

from ..config import DEFAULT_PACKAGE_MANAGER
from ..models import PackageManager
from ..utils import load_json, path_exists

LOCKFILES: list[tuple[str, PackageManager]] = [
    ("pnpm-lock.yaml", PackageManager.PNPM),
    ("yarn.lock", PackageManager.YARN),
    ("package-lock.json", PackageManager.NPM),
    ("bun.lockb", PackageManager.BUN),
]

_PACKAGE_MANAGER_FIELD = re.compile(r"^(npm|yarn|pnpm|bun)@")

# "npm" is a substring of "pnpm", so it is checked last.
_USER_AGENT_ORDER = (PackageManager.PNPM, PackageManager.YARN, PackageManager.BUN, PackageManager.NPM)


async def detect_from_lockfile(dir: str | Path) -> Optional[PackageManager]:
    for filename, manager in LOCKFILES:
        if await path_exists(Path(dir) / filename):
            return manager
    return None


async def detect_from_package_json(dir: str | Path) -> Optional[PackageManager]:
    try:
        pkg = await load_json(Path(dir) / "package.json")
    except (OSError, ValueError):
        return None
    if not isinstance(pkg, dict) or not isinstance(pkg.get("packageManager"), str):
        return None
    match = _PACKAGE_MANAGER_FIELD.match(pkg["packageManager"])
    return PackageManager(match.group(1)) if match else None


def detect_from_environment() -> Optional[PackageManager]:
    user_agent = os.environ.get("npm_config_user_agent")
    if not user_agent:
        return None
    for manager in _USER_AGENT_ORDER:
        if manager.value in user_agent:
            return manager
    return None


async def detect_package_manager(dir: str | Path | None = None) -> PackageManager:
    if dir is not None:
        found = await detect_from_lockfile(dir) or await detect_from_package_json(dir)
        if found is not None:
            return found
    return detect_from_environment() or DEFAULT_PACKAGE_MANAGER
