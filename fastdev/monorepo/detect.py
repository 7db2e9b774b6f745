"""Turborepo workspace detection.

Walks upward from a starting directory looking for ``turbo.json`` and, once
found, derives the workspace facts the monorepo transformers need: package
manager, workspace config file and shared base ``tsconfig``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from ..config import DEFAULT_PACKAGE_MANAGER
from ..models import MonorepoContext, PackageManager
from ..utils import load_json, path_exists

MARKER_FILE = "turbo.json"
BASE_TSCONFIG = "tsconfig.base.json"
PNPM_WORKSPACE_FILE = "pnpm-workspace.yaml"

# Probe order matters: the first lockfile present wins.
_LOCKFILES: list[tuple[str, PackageManager]] = [
    ("pnpm-lock.yaml", PackageManager.PNPM),
    ("yarn.lock", PackageManager.YARN),
    ("bun.lockb", PackageManager.BUN),
    ("package-lock.json", PackageManager.NPM),
]


async def detect_monorepo(start_dir: str | Path) -> Optional[MonorepoContext]:
    """Find the enclosing Turborepo workspace, if any.

    Checks *start_dir* and then each parent up to the filesystem root. The
    starting directory does not need to exist yet (e.g. the project that is
    about to be created).

    Returns:
        The workspace context, or ``None`` when no ``turbo.json`` is found.
        Never raises for filesystem problems; unreadable directories are
        treated as not containing the marker.
    """
    current = Path(start_dir).expanduser().resolve()

    while True:
        if await path_exists(current / MARKER_FILE):
            return await _build_context(current)
        parent = current.parent
        if parent == current:
            return None
        current = parent


async def _build_context(root_dir: Path) -> MonorepoContext:
    package_manager = await _detect_package_manager(root_dir)

    base_tsconfig: Optional[Path] = None
    if await path_exists(root_dir / BASE_TSCONFIG):
        base_tsconfig = root_dir / BASE_TSCONFIG

    return MonorepoContext(
        is_monorepo=True,
        root_dir=root_dir,
        turbo_config_path=root_dir / MARKER_FILE,
        workspace_config_path=await _find_workspace_config(root_dir, package_manager),
        package_manager=package_manager,
        base_tsconfig=base_tsconfig,
    )


async def _detect_package_manager(root_dir: Path) -> PackageManager:
    """Lockfile first, then the ``packageManager`` field, then the default."""
    for filename, manager in _LOCKFILES:
        if await path_exists(root_dir / filename):
            return manager

    try:
        pkg = await load_json(root_dir / "package.json")
    except (OSError, ValueError):
        pkg = None

    if isinstance(pkg, dict) and isinstance(pkg.get("packageManager"), str):
        name = pkg["packageManager"].split("@")[0]
        try:
            return PackageManager(name)
        except ValueError:
            pass

    return DEFAULT_PACKAGE_MANAGER


async def _find_workspace_config(
    root_dir: Path, package_manager: PackageManager
) -> Optional[Path]:
    # yarn/npm/bun keep workspaces inside package.json; no separate file.
    if package_manager is PackageManager.PNPM:
        candidate = root_dir / PNPM_WORKSPACE_FILE
        if await path_exists(candidate):
            return candidate
    return None


# ---------------------------------------------------------------------------
# Placement helpers
# ---------------------------------------------------------------------------


def get_apps_dir(root_dir: str | Path) -> Path:
    return Path(root_dir) / "apps"


def get_packages_dir(root_dir: str | Path) -> Path:
    return Path(root_dir) / "packages"


def get_target_dir(root_dir: str | Path, target_type: Literal["app", "package"]) -> Path:
    """Where a new workspace member of *target_type* is placed."""
    if target_type == "app":
        return get_apps_dir(root_dir)
    return get_packages_dir(root_dir)
