"""Run the package manager's install command."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from ..models import PackageManager
from ..utils import run_command
from .detect_package_manager import detect_package_manager

logger = logging.getLogger(__name__)

INSTALL_TIMEOUT = 900


class InstallResult(BaseModel):
    package_manager: PackageManager
    success: bool
    error: Optional[str] = None


def get_install_command(package_manager: PackageManager) -> list[str]:
    return [package_manager.value, "install"]


async def install_dependencies(
    dir: str | Path,
    package_manager: Optional[PackageManager] = None,
    capture: bool = False,
) -> InstallResult:
    """Install dependencies in *dir*.

    Args:
        dir: Directory holding the ``package.json`` (the workspace root when
            installing into a monorepo).
        package_manager: Overrides detection when given.
        capture: Capture output instead of streaming it to the terminal.

    Returns:
        ``InstallResult``; a failed install is reported, never raised.
    """
    manager = package_manager or await detect_package_manager(dir)
    cmd = get_install_command(manager)
    logger.debug("Running %s in %s", " ".join(cmd), dir)

    try:
        returncode, _, stderr = await run_command(
            cmd, cwd=dir, timeout=INSTALL_TIMEOUT, capture=capture
        )
    except OSError as exc:
        return InstallResult(package_manager=manager, success=False, error=str(exc))

    if returncode != 0:
        return InstallResult(
            package_manager=manager,
            success=False,
            error=stderr or f"{' '.join(cmd)} exited with code {returncode}",
        )
    return InstallResult(package_manager=manager, success=True)
