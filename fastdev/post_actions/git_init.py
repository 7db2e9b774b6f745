"""Initialise a fresh git repository in a scaffolded project.

Failures are reported through :class:`GitInitResult` rather than raised:
git setup is a follow-up step the user can redo by hand.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from ..config import CLI_NAME
from ..utils import remove_path, run_command

logger = logging.getLogger(__name__)

DEFAULT_COMMIT_MESSAGE = f"Initial commit from {CLI_NAME}"


class GitInitResult(BaseModel):
    success: bool
    error: Optional[str] = None


async def is_git_available() -> bool:
    try:
        returncode, _, _ = await run_command(["git", "--version"], timeout=30)
    except OSError:
        return False
    return returncode == 0


async def initialize_git(
    dir: str | Path,
    commit_message: str = DEFAULT_COMMIT_MESSAGE,
) -> GitInitResult:
    """Replace any template history with a new repository and one commit."""
    if not await is_git_available():
        return GitInitResult(success=False, error="Git is not installed or not in PATH")

    project = Path(dir)
    # The template's own history must not leak into the new project.
    await remove_path(project / ".git")

    steps = (
        ["git", "init"],
        ["git", "add", "-A"],
        ["git", "commit", "-m", commit_message],
    )
    for cmd in steps:
        try:
            returncode, stdout, stderr = await run_command(cmd, cwd=project, timeout=120)
        except OSError as exc:
            return GitInitResult(success=False, error=str(exc))
        if returncode != 0:
            logger.debug("%s failed: %s", " ".join(cmd), stderr or stdout)
            return GitInitResult(
                success=False,
                error=stderr or stdout or f"{' '.join(cmd)} exited with code {returncode}",
            )

    return GitInitResult(success=True)
