"""Non-fatal follow-up steps run after a project is scaffolded."""

from .detect_package_manager import (
    detect_from_environment,
    detect_from_lockfile,
    detect_from_package_json,
    detect_package_manager,
)
from .git_init import GitInitResult, initialize_git
from .install_deps import InstallResult, install_dependencies

__all__ = [
    "GitInitResult",
    "InstallResult",
    "detect_from_environment",
    "detect_from_lockfile",
    "detect_from_package_json",
    "detect_package_manager",
    "initialize_git",
    "install_dependencies",
]
