"""Monorepo (Turborepo workspace) detection and placement helpers."""

from .detect import (
    detect_monorepo,
    get_apps_dir,
    get_packages_dir,
    get_target_dir,
)

__all__ = [
    "detect_monorepo",
    "get_apps_dir",
    "get_packages_dir",
    "get_target_dir",
]
