"""Input validators for interactive prompts.

Each validator returns ``None`` when the value is acceptable, or the message
to show the user otherwise.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Union

from ..config import EMAIL_PATTERN, PROJECT_NAME_PATTERN

MAX_PROJECT_NAME_LENGTH = 214

Validator = Callable[[str], Optional[str]]


def validate_project_name(value: Optional[str]) -> Optional[str]:
    if not value or not value.strip():
        return "Project name is required"
    trimmed = value.strip()
    if len(trimmed) > MAX_PROJECT_NAME_LENGTH:
        return f"Project name must be less than {MAX_PROJECT_NAME_LENGTH} characters"
    if not PROJECT_NAME_PATTERN.match(trimmed):
        return (
            "Use lowercase letters, numbers, and dashes only. "
            "Must start and end with alphanumeric."
        )
    return None


def validate_email(value: Optional[str]) -> Optional[str]:
    """Email is optional; only a non-empty value is checked."""
    if not value or not value.strip():
        return None
    if not EMAIL_PATTERN.match(value.strip()):
        return "Please enter a valid email address"
    return None


def validate_required(value: Optional[str]) -> Optional[str]:
    if not value or not value.strip():
        return "This field is required"
    return None


def create_validator(
    validate_fn: Optional[Callable[[Any], Union[bool, str]]],
) -> Optional[Validator]:
    """Adapt a template predicate (``True`` or an error string) to a validator."""
    if validate_fn is None:
        return None

    def validator(value: str) -> Optional[str]:
        result = validate_fn(value)
        if result is True:
            return None
        if isinstance(result, str):
            return result
        return "Invalid value"

    return validator
