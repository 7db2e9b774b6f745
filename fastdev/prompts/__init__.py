"""Interactive prompts and their validators."""

from .flows import (
    PostActionAnswers,
    ask_confirm,
    ask_multiselect,
    ask_select,
    ask_text,
    prompt_post_actions,
    prompt_project_name,
    prompt_template_selection,
    run_template_prompt,
    run_template_prompts,
)
from .validators import (
    create_validator,
    validate_email,
    validate_project_name,
    validate_required,
)

__all__ = [
    "PostActionAnswers",
    "ask_confirm",
    "ask_multiselect",
    "ask_select",
    "ask_text",
    "create_validator",
    "prompt_post_actions",
    "prompt_project_name",
    "prompt_template_selection",
    "run_template_prompt",
    "run_template_prompts",
    "validate_email",
    "validate_project_name",
    "validate_required",
]
