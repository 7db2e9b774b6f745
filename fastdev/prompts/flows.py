"""Interactive prompt flows rendered with ``rich.prompt``.

Ctrl-C or end-of-input at any question raises :class:`PromptCancelled`, which
the CLI turns into a clean, non-error exit.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, TypeVar

from pydantic import BaseModel
from rich.prompt import Confirm, Prompt

from ..config import UserConfigStore
from ..errors import PromptCancelled, ScaffoldError
from ..models import PromptOption, PromptType, Template, TemplatePrompt
from ..templates.stacks import stacks
from ..utils import console, print_error, print_warning
from .validators import Validator, create_validator, validate_project_name

T = TypeVar("T")


class PostActionAnswers(BaseModel):
    install_deps: bool
    init_git: bool


def _ask(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    try:
        return func(*args, console=console, **kwargs)
    except (KeyboardInterrupt, EOFError) as exc:
        raise PromptCancelled() from exc


# ---------------------------------------------------------------------------
# Primitive questions
# ---------------------------------------------------------------------------


def ask_text(
    message: str,
    default: Optional[str] = None,
    validator: Optional[Validator] = None,
) -> str:
    """Ask for free text, repeating until *validator* accepts the answer."""
    while True:
        if default is None:
            value = _ask(Prompt.ask, message)
        else:
            value = _ask(Prompt.ask, message, default=default)
        value = (value or "").strip()
        error = validator(value) if validator else None
        if error is None:
            return value
        print_error(error)


def ask_confirm(message: str, default: bool = False) -> bool:
    return bool(_ask(Confirm.ask, message, default=default))


def _print_options(options: list[PromptOption]) -> None:
    for index, option in enumerate(options, start=1):
        hint = f" [dim]({option.hint})[/dim]" if option.hint else ""
        console.print(f"  [cyan]{index}[/cyan]. {option.label}{hint}")


def ask_select(
    message: str,
    options: list[PromptOption],
    default: Optional[str] = None,
) -> str:
    """Show numbered *options* and return the chosen option's value."""
    _print_options(options)
    values = [o.value for o in options]
    default_index = str(values.index(default) + 1) if default in values else None
    choices = [str(i) for i in range(1, len(options) + 1)]

    if default_index is None:
        picked = _ask(Prompt.ask, message, choices=choices)
    else:
        picked = _ask(Prompt.ask, message, choices=choices, default=default_index)
    return values[int(picked) - 1]


def ask_multiselect(
    message: str,
    options: list[PromptOption],
    default: Optional[list[str]] = None,
) -> list[str]:
    """Show numbered *options*; the answer is a comma-separated list of numbers.

    An empty answer selects nothing (or the defaults, when given).
    """
    _print_options(options)
    values = [o.value for o in options]
    initial = ",".join(str(values.index(v) + 1) for v in (default or []) if v in values)

    while True:
        raw = _ask(Prompt.ask, f"{message} [dim](comma-separated numbers)[/dim]", default=initial)
        picked: list[str] = []
        try:
            for part in (raw or "").split(","):
                if not part.strip():
                    continue
                index = int(part)
                if not 1 <= index <= len(values):
                    raise ValueError(part)
                if values[index - 1] not in picked:
                    picked.append(values[index - 1])
        except ValueError:
            print_error(f"Enter numbers between 1 and {len(values)}")
            continue
        return picked


# ---------------------------------------------------------------------------
# Flows
# ---------------------------------------------------------------------------


def prompt_template_selection(templates: list[Template]) -> Template:
    """Pick a stack, then a template from that stack.

    Stacks without templates are hidden. A stack with a single template
    selects it without asking.
    """
    if not templates:
        raise ScaffoldError("No templates available", hint="Pass a source with --template github:org/repo")

    available = [s for s in stacks if any(t.stack_id == s.id for t in templates)]
    candidates = templates
    if available:
        stack_id = ask_select(
            "What's your stack?",
            [PromptOption(value=s.id, label=s.name, hint=s.description) for s in available],
        )
        candidates = [t for t in templates if t.stack_id == stack_id]
    else:
        print_warning("No templates match a known stack; showing all templates")

    if len(candidates) == 1:
        return candidates[0]

    slug = ask_select(
        "Select a template",
        [PromptOption(value=t.slug, label=t.name, hint=t.description or None) for t in candidates],
    )
    return next(t for t in candidates if t.slug == slug)


def prompt_project_name(default: Optional[str] = None) -> str:
    return ask_text("Project name", default=default or "my-project", validator=validate_project_name)


def run_template_prompt(prompt: TemplatePrompt) -> Any:
    """Ask one template-declared question and return the typed answer."""
    if prompt.type is PromptType.TEXT:
        default = None if prompt.default is None else str(prompt.default)
        return ask_text(prompt.message, default=default, validator=create_validator(prompt.validate_fn))

    if prompt.type is PromptType.CONFIRM:
        return ask_confirm(prompt.message, default=bool(prompt.default))

    if not prompt.options:
        raise ValueError(f'{prompt.type.value.capitalize()} prompt "{prompt.name}" has no options')

    if prompt.type is PromptType.SELECT:
        return ask_select(prompt.message, prompt.options, default=prompt.default)

    default = prompt.default if isinstance(prompt.default, list) else None
    return ask_multiselect(prompt.message, prompt.options, default=default)


def run_template_prompts(
    template: Template,
    skip_prompts: bool = False,
    store: Optional[UserConfigStore] = None,
) -> dict[str, Any]:
    """Collect answers for every prompt *template* declares.

    The saved ``author`` preference pre-fills the answers. With
    *skip_prompts* nothing is asked and each prompt's default is used.
    """
    answers: dict[str, Any] = {}

    saved_author = (store or UserConfigStore()).get("author")
    if saved_author:
        answers["author"] = saved_author

    if skip_prompts:
        for prompt in template.prompts:
            if prompt.default is not None:
                answers[prompt.name] = prompt.default
        return answers

    for prompt in template.prompts:
        if prompt.name == "projectName" and answers.get("projectName"):
            continue
        answers[prompt.name] = run_template_prompt(prompt)

    return answers


def prompt_post_actions(store: Optional[UserConfigStore] = None) -> PostActionAnswers:
    store = store or UserConfigStore()
    default_install = store.get("defaultInstallDeps")
    default_git = store.get("defaultGitInit")

    install_deps = ask_confirm(
        "Install dependencies?", default=True if default_install is None else default_install
    )
    init_git = ask_confirm(
        "Initialize git repository?", default=True if default_git is None else default_git
    )
    return PostActionAnswers(install_deps=install_deps, init_git=init_git)
