"""Command-line interface for create-fast-dev.

Usage::

    create-fast-dev my-app --template nextjs-starter
    create-fast-dev create my-app -t github:org/repo#main -y --no-install
    create-fast-dev list --stack nextjs
    create-fast-dev config set author "Jane Doe"

Running without a subcommand (or with a project name first) implies
``create``.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

from .config import CLI_NAME, CLI_VERSION, EXIT_CODE, UserConfigStore
from .create import CreateOptions, ProjectCreator, summarize
from .errors import ConfigKeyError, ConfigValueError, FastDevError, PromptCancelled, ScaffoldError
from .logger import create_logger
from .models import Template
from .templates import RemoteRegistry, default_catalog, stacks
from .utils import console, print_error, print_info, print_success, print_summary_table, print_warning

SUBCOMMANDS = ("create", "list", "config")
_TOP_LEVEL_FLAGS = ("-h", "--help", "--version", "-v")


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=CLI_NAME,
        description="Scaffold fast-dev template projects",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            f"  {CLI_NAME} my-app --template nextjs-starter\n"
            f"  {CLI_NAME} create my-app -t github:org/repo -y\n"
            f"  {CLI_NAME} list --stack hono\n"
        ),
    )
    parser.add_argument("--version", "-v", action="version", version=f"{CLI_NAME} {CLI_VERSION}")
    sub = parser.add_subparsers(dest="command")

    create = sub.add_parser("create", help="Create a new project from a template")
    create.add_argument("name", nargs="?", default=None, help="Project name")
    create.add_argument(
        "--template", "-t",
        default=None,
        help="Template slug (e.g. nextjs-starter) or source (github:org/repo#branch)",
    )
    create.add_argument("--yes", "-y", action="store_true", help="Skip prompts and use defaults")
    create.add_argument("--output", "-o", default=None, help="Output directory (default: current directory)")
    create.add_argument("--debug", action="store_true", help="Enable debug logging")
    create.add_argument("--no-install", dest="install", action="store_false", help="Skip dependency installation")
    create.add_argument("--no-git", dest="git", action="store_false", help="Skip git initialization")
    create.add_argument(
        "--monorepo", "-m",
        action="store_true",
        help="Force monorepo mode (auto-detected by default)",
    )
    create.add_argument("--no-monorepo", action="store_true", help="Disable monorepo mode even if detected")
    create.add_argument(
        "--target",
        choices=["apps", "packages"],
        default=None,
        help="Target directory in monorepo (apps or packages)",
    )

    listing = sub.add_parser("list", help="List available templates")
    listing.add_argument(
        "--stack", "-s",
        default=None,
        help=f"Filter by stack ({', '.join(s.id for s in stacks)})",
    )
    listing.add_argument("--json", action="store_true", help="Output as JSON")
    listing.add_argument("--remote", action="store_true", help="Include the remote registry")

    config = sub.add_parser("config", help="Manage user configuration")
    config_sub = config.add_subparsers(dest="config_command", required=True)
    get = config_sub.add_parser("get", help="Get a configuration value")
    get.add_argument("key")
    set_ = config_sub.add_parser("set", help="Set a configuration value")
    set_.add_argument("key")
    set_.add_argument("value")
    config_list = config_sub.add_parser("list", help="List all configuration values")
    config_list.add_argument("--json", action="store_true", help="Output as JSON")
    delete = config_sub.add_parser("delete", help="Delete a configuration value")
    delete.add_argument("key")
    config_sub.add_parser("reset", help="Reset all configuration to defaults")
    config_sub.add_parser("path", help="Show the configuration file path")

    return parser


def normalize_argv(argv: list[str]) -> list[str]:
    """Insert ``create`` when no subcommand is given."""
    if not argv:
        return ["create"]
    first = argv[0]
    if first in SUBCOMMANDS or first in _TOP_LEVEL_FLAGS:
        return argv
    return ["create", *argv]


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def cmd_create(args: argparse.Namespace) -> int:
    logger = create_logger(debug=args.debug)
    console.rule(f"[bold cyan]{CLI_NAME}[/bold cyan]")

    options = CreateOptions(
        name=args.name,
        template=args.template,
        yes=args.yes,
        output=Path(args.output).resolve() if args.output else None,
        install=args.install,
        git=args.git,
        monorepo=args.monorepo,
        no_monorepo=args.no_monorepo,
        target=args.target,
    )

    try:
        result = asyncio.run(ProjectCreator(options, logger=logger).run())
    except PromptCancelled as exc:
        print_warning(str(exc))
        return EXIT_CODE["CANCELLED"]
    except ScaffoldError as exc:
        print_error(str(exc))
        if exc.hint:
            print_info(exc.hint)
        return EXIT_CODE["ERROR"]
    except FastDevError as exc:
        logger.debug("Create failed", exc_info=True)
        print_error(str(exc))
        return EXIT_CODE["ERROR"]

    print_summary_table(summarize(result), title="Project created")
    print_success("Happy coding!")
    return EXIT_CODE["SUCCESS"]


async def _collect_templates(include_remote: bool, stack: Optional[str]) -> list[Template]:
    templates = default_catalog.all()
    if include_remote or not templates:
        known = {t.slug for t in templates}
        remote = await RemoteRegistry().get_templates()
        templates += [t for t in remote if t.slug not in known]
    if stack:
        templates = [t for t in templates if t.stack_id == stack]
    return templates


def cmd_list(args: argparse.Namespace) -> int:
    templates = asyncio.run(_collect_templates(args.remote, args.stack))

    if args.json:
        console.print_json(json.dumps([t.to_json_dict() for t in templates]))
        return EXIT_CODE["SUCCESS"]

    if not templates:
        print_warning("No templates found")
        if args.stack:
            console.print(f"[dim]Try without --stack or use one of: {', '.join(s.id for s in stacks)}[/dim]")
        return EXIT_CODE["SUCCESS"]

    console.print("\n[bold]Available Templates[/bold]\n")
    known_stacks = {s.id for s in stacks}
    for stack in stacks:
        members = [t for t in templates if t.stack_id == stack.id]
        if members:
            _print_group(stack.name, stack.description, members)
    others = [t for t in templates if t.stack_id not in known_stacks]
    if others:
        _print_group("Other", "Templates outside the built-in stacks", others)

    console.print(f"[dim]Use: {CLI_NAME} --template <slug>[/dim]\n")
    return EXIT_CODE["SUCCESS"]


def _print_group(title: str, description: str, templates: list[Template]) -> None:
    console.print(f"[bold cyan]{title}[/bold cyan]")
    console.print(f"[dim]  {description}[/dim]\n")
    for template in templates:
        console.print(f"  [green]{template.slug}[/green]")
        if template.description:
            console.print(f"    [dim]{template.description}[/dim]")
        if template.tags:
            console.print(f"    [dim]Tags: {', '.join(template.tags)}[/dim]")
        console.print()


def cmd_config(args: argparse.Namespace, store: Optional[UserConfigStore] = None) -> int:
    store = store or UserConfigStore()
    action = args.config_command

    try:
        if action == "get":
            value = store.get(args.key)
            console.print("[dim](not set)[/dim]" if value is None else str(value))
        elif action == "set":
            value = store.set(args.key, args.value)
            print_success(f"Set {args.key} = {value}")
        elif action == "list":
            values = store.all()
            if args.json:
                console.print_json(json.dumps(values))
            else:
                console.print("\n[bold]Configuration[/bold]\n")
                console.print(f"[dim]Path: {store.path}[/dim]\n")
                for key, value in values.items():
                    shown = "[dim](not set)[/dim]" if value is None else str(value)
                    console.print(f"  [cyan]{key}[/cyan]: {shown}")
                console.print()
        elif action == "delete":
            store.delete(args.key)
            print_success(f"Deleted {args.key}")
        elif action == "reset":
            store.reset()
            print_success("Configuration reset to defaults")
        elif action == "path":
            console.print(str(store.path), soft_wrap=True)
    except ConfigKeyError as exc:
        print_error(str(exc))
        console.print(f"[dim]Valid keys: {', '.join(exc.valid_keys)}[/dim]")
        return EXIT_CODE["ERROR"]
    except ConfigValueError as exc:
        print_error(str(exc))
        return EXIT_CODE["ERROR"]

    return EXIT_CODE["SUCCESS"]


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main(argv: Optional[list[str]] = None) -> int:
    """Parse *argv* (default ``sys.argv[1:]``) and run the command."""
    parser = build_parser()
    args = parser.parse_args(normalize_argv(list(sys.argv[1:] if argv is None else argv)))

    try:
        if args.command == "list":
            return cmd_list(args)
        if args.command == "config":
            return cmd_config(args)
        return cmd_create(args)
    except KeyboardInterrupt:
        print_warning("Operation cancelled")
        return EXIT_CODE["CANCELLED"]


if __name__ == "__main__":
    sys.exit(main())
