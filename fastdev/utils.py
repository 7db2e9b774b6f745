"""Shared utility functions for create-fast-dev.

Provides async command execution, async file-system and JSON helpers used by
the transformers, name formatting, and Rich-based console output. All
file-system work is pushed to a worker thread so callers can simply ``await``
it in sequence.
"""

from __future__ import annotations

import asyncio
import json
import os
import shutil
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

console = Console()

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(
    cmd: list[str],
    cwd: str | Path | None = None,
    timeout: int = 600,
    capture: bool = True,
    env: dict[str, str] | None = None,
) -> tuple[int, str, str]:
    """Run *cmd* (git, a package manager) and wait for it.

    With ``capture=False`` the child writes straight to the terminal, which
    is how installs show their progress; the returned strings are then
    empty. *env* entries are layered over the current environment.

    Returns:
        ``(returncode, stdout, stderr)``; a timeout kills the child and
        reports returncode ``-1``.

    Raises:
        FileNotFoundError: The program is not on ``PATH``.
    """
    pipe = asyncio.subprocess.PIPE if capture else None
    process = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=pipe,
        stderr=pipe,
        cwd=str(cwd) if cwd else None,
        env={**os.environ, **env} if env else None,
    )

    try:
        out, err = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return -1, "", f"Command timed out after {timeout}s: {' '.join(cmd)}"

    return (
        process.returncode or 0,
        _decode(out),
        _decode(err),
    )


def _decode(data: bytes | None) -> str:
    return (data or b"").decode("utf-8", errors="replace").strip()


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def _exists(path: Path) -> bool:
    try:
        return path.exists()
    except OSError:
        return False


async def path_exists(path: str | Path) -> bool:
    """Return ``True`` if *path* exists; permission errors count as absent."""
    return await asyncio.to_thread(_exists, Path(path))


def _remove(path: Path) -> None:
    if path.is_symlink() or path.is_file():
        path.unlink(missing_ok=True)
    elif path.is_dir():
        shutil.rmtree(path, ignore_errors=True)


async def remove_path(path: str | Path) -> None:
    """Remove a file or directory tree; a missing path is a no-op."""
    await asyncio.to_thread(_remove, Path(path))


def resolve_inside(root: str | Path, relative: str) -> Path:
    """Join *relative* onto *root*, refusing paths that escape *root*.

    The check is lexical: a symlink inside *root* is returned as the link
    itself, never its target, so removing it leaves the target alone.

    Raises:
        ValueError: If the normalised path lies outside *root*.
    """
    base = Path(root).resolve()
    target = Path(os.path.normpath(base / relative))
    if target != base and base not in target.parents:
        raise ValueError(f"Path escapes project directory: {relative}")
    return target


async def read_text(path: str | Path) -> str:
    return await asyncio.to_thread(Path(path).read_text, encoding="utf-8")


def _write_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


async def write_text(path: str | Path, content: str) -> None:
    """Write *content*, creating parent directories as needed."""
    await asyncio.to_thread(_write_file, Path(path), content)


# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------


async def load_json(path: str | Path) -> Any:
    """Parse the JSON document at *path*.

    Missing files, invalid UTF-8 and malformed JSON propagate
    (``OSError`` or ``ValueError``); callers decide whether that is fatal.
    """
    raw = await read_text(path)
    return json.loads(raw)


async def save_json(data: Any, path: str | Path) -> None:
    """Save data as two-space indented JSON with a trailing newline.

    Key order is preserved so rewritten manifests diff cleanly against the
    template's originals.
    """
    content = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    await write_text(path, content)


# ---------------------------------------------------------------------------
# String helpers
# ---------------------------------------------------------------------------


def title_case(name: str) -> str:
    """Turn a dashed project name into a heading.

    Examples::

        title_case("cool-app")   -> "Cool App"
        title_case("my-API-kit") -> "My API Kit"
    """
    return " ".join(word[:1].upper() + word[1:] for word in name.split("-"))


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")


def print_info(message: str) -> None:
    console.print(f"[cyan]{message}[/cyan]")


def print_note(lines: list[str], title: str) -> None:
    """Print a bordered panel, e.g. the "Next steps" box."""
    console.print(Panel("\n".join(lines), title=title, border_style="cyan", expand=False))


def print_summary_table(rows: dict[str, Any], title: str = "Summary") -> None:
    """Render *rows* as a label/value table, e.g. the final create summary.

    ``None`` values are shown as ``(not set)``.
    """
    table = Table(title=title, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")
    for label, value in rows.items():
        table.add_row(label, "(not set)" if value is None else str(value))

    console.print(table)
    console.print()
