"""Shared utility functions for repoforge.

Provides async command execution with cancellation-aware child cleanup,
file-system and naming helpers, and Rich-based console output used by the
command-line front end.
"""

from __future__ import annotations

import asyncio
import os
import re
import shutil
from pathlib import Path

from rich.console import Console
from rich.rule import Rule
from rich.table import Table

console = Console()

# Seconds a child gets to exit after SIGTERM before it is killed.
TERMINATE_GRACE_PERIOD = 5.0

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(
    cmd: list[str],
    cwd: str | Path | None = None,
    timeout: float = 120,
    capture: bool = True,
    env: dict[str, str] | None = None,
) -> tuple[int, str, str]:
    """Run a command asynchronously.

    If the awaiting task is cancelled (for example by Ctrl-C under
    ``asyncio.run``) the child process is sent SIGTERM, killed if it does not
    exit within :data:`TERMINATE_GRACE_PERIOD`, and the cancellation is
    re-raised.

    Args:
        cmd: Program and arguments.
        cwd: Working directory for the child process.
        timeout: Maximum wall-clock seconds before the process is killed.
        capture: Whether to capture stdout/stderr (if ``False`` they inherit
            the parent's streams).
        env: Optional extra environment variables merged on top of ``os.environ``.

    Returns:
        A ``(returncode, stdout, stderr)`` tuple.  On timeout the return code
        is ``-1`` and stderr describes the timeout.

    Raises:
        OSError: If the executable cannot be started (e.g. not installed).
    """
    merged_env: dict[str, str] | None = None
    if env:
        merged_env = {**os.environ, **env}

    stdout_pipe = asyncio.subprocess.PIPE if capture else None
    stderr_pipe = asyncio.subprocess.PIPE if capture else None

    process = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=stdout_pipe,
        stderr=stderr_pipe,
        cwd=str(cwd) if cwd else None,
        env=merged_env,
    )

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(), timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return (-1, "", f"Command timed out after {timeout}s: {' '.join(cmd)}")
    except asyncio.CancelledError:
        await terminate_process(process)
        raise

    stdout_str = (stdout_bytes or b"").decode("utf-8", errors="replace").strip()
    stderr_str = (stderr_bytes or b"").decode("utf-8", errors="replace").strip()
    return (process.returncode or 0, stdout_str, stderr_str)


async def terminate_process(
    process: asyncio.subprocess.Process,
    grace_period: float = TERMINATE_GRACE_PERIOD,
) -> None:
    """Send SIGTERM to a running child, escalating to SIGKILL after *grace_period*."""
    if process.returncode is not None:
        return
    try:
        process.terminate()
    except ProcessLookupError:
        return
    try:
        await asyncio.wait_for(process.wait(), timeout=grace_period)
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()


# ---------------------------------------------------------------------------
# String / name helpers
# ---------------------------------------------------------------------------


def title_case(name: str) -> str:
    """Turn a project slug into a display title.

    Examples::

        title_case("acme-app")     -> "Acme App"
        title_case("my_cool-site") -> "My Cool Site"
    """
    words = [w for w in re.split(r"[-_]+", name) if w]
    return " ".join(w[0].upper() + w[1:] for w in words)


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def remove_path(path: str | Path) -> bool:
    """Delete a file or directory tree.

    Returns ``True`` if something was removed and ``False`` if *path* did not
    exist.  Other filesystem errors propagate.
    """
    target = Path(path)
    if target.is_dir() and not target.is_symlink():
        shutil.rmtree(target)
        return True
    if target.exists() or target.is_symlink():
        target.unlink()
        return True
    return False


def is_populated_dir(path: str | Path) -> bool:
    """Return ``True`` if *path* is a directory containing at least one entry."""
    target = Path(path)
    return target.is_dir() and any(target.iterdir())


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string.

    Examples::

        format_duration(3.7)    -> "3.7s"
        format_duration(65.2)   -> "1m 5s"
    """
    if seconds < 0:
        return "0.0s"

    minutes = int(seconds // 60)
    secs = seconds % 60
    if minutes > 0:
        return f"{minutes}m {int(secs)}s"
    return f"{secs:.1f}s"


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


STAGE_COLORS: dict[str, str] = {
    "fetching": "bright_cyan",
    "pruning": "bright_green",
    "rewriting": "bright_yellow",
    "installing": "bright_magenta",
    "initializing": "bright_blue",
    "done": "white",
}


def print_rule(title: str, color: str = "bright_cyan") -> None:
    """Print a full-width rule with a centred title."""
    console.print()
    console.print(Rule(f"[bold {color}] {title} [/bold {color}]", style=color))
    console.print()


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")
