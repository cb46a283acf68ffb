"""Thin async wrapper around the git CLI.

Shared by the workspace fetcher (shallow clone) and the version-control
initializer (init / add / commit).
"""

from __future__ import annotations

from pathlib import Path

from .utils import run_command


class GitError(Exception):
    """Raised when a git command fails or cannot be started."""

    def __init__(self, message: str, command: str = "", stderr: str = ""):
        self.command = command
        self.stderr = stderr
        super().__init__(message)


async def run_git(
    *args: str,
    cwd: str | Path | None = None,
    timeout: float = 60.0,
) -> tuple[str, str]:
    """Run a git command and return ``(stdout, stderr)``.

    Raises:
        GitError: If git is missing, times out, or exits non-zero.
    """
    cmd = ["git", *args]
    cmd_str = " ".join(cmd)

    try:
        returncode, stdout, stderr = await run_command(cmd, cwd=cwd, timeout=timeout)
    except OSError as exc:
        raise GitError(f"Could not run git: {exc}", command=cmd_str) from exc

    if returncode == -1:
        raise GitError(
            f"Git command timed out after {timeout}s: {cmd_str}",
            command=cmd_str,
            stderr=stderr,
        )
    if returncode != 0:
        raise GitError(
            f"Git command failed (exit {returncode}): {cmd_str}\n{stderr}",
            command=cmd_str,
            stderr=stderr,
        )

    return stdout, stderr
