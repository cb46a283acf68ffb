"""Version-control initializer -- gives the generated project a fresh history.

Creates a repository at the project root, stages everything and records a
single initial commit.  Any git failure (missing binary, no user identity
configured) is reported as ``initialized=False`` instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .config import GeneratorSettings
from .git import GitError, run_git


@dataclass(frozen=True)
class InitOutcome:
    initialized: bool
    warning: str | None = None


class VcsInitializer:
    def __init__(self, settings: GeneratorSettings | None = None) -> None:
        self.settings = settings or GeneratorSettings()

    async def initialize(self, destination: str | Path) -> InitOutcome:
        timeout = self.settings.git_timeout
        try:
            await run_git("init", cwd=destination, timeout=timeout)
            await run_git("add", ".", cwd=destination, timeout=timeout)
            await run_git(
                "commit", "-m", self.settings.commit_message,
                cwd=destination,
                timeout=timeout,
            )
        except GitError as exc:
            detail = exc.stderr or str(exc)
            return InitOutcome(
                initialized=False,
                warning=f"Could not initialize git repository: {detail}",
            )
        return InitOutcome(initialized=True)
