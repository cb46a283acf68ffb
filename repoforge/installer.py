"""Dependency installer -- runs the package manager in the generated project.

Failures never raise: they come back as an :class:`InstallOutcome` with a
warning telling the user how to finish the job by hand.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .config import GeneratorSettings
from .utils import run_command

# Lines of package-manager stderr kept in the warning.
_STDERR_TAIL_LINES = 5


@dataclass(frozen=True)
class InstallOutcome:
    installed: bool
    warning: str | None = None


class DependencyInstaller:
    """Invokes ``<package_manager> install`` inside the project."""

    def __init__(self, settings: GeneratorSettings | None = None) -> None:
        self.settings = settings or GeneratorSettings()

    @property
    def recovery_hint(self) -> str:
        return f"Run `{' '.join(self.settings.install_command)}` manually after setup"

    async def install(self, destination: str | Path) -> InstallOutcome:
        cmd = self.settings.install_command
        try:
            returncode, _stdout, stderr = await run_command(
                cmd, cwd=destination, timeout=self.settings.install_timeout
            )
        except OSError as exc:
            return InstallOutcome(
                installed=False,
                warning=f"Could not run {cmd[0]} ({exc}). {self.recovery_hint}",
            )

        if returncode != 0:
            tail = "\n".join(stderr.splitlines()[-_STDERR_TAIL_LINES:])
            reason = "timed out" if returncode == -1 else f"exited with code {returncode}"
            warning = f"Could not install dependencies automatically: {cmd[0]} {reason}."
            if tail:
                warning += f"\n{tail}"
            return InstallOutcome(installed=False, warning=f"{warning}\n{self.recovery_hint}")

        return InstallOutcome(installed=True)
