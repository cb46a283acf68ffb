"""Project generator orchestrator.

Drives the generation state machine for one project:

    fetching -> pruning -> rewriting -> installing -> initializing -> done

Stages run strictly in order and never go back.  Fetch, prune and rewrite
failures are fatal and stop the run; installer and git failures are recorded
as warnings.  A failed run leaves whatever it already wrote on disk.

Usage::

    config = GenerationConfig.for_project("acme-app", selected_units={"admin"})
    result = await ProjectGenerator(listener=print).run(config)
"""

from __future__ import annotations

import asyncio
import time

from .config import GenerationConfig, GeneratorSettings, UnitId
from .events import (
    GenerationResult,
    ProgressEvent,
    ProgressListener,
    Stage,
    StageStatus,
    null_listener,
)
from .fetcher import FetchError, WorkspaceFetcher, make_fetcher
from .installer import DependencyInstaller
from .pruner import FeaturePruner, PruneError
from .rewriter import ConfigRewriter, RewriteError
from .utils import format_duration
from .vcs import VcsInitializer


class ProjectGenerator:
    """Orchestrates fetcher, pruner, rewriter, installer and git initializer.

    Every collaborator can be injected, which is how tests swap in a local
    template tree or a failing installer.
    """

    def __init__(
        self,
        settings: GeneratorSettings | None = None,
        listener: ProgressListener | None = None,
        *,
        fetcher: WorkspaceFetcher | None = None,
        pruner: FeaturePruner | None = None,
        rewriter: ConfigRewriter | None = None,
        installer: DependencyInstaller | None = None,
        initializer: VcsInitializer | None = None,
    ) -> None:
        self.settings = settings or GeneratorSettings()
        self.listener = listener or null_listener
        self.fetcher = fetcher or make_fetcher(self.settings)
        self.pruner = pruner or FeaturePruner(self.settings)
        self.rewriter = rewriter or ConfigRewriter(self.settings)
        self.installer = installer or DependencyInstaller(self.settings)
        self.initializer = initializer or VcsInitializer(self.settings)

    def _emit(self, stage: Stage, status: StageStatus, detail: str = "") -> None:
        self.listener(ProgressEvent(stage=stage, status=status, detail=detail))

    async def run(self, config: GenerationConfig) -> GenerationResult:
        """Generate the project described by *config*.

        Returns:
            The terminal ``GenerationResult``.  Fatal stage errors are
            reported through it rather than raised.

        Raises:
            asyncio.CancelledError: If the run is cancelled; any running
                child process has already been terminated.
        """
        dest = config.project_path
        warnings: list[str] = []
        removed: list[UnitId] = []
        installed = False
        initialized = False
        stage = Stage.FETCHING

        def failed(at: Stage, exc: Exception) -> GenerationResult:
            message = f"{at.value}: {exc}"
            self._emit(at, StageStatus.FAILED, str(exc))
            self._emit(Stage.DONE, StageStatus.FAILED, message)
            return GenerationResult(
                succeeded=False,
                failure_stage=at,
                message=message,
                warnings=tuple(warnings),
                removed_units=tuple(removed),
                project_path=dest,
            )

        try:
            # Fetching
            stage = Stage.FETCHING
            started = time.monotonic()
            self._emit(stage, StageStatus.STARTED, f"Retrieving template into {dest}")
            try:
                await self.fetcher.fetch(dest)
            except FetchError as exc:
                return failed(stage, exc)
            self._emit(
                stage, StageStatus.SUCCEEDED,
                f"Template ready in {format_duration(time.monotonic() - started)}",
            )

            # Pruning
            stage = Stage.PRUNING
            self._emit(stage, StageStatus.STARTED, "Removing unselected apps")
            try:
                removed = await self.pruner.prune(
                    dest, config.selected_units, config.deployment_target
                )
            except PruneError as exc:
                return failed(stage, exc)
            detail = (
                f"Removed {', '.join(u.value for u in removed)} app(s)"
                if removed else "No apps removed"
            )
            self._emit(stage, StageStatus.SUCCEEDED, detail)

            # Rewriting
            stage = Stage.REWRITING
            self._emit(stage, StageStatus.STARTED, "Updating project configuration")
            try:
                report = await self.rewriter.rewrite(dest, config)
            except RewriteError as exc:
                return failed(stage, exc)
            self._emit(stage, StageStatus.SUCCEEDED, report.summary())

            # Installing
            if config.install_dependencies:
                stage = Stage.INSTALLING
                self._emit(stage, StageStatus.STARTED, "Installing dependencies")
                install = await self.installer.install(dest)
                installed = install.installed
                if install.installed:
                    self._emit(stage, StageStatus.SUCCEEDED, "Dependencies installed")
                else:
                    warnings.append(install.warning or "Dependency installation failed")
                    self._emit(stage, StageStatus.WARNED, warnings[-1])

            # Initializing
            if self.settings.initialize_repository:
                stage = Stage.INITIALIZING
                self._emit(stage, StageStatus.STARTED, "Initializing git repository")
                init = await self.initializer.initialize(dest)
                initialized = init.initialized
                if init.initialized:
                    self._emit(stage, StageStatus.SUCCEEDED, "Initialized git repository")
                else:
                    warnings.append(init.warning or "Git initialization failed")
                    self._emit(stage, StageStatus.WARNED, warnings[-1])

        except asyncio.CancelledError:
            self._emit(stage, StageStatus.FAILED, "cancelled")
            raise

        message = f"Project {config.project_name} created at {dest}"
        self._emit(
            Stage.DONE,
            StageStatus.WARNED if warnings else StageStatus.SUCCEEDED,
            message,
        )
        return GenerationResult(
            succeeded=True,
            message=message,
            warnings=tuple(warnings),
            removed_units=tuple(removed),
            dependencies_installed=installed,
            repository_initialized=initialized,
            project_path=dest,
        )
