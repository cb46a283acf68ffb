"""Feature pruner -- removes application subtrees that were not selected.

The set of known units (``ALL_UNITS``) is the authority for what may be
removed; directories under ``apps/`` that are not known units are never
touched.  Deletions are independent of each other, so they run in canonical
order without any coordination.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from pathlib import Path

from .config import ALL_UNITS, DeploymentTarget, GeneratorSettings, UnitId
from .utils import remove_path


class PruneError(Exception):
    """Raised when a subtree cannot be deleted.

    ``target`` is the unit id for application subtrees, or the relative path
    for the generator subtree and deployment artefacts.
    """

    def __init__(self, target: str, message: str):
        self.target = target
        super().__init__(message)


class FeaturePruner:
    """Deletes unselected unit subtrees and the generator's own package."""

    def __init__(self, settings: GeneratorSettings | None = None) -> None:
        self.settings = settings or GeneratorSettings()

    def unit_path(self, destination: Path, unit: UnitId) -> Path:
        return Path(destination) / self.settings.apps_dir / unit.value

    async def prune(
        self,
        destination: str | Path,
        selected_units: Iterable[UnitId],
        deployment_target: DeploymentTarget = DeploymentTarget.GCP,
    ) -> list[UnitId]:
        """Prune *destination* down to *selected_units*.

        Returns:
            The units whose subtrees were removed, in canonical order.  Units
            whose subtree was already absent are not listed.

        Raises:
            PruneError: On the first filesystem error.  Earlier deletions are
                not rolled back.
        """
        dest = Path(destination)
        selected = set(selected_units)
        removed: list[UnitId] = []

        for unit in ALL_UNITS:
            if unit in selected:
                continue
            path = self.unit_path(dest, unit)
            try:
                deleted = await asyncio.to_thread(remove_path, path)
            except OSError as exc:
                raise PruneError(
                    unit.value, f"Could not remove {unit.value} app at {path}: {exc}"
                ) from exc
            if deleted:
                removed.append(unit)

        # A generated project must never be able to regenerate itself.
        await self._remove_relative(dest, self.settings.generator_subtree)

        if deployment_target == DeploymentTarget.NONE:
            for rel in self.settings.deployment_paths:
                await self._remove_relative(dest, rel)

        return removed

    async def _remove_relative(self, destination: Path, rel: str) -> bool:
        path = destination / rel
        try:
            return await asyncio.to_thread(remove_path, path)
        except OSError as exc:
            raise PruneError(rel, f"Could not remove {rel}: {exc}") from exc

    def present_units(self, destination: str | Path) -> set[UnitId]:
        """Known units whose subtree currently exists under *destination*."""
        return {u for u in ALL_UNITS if self.unit_path(Path(destination), u).is_dir()}
