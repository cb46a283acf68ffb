"""Progress events and the terminal result of a generation run.

The orchestrator never writes to the console itself.  It reports every stage
transition as a :class:`ProgressEvent` to an injected listener and finishes
with exactly one frozen :class:`GenerationResult`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Callable

from pydantic import BaseModel, ConfigDict, Field

from .config import UnitId


class Stage(str, Enum):
    """One step of the generator's sequential state machine."""

    FETCHING = "fetching"
    PRUNING = "pruning"
    REWRITING = "rewriting"
    INSTALLING = "installing"
    INITIALIZING = "initializing"
    DONE = "done"


class StageStatus(str, Enum):
    STARTED = "started"
    SUCCEEDED = "succeeded"
    WARNED = "warned"
    FAILED = "failed"


@dataclass(frozen=True)
class ProgressEvent:
    """A single stage transition reported by the orchestrator."""

    stage: Stage
    status: StageStatus
    detail: str = ""
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


ProgressListener = Callable[[ProgressEvent], None]


def null_listener(event: ProgressEvent) -> None:
    """Listener that discards every event."""


class GenerationResult(BaseModel):
    """Terminal outcome of one generation run."""

    model_config = ConfigDict(frozen=True)

    succeeded: bool
    failure_stage: Stage | None = Field(default=None)
    message: str = Field(default="")
    warnings: tuple[str, ...] = Field(default=())
    removed_units: tuple[UnitId, ...] = Field(default=())
    dependencies_installed: bool = Field(default=False)
    repository_initialized: bool = Field(default=False)
    project_path: Path | None = Field(default=None)

    @property
    def exit_code(self) -> int:
        """Process exit status for a command-line front end."""
        return 0 if self.succeeded else 1
