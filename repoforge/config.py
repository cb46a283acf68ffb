"""repoforge configuration.

Two layers of typed configuration, both Pydantic v2 models:

* ``GenerationConfig`` -- the resolved, immutable description of one
  generated project (name, destination, selected apps, deployment target).
* ``GeneratorSettings`` -- tuneable knobs for the generator itself (template
  location, package manager, timeouts) with environment-variable overrides.
"""

from __future__ import annotations

import os
import re
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class UnitId(str, Enum):
    """An application subtree under ``apps/`` that a project may include."""

    WEB = "web"
    ADMIN = "admin"
    MOBILE = "mobile"
    API = "api"


class DeploymentTarget(str, Enum):
    """Where the generated project deploys to."""

    GCP = "gcp"
    NONE = "none"


# Fixed order used for pruning, README bullets and reporting.
ALL_UNITS: tuple[UnitId, ...] = (UnitId.WEB, UnitId.ADMIN, UnitId.MOBILE, UnitId.API)

BASELINE_UNIT = UnitId.WEB

DEFAULT_TEMPLATE_URL = "https://github.com/yehudazeytim/turborepo-template.git"


def validate_project_name(name: str) -> str | None:
    """Return a human-readable problem with *name*, or ``None`` if it is valid."""
    if not name:
        return "Project name is required"
    if not re.fullmatch(r"[A-Za-z0-9_-]+", name):
        return "Project name can only contain letters, numbers, dashes, and underscores"
    if len(name) < 2:
        return "Project name must be at least 2 characters long"
    if len(name) > 50:
        return "Project name must be at most 50 characters long"
    return None


class GenerationConfig(BaseModel):
    """Resolved configuration for a single generation run.

    Instances are frozen: the orchestrator owns one for the lifetime of a run
    and nothing downstream may change it.
    """

    model_config = ConfigDict(frozen=True)

    project_name: str = Field(..., description="Name of the generated project")
    project_path: Path = Field(..., description="Absolute destination directory")
    selected_units: frozenset[UnitId] = Field(
        default_factory=lambda: frozenset({BASELINE_UNIT}),
        description="Applications to keep; the baseline unit is always added",
    )
    deployment_target: DeploymentTarget = Field(default=DeploymentTarget.GCP)
    install_dependencies: bool = Field(default=True)

    @field_validator("project_name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        problem = validate_project_name(value)
        if problem is not None:
            raise ValueError(problem)
        return value

    @field_validator("project_path")
    @classmethod
    def _check_path(cls, value: Path) -> Path:
        resolved = Path(value).expanduser().resolve()
        if resolved.is_dir():
            raise ValueError(f"Directory {resolved} already exists")
        return resolved

    @field_validator("selected_units", mode="before")
    @classmethod
    def _with_baseline(cls, value: Any) -> frozenset[UnitId]:
        if value is None:
            value = ()
        if isinstance(value, (str, UnitId)):
            value = (value,)
        units = {UnitId(v) for v in value}
        units.add(BASELINE_UNIT)
        return frozenset(units)

    # ------------------------------------------------------------------
    # Convenience constructors and queries
    # ------------------------------------------------------------------

    @classmethod
    def for_project(
        cls,
        project_name: str,
        parent: str | Path | None = None,
        **kwargs: Any,
    ) -> "GenerationConfig":
        """Build a config whose destination is ``<parent or cwd>/<project_name>``."""
        base = Path(parent) if parent is not None else Path.cwd()
        return cls(project_name=project_name, project_path=base / project_name, **kwargs)

    def includes(self, unit: UnitId) -> bool:
        return unit in self.selected_units

    def ordered_units(self) -> list[UnitId]:
        """Selected units in canonical order."""
        return [u for u in ALL_UNITS if u in self.selected_units]

    def excluded_units(self) -> list[UnitId]:
        """Known units that were not selected, in canonical order."""
        return [u for u in ALL_UNITS if u not in self.selected_units]

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file and return the path."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "GenerationConfig":
        """Load and validate a configuration previously written by :meth:`save`."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)


class GeneratorSettings(BaseModel):
    """Tuning knobs for the generator itself.

    Defaults match the published template; every field can be overridden
    through ``REPOFORGE_*`` environment variables via :meth:`from_env`.
    """

    template_url: str = Field(default=DEFAULT_TEMPLATE_URL)
    template_branch: str = Field(default="main")
    fetch_strategy: str = Field(default="git", pattern=r"^(git|archive)$")
    archive_url: str | None = Field(
        default=None, description="Tarball URL; derived from template_url when unset"
    )

    apps_dir: str = Field(default="apps")
    workflow_path: str = Field(default=".github/workflows/deploy.yml")
    generator_subtree: str = Field(default="packages/create-yehudz-template")
    deployment_paths: list[str] = Field(
        default_factory=lambda: [".github/workflows/deploy.yml", "infrastructure"]
    )

    package_manager: str = Field(default="pnpm")
    install_timeout: int = Field(default=600, ge=10, description="Seconds")
    git_timeout: int = Field(default=120, ge=5, description="Seconds")
    commit_message: str = Field(default="Initial commit from create-yehudz-template")
    initialize_repository: bool = Field(default=True)

    @property
    def resolved_archive_url(self) -> str:
        """Tarball URL for the configured branch.

        Only GitHub-style URLs can be derived; anything else needs an explicit
        ``archive_url``.
        """
        if self.archive_url:
            return self.archive_url
        base = self.template_url.removesuffix(".git").rstrip("/")
        return f"{base}/archive/refs/heads/{self.template_branch}.tar.gz"

    @property
    def install_command(self) -> list[str]:
        return [self.package_manager, "install"]

    @classmethod
    def from_env(cls) -> "GeneratorSettings":
        """Build settings from environment variables.

        Recognised variables (all optional):
            REPOFORGE_TEMPLATE_URL, REPOFORGE_TEMPLATE_BRANCH,
            REPOFORGE_FETCH_STRATEGY, REPOFORGE_ARCHIVE_URL,
            REPOFORGE_PACKAGE_MANAGER, REPOFORGE_INSTALL_TIMEOUT,
            REPOFORGE_GIT_TIMEOUT, REPOFORGE_COMMIT_MESSAGE.
        """
        kwargs: dict[str, Any] = {}
        string_vars = {
            "REPOFORGE_TEMPLATE_URL": "template_url",
            "REPOFORGE_TEMPLATE_BRANCH": "template_branch",
            "REPOFORGE_FETCH_STRATEGY": "fetch_strategy",
            "REPOFORGE_ARCHIVE_URL": "archive_url",
            "REPOFORGE_PACKAGE_MANAGER": "package_manager",
            "REPOFORGE_COMMIT_MESSAGE": "commit_message",
        }
        for env_name, field_name in string_vars.items():
            if os.environ.get(env_name):
                kwargs[field_name] = os.environ[env_name]
        if os.environ.get("REPOFORGE_INSTALL_TIMEOUT"):
            kwargs["install_timeout"] = int(os.environ["REPOFORGE_INSTALL_TIMEOUT"])
        if os.environ.get("REPOFORGE_GIT_TIMEOUT"):
            kwargs["git_timeout"] = int(os.environ["REPOFORGE_GIT_TIMEOUT"])
        return cls(**kwargs)
