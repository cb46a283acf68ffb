"""repoforge -- turns a monorepo template checkout into a new project.

Quick usage::

    from repoforge import GenerationConfig, ProjectGenerator

    config = GenerationConfig.for_project(
        "acme-app",
        selected_units={"admin"},
        deployment_target="none",
        install_dependencies=False,
    )
    result = await ProjectGenerator().run(config)
"""

from repoforge.config import (
    ALL_UNITS,
    BASELINE_UNIT,
    DeploymentTarget,
    GenerationConfig,
    GeneratorSettings,
    UnitId,
)
from repoforge.events import GenerationResult, ProgressEvent, Stage, StageStatus
from repoforge.generator import ProjectGenerator

__all__ = [
    "ALL_UNITS",
    "BASELINE_UNIT",
    "DeploymentTarget",
    "GenerationConfig",
    "GenerationResult",
    "GeneratorSettings",
    "ProgressEvent",
    "ProjectGenerator",
    "Stage",
    "StageStatus",
    "UnitId",
]

__version__ = "0.1.0"
