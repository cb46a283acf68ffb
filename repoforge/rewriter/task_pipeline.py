"""``turbo.json`` task-pipeline pruning.

Task keys of the form ``<app>#<task>`` belong to a single app.  Entries for
apps that were not selected are deleted; nothing is ever added.  Both the
Turborepo 2 ``tasks`` key and the older ``pipeline`` key are handled.
"""

from __future__ import annotations

from typing import Any

from ..config import GenerationConfig
from .errors import RewriteError
from .json_document import dump_object, load_object

DOCUMENT = "turbo.json"

TASK_KEYS = ("tasks", "pipeline")


def rewrite_task_pipeline(data: dict[str, Any], config: GenerationConfig) -> dict[str, Any]:
    """Return a copy of *data* without tasks owned by excluded apps."""
    present = [key for key in TASK_KEYS if key in data]
    if not present:
        raise RewriteError(DOCUMENT, 'missing "tasks" or "pipeline" mapping')

    prefixes = tuple(f"{unit.value}#" for unit in config.excluded_units())
    result = dict(data)
    for key in present:
        tasks = data[key]
        if not isinstance(tasks, dict):
            raise RewriteError(DOCUMENT, f'"{key}" must be an object')
        result[key] = {
            name: task
            for name, task in tasks.items()
            if not (prefixes and name.startswith(prefixes))
        }
    return result


def rewrite_text(text: str, config: GenerationConfig) -> str:
    return dump_object(rewrite_task_pipeline(load_object(DOCUMENT, text), config))
