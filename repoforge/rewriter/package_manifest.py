"""Root ``package.json`` rewriting.

Sets the project name and keeps the per-app convenience scripts in step
with the selected apps.  Key order is preserved and output is always
2-space JSON with a trailing newline, so rewriting twice with the same
selection is byte-identical.
"""

from __future__ import annotations

from typing import Any

from ..config import GenerationConfig, UnitId
from .errors import RewriteError
from .json_document import dump_object, load_object

DOCUMENT = "package.json"

# Root scripts that only make sense when the app is part of the project.
UNIT_SCRIPTS: dict[UnitId, dict[str, str]] = {
    UnitId.ADMIN: {
        "admin:dev": "turbo run dev --filter admin",
        "admin:build": "turbo run build --filter admin",
    },
    UnitId.MOBILE: {
        "mobile:start": "turbo run start --filter mobile",
        "mobile:build": "turbo run build --filter mobile",
    },
}


def rewrite_package_manifest(data: dict[str, Any], config: GenerationConfig) -> dict[str, Any]:
    """Return a rewritten copy of the manifest; *data* is not modified."""
    result = dict(data)
    result["name"] = config.project_name

    scripts = result.get("scripts")
    if scripts is not None and not isinstance(scripts, dict):
        raise RewriteError(DOCUMENT, '"scripts" must be an object')
    new_scripts = dict(scripts or {})

    for unit, unit_scripts in UNIT_SCRIPTS.items():
        if config.includes(unit):
            for key, command in unit_scripts.items():
                new_scripts.setdefault(key, command)
        else:
            for key in unit_scripts:
                new_scripts.pop(key, None)

    if scripts is not None or new_scripts:
        result["scripts"] = new_scripts
    return result


def rewrite_text(text: str, config: GenerationConfig) -> str:
    return dump_object(rewrite_package_manifest(load_object(DOCUMENT, text), config))
