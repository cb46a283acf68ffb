"""README title and "What's Included" section."""

from __future__ import annotations

import re

from ..config import GenerationConfig, UnitId
from ..utils import title_case
from .templates import TemplateRenderer

INCLUDED_HEADING = "## 🚀 What's Included"

INCLUDED_TEMPLATE = "included_units.md.j2"

# (icon, label, description) shown for each included app.
UNIT_DESCRIPTIONS: dict[UnitId, tuple[str, str, str]] = {
    UnitId.WEB: ("🌐", "Web App", "Next.js 15 with App Router"),
    UnitId.ADMIN: ("🔧", "Admin Dashboard", "Management interface"),
    UnitId.MOBILE: ("📱", "Mobile App", "Expo + React Native"),
    UnitId.API: ("🚀", "API Backend", "Express.js server"),
}

_TITLE_RE = re.compile(r"^# .*$", re.MULTILINE)
_H2_RE = re.compile(r"^## ", re.MULTILINE)
_EXISTING_SECTION_RE = re.compile(
    rf"^{re.escape(INCLUDED_HEADING)}[ \t]*\n.*?(?=^## |\Z)",
    re.MULTILINE | re.DOTALL,
)


def render_included_section(config: GenerationConfig, renderer: TemplateRenderer) -> str:
    units = []
    for unit in config.ordered_units():
        icon, label, description = UNIT_DESCRIPTIONS[unit]
        units.append(
            {"id": unit.value, "icon": icon, "label": label, "description": description}
        )
    return renderer.render(INCLUDED_TEMPLATE, {"units": units})


def rewrite_readme(
    text: str,
    config: GenerationConfig,
    renderer: TemplateRenderer | None = None,
) -> str:
    """Retitle the README and (re)insert the included-apps section.

    The section goes immediately before the first second-level heading, or
    at the end when there is none.  A section left by an earlier run is
    replaced rather than duplicated.
    """
    renderer = renderer or TemplateRenderer()
    title = f"# {title_case(config.project_name) or config.project_name}"

    if _TITLE_RE.search(text):
        text = _TITLE_RE.sub(lambda _m: title, text, count=1)
    else:
        text = f"{title}\n\n{text}"

    text = _EXISTING_SECTION_RE.sub("", text, count=1)
    section = render_included_section(config, renderer)

    match = _H2_RE.search(text)
    if match is None:
        return text.rstrip("\n") + "\n\n" + section
    return text[: match.start()] + section + text[match.start():]
