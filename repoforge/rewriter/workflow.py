"""Deployment workflow (``.github/workflows/deploy.yml``) section removal.

The workflow is treated as text, not parsed as YAML.  Each app-specific
section is identified by two literal markers: a start marker somewhere on
the first line of the section and an end marker closing its last line.  The
whole span is removed, marker lines included, along with one trailing blank
separator line.  A section whose markers are not found is left alone.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from ..config import DeploymentTarget, GenerationConfig, UnitId


@dataclass(frozen=True)
class DeploymentSection:
    """A span of the workflow that only applies to one app.

    ``start_also`` is a second literal that must follow ``start`` on the same
    line.  ``end_is_whole_line`` requires the end marker to be the only content of
    its line (heredoc ``EOF``, shell ``fi``); otherwise the end line only has
    to end with the marker.
    """

    name: str
    start: str
    end: str
    end_is_whole_line: bool = False
    start_also: str = ""

    def pattern(self) -> re.Pattern[str]:
        start_line = rf"^[^\n]*{re.escape(self.start)}[^\n]*"
        if self.start_also:
            start_line += rf"{re.escape(self.start_also)}[^\n]*"
        start_line += r"\n"
        if self.end_is_whole_line:
            end_line = rf"^[ \t]*{re.escape(self.end)}[ \t]*(?:\n|\Z)"
        else:
            end_line = rf"^[^\n]*(?<!\w){re.escape(self.end)}[ \t]*(?:\n|\Z)"
        return re.compile(
            start_line + r"(?:[^\n]*\n)*?" + end_line + r"(?:[ \t]*\n)?",
            re.MULTILINE,
        )


DEPLOYMENT_SECTIONS: dict[UnitId, tuple[DeploymentSection, ...]] = {
    UnitId.ADMIN: (
        DeploymentSection(
            name="Build admin app",
            start="- name: Build admin app",
            end="pnpm --filter admin build",
        ),
        DeploymentSection(
            name="Create Dockerfile for admin app",
            start="- name: Create Dockerfile for admin app",
            end="EOF",
            end_is_whole_line=True,
        ),
        DeploymentSection(
            name="Push admin app image",
            start="DEPLOY_ADMIN",
            start_also="admin app",
            end="fi",
            end_is_whole_line=True,
        ),
        DeploymentSection(
            name="Deploy admin app to Cloud Run",
            start="- name: Deploy admin app to Cloud Run",
            end="GOOGLE_CLOUD_BUCKET_NAME:latest",
        ),
    ),
}


def remove_section(text: str, section: DeploymentSection) -> tuple[str, int]:
    """Delete every occurrence of *section*; return the new text and the count."""
    return section.pattern().subn("", text)


def sections_to_remove(config: GenerationConfig) -> list[DeploymentSection]:
    sections: list[DeploymentSection] = []
    for unit, unit_sections in DEPLOYMENT_SECTIONS.items():
        if not config.includes(unit) or config.deployment_target == DeploymentTarget.NONE:
            sections.extend(unit_sections)
    return sections


def rewrite_workflow(text: str, config: GenerationConfig) -> tuple[str, list[str]]:
    """Strip sections for excluded apps.

    Returns:
        The rewritten text and the names of the sections actually removed.
    """
    removed: list[str] = []
    for section in sections_to_remove(config):
        text, count = remove_section(text, section)
        if count:
            removed.append(section.name)
    return text, removed
