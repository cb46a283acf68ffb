"""Config rewriter -- applies feature-conditional edits to the template's
configuration documents.

Every document is read once, transformed by a pure function, and written
back once, even when no edit fired.  The JSON manifests are mandatory; the
deployment workflow and README are optional and skipped when absent.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from ..config import GenerationConfig, GeneratorSettings
from . import package_manifest, task_pipeline
from .errors import RewriteError
from .readme import rewrite_readme
from .templates import TemplateRenderer
from .workflow import rewrite_workflow


@dataclass
class RewriteReport:
    """What the rewriter touched in one run."""

    written: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    removed_sections: list[str] = field(default_factory=list)

    def summary(self) -> str:
        parts = [f"updated {', '.join(self.written)}" if self.written else "no documents updated"]
        if self.skipped:
            parts.append(f"skipped missing {', '.join(self.skipped)}")
        if self.removed_sections:
            parts.append(f"removed {len(self.removed_sections)} workflow section(s)")
        return "; ".join(parts)


@dataclass(frozen=True)
class _Document:
    path: str
    required: bool
    transform: Callable[[str, GenerationConfig], str]


class ConfigRewriter:
    """Rewrites package.json, turbo.json, the deploy workflow and README.md."""

    def __init__(
        self,
        settings: GeneratorSettings | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.settings = settings or GeneratorSettings()
        self.renderer = renderer or TemplateRenderer()
        self._removed_sections: list[str] = []

    def documents(self) -> list[_Document]:
        return [
            _Document(package_manifest.DOCUMENT, True, package_manifest.rewrite_text),
            _Document(task_pipeline.DOCUMENT, True, task_pipeline.rewrite_text),
            _Document(self.settings.workflow_path, False, self._rewrite_workflow),
            _Document("README.md", False, self._rewrite_readme),
        ]

    async def rewrite(self, destination: str | Path, config: GenerationConfig) -> RewriteReport:
        """Rewrite every known document under *destination*.

        Raises:
            RewriteError: If a mandatory document is missing or malformed, or
                any document cannot be read or written.
        """
        dest = Path(destination)
        report = RewriteReport()
        self._removed_sections = []

        for doc in self.documents():
            path = dest / doc.path
            if not path.is_file():
                if doc.required:
                    raise RewriteError(doc.path, "required document is missing")
                report.skipped.append(doc.path)
                continue

            try:
                original = await asyncio.to_thread(path.read_text, encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                raise RewriteError(doc.path, f"could not read: {exc}") from exc

            updated = doc.transform(original, config)

            try:
                await asyncio.to_thread(path.write_text, updated, encoding="utf-8")
            except OSError as exc:
                raise RewriteError(doc.path, f"could not write: {exc}") from exc
            report.written.append(doc.path)

        report.removed_sections = list(self._removed_sections)
        return report

    # -- Text document adapters --------------------------------------------

    def _rewrite_workflow(self, text: str, config: GenerationConfig) -> str:
        updated, removed = rewrite_workflow(text, config)
        self._removed_sections.extend(removed)
        return updated

    def _rewrite_readme(self, text: str, config: GenerationConfig) -> str:
        return rewrite_readme(text, config, self.renderer)
