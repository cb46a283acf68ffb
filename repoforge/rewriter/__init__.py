"""Configuration document rewriting for generated projects.

Quick usage::

    from repoforge.rewriter import ConfigRewriter

    report = await ConfigRewriter().rewrite(project_path, config)
    print(report.summary())
"""

from repoforge.rewriter.errors import RewriteError
from repoforge.rewriter.rewriter import ConfigRewriter, RewriteReport
from repoforge.rewriter.templates import TemplateRenderer

__all__ = [
    "ConfigRewriter",
    "RewriteError",
    "RewriteReport",
    "TemplateRenderer",
]
