"""Error type shared by the document rewriters."""

from __future__ import annotations


class RewriteError(Exception):
    """Raised when a configuration document cannot be rewritten.

    ``document`` is the path of the document relative to the project root.
    """

    def __init__(self, document: str, message: str):
        self.document = document
        super().__init__(f"{document}: {message}")
