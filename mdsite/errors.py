"""Exception hierarchy shared by the mdsite build and page pipelines."""

from __future__ import annotations


class MdsiteError(Exception):
    """Base class for every error raised deliberately by mdsite."""


class FrontMatterError(MdsiteError, ValueError):
    """Raised when a document's front-matter block cannot be parsed.

    Attributes
    ----------
    line : int or None
        1-based line number where the problem was detected, when known.
    """

    def __init__(self, message: str, *, line: int | None = None) -> None:
        super().__init__(message)
        self.line = line


class TemplateSyntaxError(MdsiteError, ValueError):
    """Raised when a template uses constructs the renderer rejects."""

    def __init__(self, message: str, *, position: int | None = None) -> None:
        super().__init__(message)
        self.position = position


class SiteConfigError(MdsiteError, ValueError):
    """Raised when the site configuration is invalid or incomplete."""


__all__ = [
    "FrontMatterError",
    "MdsiteError",
    "SiteConfigError",
    "TemplateSyntaxError",
]
