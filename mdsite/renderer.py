"""Utilities for rendering markdown with heading anchors and highlighted code."""

from __future__ import annotations

import re
import typing as typ

from bs4 import BeautifulSoup
from markdown import Markdown
from markdown.extensions.toc import TocExtension

from ._constants import SLUG_WORD_CHARS
from .highlighting import CodeHighlighter

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from markdown.extensions import Extension

FENCED_INDENT_PATTERN = re.compile(r"^[ ]{1,3}([`~]{3,})", re.MULTILINE)
FENCE_LABEL_PATTERN = re.compile(
    r"^([`~]{3,})([A-Za-z0-9_+#.-]+)?(,[^\r\n]+)$", re.MULTILINE
)
HEADER_ANCHOR_CLASS = "header-anchor"


def make_slugifier(word_chars: str = SLUG_WORD_CHARS) -> cabc.Callable[..., str]:
    """Return a slug function keeping only ``word_chars`` (a regex class body).

    Examples
    --------
    >>> slugify = make_slugifier()
    >>> slugify("Getting Started: the basics!")
    'getting-started-the-basics'
    >>> slugify("Привет, мир")
    'привет-мир'
    """
    pattern = re.compile(f"[^{word_chars}]+")

    def _slugify(text: str, separator: str = "-") -> str:
        return pattern.sub(separator, text.lower()).strip(separator)

    return _slugify


slugify_heading = make_slugifier()


class HtmlContentRenderer:
    """Render markdown into HTML with optional heading anchors."""

    def __init__(
        self,
        pygments_style: str = "monokai",
        *,
        word_chars: str = SLUG_WORD_CHARS,
        highlighter: CodeHighlighter | None = None,
    ) -> None:
        """Initialize a renderer with its highlighting style and slug rules.

        Parameters
        ----------
        pygments_style : str, optional
            Name of the Pygments style used for syntax highlighting. Defaults to
            ``"monokai"``; ignored when ``highlighter`` is supplied.
        word_chars : str, optional
            Regex character-class body listing the characters kept in heading
            slugs; every other run of characters becomes a single hyphen.
        highlighter : CodeHighlighter, optional
            Shared highlighter instance; a new one is created when omitted.
        """
        self.highlighter = highlighter or CodeHighlighter(pygments_style)
        self.slugify = make_slugifier(word_chars)

    @property
    def stylesheet(self) -> str:
        """Return the CSS used for highlighted code blocks."""
        return self.highlighter.stylesheet

    def markdown(
        self, text: str, *, auto_headers: bool = False, highlight: bool = True
    ) -> str:
        """Render markdown into HTML using the configured extensions.

        Parameters
        ----------
        text : str
            Markdown source.
        auto_headers : bool, optional
            When true every heading receives a slug ``id`` and a leading
            ``<a class="header-anchor">#</a>`` link to itself.
        highlight : bool, optional
            When true fenced code blocks are passed through the highlighter.

        Returns
        -------
        str
            Rendered HTML; an empty string for blank input.
        """
        normalized = self._normalize_fenced_blocks(text)
        if not normalized.strip():
            return ""
        extensions: list[Extension | str] = ["fenced_code", "tables", "sane_lists"]
        if auto_headers:
            extensions.append(
                TocExtension(
                    slugify=self.slugify,
                    permalink="#",
                    permalink_class=HEADER_ANCHOR_CLASS,
                    permalink_title="",
                    permalink_leading=True,
                )
            )
        html = Markdown(extensions=extensions).convert(normalized)
        if not highlight:
            return html
        soup = BeautifulSoup(html, "html.parser")
        if not self.highlighter.highlight_all(soup):
            return html
        return str(soup)

    @staticmethod
    def _normalize_fenced_blocks(text: str) -> str:
        without_indent = FENCED_INDENT_PATTERN.sub(r"\1", text)

        def _strip_labels(match: re.Match[str]) -> str:
            fence, language, _extras = match.groups()
            label = language or ""
            return f"{fence}{label}"

        return FENCE_LABEL_PATTERN.sub(_strip_labels, without_indent)


__all__ = [
    "HEADER_ANCHOR_CLASS",
    "HtmlContentRenderer",
    "make_slugifier",
    "slugify_heading",
]
