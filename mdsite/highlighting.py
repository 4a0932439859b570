"""Pygments-backed code highlighting for rendered Markdown trees.

:class:`CodeHighlighter` is the single integration point used by both the
site builder and the page content loader. It finds ``<pre><code>`` blocks in a
BeautifulSoup tree, highlights them with Pygments, and swaps each block for a
``<div class="codehilite" data-language="...">`` wrapper. The module also
registers a small PlantUML grammar so sequence diagrams embedded as code
render with keyword, string, and arrow highlighting.
"""

from __future__ import annotations

import typing as typ
from html import escape

from bs4 import BeautifulSoup
from pygments import highlight
from pygments.formatters.html import HtmlFormatter
from pygments.lexer import RegexLexer, bygroups
from pygments.lexers import get_lexer_by_name
from pygments.token import Comment, Keyword, Name, Operator, String, Text, Whitespace
from pygments.util import ClassNotFound

if typ.TYPE_CHECKING:
    from bs4 import Tag
    from pygments.lexer import Lexer

LANGUAGE_CLASS_PREFIXES = ("language-", "lang-")


class PlantUmlLexer(RegexLexer):
    """Lexer for PlantUML sequence and activity diagrams."""

    name = "PlantUML"
    aliases: typ.ClassVar[list[str]] = ["plantuml", "puml"]
    filenames: typ.ClassVar[list[str]] = ["*.puml", "*.plantuml"]

    tokens: typ.ClassVar[dict[str, list[typ.Any]]] = {
        "root": [
            (r"\s+", Whitespace),
            (r"'.*", Comment.Single),
            (r"@\w+", Keyword.Pseudo),
            (
                r"(note)(\s+)(left|right|top|bottom)(\s+)(of)(\s+)(\"[^\"]*\")",
                bygroups(
                    Keyword,
                    Whitespace,
                    Keyword,
                    Whitespace,
                    Keyword,
                    Whitespace,
                    String,
                ),
            ),
            (r"(title)(\s+)([^\n]+)", bygroups(Keyword, Whitespace, String)),
            (
                r"\b(startuml|enduml|title|actor|participant|boundary|control|"
                r"entity|database|collections|queue|as)\b",
                Keyword,
            ),
            (r"\b(activate|deactivate|create|destroy)\b", Keyword.Reserved),
            (
                r"\b(alt|else|end|opt|loop|par|break|critical|group)\b",
                Keyword.Reserved,
            ),
            (r'"[^"]*"', String.Double),
            (r"-->>|->>|-->|->|<<--|<<-|<-", Operator),
            (r"[A-Za-z_]\w*", Name),
            (r".", Text),
        ],
    }


_EXTRA_LEXERS: dict[str, type[RegexLexer]] = {
    alias: PlantUmlLexer for alias in PlantUmlLexer.aliases
}


def resolve_lexer(language: str | None) -> Lexer:
    """Return a lexer for ``language``, falling back to plain text.

    Parameters
    ----------
    language : str or None
        Fence label such as ``"python"`` or ``"plantuml"``.

    Returns
    -------
    Lexer
        Registered project lexer, Pygments lexer, or the ``text`` lexer when
        the name is unknown.
    """
    name = (language or "text").lower()
    extra = _EXTRA_LEXERS.get(name)
    if extra is not None:
        return extra()
    try:
        return get_lexer_by_name(name)
    except ClassNotFound:
        return get_lexer_by_name("text")


def _code_language(code: Tag) -> str | None:
    classes = code.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    for css_class in classes:
        for prefix in LANGUAGE_CLASS_PREFIXES:
            if css_class.startswith(prefix):
                return css_class[len(prefix) :]
    return None


class CodeHighlighter:
    """Highlight ``<pre><code>`` blocks inside BeautifulSoup trees."""

    def __init__(self, style: str = "monokai") -> None:
        self.style = style
        self._formatter = HtmlFormatter(style=style, cssclass="codehilite")

    @property
    def stylesheet(self) -> str:
        """Return the CSS used for highlighted code blocks."""
        return self._formatter.get_style_defs(".codehilite")

    def highlight_code(self, code: str, language: str | None = None) -> str:
        """Render ``code`` into highlighted HTML tagged with its language."""
        lang = language or "text"
        html = highlight(code, resolve_lexer(lang), self._formatter)
        safe_lang = escape(lang, quote=True)
        return html.replace(
            '<div class="codehilite">',
            f'<div class="codehilite" data-language="{safe_lang}">',
            1,
        )

    def highlight_all(self, soup: BeautifulSoup) -> int:
        """Highlight every code block in the document; return the block count."""
        return self.highlight_under(soup)

    def highlight_under(self, root: Tag) -> int:
        """Highlight code blocks below ``root`` only; return the block count."""
        count = 0
        for code in list(root.select("pre > code")):
            pre = code.parent
            if pre is None or pre.find_parent("div", class_="codehilite"):
                continue
            html = self.highlight_code(code.get_text(), _code_language(code))
            fragment = BeautifulSoup(html, "html.parser")
            replacement = fragment.find("div")
            if replacement is None:  # pragma: no cover - formatter always wraps
                continue
            pre.replace_with(replacement.extract())
            count += 1
        return count


__all__ = ["CodeHighlighter", "PlantUmlLexer", "resolve_lexer"]
