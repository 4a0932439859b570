"""Headless controllers for pages that render Markdown on demand.

The controllers in this subpackage operate on a :class:`Page`, a parsed HTML
document paired with scroll position, geometry, and explicit event
subscriptions:

- :class:`ContentLoader` fetches Markdown into page containers.
- :class:`TocController` maintains the table of contents and scroll
  affordances.

:func:`initialize_page` performs the page-ready wiring: highlight every code
block on the page, then attach the table of contents.
"""

from __future__ import annotations

import typing as typ

from .loader import ContentCache, ContentLoader, ImageLightbox, LoadOutcome
from .page import Event, Page, Rect, ScrollRequest, StaticLayout, Subscription
from .toc import TocController, TocEntry

if typ.TYPE_CHECKING:
    from mdsite.highlighting import CodeHighlighter


def initialize_page(
    page: Page, *, highlighter: CodeHighlighter | None = None
) -> TocController:
    """Highlight the page's code blocks and attach a :class:`TocController`."""
    if highlighter is not None:
        highlighter.highlight_all(page.soup)
    controller = TocController(page)
    controller.attach()
    return controller


__all__ = [
    "ContentCache",
    "ContentLoader",
    "Event",
    "ImageLightbox",
    "LoadOutcome",
    "Page",
    "Rect",
    "ScrollRequest",
    "StaticLayout",
    "Subscription",
    "TocController",
    "TocEntry",
    "initialize_page",
]
