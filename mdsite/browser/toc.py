"""Table of contents and scroll affordances for rendered article pages.

:class:`TocController` builds the ``#toc`` navigation list from every heading
that carries an ``id``, keeps the entry for the section in view marked
``active``, toggles the ``#scrollToTop`` button, and switches the
``#articleToc`` panel into compact mode while the reader scrolls down.

All behaviour is wired through explicit subscriptions created by
:meth:`TocController.attach` and removed by :meth:`TocController.detach`.
"""

from __future__ import annotations

import dataclasses as dc
import functools
import logging
import typing as typ

from mdsite._constants import (
    COMPACT_TOC_THRESHOLD,
    SCROLL_TO_TOP_THRESHOLD,
    TOC_LOOKAHEAD,
)
from mdsite.renderer import HEADER_ANCHOR_CLASS

from .page import (
    add_class,
    remove_class,
    set_style_property,
    style_property,
    toggle_class,
)

if typ.TYPE_CHECKING:
    from bs4 import Tag

    from .page import Event, Page, Subscription

logger = logging.getLogger(__name__)

TOC_LIST_ID = "toc"
TOC_PANEL_ID = "articleToc"
SCROLL_TO_TOP_ID = "scrollToTop"
HEADING_SELECTOR = "h1, h2, h3, h4"
MIN_VISIBLE_ENTRIES = 3


@dc.dataclass(frozen=True, slots=True)
class TocEntry:
    """Navigation link paired with the heading it points at."""

    link: Tag
    heading: Tag


def heading_text(heading: Tag) -> str:
    """Return the heading's text without the injected ``#`` anchor marker."""
    parts = [
        text
        for text in heading.find_all(string=True)
        if text.find_parent("a", class_=HEADER_ANCHOR_CLASS) is None
    ]
    return " ".join("".join(parts).split())


class TocController:
    """Drive the article table of contents for a :class:`Page`."""

    def __init__(
        self,
        page: Page,
        *,
        lookahead: float = TOC_LOOKAHEAD,
        top_threshold: float = SCROLL_TO_TOP_THRESHOLD,
        compact_threshold: float = COMPACT_TOC_THRESHOLD,
    ) -> None:
        """Initialize the controller.

        Parameters
        ----------
        page : Page
            Page holding the headings and the ``#toc``, ``#articleToc``, and
            ``#scrollToTop`` elements.
        lookahead : float, optional
            Distance below the scroll position at which a heading counts as
            reached.
        top_threshold : float, optional
            Scroll distance beyond which the scroll-to-top button is shown.
        compact_threshold : float, optional
            Scroll distance beyond which scrolling down compacts the panel.
        """
        self.page = page
        self.lookahead = lookahead
        self.top_threshold = top_threshold
        self.compact_threshold = compact_threshold
        self.entries: list[TocEntry] = []
        self.active: TocEntry | None = None
        self.last_scroll_top = 0.0
        self._items: list[Tag] = []
        self._subscriptions: list[Subscription] = []
        self._toc: Tag | None = None
        self._panel: Tag | None = None
        self._button: Tag | None = None
        self._hidden_display: str | None = None
        self._hid_panel = False

    @property
    def attached(self) -> bool:
        """Return whether the controller currently has live subscriptions."""
        return bool(self._subscriptions)

    @property
    def hidden(self) -> bool:
        """Return whether the TOC panel is hidden."""
        if self._panel is None:
            return True
        return style_property(self._panel, "display") == "none"

    def attach(self) -> bool:
        """Build the navigation list and subscribe to page events.

        Returns
        -------
        bool
            ``False`` when the ``#toc`` list or ``#articleToc`` panel is
            missing from the page; nothing is wired in that case.
        """
        if self.attached:
            return True
        self._toc = self.page.get_element_by_id(TOC_LIST_ID)
        self._panel = self.page.get_element_by_id(TOC_PANEL_ID)
        self._button = self.page.get_element_by_id(SCROLL_TO_TOP_ID)
        if self._toc is None or self._panel is None:
            logger.error(
                "table of contents needs #%s and #%s; not attaching",
                TOC_LIST_ID,
                TOC_PANEL_ID,
            )
            return False

        self._build_entries(self._toc)
        if len(self.entries) < MIN_VISIBLE_ENTRIES:
            self._hidden_display = style_property(self._panel, "display")
            set_style_property(self._panel, "display", "none")
            self._hid_panel = True

        subscribe = self.page.subscribe
        self._subscriptions.append(subscribe("scroll", self._on_scroll))
        self._subscriptions.append(subscribe("resize", self._on_resize))
        for entry in self.entries:
            self._subscriptions.append(
                subscribe(
                    "click",
                    functools.partial(self._on_link_click, entry),
                    target=entry.link,
                )
            )
        if self._button is not None:
            self._subscriptions.append(
                subscribe("click", self._on_scroll_to_top, target=self._button)
            )

        self.update_active()
        self.toggle_scroll_to_top()
        return True

    def detach(self) -> None:
        """Remove subscriptions and generated items, and restore the panel style."""
        for subscription in self._subscriptions:
            subscription.detach()
        self._subscriptions.clear()
        for item in self._items:
            item.decompose()
        self._items.clear()
        self.entries.clear()
        self.active = None
        if self._hid_panel and self._panel is not None:
            set_style_property(self._panel, "display", self._hidden_display)
            self._hid_panel = False

    def _build_entries(self, toc: Tag) -> None:
        soup = self.page.soup
        for heading in self.page.soup.select(HEADING_SELECTOR):
            heading_id = heading.get("id")
            if not heading_id:
                continue
            level = int(heading.name[1])
            item = soup.new_tag("li", attrs={"class": ["toc-item"]})
            link = soup.new_tag(
                "a",
                attrs={
                    "href": f"#{heading_id}",
                    "id": f"toc-link-{heading_id}",
                    "class": ["toc-link", f"toc-level-{level}"],
                },
            )
            link.string = heading_text(heading)
            item.append(link)
            toc.append(item)
            self._items.append(item)
            self.entries.append(TocEntry(link=link, heading=heading))

    def find_active(self) -> TocEntry | None:
        """Return the last entry whose heading sits at or above the lookahead line."""
        position = self.page.scroll_y + self.lookahead
        for entry in reversed(self.entries):
            if position >= self.page.layout.offset_top(entry.heading):
                return entry
        return None

    def update_active(self) -> TocEntry | None:
        """Mark the entry for the section in view as ``active``.

        When the active link lies outside the visible part of the TOC panel,
        the panel is smooth-scrolled to centre it.
        """
        current = self.find_active()
        for entry in self.entries:
            remove_class(entry.link, "active")
        self.active = current
        if current is None or self._panel is None:
            return current

        add_class(current.link, "active")
        link_rect = self.page.bounding_rect(current.link)
        panel_rect = self.page.bounding_rect(self._panel)
        if link_rect.bottom > panel_rect.bottom or link_rect.top < panel_rect.top:
            self.page.scroll_within(
                self._panel, current.link, behavior="smooth", block="center"
            )
        return current

    def toggle_scroll_to_top(self) -> None:
        """Show the scroll-to-top button once the page is scrolled far enough."""
        if self._button is not None:
            toggle_class(
                self._button, "show", force=self.page.scroll_y > self.top_threshold
            )

    def _on_scroll(self, _event: Event) -> None:
        scroll_top = self.page.scroll_y
        if self._panel is not None:
            compact = (
                scroll_top > self.last_scroll_top
                and scroll_top > self.compact_threshold
            )
            toggle_class(self._panel, "toc-compact", force=compact)
        self.last_scroll_top = scroll_top
        self.update_active()
        self.toggle_scroll_to_top()

    def _on_resize(self, _event: Event) -> None:
        self.update_active()

    def _on_link_click(self, entry: TocEntry, event: Event) -> None:
        event.prevent_default()
        target = self.page.get_element_by_id(str(entry.link.get("href", ""))[1:])
        if target is not None:
            top = self.page.layout.offset_top(target) - self.lookahead
            self.page.scroll_to(top, behavior="smooth")

    def _on_scroll_to_top(self, _event: Event) -> None:
        self.page.scroll_to(0, behavior="smooth")


__all__ = ["TocController", "TocEntry", "heading_text"]
