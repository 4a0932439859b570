"""Headless page model used by the content loader and TOC controller.

:class:`Page` wraps a BeautifulSoup document together with the pieces of
browser state the controllers depend on: the vertical scroll position, the
viewport height, and element geometry. Event handlers are registered through
:meth:`Page.subscribe`, which returns a :class:`Subscription` handle that the
owner detaches on teardown.

Geometry comes from a layout provider. :class:`StaticLayout` serves fixed
offsets keyed by element ``id`` and is what tests and offline renders use.

Example
-------
>>> page = Page('<h2 id="intro">Intro</h2>', layout=StaticLayout({"intro": 400}))
>>> seen = []
>>> sub = page.subscribe("scroll", lambda event: seen.append(page.scroll_y))
>>> page.scroll_to(120)
>>> sub.detach()
>>> page.scroll_to(10)
>>> seen
[120.0]
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from bs4 import BeautifulSoup

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from bs4 import Tag


def _classes(element: Tag) -> list[str]:
    value = element.get("class") or []
    if isinstance(value, str):
        return value.split()
    return list(value)


def has_class(element: Tag, name: str) -> bool:
    """Return whether ``element`` carries the CSS class ``name``."""
    return name in _classes(element)


def add_class(element: Tag, name: str) -> None:
    """Add the CSS class ``name`` to ``element`` if it is missing."""
    classes = _classes(element)
    if name not in classes:
        element["class"] = [*classes, name]


def remove_class(element: Tag, name: str) -> None:
    """Remove the CSS class ``name`` from ``element`` when present."""
    classes = _classes(element)
    if name in classes:
        classes.remove(name)
        if classes:
            element["class"] = classes
        else:
            del element["class"]


def toggle_class(element: Tag, name: str, *, force: bool) -> None:
    """Add ``name`` when ``force`` is true, remove it otherwise."""
    if force:
        add_class(element, name)
    else:
        remove_class(element, name)


def _style_declarations(element: Tag) -> dict[str, str]:
    declarations: dict[str, str] = {}
    for declaration in str(element.get("style") or "").split(";"):
        name, sep, value = declaration.partition(":")
        if sep and name.strip():
            declarations[name.strip().lower()] = value.strip()
    return declarations


def style_property(element: Tag, name: str) -> str | None:
    """Return the inline style value of ``name`` on ``element``, if set."""
    return _style_declarations(element).get(name)


def set_style_property(element: Tag, name: str, value: str | None) -> None:
    """Set or, with ``None``, remove one inline style declaration.

    Other declarations keep their order; the ``style`` attribute is dropped
    once it holds nothing.
    """
    declarations = _style_declarations(element)
    if value is None:
        declarations.pop(name, None)
    else:
        declarations[name] = value
    if declarations:
        element["style"] = "; ".join(
            f"{key}: {val}" for key, val in declarations.items()
        )
    elif element.has_attr("style"):
        del element["style"]


@dc.dataclass(frozen=True, slots=True)
class Rect:
    """Viewport-relative bounding box of an element."""

    top: float
    bottom: float


class Layout(typ.Protocol):
    """Geometry provider for page elements."""

    def offset_top(self, element: Tag) -> float:
        """Return the element's distance from the top of the document."""
        ...

    def height(self, element: Tag) -> float:
        """Return the element's rendered height."""
        ...

    def is_fixed(self, element: Tag) -> bool:
        """Return whether the element is positioned relative to the viewport."""
        ...


@dc.dataclass(slots=True)
class StaticLayout:
    """Layout backed by fixed offsets keyed by element ``id``.

    Attributes
    ----------
    offsets : dict[str, float]
        Offset of each known element: from the document top, or from the
        viewport top for ids listed in ``fixed``. Unknown elements sit at 0.
    heights : dict[str, float]
        Rendered height of each known element; ``default_height`` otherwise.
    fixed : set[str]
        Ids of elements that do not move when the window scrolls.
    default_height : float
        Height used for elements missing from ``heights``.
    """

    offsets: dict[str, float] = dc.field(default_factory=dict)
    heights: dict[str, float] = dc.field(default_factory=dict)
    fixed: set[str] = dc.field(default_factory=set)
    default_height: float = 20.0

    def offset_top(self, element: Tag) -> float:
        """Return the configured offset for ``element`` or 0."""
        return self.offsets.get(str(element.get("id", "")), 0.0)

    def height(self, element: Tag) -> float:
        """Return the configured height for ``element``."""
        return self.heights.get(str(element.get("id", "")), self.default_height)

    def is_fixed(self, element: Tag) -> bool:
        """Return whether ``element`` is listed in ``fixed``."""
        return str(element.get("id", "")) in self.fixed


@dc.dataclass(slots=True)
class Event:
    """Dispatched event passed to subscribed handlers."""

    type: str
    target: Tag | None = None
    default_prevented: bool = False

    def prevent_default(self) -> None:
        """Cancel the default action associated with the event."""
        self.default_prevented = True


Handler = typ.Callable[[Event], None]


@dc.dataclass(frozen=True, slots=True)
class ScrollRequest:
    """Scroll operation requested by a controller.

    ``container`` is ``None`` for window scrolls and the scrolled element for
    scrolls inside an overflow container.
    """

    top: float
    behavior: str
    target: Tag | None = None
    container: Tag | None = None


class Subscription:
    """Handle for a registered event handler; ``detach`` is idempotent."""

    def __init__(
        self, page: Page, key: tuple[str, int | None], handler: Handler
    ) -> None:
        self._page = page
        self._key = key
        self.handler = handler
        self.active = True

    def detach(self) -> None:
        """Stop delivering events to the handler."""
        if not self.active:
            return
        self.active = False
        self._page._remove(self._key, self)


class Page:
    """Parsed document plus scroll position, viewport, and event wiring."""

    def __init__(
        self,
        document: str | BeautifulSoup,
        *,
        layout: Layout | None = None,
        viewport_height: float = 800.0,
    ) -> None:
        """Initialize the page.

        Parameters
        ----------
        document : str or BeautifulSoup
            HTML text or an already parsed tree.
        layout : Layout, optional
            Geometry provider; an empty :class:`StaticLayout` when omitted.
        viewport_height : float, optional
            Height of the visible window, used for ``block="center"`` scrolls.
        """
        if isinstance(document, BeautifulSoup):
            self.soup = document
        else:
            self.soup = BeautifulSoup(document, "html.parser")
        self.layout: Layout = layout or StaticLayout()
        self.viewport_height = viewport_height
        self.scroll_y = 0.0
        self.scroll_requests: list[ScrollRequest] = []
        self._container_scroll: dict[int, float] = {}
        self._handlers: dict[tuple[str, int | None], list[Subscription]] = {}

    @property
    def body(self) -> Tag:
        """Return ``<body>``, creating it for fragment documents."""
        body = self.soup.body
        if body is None:
            body = self.soup.new_tag("body")
            self.soup.append(body)
        return body

    def get_element_by_id(self, element_id: str) -> Tag | None:
        """Return the element with ``id`` equal to ``element_id``."""
        return self.soup.find(id=element_id)

    def subscribe(
        self, event_type: str, handler: Handler, *, target: Tag | None = None
    ) -> Subscription:
        """Register ``handler`` for ``event_type`` on ``target`` (or the window)."""
        key = (event_type, id(target) if target is not None else None)
        subscription = Subscription(self, key, handler)
        self._handlers.setdefault(key, []).append(subscription)
        return subscription

    def _remove(self, key: tuple[str, int | None], subscription: Subscription) -> None:
        handlers = self._handlers.get(key, [])
        if subscription in handlers:
            handlers.remove(subscription)
        if not handlers:
            self._handlers.pop(key, None)

    def listener_count(self, event_type: str, *, target: Tag | None = None) -> int:
        """Return the number of active handlers for ``event_type`` on ``target``."""
        key = (event_type, id(target) if target is not None else None)
        return len(self._handlers.get(key, []))

    def dispatch(self, event_type: str, *, target: Tag | None = None) -> Event:
        """Deliver an event to every handler registered for it.

        Events aimed at an element are delivered to that element's handlers
        and then to each ancestor's handlers, matching DOM bubbling.
        """
        event = Event(event_type, target)
        chain: cabc.Iterable[Tag | None]
        if target is None:
            chain = [None]
        else:
            chain = [target, *target.parents]
        for node in chain:
            key = (event_type, id(node) if node is not None else None)
            for subscription in list(self._handlers.get(key, [])):
                if subscription.active:
                    subscription.handler(event)
        return event

    def click(self, element: Tag) -> Event:
        """Dispatch a click on ``element`` and return the event."""
        return self.dispatch("click", target=element)

    def scroll_to(self, top: float, *, behavior: str = "auto") -> None:
        """Scroll the window to ``top`` and dispatch a ``scroll`` event."""
        self.scroll_y = max(0.0, float(top))
        self.scroll_requests.append(ScrollRequest(self.scroll_y, behavior))
        self.dispatch("scroll")

    def scroll_into_view(
        self, element: Tag, *, behavior: str = "auto", block: str = "start"
    ) -> None:
        """Scroll so ``element`` is visible, aligned per ``block``."""
        top = self.layout.offset_top(element)
        if block == "center":
            top -= (self.viewport_height - self.layout.height(element)) / 2
        elif block == "end":
            top -= self.viewport_height - self.layout.height(element)
        self.scroll_y = max(0.0, top)
        self.scroll_requests.append(ScrollRequest(self.scroll_y, behavior, element))
        self.dispatch("scroll")

    def bounding_rect(self, element: Tag) -> Rect:
        """Return ``element``'s viewport-relative rect for the current scroll."""
        top = self.layout.offset_top(element)
        if not self.layout.is_fixed(element):
            top -= self.scroll_y
        for ancestor in element.parents:
            top -= self._container_scroll.get(id(ancestor), 0.0)
        return Rect(top=top, bottom=top + self.layout.height(element))

    def scroll_within(
        self,
        container: Tag,
        element: Tag,
        *,
        behavior: str = "auto",
        block: str = "center",
    ) -> None:
        """Scroll ``container`` so ``element`` is aligned inside it.

        Only the container's own scroll offset changes; the window position
        stays put and no ``scroll`` event is dispatched.
        """
        outer = self.bounding_rect(container)
        inner = self.bounding_rect(element)
        if block == "center":
            delta = (inner.top + inner.bottom) / 2 - (outer.top + outer.bottom) / 2
        elif block == "end":
            delta = inner.bottom - outer.bottom
        else:
            delta = inner.top - outer.top
        offset = self._container_scroll.get(id(container), 0.0) + delta
        self._container_scroll[id(container)] = offset
        self.scroll_requests.append(ScrollRequest(offset, behavior, element, container))

    def resize(self, viewport_height: float) -> None:
        """Change the viewport height and dispatch a ``resize`` event."""
        self.viewport_height = viewport_height
        self.dispatch("resize")


__all__ = [
    "Event",
    "Layout",
    "Page",
    "Rect",
    "ScrollRequest",
    "StaticLayout",
    "Subscription",
    "add_class",
    "has_class",
    "remove_class",
    "set_style_property",
    "style_property",
    "toggle_class",
]
