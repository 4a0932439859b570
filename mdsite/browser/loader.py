"""Load Markdown into page containers on demand.

:class:`ContentLoader` fetches a Markdown resource (over HTTP or from the local
filesystem), caches the raw text, renders it with heading anchors, and injects
the HTML into a container element of a :class:`~mdsite.browser.page.Page`.
After injection it highlights code inside the container, intercepts same-page
anchor clicks to smooth-scroll instead of navigating, and marks images lazy
with a click-to-preview overlay. Failures render an inline error panel with a
retry button.

Each container carries a generation token. Only the newest load of a container
may write into it, so a slow response never overwrites a newer one.

Example
-------
>>> from mdsite.browser import ContentLoader, Page
>>> page = Page('<main id="article"></main>')
>>> loader = ContentLoader(page, base_path="https://example.invalid/content/")
>>> loader.load("article", "intro.md")  # doctest: +SKIP
LoadOutcome(container_id='article', resource_path='intro.md', status='loaded', ...)
"""

from __future__ import annotations

import dataclasses as dc
import functools
import logging
import threading
import typing as typ
from pathlib import Path
from urllib.parse import urlsplit

import requests
from bs4 import BeautifulSoup
from jinja2 import Environment, FileSystemLoader, select_autoescape

from mdsite.config import LoaderConfig
from mdsite.renderer import HtmlContentRenderer

if typ.TYPE_CHECKING:
    from bs4 import Tag

    from .page import Event, Page, Subscription

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"
REMOTE_SCHEMES = frozenset({"http", "https"})

LOADED = "loaded"
FAILED = "failed"
SUPERSEDED = "superseded"


class ContentCache:
    """In-memory store of fetched Markdown keyed by resolved resource path."""

    def __init__(self) -> None:
        self._entries: dict[str, str] = {}

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, path: str) -> str | None:
        """Return cached text for ``path`` or ``None``."""
        return self._entries.get(path)

    def store(self, path: str, text: str) -> None:
        """Remember ``text`` as the content of ``path``."""
        self._entries[path] = text

    def invalidate(self, path: str) -> bool:
        """Forget ``path``; return whether an entry was removed."""
        return self._entries.pop(path, None) is not None

    def clear(self) -> None:
        """Forget every cached entry."""
        self._entries.clear()


@dc.dataclass(frozen=True, slots=True)
class LoadOutcome:
    """Result of a :meth:`ContentLoader.load` call.

    Attributes
    ----------
    container_id : str
        Container the load targeted.
    resource_path : str
        Resource path as passed by the caller.
    status : str
        ``"loaded"``, ``"failed"``, or ``"superseded"`` when a newer load of
        the same container started before this one finished.
    from_cache : bool
        Whether the Markdown came from the cache.
    error : str or None
        Failure description for ``"failed"`` outcomes.
    """

    container_id: str
    resource_path: str
    status: str
    from_cache: bool = False
    error: str | None = None


@dc.dataclass(frozen=True, slots=True)
class _LoadRequest:
    resource_path: str
    auto_headers: bool


def _replace_children(container: Tag, html: str) -> None:
    container.clear()
    fragment = BeautifulSoup(html, "html.parser")
    for child in list(fragment.contents):
        container.append(child.extract())


class ImageLightbox:
    """Full-screen overlay previewing a single image."""

    def __init__(self, page: Page, env: Environment) -> None:
        self.page = page
        self.template = env.get_template("image_modal.jinja")
        self._open: dict[int, tuple[Tag, list[Subscription]]] = {}

    @property
    def open_count(self) -> int:
        """Return the number of overlays currently attached to the page."""
        return len(self._open)

    def open(self, src: str, *, alt: str = "") -> Tag:
        """Append an overlay showing ``src`` to the page body and return it."""
        fragment = BeautifulSoup(self.template.render(src=src, alt=alt), "html.parser")
        overlay = fragment.find("div", class_="image-modal")
        if overlay is None:  # pragma: no cover - template guard
            msg = "image_modal.jinja must render a div.image-modal element"
            raise RuntimeError(msg)
        overlay = overlay.extract()
        self.page.body.append(overlay)

        def _on_backdrop(event: Event) -> None:
            if event.target is overlay:
                self.close(overlay)

        subscriptions = [self.page.subscribe("click", _on_backdrop, target=overlay)]
        button = overlay.find("button")
        if button is not None:
            subscriptions.append(
                self.page.subscribe(
                    "click", lambda _event: self.close(overlay), target=button
                )
            )
        self._open[id(overlay)] = (overlay, subscriptions)
        return overlay

    def close(self, overlay: Tag) -> None:
        """Remove ``overlay`` from the page and drop its handlers."""
        entry = self._open.pop(id(overlay), None)
        if entry is None:
            return
        for subscription in entry[1]:
            subscription.detach()
        overlay.decompose()

    def close_all(self) -> None:
        """Close every open overlay."""
        for overlay, _subscriptions in list(self._open.values()):
            self.close(overlay)


class ContentLoader:
    """Fetch, cache, render, and wire Markdown content inside page containers."""

    def __init__(
        self,
        page: Page,
        renderer: HtmlContentRenderer | None = None,
        *,
        config: LoaderConfig | None = None,
        base_path: str | None = None,
        session: requests.Session | None = None,
        cache: ContentCache | None = None,
        templates_dir: Path | None = None,
    ) -> None:
        """Initialize the loader for ``page``.

        Parameters
        ----------
        page : Page
            Page whose containers receive rendered content.
        renderer : HtmlContentRenderer, optional
            Markdown renderer; its highlighter is reused for post-render
            highlighting.
        config : LoaderConfig, optional
            Base path, caching, heading-anchor, and timeout settings.
        base_path : str, optional
            Overrides ``config.base_path``. URLs with an ``http``/``https``
            scheme are fetched with ``requests``; anything else is read from
            the filesystem.
        session : requests.Session, optional
            Session reused for every fetch. A short-lived session is opened
            per request when omitted.
        cache : ContentCache, optional
            Cache owned by this loader; a fresh one is created when omitted.
        templates_dir : Path, optional
            Directory holding the loading, error, and overlay templates.
        """
        self.page = page
        self.config = config or LoaderConfig()
        if base_path is not None:
            self.config = dc.replace(self.config, base_path=base_path)
        self.renderer = renderer or HtmlContentRenderer()
        self.highlighter = self.renderer.highlighter
        self.cache = cache if cache is not None else ContentCache()
        self._session = session
        self.env = Environment(
            loader=FileSystemLoader(str(templates_dir or DEFAULT_TEMPLATES_DIR)),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.lightbox = ImageLightbox(page, self.env)
        self._lock = threading.Lock()
        self._generations: dict[str, int] = {}
        self._requests: dict[str, _LoadRequest] = {}
        self._subscriptions: dict[str, list[Subscription]] = {}

    def load(
        self,
        container_id: str,
        resource_path: str,
        *,
        auto_headers: bool | None = None,
    ) -> LoadOutcome | None:
        """Render ``resource_path`` into the container with id ``container_id``.

        Parameters
        ----------
        container_id : str
            Id of the element that receives the rendered content.
        resource_path : str
            Path of the Markdown resource relative to the base path.
        auto_headers : bool, optional
            Inject heading ids and anchor links; defaults to the configured
            value (``True`` unless overridden).

        Returns
        -------
        LoadOutcome or None
            ``None`` when the container does not exist; otherwise the outcome
            of this call. Fetch failures are reported through the outcome and
            the in-page error panel, never raised.
        """
        container = self.page.get_element_by_id(container_id)
        if container is None:
            logger.error(
                "container #%s not found; load of %s aborted",
                container_id,
                resource_path,
            )
            return None

        headers = self.config.auto_headers if auto_headers is None else auto_headers
        with self._lock:
            generation = self._generations.get(container_id, 0) + 1
            self._generations[container_id] = generation
            self._requests[container_id] = _LoadRequest(resource_path, headers)

        self._release(container_id)
        _replace_children(container, self.env.get_template("loading.jinja").render())

        full_path = self.config.base_path + resource_path
        try:
            text, from_cache = self._read(full_path)
        except (requests.RequestException, OSError, UnicodeDecodeError) as exc:
            if not self._is_current(container_id, generation):
                return self._superseded(container_id, resource_path)
            logger.error("failed to load %s into #%s: %s", full_path, container_id, exc)
            self._show_error(container, container_id, resource_path)
            return LoadOutcome(container_id, resource_path, FAILED, error=str(exc))

        if not self._is_current(container_id, generation):
            return self._superseded(container_id, resource_path)

        html = self.renderer.markdown(text, auto_headers=headers, highlight=False)
        _replace_children(container, html)
        self.post_render(container_id, container)
        return LoadOutcome(container_id, resource_path, LOADED, from_cache=from_cache)

    def retry(self, container_id: str) -> LoadOutcome | None:
        """Repeat the most recent load of ``container_id`` with the same arguments.

        Raises
        ------
        KeyError
            If the container has never been loaded.
        """
        request = self._requests[container_id]
        return self.load(
            container_id, request.resource_path, auto_headers=request.auto_headers
        )

    def post_render(self, container_id: str, container: Tag) -> None:
        """Highlight code and wire link and image handlers inside ``container``."""
        self.highlighter.highlight_under(container)
        subscriptions = self._subscriptions.setdefault(container_id, [])
        for link in container.select('a[href^="#"]'):
            subscriptions.append(
                self.page.subscribe(
                    "click", functools.partial(self._on_anchor_click, link), target=link
                )
            )
        for image in container.find_all("img"):
            image["loading"] = "lazy"
            subscriptions.append(
                self.page.subscribe(
                    "click",
                    functools.partial(self._on_image_click, image),
                    target=image,
                )
            )

    def detach(self) -> None:
        """Drop every handler this loader registered on the page."""
        for container_id in list(self._subscriptions):
            self._release(container_id)
        self.lightbox.close_all()

    def _read(self, full_path: str) -> tuple[str, bool]:
        if self.config.enable_cache:
            cached = self.cache.get(full_path)
            if cached is not None:
                return cached, True
        text = self._fetch(full_path)
        if self.config.enable_cache:
            self.cache.store(full_path, text)
        return text, False

    def _fetch(self, location: str) -> str:
        """Return the text at ``location`` from HTTP or the local filesystem."""
        if urlsplit(location).scheme not in REMOTE_SCHEMES:
            return Path(location).read_text(encoding="utf-8")
        session = self._session or requests.Session()
        try:
            resp = session.get(location, timeout=self.config.timeout)
            resp.raise_for_status()
            return resp.text
        finally:
            if self._session is None:
                session.close()

    def _is_current(self, container_id: str, generation: int) -> bool:
        with self._lock:
            return self._generations.get(container_id) == generation

    @staticmethod
    def _superseded(container_id: str, resource_path: str) -> LoadOutcome:
        logger.debug(
            "discarding superseded load of %s into #%s", resource_path, container_id
        )
        return LoadOutcome(container_id, resource_path, SUPERSEDED)

    def _release(self, container_id: str) -> None:
        for subscription in self._subscriptions.pop(container_id, []):
            subscription.detach()

    def _show_error(
        self, container: Tag, container_id: str, resource_path: str
    ) -> None:
        html = self.env.get_template("load_error.jinja").render(
            container_id=container_id, resource_path=resource_path
        )
        _replace_children(container, html)
        button = container.find("button", class_="retry")
        if button is None:  # pragma: no cover - template guard
            return
        self._subscriptions.setdefault(container_id, []).append(
            self.page.subscribe(
                "click", lambda _event: self.retry(container_id), target=button
            )
        )

    def _on_anchor_click(self, link: Tag, event: Event) -> None:
        event.prevent_default()
        target = self.page.get_element_by_id(str(link.get("href", ""))[1:])
        if target is not None:
            self.page.scroll_into_view(target, behavior="smooth")

    def _on_image_click(self, image: Tag, _event: Event) -> None:
        self.lightbox.open(str(image.get("src", "")), alt=str(image.get("alt", "")))


__all__ = ["ContentCache", "ContentLoader", "ImageLightbox", "LoadOutcome"]
