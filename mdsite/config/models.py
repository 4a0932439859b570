"""Typed dataclasses describing mdsite configuration structures."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path

from mdsite._constants import DEFAULT_TEMPLATE, SLUG_WORD_CHARS
from mdsite.errors import SiteConfigError


@dc.dataclass(slots=True)
class LoaderConfig:
    """Settings for on-demand Markdown loading into page containers."""

    base_path: str = "content/"
    enable_cache: bool = True
    auto_headers: bool = True
    timeout: float = 30.0


@dc.dataclass(slots=True)
class SiteConfig:
    """Build configuration for a single site.

    Attributes
    ----------
    source_dir : Path
        Root of the Markdown source tree.
    template_dir : Path
        Directory whose ``*.html`` files are loaded as templates.
    output_dir : Path
        Root of the generated HTML tree.
    base_url : str
        Path prefix for project-page deployments. Recorded for templates and
        tooling; the build itself does not rewrite links with it.
    default_template : str
        Template used when a document has no ``template`` front-matter key.
    pygments_style : str
        Pygments style applied to highlighted code blocks.
    auto_headers : bool
        Inject slug ids and anchor links into rendered headings.
    slug_word_chars : str
        Regex character-class body of characters kept in heading slugs.
    loader : LoaderConfig
        Defaults for :class:`~mdsite.browser.loader.ContentLoader`.
    """

    source_dir: Path = Path("src")
    template_dir: Path = Path("templates")
    output_dir: Path = Path("docs")
    base_url: str = ""
    default_template: str = DEFAULT_TEMPLATE
    pygments_style: str = "monokai"
    auto_headers: bool = True
    slug_word_chars: str = SLUG_WORD_CHARS
    loader: LoaderConfig = dc.field(default_factory=LoaderConfig)


__all__ = ["LoaderConfig", "SiteConfig", "SiteConfigError"]
