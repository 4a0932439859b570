"""Static site build pipeline.

:class:`SiteBuilder` loads every template from the template directory once,
walks the Markdown source tree, and renders each document through the template
named in its front matter. Output files mirror the source tree with ``.md``
replaced by ``.html``, and the Pygments stylesheet for highlighted code
blocks is written to ``codehilite.css`` at the output root.

Example
-------
>>> from mdsite.builder import SiteBuilder
>>> from mdsite.config import SiteConfig
>>> result = SiteBuilder(SiteConfig()).run()  # doctest: +SKIP
>>> [path.name for path in result.written]  # doctest: +SKIP
['index.html', 'guide.html']
"""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ
from pathlib import Path

from ._constants import (
    CONTENT_KEY,
    HTML_SUFFIX,
    MARKDOWN_SUFFIX,
    STYLESHEET_NAME,
    TEMPLATE_KEY,
)
from .frontmatter import parse_front_matter
from .renderer import HtmlContentRenderer
from .templating import Template, compile_template

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .config import SiteConfig

logger = logging.getLogger(__name__)


@dc.dataclass(frozen=True, slots=True)
class Document:
    """Markdown source file read from the source tree."""

    source_path: Path
    raw_text: str


@dc.dataclass(slots=True)
class BuildResult:
    """Outcome of a build run.

    Attributes
    ----------
    written : list[Path]
        Output files produced, in walk order.
    skipped : list[Path]
        Source files skipped because their template was not loaded.
    stylesheet : Path or None
        Code highlighting CSS written beside the pages, or ``None`` when no
        page was written.
    """

    written: list[Path] = dc.field(default_factory=list)
    skipped: list[Path] = dc.field(default_factory=list)
    stylesheet: Path | None = None


def output_path_for(relative_source: Path) -> Path:
    """Return the output path for a source path relative to the source root.

    Examples
    --------
    >>> output_path_for(Path("guides/setup.md")).as_posix()
    'guides/setup.html'
    """
    return relative_source.with_name(
        relative_source.name.removesuffix(MARKDOWN_SUFFIX) + HTML_SUFFIX
    )


def iter_markdown_files(root: Path) -> cabc.Iterator[Path]:
    """Yield Markdown files below ``root`` depth-first in lexical order.

    Raises
    ------
    FileNotFoundError
        If ``root`` does not exist.
    """
    for item in sorted(root.iterdir(), key=lambda path: path.name):
        if item.is_dir():
            yield from iter_markdown_files(item)
        elif item.name.endswith(MARKDOWN_SUFFIX):
            yield item


class SiteBuilder:
    """Render a Markdown source tree into HTML pages."""

    def __init__(
        self, config: SiteConfig, *, renderer: HtmlContentRenderer | None = None
    ) -> None:
        """Initialize the builder with site configuration.

        Parameters
        ----------
        config : SiteConfig
            Source, template, and output directories plus rendering options.
        renderer : HtmlContentRenderer, optional
            Markdown renderer; defaults to one configured from ``config``.
        """
        self.config = config
        self.renderer = renderer or HtmlContentRenderer(
            config.pygments_style, word_chars=config.slug_word_chars
        )
        self.templates: dict[str, Template] = {}

    def load_templates(self) -> dict[str, Template]:
        """Compile every ``*.html`` file in the template directory by file name."""
        templates: dict[str, Template] = {}
        for path in sorted(self.config.template_dir.iterdir()):
            if path.is_file() and path.name.endswith(HTML_SUFFIX):
                text = path.read_text(encoding="utf-8")
                templates[path.name] = compile_template(text, name=path.name)
        logger.debug(
            "loaded %d templates from %s", len(templates), self.config.template_dir
        )
        self.templates = templates
        return templates

    def run(self) -> BuildResult:
        """Build every Markdown document under the source directory.

        Returns
        -------
        BuildResult
            Written output paths and skipped source paths.

        Raises
        ------
        FileNotFoundError
            If the source or template directory is missing.
        FrontMatterError
            If a document opens a front-matter block without closing it.
        TemplateSyntaxError
            If a template nests blocks with the same name.
        """
        logger.info("building %s -> %s", self.config.source_dir, self.config.output_dir)
        self.config.output_dir.mkdir(parents=True, exist_ok=True)
        self.load_templates()
        result = BuildResult()
        source_root = self.config.source_dir
        for path in iter_markdown_files(source_root):
            document = Document(path, path.read_text(encoding="utf-8"))
            written = self.build_document(document, path.relative_to(source_root))
            if written is None:
                result.skipped.append(path)
            else:
                result.written.append(written)
        if result.written:
            result.stylesheet = self.write_stylesheet()
        logger.info(
            "build finished: %d written, %d skipped",
            len(result.written),
            len(result.skipped),
        )
        return result

    def write_stylesheet(self) -> Path:
        """Write the Pygments CSS for highlighted code into the output directory."""
        path = self.config.output_dir / STYLESHEET_NAME
        path.write_text(self.renderer.stylesheet, encoding="utf-8")
        logger.info("created %s", STYLESHEET_NAME)
        return path

    def build_document(self, document: Document, relative_path: Path) -> Path | None:
        """Render ``document`` and write it under the output directory.

        Returns
        -------
        Path or None
            Output path, or ``None`` when the requested template is missing.
        """
        logger.info("processing %s", relative_path.as_posix())
        parsed = parse_front_matter(document.raw_text)
        template_name = str(
            parsed.front_matter.get(TEMPLATE_KEY) or self.config.default_template
        )
        template = self.templates.get(template_name)
        if template is None:
            logger.warning(
                "template %s not found for %s; skipping",
                template_name,
                relative_path.as_posix(),
            )
            return None

        content_html = self.renderer.markdown(
            parsed.body, auto_headers=self.config.auto_headers
        )
        data = {**parsed.front_matter, CONTENT_KEY: content_html}
        html = template.render(data)

        output_path = self.config.output_dir / output_path_for(relative_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(html, encoding="utf-8")
        logger.info("created %s", output_path_for(relative_path).as_posix())
        return output_path


__all__ = [
    "BuildResult",
    "Document",
    "SiteBuilder",
    "iter_markdown_files",
    "output_path_for",
]
