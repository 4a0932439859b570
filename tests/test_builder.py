"""Tests for the site build pipeline.

Each test lays out a small source tree and template directory under
``tmp_path`` and runs :class:`mdsite.builder.SiteBuilder` against it, then
inspects the written HTML with BeautifulSoup.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from bs4 import BeautifulSoup

from mdsite.builder import SiteBuilder, iter_markdown_files, output_path_for
from mdsite.config import SiteConfig
from mdsite.errors import FrontMatterError

BASE_TEMPLATE = (
    "<html><head><title>{{title}}</title></head>"
    "<body>{{#draft}}<p class=\"draft\">Draft</p>{{/draft}}"
    "<main>{{content}}</main></body></html>"
)


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def site(tmp_path: Path) -> SiteConfig:
    """Return a config rooted in ``tmp_path`` with a ``base.html`` template."""
    config = SiteConfig(
        source_dir=tmp_path / "src",
        template_dir=tmp_path / "templates",
        output_dir=tmp_path / "docs",
    )
    config.source_dir.mkdir()
    _write(config.template_dir / "base.html", BASE_TEMPLATE)
    return config


def _soup(path: Path) -> BeautifulSoup:
    return BeautifulSoup(path.read_text(encoding="utf-8"), "html.parser")


def test_document_renders_through_named_template(site: SiteConfig) -> None:
    """The front matter picks the template and the body lands in ``content``."""
    _write(site.template_dir / "custom.html", "<div class=\"custom\">{{content}}</div>")
    _write(
        site.source_dir / "a" / "b.md",
        '---\ntemplate: "custom.html"\n---\n# Title\n\nHello **world**\n',
    )

    result = SiteBuilder(site).run()

    output = site.output_dir / "a" / "b.html"
    assert result.written == [output]
    assert result.skipped == []
    wrapper = _soup(output).select_one("div.custom")
    assert wrapper is not None
    heading = wrapper.find("h1")
    assert heading is not None
    assert heading.get("id") == "title"
    strong = wrapper.select_one("p strong")
    assert strong is not None
    assert strong.get_text() == "world"


def test_front_matter_values_fill_placeholders_and_blocks(site: SiteConfig) -> None:
    _write(site.source_dir / "index.md", "---\ntitle: Home\ndraft: true\n---\nBody\n")
    _write(site.source_dir / "final.md", "---\ntitle: Final\ndraft: false\n---\nBody\n")

    SiteBuilder(site).run()

    index = _soup(site.output_dir / "index.html")
    assert index.title is not None
    assert index.title.get_text() == "Home"
    assert index.select_one("p.draft") is not None
    final = _soup(site.output_dir / "final.html")
    assert final.select_one("p.draft") is None


def test_rendered_body_overrides_content_key(site: SiteConfig) -> None:
    _write(site.source_dir / "page.md", "---\ncontent: overridden\n---\nReal body\n")

    SiteBuilder(site).run()

    html = (site.output_dir / "page.html").read_text(encoding="utf-8")
    assert "overridden" not in html
    assert "<p>Real body</p>" in html


def test_missing_template_skips_document(
    site: SiteConfig, caplog: pytest.LogCaptureFixture
) -> None:
    """A document naming an unknown template is logged and not written."""
    missing = _write(site.source_dir / "missing.md", "---\ntemplate: nope.html\n---\nx\n")
    _write(site.source_dir / "ok.md", "Fine\n")

    with caplog.at_level(logging.WARNING, logger="mdsite.builder"):
        result = SiteBuilder(site).run()

    assert result.skipped == [missing]
    assert result.written == [site.output_dir / "ok.html"]
    assert not (site.output_dir / "missing.html").exists()
    assert any(
        "nope.html" in record.getMessage() and record.levelno == logging.WARNING
        for record in caplog.records
    )


def test_non_markdown_files_are_ignored(site: SiteConfig) -> None:
    _write(site.source_dir / "notes.txt", "not markdown")
    (site.source_dir / "image.png").write_bytes(b"\x89PNG")
    _write(site.source_dir / "page.md", "Text\n")

    result = SiteBuilder(site).run()

    assert result.written == [site.output_dir / "page.html"]
    assert sorted(path.name for path in site.output_dir.iterdir()) == ["codehilite.css", "page.html"]


def test_walk_order_is_lexical_and_depth_first(site: SiteConfig) -> None:
    for name in ("c.md", "b.md", "a/x.md", "a/deeper/y.md"):
        _write(site.source_dir / name, "Text\n")

    found = [
        path.relative_to(site.source_dir).as_posix()
        for path in iter_markdown_files(site.source_dir)
    ]

    assert found == ["a/deeper/y.md", "a/x.md", "b.md", "c.md"]


def test_only_html_templates_are_loaded(site: SiteConfig) -> None:
    _write(site.template_dir / "README.txt", "{{content}}")
    _write(site.template_dir / "post.html", "{{content}}")

    templates = SiteBuilder(site).load_templates()

    assert sorted(templates) == ["base.html", "post.html"]


def test_highlighting_stylesheet_is_written_beside_pages(site: SiteConfig) -> None:
    _write(site.source_dir / "code.md", "```python\nx = 1\n```\n")

    result = SiteBuilder(site).run()

    block = _soup(site.output_dir / "code.html").select_one("div.codehilite")
    assert block is not None
    assert block.get("data-language") == "python"
    assert result.stylesheet == site.output_dir / "codehilite.css"
    css = result.stylesheet.read_text(encoding="utf-8")
    assert ".codehilite .k" in css


def test_no_stylesheet_without_pages(site: SiteConfig) -> None:
    result = SiteBuilder(site).run()

    assert result.stylesheet is None
    assert list(site.output_dir.iterdir()) == []


@pytest.mark.parametrize(
    ("source", "expected"),
    [
        ("guides/setup.md", "guides/setup.html"),
        (".md", ".html"),
        ("notes/.md", "notes/.html"),
        ("v1.2.md", "v1.2.html"),
    ],
)
def test_output_path_replaces_trailing_md(source: str, expected: str) -> None:
    assert output_path_for(Path(source)).as_posix() == expected


def test_output_directory_is_created(site: SiteConfig) -> None:
    assert not site.output_dir.exists()
    _write(site.source_dir / "deep" / "er" / "page.md", "Text\n")

    SiteBuilder(site).run()

    assert (site.output_dir / "deep" / "er" / "page.html").is_file()


def test_auto_headers_can_be_disabled(site: SiteConfig) -> None:
    site.auto_headers = False
    _write(site.source_dir / "page.md", "## Section\n")

    SiteBuilder(site).run()

    heading = _soup(site.output_dir / "page.html").find("h2")
    assert heading is not None
    assert heading.get("id") is None


def test_unterminated_front_matter_aborts_build(site: SiteConfig) -> None:
    _write(site.source_dir / "broken.md", "---\ntitle: Oops\nBody\n")

    with pytest.raises(FrontMatterError):
        SiteBuilder(site).run()


def test_progress_is_logged(site: SiteConfig, caplog: pytest.LogCaptureFixture) -> None:
    _write(site.source_dir / "guide" / "intro.md", "Text\n")

    with caplog.at_level(logging.INFO, logger="mdsite.builder"):
        SiteBuilder(site).run()

    messages = [record.getMessage() for record in caplog.records]
    assert "processing guide/intro.md" in messages
    assert "created guide/intro.html" in messages
