"""Behaviour tests for building a site from Markdown sources.

These pytest-bdd scenarios are driven by ``features/site_build.feature``. Each
scenario lays out a template directory and source tree under ``tmp_path``, runs
:class:`mdsite.builder.SiteBuilder`, and inspects the written pages with
BeautifulSoup.

Usage
-----
Run ``pytest tests/bdd/test_site_build.py -v`` after installing the test
extra (``pip install -e .[test]``).
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

import pytest
from bs4 import BeautifulSoup
from pytest_bdd import given, parsers, scenarios, then, when

from mdsite.builder import BuildResult, SiteBuilder
from mdsite.config import SiteConfig

FEATURE_FILE = Path(__file__).resolve().parents[2] / "features" / "site_build.feature"
scenarios(FEATURE_FILE)


@pytest.fixture
def scenario_state() -> dict[str, object]:
    """Return a mutable dict used to share scenario state across BDD steps."""
    return {}


@pytest.fixture
def site_config(tmp_path: Path) -> SiteConfig:
    """Return a site configuration rooted in ``tmp_path``."""
    config = SiteConfig(
        source_dir=tmp_path / "src",
        template_dir=tmp_path / "templates",
        output_dir=tmp_path / "docs",
    )
    config.source_dir.mkdir()
    config.template_dir.mkdir()
    return config


def _read_page(config: SiteConfig, relative: str) -> BeautifulSoup:
    path = config.output_dir / relative
    return BeautifulSoup(path.read_text(encoding="utf-8"), "html.parser")


@given("a template directory with base.html and custom.html")
def given_templates(site_config: SiteConfig) -> None:
    """Write a base template and a custom template with distinct wrappers."""
    (site_config.template_dir / "base.html").write_text(
        '<html><body><main class="base">{{content}}</main></body></html>',
        encoding="utf-8",
    )
    (site_config.template_dir / "custom.html").write_text(
        "<html><head><title>{{title}}</title></head>"
        '<body><section class="custom">{{content}}</section></body></html>',
        encoding="utf-8",
    )


@given(parsers.parse('a nested document "{name}" using the "{template}" template'))
def given_nested_document(
    site_config: SiteConfig,
    scenario_state: dict[str, object],
    name: str,
    template: str,
) -> None:
    """Write a Markdown document whose front matter selects ``template``."""
    path = site_config.source_dir / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        f'---\ntitle: "Setup guide"\ntemplate: {template}\n---\n'
        "# Setup\n\nInstall **everything**.\n",
        encoding="utf-8",
    )
    scenario_state["document"] = path


@given(parsers.parse('a document "{name}" without front matter'))
def given_plain_document(site_config: SiteConfig, name: str) -> None:
    """Write a Markdown document that falls back to the default template."""
    (site_config.source_dir / name).write_text("# Welcome\n", encoding="utf-8")


@when("I build the site")
def when_build(site_config: SiteConfig, scenario_state: dict[str, object]) -> None:
    """Run the builder and keep its result for later assertions."""
    scenario_state["result"] = SiteBuilder(site_config).run()


@then(parsers.parse('"{relative}" is wrapped in the custom template'))
def then_custom_wrapper(site_config: SiteConfig, relative: str) -> None:
    """Verify the rendered body sits inside the custom template's section."""
    section = _read_page(site_config, relative).select_one("section.custom")
    assert section is not None, "expected the custom template wrapper"
    heading = section.find("h1")
    assert heading is not None
    assert heading.get("id") == "setup"
    assert "everything" in section.get_text()


@then(parsers.parse('"{relative}" has the title from its front matter'))
def then_title(site_config: SiteConfig, relative: str) -> None:
    """Verify the ``title`` placeholder received the front-matter value."""
    soup = _read_page(site_config, relative)
    assert soup.title is not None
    assert soup.title.get_text() == "Setup guide"


@then(parsers.parse('no page is written for "{name}"'))
def then_not_written(
    site_config: SiteConfig, scenario_state: dict[str, object], name: str
) -> None:
    """Verify the document was skipped and produced no output file."""
    output = (site_config.output_dir / name).with_suffix(".html")
    assert not output.exists()
    result = typ.cast("BuildResult", scenario_state["result"])
    assert scenario_state["document"] in result.skipped


@then(parsers.parse('"{relative}" is wrapped in the base template'))
def then_base_wrapper(site_config: SiteConfig, relative: str) -> None:
    """Verify the default template was applied to a document without front matter."""
    main = _read_page(site_config, relative).select_one("main.base")
    assert main is not None, "expected the base template wrapper"
    assert main.get_text(strip=True).endswith("Welcome")
