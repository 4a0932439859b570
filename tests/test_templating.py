"""Tests for the placeholder and conditional-block template engine."""

from __future__ import annotations

import pytest

from mdsite.errors import TemplateSyntaxError
from mdsite.templating import (
    Conditional,
    Literal,
    Variable,
    compile_template,
    render_template,
)


def test_placeholders_are_replaced_with_values() -> None:
    out = render_template("<h1>{{title}}</h1><p>{{author}}</p>", {
        "title": "Notes",
        "author": "Ada",
    })
    assert out == "<h1>Notes</h1><p>Ada</p>"


def test_unknown_placeholders_are_left_verbatim() -> None:
    assert render_template("<h1>{{title}}</h1>", {}) == "<h1>{{title}}</h1>"


@pytest.mark.parametrize(
    ("value", "expected"),
    [(True, "true"), (False, "false"), (3, "3"), (2.0, "2"), (2.5, "2.5")],
)
def test_scalar_values_are_stringified(value: object, expected: str) -> None:
    assert render_template("{{value}}", {"value": value}) == expected


def test_values_are_inserted_without_escaping() -> None:
    """HTML produced by the Markdown converter passes through untouched."""
    html = "<p>Tom &amp; <em>Jerry</em></p>"
    assert render_template("<main>{{content}}</main>", {"content": html}) == (
        f"<main>{html}</main>"
    )


def test_truthy_block_keeps_inner_content() -> None:
    out = render_template("{{#show}}<p>inner</p>{{/show}}", {"show": True})
    assert out == "<p>inner</p>"


@pytest.mark.parametrize("data", [{"show": False}, {"show": ""}, {"show": 0}, {}])
def test_falsy_or_missing_block_is_removed(data: dict[str, object]) -> None:
    out = render_template("a{{#show}}<p>inner</p>{{/show}}b", data)
    assert out == "ab"


def test_block_content_spans_lines_and_sees_placeholders() -> None:
    template = "{{#draft}}\n<aside>{{title}} is a draft</aside>\n{{/draft}}"
    out = render_template(template, {"draft": True, "title": "Notes"})
    assert out == "\n<aside>Notes is a draft</aside>\n"


def test_substituted_values_are_not_rescanned() -> None:
    """A value that looks like a placeholder stays literal in the output."""
    out = render_template("{{content}}", {"content": "{{title}}", "title": "X"})
    assert out == "{{title}}"


def test_mismatched_block_tags_are_left_literal() -> None:
    template = "{{#a}}x{{/b}}"
    assert render_template(template, {"a": True, "b": True}) == template


def test_nested_blocks_with_different_names() -> None:
    template = "{{#a}}A{{#b}}B{{/b}}{{/a}}"
    assert render_template(template, {"a": True, "b": False}) == "A"
    assert render_template(template, {"a": True, "b": True}) == "AB"
    assert render_template(template, {"a": False, "b": True}) == ""


def test_nested_blocks_with_the_same_name_are_rejected() -> None:
    with pytest.raises(TemplateSyntaxError) as excinfo:
        compile_template("{{#a}}x{{#a}}y{{/a}}z{{/a}}", name="page.html")
    assert excinfo.value.position == 7
    assert "{{#a}}" in str(excinfo.value)


def test_compiled_template_structure() -> None:
    template = compile_template("<h1>{{title}}</h1>{{#x}}!{{/x}}", name="t.html")
    assert template.name == "t.html"
    assert template.instructions == (
        Literal("<h1>"),
        Variable("title", "{{title}}"),
        Literal("</h1>"),
        Conditional("x", (Literal("!"),)),
    )


def test_rendering_is_repeatable() -> None:
    """A compiled template renders the same output for the same data."""
    template = compile_template("{{#draft}}[draft] {{/draft}}{{title}}")
    data = {"draft": True, "title": "Notes"}
    assert template.render(data) == template.render(data) == "[draft] Notes"
