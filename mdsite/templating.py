"""String-substitution templates with single-level conditional blocks.

Templates understand three markers:

- ``{{name}}`` is replaced with the string form of ``data[name]``; unknown
  names are left in place.
- ``{{#name}}`` ... ``{{/name}}`` keeps its inner content only when
  ``data[name]`` is truthy.

Template text is scanned once into a list of instructions. Values are inserted
verbatim and never rescanned, so HTML produced by the Markdown converter can be
passed straight through as ``content``.

Example
-------
>>> from mdsite.templating import render_template
>>> render_template("<h1>{{title}}</h1>{{#draft}}<em>draft</em>{{/draft}}",
...                 {"title": "Notes", "draft": False})
'<h1>Notes</h1>'
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ

from .errors import TemplateSyntaxError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

TAG_PATTERN = re.compile(r"\{\{([#/]?)(\w+)\}\}")


@dc.dataclass(frozen=True, slots=True)
class _Token:
    kind: str
    name: str
    text: str
    position: int


@dc.dataclass(frozen=True, slots=True)
class Literal:
    """Text copied to the output unchanged."""

    text: str


@dc.dataclass(frozen=True, slots=True)
class Variable:
    """Placeholder replaced by a data value when the key is present."""

    name: str
    source: str


@dc.dataclass(frozen=True, slots=True)
class Conditional:
    """Block whose body is rendered only when ``name`` is truthy."""

    name: str
    body: tuple[Instruction, ...]


Instruction = Literal | Variable | Conditional


def _tokenize(text: str) -> list[_Token]:
    tokens: list[_Token] = []
    cursor = 0
    for match in TAG_PATTERN.finditer(text):
        if match.start() > cursor:
            tokens.append(_Token("text", "", text[cursor : match.start()], cursor))
        kind = {"": "var", "#": "open", "/": "close"}[match.group(1)]
        tokens.append(_Token(kind, match.group(2), match.group(0), match.start()))
        cursor = match.end()
    if cursor < len(text):
        tokens.append(_Token("text", "", text[cursor:], cursor))
    return tokens


def _find_close(tokens: list[_Token], start: int, stop: int, name: str) -> int | None:
    """Return the index of the nearest close tag for ``name`` before ``stop``."""
    opened_at = tokens[start].position
    for index in range(start + 1, stop):
        token = tokens[index]
        if token.name != name:
            continue
        if token.kind == "close":
            return index
        if token.kind == "open":
            msg = (
                f"Block '{{{{#{name}}}}}' at offset {opened_at} is reopened at "
                f"offset {token.position} before it is closed; nested blocks "
                "with the same name are not supported."
            )
            raise TemplateSyntaxError(msg, position=token.position)
    return None


def _parse(tokens: list[_Token], start: int, stop: int) -> tuple[Instruction, ...]:
    instructions: list[Instruction] = []
    index = start
    while index < stop:
        token = tokens[index]
        if token.kind == "var":
            instructions.append(Variable(token.name, token.text))
        elif token.kind == "open":
            close = _find_close(tokens, index, stop, token.name)
            if close is not None:
                body = _parse(tokens, index + 1, close)
                instructions.append(Conditional(token.name, body))
                index = close + 1
                continue
            instructions.append(Literal(token.text))
        else:
            instructions.append(Literal(token.text))
        index += 1
    return tuple(instructions)


@dc.dataclass(frozen=True, slots=True)
class Template:
    """Compiled template ready to render against flat data mappings.

    Attributes
    ----------
    name : str
        Identifier used in error messages, typically the template file name.
    instructions : tuple[Instruction, ...]
        Instruction list produced by :func:`compile_template`.
    """

    name: str
    instructions: tuple[Instruction, ...]

    def render(self, data: cabc.Mapping[str, object]) -> str:
        """Render the template against ``data``."""
        parts: list[str] = []
        _emit(self.instructions, data, parts)
        return "".join(parts)


def _emit(
    instructions: cabc.Iterable[Instruction],
    data: cabc.Mapping[str, object],
    parts: list[str],
) -> None:
    for instruction in instructions:
        match instruction:
            case Literal(text=text):
                parts.append(text)
            case Variable(name=name, source=source):
                parts.append(format_value(data[name]) if name in data else source)
            case Conditional(name=name, body=body):
                if data.get(name):
                    _emit(body, data, parts)


def format_value(value: object) -> str:
    """Return the text inserted for ``value`` by a placeholder.

    Examples
    --------
    >>> format_value(True), format_value(3.0), format_value(2.5)
    ('true', '3', '2.5')
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def compile_template(text: str, *, name: str = "<string>") -> Template:
    """Scan ``text`` into a :class:`Template`.

    Raises
    ------
    TemplateSyntaxError
        If a block is reopened with the same name before it is closed.
    """
    tokens = _tokenize(text)
    return Template(name=name, instructions=_parse(tokens, 0, len(tokens)))


def render_template(template: str, data: cabc.Mapping[str, object]) -> str:
    """Compile ``template`` and render it against ``data`` in one step."""
    return compile_template(template).render(data)


__all__ = [
    "Conditional",
    "Instruction",
    "Literal",
    "Template",
    "Variable",
    "compile_template",
    "format_value",
    "render_template",
]
