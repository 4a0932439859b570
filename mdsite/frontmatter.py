r"""Split ``key: value`` front matter from Markdown documents.

Documents may open with a block delimited by ``---`` lines. Each line inside
the block that looks like ``key: value`` contributes one scalar entry; values
are coerced to booleans, numbers, or strings. Anything else inside the block is
ignored. Documents without an opening delimiter pass through untouched.

Example
-------
>>> from mdsite.frontmatter import parse_front_matter
>>> parsed = parse_front_matter('---\ntitle: "Hello"\ndraft: false\n---\nBody')
>>> parsed.front_matter
{'title': 'Hello', 'draft': False}
>>> parsed.body
'Body'
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ

from ._constants import FRONT_MATTER_DELIMITER
from .errors import FrontMatterError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

Scalar = bool | int | float | str

ENTRY_PATTERN = re.compile(r"^([^:]+):\s*(.*)$")
NUMBER_PATTERN = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")
INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")


@dc.dataclass(frozen=True, slots=True)
class ParsedDocument:
    """Front matter mapping and the Markdown body that follows it.

    Attributes
    ----------
    front_matter : dict[str, Scalar]
        Parsed entries; empty when the document has no header block.
    body : str
        Text after the closing delimiter, or the whole document when no
        header block is present.
    """

    front_matter: dict[str, Scalar]
    body: str


def coerce_scalar(value: str) -> Scalar:
    """Convert a raw front-matter value into a bool, number, or string.

    Parameters
    ----------
    value : str
        Value text with surrounding whitespace already removed.

    Returns
    -------
    Scalar
        ``True``/``False`` for the literals ``true``/``false``, an ``int`` or
        ``float`` for numeric text, the unquoted text for double-quoted
        values, and the raw text otherwise.
    """
    if value == "true":
        return True
    if value == "false":
        return False
    if NUMBER_PATTERN.match(value):
        if INTEGER_PATTERN.match(value):
            return int(value)
        return float(value)
    if value.startswith('"') and value.endswith('"'):
        return value[1:-1]
    return value


def _is_delimiter(line: str) -> bool:
    return line.rstrip("\r") == FRONT_MATTER_DELIMITER


def parse_front_matter(text: str) -> ParsedDocument:
    """Split ``text`` into its front-matter mapping and Markdown body.

    Parameters
    ----------
    text : str
        Raw document text.

    Returns
    -------
    ParsedDocument
        Parsed entries and the remaining body. When the first line is not the
        ``---`` delimiter the mapping is empty and the body is ``text``.

    Raises
    ------
    FrontMatterError
        If the opening delimiter is never closed.
    """
    lines = text.split("\n")
    if not _is_delimiter(lines[0]):
        return ParsedDocument(front_matter={}, body=text)

    front_matter: dict[str, Scalar] = {}
    for index in range(1, len(lines)):
        line = lines[index].rstrip("\r")
        if _is_delimiter(line):
            body = "\n".join(lines[index + 1 :])
            return ParsedDocument(front_matter=front_matter, body=body)
        match = ENTRY_PATTERN.match(line)
        if match:
            key = match.group(1).strip()
            front_matter[key] = coerce_scalar(match.group(2).strip())

    msg = (
        "Front matter opened on line 1 is never closed with "
        f"'{FRONT_MATTER_DELIMITER}'."
    )
    raise FrontMatterError(msg, line=1)


def _format_scalar(value: Scalar) -> str:
    """Render a scalar so that ``coerce_scalar`` yields it back."""
    match value:
        case bool():
            return "true" if value else "false"
        case int() | float():
            return repr(value)
        case str() if value == value.strip() and coerce_scalar(value) == value:
            return value
        case _:
            return f'"{value}"'


def serialize_front_matter(front_matter: cabc.Mapping[str, Scalar]) -> str:
    """Render ``front_matter`` as a delimited block ending with a newline.

    Examples
    --------
    >>> print(serialize_front_matter({"title": "Intro", "order": 2}), end="")
    ---
    title: Intro
    order: 2
    ---
    """
    lines = [FRONT_MATTER_DELIMITER]
    lines.extend(
        f"{key}: {_format_scalar(value)}" for key, value in front_matter.items()
    )
    lines.append(FRONT_MATTER_DELIMITER)
    return "\n".join(lines) + "\n"


__all__ = [
    "ParsedDocument",
    "Scalar",
    "coerce_scalar",
    "parse_front_matter",
    "serialize_front_matter",
]
