"""Minimal static-site generator for Markdown with front matter.

The package turns a tree of Markdown files into HTML pages using
string-substitution templates, and ships headless page controllers that load
Markdown into containers and maintain a table of contents.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from mdsite import main
>>> main(["build"])  # doctest: +SKIP
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
