"""Cyclopts CLI entrypoint for building mdsite static pages.

The ``mdsite`` console script defined here renders every Markdown file under
the source directory through its template and writes the HTML tree to the
output directory. Options fall back to ``MDSITE_*`` environment variables and
then to ``mdsite.yaml`` when that file exists in the working directory.

Examples
--------
Build with the default layout (``./src`` -> ``./docs``):

>>> from mdsite.cli import main
>>> main(["build"])  # doctest: +SKIP

Build into a custom directory:

>>> from mdsite.cli import app
>>> app(["build", "--output-dir", "public"])  # doctest: +SKIP
"""

from __future__ import annotations

import dataclasses as dc
import logging
import os
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .builder import SiteBuilder
from .config import SiteConfig, load_site_config

if typ.TYPE_CHECKING:
    import collections.abc as cabc

DEFAULT_CONFIG = Path("mdsite.yaml")
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

logger = logging.getLogger(__name__)

app = App(name="mdsite", config=cyclopts.config.Env("MDSITE_", command=False))  # type: ignore[unknown-argument]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def resolve_config(config: Path | None) -> SiteConfig:
    """Load ``config`` or, when omitted, ``mdsite.yaml`` if it exists.

    Raises
    ------
    FileNotFoundError
        If an explicitly requested configuration file is missing.
    """
    if config is not None:
        return load_site_config(config)
    if DEFAULT_CONFIG.exists():
        return load_site_config(DEFAULT_CONFIG)
    return SiteConfig()


@app.command(help="Build HTML pages from the Markdown source tree.")
def build(
    *,
    config: typ.Annotated[
        Path | None, Parameter(help="Path to site config", env_var="MDSITE_CONFIG")
    ] = None,
    source_dir: typ.Annotated[
        Path | None,
        Parameter(
            help="Override the Markdown source folder", env_var="MDSITE_SOURCE_DIR"
        ),
    ] = None,
    template_dir: typ.Annotated[
        Path | None,
        Parameter(help="Override the template folder", env_var="MDSITE_TEMPLATE_DIR"),
    ] = None,
    output_dir: typ.Annotated[
        Path | None,
        Parameter(help="Override the output folder", env_var="MDSITE_OUTPUT_DIR"),
    ] = None,
    base_url: typ.Annotated[
        str | None,
        Parameter(help="Path prefix for project pages", env_var="MDSITE_BASE_URL"),
    ] = None,
) -> None:
    """Build the site described by the configuration and CLI overrides.

    Parameters
    ----------
    config : Path or None, optional
        Path to the YAML configuration file; ``mdsite.yaml`` is used when it
        exists and no path is given.
    source_dir : Path or None, optional
        Override for the Markdown source directory.
    template_dir : Path or None, optional
        Override for the template directory.
    output_dir : Path or None, optional
        Override for the HTML output directory.
    base_url : str or None, optional
        Override for the deployment path prefix.

    Returns
    -------
    None
        Writes rendered pages and prints one line per written or skipped file.
    """
    site_config = resolve_config(config)
    overrides = {
        key: value
        for key, value in {
            "source_dir": source_dir,
            "template_dir": template_dir,
            "output_dir": output_dir,
            "base_url": base_url,
        }.items()
        if value is not None
    }
    if overrides:
        site_config = dc.replace(site_config, **overrides)

    result = SiteBuilder(site_config).run()
    for path in result.written:
        print(f"wrote {_format_path(path)}")
    for path in result.skipped:
        print(f"skipped {_format_path(path)}")


def main(argv: cabc.Sequence[str] | None = None) -> None:
    """Invoke the Cyclopts application that powers the ``mdsite`` command.

    Logging is configured from ``MDSITE_LOG_LEVEL`` (default ``INFO``). Any
    error escaping a command is logged with its traceback and turned into
    exit status 1.

    Examples
    --------
    >>> main(["build"])  # doctest: +SKIP
    """
    logging.basicConfig(
        level=os.getenv("MDSITE_LOG_LEVEL", "INFO").upper(), format=LOG_FORMAT
    )
    try:
        app(argv)
    except Exception:
        logger.exception("mdsite failed")
        raise SystemExit(1) from None


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
