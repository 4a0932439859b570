"""Load site configuration YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from .models import LoaderConfig, SiteConfig, SiteConfigError

# camelCase spellings accepted alongside the snake_case keys.
KEY_ALIASES: dict[str, str] = {
    "sourceDirectory": "source_dir",
    "templateDirectory": "template_dir",
    "outputDirectory": "output_dir",
    "baseUrl": "base_url",
    "defaultTemplate": "default_template",
    "pygmentsStyle": "pygments_style",
    "autoHeaders": "auto_headers",
    "basePath": "base_path",
    "enableCache": "enable_cache",
}


def _normalize_keys(raw: typ.Mapping[str, typ.Any]) -> dict[str, typ.Any]:
    """Return ``raw`` with camelCase aliases mapped to snake_case keys."""
    return {KEY_ALIASES.get(str(key), str(key)): value for key, value in raw.items()}


def _expect(value: object, kind: type | tuple[type, ...], key: str) -> typ.Any:
    """Return ``value`` when it has the expected type, otherwise fail loudly."""
    if isinstance(value, bool) and kind in (int, float, (int, float)):
        msg = f"Configuration key '{key}' must be a number, not a boolean."
        raise SiteConfigError(msg)
    if not isinstance(value, kind):
        kinds = kind if isinstance(kind, tuple) else (kind,)
        names = "/".join(k.__name__ for k in kinds)
        msg = f"Configuration key '{key}' must be of type {names}."
        raise SiteConfigError(msg)
    return value


def _setting(
    data: typ.Mapping[str, typ.Any],
    defaults: object,
    key: str,
    kind: type | tuple[type, ...],
    prefix: str = "",
) -> typ.Any:
    """Return ``data[key]`` (or the default) after checking its type."""
    return _expect(data.get(key, getattr(defaults, key)), kind, prefix + key)


def _resolve_dir(
    data: typ.Mapping[str, typ.Any], defaults: SiteConfig, key: str, root: Path
) -> Path:
    path = Path(_expect(data.get(key, str(getattr(defaults, key))), str, key))
    if path.is_absolute():
        return path
    return root / path


def _build_loader_config(payload: typ.Mapping[str, typ.Any] | None) -> LoaderConfig:
    """Build a LoaderConfig from the optional ``loader`` mapping."""
    base = LoaderConfig()
    if payload is None:
        return base
    if not isinstance(payload, dict):
        msg = "Configuration key 'loader' must be a mapping."
        raise SiteConfigError(msg)
    data = _normalize_keys(payload)
    return LoaderConfig(
        base_path=_setting(data, base, "base_path", str, "loader."),
        enable_cache=_setting(data, base, "enable_cache", bool, "loader."),
        auto_headers=_setting(data, base, "auto_headers", bool, "loader."),
        timeout=float(_setting(data, base, "timeout", (int, float), "loader.")),
    )


def build_site_config(
    raw: typ.Mapping[str, typ.Any], *, root: Path | None = None
) -> SiteConfig:
    """Build a SiteConfig from an already parsed mapping.

    Parameters
    ----------
    raw : Mapping[str, Any]
        Parsed configuration mapping. Unknown keys are ignored.
    root : Path, optional
        Directory that relative paths are resolved against; paths stay
        relative to the working directory when omitted.

    Returns
    -------
    SiteConfig
        Configuration with defaults applied for every missing key.

    Raises
    ------
    SiteConfigError
        If a recognized key holds a value of the wrong type.
    """
    base = SiteConfig()
    data = _normalize_keys(raw)
    root = root or Path()
    return SiteConfig(
        source_dir=_resolve_dir(data, base, "source_dir", root),
        template_dir=_resolve_dir(data, base, "template_dir", root),
        output_dir=_resolve_dir(data, base, "output_dir", root),
        base_url=_expect(data.get("base_url") or base.base_url, str, "base_url"),
        default_template=_setting(data, base, "default_template", str),
        pygments_style=_setting(data, base, "pygments_style", str),
        auto_headers=_setting(data, base, "auto_headers", bool),
        slug_word_chars=_setting(data, base, "slug_word_chars", str),
        loader=_build_loader_config(data.get("loader")),
    )


def load_site_config(path: Path) -> SiteConfig:
    """Load the YAML configuration describing a site build.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML configuration file (for example,
        ``mdsite.yaml``). Relative directories inside it are resolved against
        the file's parent directory.

    Returns
    -------
    SiteConfig
        Parsed site configuration.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    TypeError
        If the top-level YAML structure is not a mapping.
    SiteConfigError
        If a recognized key holds a value of the wrong type.
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> from mdsite.config import load_site_config
    >>> config = load_site_config(Path("mdsite.yaml"))  # doctest: +SKIP
    >>> config.output_dir  # doctest: +SKIP
    PosixPath('docs')
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise TypeError(msg)
    return build_site_config(loaded, root=path.parent)


__all__ = ["KEY_ALIASES", "build_site_config", "load_site_config"]
