"""Load and validate site configuration YAML for mdsite builds.

This subpackage parses the project's ``mdsite.yaml`` file, maps the accepted
camelCase aliases onto snake_case keys, resolves directories relative to the
configuration file, and produces :class:`SiteConfig` instances that the
builder and page controllers consume. The primary entry point is
:func:`load_site_config`.

Examples
--------
>>> from mdsite.config import SiteConfig
>>> SiteConfig().default_template
'base.html'
"""

from .loader import build_site_config, load_site_config
from .models import LoaderConfig, SiteConfig, SiteConfigError

__all__ = [
    "LoaderConfig",
    "SiteConfig",
    "SiteConfigError",
    "build_site_config",
    "load_site_config",
]
