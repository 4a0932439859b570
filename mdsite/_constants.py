"""Common literal values used across mdsite.

These constants keep delimiters, suffixes, and viewport thresholds in one place
so the builder, page controllers, and tests import the same values.

Examples
--------
>>> from mdsite import _constants
>>> _constants.FRONT_MATTER_DELIMITER
'---'
>>> "guide.md".removesuffix(_constants.MARKDOWN_SUFFIX) + _constants.HTML_SUFFIX
'guide.html'
"""

FRONT_MATTER_DELIMITER = "---"
MARKDOWN_SUFFIX = ".md"
HTML_SUFFIX = ".html"
DEFAULT_TEMPLATE = "base.html"
CONTENT_KEY = "content"
TEMPLATE_KEY = "template"
STYLESHEET_NAME = "codehilite.css"

# Characters kept verbatim in heading slugs; everything else collapses to "-".
SLUG_WORD_CHARS = "A-Za-z0-9_а-яё"

TOC_LOOKAHEAD = 100
SCROLL_TO_TOP_THRESHOLD = 300
COMPACT_TOC_THRESHOLD = 200
