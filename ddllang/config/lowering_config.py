"""
Lowering configuration module.

Values are read from the environment once, at import time, so a run
always sees a single consistent configuration. The CLI may still
override the prefixes for one run through ``--index-prefix`` and
``--naming-prefix``.
"""

import logging
import os

_config_logger = logging.getLogger("ddllang.config")

DEFAULT_INDENT_WIDTH = 2


def _read_indent(raw):
    """Parse a ``DDL_INDENT`` value, warning and falling back to the default."""
    try:
        width = int(raw)
    except ValueError:
        width = -1
    if width < 0:
        _config_logger.warning("Invalid DDL_INDENT %r, using %d", raw, DEFAULT_INDENT_WIDTH)
        return DEFAULT_INDENT_WIDTH
    return width


# Prefix of fresh index variables, e.g. ``ii0``, ``ii1`` ...
INDEX_VAR_PREFIX = os.environ.get("DDL_INDEX_VAR_PREFIX", "ii")

# Constants whose name starts with this prefix mark naming equalities
NAMING_PREFIX = os.environ.get("DDL_NAMING_PREFIX", "name_")

INDENT_WIDTH = _read_indent(os.environ.get("DDL_INDENT", str(DEFAULT_INDENT_WIDTH)))


def space(levels):
    """Return the indentation string for *levels* indentation units."""
    return " " * (INDENT_WIDTH * levels)

