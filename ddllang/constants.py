"""
Fixed spellings of the lowered document: definition names, numeral
masks and the operators the renderer writes between parsers.

Values a user may tune per run (prefixes, indentation) are read from the
environment by ``ddllang.config.lowering_config``.
"""

from __future__ import annotations

from typing import Final

# -- Numerals ----------------------------------------------------------------

HEX_DIGITS: Final[int] = 16
U64_MASK: Final[int] = 0xFFFFFFFFFFFFFFFF
I64_MIN: Final[int] = -(1 << 63)
U64_LIMIT: Final[int] = 1 << 64
BYTE_WEIGHT: Final[str] = "256 * "

# -- Definition names --------------------------------------------------------

ENTRY_PRODUCTION_ID: Final[int] = 0
ENTRY_DEFINITION_NAME: Final[str] = "Main"
DEFINITION_NAME_PREFIX: Final[str] = "L"

# -- Output ------------------------------------------------------------------

STDOUT_SENTINEL: Final[str] = "-"
ALTERNATION_OPERATOR: Final[str] = " <| "
