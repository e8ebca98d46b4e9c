"""
The ``ddlgen`` command line: a grammar file in, a definition document out.

The prefix options override ``DDL_INDEX_VAR_PREFIX`` and
``DDL_NAMING_PREFIX`` for a single run.
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from ddllang.constants import STDOUT_SENTINEL


@dataclass
class DDLGenArgs:
    """Container for parsed CLI arguments."""

    grammar: str = ""
    output: str = STDOUT_SENTINEL
    echo: bool = False
    debug: bool = False
    index_prefix: Optional[str] = None
    naming_prefix: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _build_parser() -> argparse.ArgumentParser:
    """Construct the ``ArgumentParser`` (no side-effects)."""
    parser = argparse.ArgumentParser(
        prog="ddlgen",
        description="ddlgen – lower a symbolic protocol grammar into binary-format definitions",
    )
    parser.add_argument("grammar", help="path to the JSON grammar file")
    parser.add_argument(
        "--output", "-o", type=str, default=STDOUT_SENTINEL,
        help="destination file; '-' renders without writing (default: %(default)s)",
    )
    parser.add_argument("--echo", action="store_true", help="print the rendered definitions to stdout")
    parser.add_argument("--debug", action="store_true", help="trace every rendered fragment")
    parser.add_argument("--index-prefix", type=str, default=None, help="prefix of fresh index variables")
    parser.add_argument("--naming-prefix", type=str, default=None, help="prefix of naming constants")
    return parser


def parse_args(argv=None) -> DDLGenArgs:
    """Parse *argv* (or ``sys.argv``) and return a :class:`DDLGenArgs`."""
    ns = _build_parser().parse_args(argv)
    return DDLGenArgs(
        grammar=ns.grammar,
        output=ns.output,
        echo=ns.echo,
        debug=ns.debug,
        index_prefix=ns.index_prefix,
        naming_prefix=ns.naming_prefix,
    )
