"""
ddlgen – lowers a symbolic protocol grammar into binary-format definitions.
"""

import logging
import sys
from pathlib import Path

path = Path(__file__)
rootpath = str(path.parent.absolute())
sys.path.append(rootpath)

from ddllang.argument_parser.parser import parse_args
from ddllang.errors import DDLLangError
from ddllang.grammar.loader import load_grammar
from ddllang.lowering.document import DDLLang
from ddllang.lowering.index_vars import reset_index_vars

logger = logging.getLogger("ddllang")


def _configure_logging(debug):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def main(argv=None):
    args = parse_args(argv)
    _configure_logging(args.debug)

    # one allocator per run, never reset while lowering
    allocator = reset_index_vars(args.index_prefix)
    try:
        bnf = load_grammar(args.grammar, args.naming_prefix)
        document = DDLLang(bnf, allocator).dump(args.output)
    except DDLLangError as e:
        logger.error("Lowering aborted: %s", e)
        return 1

    if args.echo:
        sys.stdout.write(document)
    return 0


if __name__ == "__main__":
    sys.exit(main())
