"""
Document driver: helper primitives followed by every lowered production.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Union

from ddllang.config.lowering_config import space
from ddllang.constants import STDOUT_SENTINEL
from ddllang.grammar.bnf import BNF
from ddllang.lowering.index_vars import IndexVarAllocator, default_allocator
from ddllang.lowering.production import lower_production

_document_logger = logging.getLogger("ddllang.document")


def _discard_partial(file_name: Union[str, Path]) -> None:
    try:
        Path(file_name).unlink()
    except OSError as exc:
        _document_logger.warning("could not remove partial file <%s>: %s", file_name, exc)


def helper_definitions() -> str:
    """Return the ``Select``, ``Len`` and ``Extract`` primitive definitions."""
    s = "def Select (N : uint 64) =\n"
    s += space(1) + "block\n"
    s += space(2) + "let cur = GetStream\n"
    s += space(2) + "let a = bytesOfStream cur\n"
    s += space(2) + "(Index a N) as uint 64\n\n"

    s += "def Len =\n"
    s += space(1) + "block\n"
    s += space(2) + "let cur = GetStream\n"
    s += space(2) + "let a = bytesOfStream cur\n"
    s += space(2) + "length a\n\n"

    s += "def Extract (High : uint 64) (Low : uint 64) (N : uint 64) =\n"
    s += space(1) + "block\n"
    s += space(2) + "let mask = (1 << (High - Low + 1)) - 1\n"
    s += space(2) + "(N >> Low) .&. mask\n\n"
    return s


class DDLLang:
    """Lowers a whole grammar into one definition document."""

    def __init__(self, bnf: BNF, allocator: Optional[IndexVarAllocator] = None) -> None:
        self.bnf = bnf
        self.allocator = allocator if allocator is not None else default_allocator()

    def code_chunks(self) -> List[str]:
        chunks = [helper_definitions()]
        for production in self.bnf.get_productions():
            chunks.append(lower_production(production, self.allocator))
        return chunks

    def render_document(self) -> str:
        """Render the complete document text, exactly as :meth:`dump` writes it."""
        return "".join(chunk + "\n" for chunk in self.code_chunks())

    def dump(self, file_name: Union[str, Path]) -> str:
        """Render the document and write it to *file_name*.

        ``-`` means no persistence. A destination that cannot be opened, or
        a write that fails part way, is reported and leaves no file behind;
        the rendered text is returned either way.
        """
        # everything is rendered before the destination is touched
        document = self.render_document()
        if str(file_name) == STDOUT_SENTINEL:
            _document_logger.debug("destination is '-', nothing persisted")
            return document
        try:
            stream = open(file_name, "w", encoding="utf-8")
        except OSError as exc:
            _document_logger.error("[Error] Cannot open the file <%s> for writing. (%s)", file_name, exc)
            return document
        try:
            with stream:
                stream.write(document)
        except OSError as exc:
            _document_logger.error("[Error] Failed to write the file <%s>. (%s)", file_name, exc)
            _discard_partial(file_name)
            return document
        _document_logger.info("%s dumped!", file_name)
        return document
