"""
Grammar file loading.

A grammar file is a JSON document. Interval bounds and assertions are
SMT-LIB2 terms, parsed by Z3 against the document's ``declarations``
preamble and converted into the expression model.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import z3

from ddllang.errors import GrammarLoadError
from ddllang.expr.model import Expr
from ddllang.expr.z3_bridge import Z3Converter, make_naming_predicate
from ddllang.grammar.bnf import BNF, Bound, ConstantBound, Interval, Production, ProductionRef, RHSItem, SymbolicBound

_loader_logger = logging.getLogger("ddllang.loader")


class GrammarLoader:
    """Builds a :class:`BNF` from the decoded JSON grammar document."""

    def __init__(self, declarations: str = "", naming_prefix: Optional[str] = None) -> None:
        self.declarations = declarations
        self.converter = Z3Converter(make_naming_predicate(naming_prefix))

    # -- SMT-LIB2 terms ---------------------------------------------------------

    def _parse(self, script: str, text: str) -> z3.ExprRef:
        try:
            parsed = z3.parse_smt2_string(self.declarations + "\n" + script)
        except z3.Z3Exception as exc:
            raise GrammarLoadError(f"cannot parse term {text!r}: {exc}") from exc
        if len(parsed) != 1:
            raise GrammarLoadError(f"expected exactly one term in {text!r}")
        return parsed[0]

    def parse_formula(self, text: str) -> Expr:
        """Parse a Boolean SMT-LIB2 term."""
        return self.converter.convert(self._parse(f"(assert {text})", text))

    def parse_term(self, text: str) -> Expr:
        """Parse an SMT-LIB2 term of any sort."""
        # wrapped in a trivial equality so terms of any sort can be asserted
        wrapper = self._parse(f"(assert (= {text} {text}))", text)
        if not z3.is_eq(wrapper):
            raise GrammarLoadError(f"cannot isolate term {text!r}")
        return self.converter.convert(wrapper.arg(0))

    # -- Grammar structure ------------------------------------------------------

    def _bound(self, value: Any) -> Optional[Bound]:
        if value is None:
            return None
        if isinstance(value, bool):
            raise GrammarLoadError(f"invalid interval bound {value!r}")
        if isinstance(value, int):
            return ConstantBound(value)
        if isinstance(value, str):
            return SymbolicBound(self.parse_term(value))
        raise GrammarLoadError(f"invalid interval bound {value!r}")

    def _item(self, raw: Any) -> RHSItem:
        if not isinstance(raw, dict):
            raise GrammarLoadError(f"invalid rhs item {raw!r}")
        if "production" in raw:
            ref = raw["production"]
            if isinstance(ref, bool) or not isinstance(ref, int):
                raise GrammarLoadError(f"invalid production reference {ref!r}")
            return ProductionRef(ref)
        if "from" in raw or "to" in raw:
            return Interval(self._bound(raw.get("from")), self._bound(raw.get("to")))
        raise GrammarLoadError(f"invalid rhs item {raw!r}")

    def _production(self, raw: Any) -> Production:
        if not isinstance(raw, dict) or "id" not in raw:
            raise GrammarLoadError(f"production without id: {raw!r}")
        if isinstance(raw["id"], bool) or not isinstance(raw["id"], int) or raw["id"] < 0:
            raise GrammarLoadError(f"invalid production id {raw['id']!r}")
        alternatives = [[self._item(item) for item in alt] for alt in raw.get("alternatives", [])]
        assertions = [self.parse_formula(text) for text in raw.get("assertions", [])]
        return Production.create(raw["id"], alternatives, assertions)

    def load(self, document: Dict[str, Any]) -> BNF:
        productions: List[Production] = []
        for raw in document.get("productions", []):
            productions.append(self._production(raw))
        _loader_logger.info("Loaded %d productions", len(productions))
        return BNF.create(productions)


def load_grammar(path: Union[str, Path], naming_prefix: Optional[str] = None) -> BNF:
    """Load the grammar stored in the JSON file at *path*."""
    try:
        document = json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as exc:
        raise GrammarLoadError(f"cannot read grammar file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise GrammarLoadError(f"grammar file {path} is not valid JSON: {exc}") from exc
    if not isinstance(document, dict):
        raise GrammarLoadError(f"grammar file {path} must hold a JSON object")
    loader = GrammarLoader(document.get("declarations", ""), naming_prefix)
    return loader.load(document)
