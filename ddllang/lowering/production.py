"""
Production lowerer: one grammar production -> one target definition.

Symbolic interval bounds are bound to fresh index variables so that the
guards printed after the alternation refer to the same names the
bindings introduce.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from ddllang.config.lowering_config import space
from ddllang.constants import ALTERNATION_OPERATOR, DEFINITION_NAME_PREFIX
from ddllang.errors import MalformedGrammarError
from ddllang.expr.model import Expr, conjuncts, is_true
from ddllang.expr.substitute import Substitution, substitute
from ddllang.grammar.bnf import ConstantBound, Interval, Production, ProductionRef, SymbolicBound
from ddllang.lowering.index_vars import IndexVarAllocator, default_allocator
from ddllang.lowering.renderer import render

_lower_logger = logging.getLogger("ddllang.lower")


def _header(production: Production) -> str:
    return (
        f"def {production.name} = \n"
        + space(1) + "block\n"
        + space(2) + "let len = Len\n"
    )


def _classify(bound) -> str:
    if isinstance(bound, ConstantBound):
        return "constant"
    if isinstance(bound, SymbolicBound):
        return "symbolic"
    if bound is None:
        raise MalformedGrammarError("interval bound is unset")
    raise MalformedGrammarError(f"unknown interval bound {bound!r}")


class _ProductionLowerer:
    """Per-production lowering state: emitted bindings and substitution."""

    def __init__(self, production: Production, allocator: IndexVarAllocator) -> None:
        self.production = production
        self.allocator = allocator
        self.bindings: List[str] = []
        self.substitution: Substitution = []

    def _bind(self, bound_expr: Expr) -> None:
        var = self.allocator.allocate()
        line = space(2) + "let " + render(var) + " = " + render(bound_expr) + "\n"
        _lower_logger.debug(line.rstrip("\n"))
        self.bindings.append(line)
        self.substitution.append((bound_expr, var))

    def _lower_interval(self, interval: Interval) -> None:
        from_kind = _classify(interval.from_)
        to_kind = _classify(interval.to)
        # constant/constant needs no name in this definition
        if from_kind == "symbolic":
            self._bind(interval.from_.expr)
        if to_kind == "symbolic":
            self._bind(interval.to.expr)

    def _scan_alternative(self, items) -> List[int]:
        conjunction: List[int] = []
        for item in items:
            if isinstance(item, ProductionRef):
                conjunction.append(item.id)
            elif isinstance(item, Interval):
                self._lower_interval(item)
            else:
                raise MalformedGrammarError(
                    f"unknown rhs item {item!r} in production {self.production.id}"
                )
        return conjunction

    def _alternation(self, conjunctions: List[List[int]]) -> str:
        parsers = []
        for conjunction in conjunctions:
            refs = "".join(f"{DEFINITION_NAME_PREFIX}{ref}; " for ref in conjunction)
            parsers.append("{ " + refs + "}")
        return space(2) + ALTERNATION_OPERATOR.join(parsers) + "\n"

    def _guards(self) -> List[str]:
        guards = []
        for assertion in self.production.assertions:
            for conjunct in conjuncts(assertion):
                if is_true(conjunct):
                    continue
                text = render(substitute(conjunct, self.substitution))
                if text == "":
                    # naming equalities render to nothing
                    continue
                guards.append("\n" + space(2) + "(" + text + ") is true")
        return guards

    def lower(self) -> str:
        conjunctions: List[List[int]] = []
        for alternative in self.production.alternatives:
            conjunction = self._scan_alternative(alternative)
            if conjunction:
                conjunctions.append(conjunction)

        code = _header(self.production)
        code += "".join(self.bindings)
        code += self._alternation(conjunctions)
        code += "".join(self._guards())
        code += "\n\n"
        _lower_logger.debug("lowered %s:\n%s", self.production.name, code)
        return code


def lower_production(production: Production,
                     allocator: Optional[IndexVarAllocator] = None) -> str:
    """Lower *production* to the text of one target definition.

    Fresh index variables come from *allocator*, or from the process-wide
    allocator when none is given.
    """
    if allocator is None:
        allocator = default_allocator()
    return _ProductionLowerer(production, allocator).lower()

