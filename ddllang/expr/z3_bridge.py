"""
Conversion of Z3 ASTs into the closed expression model.

Single Responsibility: classify every Z3 application by declaration kind
and rebuild it as a model node. Rendering never touches Z3 directly.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional, Tuple

import z3

from ddllang.config import lowering_config
from ddllang.errors import MalformedExpressionError
from ddllang.expr.model import (
    Apply, BoolVal, Concat, Distinct, Eq, Expr, Extract, NAry, Neg, Not,
    Num, OpaqueParam, OpKind, Select,
)
from ddllang.constants import I64_MIN, U64_LIMIT

_bridge_logger = logging.getLogger("ddllang.z3_bridge")

NamingPredicate = Callable[[z3.ExprRef], bool]


# ---------------------------------------------------------------------------
# Declaration kind tables
# ---------------------------------------------------------------------------

_NARY_KINDS: Dict[int, OpKind] = {
    z3.Z3_OP_ADD: OpKind.ADD,
    z3.Z3_OP_BADD: OpKind.BADD,
    z3.Z3_OP_SUB: OpKind.SUB,
    z3.Z3_OP_BSUB: OpKind.BSUB,
    z3.Z3_OP_MUL: OpKind.MUL,
    z3.Z3_OP_BMUL: OpKind.BMUL,

    z3.Z3_OP_DIV: OpKind.DIV,
    z3.Z3_OP_IDIV: OpKind.IDIV,
    z3.Z3_OP_BSDIV: OpKind.BSDIV,
    z3.Z3_OP_BSDIV_I: OpKind.BSDIV_I,
    z3.Z3_OP_BUDIV: OpKind.BUDIV,
    z3.Z3_OP_BUDIV_I: OpKind.BUDIV_I,

    z3.Z3_OP_MOD: OpKind.MOD,
    z3.Z3_OP_REM: OpKind.REM,
    z3.Z3_OP_BSMOD: OpKind.BSMOD,
    z3.Z3_OP_BSMOD_I: OpKind.BSMOD_I,
    z3.Z3_OP_BSREM: OpKind.BSREM,
    z3.Z3_OP_BSREM_I: OpKind.BSREM_I,
    z3.Z3_OP_BUREM: OpKind.BUREM,
    z3.Z3_OP_BUREM_I: OpKind.BUREM_I,

    z3.Z3_OP_AND: OpKind.AND,
    z3.Z3_OP_OR: OpKind.OR,

    z3.Z3_OP_GE: OpKind.GE,
    z3.Z3_OP_SGEQ: OpKind.SGEQ,
    z3.Z3_OP_UGEQ: OpKind.UGEQ,
    z3.Z3_OP_LE: OpKind.LE,
    z3.Z3_OP_SLEQ: OpKind.SLEQ,
    z3.Z3_OP_ULEQ: OpKind.ULEQ,
    z3.Z3_OP_GT: OpKind.GT,
    z3.Z3_OP_SGT: OpKind.SGT,
    z3.Z3_OP_UGT: OpKind.UGT,
    z3.Z3_OP_LT: OpKind.LT,
    z3.Z3_OP_SLT: OpKind.SLT,
    z3.Z3_OP_ULT: OpKind.ULT,
}

_OPAQUE_PARAMETER_KINDS: Dict[int, str] = {
    z3.Z3_PARAMETER_DOUBLE: "double",
    z3.Z3_PARAMETER_RATIONAL: "rational",
    z3.Z3_PARAMETER_SYMBOL: "symbol",
    z3.Z3_PARAMETER_SORT: "sort",
    z3.Z3_PARAMETER_AST: "ast",
    z3.Z3_PARAMETER_FUNC_DECL: "func_decl",
}


# ---------------------------------------------------------------------------
# Naming equalities
# ---------------------------------------------------------------------------

def make_naming_predicate(prefix: Optional[str] = None) -> NamingPredicate:
    """Build a predicate flagging ``(= e c)`` where ``c`` is a naming constant.

    A naming constant is an uninterpreted 0-ary constant whose name starts
    with *prefix* (``lowering_config.NAMING_PREFIX`` by default).
    """
    if prefix is None:
        prefix = lowering_config.NAMING_PREFIX

    def is_naming_eq(expr: z3.ExprRef) -> bool:
        if not z3.is_eq(expr) or expr.num_args() != 2:
            return False
        rhs = expr.arg(1)
        if not z3.is_app(rhs) or rhs.num_args() != 0:
            return False
        decl = rhs.decl()
        return decl.kind() == z3.Z3_OP_UNINTERPRETED and decl.name().startswith(prefix)

    return is_naming_eq


# ---------------------------------------------------------------------------
# Converter
# ---------------------------------------------------------------------------

class Z3Converter:
    """Converts Z3 expressions, sharing converted subtrees by AST id."""

    def __init__(self, naming_eq: Optional[NamingPredicate] = None) -> None:
        self.naming_eq = naming_eq if naming_eq is not None else make_naming_predicate()
        # the Z3 term is kept alongside so its id cannot be recycled
        self._cache: Dict[int, Tuple[z3.ExprRef, Expr]] = {}

    def convert(self, expr: z3.ExprRef) -> Expr:
        if not z3.is_expr(expr):
            raise MalformedExpressionError(f"not a Z3 expression: {expr!r}")
        key = expr.get_id()
        if key not in self._cache:
            self._cache[key] = (expr, self._convert(expr))
        return self._cache[key][1]

    # -- Numerals ---------------------------------------------------------------

    @staticmethod
    def _numeral(expr: z3.ExprRef) -> Optional[Expr]:
        if z3.is_bv_value(expr):
            value = expr.as_long()
            if value >= U64_LIMIT:
                # wider than 64 bits: left to the generic node
                return None
            return Num(value, signed=False)
        if z3.is_int_value(expr):
            value = expr.as_long()
            if I64_MIN <= value < (1 << 63):
                return Num(value, signed=True)
            if 0 <= value < U64_LIMIT:
                return Num(value, signed=False)
            return Apply(str(value))
        if z3.is_rational_value(expr):
            return Apply(str(expr))
        return None

    # -- Parameters -------------------------------------------------------------

    @staticmethod
    def _params(decl: z3.FuncDeclRef) -> tuple:
        ctx = decl.ctx_ref()
        params = []
        for i in range(z3.Z3_get_decl_num_parameters(ctx, decl.ast)):
            kind = z3.Z3_get_decl_parameter_kind(ctx, decl.ast, i)
            if kind == z3.Z3_PARAMETER_INT:
                params.append(z3.Z3_get_decl_int_parameter(ctx, decl.ast, i))
            else:
                params.append(OpaqueParam(_OPAQUE_PARAMETER_KINDS.get(kind, "unknown")))
        return tuple(params)

    # -- Applications -----------------------------------------------------------

    def _convert(self, expr: z3.ExprRef) -> Expr:
        numeral = self._numeral(expr)
        if numeral is not None:
            return numeral
        if z3.is_quantifier(expr) or not z3.is_app(expr):
            raise MalformedExpressionError(f"unsupported Z3 term: {expr}")

        decl = expr.decl()
        kind = decl.kind()
        args = tuple(self.convert(child) for child in expr.children())

        if kind == z3.Z3_OP_TRUE:
            return BoolVal(True)
        if kind == z3.Z3_OP_FALSE:
            return BoolVal(False)
        if kind == z3.Z3_OP_SELECT and len(args) == 2:
            return Select(args[0], args[1])
        if kind == z3.Z3_OP_EQ and len(args) == 2:
            return Eq(args[0], args[1], naming=self.naming_eq(expr))
        if kind == z3.Z3_OP_DISTINCT and len(args) == 2:
            return Distinct(args[0], args[1])
        if kind == z3.Z3_OP_CONCAT:
            return Concat(args)
        if kind in _NARY_KINDS:
            return NAry(_NARY_KINDS[kind], args)
        if kind == z3.Z3_OP_NOT:
            return Not(args[0])
        if kind == z3.Z3_OP_UMINUS:
            return Neg(args[0])
        if kind == z3.Z3_OP_EXTRACT:
            return Extract(args, self._params(decl))

        _bridge_logger.debug("falling back to generic node for %s", decl.name())
        return Apply(decl.name(), args, self._params(decl))


def from_z3(expr: z3.ExprRef, naming_eq: Optional[NamingPredicate] = None) -> Expr:
    """Convert a single Z3 expression into the expression model."""
    return Z3Converter(naming_eq).convert(expr)
