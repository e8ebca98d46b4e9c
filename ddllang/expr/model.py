"""
Closed expression model for guard formulas and interval bounds.

Every node is a frozen dataclass: nodes are hashable, compare
structurally and are never mutated. Transformations build new trees.

The set of node kinds is deliberately closed. Operators that have no
dedicated node travel through :class:`Apply`, which keeps the operator
name, the ordered arguments and the ordered scalar parameters.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import List, Tuple, Union

from ddllang.constants import I64_MIN, U64_LIMIT
from ddllang.errors import MalformedExpressionError


# ---------------------------------------------------------------------------
# Operator spellings
# ---------------------------------------------------------------------------

class OpKind(enum.Enum):
    """Every n-ary operator spelling the renderer understands."""

    ADD = "add"
    BADD = "bvadd"
    SUB = "sub"
    BSUB = "bvsub"
    MUL = "mul"
    BMUL = "bvmul"

    DIV = "div"
    IDIV = "idiv"
    BSDIV = "bvsdiv"
    BSDIV_I = "bvsdiv_i"
    BUDIV = "bvudiv"
    BUDIV_I = "bvudiv_i"

    MOD = "mod"
    REM = "rem"
    BSMOD = "bvsmod"
    BSMOD_I = "bvsmod_i"
    BSREM = "bvsrem"
    BSREM_I = "bvsrem_i"
    BUREM = "bvurem"
    BUREM_I = "bvurem_i"

    AND = "and"
    OR = "or"

    GE = "ge"
    SGEQ = "bvsge"
    UGEQ = "bvuge"
    LE = "le"
    SLEQ = "bvsle"
    ULEQ = "bvule"
    GT = "gt"
    SGT = "bvsgt"
    UGT = "bvugt"
    LT = "lt"
    SLT = "bvslt"
    ULT = "bvult"


# ---------------------------------------------------------------------------
# Scalar parameters
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OpaqueParam:
    """A declaration parameter with no direct textual form.

    *kind* is one of ``double``, ``rational``, ``symbol``, ``sort``,
    ``ast`` or ``func_decl``.
    """

    kind: str


Param = Union[int, OpaqueParam]


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Num:
    """A 64-bit integer numeral.

    Unsigned numerals hold ``0 <= value < 2**64``; signed numerals hold
    ``-2**63 <= value < 2**63``.
    """

    value: int
    signed: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise MalformedExpressionError(f"numeral value must be an int, got {self.value!r}")
        low = I64_MIN if self.signed else 0
        high = (1 << 63) if self.signed else U64_LIMIT
        if not low <= self.value < high:
            kind = "signed" if self.signed else "unsigned"
            raise MalformedExpressionError(f"{self.value} does not fit a {kind} 64-bit numeral")


@dataclass(frozen=True)
class BoolVal:
    value: bool


@dataclass(frozen=True)
class NAry:
    kind: OpKind
    args: Tuple["Expr", ...]


@dataclass(frozen=True)
class Not:
    arg: "Expr"


@dataclass(frozen=True)
class Neg:
    arg: "Expr"


@dataclass(frozen=True)
class Eq:
    """Equality. ``naming`` marks a structural naming equality."""

    lhs: "Expr"
    rhs: "Expr"
    naming: bool = False


@dataclass(frozen=True)
class Distinct:
    lhs: "Expr"
    rhs: "Expr"


@dataclass(frozen=True)
class Select:
    """Byte read ``array[index]``."""

    array: "Expr"
    index: "Expr"


@dataclass(frozen=True)
class Concat:
    """Byte concatenation, most significant element first."""

    args: Tuple["Expr", ...]


@dataclass(frozen=True)
class Extract:
    """Bit-range extraction.

    Arguments and parameters are kept in declaration order; a well-formed
    extract has one argument (the value) and two integer parameters
    (high, low). Use :func:`extract` to build one.
    """

    args: Tuple["Expr", ...] = ()
    params: Tuple[Param, ...] = ()


@dataclass(frozen=True)
class Apply:
    """Fallback node: any other operator, or a named symbol when 0-ary."""

    name: str
    args: Tuple["Expr", ...] = ()
    params: Tuple[Param, ...] = field(default=())


Expr = Union[Num, BoolVal, NAry, Not, Neg, Eq, Distinct, Select, Concat, Extract, Apply]


# ---------------------------------------------------------------------------
# Constructors
# ---------------------------------------------------------------------------

def symbol(name: str) -> Apply:
    return Apply(name)


def extract(high: int, low: int, value: Expr) -> Extract:
    return Extract(args=(value,), params=(high, low))


def nary(kind: OpKind, *args: Expr) -> NAry:
    return NAry(kind, tuple(args))


def conj(*args: Expr) -> NAry:
    return NAry(OpKind.AND, tuple(args))


def is_zero(expr: Expr) -> bool:
    """True for the numeral zero, signed or unsigned."""
    return isinstance(expr, Num) and expr.value == 0


def is_true(expr: Expr) -> bool:
    return isinstance(expr, BoolVal) and expr.value


# ---------------------------------------------------------------------------
# Structural helpers
# ---------------------------------------------------------------------------

def children(expr: Expr) -> Tuple[Expr, ...]:
    """Return the sub-expressions of *expr* in declaration order."""
    if isinstance(expr, (Num, BoolVal)):
        return ()
    if isinstance(expr, (NAry, Concat, Extract, Apply)):
        return expr.args
    if isinstance(expr, (Not, Neg)):
        return (expr.arg,)
    if isinstance(expr, (Eq, Distinct)):
        return (expr.lhs, expr.rhs)
    if isinstance(expr, Select):
        return (expr.array, expr.index)
    raise MalformedExpressionError(f"not an expression node: {expr!r}")


def rebuild(expr: Expr, new_children: Tuple[Expr, ...]) -> Expr:
    """Return a copy of *expr* whose sub-expressions are *new_children*."""
    if isinstance(expr, (Num, BoolVal)):
        return expr
    if isinstance(expr, NAry):
        return NAry(expr.kind, tuple(new_children))
    if isinstance(expr, Concat):
        return Concat(tuple(new_children))
    if isinstance(expr, Extract):
        return Extract(tuple(new_children), expr.params)
    if isinstance(expr, Apply):
        return Apply(expr.name, tuple(new_children), expr.params)
    if isinstance(expr, Not):
        return Not(new_children[0])
    if isinstance(expr, Neg):
        return Neg(new_children[0])
    if isinstance(expr, Eq):
        return Eq(new_children[0], new_children[1], expr.naming)
    if isinstance(expr, Distinct):
        return Distinct(new_children[0], new_children[1])
    if isinstance(expr, Select):
        return Select(new_children[0], new_children[1])
    raise MalformedExpressionError(f"not an expression node: {expr!r}")


def conjuncts(expr: Expr) -> List[Expr]:
    """Flatten consecutive top-level logical conjunctions.

    ``(and a (and b c) (or d e))`` gives ``[a, b, c, (or d e)]``. Only
    ``AND`` nodes reachable from the root through other ``AND`` nodes are
    opened; a non-conjunction is returned as a single conjunct.
    """
    if not (isinstance(expr, NAry) and expr.kind is OpKind.AND):
        return [expr]
    result: List[Expr] = []
    for arg in expr.args:
        result.extend(conjuncts(arg))
    return result
