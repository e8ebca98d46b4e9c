"""
Expression renderer.

Turns an expression tree into the expression syntax of the target
definition language. Rendering never evaluates or simplifies: argument
order and nesting are preserved exactly.
"""

from __future__ import annotations

import logging
from typing import Dict, Sequence

from ddllang.constants import BYTE_WEIGHT, HEX_DIGITS, U64_MASK
from ddllang.errors import MalformedExpressionError
from ddllang.expr.model import (
    Apply, BoolVal, Concat, Distinct, Eq, Expr, Extract, NAry, Neg, Not,
    Num, OpKind, Param, Select, is_zero,
)

_render_logger = logging.getLogger("ddllang.render")


_OPERATOR_SYMBOLS: Dict[OpKind, str] = {
    OpKind.ADD: "+", OpKind.BADD: "+",
    OpKind.SUB: "-", OpKind.BSUB: "-",
    OpKind.MUL: "*", OpKind.BMUL: "*",

    OpKind.DIV: "/", OpKind.IDIV: "/",
    OpKind.BSDIV: "/", OpKind.BSDIV_I: "/",
    OpKind.BUDIV: "/", OpKind.BUDIV_I: "/",

    OpKind.MOD: "%", OpKind.REM: "%",
    OpKind.BSMOD: "%", OpKind.BSMOD_I: "%",
    OpKind.BSREM: "%", OpKind.BSREM_I: "%",
    OpKind.BUREM: "%", OpKind.BUREM_I: "%",

    OpKind.AND: "&&",
    OpKind.OR: "||",

    OpKind.GE: ">=", OpKind.SGEQ: ">=", OpKind.UGEQ: ">=",
    OpKind.LE: "<=", OpKind.SLEQ: "<=", OpKind.ULEQ: "<=",
    OpKind.GT: ">", OpKind.SGT: ">", OpKind.UGT: ">",
    OpKind.LT: "<", OpKind.SLT: "<", OpKind.ULT: "<",
}


def uint64_to_hex(value: int) -> str:
    """Format *value* as ``0x`` plus 16 uppercase hex digits.

    Negative values are printed as their two's-complement bit pattern.

    >>> uint64_to_hex(255)
    '0x00000000000000FF'
    >>> uint64_to_hex(-1)
    '0xFFFFFFFFFFFFFFFF'
    """
    return "0x" + format(value & U64_MASK, f"0{HEX_DIGITS}X")


def _render_param(param: Param) -> str:
    if isinstance(param, int) and not isinstance(param, bool):
        return str(param)
    return "?"


def _render_operands(expr, separator: str) -> str:
    parts = [render(arg) for arg in expr.args]
    parts.extend(_render_param(param) for param in expr.params)
    return separator.join(parts)


def _render_template(args: Sequence[Expr], op: str) -> str:
    return "(" + f" {op} ".join(render(arg) for arg in args) + ")"


def _render_select(expr: Select) -> str:
    # the array operand is implicit: Select reads the current stream
    if isinstance(expr.index, Num):
        return f"(Select {expr.index.value})"
    return f"(Select {render(expr.index)})"


def _render_concat(expr: Concat) -> str:
    pieces = []
    prefix_zero = True
    for arg in expr.args:
        if prefix_zero and is_zero(arg):
            continue
        prefix_zero = False
        pieces.append(render(arg))
    if not pieces:
        return "0"
    last = len(pieces) - 1
    return " + ".join(BYTE_WEIGHT * (last - i) + piece for i, piece in enumerate(pieces))


def _render_extract(expr: Extract) -> str:
    if not expr.args and not expr.params:
        raise MalformedExpressionError("extract node carries no arguments and no parameters")
    return "(Extract " + _render_operands(expr, " ") + ")"


def _render_default(expr: Apply) -> str:
    if not expr.args and not expr.params:
        return expr.name
    return expr.name + "(" + _render_operands(expr, ", ") + ")"


def _render_node(expr: Expr) -> str:
    if isinstance(expr, Num):
        return uint64_to_hex(expr.value)
    if isinstance(expr, BoolVal):
        return "true" if expr.value else "false"
    if isinstance(expr, Select):
        return _render_select(expr)
    if isinstance(expr, Eq):
        if expr.naming:
            return ""
        return render(expr.lhs) + " == " + render(expr.rhs)
    if isinstance(expr, Distinct):
        return render(expr.lhs) + " != " + render(expr.rhs)
    if isinstance(expr, Concat):
        return _render_concat(expr)
    if isinstance(expr, NAry):
        return _render_template(expr.args, _OPERATOR_SYMBOLS[expr.kind])
    if isinstance(expr, Not):
        return "!(" + render(expr.arg) + ")"
    if isinstance(expr, Neg):
        return "-" + render(expr.arg)
    if isinstance(expr, Extract):
        return _render_extract(expr)
    if isinstance(expr, Apply):
        return _render_default(expr)
    raise MalformedExpressionError(f"cannot render {expr!r}")


def render(expr: Expr) -> str:
    """Render *expr* in the target language's expression syntax."""
    text = _render_node(expr)
    _render_logger.debug("%s -> %s", type(expr).__name__, text)
    return text
