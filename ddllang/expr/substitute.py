"""
Simultaneous structural substitution.

All ``(before, after)`` pairs are applied in one top-down pass: once a
subtree matches a ``before`` expression it is replaced and the
replacement is never visited again, so a replacement that happens to
contain another ``before`` expression is left untouched.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Tuple

from ddllang.expr.model import Expr, children, rebuild

Substitution = List[Tuple[Expr, Expr]]


def _mapping(pairs: Iterable[Tuple[Expr, Expr]]) -> Dict[Expr, Expr]:
    mapping: Dict[Expr, Expr] = {}
    for before, after in pairs:
        # first binding wins, later duplicates are shadowed
        mapping.setdefault(before, after)
    return mapping


def _apply(expr: Expr, mapping: Dict[Expr, Expr]) -> Expr:
    if expr in mapping:
        return mapping[expr]
    subs = children(expr)
    if not subs:
        return expr
    new_subs = tuple(_apply(sub, mapping) for sub in subs)
    if new_subs == subs:
        return expr
    return rebuild(expr, new_subs)


def substitute(expr: Expr, pairs: Iterable[Tuple[Expr, Expr]]) -> Expr:
    """Replace every occurrence of each ``before`` in *expr* by its ``after``."""
    mapping = _mapping(pairs)
    if not mapping:
        return expr
    return _apply(expr, mapping)
