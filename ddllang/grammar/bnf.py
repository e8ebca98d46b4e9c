"""
Read-only grammar model produced by the grammar discovery pipeline.

A production owns ordered alternatives; each alternative is an ordered
list of RHS items, either a reference to another production or a byte
interval whose bounds are constants or symbolic expressions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple, Union

from ddllang.constants import DEFINITION_NAME_PREFIX, ENTRY_DEFINITION_NAME, ENTRY_PRODUCTION_ID
from ddllang.expr.model import Expr


@dataclass(frozen=True)
class ConstantBound:
    constant: int


@dataclass(frozen=True)
class SymbolicBound:
    expr: Expr


Bound = Union[ConstantBound, SymbolicBound]


@dataclass(frozen=True)
class Interval:
    """Byte range ``[from_, to]``.

    Bounds are typed ``Optional`` only because the upstream pipeline may
    hand over an unset bound; the lowerer rejects those.
    """

    from_: Optional[Bound]
    to: Optional[Bound]


@dataclass(frozen=True)
class ProductionRef:
    id: int


RHSItem = Union[ProductionRef, Interval]


def definition_name(production_id: int) -> str:
    """``Main`` for the entry production, ``L<id>`` for every other one."""
    if production_id == ENTRY_PRODUCTION_ID:
        return ENTRY_DEFINITION_NAME
    return f"{DEFINITION_NAME_PREFIX}{production_id}"


@dataclass(frozen=True)
class Production:
    id: int
    alternatives: Tuple[Tuple[RHSItem, ...], ...] = ()
    assertions: Tuple[Expr, ...] = ()

    @classmethod
    def create(cls, id: int, alternatives: Sequence[Sequence[RHSItem]] = (),
               assertions: Sequence[Expr] = ()) -> "Production":
        return cls(id, tuple(tuple(alt) for alt in alternatives), tuple(assertions))

    @property
    def name(self) -> str:
        return definition_name(self.id)


@dataclass(frozen=True)
class BNF:
    """An ordered, immutable collection of productions."""

    productions: Tuple[Production, ...] = field(default=())

    @classmethod
    def create(cls, productions: Sequence[Production]) -> "BNF":
        return cls(tuple(productions))

    def get_productions(self) -> List[Production]:
        return list(self.productions)

    def __iter__(self) -> Iterator[Production]:
        return iter(self.productions)

    def __len__(self) -> int:
        return len(self.productions)
