"""
Exceptions raised while loading and lowering grammars.

Every error here is a deterministic function of the input: retrying
without changing the grammar gives the same result.
"""


class DDLLangError(Exception):
    pass


class MalformedExpressionError(DDLLangError):
    """An expression node violates the node-kind contract."""


class MalformedGrammarError(DDLLangError):
    """A production carries a bound or RHS item the lowerer cannot classify."""


class GrammarLoadError(DDLLangError):
    """A grammar file could not be read, decoded or parsed."""
