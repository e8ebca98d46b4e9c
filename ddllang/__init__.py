"""
ddllang - lowers symbolic protocol grammars into DaeDaLus-style binary
format definitions.
"""

from ddllang.grammar.bnf import BNF, Production
from ddllang.lowering.document import DDLLang
from ddllang.lowering.production import lower_production
from ddllang.lowering.renderer import render

__all__ = ["BNF", "DDLLang", "Production", "lower_production", "render"]
