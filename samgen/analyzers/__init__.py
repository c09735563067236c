"""TypeScript analysis: parsing, literal evaluation, type resolution and handler extraction."""

from .literals import LiteralEvaluator
from .tree_sitter import TypeScriptParser

__all__ = ["LiteralEvaluator", "TypeScriptParser"]
