"""
Python host module.

Provides the syntax trees, symbol model and project loading the generator runs against.
"""

from .binder import SymbolTable
from .compilation import Compilation, SemanticModel
from .loader import ProjectLoader
from .parser import parse_syntax_tree

__all__ = [
    "Compilation",
    "SemanticModel",
    "SymbolTable",
    "ProjectLoader",
    "parse_syntax_tree",
]
