"""Infrastructure layer - Compilation and semantic model over Python syntax trees."""

import ast
from typing import Dict, Iterable, Mapping, Optional, Tuple

from miraveja_autoinject.domain import (
    CompilationError,
    ICompilation,
    ISemanticModel,
    SyntaxTree,
    TypedConstant,
    TypeSymbol,
)
from miraveja_autoinject.infrastructure.python_host.binder import SymbolTable
from miraveja_autoinject.infrastructure.python_host.parser import parse_syntax_tree


class SemanticModel(ISemanticModel):
    """Semantic view of one syntax tree of a compilation.

    Attributes:
        _tree: The tree this model answers questions about.
        _symbols: Symbol table of the owning compilation.
    """

    def __init__(self, tree: SyntaxTree, symbols: SymbolTable) -> None:
        self._tree = tree
        self._symbols = symbols

    @property
    def syntax_tree(self) -> SyntaxTree:
        return self._tree

    def get_declared_symbol(self, node: ast.ClassDef) -> Optional[TypeSymbol]:
        """Return the symbol a class statement declares.

        Args:
            node: A class statement of this model's tree.

        Returns:
            The declared symbol, or None for classes declared inside functions.

        Raises:
            CompilationError: If the node belongs to another module of the compilation.
        """
        declaration = self._symbols.get_declaration(node)
        if declaration is None:
            return None
        module_name, symbol = declaration
        if module_name != self._tree.module_name:
            raise CompilationError(
                f"Class '{node.name}' belongs to module {module_name}, not {self._tree.module_name}"
            )
        return symbol

    def get_symbol_info(self, expression: ast.expr) -> Optional[TypeSymbol]:
        target = self._symbols.resolve_expression(
            self._tree.module_name, expression, getattr(expression, "lineno", None)
        )
        return target if isinstance(target, TypeSymbol) else None

    def get_constant_value(self, expression: ast.expr) -> TypedConstant:
        return self._symbols.evaluate_constant(
            self._tree.module_name, expression, getattr(expression, "lineno", None)
        )


class Compilation(ICompilation):
    """Immutable snapshot of a Python program made of syntax trees.

    Adding trees returns a new compilation; the symbol table is built lazily
    once per snapshot and never shared between snapshots.

    Attributes:
        _trees: Syntax trees by module name, in insertion order.
        _symbol_table: Lazily built symbol table of this snapshot.

    Example:
        >>> compilation = Compilation.from_sources({
        ...     "myapp.services": "class UserService: ...",
        ... })
        >>> compilation.get_type_by_qualified_name("myapp.services.UserService")
        <TypeSymbol myapp.services.UserService (class)>
    """

    def __init__(self, syntax_trees: Iterable[SyntaxTree] = ()) -> None:
        """Initialize the compilation.

        Args:
            syntax_trees: Trees of the program. A later tree replaces an earlier
                          one with the same module name.
        """
        self._trees: Dict[str, SyntaxTree] = {}
        for tree in syntax_trees:
            self._trees[tree.module_name] = tree
        self._symbol_table: Optional[SymbolTable] = None

    @classmethod
    def from_sources(cls, sources: Mapping[str, str]) -> "Compilation":
        """Build a compilation from module names and source texts.

        A module is treated as a package when another module name starts with
        its name followed by a dot.

        Args:
            sources: Mapping of dotted module name to source text.

        Raises:
            SourceParseError: If a source is not valid Python.
        """
        names = set(sources)
        trees = [
            parse_syntax_tree(
                text,
                module_name,
                is_package=any(other.startswith(f"{module_name}.") for other in names),
            )
            for module_name, text in sources.items()
        ]
        return cls(trees)

    @property
    def syntax_trees(self) -> Tuple[SyntaxTree, ...]:
        return tuple(self._trees.values())

    def get_syntax_tree(self, module_name: str) -> Optional[SyntaxTree]:
        return self._trees.get(module_name)

    def parse_syntax_tree(self, text: str, module_name: str) -> SyntaxTree:
        is_package = any(name.startswith(f"{module_name}.") for name in self._trees)
        return parse_syntax_tree(text, module_name, is_package=is_package)

    def add_syntax_trees(self, *trees: SyntaxTree) -> "Compilation":
        return Compilation(self.syntax_trees + trees)

    def get_semantic_model(self, tree: SyntaxTree) -> SemanticModel:
        """Return the semantic model of one of this compilation's trees.

        Raises:
            CompilationError: If the tree is not part of this compilation.
        """
        if self._trees.get(tree.module_name) is not tree:
            raise CompilationError(f"Syntax tree of module {tree.module_name} is not part of the compilation")
        return SemanticModel(tree, self._symbols)

    def get_type_by_qualified_name(self, qualified_name: str) -> Optional[TypeSymbol]:
        return self._symbols.get_type(qualified_name)

    @property
    def _symbols(self) -> SymbolTable:
        if self._symbol_table is None:
            self._symbol_table = SymbolTable(self._trees.values())
        return self._symbol_table

    def __repr__(self) -> str:
        return f"<Compilation modules={len(self._trees)}>"
