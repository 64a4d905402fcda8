import ast
from abc import ABC, abstractmethod
from typing import Optional, Tuple, Type, Union

from miraveja_autoinject.domain.enums import Lifetime
from miraveja_autoinject.domain.models import SyntaxTree, TypedConstant
from miraveja_autoinject.domain.symbols import TypeSymbol


class ISemanticModel(ABC):
    """Abstract interface for answering semantic questions about one syntax tree."""

    @property
    @abstractmethod
    def syntax_tree(self) -> SyntaxTree:
        """The tree this model answers questions about."""

    @abstractmethod
    def get_declared_symbol(self, node: ast.ClassDef) -> Optional[TypeSymbol]:
        """Return the symbol declared by a class statement.

        Args:
            node: A class statement of this model's tree.

        Returns:
            The declared symbol, or None when the class is not addressable
            from module scope (e.g. declared inside a function).
        """

    @abstractmethod
    def get_symbol_info(self, expression: ast.expr) -> Optional[TypeSymbol]:
        """Return the class an expression refers to, if any.

        Args:
            expression: A name or attribute expression of this model's tree.
        """

    @abstractmethod
    def get_constant_value(self, expression: ast.expr) -> TypedConstant:
        """Evaluate an expression the way decorator arguments are evaluated.

        Args:
            expression: An expression of this model's tree.
        """


class ICompilation(ABC):
    """Abstract interface for an immutable snapshot of a program."""

    @property
    @abstractmethod
    def syntax_trees(self) -> Tuple[SyntaxTree, ...]:
        """All syntax trees of the snapshot, in insertion order."""

    @abstractmethod
    def parse_syntax_tree(self, text: str, module_name: str) -> SyntaxTree:
        """Parse source text the way this compilation parses its own sources.

        Args:
            text: Source text.
            module_name: Dotted module name the text is importable under.
        """

    @abstractmethod
    def add_syntax_trees(self, *trees: SyntaxTree) -> "ICompilation":
        """Return a new snapshot with the given trees added.

        A tree whose module name is already present replaces the existing tree.

        Args:
            *trees: Trees to add.
        """

    @abstractmethod
    def get_semantic_model(self, tree: SyntaxTree) -> ISemanticModel:
        """Return the semantic model of one of this compilation's trees.

        Args:
            tree: A tree of this compilation.
        """

    @abstractmethod
    def get_type_by_qualified_name(self, qualified_name: str) -> Optional[TypeSymbol]:
        """Look up a class declared in the compilation by its dotted name.

        Args:
            qualified_name: Fully qualified name, e.g. ``autoinject.markers.Injectable``.
        """


class IServiceCollection(ABC):
    """Abstract interface for the service collection generated routines register into."""

    @abstractmethod
    def register(
        self,
        implementation: Type,
        lifetime: Union[Lifetime, str],
        abstraction: Optional[Type] = None,
    ) -> "IServiceCollection":
        """Register a class under a lifetime, optionally bound to an abstraction.

        Args:
            implementation: The class to instantiate.
            lifetime: Lifetime of the instances.
            abstraction: Type the service is resolved by, defaults to the implementation.
        """
