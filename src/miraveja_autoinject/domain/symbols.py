import ast
from typing import TYPE_CHECKING, Any, Dict, List, Tuple

from miraveja_autoinject.domain.enums import TypeKind

if TYPE_CHECKING:
    from miraveja_autoinject.domain.models import AttributeData, SyntaxTree


class TypeSymbol:
    """Semantic identity of a class known to a compilation.

    Symbols are interned by the compilation's symbol table: one instance per
    qualified name and snapshot. Equality and hashing are by identity, so two
    classes that merely share a name never compare equal.

    Attributes:
        module: Dotted name of the module declaring the class.
        name: Qualified name of the class inside its module (``Outer.Inner``).
        kind: Whether the symbol is a plain class, an enumeration or external.
        declarations: Class statements declaring this symbol, with their trees.
        members: Enumeration members and their constant values (enums only).
    """

    __slots__ = ("module", "name", "kind", "declarations", "members", "_attributes")

    def __init__(self, module: str, name: str, kind: TypeKind = TypeKind.CLASS) -> None:
        self.module = module
        self.name = name
        self.kind = kind
        self.declarations: List[Tuple["SyntaxTree", ast.ClassDef]] = []
        self.members: Dict[str, Any] = {}
        self._attributes: Tuple["AttributeData", ...] = ()

    @property
    def qualified_name(self) -> str:
        """Fully qualified dotted name, as used in generated imports."""
        if not self.module:
            return self.name
        return f"{self.module}.{self.name}"

    @property
    def is_external(self) -> bool:
        """True for classes imported from modules outside the compilation."""
        return self.kind == TypeKind.EXTERNAL

    @property
    def is_enum(self) -> bool:
        return self.kind == TypeKind.ENUM

    def get_attributes(self) -> Tuple["AttributeData", ...]:
        """Return the decorators bound on every declaration of this class, in source order."""
        return self._attributes

    def add_declaration(self, tree: "SyntaxTree", node: ast.ClassDef) -> None:
        self.declarations.append((tree, node))

    def set_attributes(self, attributes: Tuple["AttributeData", ...]) -> None:
        self._attributes = attributes

    def __repr__(self) -> str:
        return f"<TypeSymbol {self.qualified_name} ({self.kind.value})>"
