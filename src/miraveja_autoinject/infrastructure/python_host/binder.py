"""Infrastructure layer - Symbol table of a Python compilation."""

import ast
import logging
from collections import defaultdict
from typing import Any, Dict, FrozenSet, Iterable, List, NamedTuple, Optional, Set, Tuple, Union

from miraveja_autoinject.domain import (
    AttributeData,
    SyntaxTree,
    TypedConstant,
    TypedConstantKind,
    TypeKind,
    TypeSymbol,
)

logger = logging.getLogger(__name__)

_ENUM_BASES = frozenset({"enum.Enum", "enum.IntEnum", "enum.Flag", "enum.IntFlag", "enum.StrEnum"})

_COMPOUND_STATEMENTS = tuple(
    getattr(ast, name)
    for name in ("If", "Try", "TryStar", "With", "AsyncWith", "For", "AsyncFor", "While", "Match")
    if hasattr(ast, name)
)


class ModuleReference(NamedTuple):
    """An expression that evaluates to a module."""

    name: str


class EnumMemberReference(NamedTuple):
    """An expression that evaluates to a member of an enumeration."""

    enum_type: TypeSymbol
    member: str
    value: Any


Resolved = Union[TypeSymbol, ModuleReference, EnumMemberReference]


class _Binding(NamedTuple):
    lineno: int
    kind: str  # "class", "module", "import", "alias" or "local"
    target: Any


class _Parameter(NamedTuple):
    name: str
    default: Optional[ast.expr]
    keyword_only: bool


class ModuleScope:
    """Module-level name bindings of one syntax tree, in source order.

    Attributes:
        tree: The syntax tree the bindings come from.
        exports: Names listed in a literal ``__all__``, if the module has one.
        star_imports: Line and module of each ``from module import *``.
    """

    def __init__(self, tree: SyntaxTree) -> None:
        self.tree = tree
        self.exports: Optional[Tuple[str, ...]] = None
        self.star_imports: List[Tuple[int, str]] = []
        self._bindings: Dict[str, List[_Binding]] = defaultdict(list)

    def bind(self, name: str, lineno: int, kind: str, target: Any = None) -> None:
        bindings = self._bindings[name]
        position = len(bindings)
        while position and bindings[position - 1].lineno > lineno:
            position -= 1
        bindings.insert(position, _Binding(lineno, kind, target))

    def public_names(self) -> List[str]:
        """Return the names ``from module import *`` takes from this module."""
        if self.exports is not None:
            return list(self.exports)
        return [name for name in self._bindings if not name.startswith("_")]

    def lookup(self, name: str, before_line: Optional[int] = None) -> Optional[_Binding]:
        """Return the binding visible for a name.

        With ``before_line`` the last binding made before that line wins, which is
        what a decorator sees when its class statement executes. Without it the
        module's final binding wins, which is what other modules see.

        Args:
            name: The bound name.
            before_line: Line the name is used on, if it is used inside this module.
        """
        bindings = self._bindings.get(name)
        if not bindings:
            return None
        if before_line is None:
            return bindings[-1]
        visible = [binding for binding in bindings if binding.lineno < before_line]
        return visible[-1] if visible else None


class SymbolTable:
    """Class symbols of a set of syntax trees.

    Built in three passes: declare classes and module bindings, classify
    enumerations, then bind every class decorator to an AttributeData. Names
    imported from modules outside the compilation resolve to interned external
    symbols; their kind cannot be known, so they are treated as classes.

    Attributes:
        _scopes: Module scopes by module name.
        _types: Declared class symbols by qualified name.
        _externals: External class symbols by qualified name.
        _declared: Symbol and module of each class statement.
        _known_modules: Modules of the compilation plus every module imported by it.
        _packages: Package prefixes of the compilation's module names.
    """

    def __init__(self, trees: Iterable[SyntaxTree]) -> None:
        self._scopes: Dict[str, ModuleScope] = {}
        self._types: Dict[str, TypeSymbol] = {}
        self._externals: Dict[str, TypeSymbol] = {}
        self._declared: Dict[ast.ClassDef, Tuple[str, TypeSymbol]] = {}
        self._known_modules: Set[str] = set()

        for tree in trees:
            self._declare_module(tree)

        self._packages = {prefix for name in self._scopes for prefix in _package_prefixes(name)}
        self._known_modules.update(self._scopes)
        self._known_modules.update(self._packages)
        for scope in self._scopes.values():
            self._expand_star_imports(scope)

        for symbol in list(self._types.values()):
            self._classify(symbol, frozenset())
        for symbol in self._types.values():
            self._bind_attributes(symbol)

        logger.debug("Bound %d class symbols across %d modules", len(self._types), len(self._scopes))

    def get_type(self, qualified_name: str) -> Optional[TypeSymbol]:
        """Return the declared class with the given qualified name, if any."""
        return self._types.get(qualified_name)

    def get_declaration(self, node: ast.ClassDef) -> Optional[Tuple[str, TypeSymbol]]:
        """Return the module name and symbol of a class statement, if it was declared."""
        return self._declared.get(node)

    def resolve_expression(
        self,
        module_name: str,
        expression: ast.expr,
        before_line: Optional[int] = None,
    ) -> Optional[Resolved]:
        """Resolve a name or attribute expression used in a module.

        Args:
            module_name: Module the expression appears in.
            expression: The expression to resolve.
            before_line: Line of use; only bindings made before it are visible.

        Returns:
            The module, class or enum member the expression refers to, or None.
        """
        return self._resolve_expression(module_name, expression, before_line, frozenset())

    def _resolve_expression(
        self,
        module_name: str,
        expression: ast.expr,
        before_line: Optional[int],
        seen: FrozenSet[str],
    ) -> Optional[Resolved]:
        if isinstance(expression, ast.Name):
            return self._resolve_name(module_name, expression.id, before_line, seen)
        if isinstance(expression, ast.Attribute):
            owner = self._resolve_expression(module_name, expression.value, before_line, seen)
            if owner is None:
                return None
            return self._resolve_member(owner, expression.attr, seen)
        return None

    def evaluate_constant(
        self,
        module_name: str,
        expression: ast.expr,
        before_line: Optional[int] = None,
    ) -> TypedConstant:
        """Evaluate a decorator argument without executing any code.

        Args:
            module_name: Module the expression appears in.
            expression: The argument expression.
            before_line: Line of use.

        Returns:
            The evaluated constant; ERROR kind when the expression is not understood.
        """
        if isinstance(expression, ast.Constant):
            return TypedConstant(kind=TypedConstantKind.PRIMITIVE, value=expression.value)
        if isinstance(expression, (ast.List, ast.Tuple)):
            values = tuple(self.evaluate_constant(module_name, element, before_line) for element in expression.elts)
            return TypedConstant(kind=TypedConstantKind.ARRAY, values=values)
        if isinstance(expression, ast.UnaryOp) and isinstance(expression.op, ast.USub):
            operand = expression.operand
            if isinstance(operand, ast.Constant) and type(operand.value) in (int, float):
                return TypedConstant(kind=TypedConstantKind.PRIMITIVE, value=-operand.value)
            return TypedConstant(kind=TypedConstantKind.ERROR)
        if isinstance(expression, ast.Call):
            return self._evaluate_enum_conversion(module_name, expression, before_line)

        target = self.resolve_expression(module_name, expression, before_line)
        if isinstance(target, EnumMemberReference):
            return TypedConstant(kind=TypedConstantKind.ENUM, value=target.value, enum_type=target.enum_type)
        if isinstance(target, TypeSymbol):
            return TypedConstant(kind=TypedConstantKind.TYPE, value=target)
        return TypedConstant(kind=TypedConstantKind.ERROR)

    def _evaluate_enum_conversion(self, module_name: str, call: ast.Call, before_line: Optional[int]) -> TypedConstant:
        # SomeEnum(0x02) spells an enum value by number
        if len(call.args) == 1 and not call.keywords and isinstance(call.args[0], ast.Constant):
            target = self.resolve_expression(module_name, call.func, before_line)
            if isinstance(target, TypeSymbol) and target.is_enum:
                return TypedConstant(kind=TypedConstantKind.ENUM, value=call.args[0].value, enum_type=target)
        return TypedConstant(kind=TypedConstantKind.ERROR)

    def _declare_module(self, tree: SyntaxTree) -> None:
        scope = ModuleScope(tree)
        self._scopes[tree.module_name] = scope
        self._declare_statements(tree, scope, tree.module_node.body)

    def _declare_statements(self, tree: SyntaxTree, scope: ModuleScope, statements: List[ast.stmt]) -> None:
        for statement in statements:
            if isinstance(statement, ast.ClassDef):
                symbol = self._declare_class(tree, statement, prefix="")
                scope.bind(statement.name, statement.lineno, "class", symbol)
            elif isinstance(statement, ast.Import):
                for alias in statement.names:
                    self._known_modules.update(_package_prefixes(alias.name))
                    self._known_modules.add(alias.name)
                    if alias.asname:
                        scope.bind(alias.asname, statement.lineno, "module", alias.name)
                    else:
                        head = alias.name.partition(".")[0]
                        scope.bind(head, statement.lineno, "module", head)
            elif isinstance(statement, ast.ImportFrom):
                module = self._absolute_module(tree, statement)
                for alias in statement.names:
                    if alias.name == "*":
                        if module is not None:
                            scope.star_imports.append((statement.lineno, module))
                        continue
                    name = alias.asname or alias.name
                    if module is None:
                        scope.bind(name, statement.lineno, "local")
                    else:
                        scope.bind(name, statement.lineno, "import", (module, alias.name))
            elif isinstance(statement, (ast.FunctionDef, ast.AsyncFunctionDef)):
                scope.bind(statement.name, statement.lineno, "local")
            elif isinstance(statement, (ast.Assign, ast.AnnAssign)):
                targets = statement.targets if isinstance(statement, ast.Assign) else [statement.target]
                value = statement.value
                if len(targets) == 1 and isinstance(targets[0], ast.Name):
                    name = targets[0].id
                    if name == "__all__":
                        scope.exports = _literal_names(value)
                    if isinstance(value, (ast.Name, ast.Attribute)):
                        # inject = markers.Injectable
                        scope.bind(name, statement.lineno, "alias", value)
                        continue
                for target in targets:
                    for node in ast.walk(target):
                        if isinstance(node, ast.Name):
                            scope.bind(node.id, statement.lineno, "local")
            elif isinstance(statement, _COMPOUND_STATEMENTS):
                for block in ("body", "orelse", "finalbody"):
                    self._declare_statements(tree, scope, getattr(statement, block, []))
                for handler in getattr(statement, "handlers", []):
                    self._declare_statements(tree, scope, handler.body)
                for case in getattr(statement, "cases", []):
                    self._declare_statements(tree, scope, case.body)

    def _declare_class(self, tree: SyntaxTree, node: ast.ClassDef, prefix: str) -> TypeSymbol:
        name = f"{prefix}{node.name}"
        qualified_name = f"{tree.module_name}.{name}"

        # Redeclaring a name in the same module declares the same symbol
        symbol = self._types.get(qualified_name)
        if symbol is None:
            symbol = TypeSymbol(tree.module_name, name)
            self._types[qualified_name] = symbol
        symbol.add_declaration(tree, node)
        self._declared[node] = (tree.module_name, symbol)

        for statement in node.body:
            if isinstance(statement, ast.ClassDef):
                self._declare_class(tree, statement, prefix=f"{name}.")
        return symbol

    def _expand_star_imports(self, scope: ModuleScope) -> None:
        """Bind the names each ``from module import *`` of a scope brings in."""
        for lineno, module in scope.star_imports:
            if module not in self._scopes:
                logger.debug("Cannot expand 'from %s import *' in %s", module, scope.tree.module_name)
                continue
            for name in self._star_exports(module, frozenset({scope.tree.module_name})):
                scope.bind(name, lineno, "import", (module, name))

    def _star_exports(self, module: str, visiting: FrozenSet[str]) -> List[str]:
        scope = self._scopes[module]
        names = scope.public_names()
        if scope.exports is not None:
            return names
        visiting = visiting | {module}
        for _, imported in scope.star_imports:
            if imported in self._scopes and imported not in visiting:
                names.extend(name for name in self._star_exports(imported, visiting) if name not in names)
        return names

    @staticmethod
    def _absolute_module(tree: SyntaxTree, statement: ast.ImportFrom) -> Optional[str]:
        if statement.level == 0:
            return statement.module
        parts = tree.package.split(".") if tree.package else []
        drop = statement.level - 1
        if drop > len(parts):
            return None
        base = parts[: len(parts) - drop]
        if statement.module:
            base.append(statement.module)
        return ".".join(base) or None

    def _resolve_name(
        self,
        module_name: str,
        name: str,
        before_line: Optional[int],
        seen: FrozenSet[str],
    ) -> Optional[Resolved]:
        scope = self._scopes.get(module_name)
        if scope is None:
            return None
        binding = scope.lookup(name, before_line)
        if binding is None or binding.kind == "local":
            return None
        if binding.kind == "class":
            return binding.target
        if binding.kind == "module":
            return ModuleReference(binding.target)
        if binding.kind == "alias":
            return self._resolve_expression(module_name, binding.target, binding.lineno, seen)
        module, attribute = binding.target
        return self._resolve_member(ModuleReference(module), attribute, seen)

    def _resolve_member(self, owner: Resolved, attribute: str, seen: FrozenSet[str]) -> Optional[Resolved]:
        if isinstance(owner, ModuleReference):
            qualified_name = f"{owner.name}.{attribute}"
            if qualified_name in self._known_modules:
                return ModuleReference(qualified_name)
            if owner.name in self._scopes:
                if qualified_name in seen:
                    return None  # import cycle
                return self._resolve_name(owner.name, attribute, None, seen | {qualified_name})
            if owner.name in self._packages:
                return None
            return self._external_type(owner.name, attribute)

        if isinstance(owner, TypeSymbol):
            nested = self._types.get(f"{owner.qualified_name}.{attribute}")
            if nested is not None:
                return nested
            if owner.is_enum and attribute in owner.members:
                return EnumMemberReference(owner, attribute, owner.members[attribute])
        return None

    def _external_type(self, module: str, name: str) -> TypeSymbol:
        qualified_name = f"{module}.{name}"
        symbol = self._externals.get(qualified_name)
        if symbol is None:
            symbol = TypeSymbol(module, name, TypeKind.EXTERNAL)
            self._externals[qualified_name] = symbol
        return symbol

    def _classify(self, symbol: TypeSymbol, visiting: FrozenSet[TypeSymbol]) -> bool:
        """Mark a symbol as an enumeration when one of its bases is one."""
        if symbol.is_enum:
            return True
        visiting = visiting | {symbol}
        for _, node in symbol.declarations:
            for base in node.bases:
                target = self.resolve_expression(symbol.module, base, node.lineno)
                if not isinstance(target, TypeSymbol):
                    continue
                if target.is_external:
                    is_enum_base = target.qualified_name in _ENUM_BASES
                else:
                    is_enum_base = target not in visiting and self._classify(target, visiting)
                if is_enum_base:
                    symbol.kind = TypeKind.ENUM
                    symbol.members = _enum_members(node)
                    return True
        return False

    def _bind_attributes(self, symbol: TypeSymbol) -> None:
        attributes = []
        for _, node in symbol.declarations:
            for decorator in node.decorator_list:
                attributes.append(self._bind_attribute(symbol.module, decorator))
        symbol.set_attributes(tuple(attributes))

    def _bind_attribute(self, module_name: str, decorator: ast.expr) -> AttributeData:
        call = decorator if isinstance(decorator, ast.Call) else None
        callee = call.func if call is not None else decorator
        target = self.resolve_expression(module_name, callee, decorator.lineno)
        if not isinstance(target, TypeSymbol):
            return AttributeData(has_errors=True)
        if call is None:
            return AttributeData(attribute_class=target)

        arguments = self._bind_arguments(module_name, target, call)
        if arguments is None:
            return AttributeData(attribute_class=target, has_errors=True)
        return AttributeData(attribute_class=target, constructor_arguments=arguments)

    def _bind_arguments(
        self,
        module_name: str,
        attribute_class: TypeSymbol,
        call: ast.Call,
    ) -> Optional[Tuple[TypedConstant, ...]]:
        """Bind call arguments to the decorator class's ``__init__`` parameters.

        Returns:
            Constants in parameter order, or None when the call does not fit the signature.
        """
        line = call.lineno
        if any(isinstance(arg, ast.Starred) for arg in call.args) or any(kw.arg is None for kw in call.keywords):
            return None

        parameters = _constructor_parameters(attribute_class)
        if parameters is None:
            expressions = list(call.args) + [kw.value for kw in call.keywords]
            return tuple(self.evaluate_constant(module_name, expression, line) for expression in expressions)

        positional = [parameter for parameter in parameters if not parameter.keyword_only]
        if len(call.args) > len(positional):
            return None
        bound: Dict[str, ast.expr] = {parameter.name: arg for parameter, arg in zip(positional, call.args)}
        names = {parameter.name for parameter in parameters}
        for kw in call.keywords:
            if kw.arg not in names or kw.arg in bound:
                return None
            bound[kw.arg] = kw.value

        arguments = []
        for parameter in parameters:
            if parameter.name in bound:
                arguments.append(self.evaluate_constant(module_name, bound[parameter.name], line))
            elif parameter.default is not None:
                default = parameter.default
                arguments.append(self.evaluate_constant(attribute_class.module, default, default.lineno))
            else:
                return None
        return tuple(arguments)


def _package_prefixes(module_name: str) -> List[str]:
    parts = module_name.split(".")
    return [".".join(parts[:index]) for index in range(1, len(parts))]


def _enum_members(node: ast.ClassDef) -> Dict[str, Any]:
    members: Dict[str, Any] = {}
    for statement in node.body:
        if isinstance(statement, ast.Assign) and len(statement.targets) == 1:
            target, value = statement.targets[0], statement.value
        elif isinstance(statement, ast.AnnAssign) and statement.value is not None:
            target, value = statement.target, statement.value
        else:
            continue
        if not isinstance(target, ast.Name) or target.id.startswith("_"):
            continue
        members[target.id] = value.value if isinstance(value, ast.Constant) else None
    return members


def _constructor_parameters(symbol: TypeSymbol) -> Optional[List[_Parameter]]:
    for _, node in symbol.declarations:
        for statement in node.body:
            if isinstance(statement, ast.FunctionDef) and statement.name == "__init__":
                return _parameters_of(statement.args)
    return None


def _parameters_of(arguments: ast.arguments) -> List[_Parameter]:
    positional = list(arguments.posonlyargs) + list(arguments.args)
    defaults: List[Optional[ast.expr]] = [None] * (len(positional) - len(arguments.defaults))
    defaults.extend(arguments.defaults)
    # First positional parameter is self
    parameters = [_Parameter(arg.arg, default, False) for arg, default in zip(positional, defaults)][1:]
    parameters.extend(
        _Parameter(arg.arg, default, True) for arg, default in zip(arguments.kwonlyargs, arguments.kw_defaults)
    )
    return parameters


def _literal_names(value: Optional[ast.expr]) -> Optional[Tuple[str, ...]]:
    if not isinstance(value, (ast.List, ast.Tuple)):
        return None
    names = []
    for element in value.elts:
        if not isinstance(element, ast.Constant) or not isinstance(element.value, str):
            return None
        names.append(element.value)
    return tuple(names)
