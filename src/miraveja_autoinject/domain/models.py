import ast
import keyword
from typing import Any, Dict, Mapping, Optional, Tuple, Type

from pydantic import BaseModel, ConfigDict, Field, field_validator

from miraveja_autoinject.domain.enums import DiagnosticSeverity, Lifetime, TypedConstantKind
from miraveja_autoinject.domain.symbols import TypeSymbol


class SyntaxTree(BaseModel):
    """A parsed Python module together with the name it is importable under.

    Attributes:
        module_name: Dotted module name (``myapp.services``).
        module_node: The parsed module node.
        text: Source text the tree was parsed from.
        path: File path of the source, when it came from disk.
        is_package: True when the module is a package ``__init__``.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    module_name: str = Field(..., description="Dotted module name of the source.")
    module_node: ast.Module = Field(..., description="Parsed module node.")
    text: str = Field(default="", description="Source text of the module.")
    path: Optional[str] = Field(default=None, description="File path of the source.")
    is_package: bool = Field(default=False, description="Whether the module is a package.")

    @property
    def package(self) -> str:
        """Package that relative imports in this module are resolved against."""
        if self.is_package:
            return self.module_name
        return self.module_name.rpartition(".")[0]


class CandidateDeclaration(BaseModel):
    """A decorated class statement found by the scanner, not yet resolved."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    syntax_tree: SyntaxTree
    node: ast.ClassDef


class TypedConstant(BaseModel):
    """A decorator argument as evaluated by the semantic model.

    Attributes:
        kind: What the argument evaluated to.
        value: Literal value, enum member value, or TypeSymbol for TYPE constants.
        enum_type: Enumeration symbol for ENUM constants.
        values: Elements of ARRAY constants.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: TypedConstantKind
    value: Any = None
    enum_type: Optional[TypeSymbol] = None
    values: Tuple["TypedConstant", ...] = ()

    @property
    def is_null(self) -> bool:
        return self.kind == TypedConstantKind.PRIMITIVE and self.value is None


class AttributeData(BaseModel):
    """A class decorator bound to the class it instantiates.

    Attributes:
        attribute_class: Symbol of the decorator's class, None when unresolved.
        constructor_arguments: Arguments bound to the constructor parameters, in parameter order.
        has_errors: True when the call could not be bound to the constructor.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    attribute_class: Optional[TypeSymbol] = None
    constructor_arguments: Tuple[TypedConstant, ...] = ()
    has_errors: bool = False


class MarkerMetadata(BaseModel):
    """Metadata read from the ``Injectable`` marker on one class.

    Attributes:
        lifetime: Raw lifetime code, None when the marker carries no enum argument.
        abstraction: Type to register the class under, None for a concrete registration.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    lifetime: Optional[int] = Field(default=None, description="Raw lifetime code of the marker.")
    abstraction: Optional[TypeSymbol] = Field(default=None, description="Abstraction type, if any.")


class RegistrationFragment(BaseModel):
    """One generated registration statement for a single class.

    ``template`` spells the statement with ``{0}``, ``{1}``... standing for
    the modules in ``imports``, so the module that renders it can choose how
    each module is referenced. ``statement`` is the template with the plain
    module names filled in.

    Attributes:
        implementation: The class being registered.
        abstraction: The abstraction it is bound to, if any.
        lifetime: Registration lifetime.
        statement: The generated statement, without indentation.
        template: The statement with module placeholders.
        imports: Modules the statement needs imported.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    implementation: TypeSymbol
    abstraction: Optional[TypeSymbol] = None
    lifetime: Lifetime
    statement: str
    template: str
    imports: Tuple[str, ...] = ()

    def render(self, references: Mapping[str, str]) -> str:
        """Return the statement with each module spelled as ``references`` maps it."""
        return self.template.format(*(references.get(module, module) for module in self.imports))


class GeneratedSource(BaseModel):
    """A module produced by the generator.

    Attributes:
        hint_name: Relative file path of the module (``autoinject/markers.py``).
        module_name: Dotted module name.
        text: Module source text.
    """

    model_config = ConfigDict(frozen=True)

    hint_name: str
    module_name: str
    text: str

    @classmethod
    def for_module(cls, module_name: str, text: str) -> "GeneratedSource":
        """Create a source whose hint name is derived from its module name."""
        return cls(hint_name=module_name.replace(".", "/") + ".py", module_name=module_name, text=text)


class Diagnostic(BaseModel):
    """A message reported to the host tool.

    Attributes:
        id: Stable code identifying the generator.
        title: Short title.
        message: Human-readable message.
        severity: Diagnostic severity.
        location: Optional source location.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    message: str
    severity: DiagnosticSeverity = DiagnosticSeverity.ERROR
    location: Optional[str] = None

    def __str__(self) -> str:
        prefix = f"{self.location}: " if self.location else ""
        return f"{prefix}{self.severity} {self.id}: {self.message}"


class GeneratorRunResult(BaseModel):
    """Everything one generation pass produced."""

    model_config = ConfigDict(frozen=True)

    generated_sources: Tuple[GeneratedSource, ...] = ()
    diagnostics: Tuple[Diagnostic, ...] = ()

    @property
    def has_errors(self) -> bool:
        return any(d.severity == DiagnosticSeverity.ERROR for d in self.diagnostics)

    def get_source(self, module_name: str) -> Optional[GeneratedSource]:
        """Return the generated source for a module, if the pass emitted one."""
        for source in self.generated_sources:
            if source.module_name == module_name:
                return source
        return None

    def as_modules(self) -> Dict[str, str]:
        """Map module names to generated source text."""
        return {source.module_name: source.text for source in self.generated_sources}


# First line of every generated module
GENERATED_HEADER = "# This file is generated by miraveja-autoinject. Do not edit."

# Generated registration modules import user modules under these names
MODULE_ALIAS_PREFIX = "_autoinject_m"


def _check_identifier(value: str) -> str:
    if not value.isidentifier() or keyword.iskeyword(value):
        raise ValueError(f"'{value}' is not a valid Python identifier")
    return value


class GeneratorOptions(BaseModel):
    """Options controlling the names used in generated modules.

    Attributes:
        namespace: Package the generated modules are placed in.
        routine_name: Name of the generated registration function.
        services_parameter: Name of the function's service collection parameter.
    """

    model_config = ConfigDict(frozen=True)

    namespace: str = Field(default="autoinject", description="Package of the generated modules.")
    routine_name: str = Field(default="auto_inject", description="Name of the registration function.")
    services_parameter: str = Field(default="services", description="Name of the service collection parameter.")

    @field_validator("namespace")
    @classmethod
    def validate_namespace(cls, value: str) -> str:
        for part in value.split("."):
            _check_identifier(part)
        return value

    @field_validator("routine_name", "services_parameter")
    @classmethod
    def validate_identifier(cls, value: str) -> str:
        if value.startswith(MODULE_ALIAS_PREFIX):
            raise ValueError(f"'{value}' is reserved for generated module aliases")
        return _check_identifier(value)

    @property
    def marker_module(self) -> str:
        return f"{self.namespace}.markers"

    @property
    def marker_qualified_name(self) -> str:
        return f"{self.marker_module}.Injectable"

    @property
    def registration_module(self) -> str:
        return f"{self.namespace}.registration"


class ServiceDescriptor(BaseModel):
    """A service registered on a ServiceCollection.

    Attributes:
        service_type: Type the service is requested by.
        implementation_type: Class that is instantiated.
        lifetime: How long the instance should live.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    service_type: Type = Field(..., description="The type the service is resolved by.")
    implementation_type: Type = Field(..., description="The class that implements the service.")
    lifetime: Lifetime = Field(..., description="The lifetime of the registered service.")
