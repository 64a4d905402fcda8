"""
Domain layer - Core models of the generation pipeline.

This layer contains the symbols, value objects and contracts the generator works with.
It has no dependencies on other layers.
"""

from .enums import BindingMode, DiagnosticSeverity, Lifetime, LifetimeCode, TypedConstantKind, TypeKind
from .exceptions import (
    AutoInjectException,
    CompilationError,
    GenerationCancelledError,
    LifetimeError,
    MalformedSymbolError,
    SourceParseError,
)
from .interfaces import ICompilation, ISemanticModel, IServiceCollection
from .models import (
    AttributeData,
    CandidateDeclaration,
    Diagnostic,
    GENERATED_HEADER,
    GeneratedSource,
    GeneratorOptions,
    GeneratorRunResult,
    MODULE_ALIAS_PREFIX,
    MarkerMetadata,
    RegistrationFragment,
    ServiceDescriptor,
    SyntaxTree,
    TypedConstant,
)
from .symbols import TypeSymbol

# Rebuild Pydantic models to resolve forward references
TypedConstant.model_rebuild()

__all__ = [
    # Enums
    "BindingMode",
    "DiagnosticSeverity",
    "Lifetime",
    "LifetimeCode",
    "TypedConstantKind",
    "TypeKind",
    # Exceptions
    "AutoInjectException",
    "CompilationError",
    "GenerationCancelledError",
    "LifetimeError",
    "MalformedSymbolError",
    "SourceParseError",
    # Interfaces
    "ICompilation",
    "ISemanticModel",
    "IServiceCollection",
    # Models
    "AttributeData",
    "CandidateDeclaration",
    "Diagnostic",
    "GENERATED_HEADER",
    "GeneratedSource",
    "GeneratorOptions",
    "GeneratorRunResult",
    "MODULE_ALIAS_PREFIX",
    "MarkerMetadata",
    "RegistrationFragment",
    "ServiceDescriptor",
    "SyntaxTree",
    "TypedConstant",
    # Symbols
    "TypeSymbol",
]
