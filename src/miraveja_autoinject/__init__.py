"""
miraveja-autoinject: Generates service registrations for classes marked with Injectable.

Public API exports for the miraveja-autoinject package.
"""

# Application exports
from miraveja_autoinject.application.context import CancellationToken
from miraveja_autoinject.application.generator import AutoInjectGenerator
from miraveja_autoinject.application.service_collection import ServiceCollection

# Domain exports
from miraveja_autoinject.domain.enums import Lifetime, LifetimeCode
from miraveja_autoinject.domain.exceptions import (
    AutoInjectException,
    CompilationError,
    GenerationCancelledError,
    LifetimeError,
    MalformedSymbolError,
    SourceParseError,
)
from miraveja_autoinject.domain.models import Diagnostic, GeneratedSource, GeneratorOptions, GeneratorRunResult

# Infrastructure exports
from miraveja_autoinject.infrastructure.python_host import Compilation

__version__ = "0.1.0"

__all__ = [
    # Generator
    "AutoInjectGenerator",
    "CancellationToken",
    "Compilation",
    "ServiceCollection",
    # Models
    "Diagnostic",
    "GeneratedSource",
    "GeneratorOptions",
    "GeneratorRunResult",
    # Enums
    "Lifetime",
    "LifetimeCode",
    # Exceptions
    "AutoInjectException",
    "CompilationError",
    "GenerationCancelledError",
    "LifetimeError",
    "MalformedSymbolError",
    "SourceParseError",
]
