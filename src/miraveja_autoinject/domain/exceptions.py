from typing import Optional


class AutoInjectException(Exception):
    """Base exception for auto-inject generation errors."""


class GenerationCancelledError(AutoInjectException):
    """Raised when the caller cancels a generation pass.

    Cancellation is not a failure: the generator stops without emitting a
    registration unit and without reporting a diagnostic.
    """

    def __init__(self) -> None:
        super().__init__("Generation pass was cancelled")


class MalformedSymbolError(AutoInjectException):
    """Raised when a symbol handed over by the host cannot be referenced in generated code.

    Attributes:
        symbol: Representation of the offending symbol.
        reason: Why the symbol cannot be used.
    """

    def __init__(self, symbol: object, reason: str) -> None:
        self.symbol = symbol
        self.reason = reason
        super().__init__(f"Malformed symbol {symbol!r}: {reason}")


class SourceParseError(AutoInjectException):
    """Raised when a source file cannot be parsed into a syntax tree.

    Attributes:
        location: File path or module name of the source.
        reason: Parser message.
        lineno: Line of the error, when known.
    """

    def __init__(self, location: str, reason: str, lineno: Optional[int] = None) -> None:
        self.location = location
        self.reason = reason
        self.lineno = lineno
        message = f"Cannot parse {location}"
        if lineno is not None:
            message += f" (line {lineno})"
        message += f": {reason}"
        super().__init__(message)


class CompilationError(AutoInjectException):
    """Raised for invalid operations against a compilation.

    This occurs when:
    - Asking for the semantic model of a tree that is not part of the compilation.
    - Asking a semantic model about a node of another tree.
    """


class LifetimeError(AutoInjectException):
    """Raised for invalid lifetime configurations.

    This occurs when:
    - Registering the same service type with conflicting lifetimes.
    - Invalid lifetime value provided.
    """
