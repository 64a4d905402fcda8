"""Application layer - Generation pass context and cancellation."""

import threading
from typing import Dict, List, Optional, Tuple

from miraveja_autoinject.domain import (
    Diagnostic,
    GeneratedSource,
    GenerationCancelledError,
    GeneratorOptions,
    GeneratorRunResult,
    ICompilation,
)


class CancellationToken:
    """Cooperative cancellation signal shared between a caller and a generation pass.

    Example:
        >>> token = CancellationToken()
        >>> token.cancel()
        >>> token.throw_if_cancellation_requested()  # Raises GenerationCancelledError
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    @property
    def is_cancellation_requested(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Request cancellation; safe to call from another thread."""
        self._event.set()

    def throw_if_cancellation_requested(self) -> None:
        """Raise GenerationCancelledError if cancellation was requested."""
        if self._event.is_set():
            raise GenerationCancelledError()


class GeneratorExecutionContext:
    """Inputs and outputs of one generation pass.

    Attributes:
        compilation: Snapshot of the program the pass runs against.
        options: Names used in the generated modules.
        cancellation_token: Signal checked by every stage.
        _sources: Generated sources by hint name, in emission order.
        _diagnostics: Diagnostics reported so far.
    """

    def __init__(
        self,
        compilation: ICompilation,
        options: Optional[GeneratorOptions] = None,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> None:
        self.compilation = compilation
        self.options = options or GeneratorOptions()
        self.cancellation_token = cancellation_token or CancellationToken()
        self._sources: Dict[str, GeneratedSource] = {}
        self._diagnostics: List[Diagnostic] = []

    def add_source(self, source: GeneratedSource) -> None:
        """Add a generated module to the pass output.

        Args:
            source: The generated module.

        Raises:
            ValueError: If a source with the same hint name was already added.
        """
        if source.hint_name in self._sources:
            raise ValueError(f"A source named '{source.hint_name}' was already added")
        self._sources[source.hint_name] = source

    def report_diagnostic(self, diagnostic: Diagnostic) -> None:
        self._diagnostics.append(diagnostic)

    @property
    def generated_sources(self) -> Tuple[GeneratedSource, ...]:
        return tuple(self._sources.values())

    @property
    def diagnostics(self) -> Tuple[Diagnostic, ...]:
        return tuple(self._diagnostics)

    def to_result(self) -> GeneratorRunResult:
        return GeneratorRunResult(generated_sources=self.generated_sources, diagnostics=self.diagnostics)
