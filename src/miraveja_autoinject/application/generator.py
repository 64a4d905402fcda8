"""Application layer - Generator orchestrating one generation pass."""

import logging
from typing import Dict, List, Optional

from miraveja_autoinject.application.aggregator import RegistrationAggregator
from miraveja_autoinject.application.context import CancellationToken, GeneratorExecutionContext
from miraveja_autoinject.application.failure_reporter import FailureReporter
from miraveja_autoinject.application.marker_emitter import MarkerDefinitionEmitter
from miraveja_autoinject.application.metadata_resolver import MetadataResolver
from miraveja_autoinject.application.scanner import DeclarationScanner
from miraveja_autoinject.application.strategy_dispatcher import StrategyDispatcher
from miraveja_autoinject.domain import (
    GenerationCancelledError,
    GeneratorOptions,
    GeneratorRunResult,
    ICompilation,
    MarkerMetadata,
    RegistrationFragment,
    TypeSymbol,
)

logger = logging.getLogger(__name__)


class AutoInjectGenerator:
    """Generates the registration routine for every class marked with ``Injectable``.

    A pass runs in two phases. The marker module is emitted first and parsed
    into a new compilation snapshot, so the marker class resolves to a real
    symbol. The candidates of that snapshot are then scanned, resolved,
    dispatched and aggregated into the registration module.

    Attributes:
        options: Names used in the generated modules.
        _scanner: Finds decorated class statements.
        _resolver: Keeps the classes whose decorator is the marker.
        _aggregator: Builds the registration module.
        _emitter: Emits the marker module.
        _failure_reporter: Reports a failed pass as a diagnostic.

    Example:
        >>> generator = AutoInjectGenerator()
        >>> result = generator.run(Compilation.from_sources({
        ...     "myapp.services": (
        ...         "from autoinject.markers import Injectable, InjectLifetime\\n"
        ...         "@Injectable(InjectLifetime.SCOPED)\\n"
        ...         "class UserService: ...\\n"
        ...     ),
        ... }))
        >>> [source.module_name for source in result.generated_sources]
        ['autoinject.markers', 'autoinject.registration']
    """

    def __init__(
        self,
        options: Optional[GeneratorOptions] = None,
        scanner: Optional[DeclarationScanner] = None,
        resolver: Optional[MetadataResolver] = None,
        dispatcher: Optional[StrategyDispatcher] = None,
        aggregator: Optional[RegistrationAggregator] = None,
        emitter: Optional[MarkerDefinitionEmitter] = None,
        failure_reporter: Optional[FailureReporter] = None,
    ) -> None:
        self.options = options or GeneratorOptions()
        self._scanner = scanner or DeclarationScanner()
        self._resolver = resolver or MetadataResolver()
        self._aggregator = aggregator or RegistrationAggregator(
            self.options, dispatcher or StrategyDispatcher(self.options)
        )
        self._emitter = emitter or MarkerDefinitionEmitter(self.options)
        self._failure_reporter = failure_reporter or FailureReporter()

    def execute(self, context: GeneratorExecutionContext) -> None:
        """Run one pass, writing sources and diagnostics to the context.

        The marker module is always added. The registration module is added
        only when at least one class carries the marker and aggregation
        succeeded; a failure is reported as a single diagnostic instead.
        Cancellation ends the pass quietly.

        Args:
            context: Compilation, options and output of the pass.
        """
        marker_source = self._emitter.emit()
        context.add_source(marker_source)
        compilation = self._with_marker(context.compilation, marker_source.text)

        def emit_registration() -> None:
            targets = self._resolve_targets(compilation, context.cancellation_token)
            source = self._aggregator.aggregate(targets, context.cancellation_token)
            if source is not None:
                context.add_source(source)

        try:
            self._failure_reporter.guard(context, emit_registration)
        except GenerationCancelledError:
            logger.info("Auto-inject generation cancelled")

    def run(
        self,
        compilation: ICompilation,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> GeneratorRunResult:
        """Run one pass against a compilation and return what it produced.

        Args:
            compilation: The program snapshot.
            cancellation_token: Optional cancellation signal.

        Returns:
            Generated sources and diagnostics of the pass.
        """
        context = GeneratorExecutionContext(compilation, self.options, cancellation_token)
        self.execute(context)
        return context.to_result()

    def plan(
        self,
        compilation: ICompilation,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> List[RegistrationFragment]:
        """Return the registrations a pass would generate, without rendering a module.

        Unlike ``run``, failures are raised rather than reported.

        Args:
            compilation: The program snapshot.
            cancellation_token: Optional cancellation signal.

        Raises:
            GenerationCancelledError: If cancellation is requested.
            MalformedSymbolError: If a marked class cannot be referenced from generated code.
        """
        token = cancellation_token or CancellationToken()
        compilation = self._with_marker(compilation, self._emitter.emit().text)
        targets = self._resolve_targets(compilation, token)
        return self._aggregator.collect(targets, token)

    def _with_marker(self, compilation: ICompilation, marker_text: str) -> ICompilation:
        tree = compilation.parse_syntax_tree(marker_text, self.options.marker_module)
        return compilation.add_syntax_trees(tree)

    def _resolve_targets(
        self,
        compilation: ICompilation,
        token: CancellationToken,
    ) -> Dict[TypeSymbol, MarkerMetadata]:
        token.throw_if_cancellation_requested()

        candidates = self._scanner.scan(compilation, token)
        if not candidates:
            return {}

        marker_symbol = compilation.get_type_by_qualified_name(self.options.marker_qualified_name)
        if marker_symbol is None:
            logger.warning("Marker class %s not found in compilation", self.options.marker_qualified_name)
            return {}

        return self._resolver.resolve(compilation, candidates, marker_symbol, token)
