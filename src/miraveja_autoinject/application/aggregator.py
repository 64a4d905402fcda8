"""Application layer - Aggregation of registration fragments into one module."""

import logging
from typing import List, Mapping, Optional, Sequence

from miraveja_autoinject.application.context import CancellationToken
from miraveja_autoinject.application.strategy_dispatcher import StrategyDispatcher
from miraveja_autoinject.domain import (
    GENERATED_HEADER,
    GeneratedSource,
    GeneratorOptions,
    MODULE_ALIAS_PREFIX,
    MarkerMetadata,
    RegistrationFragment,
    TypeSymbol,
)

logger = logging.getLogger(__name__)

_INDENT = " " * 4


class RegistrationAggregator:
    """Turns the target set into the registration module.

    Attributes:
        _options: Names used in the generated module.
        _dispatcher: Strategy dispatcher producing one fragment per class.
    """

    def __init__(
        self,
        options: Optional[GeneratorOptions] = None,
        dispatcher: Optional[StrategyDispatcher] = None,
    ) -> None:
        self._options = options or GeneratorOptions()
        self._dispatcher = dispatcher or StrategyDispatcher(self._options)

    def collect(
        self,
        targets: Mapping[TypeSymbol, MarkerMetadata],
        cancellation_token: Optional[CancellationToken] = None,
    ) -> List[RegistrationFragment]:
        """Dispatch once per target and keep the fragments that were produced.

        Args:
            targets: Marked classes and their metadata, already deduplicated.
            cancellation_token: Checked once per target.

        Raises:
            GenerationCancelledError: If cancellation is requested.
        """
        token = cancellation_token or CancellationToken()
        fragments: List[RegistrationFragment] = []
        for symbol, metadata in targets.items():
            token.throw_if_cancellation_requested()
            fragment = self._dispatcher.dispatch(symbol, metadata)
            if fragment is not None:
                fragments.append(fragment)
        return fragments

    def aggregate(
        self,
        targets: Mapping[TypeSymbol, MarkerMetadata],
        cancellation_token: Optional[CancellationToken] = None,
    ) -> Optional[GeneratedSource]:
        """Build the registration module for a target set.

        Args:
            targets: Marked classes and their metadata, already deduplicated.
            cancellation_token: Checked once per target.

        Returns:
            The registration module, or None for an empty target set.

        Raises:
            GenerationCancelledError: If cancellation is requested.
            MalformedSymbolError: If a target cannot be referenced from generated code.

        Example:
            >>> source = aggregator.aggregate({user_service: MarkerMetadata(lifetime=0x01)})
            >>> print(source.text)
            ...
            def auto_inject(services):
                services.register(_autoinject_m0.UserService, lifetime="scoped")
                return services
        """
        if not targets:
            return None

        fragments = self.collect(targets, cancellation_token)
        text = self.render(fragments)
        logger.info(
            "Generated %s with %d registrations for %d marked classes",
            self._options.registration_module,
            len(fragments),
            len(targets),
        )
        return GeneratedSource.for_module(self._options.registration_module, text)

    def render(self, fragments: Sequence[RegistrationFragment]) -> str:
        """Render the module text for a list of fragments.

        Each module is imported under a private alias, so neither the routine
        nor its parameter can shadow a package the statements refer to.
        """
        services = self._options.services_parameter
        imports = sorted({module for fragment in fragments for module in fragment.imports})
        aliases = {module: f"{MODULE_ALIAS_PREFIX}{index}" for index, module in enumerate(imports)}

        lines = [
            GENERATED_HEADER,
            '"""Registers every class marked with ``Injectable`` on a service collection."""',
        ]
        if imports:
            lines.append("")
            lines.extend(f"import {module} as {aliases[module]}" for module in imports)
        lines.extend(["", ""])
        lines.append(f"def {self._options.routine_name}({services}):")
        lines.append(f'{_INDENT}"""Register the marked classes and return ``{services}``."""')
        lines.extend(f"{_INDENT}{fragment.render(aliases)}" for fragment in fragments)
        lines.append(f"{_INDENT}return {services}")
        return "\n".join(lines) + "\n"
