"""Application layer - Identity-checked marker metadata extraction."""

import logging
from typing import Dict, Iterable, Optional

from miraveja_autoinject.application.context import CancellationToken
from miraveja_autoinject.domain import (
    AttributeData,
    CandidateDeclaration,
    ICompilation,
    MarkerMetadata,
    TypedConstantKind,
    TypeSymbol,
)

logger = logging.getLogger(__name__)


class MetadataResolver:
    """Resolves candidate declarations and reads their ``Injectable`` marker.

    A decorator counts as the marker only when its class is the very symbol
    the marker module declares. A user class that happens to be called
    ``Injectable`` is a different symbol and never matches.
    """

    def resolve(
        self,
        compilation: ICompilation,
        candidates: Iterable[CandidateDeclaration],
        marker_symbol: TypeSymbol,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> Dict[TypeSymbol, MarkerMetadata]:
        """Build the target set: marked symbols and their metadata.

        Args:
            compilation: Snapshot that already contains the marker module.
            candidates: Decorated class statements found by the scanner.
            marker_symbol: Symbol of the ``Injectable`` class.
            cancellation_token: Checked once per candidate.

        Returns:
            Metadata by symbol, in first-seen order. Several declarations of one
            symbol contribute a single entry.

        Raises:
            GenerationCancelledError: If cancellation is requested.
        """
        token = cancellation_token or CancellationToken()
        targets: Dict[TypeSymbol, MarkerMetadata] = {}

        for candidate in candidates:
            token.throw_if_cancellation_requested()

            model = compilation.get_semantic_model(candidate.syntax_tree)
            symbol = model.get_declared_symbol(candidate.node)
            if symbol is None or symbol in targets:
                continue

            metadata = self.extract_metadata(symbol, marker_symbol)
            if metadata is None:
                continue
            targets[symbol] = metadata

        logger.debug("Resolved %d marked classes", len(targets))
        return targets

    def find_marker(self, symbol: TypeSymbol, marker_symbol: TypeSymbol) -> Optional[AttributeData]:
        """Return the first attribute of a symbol whose class is the marker.

        Args:
            symbol: The class to inspect.
            marker_symbol: Symbol of the ``Injectable`` class.
        """
        for attribute in symbol.get_attributes():
            # Identity, not name: a shadowing class with the same name must not match
            if attribute.attribute_class is marker_symbol:
                return attribute
        return None

    def extract_metadata(self, symbol: TypeSymbol, marker_symbol: TypeSymbol) -> Optional[MarkerMetadata]:
        """Read lifetime and abstraction from a symbol's marker.

        The lifetime is the first enum-valued argument and the abstraction the
        first type-valued argument. A marker with neither still yields metadata
        (with no lifetime); the dispatcher turns that into "no strategy".

        Args:
            symbol: The class to inspect.
            marker_symbol: Symbol of the ``Injectable`` class.

        Returns:
            The metadata, or None when the symbol does not carry the marker.
        """
        attribute = self.find_marker(symbol, marker_symbol)
        if attribute is None:
            return None

        arguments = attribute.constructor_arguments
        lifetime = next((arg.value for arg in arguments if arg.kind == TypedConstantKind.ENUM), None)
        abstraction = next((arg.value for arg in arguments if arg.kind == TypedConstantKind.TYPE), None)

        # Enum members with non-integer values cannot be lifetime codes
        if not isinstance(lifetime, int) or isinstance(lifetime, bool):
            logger.debug("Marker on %s carries no lifetime code", symbol.qualified_name)
            lifetime = None
        return MarkerMetadata(lifetime=lifetime, abstraction=abstraction)
