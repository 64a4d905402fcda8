"""
Application layer - Generation pipeline and orchestration.

This layer contains the pipeline stages that turn marked classes into a registration routine.
It depends only on the Domain layer.
"""

from .aggregator import RegistrationAggregator
from .context import CancellationToken, GeneratorExecutionContext
from .failure_reporter import DIAGNOSTIC_ID, FailureReporter
from .generator import AutoInjectGenerator
from .marker_emitter import MarkerDefinitionEmitter
from .metadata_resolver import MetadataResolver
from .scanner import DeclarationScanner
from .service_collection import ServiceCollection
from .strategy_dispatcher import (
    AbstractionRegistrationStrategy,
    ConcreteRegistrationStrategy,
    RegistrationStrategy,
    StrategyDispatcher,
)

__all__ = [
    "AutoInjectGenerator",
    "CancellationToken",
    "GeneratorExecutionContext",
    "DeclarationScanner",
    "MetadataResolver",
    "StrategyDispatcher",
    "RegistrationStrategy",
    "ConcreteRegistrationStrategy",
    "AbstractionRegistrationStrategy",
    "RegistrationAggregator",
    "FailureReporter",
    "DIAGNOSTIC_ID",
    "MarkerDefinitionEmitter",
    "ServiceCollection",
]
