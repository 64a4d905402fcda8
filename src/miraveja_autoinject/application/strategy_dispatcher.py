"""Application layer - Registration strategy selection."""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple

from miraveja_autoinject.domain import (
    BindingMode,
    GeneratorOptions,
    Lifetime,
    LifetimeCode,
    MalformedSymbolError,
    MarkerMetadata,
    RegistrationFragment,
    TypeSymbol,
)

logger = logging.getLogger(__name__)


def type_reference(symbol: TypeSymbol) -> Tuple[str, str]:
    """Return the module to import and the expression naming a class.

    Args:
        symbol: A class symbol.

    Returns:
        Tuple of (module name, fully qualified expression).

    Raises:
        MalformedSymbolError: If the symbol has no module or its name is not a dotted identifier.
    """
    if not symbol.module:
        raise MalformedSymbolError(symbol, "symbol has no module")
    for part in f"{symbol.module}.{symbol.name}".split("."):
        if not part.isidentifier():
            raise MalformedSymbolError(symbol, f"'{part}' is not an identifier")
    return symbol.module, symbol.qualified_name


class RegistrationStrategy(ABC):
    """Generates the registration statement for one lifetime and binding mode.

    Attributes:
        lifetime: Lifetime written into the generated call.
        services_parameter: Name of the service collection in the generated routine.
    """

    binding_mode: BindingMode

    def __init__(self, lifetime: Lifetime, services_parameter: str) -> None:
        self.lifetime = lifetime
        self.services_parameter = services_parameter

    @abstractmethod
    def generate(self, implementation: TypeSymbol, abstraction: Optional[TypeSymbol] = None) -> RegistrationFragment:
        """Generate the fragment registering a class.

        Args:
            implementation: The marked class.
            abstraction: The abstraction to bind it to, for abstraction strategies.

        Raises:
            MalformedSymbolError: If a symbol cannot be referenced from generated code.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.lifetime.value})"


class ConcreteRegistrationStrategy(RegistrationStrategy):
    """Registers a class as itself."""

    binding_mode = BindingMode.CONCRETE

    def generate(self, implementation: TypeSymbol, abstraction: Optional[TypeSymbol] = None) -> RegistrationFragment:
        module, _ = type_reference(implementation)
        template = f'{self.services_parameter}.register({{0}}.{implementation.name}, lifetime="{self.lifetime.value}")'
        return RegistrationFragment(
            implementation=implementation,
            lifetime=self.lifetime,
            statement=template.format(module),
            template=template,
            imports=(module,),
        )


class AbstractionRegistrationStrategy(RegistrationStrategy):
    """Registers a class under an abstraction type."""

    binding_mode = BindingMode.ABSTRACTION

    def generate(self, implementation: TypeSymbol, abstraction: Optional[TypeSymbol] = None) -> RegistrationFragment:
        if abstraction is None:
            raise MalformedSymbolError(implementation, "abstraction registration without an abstraction type")
        module, _ = type_reference(implementation)
        abstraction_module, _ = type_reference(abstraction)
        imports = tuple(sorted({module, abstraction_module}))
        template = (
            f"{self.services_parameter}.register({{{imports.index(module)}}}.{implementation.name}, "
            f"abstraction={{{imports.index(abstraction_module)}}}.{abstraction.name}, "
            f'lifetime="{self.lifetime.value}")'
        )
        return RegistrationFragment(
            implementation=implementation,
            abstraction=abstraction,
            lifetime=self.lifetime,
            statement=template.format(*imports),
            template=template,
            imports=imports,
        )


class StrategyDispatcher:
    """Selects one of six registration strategies per marked class.

    Strategies are keyed by (lifetime code, binding mode). Selection depends
    on its inputs only, so a given program always yields the same output.

    Attributes:
        _strategies: Strategy table built once from the options.
    """

    def __init__(self, options: Optional[GeneratorOptions] = None) -> None:
        options = options or GeneratorOptions()
        self._strategies: Dict[Tuple[LifetimeCode, BindingMode], RegistrationStrategy] = {}
        for code in LifetimeCode:
            self._strategies[(code, BindingMode.CONCRETE)] = ConcreteRegistrationStrategy(
                code.lifetime, options.services_parameter
            )
            self._strategies[(code, BindingMode.ABSTRACTION)] = AbstractionRegistrationStrategy(
                code.lifetime, options.services_parameter
            )

    @property
    def strategies(self) -> Dict[Tuple[LifetimeCode, BindingMode], RegistrationStrategy]:
        return dict(self._strategies)

    def select(self, lifetime_code: Optional[int], has_abstraction: bool) -> Optional[RegistrationStrategy]:
        """Return the strategy for a lifetime code and binding mode.

        Args:
            lifetime_code: Raw code read from the marker.
            has_abstraction: Whether the marker names an abstraction type.

        Returns:
            The strategy, or None when the code is not a known lifetime.
        """
        code = LifetimeCode.parse(lifetime_code)
        if code is None:
            return None
        mode = BindingMode.ABSTRACTION if has_abstraction else BindingMode.CONCRETE
        return self._strategies.get((code, mode))

    def dispatch(self, symbol: TypeSymbol, metadata: MarkerMetadata) -> Optional[RegistrationFragment]:
        """Generate the fragment for one marked class.

        Args:
            symbol: The marked class.
            metadata: Its marker metadata.

        Returns:
            The fragment, or None when no strategy applies; the caller skips the class.

        Raises:
            MalformedSymbolError: If a symbol cannot be referenced from generated code.
        """
        strategy = self.select(metadata.lifetime, metadata.abstraction is not None)
        if strategy is None:
            logger.debug("No registration strategy for %s (lifetime %r)", symbol.qualified_name, metadata.lifetime)
            return None
        return strategy.generate(symbol, metadata.abstraction)
