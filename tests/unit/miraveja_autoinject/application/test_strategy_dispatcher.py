"""Unit tests for registration strategies and their dispatcher."""

import pytest

from miraveja_autoinject.application.strategy_dispatcher import (
    AbstractionRegistrationStrategy,
    ConcreteRegistrationStrategy,
    StrategyDispatcher,
    type_reference,
)
from miraveja_autoinject.domain import (
    BindingMode,
    GeneratorOptions,
    Lifetime,
    LifetimeCode,
    MalformedSymbolError,
    MarkerMetadata,
    TypeSymbol,
)


@pytest.fixture
def order_service():
    return TypeSymbol("shop.orders", "OrderService")


@pytest.fixture
def order_repository():
    return TypeSymbol("shop.api", "IOrderRepository")


class TestTypeReference:
    """Test cases for referencing classes from generated code."""

    def test_reference(self, order_service):
        """Test module and expression of a class."""
        assert type_reference(order_service) == ("shop.orders", "shop.orders.OrderService")

    def test_nested_reference(self):
        """Test that nested classes are reached through their outer class."""
        symbol = TypeSymbol("shop.orders", "Outer.Inner")
        assert type_reference(symbol) == ("shop.orders", "shop.orders.Outer.Inner")

    def test_missing_module(self):
        """Test that a symbol without a module cannot be referenced."""
        with pytest.raises(MalformedSymbolError, match="no module"):
            type_reference(TypeSymbol("", "Orphan"))

    def test_invalid_module_name(self):
        """Test that a module name that is not importable is rejected."""
        with pytest.raises(MalformedSymbolError, match="'my-shop' is not an identifier"):
            type_reference(TypeSymbol("my-shop.orders", "OrderService"))


class TestStrategies:
    """Test cases for the two strategy kinds."""

    def test_concrete_statement(self, order_service):
        """Test the statement registering a class as itself."""
        fragment = ConcreteRegistrationStrategy(Lifetime.SCOPED, "services").generate(order_service)
        assert fragment.statement == 'services.register(shop.orders.OrderService, lifetime="scoped")'
        assert fragment.template == 'services.register({0}.OrderService, lifetime="scoped")'
        assert fragment.imports == ("shop.orders",)
        assert fragment.abstraction is None
        assert fragment.lifetime == Lifetime.SCOPED

    def test_abstraction_statement(self, order_service, order_repository):
        """Test the statement registering a class under an abstraction."""
        strategy = AbstractionRegistrationStrategy(Lifetime.SINGLETON, "collection")
        fragment = strategy.generate(order_service, order_repository)
        assert fragment.statement == (
            "collection.register(shop.orders.OrderService, "
            'abstraction=shop.api.IOrderRepository, lifetime="singleton")'
        )
        assert fragment.imports == ("shop.api", "shop.orders")
        assert fragment.template == (
            "collection.register({1}.OrderService, "
            'abstraction={0}.IOrderRepository, lifetime="singleton")'
        )
        assert fragment.abstraction is order_repository

    def test_abstraction_in_same_module(self, order_service):
        """Test that a shared module is imported once."""
        abstraction = TypeSymbol("shop.orders", "IOrderService")
        fragment = AbstractionRegistrationStrategy(Lifetime.TRANSIENT, "services").generate(order_service, abstraction)
        assert fragment.imports == ("shop.orders",)
        assert fragment.render({"shop.orders": "_m"}) == (
            'services.register(_m.OrderService, abstraction=_m.IOrderService, lifetime="transient")'
        )

    def test_abstraction_strategy_requires_abstraction(self, order_service):
        """Test that the abstraction strategy refuses a missing abstraction."""
        with pytest.raises(MalformedSymbolError):
            AbstractionRegistrationStrategy(Lifetime.SCOPED, "services").generate(order_service)

    def test_repr(self):
        """Test strategy representation."""
        assert repr(ConcreteRegistrationStrategy(Lifetime.SCOPED, "services")) == "ConcreteRegistrationStrategy(scoped)"


class TestStrategyDispatcher:
    """Test cases for strategy selection."""

    def test_six_strategies(self):
        """Test that every lifetime has a concrete and an abstraction strategy."""
        strategies = StrategyDispatcher().strategies
        assert len(strategies) == 6
        for (code, mode), strategy in strategies.items():
            assert strategy.lifetime == code.lifetime
            assert strategy.binding_mode == mode

    @pytest.mark.parametrize(
        "code,has_abstraction,lifetime,mode",
        [
            (0x01, False, Lifetime.SCOPED, BindingMode.CONCRETE),
            (0x02, False, Lifetime.SINGLETON, BindingMode.CONCRETE),
            (0x03, False, Lifetime.TRANSIENT, BindingMode.CONCRETE),
            (0x01, True, Lifetime.SCOPED, BindingMode.ABSTRACTION),
            (0x02, True, Lifetime.SINGLETON, BindingMode.ABSTRACTION),
            (0x03, True, Lifetime.TRANSIENT, BindingMode.ABSTRACTION),
        ],
    )
    def test_select(self, code, has_abstraction, lifetime, mode):
        """Test the strategy chosen for each lifetime and binding mode."""
        strategy = StrategyDispatcher().select(code, has_abstraction)
        assert strategy.lifetime == lifetime
        assert strategy.binding_mode == mode

    @pytest.mark.parametrize("code", [None, 0, 0x04, 0x99])
    def test_select_unknown_code(self, code):
        """Test that unknown codes select no strategy."""
        assert StrategyDispatcher().select(code, False) is None
        assert StrategyDispatcher().select(code, True) is None

    def test_select_is_deterministic(self):
        """Test that the same inputs always give the same strategy."""
        dispatcher = StrategyDispatcher()
        assert dispatcher.select(LifetimeCode.SCOPED, True) is dispatcher.select(LifetimeCode.SCOPED, True)

    def test_dispatch(self, order_service, order_repository):
        """Test dispatching a marked class."""
        fragment = StrategyDispatcher().dispatch(
            order_service, MarkerMetadata(lifetime=0x02, abstraction=order_repository)
        )
        assert "abstraction=shop.api.IOrderRepository" in fragment.statement
        assert fragment.lifetime == Lifetime.SINGLETON

    def test_dispatch_unknown_code(self, order_service):
        """Test that a class with an unknown code yields no fragment."""
        assert StrategyDispatcher().dispatch(order_service, MarkerMetadata(lifetime=0x99)) is None

    def test_services_parameter_from_options(self, order_service):
        """Test that statements use the configured parameter name."""
        dispatcher = StrategyDispatcher(GeneratorOptions(services_parameter="collection"))
        fragment = dispatcher.dispatch(order_service, MarkerMetadata(lifetime=0x03))
        assert fragment.statement.startswith("collection.register(")
