"""Unit tests for domain models."""

import ast

import pytest
from pydantic import ValidationError

from miraveja_autoinject.domain import (
    Diagnostic,
    DiagnosticSeverity,
    GeneratedSource,
    GeneratorOptions,
    GeneratorRunResult,
    Lifetime,
    RegistrationFragment,
    ServiceDescriptor,
    SyntaxTree,
    TypedConstant,
    TypedConstantKind,
    TypeKind,
    TypeSymbol,
)


class TestSyntaxTree:
    """Test cases for the SyntaxTree model."""

    def test_package_of_module(self):
        """Test that a plain module resolves relative imports against its parent."""
        tree = SyntaxTree(module_name="shop.orders.service", module_node=ast.parse(""))
        assert tree.package == "shop.orders"

    def test_package_of_package(self):
        """Test that a package resolves relative imports against itself."""
        tree = SyntaxTree(module_name="shop.orders", module_node=ast.parse(""), is_package=True)
        assert tree.package == "shop.orders"

    def test_package_of_top_level_module(self):
        """Test that a top-level module has no package."""
        tree = SyntaxTree(module_name="main", module_node=ast.parse(""))
        assert tree.package == ""

    def test_syntax_tree_is_frozen(self):
        """Test that trees cannot be modified."""
        tree = SyntaxTree(module_name="main", module_node=ast.parse(""))
        with pytest.raises(ValidationError):
            tree.module_name = "other"


class TestTypeSymbol:
    """Test cases for TypeSymbol."""

    def test_qualified_name(self):
        """Test qualified name of a nested class."""
        symbol = TypeSymbol("shop.orders", "Outer.Inner")
        assert symbol.qualified_name == "shop.orders.Outer.Inner"

    def test_identity_equality(self):
        """Test that two symbols with the same name are different symbols."""
        first = TypeSymbol("shop.orders", "OrderService")
        second = TypeSymbol("shop.orders", "OrderService")
        assert first != second
        assert len({first, second}) == 2

    def test_kind_properties(self):
        """Test enum and external flags."""
        assert TypeSymbol("enum", "Enum", TypeKind.EXTERNAL).is_external
        assert TypeSymbol("shop", "Color", TypeKind.ENUM).is_enum
        assert not TypeSymbol("shop", "Order").is_enum

    def test_repr(self):
        """Test representation used in error messages."""
        assert repr(TypeSymbol("shop", "Order")) == "<TypeSymbol shop.Order (class)>"


class TestTypedConstant:
    """Test cases for TypedConstant."""

    def test_null_constant(self):
        """Test that a primitive None is null."""
        assert TypedConstant(kind=TypedConstantKind.PRIMITIVE).is_null
        assert not TypedConstant(kind=TypedConstantKind.ERROR).is_null

    def test_array_constant(self):
        """Test that array constants hold nested constants."""
        element = TypedConstant(kind=TypedConstantKind.PRIMITIVE, value=1)
        array = TypedConstant(kind=TypedConstantKind.ARRAY, values=(element,))
        assert array.values == (element,)


class TestGeneratedSource:
    """Test cases for GeneratedSource."""

    def test_for_module(self):
        """Test that the hint name is derived from the module name."""
        source = GeneratedSource.for_module("autoinject.markers", "x = 1\n")
        assert source.hint_name == "autoinject/markers.py"
        assert source.module_name == "autoinject.markers"


class TestDiagnostic:
    """Test cases for Diagnostic."""

    def test_default_severity_is_error(self):
        """Test that diagnostics are errors unless stated otherwise."""
        diagnostic = Diagnostic(id="AUTODI_01", title="t", message="boom")
        assert diagnostic.severity == DiagnosticSeverity.ERROR

    def test_string_representation(self):
        """Test rendering with and without a location."""
        diagnostic = Diagnostic(id="AUTODI_01", title="t", message="boom")
        assert str(diagnostic) == "error AUTODI_01: boom"
        located = Diagnostic(id="AUTODI_01", title="t", message="boom", location="shop/orders.py")
        assert str(located) == "shop/orders.py: error AUTODI_01: boom"


class TestGeneratorRunResult:
    """Test cases for GeneratorRunResult."""

    def test_has_errors(self):
        """Test that only error diagnostics count as errors."""
        warning = Diagnostic(id="X", title="t", message="m", severity=DiagnosticSeverity.WARNING)
        error = Diagnostic(id="X", title="t", message="m")
        assert not GeneratorRunResult(diagnostics=(warning,)).has_errors
        assert GeneratorRunResult(diagnostics=(warning, error)).has_errors

    def test_get_source_and_as_modules(self):
        """Test looking up generated sources by module name."""
        source = GeneratedSource.for_module("autoinject.markers", "x = 1\n")
        result = GeneratorRunResult(generated_sources=(source,))
        assert result.get_source("autoinject.markers") is source
        assert result.get_source("autoinject.registration") is None
        assert result.as_modules() == {"autoinject.markers": "x = 1\n"}


class TestGeneratorOptions:
    """Test cases for GeneratorOptions."""

    def test_defaults(self):
        """Test default names and derived module names."""
        options = GeneratorOptions()
        assert options.routine_name == "auto_inject"
        assert options.services_parameter == "services"
        assert options.marker_module == "autoinject.markers"
        assert options.marker_qualified_name == "autoinject.markers.Injectable"
        assert options.registration_module == "autoinject.registration"

    def test_dotted_namespace(self):
        """Test that namespaces may be dotted."""
        options = GeneratorOptions(namespace="shop.generated")
        assert options.registration_module == "shop.generated.registration"

    @pytest.mark.parametrize(
        "field,value",
        [
            ("namespace", "shop..generated"),
            ("namespace", "my-shop"),
            ("routine_name", "class"),
            ("routine_name", "auto inject"),
            ("services_parameter", "1services"),
            ("services_parameter", "_autoinject_m0"),
            ("routine_name", "_autoinject_m1"),
        ],
    )
    def test_invalid_names_rejected(self, field, value):
        """Test that names which cannot appear in generated code are rejected."""
        with pytest.raises(ValidationError):
            GeneratorOptions(**{field: value})


class TestServiceDescriptor:
    """Test cases for ServiceDescriptor."""

    def test_descriptor_fields(self):
        """Test creating a descriptor."""

        class Repository:
            pass

        descriptor = ServiceDescriptor(
            service_type=Repository,
            implementation_type=Repository,
            lifetime=Lifetime.SCOPED,
        )
        assert descriptor.service_type is Repository
        assert descriptor.lifetime == Lifetime.SCOPED


class TestRegistrationFragment:
    """Test cases for rendering a fragment's statement."""

    def test_render_with_references(self):
        """Test that module placeholders are filled from the given references."""
        fragment = RegistrationFragment(
            implementation=TypeSymbol("shop.orders", "OrderService"),
            abstraction=TypeSymbol("shop.api", "IOrderService"),
            lifetime=Lifetime.SCOPED,
            statement='services.register(shop.orders.OrderService, abstraction=shop.api.IOrderService, lifetime="scoped")',
            template='services.register({1}.OrderService, abstraction={0}.IOrderService, lifetime="scoped")',
            imports=("shop.api", "shop.orders"),
        )
        assert fragment.render({"shop.api": "_a", "shop.orders": "_o"}) == (
            'services.register(_o.OrderService, abstraction=_a.IOrderService, lifetime="scoped")'
        )
        assert fragment.render({}) == fragment.statement
