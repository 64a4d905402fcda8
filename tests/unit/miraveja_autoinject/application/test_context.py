"""Unit tests for the generation context and cancellation token."""

import threading

import pytest

from miraveja_autoinject.application.context import CancellationToken, GeneratorExecutionContext
from miraveja_autoinject.domain import Diagnostic, GeneratedSource, GenerationCancelledError, GeneratorOptions
from miraveja_autoinject.infrastructure.python_host import Compilation


class TestCancellationToken:
    """Test cases for CancellationToken."""

    def test_new_token_is_not_cancelled(self):
        """Test that a fresh token does not raise."""
        token = CancellationToken()
        assert not token.is_cancellation_requested
        token.throw_if_cancellation_requested()

    def test_cancel_raises(self):
        """Test that a cancelled token raises GenerationCancelledError."""
        token = CancellationToken()
        token.cancel()
        assert token.is_cancellation_requested
        with pytest.raises(GenerationCancelledError):
            token.throw_if_cancellation_requested()

    def test_cancel_from_another_thread(self):
        """Test that cancellation requested on another thread is observed."""
        token = CancellationToken()
        thread = threading.Thread(target=token.cancel)
        thread.start()
        thread.join()
        assert token.is_cancellation_requested


class TestGeneratorExecutionContext:
    """Test cases for GeneratorExecutionContext."""

    def test_defaults(self):
        """Test that options and token are created when not given."""
        context = GeneratorExecutionContext(Compilation())
        assert context.options == GeneratorOptions()
        assert not context.cancellation_token.is_cancellation_requested
        assert context.generated_sources == ()
        assert context.diagnostics == ()

    def test_add_source_keeps_order(self):
        """Test that sources are returned in emission order."""
        context = GeneratorExecutionContext(Compilation())
        first = GeneratedSource.for_module("autoinject.markers", "")
        second = GeneratedSource.for_module("autoinject.registration", "")
        context.add_source(first)
        context.add_source(second)
        assert context.generated_sources == (first, second)

    def test_duplicate_hint_name_rejected(self):
        """Test that the same module cannot be added twice."""
        context = GeneratorExecutionContext(Compilation())
        context.add_source(GeneratedSource.for_module("autoinject.markers", ""))
        with pytest.raises(ValueError, match="already added"):
            context.add_source(GeneratedSource.for_module("autoinject.markers", "x = 1"))

    def test_to_result(self):
        """Test that the result carries sources and diagnostics."""
        context = GeneratorExecutionContext(Compilation())
        diagnostic = Diagnostic(id="AUTODI_01", title="t", message="m")
        context.report_diagnostic(diagnostic)
        result = context.to_result()
        assert result.diagnostics == (diagnostic,)
        assert result.has_errors
