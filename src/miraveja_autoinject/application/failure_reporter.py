"""Application layer - Protective boundary around registration generation."""

import logging
from typing import Callable

from miraveja_autoinject.application.context import GeneratorExecutionContext
from miraveja_autoinject.domain import Diagnostic, DiagnosticSeverity, GenerationCancelledError

logger = logging.getLogger(__name__)

DIAGNOSTIC_ID = "AUTODI_01"
DIAGNOSTIC_TITLE = "Auto-inject generator"


class FailureReporter:
    """Turns generation failures into a single error diagnostic.

    Whatever the guarded action raises is reported instead of propagated, so
    a broken marker usage never takes the host tool down, and nothing the
    action did not finish is emitted. Cancellation is not a failure and is
    passed through.
    """

    def create_diagnostic(self, error: Exception) -> Diagnostic:
        """Build the diagnostic for a captured failure."""
        return Diagnostic(
            id=DIAGNOSTIC_ID,
            title=DIAGNOSTIC_TITLE,
            message=f"Failed to generate injection code: {error}",
            severity=DiagnosticSeverity.ERROR,
        )

    def guard(self, context: GeneratorExecutionContext, action: Callable[[], None]) -> bool:
        """Run an action, reporting any failure on the context.

        Args:
            context: Context receiving the diagnostic.
            action: The generation step to protect.

        Returns:
            True when the action completed, False when a failure was reported.

        Raises:
            GenerationCancelledError: If the action was cancelled.
        """
        try:
            action()
        except GenerationCancelledError:
            raise
        except Exception as e:
            logger.error("Auto-inject generation failed", exc_info=True)
            context.report_diagnostic(self.create_diagnostic(e))
            return False
        return True
