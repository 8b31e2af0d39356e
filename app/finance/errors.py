"""
Errors raised by the financial engine.

ValidationError is raised before any data source is touched.
CollaboratorError wraps a failed (or timed out) data-source call.
"""
import logging
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class FinanceError(Exception):
    """Base exception for the financial engine."""
    default_message = "A financial engine error occurred"
    default_code = "finance_error"

    def __init__(self, message: Optional[str] = None, code: Optional[str] = None, details: Optional[dict] = None):
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(FinanceError):
    """Malformed filter or input (negative consumption, end before start, ...)."""
    default_message = "Validation failed"
    default_code = "validation_error"


class CollaboratorError(FinanceError):
    """A data source query failed or timed out."""
    default_message = "Data source query failed"
    default_code = "collaborator_error"

    def __init__(self, operation: str, filters: Any = None, cause: Optional[BaseException] = None):
        self.operation = operation
        self.filters = filters
        self.cause = cause
        reason = f"{type(cause).__name__}: {cause}" if cause is not None else "unknown error"
        super().__init__(
            message=f"Error in {operation}: {reason}",
            details={"operation": operation, "filters": _dump_filters(filters)},
        )


def _dump_filters(filters: Any) -> Any:
    if filters is None:
        return None
    if hasattr(filters, "model_dump"):
        return filters.model_dump(mode="json")
    return filters


def call_source(operation: str, filters: Any, fn: Callable, *args, **kwargs):
    """
    Invoke a data-source callable, converting any failure into CollaboratorError.

    Timeouts raised by the source are treated exactly like any other failure.
    """
    try:
        return fn(*args, **kwargs)
    except CollaboratorError:
        raise
    except Exception as e:
        logger.warning(
            f"Data source call failed | operation={operation} "
            f"call={getattr(fn, '__name__', fn)} filters={_dump_filters(filters)} error={e!r}"
        )
        raise CollaboratorError(operation, filters, e) from e
