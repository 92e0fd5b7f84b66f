"""
Error taxonomy shared by every floor service, plus the DRF exception handler
that renders it.

Services raise these exceptions; views let them propagate so the handler can
map each one to a status code and a stable machine-readable code.
"""
import logging

from django.db import DatabaseError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class FloorServiceError(Exception):
    """Base exception for floor coordination errors."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "error"

    def __init__(self, message=None, **details):
        self.details = details
        super().__init__(message or self.default_message())

    def default_message(self):
        return "Request could not be processed."


class ServiceValidationError(FloorServiceError, ValueError):
    """Raised when input is malformed or out of range, before any mutation."""

    code = "validation_error"


class EntityNotFound(FloorServiceError, LookupError):
    """Raised when a referenced entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    entity = "Entity"

    def __init__(self, pk=None, message=None):
        self.pk = pk
        if message is None:
            message = f"{self.entity} {pk} not found." if pk is not None else f"{self.entity} not found."
        super().__init__(message, pk=pk)


class TableNotFound(EntityNotFound):
    entity = "Table"


class OrderNotFound(EntityNotFound):
    entity = "Order"


class OrderItemNotFound(EntityNotFound):
    entity = "Order item"


class CategoryNotFound(EntityNotFound):
    entity = "Category"


class ProductNotFound(EntityNotFound):
    entity = "Product"


class PaymentNotFound(EntityNotFound):
    entity = "Payment"


class InvalidTransition(FloorServiceError):
    """Raised when a status change is not permitted from the current state."""

    status_code = status.HTTP_409_CONFLICT
    code = "invalid_transition"

    def __init__(self, current=None, requested=None, message=None):
        self.current = current
        self.requested = requested
        if message is None:
            message = f"Cannot transition from {current} to {requested}."
        super().__init__(message, current=current, requested=requested)


class TableUnavailable(FloorServiceError):
    """Raised when a bind targets a table held by another active order."""

    status_code = status.HTTP_409_CONFLICT
    code = "table_unavailable"

    def __init__(self, table=None, message=None):
        self.table = table
        if message is None:
            number = getattr(table, "number", table)
            table_status = getattr(table, "status", None)
            message = f"Table {number} is not available"
            message += f" (currently {table_status})." if table_status else "."
        super().__init__(message)


class DuplicateSequenceNumber(FloorServiceError):
    """Raised when allocated display numbers keep colliding with stored ones."""

    status_code = status.HTTP_409_CONFLICT
    code = "duplicate_sequence_number"

    def __init__(self, sequence=None, value=None, message=None):
        self.sequence = sequence
        self.value = value
        if message is None:
            message = f"Failed to allocate a unique {sequence} number (last tried {value})."
        super().__init__(message, sequence=sequence, value=value)


class UpstreamFailure(FloorServiceError):
    """Raised when the storage layer is unreachable or rejects a write."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "upstream_failure"

    def default_message(self):
        return "Storage is temporarily unavailable."


def floor_exception_handler(exc, context):
    """
    Render floor service errors as {"error": ..., "code": ...}.

    Database errors escaping a view are reported as upstream failures.
    Everything else falls through to DRF's default handler.
    """
    if isinstance(exc, DatabaseError):
        logger.error(f"Storage error during request: {exc}", exc_info=True)
        exc = UpstreamFailure()

    if isinstance(exc, FloorServiceError):
        request = context.get("request")
        log = logger.warning if exc.status_code >= 500 else logger.info
        log(
            f"{exc.__class__.__name__}: {exc}",
            extra={
                "status_code": exc.status_code,
                "path": getattr(request, "path", None),
                "method": getattr(request, "method", None),
            },
        )
        return Response({"error": str(exc), "code": exc.code}, status=exc.status_code)

    return exception_handler(exc, context)
