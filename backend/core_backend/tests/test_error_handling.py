"""
Error rendering tests.

Service exceptions become {"error": ..., "code": ...} responses with a status
code per error kind; anything else keeps DRF's default behaviour.
"""
import pytest
from django.db import OperationalError
from rest_framework import status
from rest_framework.exceptions import NotAuthenticated

from core_backend.exceptions import (
    DuplicateSequenceNumber,
    FloorServiceError,
    InvalidTransition,
    OrderNotFound,
    ServiceValidationError,
    TableUnavailable,
    floor_exception_handler,
)
from tables.models import Table


class TestExceptionTaxonomy:
    """Messages and attributes carried by each service error."""

    def test_not_found_message_names_entity(self):
        exc = OrderNotFound(42)
        assert str(exc) == "Order 42 not found."
        assert exc.pk == 42
        assert exc.status_code == status.HTTP_404_NOT_FOUND

    def test_invalid_transition_records_states(self):
        exc = InvalidTransition("completed", "pending")
        assert exc.current == "completed"
        assert exc.requested == "pending"
        assert "completed" in str(exc) and "pending" in str(exc)

    def test_table_unavailable_mentions_status(self):
        table = Table(number="T9", status=Table.Status.RESERVED)
        exc = TableUnavailable(table)
        assert str(exc) == "Table T9 is not available (currently reserved)."

    def test_validation_error_is_a_value_error(self):
        assert isinstance(ServiceValidationError("bad"), ValueError)
        assert isinstance(ServiceValidationError("bad"), FloorServiceError)


class TestExceptionHandler:
    """floor_exception_handler mapping."""

    @pytest.mark.parametrize(
        "exc, expected_status, expected_code",
        [
            (ServiceValidationError("Quantity must be at least 1."), 400, "validation_error"),
            (OrderNotFound(1), 404, "not_found"),
            (InvalidTransition("completed", "pending"), 409, "invalid_transition"),
            (TableUnavailable(message="Table T1 is not available."), 409, "table_unavailable"),
            (DuplicateSequenceNumber("order", "ORD-004"), 409, "duplicate_sequence_number"),
        ],
    )
    def test_service_errors(self, exc, expected_status, expected_code):
        response = floor_exception_handler(exc, {})

        assert response.status_code == expected_status
        assert response.data == {"error": str(exc), "code": expected_code}

    def test_database_error_becomes_upstream_failure(self):
        response = floor_exception_handler(OperationalError("database is locked"), {})

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.data["code"] == "upstream_failure"

    def test_other_errors_use_drf_default(self):
        response = floor_exception_handler(NotAuthenticated(), {})

        assert response.status_code in (401, 403)
        assert "detail" in response.data


@pytest.mark.django_db
class TestErrorResponsesOverHttp:
    """The handler is wired into REST_FRAMEWORK."""

    def test_missing_order_returns_not_found_body(self, api_client):
        response = api_client.get("/api/orders/9999/")

        assert response.status_code == 404
        assert response.data == {"error": "Order 9999 not found.", "code": "not_found"}

    def test_serializer_errors_keep_drf_shape(self, api_client):
        response = api_client.post("/api/tables/", {"number": "T1", "capacity": 0}, format="json")

        assert response.status_code == 400
        assert "capacity" in response.data

    def test_health_check(self, client):
        response = client.get("/api/health/")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
