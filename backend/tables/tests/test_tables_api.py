"""
Tables API integration tests (/api/tables/).
"""
import pytest

from orders.models import Order
from tables.models import Table


@pytest.mark.django_db
class TestTablesList:
    """Listing and filters."""

    def test_list_ordered_by_location_then_number(self, api_client, table, other_table):
        Table.objects.create(number="T0", location="Main Hall")

        response = api_client.get("/api/tables/")

        assert response.status_code == 200
        assert [row["number"] for row in response.data] == ["T0", "T1", "T2"]

    def test_list_includes_current_order_number(self, api_client, dine_in_order, table):
        response = api_client.get(f"/api/tables/{table.id}/")

        assert response.status_code == 200
        assert response.data["status"] == "occupied"
        assert response.data["current_order_number"] == dine_in_order.order_number

    def test_filter_by_location(self, api_client, table, other_table):
        response = api_client.get("/api/tables/", {"location": "Terrace"})

        assert [row["number"] for row in response.data] == ["T2"]

    def test_available_and_active(self, api_client, table, other_table):
        other_table.status = Table.Status.CLEANING
        other_table.save()

        available = api_client.get("/api/tables/available/")
        active = api_client.get("/api/tables/active/")

        assert [row["number"] for row in available.data] == ["T1"]
        assert [row["number"] for row in active.data] == ["T1"]

    def test_missing_table(self, api_client):
        response = api_client.get("/api/tables/424242/")

        assert response.status_code == 404
        assert response.data["code"] == "not_found"


@pytest.mark.django_db
class TestTablesWrite:
    """Create / update / delete / status."""

    def test_create_table(self, api_client):
        response = api_client.post(
            "/api/tables/", {"number": "B4", "capacity": 6, "location": "Bar"}, format="json"
        )

        assert response.status_code == 201
        assert response.data["status"] == "available"
        assert Table.objects.get(number="B4").capacity == 6

    def test_status_is_read_only_on_create(self, api_client):
        response = api_client.post("/api/tables/", {"number": "B5", "status": "occupied"}, format="json")

        assert response.status_code == 201
        assert response.data["status"] == "available"

    def test_duplicate_number_rejected(self, api_client, table):
        response = api_client.post("/api/tables/", {"number": "T1"}, format="json")

        assert response.status_code == 400
        assert "number" in response.data

    def test_patch_capacity(self, api_client, table):
        response = api_client.patch(f"/api/tables/{table.id}/", {"capacity": 8}, format="json")

        assert response.status_code == 200
        assert response.data["capacity"] == 8

    def test_reserve_via_status_action(self, api_client, table):
        response = api_client.post(
            f"/api/tables/{table.id}/status/", {"status": "reserved", "reserved_for": "Okafor"}, format="json"
        )

        assert response.status_code == 200
        assert response.data["status"] == "reserved"
        assert response.data["reserved_for"] == "Okafor"

    def test_occupied_status_refused(self, api_client, table):
        response = api_client.post(f"/api/tables/{table.id}/status/", {"status": "occupied"}, format="json")

        assert response.status_code == 400
        assert response.data["code"] == "validation_error"

    def test_clearing_seated_table_conflicts(self, api_client, dine_in_order, table):
        response = api_client.post(f"/api/tables/{table.id}/status/", {"status": "cleaning"}, format="json")

        assert response.status_code == 409
        assert response.data["code"] == "invalid_transition"

    def test_delete_table(self, api_client, table):
        response = api_client.delete(f"/api/tables/{table.id}/")

        assert response.status_code == 204
        assert not Table.objects.exists()

    def test_delete_referenced_table_conflicts(self, api_client, dine_in_order, table):
        response = api_client.delete(f"/api/tables/{table.id}/")

        assert response.status_code == 409
        assert Table.objects.filter(pk=table.pk).exists()


@pytest.mark.django_db
class TestActiveOrderEndpoint:
    """GET /api/tables/{id}/active-order/."""

    def test_returns_order_with_items(self, api_client, dine_in_order, table, burger):
        from orders.services import OrderItemService

        OrderItemService.add_item_to_order(dine_in_order.id, burger.id, quantity=2)

        response = api_client.get(f"/api/tables/{table.id}/active-order/")

        assert response.status_code == 200
        assert response.data["order_number"] == dine_in_order.order_number
        assert len(response.data["items"]) == 1
        assert response.data["items"][0]["quantity"] == 2

    def test_free_table_returns_null(self, api_client, table):
        response = api_client.get(f"/api/tables/{table.id}/active-order/")

        assert response.status_code == 200
        assert response.data is None

    def test_completed_order_is_not_returned(self, api_client, dine_in_order, table):
        Order.objects.filter(pk=dine_in_order.pk).update(status=Order.OrderStatus.COMPLETED)

        response = api_client.get(f"/api/tables/{table.id}/active-order/")

        assert response.data is None
