"""
Root conftest.py for all backend tests.

This file makes fixtures available to all test files across all apps.
"""
import pytest
from decimal import Decimal


# ============================================================================
# AUTO-USE FIXTURES (Run automatically for every test)
# ============================================================================

@pytest.fixture(autouse=True)
def reset_app_settings():
    """
    Drop the AppSettings cache around each test.

    The cache is process-wide; without this a value written in one test
    (e.g. tax_rate) would leak into the next one after its rollback.
    """
    from settings.config import app_settings

    app_settings.invalidate()
    yield
    app_settings.invalidate()


@pytest.fixture(autouse=True)
def propagate_app_logs():
    """
    App loggers write to the console handler only (propagate=False); let
    their records reach caplog for the duration of a test.
    """
    import logging

    names = ["core_backend", "tables", "orders", "payments", "settings", "notifications"]
    loggers = [logging.getLogger(name) for name in names]
    previous = [logger.propagate for logger in loggers]
    for logger in loggers:
        logger.propagate = True
    yield
    for logger, value in zip(loggers, previous):
        logger.propagate = value


@pytest.fixture(autouse=True)
def event_bus(settings):
    """
    Route every realtime hint to a fresh InMemoryEventBus.

    Usage:
        def test_publishes(event_bus, django_capture_on_commit_callbacks):
            with django_capture_on_commit_callbacks(execute=True):
                ...
            assert event_bus.events("orderToKitchen")
    """
    from notifications.bus import get_event_bus, reset_event_bus

    settings.EVENT_BUS_BACKEND = "notifications.bus.InMemoryEventBus"
    reset_event_bus()
    yield get_event_bus()
    reset_event_bus()


# ============================================================================
# API CLIENT FIXTURES
# ============================================================================

@pytest.fixture
def api_client():
    """
    Provide DRF API client for API tests.

    Usage:
        def test_my_api(api_client):
            response = api_client.get('/api/tables/')
            assert response.status_code == 200
    """
    from rest_framework.test import APIClient
    return APIClient()


@pytest.fixture
def staff_user(db):
    from django.contrib.auth import get_user_model

    User = get_user_model()
    return User.objects.create_user(
        username="server1",
        password="test123",
        first_name="Sam",
        last_name="Server",
    )


@pytest.fixture
def authenticated_client(api_client, staff_user):
    api_client.force_authenticate(user=staff_user)
    return api_client


# ============================================================================
# MENU FIXTURES
# ============================================================================

@pytest.fixture
def food_category(db):
    from products.models import Category
    return Category.objects.create(name="Mains", kind=Category.Kind.FOOD)


@pytest.fixture
def beverage_category(db):
    from products.models import Category
    return Category.objects.create(name="Drinks", kind=Category.Kind.BEVERAGE)


@pytest.fixture
def burger(food_category):
    from products.models import Product
    return Product.objects.create(name="Burger", price=Decimal("10.00"), category=food_category, emoji="🍔")


@pytest.fixture
def fries(food_category):
    from products.models import Product
    return Product.objects.create(name="Fries", price=Decimal("4.50"), category=food_category)


@pytest.fixture
def soda(beverage_category):
    from products.models import Product
    return Product.objects.create(name="Soda", price=Decimal("2.50"), category=beverage_category)


# ============================================================================
# FLOOR FIXTURES
# ============================================================================

@pytest.fixture
def table(db):
    from tables.models import Table
    return Table.objects.create(number="T1", capacity=4, location="Main Hall")


@pytest.fixture
def other_table(db):
    from tables.models import Table
    return Table.objects.create(number="T2", capacity=2, location="Terrace")


@pytest.fixture
def dine_in_order(table, staff_user):
    """A pending dine-in order seated at `table`."""
    from orders.models import Order
    from orders.services import OrderService

    return OrderService.create_order(Order.OrderType.DINE_IN, table_id=table.id, server=staff_user)


@pytest.fixture
def takeaway_order(staff_user):
    from orders.models import Order
    from orders.services import OrderService

    return OrderService.create_order(Order.OrderType.TAKEAWAY, server=staff_user)
