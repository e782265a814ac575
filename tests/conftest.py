from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient

from modules.categories.models import Category
from modules.products.models import Product

User = get_user_model()


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture()
def user():
    return User.objects.create_user(username="shopper", password="testpass123")


@pytest.fixture()
def other_user():
    return User.objects.create_user(username="intruder", password="testpass123")


@pytest.fixture()
def admin_user():
    return User.objects.create_user(
        username="staff", password="testpass123", is_staff=True
    )


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def auth_client(user):
    """APIClient with a force-authenticated shopper."""
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture()
def admin_client(admin_user):
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


@pytest.fixture()
def category():
    return Category.objects.create(name="Peripherals", description="Desk gear.")


@pytest.fixture()
def make_product(category):
    """Factory for products with sensible defaults."""

    def _make(name="Keyboard", price="10.00", stock=10, is_active=True, **extra):
        extra.setdefault("category", category)
        return Product.objects.create(
            name=name,
            price=Decimal(price),
            stock_quantity=stock,
            is_active=is_active,
            **extra,
        )

    return _make


@pytest.fixture()
def product_a(make_product):
    return make_product(name="Product A", price="10.00", stock=100)


@pytest.fixture()
def product_b(make_product):
    return make_product(name="Product B", price="25.50", stock=50)
