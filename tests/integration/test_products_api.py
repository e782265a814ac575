"""Integration tests for the product endpoints."""

from __future__ import annotations

import uuid

import pytest

from modules.orders.assembler import CartLine
from modules.orders.services import OrderService
from modules.products.models import Product

pytestmark = pytest.mark.integration

URL = "/api/v1/products/"


class TestReads:
    def test_list_with_filters_and_paging(self, auth_client, make_product):
        make_product(name="Red Pen", price="3.00")
        make_product(name="Blue Pen", price="4.00")
        make_product(name="Desk", price="300.00")

        response = auth_client.get(URL, {"name": "pen", "page_size": 1})
        body = response.json()
        assert response.status_code == 200
        assert body["data"]["total_count"] == 2
        assert body["data"]["total_pages"] == 2
        assert [p["name"] for p in body["data"]["items"]] == ["Blue Pen"]

    def test_filter_by_category_and_active(self, auth_client, category, make_product):
        make_product(name="In Category")
        make_product(name="Hidden", is_active=False)
        make_product(name="Elsewhere", category=None)

        body = auth_client.get(URL, {"category": str(category.id), "active": "true"}).json()
        assert [p["name"] for p in body["data"]["items"]] == ["In Category"]

    def test_invalid_filter_400(self, auth_client):
        response = auth_client.get(URL, {"min_price": "cheap"})
        assert response.status_code == 400
        assert response.json()["error"] == "validation"

    def test_retrieve(self, auth_client, product_a):
        body = auth_client.get(f"{URL}{product_a.id}/").json()
        assert body["data"]["name"] == "Product A"
        assert body["data"]["category_name"] == "Peripherals"

    def test_retrieve_missing_404(self, auth_client):
        assert auth_client.get(f"{URL}{uuid.uuid4()}/").status_code == 404

    def test_by_category(self, auth_client, category, product_a):
        body = auth_client.get(f"{URL}by-category/{category.id}/").json()
        assert [p["id"] for p in body["data"]] == [str(product_a.id)]

    def test_requires_authentication(self, api_client):
        assert api_client.get(URL).status_code == 401

    def test_by_name(self, auth_client, product_a):
        response = auth_client.get(f"{URL}by-name/product%20a/")
        assert response.status_code == 200
        assert response.json()["data"]["id"] == str(product_a.id)

    def test_by_name_missing_404(self, auth_client):
        response = auth_client.get(f"{URL}by-name/Nothing/")
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"


class TestCheckStock:
    def test_available(self, auth_client, product_b):
        response = auth_client.get(f"{URL}{product_b.id}/check-stock/", {"quantity": 50})
        body = response.json()
        assert response.status_code == 200
        assert body["data"]["is_available"] is True
        assert body["message"] == "Stock available. Current stock: 50."

    def test_insufficient_is_200_with_false(self, auth_client, product_b):
        response = auth_client.get(f"{URL}{product_b.id}/check-stock/", {"quantity": 51})
        body = response.json()
        assert response.status_code == 200
        assert body["data"]["is_available"] is False
        assert body["data"]["available"] == 50
        assert body["message"] == "Insufficient stock. Available: 50, Requested: 51."

    @pytest.mark.parametrize("params", [{}, {"quantity": "many"}, {"quantity": 0}])
    def test_bad_quantity_400(self, auth_client, product_a, params):
        response = auth_client.get(f"{URL}{product_a.id}/check-stock/", params)
        assert response.status_code == 400
        assert response.json()["error"] == "validation"

    def test_inactive_product_409(self, auth_client, make_product):
        retired = make_product(name="Retired", is_active=False)
        response = auth_client.get(f"{URL}{retired.id}/check-stock/", {"quantity": 1})
        assert response.status_code == 409

    def test_missing_product_404(self, auth_client):
        response = auth_client.get(f"{URL}{uuid.uuid4()}/check-stock/", {"quantity": 1})
        assert response.status_code == 404

    def test_requires_authentication(self, api_client, product_a):
        response = api_client.get(f"{URL}{product_a.id}/check-stock/", {"quantity": 1})
        assert response.status_code == 401


class TestWrites:
    def test_shopper_cannot_create(self, auth_client):
        response = auth_client.post(URL, {"name": "Lamp", "price": "10.00"}, format="json")
        assert response.status_code == 403

    def test_admin_create_201(self, admin_client, category):
        response = admin_client.post(
            URL,
            {
                "name": "Lamp",
                "price": "10.00",
                "stock_quantity": 3,
                "category_id": str(category.id),
            },
            format="json",
        )
        assert response.status_code == 201
        assert Product.objects.get(name="Lamp").stock_quantity == 3

    def test_create_invalid_price_400(self, admin_client):
        response = admin_client.post(URL, {"name": "Lamp", "price": "-1"}, format="json")
        assert response.status_code == 400

    def test_create_duplicate_409(self, admin_client, product_a):
        response = admin_client.post(
            URL, {"name": "Product A", "price": "1.00"}, format="json"
        )
        assert response.status_code == 409

    def test_patch_invalidates_cached_detail(self, admin_client, product_a):
        admin_client.get(f"{URL}{product_a.id}/")
        admin_client.patch(f"{URL}{product_a.id}/", {"price": "11.00"}, format="json")
        body = admin_client.get(f"{URL}{product_a.id}/").json()
        assert body["data"]["price"] == "11.00"

    def test_deactivate(self, admin_client, product_a):
        response = admin_client.post(f"{URL}{product_a.id}/deactivate/")
        assert response.json()["data"]["is_active"] is False

    def test_delete_referenced_409(self, admin_client, user, product_a):
        OrderService().create_order(user.pk, [CartLine(product_a.id, 1)])
        response = admin_client.delete(f"{URL}{product_a.id}/")
        assert response.status_code == 409

    def test_delete_unreferenced(self, admin_client, product_a):
        assert admin_client.delete(f"{URL}{product_a.id}/").status_code == 200
        assert not Product.objects.filter(id=product_a.id).exists()
