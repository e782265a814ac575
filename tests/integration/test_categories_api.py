"""Integration tests for the category endpoints."""

from __future__ import annotations

import pytest

from modules.categories.models import Category

pytestmark = pytest.mark.integration

URL = "/api/v1/categories/"


def test_list_paged(auth_client, category):
    Category.objects.create(name="Audio")
    body = auth_client.get(URL, {"page": 1, "page_size": 1}).json()
    assert body["data"]["total_count"] == 2
    assert [c["name"] for c in body["data"]["items"]] == ["Audio"]


def test_retrieve_and_by_name(auth_client, category):
    assert auth_client.get(f"{URL}{category.id}/").json()["data"]["name"] == "Peripherals"
    response = auth_client.get(f"{URL}by-name/peripherals/")
    assert response.status_code == 200
    assert response.json()["data"]["id"] == str(category.id)


def test_by_name_missing_404(auth_client):
    assert auth_client.get(f"{URL}by-name/nothing/").status_code == 404


def test_with_products(auth_client, category, product_a):
    body = auth_client.get(f"{URL}with-products/").json()
    assert body["data"][0]["product_count"] == 1
    assert body["data"][0]["products"][0]["name"] == "Product A"


def test_admin_create_update_delete(admin_client):
    created = admin_client.post(URL, {"name": "Storage"}, format="json")
    assert created.status_code == 201
    category_id = created.json()["data"]["id"]

    updated = admin_client.patch(
        f"{URL}{category_id}/", {"description": "Drives"}, format="json"
    )
    assert updated.json()["data"]["description"] == "Drives"

    assert admin_client.delete(f"{URL}{category_id}/").status_code == 200
    assert not Category.objects.filter(id=category_id).exists()


def test_delete_with_products_409(admin_client, category, product_a):
    response = admin_client.delete(f"{URL}{category.id}/")
    assert response.status_code == 409
    assert "existing products" in response.json()["message"]


def test_duplicate_name_409(admin_client, category):
    response = admin_client.post(URL, {"name": "PERIPHERALS"}, format="json")
    assert response.status_code == 409


def test_shopper_cannot_write(auth_client):
    assert auth_client.post(URL, {"name": "Nope"}, format="json").status_code == 403
