from unittest.mock import patch

import pytest

pytestmark = pytest.mark.integration


class TestHealthCheck:
    def test_healthy(self, client):
        response = client.get("/health")
        body = response.json()
        assert response.status_code == 200
        assert body["status"] == "healthy"
        assert body["services"]["database"]["status"] == "up"
        assert body["services"]["cache"]["status"] == "up"

    def test_cache_down_is_503(self, client):
        with patch("modules.core.views.cache") as broken:
            broken.set.side_effect = ConnectionError("redis down")
            response = client.get("/health")
        assert response.status_code == 503
        assert response.json()["services"]["cache"]["status"] == "down"

    def test_is_public(self, api_client):
        assert api_client.get("/health").status_code == 200


class TestCurrentUser:
    def test_requires_token(self, api_client):
        assert api_client.get("/api/v1/me").status_code == 401

    def test_invalid_token(self, api_client):
        api_client.credentials(HTTP_AUTHORIZATION="Bearer not-a-jwt")
        assert api_client.get("/api/v1/me").status_code == 401

    def test_jwt_roundtrip(self, api_client, user):
        tokens = api_client.post(
            "/api/v1/auth/token/",
            {"username": "shopper", "password": "testpass123"},
            format="json",
        ).json()
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")
        body = api_client.get("/api/v1/me").json()
        assert body == {"id": str(user.pk), "username": "shopper", "is_staff": False}
