import pytest
from fastapi import status
from fastapi.testclient import TestClient


class TestHealthCheckAPI:
    """Test cases for the /health endpoint"""

    def test_get_health_success(self, client: TestClient):
        """Test successful health check endpoint"""
        response = client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data == {"status": "ok"}

    def test_get_health_content_type(self, client: TestClient):
        """Test that health check returns JSON content type"""
        response = client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        assert "application/json" in response.headers.get("content-type", "")

    def test_root_banner(self, client: TestClient):
        response = client.get("/")
        assert response.status_code == status.HTTP_200_OK
        assert response.text == "GarmentNFT API is running"

    @pytest.mark.parametrize("path", ["/health", "/api/nfts"])
    def test_public_endpoints_need_no_token(self, client: TestClient, path: str):
        response = client.get(path)
        assert response.status_code == status.HTTP_200_OK
