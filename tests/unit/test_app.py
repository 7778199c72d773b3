"""Unit tests for root API endpoints."""

from fastapi.testclient import TestClient


def test_root(client: TestClient):
    response = client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Supplier Catalog Extractor"
    assert data["version"] == "0.1.0"
    assert data["status"] == "running"


def test_health(client: TestClient):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_application_routes_registered():
    from src.api import app

    paths = {route.path for route in app.routes}
    assert "/api/v1/catalog/scrape" in paths
    assert "/api/v1/catalog/chat" in paths
    assert "/api/v1/preferences/ocr-quality" in paths
    assert "/api/v1/api-keys/status" in paths
