"""Integration tests for preference endpoints."""

from fastapi.testclient import TestClient


def test_ocr_quality_defaults_to_high(client: TestClient):
    response = client.get("/api/v1/preferences/ocr-quality")

    assert response.status_code == 200
    assert response.json() == {"quality": "high"}


def test_ocr_quality_persists(client: TestClient):
    response = client.put("/api/v1/preferences/ocr-quality", json={"quality": "standard"})
    assert response.status_code == 200

    assert client.get("/api/v1/preferences/ocr-quality").json() == {"quality": "standard"}


def test_ocr_quality_rejects_unknown_value(client: TestClient):
    response = client.put("/api/v1/preferences/ocr-quality", json={"quality": "ultra"})
    assert response.status_code == 422
