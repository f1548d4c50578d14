# ============================================================================
# FILE: tests/unit/test_api.py
# ============================================================================
"""
Tests for the FastAPI backend.
"""

import pytest
from fastapi.testclient import TestClient

from api.main import app


@pytest.fixture
def client():
    """HTTP test client for the API app"""
    return TestClient(app)


def test_health(client):
    """Test the health endpoints"""
    assert client.get("/").json()["status"] == "ok"
    assert client.get("/api/health").json() == {"status": "healthy"}


def test_capabilities(client):
    """Test the capability listing"""
    data = client.get("/api/capabilities").json()

    assert [d["type"] for d in data["documentTypes"]] == ["referral", "discharge-summary", "checkup"]
    assert data["fhirVersion"] == "R4B"
    assert "application/fhir+json" in data["formats"]
    assert [era["name"] for era in data["eras"]][-1] == "令和"


def test_convert_referral(client, referral_payload):
    """Test converting a valid referral"""
    response = client.post("/api/convert/referral", json=referral_payload)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["bundle"]["type"] == "document"
    assert len(body["bundle"]["entry"]) >= 4


def test_convert_validation_failure(client, discharge_payload):
    """Test that rule violations return 422 with the error report"""
    discharge_payload["admissionDate"] = "2024-03-10"
    discharge_payload["dischargeDate"] = "2024-03-01"

    response = client.post("/api/convert/discharge-summary", json=discharge_payload)

    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["bundle"] is None
    assert len(body["validation"]["errors"]) == 1


def test_convert_malformed_payload(client, referral_payload):
    """Test that malformed payloads return 400 with details"""
    referral_payload["unexpected"] = True

    response = client.post("/api/convert/referral", json=referral_payload)

    assert response.status_code == 400
    assert response.json()["detail"]["details"]


def test_convert_unknown_type(client, referral_payload):
    """Test that unknown document kinds are rejected"""
    del referral_payload["documentType"]

    response = client.post("/api/convert/prescription", json=referral_payload)

    assert response.status_code == 400


def test_validate_endpoint(client, referral_payload):
    """Test validating a bundle produced by the convert endpoint"""
    bundle = client.post("/api/convert/referral", json=referral_payload).json()["bundle"]

    response = client.post("/api/validate", json=bundle)

    assert response.status_code == 200
    assert response.json()["isValid"] is True

    bundle["type"] = "collection"
    assert client.post("/api/validate", json=bundle).json()["isValid"] is False


def test_era_to_gregorian(client):
    """Test era to Gregorian conversion"""
    response = client.get("/api/era/to-gregorian", params={"date": "令和3年4月1日"})
    assert response.status_code == 200
    assert response.json()["gregorian"] == "2021-04-01"

    response = client.get("/api/era/to-gregorian", params={"era": "R", "year": "元", "month": 5})
    assert response.json()["formatted"] == "令和元年5月1日"

    assert client.get("/api/era/to-gregorian", params={"date": "平成31年5月1日"}).status_code == 400
    assert client.get("/api/era/to-gregorian").status_code == 400

    response = client.get("/api/era/to-gregorian", params={"era": "令和", "year": "abc", "month": 4})
    assert response.status_code == 400
    assert "Invalid era year" in response.json()["detail"]


def test_gregorian_to_era(client):
    """Test Gregorian to era conversion"""
    data = client.get("/api/era/to-japanese", params={"date": "2019-04-30"}).json()

    assert data["era"] == "平成"
    assert data["year"] == 31

    assert client.get("/api/era/to-japanese", params={"date": "1800-01-01"}).status_code == 400
