"""Tests for the HTTP surface."""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).parent.parent))

import main
from errors import RecognitionFailure
from models import RecognitionResult


@pytest.fixture
def gateway(monkeypatch):
    fake = MagicMock()
    fake.provider_names = ["ocr_space", "tesseract"]
    monkeypatch.setattr(main, "_gateway", fake)
    return fake


@pytest.fixture
def client() -> TestClient:
    # No context manager: lifespan (real backends) is not started
    return TestClient(main.app)


class TestExtractEndpoint:
    def test_successful_extraction(self, client: TestClient, gateway: MagicMock, sample_image_bytes: bytes, profile_text: str):
        gateway.recognize.return_value = RecognitionResult(text=profile_text, confidence=95, source="ocr_space")

        resp = client.post("/api/v1/extract", files={"file": ("profile.png", sample_image_bytes, "image/png")})

        assert resp.status_code == 200
        body = resp.json()
        assert body["fields"]["experience_total"] == 125340000
        assert body["fields"]["display_name"] == "plyrzero"
        assert body["source"] == "ocr_space"
        assert body["no_fields_recovered"] is False

    def test_default_collection_bound(self, client: TestClient, gateway: MagicMock, sample_image_bytes: bytes):
        gateway.recognize.return_value = RecognitionResult(
            text="Pokedex Entries 1,500", confidence=95, source="ocr_space",
        )

        resp = client.post("/api/v1/extract", files={"file": ("p.png", sample_image_bytes, "image/png")})
        assert resp.json()["fields"]["collection_entries"] is None

        resp = client.post(
            "/api/v1/extract",
            files={"file": ("p.png", sample_image_bytes, "image/png")},
            data={"max_collection_entries": "1600"},
        )
        assert resp.json()["fields"]["collection_entries"] == 1500

    def test_non_positive_collection_bound_rejected(self, client: TestClient, gateway: MagicMock, sample_image_bytes: bytes):
        for bound in ("0", "-5"):
            resp = client.post(
                "/api/v1/extract",
                files={"file": ("p.png", sample_image_bytes, "image/png")},
                data={"max_collection_entries": bound},
            )
            assert resp.status_code == 422
        gateway.recognize.assert_not_called()

    def test_recognition_failure_asks_for_manual_entry(self, client: TestClient, gateway: MagicMock, sample_image_bytes: bytes):
        gateway.recognize.side_effect = RecognitionFailure("all failed")

        resp = client.post("/api/v1/extract", files={"file": ("p.png", sample_image_bytes, "image/png")})

        assert resp.status_code == 422
        assert "manually" in resp.json()["detail"]

    def test_empty_file(self, client: TestClient, gateway: MagicMock):
        resp = client.post("/api/v1/extract", files={"file": ("p.png", b"", "image/png")})
        assert resp.status_code == 400
        gateway.recognize.assert_not_called()

    def test_oversized_file(self, client: TestClient, gateway: MagicMock, monkeypatch):
        monkeypatch.setattr(main.settings, "MAX_UPLOAD_BYTES", 10)
        resp = client.post("/api/v1/extract", files={"file": ("p.png", b"x" * 11, "image/png")})
        assert resp.status_code == 413

    def test_gateway_not_ready(self, client: TestClient, monkeypatch, sample_image_bytes: bytes):
        monkeypatch.setattr(main, "_gateway", None)
        resp = client.post("/api/v1/extract", files={"file": ("p.png", sample_image_bytes, "image/png")})
        assert resp.status_code == 503


class TestExtractTextEndpoint:
    def test_extracts_from_text(self, client: TestClient):
        resp = client.post("/api/v1/extract-text", json={"text": "Distance Walked 1,234.5 km"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["fields"]["distance_walked"] == 1234.5
        assert body["source"] == "text"


class TestValidateEndpoint:
    def test_decrease(self, client: TestClient):
        resp = client.post(
            "/api/v1/validate",
            json={"extracted": {"experience_total": 100}, "baseline": {"experience_total": 200}},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["valid"] is False
        assert len(body["warnings"]) == 1

    def test_baseline_extra_fields_ignored(self, client: TestClient):
        resp = client.post(
            "/api/v1/validate",
            json={
                "extracted": {"experience_total": 300},
                "baseline": {"experience_total": 200, "trainer_level": 40},
            },
        )
        assert resp.json() == {"valid": True, "warnings": []}

    def test_negative_rejected(self, client: TestClient):
        resp = client.post(
            "/api/v1/validate",
            json={"extracted": {"entities_caught": -1}, "baseline": {}},
        )
        assert resp.status_code == 422


class TestHealth:
    def test_health(self, client: TestClient, gateway: MagicMock):
        resp = client.get("/health")
        assert resp.json() == {"status": "healthy", "providers": ["ocr_space", "tesseract"]}
