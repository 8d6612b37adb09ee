"""API endpoint tests using FastAPI TestClient."""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from fastapi.testclient import TestClient

import api.server as server
from api.server import app
from doppl_vton.errors import AuthorizationDenied, InvalidCredential
from doppl_vton.models import AnalysisReport, GenerationResult
from doppl_vton.pipeline import TryOnOrchestrator


@pytest.fixture
def orchestrator(fast_config):
    """Install an orchestrator built from the isolated test config."""
    transport = MagicMock()
    transport.check_connection = AsyncMock(return_value=True)
    transport.close = AsyncMock()
    instance = TryOnOrchestrator(fast_config, transport=transport)
    with patch.object(server, "_orchestrator", instance):
        yield instance


@pytest.fixture
def client(orchestrator):
    return TestClient(app)


class TestHealthEndpoints:

    def test_root_endpoint(self, client):
        response = client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert "service" in data
        assert "version" in data

    def test_health_without_key(self, client):
        data = client.get("/health").json()

        assert data["status"] == "degraded"
        assert data["credential"] == "missing"
        assert data["busy"] is False

    def test_health_with_stored_key(self, client):
        client.post("/api/credential", json={"api_key": "AIzaKey"})
        data = client.get("/health").json()

        assert data["status"] == "ok"
        assert data["credential"] == "configured"
        assert data["gemini"] == "connected"

    def test_health_with_unreachable_provider(self, client, orchestrator):
        client.post("/api/credential", json={"api_key": "AIzaKey"})
        orchestrator.gemini.check_connection.return_value = False

        data = client.get("/health").json()

        assert data["status"] == "degraded"
        assert data["gemini"] == "disconnected"
        orchestrator.gemini.check_connection.assert_awaited_with("AIzaKey")

    def test_shutdown_closes_transport(self, orchestrator):
        with TestClient(app) as client:
            client.get("/")

        orchestrator.gemini.close.assert_awaited_once()


class TestMetadataEndpoints:

    def test_phases(self, client):
        data = client.get("/api/phases").json()

        assert [p["id"] for p in data] == ["ANALYZING", "WARPING", "COMPOSITING", "RENDERING"]
        assert all(p["label"] and p["detail"] for p in data)

    def test_models(self, client):
        data = client.get("/api/models").json()

        assert data["default"] == "gemini-2.5-flash-image"
        assert data["default"] in data["models"]


class TestCredentialEndpoints:

    def test_save_and_clear(self, client, orchestrator):
        assert client.post("/api/credential", json={"api_key": "AIzaKey"}).status_code == 200
        assert orchestrator.config.credential_file.exists()

        assert client.delete("/api/credential").status_code == 200
        assert not orchestrator.config.credential_file.exists()

    def test_empty_key_rejected(self, client):
        assert client.post("/api/credential", json={"api_key": "  "}).status_code == 422


class TestTryOnEndpoint:

    def test_missing_subject_photo(self, client):
        response = client.post("/api/tryon", json={"garment_photo": "data:image/png;base64,abc"})
        assert response.status_code == 422

    def test_missing_garment_photo(self, client):
        response = client.post("/api/tryon", json={"subject_photo": "data:image/png;base64,abc"})
        assert response.status_code == 422

    def test_success_response_format(self, client, orchestrator, png_data_url):
        result = GenerationResult(image=png_data_url, analysis=AnalysisReport.default("raw"))
        orchestrator.generate_from_data_urls = AsyncMock(return_value=result)

        response = client.post("/api/tryon", json={
            "subject_photo": png_data_url,
            "garment_photo": png_data_url,
            "prompt": "Make it oversized",
            "api_key": "AIzaKey",
        })

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["image"] == png_data_url
        assert data["analysis"]["scores"]["comfort"] == 5
        kwargs = orchestrator.generate_from_data_urls.call_args.kwargs
        assert kwargs["credential"] == "AIzaKey"
        assert kwargs["instruction"] == "Make it oversized"

    def test_stored_key_used_when_none_given(self, client, orchestrator, png_data_url):
        client.post("/api/credential", json={"api_key": "AIzaStored"})
        orchestrator.generate_from_data_urls = AsyncMock(side_effect=AuthorizationDenied("403"))

        client.post("/api/tryon", json={"subject_photo": png_data_url, "garment_photo": png_data_url})

        assert orchestrator.generate_from_data_urls.call_args.kwargs["credential"] == "AIzaStored"

    def test_error_response_format(self, client, orchestrator, png_data_url):
        orchestrator.generate_from_data_urls = AsyncMock(side_effect=AuthorizationDenied("403"))

        data = client.post("/api/tryon", json={
            "subject_photo": png_data_url,
            "garment_photo": png_data_url,
        }).json()

        assert data["success"] is False
        assert data["error_type"] == "authorization_denied"
        assert "403" in data["error"]

    def test_invalid_key_end_to_end(self, client, png_data_url):
        """A malformed key is rejected by the real interpreter before any request."""
        data = client.post("/api/tryon", json={
            "subject_photo": png_data_url,
            "garment_photo": png_data_url,
            "api_key": "sk-test",
        }).json()

        assert data["success"] is False
        assert data["error_type"] == InvalidCredential.code

    def test_busy_returns_conflict(self, client, orchestrator, png_data_url):
        orchestrator._generation = MagicMock()
        orchestrator._generation.done.return_value = False

        response = client.post("/api/tryon", json={
            "subject_photo": png_data_url,
            "garment_photo": png_data_url,
        })

        assert response.status_code == 409

    @pytest.mark.parametrize("photo", [
        "data:image/png;base64",
        "data:image/png;base64,@@not-base64@@",
        "data:image/png;base64,",
    ])
    def test_malformed_data_url(self, client, png_data_url, photo):
        """Broken uploads come back as a file read error, not a server error."""
        response = client.post("/api/tryon", json={
            "subject_photo": photo,
            "garment_photo": png_data_url,
            "api_key": "AIzaKey",
        })

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is False
        assert data["error_type"] == "file_read_error"
        assert data["error"]
