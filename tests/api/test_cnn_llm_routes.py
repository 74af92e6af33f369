"""
tests/api/test_cnn_llm_routes.py

Route tests for /api/cnn-llm: status mapping and request normalization.
Providers are replaced with stubs through dependency overrides.
"""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_cnn_client, get_composite_workflow
from inference import ImageFetchError, StubImageClassifier, StubProviderBackend
from main import app
from workflows import CompositeWorkflow


@pytest.fixture
def stubs():
    classifier = StubImageClassifier(label="F-16", confidence=0.95)
    analyzer = StubProviderBackend(output='An \\"F-16\\" in flight.')
    return classifier, analyzer


@pytest.fixture
def client(stubs):
    classifier, analyzer = stubs
    workflow = CompositeWorkflow(classifier=classifier, analyzer=analyzer)
    app.dependency_overrides[get_composite_workflow] = lambda: workflow
    app.dependency_overrides[get_cnn_client] = lambda: classifier
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestAnalyzeUpload:
    def test_success_returns_response_label_and_confidence(self, client, stubs):
        _, analyzer = stubs

        resp = client.post(
            "/api/cnn-llm/analyze",
            files={"file": ("jet.jpg", b"\xff\xd8\xffimg", "image/jpeg")},
            data={"model": "ChatGpt4o", "prompt": "string", "temperature": "0.5"},
        )

        assert resp.status_code == 200
        body = resp.json()
        assert body["predictedLabel"] == "F-16"
        assert body["confidence"] == 0.95
        call = analyzer.calls[0]
        assert call["model"] == "openai/gpt-4o"
        assert call["temperature"] == 0.5
        # "string" placeholder means no user prompt
        assert not call["prompt"].endswith("string")

    def test_missing_file_is_400(self, client):
        resp = client.post("/api/cnn-llm/analyze", data={"model": "ChatGpt4o"})

        assert resp.status_code == 400
        assert resp.json()["stage"] == "invalid_argument"

    def test_unknown_model_is_400(self, client):
        resp = client.post(
            "/api/cnn-llm/analyze",
            files={"file": ("jet.jpg", b"img", "image/jpeg")},
            data={"model": "NotAModel"},
        )

        assert resp.status_code == 400
        assert "Unknown model" in resp.json()["detail"]

    def test_cnn_failure_is_500_with_stage(self, client, stubs):
        classifier, analyzer = stubs
        classifier.fail_with = "CNN API returned status 503."

        resp = client.post(
            "/api/cnn-llm/analyze",
            files={"file": ("jet.jpg", b"img", "image/jpeg")},
        )

        assert resp.status_code == 500
        assert resp.json()["stage"] == "classification_failed"
        assert analyzer.calls == []

    def test_use_cnn_false_skips_classifier(self, client, stubs):
        classifier, _ = stubs

        resp = client.post(
            "/api/cnn-llm/analyze",
            files={"file": ("jet.jpg", b"img", "image/jpeg")},
            data={"use_cnn": "false"},
        )

        assert resp.status_code == 200
        assert resp.json()["predictedLabel"] is None
        assert classifier.calls == []


class TestPredictAndAnalyze:
    def test_downloads_image_then_runs_workflow(self, client, stubs):
        classifier, _ = stubs

        with patch("api.cnn_llm.fetch_image", return_value=b"img") as fetch:
            resp = client.post(
                "/api/cnn-llm/predict-and-analyze",
                json={"model": "ChatGpt4o", "imageUrl": "https://example.com/a/jet.png"},
            )

        assert resp.status_code == 200
        assert resp.json()["predictedLabel"] == "F-16"
        fetch.assert_awaited_once()
        assert classifier.calls[0]["filename"] == "jet.png"

    def test_placeholder_image_url_is_400(self, client):
        resp = client.post(
            "/api/cnn-llm/predict-and-analyze",
            json={"model": "ChatGpt4o", "imageUrl": "string"},
        )

        assert resp.status_code == 400

    def test_download_failure_is_400(self, client):
        with patch("api.cnn_llm.fetch_image", side_effect=ImageFetchError("404")):
            resp = client.post(
                "/api/cnn-llm/predict-and-analyze",
                json={"imageUrl": "https://example.com/missing.jpg"},
            )

        assert resp.status_code == 400
        assert "Could not download image" in resp.json()["detail"]

    def test_llm_failure_is_500(self, client, stubs):
        _, analyzer = stubs
        analyzer.fail_with = "upstream error"

        with patch("api.cnn_llm.fetch_image", return_value=b"img"):
            resp = client.post(
                "/api/cnn-llm/predict-and-analyze",
                json={"imageUrl": "https://example.com/jet.jpg"},
            )

        assert resp.status_code == 500
        assert resp.json()["stage"] == "analysis_failed"


class TestPredictOnly:
    def test_returns_label(self, client):
        resp = client.post(
            "/api/cnn-llm/predict",
            files={"file": ("jet.jpg", b"img", "image/jpeg")},
        )

        assert resp.status_code == 200
        assert resp.json() == {"predictedLabel": "F-16", "confidence": 0.95, "filename": "jet.jpg"}

    def test_unconfigured_cnn_is_503(self, client):
        app.dependency_overrides[get_cnn_client] = lambda: None

        resp = client.post(
            "/api/cnn-llm/predict",
            files={"file": ("jet.jpg", b"img", "image/jpeg")},
        )

        assert resp.status_code == 503
