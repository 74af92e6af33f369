"""Route tests for /api/llm/process-request."""

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_openrouter_client
from inference import StubProviderBackend
from main import app


@pytest.fixture
def backend():
    return StubProviderBackend(output='Here is \\"quoted\\" text.')


@pytest.fixture
def client(backend):
    app.dependency_overrides[get_openrouter_client] = lambda: backend
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_prompt_only_generates_text(client, backend):
    resp = client.post("/api/llm/process-request", json={"model": "ChatGpt4o", "prompt": "Hi"})

    assert resp.status_code == 200
    assert resp.json() == {"response": 'Here is "quoted" text.'}
    assert backend.calls[0]["op"] == "generate_text"
    assert backend.calls[0]["model"] == "openai/gpt-4o"


def test_image_url_triggers_image_analysis_with_hint(client, backend):
    resp = client.post(
        "/api/llm/process-request",
        json={
            "imageUrl": "https://example.com/jet.jpg",
            "predictedLabel": "F-16",
            "confidence": 0.9,
            "temperature": 0.2,
        },
    )

    assert resp.status_code == 200
    call = backend.calls[0]
    assert call["op"] == "analyze_image"
    assert call["predicted_label"] == "F-16"
    assert call["temperature"] == 0.2


def test_placeholders_only_is_400(client, backend):
    resp = client.post(
        "/api/llm/process-request",
        json={"model": "ChatGpt4o", "prompt": "string", "imageUrl": "string"},
    )

    assert resp.status_code == 400
    assert backend.calls == []


def test_provider_failure_is_500(client, backend):
    backend.fail_with = "model overloaded"

    resp = client.post("/api/llm/process-request", json={"prompt": "Hi"})

    assert resp.status_code == 500
    assert resp.json() == {"detail": "model overloaded", "stage": "provider_error"}


def test_temperature_out_of_range_is_422(client):
    resp = client.post("/api/llm/process-request", json={"prompt": "Hi", "temperature": 5})

    assert resp.status_code == 422
