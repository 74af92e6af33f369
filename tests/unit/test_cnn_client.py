"""
tests/unit/test_cnn_client.py

Tests for CNNPredictionClient.

Verifies:
✔ Empty bytes fail without a network call
✔ Blank filename falls back to image.jpg
✔ Success body is mapped to label / confidence
✔ success=false bodies carry the remote detail
✔ Non-2xx responses carry status and detail
✔ Malformed JSON is a parse failure
✔ Timeouts are distinguished from other transport errors
✔ Never raises
"""

import httpx
import pytest

from inference import CNNPredictionClient
from inference.cnn import DEFAULT_FILENAME, _extract_label


# ─────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────


def make_client(handler):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return CNNPredictionClient(base_url="http://cnn.test/", http_client=http_client)


SUCCESS_BODY = {
    "success": True,
    "predicted_aircraft": "F-16",
    "probability": 0.95,
    "filename": "jet.jpg",
}


# ─────────────────────────────────────────────────────
# Input validation
# ─────────────────────────────────────────────────────


class TestCNNInputValidation:
    @pytest.mark.asyncio
    async def test_empty_bytes_fail_without_network_call(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=SUCCESS_BODY)

        client = make_client(handler)
        result = await client.predict(b"", "jet.jpg")

        assert result.success is False
        assert result.detail == "Image data is empty."
        assert calls == []

    @pytest.mark.asyncio
    async def test_blank_filename_uses_default(self):
        seen = {}

        def handler(request):
            seen["body"] = request.content
            return httpx.Response(200, json=SUCCESS_BODY)

        client = make_client(handler)
        result = await client.predict(b"\xff\xd8\xffdata", "   ")

        assert result.success is True
        assert f'filename="{DEFAULT_FILENAME}"'.encode() in seen["body"]

    def test_missing_base_url_rejected(self):
        with pytest.raises(ValueError):
            CNNPredictionClient(base_url="")

    def test_endpoint_url_strips_trailing_slash(self):
        client = CNNPredictionClient(base_url="http://cnn.test/")
        assert client.endpoint_url == "http://cnn.test/predict"


# ─────────────────────────────────────────────────────
# Response handling
# ─────────────────────────────────────────────────────


class TestCNNResponses:
    @pytest.mark.asyncio
    async def test_success_maps_label_and_confidence(self):
        def handler(request):
            assert request.method == "POST"
            assert request.url.path == "/predict"
            return httpx.Response(200, json=SUCCESS_BODY)

        result = await make_client(handler).predict(b"img", "jet.jpg")

        assert result.success is True
        assert result.label == "F-16"
        assert result.confidence == pytest.approx(0.95)
        assert result.filename == "jet.jpg"

    @pytest.mark.asyncio
    async def test_success_false_carries_remote_detail(self):
        def handler(request):
            return httpx.Response(200, json={"success": False, "detail": "model not loaded"})

        result = await make_client(handler).predict(b"img", "jet.jpg")

        assert result.success is False
        assert result.detail == "model not loaded"

    @pytest.mark.asyncio
    async def test_success_false_without_detail_has_fallback(self):
        def handler(request):
            return httpx.Response(200, json={"success": False})

        result = await make_client(handler).predict(b"img", "jet.jpg")

        assert result.success is False
        assert result.detail == "Unknown error details from CNN API response."

    @pytest.mark.asyncio
    async def test_non_2xx_includes_status_and_detail(self):
        def handler(request):
            return httpx.Response(422, json={"detail": "unsupported format"})

        result = await make_client(handler).predict(b"img", "jet.jpg")

        assert result.success is False
        assert "422" in result.detail
        assert "unsupported format" in result.detail

    @pytest.mark.asyncio
    async def test_malformed_json_is_parse_failure(self):
        def handler(request):
            return httpx.Response(200, content=b"not json")

        result = await make_client(handler).predict(b"img", "jet.jpg")

        assert result.success is False
        assert "parse" in result.detail.lower()


# ─────────────────────────────────────────────────────
# Transport errors
# ─────────────────────────────────────────────────────


class TestCNNTransportErrors:
    @pytest.mark.asyncio
    async def test_timeout_is_reported_distinctly(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        result = await make_client(handler).predict(b"img", "jet.jpg")

        assert result.success is False
        assert result.detail == "Timeout communicating with CNN service."

    @pytest.mark.asyncio
    async def test_connection_error_is_not_a_timeout(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        result = await make_client(handler).predict(b"img", "jet.jpg")

        assert result.success is False
        assert result.detail.startswith("Error communicating with CNN service")
        assert "Timeout" not in result.detail


def test_extract_label_takes_any_predicted_field():
    assert _extract_label({"predicted_class": "Boeing 747"}) == "Boeing 747"
    assert _extract_label({"probability": 0.4}) is None
