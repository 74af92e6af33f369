"""
CNN prediction client.

Uploads image bytes to a FastAPI-style classification service
(POST {base}/predict, multipart field "file") and returns a
ClassificationResult.

Invariants:
- Empty image bytes fail before any network call
- Every failure carries a human-readable detail
- Timeouts are reported distinctly from other transport errors
- Never raises
"""

import json
import logging
import mimetypes
from typing import Any, Dict, Optional

import httpx

from .base import HttpProvider, ImageClassifier
from .types import ClassificationResult

DEFAULT_FILENAME = "image.jpg"
CNN_TIMEOUT_S = 60.0


def _extract_label(body: Dict[str, Any]) -> Optional[str]:
    """Return the first predicted_<label> string field, e.g. predicted_aircraft."""
    for key, value in body.items():
        if key.startswith("predicted_") and isinstance(value, str):
            return value
    return None


def _extract_error_detail(text: str) -> str:
    """Pull "detail" out of a (possibly JSON) error body; fall back to raw text."""
    try:
        body = json.loads(text)
    except ValueError:
        return text
    if isinstance(body, dict) and "detail" in body:
        detail = body["detail"]
        return detail if isinstance(detail, str) else json.dumps(detail)
    return text


def _parse_success_body(body: Any) -> ClassificationResult:
    if not isinstance(body, dict):
        raise ValueError(f"expected a JSON object, got {type(body).__name__}")

    if body.get("success") is not True:
        detail = body.get("detail") or "Unknown error details from CNN API response."
        return ClassificationResult.failure(str(detail))

    probability = body.get("probability")
    return ClassificationResult(
        success=True,
        label=_extract_label(body),
        confidence=float(probability) if probability is not None else None,
        filename=body.get("filename"),
        detail=body.get("detail"),
    )


class CNNPredictionClient(HttpProvider, ImageClassifier):
    """
    Client for the CNN classification endpoint.

    Usage:
        client = CNNPredictionClient(base_url="http://localhost:8001")
        result = await client.predict(image_bytes, "jet.jpg")
        if result.success:
            print(result.label, result.confidence)
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = CNN_TIMEOUT_S,
        http_client: Optional[httpx.AsyncClient] = None,
        logger: Optional[logging.Logger] = None,
    ):
        if not base_url:
            raise ValueError("CNN API URL is required")
        super().__init__(timeout=timeout, http_client=http_client, logger=logger)
        self.base_url = base_url.rstrip("/")

    @property
    def endpoint_url(self) -> str:
        return f"{self.base_url}/predict"

    async def predict(self, image_bytes: bytes, filename: str) -> ClassificationResult:
        """
        Classify an image.

        Args:
            image_bytes: Raw image data
            filename: Original filename; blank uses DEFAULT_FILENAME

        Returns:
            ClassificationResult (never raises)
        """
        if not image_bytes:
            self.logger.error("predict called with empty image bytes")
            return ClassificationResult.failure("Image data is empty.")

        if not filename or not filename.strip():
            self.logger.warning(f"predict called without a filename, using {DEFAULT_FILENAME}")
            filename = DEFAULT_FILENAME

        content_type = mimetypes.guess_type(filename)[0] or "image/jpeg"
        files = {"file": (filename, bytes(image_bytes), content_type)}

        try:
            self.logger.info(f">>> Sending image to CNN API at {self.endpoint_url}")
            response = await self._request("POST", self.endpoint_url, files=files)
        except httpx.TimeoutException as e:
            self.logger.error(f"Timeout communicating with CNN API: {e}")
            return ClassificationResult.failure("Timeout communicating with CNN service.")
        except httpx.HTTPError as e:
            self.logger.error(f"HTTP request error communicating with CNN API: {e}")
            return ClassificationResult.failure(f"Error communicating with CNN service: {e}")
        except Exception as e:
            self.logger.error(f"Unexpected error during CNN API request: {e}", exc_info=True)
            return ClassificationResult.failure(
                f"An unexpected error occurred contacting CNN service: {e}"
            )

        self.logger.info(f"<<< CNN API status code: {response.status_code}")
        self.logger.debug(f"<<< Raw CNN API response: {response.text}")

        if not response.is_success:
            details = _extract_error_detail(response.text)
            self.logger.error(f"CNN API error {response.status_code}: {details}")
            return ClassificationResult.failure(
                f"CNN API returned status {response.status_code}. Details: {details}"
            )

        try:
            result = _parse_success_body(response.json())
        except (ValueError, TypeError) as e:
            self.logger.error(f"Failed to parse CNN response: {e}. Response: {response.text}")
            return ClassificationResult.failure(f"Failed to parse CNN response: {e}")

        if result.success:
            self.logger.info(f"CNN prediction: {result.label} ({result.confidence})")
        else:
            self.logger.warning(f"CNN API reported failure: {result.detail}")
        return result
