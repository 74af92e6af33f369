"""
Google Vision label detection over the REST images:annotate endpoint.
"""

import base64
import logging
from typing import List, Optional

import httpx
from pydantic import BaseModel, Field, ValidationError

from .base import HttpProvider, ImageInput
from .types import GenerationResult


class EntityAnnotation(BaseModel):
    description: str = ""
    score: float = 0.0


class AnnotateImageResponse(BaseModel):
    labelAnnotations: List[EntityAnnotation] = Field(default_factory=list)
    error: Optional[dict] = None


class BatchAnnotateResponse(BaseModel):
    responses: List[AnnotateImageResponse] = Field(default_factory=list)


def format_labels(labels: List[EntityAnnotation]) -> str:
    if not labels:
        return "No labels detected."
    return "\n".join(f"{label.description} (Confidence: {label.score:.2f})" for label in labels)


class GoogleVisionClient(HttpProvider):
    """Label detection for an image URL or raw bytes."""

    def __init__(
        self,
        api_key: str,
        api_url: str = "https://vision.googleapis.com/v1/images:annotate",
        max_results: int = 10,
        timeout: float = 60.0,
        http_client: Optional[httpx.AsyncClient] = None,
        logger: Optional[logging.Logger] = None,
    ):
        if not api_key:
            raise ValueError("Google Vision API key is required")
        super().__init__(timeout=timeout, http_client=http_client, logger=logger)
        self._api_key = api_key
        self.api_url = api_url
        self.max_results = max_results

    async def detect_labels(self, image: ImageInput) -> GenerationResult:
        if not image:
            return GenerationResult.failure("invalid_argument", "Image must not be empty.")

        if isinstance(image, (bytes, bytearray)):
            source = {"content": base64.b64encode(bytes(image)).decode("ascii")}
        else:
            source = {"source": {"imageUri": image}}

        payload = {
            "requests": [
                {
                    "image": source,
                    "features": [{"type": "LABEL_DETECTION", "maxResults": self.max_results}],
                }
            ]
        }

        try:
            response = await self._request(
                "POST", self.api_url, params={"key": self._api_key}, json=payload
            )
        except httpx.TimeoutException:
            return GenerationResult.failure("timeout", "Timeout communicating with Google Vision.")
        except httpx.TransportError as e:
            return GenerationResult.failure("connection", f"Error communicating with Google Vision: {e}")
        except Exception as e:
            self.logger.error(f"Unexpected Google Vision error: {e}", exc_info=True)
            return GenerationResult.failure("unknown", f"Error processing image: {e}")

        if not response.is_success:
            self.logger.error(f"Google Vision error {response.status_code}: {response.text}")
            return GenerationResult.failure(
                "http_error",
                f"Google Vision returned status {response.status_code}. Response: {response.text}",
                status_code=response.status_code,
            )

        try:
            batch = BatchAnnotateResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            return GenerationResult.failure("parse_error", f"Failed to parse Google Vision response: {e}")

        if not batch.responses:
            return GenerationResult.success(format_labels([]))

        first = batch.responses[0]
        if first.error:
            return GenerationResult.failure(
                "provider_error", str(first.error.get("message") or first.error)
            )
        return GenerationResult.success(format_labels(first.labelAnnotations))
