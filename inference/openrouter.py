"""
OpenRouter provider client.

Sends chat-completion requests (text-only or multimodal) to the OpenRouter
API and normalizes every outcome into a GenerationResult.

Invariants:
- Empty model / prompt / image fails before any network call
- Raw bytes are embedded as a base64 data URI; URLs are passed by reference
- Never raises on transport, protocol, or data errors
- No retries at this layer
- The API key is never logged
"""

import base64
import json
import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, Field, ValidationError

from .base import HttpProvider, ImageAnalysisBackend, ImageInput, TextGenerationBackend
from .prompts import SHORT_ALT_TEXT_PROMPT, with_cnn_context
from .types import GenerationResult


# ──────────────────────────────────────────────────────────────
# RESPONSE SCHEMA
# ──────────────────────────────────────────────────────────────


class CompletionMessage(BaseModel):
    content: Optional[str] = None


class CompletionChoice(BaseModel):
    message: Optional[CompletionMessage] = None


class CompletionEnvelope(BaseModel):
    """Subset of the chat-completions response the gateway relies on."""

    choices: List[CompletionChoice] = Field(default_factory=list)
    error: Optional[Any] = None

    def first_content(self) -> str:
        if not self.choices or self.choices[0].message is None:
            return ""
        return self.choices[0].message.content or ""


# ──────────────────────────────────────────────────────────────
# HELPERS
# ──────────────────────────────────────────────────────────────

_MAGIC_MIME = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
)


def sniff_image_mime(data: bytes, default: str = "image/png") -> str:
    """Guess an image MIME type from its leading bytes."""
    for signature, mime in _MAGIC_MIME:
        if data.startswith(signature):
            return mime
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return default


def to_data_uri(data: bytes) -> str:
    """Encode raw image bytes as a data URI."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{sniff_image_mime(data)};base64,{encoded}"


def image_part(image: ImageInput) -> Dict[str, Any]:
    """Build the message part for an image given by URL or bytes."""
    if isinstance(image, (bytes, bytearray)):
        return {"type": "image_bytes", "image_bytes": to_data_uri(bytes(image))}
    return {"type": "image_url", "image_url": {"url": image}}


def _describe_error(error: Any) -> str:
    if isinstance(error, dict):
        return str(error.get("message") or json.dumps(error))
    return str(error)


# ──────────────────────────────────────────────────────────────
# CLIENT
# ──────────────────────────────────────────────────────────────


class OpenRouterClient(HttpProvider, TextGenerationBackend, ImageAnalysisBackend):
    """
    OpenRouter chat-completions client.

    Usage:
        client = OpenRouterClient(api_key="...", api_url="https://openrouter.ai/api/v1/chat/completions")
        result = await client.generate_text("openai/gpt-4o", "Hello")
        if result.ok:
            print(result.output)
    """

    def __init__(
        self,
        api_key: str,
        api_url: str,
        referer: str = "http://localhost:8000",
        title: str = "AltGen",
        timeout: float = 60.0,
        http_client: Optional[httpx.AsyncClient] = None,
        logger: Optional[logging.Logger] = None,
    ):
        if not api_url:
            raise ValueError("OpenRouter API URL is required")
        if not api_key:
            raise ValueError("OpenRouter API key is required")
        super().__init__(timeout=timeout, http_client=http_client, logger=logger)
        self.api_url = api_url
        self._api_key = api_key
        self.referer = referer
        self.title = title

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "HTTP-Referer": self.referer,
            "X-Title": self.title,
            "Content-Type": "application/json",
        }

    async def generate_text(self, model: str, prompt: str) -> GenerationResult:
        """
        Generate text for a plain prompt.

        Args:
            model: OpenRouter model identifier (e.g. "openai/gpt-4o")
            prompt: User prompt

        Returns:
            GenerationResult (never raises)
        """
        if not model:
            return GenerationResult.failure("invalid_argument", "Model must not be empty.")
        if not prompt or not prompt.strip():
            return GenerationResult.failure("invalid_argument", "Prompt must not be empty.")

        payload = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
        }
        return await self._send(payload)

    async def analyze_image(
        self,
        model: str,
        image: ImageInput,
        prompt: str,
        temperature: float = 1.0,
        predicted_label: Optional[str] = None,
        confidence: Optional[float] = None,
    ) -> GenerationResult:
        """
        Describe an image.

        Args:
            model: OpenRouter model identifier
            image: Image URL (sent as a reference) or raw bytes (sent inline)
            prompt: Instruction text
            temperature: Sampling temperature [0.0, 2.0]
            predicted_label: Optional CNN label used as a context hint
            confidence: Optional CNN confidence for the label

        Returns:
            GenerationResult (never raises)
        """
        if not model:
            return GenerationResult.failure("invalid_argument", "Model must not be empty.")
        if not image:
            return GenerationResult.failure("invalid_argument", "Image must not be empty.")

        instruction = prompt if prompt and prompt.strip() else SHORT_ALT_TEXT_PROMPT
        text = with_cnn_context(instruction, predicted_label, confidence)
        payload = {
            "model": model,
            "temperature": temperature,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": text},
                        image_part(image),
                    ],
                }
            ],
        }
        return await self._send(payload)

    async def _send(self, payload: Dict[str, Any]) -> GenerationResult:
        model = payload.get("model")
        self.logger.info(f">>> OpenRouter request (model={model})")

        try:
            response = await self._request(
                "POST", self.api_url, json=payload, headers=self._headers()
            )
        except httpx.TimeoutException:
            self.logger.warning(f"OpenRouter request timed out after {self.timeout}s")
            return GenerationResult.failure("timeout", "Timeout communicating with the model provider.")
        except httpx.TransportError as e:
            self.logger.warning(f"OpenRouter connection error: {e}")
            return GenerationResult.failure("connection", f"Error communicating with the model provider: {e}")
        except Exception as e:
            self.logger.error(f"Unexpected OpenRouter error: {e}", exc_info=True)
            return GenerationResult.failure("unknown", f"Unexpected error contacting the model provider: {e}")

        self.logger.info(f"<<< OpenRouter status code: {response.status_code}")

        if not response.is_success:
            self.logger.error(f"OpenRouter error {response.status_code}: {response.text}")
            return GenerationResult.failure(
                "http_error",
                f"Model provider returned status {response.status_code}. Response: {response.text}",
                status_code=response.status_code,
            )

        try:
            envelope = CompletionEnvelope.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            self.logger.error(f"Failed to parse OpenRouter response: {e}")
            return GenerationResult.failure(
                "parse_error",
                f"Failed to parse model provider response: {e}",
                status_code=response.status_code,
            )

        if envelope.error is not None:
            detail = _describe_error(envelope.error)
            self.logger.error(f"OpenRouter reported an error: {detail}")
            return GenerationResult.failure(
                "provider_error", detail, status_code=response.status_code
            )

        return GenerationResult.success(envelope.first_content())
