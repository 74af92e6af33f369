import logging
from abc import ABC, abstractmethod
from typing import Optional, Union

import httpx

from .types import ClassificationResult, GenerationResult

ImageInput = Union[str, bytes]


class TextGenerationBackend(ABC):
    """
    Abstract text generation boundary.
    Workflows depend ONLY on this interface.
    """

    @abstractmethod
    async def generate_text(self, model: str, prompt: str) -> GenerationResult:
        """Generate text from a prompt."""
        raise NotImplementedError


class ImageAnalysisBackend(ABC):
    """Abstract image analysis boundary."""

    @abstractmethod
    async def analyze_image(
        self,
        model: str,
        image: ImageInput,
        prompt: str,
        temperature: float = 1.0,
        predicted_label: Optional[str] = None,
        confidence: Optional[float] = None,
    ) -> GenerationResult:
        """Describe an image given as a URL or raw bytes."""
        raise NotImplementedError


class ImageClassifier(ABC):
    """Abstract image classification boundary."""

    @abstractmethod
    async def predict(self, image_bytes: bytes, filename: str) -> ClassificationResult:
        """Classify raw image bytes."""
        raise NotImplementedError


class HttpProvider:
    """
    Shared HTTP plumbing for provider clients.

    A process-wide httpx.AsyncClient may be injected; it is only read, never
    reconfigured, so concurrent requests can share it. Without one, each call
    opens a short-lived client.
    """

    def __init__(
        self,
        timeout: float,
        http_client: Optional[httpx.AsyncClient] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.timeout = timeout
        self._http_client = http_client
        self.logger = logger or logging.getLogger(type(self).__module__)

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        if self._http_client is not None:
            return await self._http_client.request(method, url, timeout=self.timeout, **kwargs)

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.request(method, url, **kwargs)
