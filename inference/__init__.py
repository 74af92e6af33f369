"""
Provider boundary layer.

This package wraps every external inference provider behind a small
interface that never raises on upstream failures; callers receive
explicit result values instead.

Supported providers:
- OpenRouterClient: text generation and image analysis (LLM)
- CNNPredictionClient: binary image classification service
- GoogleVisionClient: label detection
- ReplicateClient + JobPoller: asynchronous prediction jobs
- StubProviderBackend / StubImageClassifier: deterministic fakes (CI/tests)

Example usage:
    from inference import OpenRouterClient, ModelType

    client = OpenRouterClient(api_key="...", api_url="...")
    result = await client.generate_text(ModelType.ChatGpt4o.value, "Hello, world!")
"""

from .types import (
    ClassificationResult,
    GenerationResult,
    JobHandle,
    JobResult,
    JobStatus,
)
from .models import DEFAULT_MODEL, ModelType
from .base import ImageAnalysisBackend, ImageClassifier, TextGenerationBackend
from .openrouter import OpenRouterClient
from .cnn import CNNPredictionClient
from .google_vision import GoogleVisionClient
from .replicate import JobPollError, JobSubmissionError, ReplicateClient, ReplicateError
from .polling import JobPoller
from .images import ImageFetchError, fetch_image, filename_from_url
from .stub import StubImageClassifier, StubProviderBackend

__all__ = [
    "ClassificationResult",
    "GenerationResult",
    "JobHandle",
    "JobResult",
    "JobStatus",
    "DEFAULT_MODEL",
    "ModelType",
    "ImageAnalysisBackend",
    "ImageClassifier",
    "TextGenerationBackend",
    "OpenRouterClient",
    "CNNPredictionClient",
    "GoogleVisionClient",
    "ReplicateClient",
    "ReplicateError",
    "JobSubmissionError",
    "JobPollError",
    "JobPoller",
    "ImageFetchError",
    "fetch_image",
    "filename_from_url",
    "StubImageClassifier",
    "StubProviderBackend",
]
