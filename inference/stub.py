from typing import List, Optional

from .base import ImageAnalysisBackend, ImageClassifier, ImageInput, TextGenerationBackend
from .types import ClassificationResult, GenerationResult


class StubProviderBackend(TextGenerationBackend, ImageAnalysisBackend):
    """
    Deterministic fake LLM provider for testing and CI.

    This backend is fast, deterministic, and never fails silently.
    Records every call so tests can assert on what was sent.
    """

    def __init__(self, output: str = "This is a stubbed response.", fail_with: Optional[str] = None):
        self.output = output
        self.fail_with = fail_with
        self.calls: List[dict] = []

    async def generate_text(self, model: str, prompt: str) -> GenerationResult:
        self.calls.append({"op": "generate_text", "model": model, "prompt": prompt})
        if not model or not prompt:
            return GenerationResult.failure("invalid_argument", "Model and prompt are required.")
        if self.fail_with:
            return GenerationResult.failure("provider_error", self.fail_with)
        return GenerationResult.success(self.output)

    async def analyze_image(
        self,
        model: str,
        image: ImageInput,
        prompt: str,
        temperature: float = 1.0,
        predicted_label: Optional[str] = None,
        confidence: Optional[float] = None,
    ) -> GenerationResult:
        self.calls.append({
            "op": "analyze_image",
            "model": model,
            "prompt": prompt,
            "temperature": temperature,
            "predicted_label": predicted_label,
            "confidence": confidence,
        })
        if not model or not image:
            return GenerationResult.failure("invalid_argument", "Model and image are required.")
        if self.fail_with:
            return GenerationResult.failure("provider_error", self.fail_with)
        return GenerationResult.success(self.output)


class StubImageClassifier(ImageClassifier):
    """Deterministic fake CNN for testing and CI."""

    def __init__(
        self,
        label: str = "F-16",
        confidence: float = 0.95,
        fail_with: Optional[str] = None,
    ):
        self.label = label
        self.confidence = confidence
        self.fail_with = fail_with
        self.calls: List[dict] = []

    async def predict(self, image_bytes: bytes, filename: str) -> ClassificationResult:
        self.calls.append({"filename": filename, "size": len(image_bytes or b"")})
        if not image_bytes:
            return ClassificationResult.failure("Image data is empty.")
        if self.fail_with:
            return ClassificationResult.failure(self.fail_with)
        return ClassificationResult(
            success=True,
            label=self.label,
            confidence=self.confidence,
            filename=filename,
        )
