"""
Composite workflow state and outcome types.

The CompositeState is the single source of truth for one composite run.
It is request-scoped and never shared across requests.
"""

from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional

from inference import ClassificationResult, DEFAULT_MODEL, GenerationResult

Outcome = Literal[
    "completed",
    "invalid_argument",
    "classification_failed",
    "analysis_failed",
    "internal_error",
]


@dataclass
class CompositeState:
    """
    Invariants:
    - outcome is None until a terminal node writes it
    - classification is written only by classify_node
    - analysis is written only by analyze_node
    - user_prompt is None when the caller supplied no text
    """

    # Input
    image_bytes: Optional[bytes] = None
    filename: str = "image.jpg"
    model: str = DEFAULT_MODEL.value
    user_prompt: Optional[str] = None
    temperature: float = 1.0
    use_cnn: bool = True

    # Stages
    classification: Optional[ClassificationResult] = None
    prompt: Optional[str] = None
    analysis: Optional[GenerationResult] = None

    # Output
    outcome: Optional[Outcome] = None
    message: Optional[str] = None

    def __post_init__(self):
        if not 0.0 <= self.temperature <= 2.0:
            raise ValueError("temperature must be between 0.0 and 2.0")


@dataclass
class CompositeResult:
    outcome: Outcome
    response: Optional[str] = None
    label: Optional[str] = None
    confidence: Optional[float] = None
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome == "completed"

    def to_payload(self) -> Dict[str, Any]:
        """Public response body for a completed run."""
        return {
            "response": self.response,
            "predictedLabel": self.label,
            "confidence": self.confidence,
        }
