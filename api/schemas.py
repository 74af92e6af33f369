"""
Request/response schemas for the public API.

All "not supplied" values are normalized to None here, before they reach a
workflow: blank strings and the literal "string" placeholder that generated
API clients send for unset fields.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from inference import DEFAULT_MODEL, ModelType

PLACEHOLDER_VALUES = {"string"}


def normalize_optional_text(value: Any) -> Optional[str]:
    """Map blank / placeholder text to None."""
    if value is None:
        return None
    text = str(value).strip()
    if not text or text.lower() in PLACEHOLDER_VALUES:
        return None
    return text


def parse_model(value: Any) -> ModelType:
    """Accept a ModelType member name or wire identifier; blank means default."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return DEFAULT_MODEL
    try:
        return ModelType.parse(value.strip() if isinstance(value, str) else value)
    except ValueError:
        raise ValueError(f"Unknown model: {value}")


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())


class CNNWorkflowRequest(_CamelModel):
    """JSON body for the URL-based CNN + LLM workflow."""

    model: ModelType = Field(default=DEFAULT_MODEL)
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    prompt: Optional[str] = None
    temperature: float = Field(default=1.0, ge=0.0, le=2.0)
    use_cnn: Optional[bool] = Field(default=None, alias="useCnn")

    @field_validator("image_url", "prompt", mode="before")
    @classmethod
    def normalize_text(cls, value):
        return normalize_optional_text(value)

    @field_validator("model", mode="before")
    @classmethod
    def validate_model(cls, value):
        return parse_model(value)


class LLMRequest(_CamelModel):
    """JSON body for plain text generation or single-image analysis."""

    model: ModelType = Field(default=DEFAULT_MODEL)
    prompt: Optional[str] = None
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    temperature: float = Field(default=1.0, ge=0.0, le=2.0)
    predicted_label: Optional[str] = Field(default=None, alias="predictedLabel")
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)

    @field_validator("prompt", "image_url", "predicted_label", mode="before")
    @classmethod
    def normalize_text(cls, value):
        return normalize_optional_text(value)

    @field_validator("model", mode="before")
    @classmethod
    def validate_model(cls, value):
        return parse_model(value)


class ReplicateRunRequest(_CamelModel):
    """JSON body for a Replicate run."""

    image: Optional[str] = None
    prompt: Optional[str] = None
    use_cnn: Optional[bool] = Field(default=None, alias="useCnn")

    @field_validator("image", "prompt", mode="before")
    @classmethod
    def normalize_text(cls, value):
        return normalize_optional_text(value)


class ErrorResponse(BaseModel):
    detail: str
    stage: Optional[str] = None
