"""
LLM Router

Single-call endpoint: image analysis when an image URL is supplied,
plain text generation otherwise.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from inference import GenerationResult, OpenRouterClient
from inference.prompts import DEFAULT_ALT_TEXT_PROMPT, compose_prompt
from api.dependencies import get_openrouter_client
from api.schemas import ErrorResponse, LLMRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/llm", tags=["llm"])


def _clean(text: str) -> str:
    return text.replace('\\"', '"') if text else text


def _failure_response(result: GenerationResult) -> JSONResponse:
    status_code = 400 if result.error_type == "invalid_argument" else 500
    return JSONResponse(
        status_code=status_code,
        content={"detail": result.detail, "stage": result.error_type},
    )


@router.post(
    "/process-request",
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def process_request(
    request: LLMRequest,
    client: OpenRouterClient = Depends(get_openrouter_client),
):
    """
    Analyze an image by URL, or generate text from a prompt.

    Expected payload:
    {
        "model": "ChatGpt4o",
        "prompt": "Focus on the aircraft.",
        "imageUrl": "https://example.com/jet.jpg",
        "temperature": 1.0,
        "predictedLabel": "F-16",
        "confidence": 0.95
    }
    """
    if request.prompt is None and request.image_url is None:
        return JSONResponse(
            status_code=400,
            content={
                "detail": "Please provide at least a prompt or an image URL.",
                "stage": "invalid_argument",
            },
        )

    try:
        if request.image_url is not None:
            result = await client.analyze_image(
                request.model.value,
                request.image_url,
                compose_prompt(DEFAULT_ALT_TEXT_PROMPT, request.prompt),
                temperature=request.temperature,
                predicted_label=request.predicted_label,
                confidence=request.confidence,
            )
        else:
            result = await client.generate_text(request.model.value, request.prompt)
    except Exception as e:
        logger.error(f"Error in process_request: {e}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error.", "stage": "internal_error"},
        )

    if not result.ok:
        return _failure_response(result)

    return {"response": _clean(result.output)}
