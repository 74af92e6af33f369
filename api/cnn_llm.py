"""
CNN + LLM Router

Composite workflow endpoints: the image is classified by the CNN and then
described by the LLM with the prediction as context.

Status mapping:
  completed              -> 200 {response, predictedLabel, confidence}
  invalid_argument       -> 400 {detail, stage}
  classification_failed  -> 500 {detail, stage}
  analysis_failed        -> 500 {detail, stage}
  internal_error         -> 500 {detail, stage}
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import JSONResponse

from config import Config
from inference import (
    CNNPredictionClient,
    ImageFetchError,
    fetch_image,
    filename_from_url,
)
from workflows import CompositeResult, CompositeWorkflow
from workflows.composite import INTERNAL_ERROR_MESSAGE
from api.dependencies import get_cnn_client, get_composite_workflow, get_http_client
from api.schemas import CNNWorkflowRequest, ErrorResponse, normalize_optional_text, parse_model

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cnn-llm", tags=["cnn-llm"])

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


def error_response(status_code: int, detail: str, stage: Optional[str] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail, "stage": stage})


def composite_response(result: CompositeResult) -> JSONResponse:
    """Map a workflow outcome onto an HTTP response."""
    if result.ok:
        return JSONResponse(status_code=200, content=result.to_payload())
    status_code = 400 if result.outcome == "invalid_argument" else 500
    return error_response(status_code, result.detail or INTERNAL_ERROR_MESSAGE, result.outcome)


def _use_cnn(value: Optional[bool]) -> bool:
    return Config.USE_CNN_DEFAULT if value is None else value


@router.post("/analyze", responses=_ERROR_RESPONSES)
async def analyze_upload(
    file: Optional[UploadFile] = File(None),
    model: Optional[str] = Form(None),
    prompt: Optional[str] = Form(None),
    temperature: float = Form(1.0, ge=0.0, le=2.0),
    use_cnn: Optional[bool] = Form(None),
    workflow: CompositeWorkflow = Depends(get_composite_workflow),
):
    """
    Classify an uploaded image with the CNN, then describe it with the LLM.

    Form fields:
        file: image upload (required)
        model: ModelType name or OpenRouter identifier
        prompt: optional text appended to the default alt-text instruction
        temperature: [0.0, 2.0]
        use_cnn: false skips the CNN stage
    """
    try:
        try:
            model_type = parse_model(model)
        except ValueError as e:
            return error_response(400, str(e), "invalid_argument")

        image_bytes = await file.read() if file is not None else None
        filename = file.filename if file is not None else None

        logger.info(f"Composite analysis requested for {filename!r} with {model_type.value}")
        result = await workflow.run(
            image_bytes,
            filename or "image.jpg",
            model=model_type.value,
            user_prompt=normalize_optional_text(prompt),
            temperature=temperature,
            use_cnn=_use_cnn(use_cnn),
        )
        return composite_response(result)

    except Exception as e:
        logger.error(f"Unhandled error in composite upload workflow: {e}", exc_info=True)
        return error_response(500, INTERNAL_ERROR_MESSAGE, "internal_error")


@router.post("/predict-and-analyze", responses=_ERROR_RESPONSES)
async def predict_and_analyze(
    request: CNNWorkflowRequest,
    workflow: CompositeWorkflow = Depends(get_composite_workflow),
):
    """
    Download an image by URL, then run the composite workflow on it.

    Expected payload:
    {
        "model": "ChatGpt4o",
        "imageUrl": "https://example.com/jet.jpg",
        "prompt": "Mention the livery.",
        "temperature": 1.0,
        "useCnn": true
    }
    """
    if not request.image_url:
        return error_response(400, "Invalid request payload. Ensure imageUrl is provided.", "invalid_argument")

    try:
        try:
            image_bytes = await fetch_image(request.image_url, http_client=get_http_client())
        except ImageFetchError as e:
            logger.warning(f"Image download failed: {e}")
            return error_response(
                400,
                f"Could not download image from URL: {request.image_url}. "
                "Ensure the URL is valid and accessible.",
                "invalid_argument",
            )

        result = await workflow.run(
            image_bytes,
            filename_from_url(request.image_url),
            model=request.model.value,
            user_prompt=request.prompt,
            temperature=request.temperature,
            use_cnn=_use_cnn(request.use_cnn),
        )
        return composite_response(result)

    except Exception as e:
        logger.error(
            f"Fatal error during CNN-LLM workflow for URL {request.image_url}: {e}",
            exc_info=True,
        )
        return error_response(500, INTERNAL_ERROR_MESSAGE, "internal_error")


@router.post("/predict", responses=_ERROR_RESPONSES)
async def predict_only(
    file: Optional[UploadFile] = File(None),
    classifier: Optional[CNNPredictionClient] = Depends(get_cnn_client),
):
    """Run only the CNN stage on an uploaded image."""
    if classifier is None:
        return error_response(503, "CNN service is not configured.")

    image_bytes = await file.read() if file is not None else b""
    if not image_bytes:
        return error_response(400, "An image file is required.", "invalid_argument")

    result = await classifier.predict(image_bytes, file.filename or "")
    if not result.success:
        return error_response(500, f"CNN prediction failed: {result.detail}", "classification_failed")

    return {
        "predictedLabel": result.label,
        "confidence": result.confidence,
        "filename": result.filename,
    }
