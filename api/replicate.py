"""
Replicate Router

Runs a Replicate vision model on an image URL and waits for the result.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from config import Config
from inference import JobSubmissionError, ReplicateClient, ReplicateError
from workflows import ReplicateWorkflow
from api.dependencies import get_replicate_client, get_replicate_workflow
from api.schemas import ErrorResponse, ReplicateRunRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/replicate", tags=["replicate"])


@router.post(
    "/run",
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
)
async def run_model(
    request: ReplicateRunRequest,
    workflow: ReplicateWorkflow = Depends(get_replicate_workflow),
):
    """
    Create a prediction and poll it to completion.

    Expected payload:
    {
        "image": "https://example.com/jet.jpg",
        "prompt": "Mention the weather.",
        "useCnn": false
    }
    """
    if request.image is None:
        return JSONResponse(
            status_code=400,
            content={"detail": "An image URL is required.", "stage": "invalid_argument"},
        )

    use_cnn = Config.USE_CNN_DEFAULT if request.use_cnn is None else request.use_cnn

    try:
        result = await workflow.run(request.image, request.prompt, use_cnn=use_cnn)
    except JobSubmissionError as e:
        logger.error(f"Error while creating prediction: {e}")
        return JSONResponse(
            status_code=500,
            content={"detail": f"Internal Server Error: {e}", "stage": "submit"},
        )
    except Exception as e:
        logger.error(f"Error while running model: {e}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal Server Error.", "stage": "internal_error"},
        )

    if result.job.status == "timeout":
        return JSONResponse(status_code=504, content={"detail": result.job.error, "stage": "timeout"})
    if not result.ok:
        return JSONResponse(status_code=500, content={"detail": result.job.error, "stage": "failed"})

    return {
        "finalOutput": result.output,
        "predictedLabel": result.label,
        "confidence": result.confidence,
    }


@router.get("/account")
async def account(client: ReplicateClient = Depends(get_replicate_client)):
    """Verify the configured Replicate API key."""
    try:
        return await client.account()
    except ReplicateError as e:
        logger.error(f"Replicate account check failed: {e}")
        raise HTTPException(status_code=502, detail=str(e))
