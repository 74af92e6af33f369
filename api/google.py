import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from inference import GoogleVisionClient
from api.dependencies import get_vision_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/google", tags=["google"])


@router.post("/labels")
async def detect_labels(
    image_url: str = Query("", alias="imageUrl"),
    client: GoogleVisionClient = Depends(get_vision_client),
):
    """Label detection for an image URL via Google Vision."""
    if not image_url.strip():
        return JSONResponse(status_code=400, content={"detail": "Please provide a valid image URL."})

    result = await client.detect_labels(image_url.strip())
    if not result.ok:
        logger.error(f"Google Vision label detection failed: {result.detail}")
        return JSONResponse(
            status_code=500,
            content={"detail": f"Internal server error: {result.detail}", "stage": result.error_type},
        )
    return {"altText": result.output}
