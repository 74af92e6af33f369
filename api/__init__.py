from .cnn_llm import router as cnn_llm_router
from .llm import router as llm_router
from .replicate import router as replicate_router
from .google import router as google_router

__all__ = [
    "cnn_llm_router",
    "llm_router",
    "replicate_router",
    "google_router",
]
