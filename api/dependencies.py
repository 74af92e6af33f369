"""
Provider and workflow wiring for the API routers.

Clients are built lazily from Config and cached for the life of the process.
The shared httpx.AsyncClient is installed by the application lifespan.
A provider whose settings are missing answers 503 instead of being built.
"""

import logging
import threading
from typing import Optional

import httpx
from fastapi import HTTPException

from config import Config, ConfigurationError
from inference import (
    CNNPredictionClient,
    GoogleVisionClient,
    JobPoller,
    OpenRouterClient,
    ReplicateClient,
)
from workflows import CompositeWorkflow, ReplicateWorkflow

logger = logging.getLogger(__name__)

_http_client: Optional[httpx.AsyncClient] = None
_cache: dict = {}
# Reentrant: workflow factories resolve their providers through _cached.
_cache_lock = threading.RLock()


def set_http_client(client: Optional[httpx.AsyncClient]) -> None:
    """Install (or clear) the process-wide HTTP client and drop cached providers."""
    global _http_client
    with _cache_lock:
        _http_client = client
        _cache.clear()


def get_http_client() -> Optional[httpx.AsyncClient]:
    return _http_client


def _unavailable(provider: str, error: ConfigurationError) -> HTTPException:
    logger.error(f"{provider} is not configured: {error}")
    return HTTPException(status_code=503, detail=f"{provider} service is not configured.")


def _cached(key: str, factory):
    """Build once per process; sync dependencies run in the threadpool."""
    with _cache_lock:
        if key not in _cache:
            _cache[key] = factory()
        return _cache[key]


def _build_openrouter() -> OpenRouterClient:
    Config.require("OPENROUTER_API_KEY", "OPENROUTER_API_URL")
    return OpenRouterClient(
        api_key=Config.OPENROUTER_API_KEY,
        api_url=Config.OPENROUTER_API_URL,
        referer=Config.OPENROUTER_REFERER,
        title=Config.OPENROUTER_TITLE,
        timeout=Config.PROVIDER_TIMEOUT_S,
        http_client=_http_client,
    )


def _build_cnn() -> CNNPredictionClient:
    Config.require("CNN_API_URL")
    return CNNPredictionClient(
        base_url=Config.CNN_API_URL,
        timeout=Config.CNN_TIMEOUT_S,
        http_client=_http_client,
    )


def _build_replicate() -> ReplicateClient:
    Config.require("REPLICATE_API_KEY", "REPLICATE_API_URL", "REPLICATE_MODEL_VERSION")
    return ReplicateClient(
        api_key=Config.REPLICATE_API_KEY,
        base_url=Config.REPLICATE_API_URL,
        timeout=Config.PROVIDER_TIMEOUT_S,
        http_client=_http_client,
    )


def _build_vision() -> GoogleVisionClient:
    Config.require("GOOGLE_VISION_API_KEY")
    return GoogleVisionClient(
        api_key=Config.GOOGLE_VISION_API_KEY,
        api_url=Config.GOOGLE_VISION_API_URL,
        timeout=Config.PROVIDER_TIMEOUT_S,
        http_client=_http_client,
    )


def get_openrouter_client() -> OpenRouterClient:
    try:
        return _cached("openrouter", _build_openrouter)
    except ConfigurationError as e:
        raise _unavailable("LLM", e)


def get_cnn_client() -> Optional[CNNPredictionClient]:
    """The CNN is optional for some entry points; None when unconfigured."""
    try:
        return _cached("cnn", _build_cnn)
    except ConfigurationError as e:
        logger.warning(f"CNN client unavailable: {e}")
        return None


def get_replicate_client() -> ReplicateClient:
    try:
        return _cached("replicate", _build_replicate)
    except ConfigurationError as e:
        raise _unavailable("Replicate", e)


def get_vision_client() -> GoogleVisionClient:
    try:
        return _cached("google_vision", _build_vision)
    except ConfigurationError as e:
        raise _unavailable("Google Vision", e)


def get_composite_workflow() -> CompositeWorkflow:
    return _cached(
        "composite_workflow",
        lambda: CompositeWorkflow(
            classifier=get_cnn_client(),
            analyzer=get_openrouter_client(),
        ),
    )


def get_replicate_workflow() -> ReplicateWorkflow:
    def build():
        client = get_replicate_client()
        poller = JobPoller(
            client.fetch,
            interval_s=Config.REPLICATE_POLL_INTERVAL_S,
            max_attempts=Config.REPLICATE_MAX_POLL_ATTEMPTS,
            timeout_s=Config.REPLICATE_POLL_TIMEOUT_S,
        )
        return ReplicateWorkflow(
            client=client,
            poller=poller,
            model_version=Config.REPLICATE_MODEL_VERSION,
            classifier=get_cnn_client(),
            http_client=_http_client,
        )

    return _cached("replicate_workflow", build)
