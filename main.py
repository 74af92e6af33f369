"""
FastAPI Application Entry Point

Integrates:
  - CNN + LLM composite workflow
  - LLM text / image analysis
  - Replicate prediction runs
  - Google Vision labels
  - Health checks
  - Middleware for logging & error handling

Run: uvicorn main:app --reload --host 0.0.0.0 --port 8000
"""

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.middleware.cors import CORSMiddleware

from api import cnn_llm_router, google_router, llm_router, replicate_router
from api.dependencies import set_http_client
from config import Config

# Setup logging
logging.basicConfig(
    level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan: startup and shutdown handlers.

    Owns the process-wide httpx.AsyncClient shared by all provider clients.
    """
    # Startup
    logger.info("=" * 60)
    logger.info("AltGen gateway starting up...")
    logger.info(f"Environment: {Config.ENVIRONMENT}")
    for provider, configured in Config.configured_providers().items():
        if configured:
            logger.info(f"Provider {provider}: configured")
        else:
            logger.warning(f"Provider {provider}: NOT configured (its endpoints answer 503)")
    logger.info("=" * 60)

    http_client = httpx.AsyncClient(timeout=Config.PROVIDER_TIMEOUT_S)
    set_http_client(http_client)

    yield

    # Shutdown
    logger.info("AltGen gateway shutting down...")
    set_http_client(None)
    await http_client.aclose()


# Create FastAPI app
app = FastAPI(
    title="AltGen Gateway API",
    description="Image and text analysis gateway for LLM, CNN, Google Vision and Replicate providers",
    version="1.0.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Middleware for logging
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests."""
    logger.debug(f"{request.method} {request.url.path}")
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"Request error: {str(e)}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "stage": "internal_error"},
        )


# Include routers
app.include_router(cnn_llm_router)
app.include_router(llm_router)
app.include_router(replicate_router)
app.include_router(google_router)


# Health check endpoints
@app.get("/health/live")
async def health_live():
    """Live health check (Kubernetes liveness probe)."""
    return {"status": "alive"}


@app.get("/health/ready")
async def health_ready():
    """Readiness health check (Kubernetes readiness probe)."""
    if Config.validate():
        return {"status": "ready", "providers": Config.configured_providers()}
    return JSONResponse(
        status_code=503,
        content={"status": "not_ready", "reason": "LLM provider is not configured"},
    )


@app.get("/", include_in_schema=False)
async def root():
    """Root redirects to the interactive API docs."""
    return RedirectResponse(url="/docs")


@app.get("/config/info")
async def config_info():
    """Get non-sensitive configuration info."""
    return {
        "environment": Config.ENVIRONMENT,
        "providers": Config.configured_providers(),
        "use_cnn_default": Config.USE_CNN_DEFAULT,
        "gateway_port": Config.GATEWAY_PORT,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=Config.GATEWAY_PORT,
        reload=Config.ENVIRONMENT == "development",
    )
