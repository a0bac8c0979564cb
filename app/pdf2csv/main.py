"""
FastAPI application for the PDF-to-CSV conversion service.

Provides endpoints for:
- Converting an uploaded PDF into a CSV table using AI
- Downloading and listing generated CSV files
- Health checks
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from . import __version__
from .config import get_settings
from .exceptions import ConversionError
from .models import ErrorResponse, HealthResponse
from .routers import conversion

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()
    if settings.debug:
        logging.getLogger().setLevel(logging.DEBUG)
    logger.info("Starting PDF to CSV Service...")
    settings.ensure_directories()
    logger.info(
        "Inference: %s",
        "configured" if settings.inference_configured else "NOT configured (set OPENAI_API_KEY)",
    )
    yield
    logger.info("Shutting down PDF to CSV Service...")


# Create FastAPI application
app = FastAPI(
    title="PDF to CSV API",
    description="Convert PDF documents into CSV tables using AI",
    version=__version__,
    lifespan=lifespan,
)


# =============================================================================
# Health Endpoints
# =============================================================================


def _health(message: str) -> HealthResponse:
    return HealthResponse(
        status="healthy",
        message=message,
        inference_configured=get_settings().inference_configured,
        version=__version__,
    )


@app.get("/", response_model=HealthResponse)
async def root() -> HealthResponse:
    """Root endpoint - health check."""
    return _health("PDF to CSV API is running")


@app.get("/api/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    return _health("Service is healthy")


# =============================================================================
# Include Routers
# =============================================================================

app.include_router(conversion.router)


# =============================================================================
# Exception Handlers
# =============================================================================


@app.exception_handler(ConversionError)
async def conversion_error_handler(request: Request, exc: ConversionError):
    """Render any classified conversion failure."""
    body = ErrorResponse(error=exc.category, detail=exc.detail, stage=exc.stage)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


def run() -> None:
    """Run the service with uvicorn on the configured host and port."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
