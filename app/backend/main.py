"""
FastAPI application for insurance document classification.

Provides endpoints for:
- Classifying an uploaded PDF and extracting its identifying fields
- Health checks
"""

import logging

from contextlib import asynccontextmanager

from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .config import get_settings
from .models import HealthResponse
from .routers import classify
from .services.ai import (
    AIServiceError,
    MalformedResponseError,
    SchemaValidationError,
)
from .services.pdf_service import PDFConversionError

CONVERSION_ERROR_MESSAGE = "An error occurred while converting the PDF."
CLASSIFICATION_ERROR_MESSAGE = (
    "An error occurred while communicating with the classification service."
)
INVALID_RESPONSE_MESSAGE = "The classification service returned an invalid response."

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    logger.info("Starting Document Classification Service...")
    if not settings.openai_api_key:
        logger.warning(
            "OPENAI_API_KEY is not set. Classification requests will fail until it is configured."
        )
    logger.info("Using model %s, uploads in %s", settings.openai_model, settings.upload_dir)
    yield
    logger.info("Shutting down Document Classification Service...")


# Create FastAPI application
app = FastAPI(
    title="Insurance Document Classification API",
    description="Classifies insurance PDFs and extracts their identifiers using AI",
    version=__version__,
    lifespan=lifespan,
)

# Configure CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Health Endpoints
# =============================================================================


@app.get("/", response_model=HealthResponse)
async def root() -> HealthResponse:
    """Root endpoint - health check."""
    return HealthResponse(status="healthy", version=__version__)


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="healthy", version=__version__)


# =============================================================================
# Include Routers
# =============================================================================

app.include_router(classify.router)


# =============================================================================
# Exception Handlers
# =============================================================================


@app.exception_handler(PDFConversionError)
async def pdf_conversion_error_handler(request, exc: PDFConversionError):
    """Handle PDF conversion errors, including empty documents."""
    logger.error("PDF conversion failed: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": CONVERSION_ERROR_MESSAGE},
    )


@app.exception_handler(MalformedResponseError)
@app.exception_handler(SchemaValidationError)
async def invalid_response_error_handler(request, exc: AIServiceError):
    """Handle classification replies that could not be parsed or validated."""
    logger.error("Invalid classification response: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": INVALID_RESPONSE_MESSAGE},
    )


@app.exception_handler(AIServiceError)
async def ai_service_error_handler(request, exc: AIServiceError):
    """Handle classification service errors."""
    logger.error("Classification failed: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": CLASSIFICATION_ERROR_MESSAGE},
    )
