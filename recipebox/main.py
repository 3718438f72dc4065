"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from recipebox.api.routes import health, recipes
from recipebox.config import settings
from recipebox.core.request_id import get_request_id
from recipebox.middleware.logging import RequestLoggingMiddleware
from recipebox.middleware.performance import PerformanceMiddleware
from recipebox.middleware.rate_limit import get_rate_limit_exceeded_handler, limiter
from recipebox.middleware.security import SecurityHeadersMiddleware, setup_compression, setup_cors
from recipebox.utils.exceptions import (
    EmptyBatchError,
    EmptyResponseError,
    GeminiError,
    ImageProcessingError,
    RecipeBoxException,
    RecipeNotFoundError,
    SchemaViolationError,
    StorageError,
    ValidationError,
)
from recipebox.utils.logging_config import setup_logging

setup_logging(settings.log_level, settings.log_json)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("RecipeBox API starting up...")
    logger.info(f"Log level: {settings.log_level}")
    logger.info(f"Rate limit: {settings.rate_limit_per_hour} requests/hour")
    if not settings.gemini_configured:
        logger.warning("GEMINI_API_KEY is not set; extraction endpoints will fail")
    if not settings.storage_configured:
        logger.warning("SUPABASE_URL/SUPABASE_KEY are not set; storage endpoints will fail")
    yield
    logger.info("RecipeBox API shutting down...")


app = FastAPI(
    title="RecipeBox API",
    description="Capture recipes from photos and voice, extract them with Gemini, and keep them",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, get_rate_limit_exceeded_handler())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request validation errors with detailed messages."""
    request_id = get_request_id()

    logger.warning(
        f"Validation error: {str(exc)}",
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
            "errors": exc.errors(),
        },
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "Validation error",
            "detail": jsonable_errors(exc),
            "request_id": request_id,
        },
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    # pydantic error contexts may hold exception objects
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]


def _status_for(exc: RecipeBoxException) -> tuple:
    if isinstance(exc, (ValidationError, ImageProcessingError)):
        return status.HTTP_400_BAD_REQUEST, "Invalid input"
    if isinstance(exc, SchemaViolationError):
        return status.HTTP_422_UNPROCESSABLE_ENTITY, "Invalid recipe format"
    if isinstance(exc, EmptyResponseError):
        return status.HTTP_502_BAD_GATEWAY, "No response from AI"
    if isinstance(exc, GeminiError):
        return status.HTTP_502_BAD_GATEWAY, "Gemini API error"
    if isinstance(exc, EmptyBatchError):
        return status.HTTP_400_BAD_REQUEST, "Nothing to merge"
    if isinstance(exc, RecipeNotFoundError):
        return status.HTTP_404_NOT_FOUND, "Recipe not found"
    if isinstance(exc, StorageError):
        if not exc.configured:
            return status.HTTP_503_SERVICE_UNAVAILABLE, "Storage unavailable"
        return status.HTTP_502_BAD_GATEWAY, "Storage error"
    return status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error"


@app.exception_handler(RecipeBoxException)
async def recipebox_exception_handler(request: Request, exc: RecipeBoxException) -> JSONResponse:
    """Translate domain exceptions into JSON error responses."""
    request_id = get_request_id()
    status_code, error_message = _status_for(exc)

    content = {
        "error": error_message,
        "detail": str(exc),
        "request_id": request_id,
    }
    if isinstance(exc, SchemaViolationError):
        content["violations"] = exc.details()

    log = logger.error if status_code >= 500 else logger.warning
    log(
        f"Exception: {error_message}",
        extra={"request_id": request_id, "exception": str(exc), "status_code": status_code},
        exc_info=status_code >= 500,
    )

    return JSONResponse(status_code=status_code, content=content)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    request_id = get_request_id()

    logger.error(
        f"Unexpected exception: {str(exc)}",
        extra={"request_id": request_id},
        exc_info=True,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error",
            "detail": "An unexpected error occurred",
            "request_id": request_id,
        },
    )


# Add middleware (last added runs first)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(PerformanceMiddleware)
app.add_middleware(RequestLoggingMiddleware)
setup_compression(app)
setup_cors(app)

app.include_router(health.router)
app.include_router(recipes.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "RecipeBox API",
        "version": "1.0.0",
        "docs": "/docs",
    }


def run() -> None:
    """Console entry point."""
    import uvicorn

    uvicorn.run("recipebox.main:app", host=settings.host, port=settings.port)
