"""
FastAPI application entry point for the Image Checker service.
Configures the application, middleware, routes, and error handlers.
"""

from typing import Any, AsyncGenerator, Dict
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from image_checker.config import get_settings
from image_checker.db.database import Database
from image_checker.exceptions import CheckValidationError, StorageError, UpstreamError
from image_checker.routers import faces, media, results, stats
from image_checker.services.face_service import FaceLabelExistsError
from image_checker.utils.file_handler import FileValidationError
from image_checker.utils.logger import setup_logging, get_correlation_id, set_correlation_id

# Initialize settings and logging
settings = get_settings()
logger = setup_logging(settings.log_level, settings.service_name)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create the database handle before serving and release it on shutdown."""
    logger.info("Starting Image Checker API", version=settings.version)

    # A handle may already be injected (tests); otherwise build one from settings
    owns_database = getattr(app.state, "database", None) is None
    if owns_database:
        app.state.database = Database(
            settings.database_url,
            pool_timeout=settings.db_pool_timeout,
            statement_timeout_ms=settings.db_statement_timeout_ms
        )

    try:
        app.state.database.init()
        logger.info("Database initialization completed")
    except Exception as e:
        logger.error("Database initialization failed", error=str(e))
        if owns_database:
            app.state.database.dispose()
            app.state.database = None
        raise

    yield

    logger.info("Shutting down Image Checker API")
    if owns_database:
        app.state.database.dispose()
        app.state.database = None


# Create FastAPI application
app = FastAPI(
    title="Image Checker API",
    description="Records image authenticity checks and reports statistics over them",
    version=settings.version,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


@app.middleware("http")
async def correlation_id_middleware(request: Request, call_next) -> Response:
    """Bind a correlation ID to each request for tracing."""
    correlation_id = set_correlation_id(request.headers.get("X-Correlation-ID"))

    logger.info("Request started",
               method=request.method,
               url=str(request.url),
               client_ip=request.client.host if request.client else "unknown")

    response = await call_next(request)

    response.headers["X-Correlation-ID"] = correlation_id

    logger.info("Request completed",
               method=request.method,
               url=str(request.url),
               status_code=response.status_code)

    return response


def error_response(status_code: int, code: str, message: str) -> JSONResponse:
    """Build the error body shared by every handler."""
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "correlation_id": get_correlation_id()
            }
        }
    )


# Custom exception handlers
@app.exception_handler(CheckValidationError)
async def check_validation_exception_handler(request: Request, exc: CheckValidationError) -> JSONResponse:
    """Handle rejected submissions."""
    logger.warning("Validation error", error=str(exc), url=str(request.url))
    return error_response(400, "VALIDATION_ERROR", str(exc))


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request bodies that do not match their schema."""
    details = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()) if part != 'body')}: {error.get('msg')}"
        for error in exc.errors()
    )
    logger.warning("Request validation error", error=details, url=str(request.url))
    return error_response(400, "VALIDATION_ERROR", details or "Invalid request")


@app.exception_handler(FileValidationError)
async def file_validation_exception_handler(request: Request, exc: FileValidationError) -> JSONResponse:
    """Handle file validation errors."""
    logger.warning("File validation error", error=str(exc), url=str(request.url))
    return error_response(400, "FILE_VALIDATION_ERROR", str(exc))


@app.exception_handler(FaceLabelExistsError)
async def face_label_exists_handler(request: Request, exc: FaceLabelExistsError) -> JSONResponse:
    """Handle duplicate gallery labels."""
    logger.warning("Face label conflict", error=str(exc), url=str(request.url))
    return error_response(409, "FACE_LABEL_EXISTS", str(exc))


@app.exception_handler(StorageError)
async def storage_exception_handler(request: Request, exc: StorageError) -> JSONResponse:
    """Handle database failures without exposing driver details."""
    logger.error("Storage error", error=str(exc), url=str(request.url))
    return error_response(500, "STORAGE_ERROR", "The data store is currently unavailable")


@app.exception_handler(UpstreamError)
async def upstream_exception_handler(request: Request, exc: UpstreamError) -> JSONResponse:
    """Handle failures of the search and image hosting services."""
    logger.error("Upstream service error", service=exc.service, error=str(exc), url=str(request.url))
    return error_response(502, "UPSTREAM_ERROR", str(exc))


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all other unhandled exceptions."""
    logger.error("Unhandled exception",
                error=str(exc),
                error_type=type(exc).__name__,
                url=str(request.url))
    return error_response(500, "INTERNAL_ERROR", "An unexpected error occurred")


# Include routers
app.include_router(results.router)
app.include_router(stats.router)
app.include_router(faces.router)
app.include_router(media.router)


@app.get("/health")
async def health_check() -> Dict[str, str]:
    """Health check endpoint for monitoring."""
    return {
        "status": "healthy",
        "service": settings.service_name,
        "version": settings.version
    }


@app.get("/")
async def root() -> Dict[str, Any]:
    """Root endpoint with API information."""
    return {
        "service": "Image Checker API",
        "version": settings.version,
        "docs": "/docs",
        "health": "/health"
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "image_checker.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower()
    )
