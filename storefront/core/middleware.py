"""
Application middleware for request/response processing
Handles CORS, request logging, and error handling
"""

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
import time
import uuid
import logging
from typing import Callable, Dict, Type

from .config import settings
from .exceptions import (
    StorefrontException,
    ValidationException,
    NotFoundException,
    ConflictException,
    InternalServerException,
)

logger = logging.getLogger(__name__)

# Most specific class first
STATUS_CODES: Dict[Type[StorefrontException], int] = {
    ValidationException: status.HTTP_400_BAD_REQUEST,
    NotFoundException: status.HTTP_404_NOT_FOUND,
    ConflictException: status.HTTP_409_CONFLICT,
    InternalServerException: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

def status_code_for(exc: StorefrontException) -> int:
    """Map a service exception to its HTTP status code"""
    for exc_class, code in STATUS_CODES.items():
        if isinstance(exc, exc_class):
            return code
    return status.HTTP_400_BAD_REQUEST

def error_body(exc: StorefrontException) -> dict:
    body = {
        "status": "error",
        "message": exc.detail,
        "code": exc.error_code,
    }
    if isinstance(exc, ValidationException) and exc.errors:
        body["errors"] = exc.errors
    return body

class RequestIDMiddleware(BaseHTTPMiddleware):
    """Add unique request ID to each request"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id

        return response

class LoggingMiddleware(BaseHTTPMiddleware):
    """Log all requests and responses"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                f"Request failed: {request.method} {request.url.path} "
                f"{str(e)} Time: {process_time:.3f}s"
            )
            raise

        process_time = time.time() - start_time
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"Time: {process_time:.3f}s "
            f"Request ID: {getattr(request.state, 'request_id', 'N/A')}"
        )
        response.headers["X-Process-Time"] = f"{process_time:.4f}"

        return response

def register_exception_handlers(app: FastAPI) -> None:
    """Translate service exceptions into the JSON error envelope"""

    @app.exception_handler(StorefrontException)
    async def storefront_exception_handler(request: Request, exc: StorefrontException):
        code = status_code_for(exc)
        if code >= 500:
            logger.error(f"Internal error on {request.url.path}: {exc.detail}")
            body = error_body(exc)
            if not settings.DEBUG:
                body["message"] = "Internal server error"
            return JSONResponse(status_code=code, content=body)
        return JSONResponse(status_code=code, content=error_body(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = []
        for error in exc.errors():
            location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
            errors.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "status": "error",
                "message": "Validation failed",
                "code": ValidationException.error_code,
                "errors": errors,
            },
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception: {str(exc)}")

        # Don't expose internal errors in production
        detail = str(exc) if settings.DEBUG else "An unexpected error occurred"
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "status": "error",
                "message": detail,
                "code": InternalServerException.error_code,
            },
        )

def setup_middleware(app: FastAPI) -> None:
    """Configure all middleware for the application"""

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Added last runs first, so the request ID exists when logging reads it
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)
