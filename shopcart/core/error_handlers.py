# shopcart/core/error_handlers.py

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import traceback
import uuid

from .exceptions import ShopCartError, ErrorCode

logger = logging.getLogger(__name__)


def setup_error_handlers(app: FastAPI):
    """Set up global error handlers for the FastAPI application."""

    @app.exception_handler(ShopCartError)
    async def shopcart_error_handler(request: Request, exc: ShopCartError):
        """Handle custom ShopCart errors."""
        logger.info(
            f"{request.method} {request.url.path} -> {exc.status_code} {exc.code.value}",
            extra={
                "error_code": exc.code.value,
                "request_method": request.method,
                "request_url": str(request.url),
            },
        )
        return JSONResponse(status_code=exc.status_code, content=exc.to_response())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle pydantic validation errors as bad input."""

        errors = []
        for error in exc.errors():
            field_path = " -> ".join(str(loc) for loc in error["loc"])
            errors.append({
                "field": field_path,
                "message": error["msg"],
                "type": error["type"],
            })

        logger.warning(
            "Validation error",
            extra={
                "validation_errors": errors,
                "request_url": str(request.url),
                "request_method": request.method,
            },
        )

        return JSONResponse(
            status_code=400,
            content={
                "error": {
                    "code": ErrorCode.INVALID_INPUT.value,
                    "message": "Invalid request body",
                    "details": errors,
                }
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle standard HTTP exceptions with consistent format."""

        if isinstance(exc.detail, dict) and "error" in exc.detail:
            return JSONResponse(status_code=exc.status_code, content=exc.detail, headers=exc.headers)

        if exc.status_code == 401:
            code = ErrorCode.UNAUTHORIZED.value
        else:
            code = f"HTTP_{exc.status_code}"

        return JSONResponse(
            status_code=exc.status_code,
            content={"error": {"code": code, "message": exc.detail}},
            headers=exc.headers,
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle all other exceptions with proper logging."""

        logger.error(
            f"Unhandled exception: {type(exc).__name__}: {str(exc)}",
            extra={
                "exception_type": type(exc).__name__,
                "request_url": str(request.url),
                "request_method": request.method,
                "traceback": traceback.format_exc(),
            },
        )

        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": ErrorCode.INTERNAL_SERVER_ERROR.value,
                    "message": "An internal server error occurred. Please try again later.",
                }
            },
        )


# Middleware for request ID tracking
async def add_request_id_middleware(request: Request, call_next):
    """Add request ID for better error tracking."""
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response
