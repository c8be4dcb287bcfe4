"""
Domain errors and their HTTP rendering

Services raise these; the handlers registered in main.py turn them (and
FastAPI's own errors) into {"status": "error", "message": ...} bodies.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class GrocerError(Exception):
    """Base class for errors that map onto an HTTP response"""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_dict(self) -> Dict[str, Any]:
        return {"status": "error", "message": self.message, **self.extra}


class InvalidRequestError(GrocerError):
    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(GrocerError):
    status_code = status.HTTP_401_UNAUTHORIZED


class PermissionDeniedError(GrocerError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(GrocerError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(GrocerError):
    status_code = status.HTTP_409_CONFLICT


class OrderNotCancellableError(InvalidRequestError):
    """Raised when an order is past its cancellation window or no longer pending"""

    def __init__(self, message: str, time_elapsed: Optional[int] = None):
        if time_elapsed is None:
            super().__init__(message)
        else:
            super().__init__(message, time_elapsed=time_elapsed)
        self.time_elapsed = time_elapsed


# =============================================================================
# Handlers
# =============================================================================

async def grocer_error_handler(request: Request, exc: GrocerError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if isinstance(exc.detail, dict):
        content = {"status": "error", **exc.detail}
    else:
        content = {"status": "error", "message": str(exc.detail)}
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {
            "loc": [str(part) for part in error.get("loc", ())],
            "msg": error.get("msg"),
            "type": error.get("type"),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"status": "error", "message": "Invalid request data", "errors": errors},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"status": "error", "message": "Internal Server Error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all error handlers to the application"""
    app.add_exception_handler(GrocerError, grocer_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
