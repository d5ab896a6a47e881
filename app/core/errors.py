"""
Error handling utilities following FastAPI best practices

Every failure leaves the service in the same envelope shape as a success:
``{"success": false, "message": "..."}``.
"""

import traceback
from typing import Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import config
from app.core.logger import logger


class ErrorResponse(Exception):
    """Custom exception for application errors"""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, status_code: int = None, details: dict = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class MissingCredential(ErrorResponse):
    """No Authorization header, or no token segment in it"""
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "No token provided", **kwargs):
        super().__init__(message, **kwargs)


class InvalidCredential(ErrorResponse):
    """Token failed verification or carries unusable claims"""
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Invalid token", **kwargs):
        super().__init__(message, **kwargs)


class InsufficientRole(ErrorResponse):
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Access denied. Admin only.", **kwargs):
        super().__init__(message, **kwargs)


class NotFound(ErrorResponse):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "Product not found", **kwargs):
        super().__init__(message, **kwargs)


class ValidationError(ErrorResponse):
    status_code = status.HTTP_400_BAD_REQUEST


class StorageError(ErrorResponse):
    """The document store rejected or failed an operation"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class ErrorResponseModel(BaseModel):
    """Pydantic model for error responses"""
    success: bool = False
    message: str
    details: Optional[dict] = None


def _envelope(message: str, details: dict = None) -> dict:
    content = {"success": False, "message": message}
    if details:
        content["details"] = details
    return content


def _request_metadata(request: Request, status_code: int, event: str) -> dict:
    return {
        "event": event,
        "status_code": status_code,
        "url": str(request.url),
        "method": request.method,
    }


async def error_response_handler(request: Request, exc: ErrorResponse):
    """Handler for ErrorResponse and its subclasses"""
    metadata = {**_request_metadata(request, exc.status_code, "error_response"), **exc.details}

    if exc.status_code >= 500:
        if config.environment == "development":
            metadata["traceback"] = "".join(traceback.format_exception(exc))
        logger.error(f"Error: {exc.message}", metadata=metadata)
    else:
        logger.warning(f"Error: {exc.message}", metadata=metadata)

    return JSONResponse(status_code=exc.status_code, content=_envelope(exc.message, exc.details))


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handler for framework HTTP errors such as unmatched routes"""
    logger.warning(
        f"HTTPException: {exc.detail}",
        metadata=_request_metadata(request, exc.status_code, "http_exception"),
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=_envelope(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are reported as ValidationError"""
    errors = exc.errors()
    logger.warning(
        "Validation error",
        metadata={**_request_metadata(request, ValidationError.status_code, "validation_error"),
                  "errors": [str(e.get("msg")) for e in errors]},
    )
    fields = [".".join(p for p in e.get("loc", ()) if isinstance(p, str) and p != "body") for e in errors]
    message = "Validation error: " + ", ".join(f for f in fields if f) if any(fields) else "Validation error"
    return JSONResponse(
        status_code=ValidationError.status_code,
        content=_envelope(message, {"errors": jsonable_errors(errors)}),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    """Last resort: surface the underlying message as a 500"""
    logger.error(
        f"Unhandled error: {exc}",
        error=exc,
        metadata=_request_metadata(request, 500, "unhandled_exception"),
    )
    return JSONResponse(status_code=500, content=_envelope(str(exc) or "Internal server error"))


def jsonable_errors(errors) -> list:
    """Strip non-serializable context (e.g. exception objects) from pydantic errors"""
    return [
        {"loc": list(e.get("loc", ())), "msg": str(e.get("msg")), "type": e.get("type")}
        for e in errors
    ]
