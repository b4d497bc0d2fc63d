"""
Domain errors and their translation to the response envelope.

Services raise a ServiceError subclass; the handlers registered here are the only place
an error kind becomes an envelope code and an HTTP status.
"""
import logging
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ResponseCode(str, Enum):
    SUCCESS = "00"
    VALIDATION = "01"
    UNAUTHORIZED = "02"
    FORBIDDEN = "03"
    NOT_FOUND = "04"
    INTERNAL = "99"


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    INTERNAL = "internal"


ERROR_TABLE: Dict[ErrorKind, Tuple[ResponseCode, int]] = {
    ErrorKind.VALIDATION: (ResponseCode.VALIDATION, status.HTTP_400_BAD_REQUEST),
    ErrorKind.UNAUTHORIZED: (ResponseCode.UNAUTHORIZED, status.HTTP_401_UNAUTHORIZED),
    ErrorKind.FORBIDDEN: (ResponseCode.FORBIDDEN, status.HTTP_403_FORBIDDEN),
    ErrorKind.NOT_FOUND: (ResponseCode.NOT_FOUND, status.HTTP_404_NOT_FOUND),
    ErrorKind.INTERNAL: (ResponseCode.INTERNAL, status.HTTP_500_INTERNAL_SERVER_ERROR),
}


class ServiceError(Exception):
    """Base class for failures a workflow reports to its caller."""
    kind: ErrorKind = ErrorKind.INTERNAL
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ServiceError):
    kind = ErrorKind.VALIDATION
    default_message = "Invalid request"


class InvalidOperationError(ServiceError):
    kind = ErrorKind.VALIDATION
    default_message = "Operation not allowed"


class AlreadyExistsError(InvalidOperationError):
    default_message = "Resource already exists"


class UnauthorizedError(ServiceError):
    kind = ErrorKind.UNAUTHORIZED
    default_message = "Could not validate credentials"


class ForbiddenError(ServiceError):
    kind = ErrorKind.FORBIDDEN
    default_message = "You are not allowed to perform this action"


class NotFoundError(ServiceError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Resource not found"


# OTP engine failures
class OtpNotFoundError(NotFoundError):
    default_message = "No OTP found for this phone number"


class OtpExpiredError(InvalidOperationError):
    default_message = "OTP has expired"


class TooManyAttemptsError(InvalidOperationError):
    default_message = "Maximum verification attempts exceeded"


class InvalidCodeError(InvalidOperationError):
    default_message = "Invalid OTP code"


class RateLimitedError(InvalidOperationError):
    default_message = "Please wait before requesting a new OTP"


def envelope(code: ResponseCode, description: str, data: Any = None) -> Dict[str, Any]:
    return {
        "is_successful": code == ResponseCode.SUCCESS,
        "response": {
            "code": code.value,
            "description": description,
            "data": jsonable_encoder(data),
        },
    }


def error_response(kind: ErrorKind, description: str, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    code, http_status = ERROR_TABLE[kind]
    return JSONResponse(status_code=http_status, content=envelope(code, description), headers=headers)


def _kind_for_status(status_code: int) -> ErrorKind:
    if status_code == status.HTTP_401_UNAUTHORIZED:
        return ErrorKind.UNAUTHORIZED
    if status_code == status.HTTP_403_FORBIDDEN:
        return ErrorKind.FORBIDDEN
    if status_code == status.HTTP_404_NOT_FOUND:
        return ErrorKind.NOT_FOUND
    if 400 <= status_code < 500:
        return ErrorKind.VALIDATION
    return ErrorKind.INTERNAL


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.kind == ErrorKind.INTERNAL:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected ({exc.kind.value}): {exc.message}")
    headers = {"WWW-Authenticate": "Bearer"} if exc.kind == ErrorKind.UNAUTHORIZED else None
    return error_response(exc.kind, exc.message, headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else error.get("msg", "invalid value"))
    return error_response(ErrorKind.VALIDATION, "; ".join(messages) or "Invalid request")


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    kind = _kind_for_status(exc.status_code)
    code, _ = ERROR_TABLE[kind]
    return JSONResponse(
        status_code=exc.status_code,
        content=envelope(code, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return error_response(ErrorKind.INTERNAL, f"An unexpected error occurred: {exc}")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
