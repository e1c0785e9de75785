"""
Exception handlers - map failures onto the JSON response envelope.

Every error response has the shape
``{"success": false, "message": ..., "error": ...}``. Domain exceptions are
classified here; the domain layer itself knows nothing about HTTP.
"""

import logging
import traceback

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.config.settings import get_settings
from src.domain.exceptions import (
    AccountAlreadyVerified,
    AccountNotFound,
    AccountNotVerified,
    AccountUnavailable,
    AuthError,
    EmailAlreadyRegistered,
    ExpiredToken,
    InvalidCredentials,
    InvalidToken,
    InvalidVerificationCode,
    MissingToken,
    NotificationFailed,
)

logger = logging.getLogger(__name__)

NOT_AUTHORIZED = "Not authorized to access this route"

# exception class -> (status code, message, error)
ERROR_TABLE: dict[type[AuthError], tuple[int, str, str]] = {
    EmailAlreadyRegistered: (
        status.HTTP_400_BAD_REQUEST,
        "User already exists with this email",
        "Email already registered",
    ),
    InvalidVerificationCode: (
        status.HTTP_400_BAD_REQUEST,
        "Invalid or expired OTP",
        "OTP verification failed",
    ),
    AccountAlreadyVerified: (
        status.HTTP_400_BAD_REQUEST,
        "Account is already verified",
        "Already verified",
    ),
    InvalidCredentials: (
        status.HTTP_401_UNAUTHORIZED,
        "Invalid credentials",
        "Invalid credentials",
    ),
    MissingToken: (status.HTTP_401_UNAUTHORIZED, NOT_AUTHORIZED, "No token provided"),
    InvalidToken: (status.HTTP_401_UNAUTHORIZED, NOT_AUTHORIZED, "Invalid token"),
    ExpiredToken: (status.HTTP_401_UNAUTHORIZED, NOT_AUTHORIZED, "Token expired"),
    AccountUnavailable: (status.HTTP_401_UNAUTHORIZED, NOT_AUTHORIZED, "User not found"),
    AccountNotVerified: (
        status.HTTP_401_UNAUTHORIZED,
        "Please verify your email address first",
        "Account not verified",
    ),
    AccountNotFound: (
        status.HTTP_404_NOT_FOUND,
        "User not found with this email",
        "User not found",
    ),
    NotificationFailed: (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Failed to send verification email",
        "Email service error",
    ),
}


def error_response(
    status_code: int, message: str, error: str, data: dict | None = None
) -> JSONResponse:
    """Build an error envelope response."""
    body: dict = {"success": False, "message": message, "error": error}
    if data is not None:
        body["data"] = data
    return JSONResponse(status_code=status_code, content=body)


def classify(exc: AuthError) -> tuple[int, str, str]:
    """Find the status/message/error triple for a domain exception."""
    for cls in type(exc).__mro__:
        if cls in ERROR_TABLE:
            return ERROR_TABLE[cls]
    return (status.HTTP_400_BAD_REQUEST, "Request failed", type(exc).__name__)


async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    status_code, message, error = classify(exc)
    logger.info(
        "%s %s rejected: %s", request.method, request.url.path, type(exc).__name__
    )
    return error_response(status_code, message, error)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies as 400 with the field messages joined."""
    messages = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        messages.append(f"{field}: {err.get('msg')}" if field else str(err.get("msg")))
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        ", ".join(messages) or "Invalid request",
        "Validation failed",
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return error_response(exc.status_code, f"Route {request.url.path} not found", "Not Found")
    return error_response(exc.status_code, str(exc.detail), str(exc.detail))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler: never let a request take the process down."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    settings = get_settings()
    if settings.is_production:
        error = "Something went wrong"
    else:
        error = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error", error)


def register_exception_handlers(app: FastAPI) -> None:
    """Install the envelope-producing handlers on an application."""
    app.add_exception_handler(AuthError, auth_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
