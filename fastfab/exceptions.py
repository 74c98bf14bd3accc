import logging
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base for errors that map onto a {success: false, message} response."""
    status_code: int = 400
    default_message: str = "Request failed"

    def __init__(self, message: Optional[str] = None, **extra: Any):
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)


class InvalidPhoneNumberError(AppError):
    default_message = "Invalid phone number. Please provide a valid 10-digit phone number."


class InvalidOtpFormatError(AppError):
    default_message = "Invalid OTP. Please provide a valid 6-digit OTP."


class OtpVerificationError(AppError):
    default_message = "No valid OTP found"


class InvalidCoordinatesError(AppError):
    default_message = "Invalid coordinates"


class RateLimitExceededError(AppError):
    status_code = 429
    default_message = "Too many OTP requests. Please try again later."


class TokenConfigurationError(AppError):
    status_code = 500
    default_message = "Authentication configuration error."


class InvalidRefreshTokenError(AppError):
    status_code = 401
    default_message = "Invalid refresh token"


class DatabaseUnavailableError(AppError):
    status_code = 503
    default_message = "Service temporarily unavailable."


def create_error_response(message: str, **extra: Any) -> Dict[str, Any]:
    """Create a standardized error response"""
    body: Dict[str, Any] = {"success": False, "message": message}
    body.update(extra)
    return body


def create_success_response(message: str, **data: Any) -> Dict[str, Any]:
    """Create a standardized success response"""
    body: Dict[str, Any] = {"success": True, "message": message}
    body.update(data)
    return body


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.message, **exc.extra),
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Custom exception handler for HTTPException"""
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(str(exc.detail)),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are reported as 400s in the same shape as other errors."""
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    extra = {"verified": False} if request.url.path.endswith(("/verify", "/verify-otp")) else {}
    return JSONResponse(status_code=400, content=create_error_response(message, **extra))
