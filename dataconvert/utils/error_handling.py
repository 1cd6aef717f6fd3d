"""
Centralized error handling for the data conversion API.

This module provides standardized error codes, their HTTP status and severity,
and the helpers every endpoint uses to turn a failure into a JSON response.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional, Union

from fastapi.responses import JSONResponse

from ..exceptions import ConversionError, DataConversionError

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Standardized error codes for consistent error handling."""

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"

    # Request validation errors
    MISSING_INPUT = "MISSING_INPUT"
    UNSUPPORTED_FORMAT = "UNSUPPORTED_FORMAT"

    # Conversion errors
    SYNTAX_ERROR = "SYNTAX_ERROR"
    UNSUPPORTED_SHAPE = "UNSUPPORTED_SHAPE"

    # Assist backend errors (handled by the orchestrator, never turned into a response)
    ASSIST_FAILURE = "ASSIST_FAILURE"


class ErrorSeverity(str, Enum):
    """Error severity levels for logging and response handling."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# Error code to HTTP status code mapping
ERROR_STATUS_MAP: Dict[ErrorCode, int] = {
    # 4xx Client Errors
    ErrorCode.INVALID_REQUEST: 400,
    ErrorCode.MISSING_INPUT: 400,
    ErrorCode.UNSUPPORTED_FORMAT: 400,
    ErrorCode.SYNTAX_ERROR: 422,
    ErrorCode.UNSUPPORTED_SHAPE: 422,

    # 5xx Server Errors
    ErrorCode.INTERNAL_ERROR: 500,
}

# Error code to severity mapping
ERROR_SEVERITY_MAP: Dict[ErrorCode, ErrorSeverity] = {
    ErrorCode.INTERNAL_ERROR: ErrorSeverity.CRITICAL,
    ErrorCode.INVALID_REQUEST: ErrorSeverity.MEDIUM,
    ErrorCode.MISSING_INPUT: ErrorSeverity.LOW,
    ErrorCode.UNSUPPORTED_FORMAT: ErrorSeverity.LOW,
    ErrorCode.SYNTAX_ERROR: ErrorSeverity.LOW,
    ErrorCode.UNSUPPORTED_SHAPE: ErrorSeverity.LOW,
}


def error_code_for(error: BaseException) -> ErrorCode:
    """Map an exception to its error code (INTERNAL_ERROR for anything unexpected)."""
    try:
        return ErrorCode(getattr(error, "code", ErrorCode.INTERNAL_ERROR.value))
    except ValueError:
        return ErrorCode.INTERNAL_ERROR


def status_code_for(error_code: Union[ErrorCode, str]) -> int:
    """HTTP status for an error code (500 for unknown codes)."""
    if isinstance(error_code, ErrorCode):
        return ERROR_STATUS_MAP.get(error_code, 500)
    try:
        return ERROR_STATUS_MAP.get(ErrorCode(error_code), 500)
    except ValueError:
        return 500


def log_error(error_code: Union[ErrorCode, str], message: str) -> None:
    """Log a message at the level matching the error code's severity."""
    try:
        severity = ERROR_SEVERITY_MAP.get(ErrorCode(error_code), ErrorSeverity.MEDIUM)
    except ValueError:
        severity = ErrorSeverity.MEDIUM
    if severity == ErrorSeverity.CRITICAL:
        logger.critical(message)
    elif severity == ErrorSeverity.HIGH:
        logger.error(message)
    elif severity == ErrorSeverity.MEDIUM:
        logger.warning(message)
    else:
        logger.info(message)


def create_error_response(
    error_code: Union[ErrorCode, str],
    error_message: str,
    status_code: Optional[int] = None,
    **kwargs
) -> JSONResponse:
    """
    Create a consistent JSON error response across all endpoints.

    Args:
        error_code: Error code from ErrorCode enum or custom string
        error_message: Human-readable message (truncated to 1000 chars)
        status_code: Override the default HTTP status code
        **kwargs: Additional fields to include in the response body, e.g.
            ``success=False`` or ``valid=False`` for the endpoint's contract

    Returns:
        JSONResponse with standardized error format
    """
    if status_code is None:
        status_code = status_code_for(error_code)
    code_value = error_code.value if isinstance(error_code, ErrorCode) else str(error_code)

    error_data = {
        "error": str(error_message)[:1000],
        "code": code_value,
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "status_code": status_code,
    }
    error_data.update(kwargs)

    log_error(error_code, f"Error response: {error_data}")

    return JSONResponse(status_code=status_code, content=error_data)


def handle_conversion_error(error: DataConversionError, **kwargs) -> JSONResponse:
    """
    Turn a conversion core error into a JSON error response.

    Args:
        error: The error raised by the conversion core
        **kwargs: Additional response fields

    Returns:
        JSONResponse with the error's code, status and message
    """
    error_code = error_code_for(error)
    if error.format_type and "format" not in kwargs:
        kwargs["format"] = error.format_type
    if isinstance(error, ConversionError):
        kwargs.setdefault("stage", error.stage)
    return create_error_response(error_code, error.message, **kwargs)
