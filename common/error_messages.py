"""
User-facing error messages and status codes.

Responses carry a fixed human-readable message and never expose
file paths or exception text.
"""
from typing import Tuple, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for different types of failures."""

    # Validation Errors (400)
    INVALID_PARAMETER = "INVALID_PARAMETER"

    # Generation Errors (500)
    OGP_GENERATION_FAILED = "OGP_GENERATION_FAILED"

    # Generic Errors
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


ERROR_MESSAGES = {
    ErrorCode.INVALID_PARAMETER: "リクエストの形式が正しくありません",
    ErrorCode.OGP_GENERATION_FAILED: "OGP画像の生成に失敗しました",
    ErrorCode.UNKNOWN_ERROR: "Internal server error",
}


ERROR_STATUS_CODES = {
    ErrorCode.INVALID_PARAMETER: 400,
    ErrorCode.OGP_GENERATION_FAILED: 500,
    ErrorCode.UNKNOWN_ERROR: 500,
}


def get_error_response(
    error_code: ErrorCode,
    custom_message: Optional[str] = None
) -> Tuple[str, int]:
    """
    Get user-facing error message and HTTP status code.

    Args:
        error_code: The error code enum
        custom_message: Optional custom message to append to the standard message

    Returns:
        Tuple of (error_message, status_code)
    """
    message = ERROR_MESSAGES.get(error_code, ERROR_MESSAGES[ErrorCode.UNKNOWN_ERROR])
    status_code = ERROR_STATUS_CODES.get(error_code, 500)

    if custom_message:
        message = f"{message} {custom_message}"

    return message, status_code


def error_body(error_code: ErrorCode, custom_message: Optional[str] = None) -> Tuple[dict, int]:
    """Build the JSON error body ({"error": message}) and status code for a response."""
    message, status_code = get_error_response(error_code, custom_message)
    return {"error": message}, status_code
