"""
Utility functions for API operations.
"""

import traceback

from fastapi.responses import JSONResponse

from ampmap.logger import UnifiedLogger
from ampmap.settings.store import get_general_settings
from .exceptions import APIException
from .models import ErrorResponse

# Create API logger
logger = UnifiedLogger(tag="api")


def _debug_enabled() -> bool:
    try:
        debug_setting = get_general_settings().get("debug")
    except Exception:
        # Settings may be the thing that is broken
        return False
    return bool(debug_setting and getattr(debug_setting, "value", False))


def create_error_response(exception: Exception) -> JSONResponse:
    """
    Create a standardized error response from an exception.

    Args:
        exception: The exception that occurred

    Returns:
        JSONResponse with standardized error format
    """
    if isinstance(exception, APIException):
        error_response = ErrorResponse(
            error=exception.error_type,
            message=exception.detail,
            details=exception.details
        )
        return JSONResponse(
            status_code=exception.status_code,
            content=error_response.model_dump()
        )

    if _debug_enabled():
        # Include full traceback for debugging
        error_response = ErrorResponse(
            error="InternalServerError",
            message=str(exception),
            details={
                "error_type": type(exception).__name__,
                "traceback": "".join(traceback.format_exception(exception)),
            }
        )
    else:
        error_response = ErrorResponse(
            error="InternalServerError",
            message="An unexpected error occurred",
            details={"error_type": type(exception).__name__}
        )

    # Always log the full traceback server-side
    logger.error(
        "Unexpected API error",
        error_type=type(exception).__name__,
        traceback="".join(traceback.format_exception(exception)),
    )

    return JSONResponse(
        status_code=500,
        content=error_response.model_dump()
    )
