"""
Custom exceptions and error handling for the API module.
"""

from typing import Dict, Optional
from fastapi import HTTPException


class APIException(HTTPException):
    """Base exception for API-related errors."""

    def __init__(
        self,
        status_code: int,
        error_type: str,
        message: str,
        details: Optional[Dict] = None
    ):
        self.error_type = error_type
        self.details = details
        super().__init__(status_code=status_code, detail=message)


class MappingValidationAPIError(APIException):
    """Raised when a mapping request is rejected before any change is made."""

    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(
            status_code=400,
            error_type="MappingValidation",
            message=message,
            details=details
        )


class MappingNotFoundAPIError(APIException):
    """Raised when a role slot or custom mapping does not exist."""

    def __init__(self, key: str, message: Optional[str] = None):
        super().__init__(
            status_code=404,
            error_type="MappingNotFound",
            message=message or f"No mapping found for '{key}'",
            details={"key": key}
        )


class PersistenceFailedError(APIException):
    """Raised when settings.yaml could not be written."""

    def __init__(self, source_model: str, message: str, rolled_back: bool):
        super().__init__(
            status_code=502,
            error_type="PersistenceFailed",
            message=message,
            details={"source_model": source_model, "rolled_back": rolled_back}
        )


class RuntimeUnavailableError(APIException):
    """Raised when a request arrives before bootstrap has completed."""

    def __init__(self, message: str = "Runtime is still starting"):
        super().__init__(
            status_code=503,
            error_type="RuntimeUnavailable",
            message=message
        )


class SystemConfigurationError(APIException):
    """Raised when there are system configuration issues."""

    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(
            status_code=500,
            error_type="SystemConfiguration",
            message=f"System configuration error: {message}",
            details=details
        )
