"""Base exceptions for DicomVault.

All exceptions inherit from DicomVaultError and carry an error kind, a details
mapping and an HTTP status code mapping for API responses.
"""

from typing import Any, Dict, Optional


class DicomVaultError(Exception):
    """Base exception for all DicomVault errors.

    The error kind defaults to the class name and is what clients see as
    ``errorKind`` in error responses.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        *args,
        **kwargs
    ):
        super().__init__(message, *args, **kwargs)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}

    @property
    def error_kind(self) -> str:
        return self.error_code


def get_http_status_code(exception: Exception) -> int:
    """Get HTTP status code for exception.

    Args:
        exception: The exception instance

    Returns:
        HTTP status code
    """
    from .http_mapping import get_http_status_code as get_mapped_status_code
    return get_mapped_status_code(exception)


def create_error_response(exception: DicomVaultError) -> Dict[str, Any]:
    """Create the client-facing error body for an exception."""
    return {
        "message": exception.message,
        "errorKind": exception.error_kind,
    }
