"""Domain exceptions outside the upload pipeline."""

from typing import Optional

from .base import DicomVaultError


class AuthenticationError(DicomVaultError):
    """Raised when the bearer token is missing, malformed, expired or invalid."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class SubscriptionLimitExceeded(DicomVaultError):
    """Raised when an owner's subscription tier does not allow another file."""

    def __init__(self, tier: str, limit: int, current: int):
        super().__init__(
            f"The {tier} tier allows {limit} files. Upgrade your subscription to upload more.",
            details={"tier": tier, "limit": limit, "current": current},
        )
        self.tier = tier
        self.limit = limit
        self.current = current


class FileNotFound(DicomVaultError):
    """Raised when a file does not exist or belongs to another owner."""

    def __init__(self, file_id: Optional[str] = None):
        super().__init__("File not found", details={"file_id": file_id} if file_id else None)
        self.file_id = file_id


class InferenceFailed(DicomVaultError):
    """Raised when the AI service cannot be reached or answers with an error."""
    pass


class ObjectStoreError(DicomVaultError):
    """Raised by an object store adapter.

    ``retryable`` marks transient failures (network errors, timeouts, 5xx,
    429) that are worth another attempt with the same destination key.
    """

    def __init__(self, message: str, retryable: bool = False, status_code: Optional[int] = None):
        super().__init__(
            message,
            details={"retryable": retryable, "status_code": status_code},
        )
        self.retryable = retryable
        self.status_code = status_code
