"""Exception hierarchy for DicomVault."""

from .base import DicomVaultError, get_http_status_code, create_error_response
from .uploads import (
    UploadError,
    InvalidFileType,
    ChunkTooLarge,
    ChunkWriteFailed,
    InvalidChunkIndex,
    IncompleteUpload,
    MergeFailed,
    RemoteUploadFailed,
    PersistenceError,
    UploadTimeout,
    UploadInProgress,
)
from .domain import (
    AuthenticationError,
    SubscriptionLimitExceeded,
    FileNotFound,
    InferenceFailed,
    ObjectStoreError,
)
from .http_mapping import HTTP_STATUS_MAP

__all__ = [
    "DicomVaultError",
    "get_http_status_code",
    "create_error_response",
    "HTTP_STATUS_MAP",
    "UploadError",
    "InvalidFileType",
    "ChunkTooLarge",
    "ChunkWriteFailed",
    "InvalidChunkIndex",
    "IncompleteUpload",
    "MergeFailed",
    "RemoteUploadFailed",
    "PersistenceError",
    "UploadTimeout",
    "UploadInProgress",
    "AuthenticationError",
    "SubscriptionLimitExceeded",
    "FileNotFound",
    "InferenceFailed",
    "ObjectStoreError",
]
