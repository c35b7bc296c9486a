"""HTTP status code mapping for exceptions."""

from typing import Dict, Type

from .base import DicomVaultError
from .domain import (
    AuthenticationError,
    SubscriptionLimitExceeded,
    FileNotFound,
    InferenceFailed,
    ObjectStoreError,
)
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


HTTP_STATUS_MAP: Dict[Type[Exception], int] = {
    # 400 Bad Request
    InvalidChunkIndex: 400,
    IncompleteUpload: 400,

    # 401 Unauthorized
    AuthenticationError: 401,

    # 403 Forbidden
    SubscriptionLimitExceeded: 403,

    # 404 Not Found
    FileNotFound: 404,

    # 408 Request Timeout
    UploadTimeout: 408,

    # 409 Conflict
    UploadInProgress: 409,

    # 413 Payload Too Large
    ChunkTooLarge: 413,

    # 415 Unsupported Media Type
    InvalidFileType: 415,

    # 500 Internal Server Error
    ChunkWriteFailed: 500,
    MergeFailed: 500,
    PersistenceError: 500,
    UploadError: 500,

    # 502 Bad Gateway
    RemoteUploadFailed: 502,
    InferenceFailed: 502,
    ObjectStoreError: 502,

    # Default for DicomVaultError
    DicomVaultError: 500,
}


def get_http_status_code(exception: Exception) -> int:
    """Get HTTP status code for an exception.

    Walks the exception's MRO so subclasses inherit their parent's status.
    """
    for exception_type in type(exception).__mro__:
        if exception_type in HTTP_STATUS_MAP:
            return HTTP_STATUS_MAP[exception_type]
    return 500
