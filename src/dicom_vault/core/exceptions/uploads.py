"""Upload pipeline exceptions.

ONLY the chunked upload taxonomy - one class per way the chunk, merge,
remote upload and persistence steps can fail.
"""

from typing import Any, Dict, List, Optional

from .base import DicomVaultError


class UploadError(DicomVaultError):
    """Base class for upload pipeline errors."""
    pass


class InvalidFileType(UploadError):
    """Raised when a chunk's declared content type is not accepted."""

    def __init__(self, content_type: Optional[str], accepted: List[str]):
        super().__init__(
            f"Unsupported content type '{content_type}'. Accepted: {', '.join(accepted)}",
            details={"content_type": content_type, "accepted": list(accepted)},
        )
        self.content_type = content_type


class ChunkTooLarge(UploadError):
    """Raised when a chunk payload exceeds the per-chunk size ceiling."""

    def __init__(self, chunk_index: int, max_bytes: int):
        super().__init__(
            f"Chunk {chunk_index} exceeds the maximum chunk size of {max_bytes} bytes",
            details={"chunk_index": chunk_index, "max_bytes": max_bytes},
        )
        self.chunk_index = chunk_index
        self.max_bytes = max_bytes


class ChunkWriteFailed(UploadError):
    """Raised when staging storage cannot hold a chunk."""

    def __init__(self, chunk_index: int, reason: str):
        super().__init__(
            f"Failed to stage chunk {chunk_index}: {reason}",
            details={"chunk_index": chunk_index},
        )
        self.chunk_index = chunk_index


class InvalidChunkIndex(UploadError):
    """Raised when a chunk index or chunk count is out of range."""

    def __init__(self, chunk_index: int, total_chunks: int):
        if total_chunks < 1:
            message = f"totalChunks must be at least 1, got {total_chunks}"
        else:
            message = f"Chunk index {chunk_index} is outside [0, {total_chunks})"
        super().__init__(
            message,
            details={"chunk_index": chunk_index, "total_chunks": total_chunks},
        )
        self.chunk_index = chunk_index
        self.total_chunks = total_chunks


class IncompleteUpload(UploadError):
    """Raised when completion is requested before every chunk has arrived."""

    def __init__(self, missing_indices: List[int], total_chunks: int):
        preview = ", ".join(str(i) for i in missing_indices[:20])
        if len(missing_indices) > 20:
            preview += ", ..."
        super().__init__(
            f"Upload incomplete: {len(missing_indices)} of {total_chunks} chunks missing ({preview})",
            details={"missing_indices": list(missing_indices), "total_chunks": total_chunks},
        )
        self.missing_indices = list(missing_indices)
        self.total_chunks = total_chunks


class MergeFailed(UploadError):
    """Raised when reading a staged chunk or writing the merged artifact fails."""
    pass


class RemoteUploadFailed(UploadError):
    """Raised when every remote upload attempt failed or a failure was definitive."""

    def __init__(self, message: str, attempts: int, details: Optional[Dict[str, Any]] = None):
        enhanced_details = details or {}
        enhanced_details["attempts"] = attempts
        super().__init__(message, details=enhanced_details)
        self.attempts = attempts


class PersistenceError(UploadError):
    """Raised when the relational store rejects or fails a write."""
    pass


class UploadTimeout(UploadError):
    """Raised when an upload request exceeds its wall-clock budget.

    Reported to clients with the error kind ``Timeout``.
    """

    def __init__(self, timeout_seconds: float):
        super().__init__(
            f"Upload did not finish within {timeout_seconds:g} seconds",
            error_code="Timeout",
            details={"timeout_seconds": timeout_seconds},
        )
        self.timeout_seconds = timeout_seconds


class UploadInProgress(UploadError):
    """Raised when a session is already being completed."""

    def __init__(self, filename: str):
        super().__init__(
            f"Upload of '{filename}' is already being completed",
            details={"filename": filename},
        )
        self.filename = filename
