"""Upload API models."""

from .requests import CompleteUploadRequest
from .responses import ChunkAckResponse, CompleteUploadResponse

__all__ = ["CompleteUploadRequest", "ChunkAckResponse", "CompleteUploadResponse"]
