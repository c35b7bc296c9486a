"""Response models for upload endpoints."""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


class ChunkAckResponse(BaseModel):
    """Acknowledgement of a staged chunk."""

    model_config = ConfigDict(populate_by_name=True)

    chunk_index: int = Field(..., alias="chunkIndex")
    total_chunks: int = Field(..., alias="totalChunks")


class CompleteUploadResponse(BaseModel):
    """Created file record."""

    message: str
    file: Dict[str, Any]
