"""Request models for upload endpoints."""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


class CompleteUploadRequest(BaseModel):
    """Body of ``POST /upload/complete``."""

    model_config = ConfigDict(populate_by_name=True)

    filename: str = Field(..., min_length=1, max_length=255, pattern=r"\S")
    total_chunks: int = Field(..., alias="totalChunks", ge=1)
    metadata: Dict[str, Any] = Field(default_factory=dict)
