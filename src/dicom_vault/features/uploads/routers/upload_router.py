"""Chunked upload endpoints."""

import asyncio

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from ....api.dependencies import get_app_settings, get_chunk_receiver, get_upload_pipeline
from ....config import Settings
from ....core.exceptions import UploadTimeout
from ....core.shared import RequestContext
from ....core.value_objects import SessionKey
from ...auth.dependencies import require_request_context
from ..models import ChunkAckResponse, CompleteUploadRequest, CompleteUploadResponse
from ..services import ChunkReceiver, CompleteUploadData, UploadPipeline

router = APIRouter()


@router.post(
    "/chunk",
    response_model=ChunkAckResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_202_ACCEPTED,
)
async def upload_chunk(
    chunk: UploadFile = File(...),
    chunk_index: int = Form(..., alias="chunkIndex"),
    total_chunks: int = Form(..., alias="totalChunks"),
    filename: str = Form(..., min_length=1, max_length=255, pattern=r"\S"),
    context: RequestContext = Depends(require_request_context),
    receiver: ChunkReceiver = Depends(get_chunk_receiver),
    settings: Settings = Depends(get_app_settings),
):
    """Stage one chunk of a file.

    Chunks of one file may arrive in any order and may be re-sent; a re-sent
    chunk replaces the earlier copy.
    """
    try:
        ack = await asyncio.wait_for(
            receiver.receive(
                SessionKey(context.owner_id, filename),
                chunk_index,
                total_chunks,
                chunk.file,
                chunk.content_type,
            ),
            timeout=settings.chunk_timeout_seconds,
        )
    except asyncio.TimeoutError as e:
        raise UploadTimeout(settings.chunk_timeout_seconds) from e
    finally:
        await chunk.close()

    return ChunkAckResponse(chunk_index=ack.chunk_index, total_chunks=ack.total_chunks)


@router.post(
    "/complete",
    response_model=CompleteUploadResponse,
    status_code=status.HTTP_201_CREATED,
)
async def complete_upload(
    body: CompleteUploadRequest,
    context: RequestContext = Depends(require_request_context),
    pipeline: UploadPipeline = Depends(get_upload_pipeline),
):
    """Reassemble the staged chunks, store the file remotely and record it."""
    uploaded_file = await pipeline.complete(
        context,
        CompleteUploadData(
            filename=body.filename,
            total_chunks=body.total_chunks,
            metadata=body.metadata,
        ),
    )
    return CompleteUploadResponse(message="File uploaded successfully", file=uploaded_file.to_dict())
