"""Uploaded file endpoints."""

from typing import Any, Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends

from ....api.dependencies import get_file_service
from ....core.shared import RequestContext
from ...auth.dependencies import require_request_context
from ..services import FileService

router = APIRouter()


@router.get("")
async def list_files(
    context: RequestContext = Depends(require_request_context),
    service: FileService = Depends(get_file_service),
) -> List[Dict[str, Any]]:
    """List the caller's files, newest first."""
    return await service.list_files(context.owner_id)


@router.get("/{file_id}")
async def get_file(
    file_id: UUID,
    context: RequestContext = Depends(require_request_context),
    service: FileService = Depends(get_file_service),
) -> Dict[str, Any]:
    """Get a file with a download URL that expires after an hour."""
    return await service.get_file(context.owner_id, file_id)


@router.get("/{file_id}/metadata")
async def get_file_metadata(
    file_id: UUID,
    context: RequestContext = Depends(require_request_context),
    service: FileService = Depends(get_file_service),
) -> Dict[str, Any]:
    return await service.get_metadata(context.owner_id, file_id)


@router.get("/{file_id}/ai-results")
async def get_file_ai_results(
    file_id: UUID,
    context: RequestContext = Depends(require_request_context),
    service: FileService = Depends(get_file_service),
) -> Optional[Dict[str, Any]]:
    return await service.get_ai_results(context.owner_id, file_id)


@router.delete("/{file_id}")
async def delete_file(
    file_id: UUID,
    context: RequestContext = Depends(require_request_context),
    service: FileService = Depends(get_file_service),
) -> Dict[str, str]:
    """Delete a file from the object store, then its record."""
    await service.delete_file(context.owner_id, file_id)
    return {"message": "File deleted successfully"}
