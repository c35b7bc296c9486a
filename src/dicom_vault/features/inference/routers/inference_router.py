"""AI inference endpoints."""

from typing import Any, Dict
from uuid import UUID

from fastapi import APIRouter, Depends

from ....api.dependencies import get_inference_service
from ....core.shared import RequestContext
from ...auth.dependencies import require_request_context
from ..services import InferenceService

router = APIRouter()


@router.post("/{file_id}")
async def run_inference(
    file_id: UUID,
    context: RequestContext = Depends(require_request_context),
    service: InferenceService = Depends(get_inference_service),
) -> Dict[str, Any]:
    """Run AI inference on a file and return the stored results."""
    return await service.run(context.owner_id, file_id)


@router.get("/status/{file_id}")
async def get_inference_status(
    file_id: UUID,
    context: RequestContext = Depends(require_request_context),
    service: InferenceService = Depends(get_inference_service),
) -> Dict[str, Any]:
    """``pending`` until results are stored, then ``completed`` with the results."""
    return await service.status(context.owner_id, file_id)
