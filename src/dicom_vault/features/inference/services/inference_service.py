"""Inference service.

ONLY delegated inference - runs the AI service on one of the owner's files,
stores the verdict and reports inference status.
"""

import logging
from typing import Any, Dict, Optional
from uuid import UUID

from ....cache import ResponseCache
from ....core.exceptions import FileNotFound
from ...uploads.protocols.object_store import ObjectStore
from ...uploads.protocols.uploaded_file_repository import UploadedFileRepository
from ..adapters.inference_client import InferenceClient

logger = logging.getLogger(__name__)

STATUS_PENDING = "pending"
STATUS_COMPLETED = "completed"


class InferenceService:
    """Runs AI inference on uploaded files."""

    def __init__(
        self,
        repository: UploadedFileRepository,
        client: InferenceClient,
        object_store: Optional[ObjectStore] = None,
        cache: Optional[ResponseCache] = None,
        image_url_expiration_seconds: int = 3600,
    ):
        self._repository = repository
        self._client = client
        self._object_store = object_store
        self._cache = cache
        self._image_url_expiration_seconds = image_url_expiration_seconds

    async def run(self, owner_id: UUID, file_id: UUID) -> Dict[str, Any]:
        """Send the file to the AI service and store its results."""
        uploaded_file = await self._repository.find_by_id(file_id, owner_id)
        if uploaded_file is None:
            raise FileNotFound(str(file_id))

        # Stored objects are private, so hand the AI service a signed URL
        if self._object_store is not None:
            image_url = await self._object_store.signed_url(
                uploaded_file.object_id, self._image_url_expiration_seconds
            )
        else:
            image_url = uploaded_file.secure_url

        results = await self._client.infer(image_url, uploaded_file.metadata)
        updated = await self._repository.update_ai_results(file_id, owner_id, results)
        if updated is None:
            raise FileNotFound(str(file_id))

        logger.info(f"Stored AI results for file {file_id}")
        if self._cache is not None:
            await self._cache.invalidate_owner(owner_id)
        return results

    async def status(self, owner_id: UUID, file_id: UUID) -> Dict[str, Any]:
        uploaded_file = await self._repository.find_by_id(file_id, owner_id)
        if uploaded_file is None:
            raise FileNotFound(str(file_id))

        if not uploaded_file.has_ai_results:
            return {"status": STATUS_PENDING}
        return {"status": STATUS_COMPLETED, "results": uploaded_file.ai_results}
