"""File service.

ONLY file reads and deletion - the owner-scoped operations over files that
the upload pipeline produced, fronted by the response cache.
"""

import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from ....cache import ResponseCache
from ....core.exceptions import FileNotFound
from ...uploads.entities.uploaded_file import UploadedFile
from ...uploads.protocols.object_store import ObjectStore
from ...uploads.protocols.uploaded_file_repository import UploadedFileRepository

logger = logging.getLogger(__name__)


class FileService:
    """Lists, views and deletes an owner's uploaded files."""

    def __init__(
        self,
        repository: UploadedFileRepository,
        object_store: ObjectStore,
        cache: Optional[ResponseCache] = None,
        signed_url_expiration_seconds: int = 3600,
    ):
        self._repository = repository
        self._object_store = object_store
        self._cache = cache
        self._signed_url_expiration_seconds = signed_url_expiration_seconds

    async def _cached(self, owner_id: UUID, signature: str) -> Optional[Any]:
        if self._cache is None:
            return None
        return await self._cache.get(owner_id, signature)

    async def _store(self, owner_id: UUID, signature: str, value: Any) -> None:
        if self._cache is not None:
            await self._cache.set(owner_id, signature, value)

    async def _require(self, owner_id: UUID, file_id: UUID) -> UploadedFile:
        uploaded_file = await self._repository.find_by_id(file_id, owner_id)
        if uploaded_file is None:
            raise FileNotFound(str(file_id))
        return uploaded_file

    async def list_files(self, owner_id: UUID) -> List[Dict[str, Any]]:
        """Owner's files, newest first."""
        signature = "GET /files"
        cached = await self._cached(owner_id, signature)
        if cached is not None:
            return cached

        files = [f.to_dict() for f in await self._repository.list_by_owner(owner_id)]
        await self._store(owner_id, signature, files)
        return files

    async def get_file(self, owner_id: UUID, file_id: UUID) -> Dict[str, Any]:
        """File record plus a time-limited download URL."""
        signature = f"GET /files/{file_id}"
        cached = await self._cached(owner_id, signature)
        if cached is not None:
            return cached

        uploaded_file = await self._require(owner_id, file_id)
        body = uploaded_file.to_dict()
        body["signedUrl"] = await self._object_store.signed_url(
            uploaded_file.object_id, self._signed_url_expiration_seconds
        )
        await self._store(owner_id, signature, body)
        return body

    async def get_metadata(self, owner_id: UUID, file_id: UUID) -> Dict[str, Any]:
        uploaded_file = await self._require(owner_id, file_id)
        return uploaded_file.metadata

    async def get_ai_results(self, owner_id: UUID, file_id: UUID) -> Optional[Dict[str, Any]]:
        uploaded_file = await self._require(owner_id, file_id)
        return uploaded_file.ai_results

    async def delete_file(self, owner_id: UUID, file_id: UUID) -> None:
        """Destroy the remote object first, then the record.

        A failed remote delete leaves the record in place so the delete can be
        retried.
        """
        uploaded_file = await self._require(owner_id, file_id)
        await self._object_store.destroy(uploaded_file.object_id)
        await self._repository.delete(file_id, owner_id)
        logger.info(f"Deleted file {file_id} ({uploaded_file.object_id}) for owner {owner_id}")

        if self._cache is not None:
            await self._cache.invalidate_owner(owner_id)
