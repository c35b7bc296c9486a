"""Uploaded file repository protocol."""

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable
from uuid import UUID


from ..entities.uploaded_file import UploadedFile


@runtime_checkable
class UploadedFileRepository(Protocol):
    """Persistence contract for ``UploadedFile`` records."""

    async def create(
        self,
        owner_id: UUID,
        filename: str,
        object_id: str,
        secure_url: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> UploadedFile:
        ...

    async def find_by_id(self, file_id: UUID, owner_id: UUID) -> Optional[UploadedFile]:
        ...

    async def list_by_owner(self, owner_id: UUID) -> List[UploadedFile]:
        ...

    async def update_ai_results(
        self, file_id: UUID, owner_id: UUID, ai_results: Dict[str, Any]
    ) -> Optional[UploadedFile]:
        ...

    async def delete(self, file_id: UUID, owner_id: UUID) -> bool:
        ...

    async def count_by_owner(self, owner_id: UUID) -> int:
        ...
