"""Record writer.

ONLY record persistence - creates the ``UploadedFile`` row once the artifact
is safely in the remote object store. Never retried.
"""

import logging
from typing import Any, Dict, Optional
from uuid import UUID

from ....core.exceptions import PersistenceError
from ..entities.remote_object_ref import RemoteObjectRef
from ..entities.uploaded_file import UploadedFile
from ..protocols.uploaded_file_repository import UploadedFileRepository

logger = logging.getLogger(__name__)


class RecordWriter:
    """Persists the record that references an uploaded remote object."""

    def __init__(self, repository: UploadedFileRepository):
        self._repository = repository

    async def commit(
        self,
        owner_id: UUID,
        filename: str,
        remote_ref: RemoteObjectRef,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> UploadedFile:
        """Create and persist the record.

        Raises:
            PersistenceError: If the store is unreachable or rejects the write
        """
        try:
            uploaded_file = await self._repository.create(
                owner_id=owner_id,
                filename=filename,
                object_id=remote_ref.object_id,
                secure_url=remote_ref.secure_url,
                metadata=metadata or {},
            )
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(
                f"Failed to persist record for '{filename}': {e}",
                details={"object_id": remote_ref.object_id},
            ) from e

        logger.info(f"Recorded file {uploaded_file.id} for object {remote_ref.object_id}")
        return uploaded_file
