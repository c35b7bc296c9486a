"""Upload pipeline.

ONLY upload completion - drives reassembly, remote upload and persistence
for one session and guarantees staging cleanup on every exit path.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from uuid import UUID

from ....cache import ResponseCache
from ....core.exceptions import IncompleteUpload, PersistenceError, UploadTimeout
from ....core.shared import RequestContext
from ....core.value_objects import SessionKey, safe_filename
from ....utils.uuid import generate_uuid_v7
from ..entities.uploaded_file import UploadedFile
from .cleanup_policy import CleanupPolicy
from .quota_guard import QuotaGuard
from .reassembler import Reassembler
from .record_writer import RecordWriter
from .remote_uploader import RemoteUploader
from .session_guard import SessionGuard

logger = logging.getLogger(__name__)

GZIP_CONTENT_TYPE = "application/gzip"
DICOM_CONTENT_TYPE = "application/dicom"


@dataclass
class CompleteUploadData:
    """Data required to complete a chunked upload."""

    filename: str
    total_chunks: int
    metadata: Dict[str, Any] = field(default_factory=dict)


class UploadPipeline:
    """Completes chunked uploads.

    Steps run under the session guard and one overall timeout:

    1. quota check
    2. reassemble staged chunks into the artifact
    3. upload the artifact (retried)
    4. persist the record (not retried)

    Staging is always cleaned up afterwards. An incomplete upload only loses
    its merged artifact so the client can send the missing chunks and try
    again, and a quota refusal leaves staging untouched.
    """

    def __init__(
        self,
        session_guard: SessionGuard,
        quota_guard: QuotaGuard,
        reassembler: Reassembler,
        remote_uploader: RemoteUploader,
        record_writer: RecordWriter,
        cleanup_policy: CleanupPolicy,
        cache: Optional[ResponseCache] = None,
        key_prefix: str = "dicom-files",
        compressed: bool = True,
        timeout_seconds: float = 600.0,
    ):
        self._session_guard = session_guard
        self._quota_guard = quota_guard
        self._reassembler = reassembler
        self._remote_uploader = remote_uploader
        self._record_writer = record_writer
        self._cleanup_policy = cleanup_policy
        self._cache = cache
        self._key_prefix = key_prefix.strip("/")
        self._compressed = compressed
        self._timeout_seconds = timeout_seconds

    def build_destination_key(self, owner_id: UUID, filename: str) -> str:
        """Object key for a new artifact, generated once per completion."""
        suffix = ".gz" if self._compressed else ""
        return f"{self._key_prefix}/{owner_id}/{generate_uuid_v7()}-{safe_filename(filename)}{suffix}"

    async def complete(self, context: RequestContext, data: CompleteUploadData) -> UploadedFile:
        """Complete the upload described by ``data`` for the calling owner.

        Raises:
            UploadInProgress: If the same session is already completing
            SubscriptionLimitExceeded: If the owner's tier is at its limit
            IncompleteUpload: If chunks are missing
            MergeFailed, RemoteUploadFailed, PersistenceError: Step failures
            UploadTimeout: If the steps exceed the completion timeout
        """
        session_key = SessionKey(context.owner_id, data.filename)

        with self._session_guard.hold(session_key):
            await self._quota_guard.check(context)

            keep_chunks = False
            try:
                uploaded_file = await asyncio.wait_for(
                    self._run(context, session_key, data),
                    timeout=self._timeout_seconds,
                )
            except asyncio.TimeoutError as e:
                logger.error(f"Completion of {session_key} exceeded {self._timeout_seconds:g} seconds")
                raise UploadTimeout(self._timeout_seconds) from e
            except IncompleteUpload:
                keep_chunks = True
                raise
            finally:
                if keep_chunks:
                    await self._cleanup_policy.discard_artifact(session_key)
                else:
                    await self._cleanup_policy.cleanup(session_key)

        if self._cache is not None:
            await self._cache.invalidate_owner(context.owner_id)
        return uploaded_file

    async def _run(
        self,
        context: RequestContext,
        session_key: SessionKey,
        data: CompleteUploadData,
    ) -> UploadedFile:
        artifact = await self._reassembler.reassemble(session_key, data.total_chunks)
        stored_bytes = artifact.stat().st_size

        destination_key = self.build_destination_key(context.owner_id, data.filename)
        content_type = GZIP_CONTENT_TYPE if self._compressed else DICOM_CONTENT_TYPE
        remote_ref = await self._remote_uploader.upload(artifact, destination_key, content_type)

        metadata = {
            **data.metadata,
            "upload": {
                "chunks": data.total_chunks,
                "compression": "gzip" if self._compressed else None,
                "storedBytes": stored_bytes,
            },
        }
        try:
            return await self._record_writer.commit(context.owner_id, data.filename, remote_ref, metadata)
        except PersistenceError as e:
            logger.error(
                f"Orphaned remote object {remote_ref.object_id}: uploaded for owner {context.owner_id} "
                f"('{data.filename}', {remote_ref.secure_url}) but the record was not persisted: {e.message}"
            )
            raise
