"""Reassembler.

ONLY chunk reassembly - folds every staged chunk of a session, in ascending
numeric index order, through one compression stream into one artifact.
"""

import asyncio
import gzip
import logging
import shutil
import threading
from pathlib import Path

from ....core.exceptions import IncompleteUpload, InvalidChunkIndex, MergeFailed
from ....core.value_objects import SessionKey
from .cleanup_policy import CleanupPolicy
from .staging import StagingArea

logger = logging.getLogger(__name__)


class Reassembler:
    """Merges staged chunks into the session's artifact.

    Chunks are streamed in fixed-size blocks and each one is deleted as soon as
    it has been folded in, so memory use is independent of file size and a
    crash mid-merge leaves at most one unconsumed chunk plus a partial output.
    A failed merge is not resumable; the caller retries from scratch.
    """

    COPY_BLOCK_SIZE = 1024 * 1024

    def __init__(
        self,
        staging: StagingArea,
        cleanup_policy: CleanupPolicy,
        compression_level: int = 6,
    ):
        self._staging = staging
        self._cleanup_policy = cleanup_policy
        self._compression_level = compression_level

    async def reassemble(self, session_key: SessionKey, total_chunks: int) -> Path:
        """Merge all chunks of a session.

        Args:
            session_key: Session to merge
            total_chunks: Number of chunks the artifact consists of

        Returns:
            Path to the merged artifact

        Raises:
            InvalidChunkIndex: If total_chunks is below 1
            IncompleteUpload: If any chunk in [0, total_chunks) is missing.
                Nothing is written and nothing is deleted.
            MergeFailed: If reading a chunk or writing the output fails.
                The whole session is cleaned up first.
        """
        if total_chunks < 1:
            raise InvalidChunkIndex(0, total_chunks)

        present = await asyncio.to_thread(self._staging.staged_indices, session_key)
        missing = [index for index in range(total_chunks) if index not in present]
        if missing:
            raise IncompleteUpload(missing, total_chunks)

        cancelled = threading.Event()
        try:
            artifact = await asyncio.to_thread(self._merge, session_key, total_chunks, cancelled)
        except asyncio.CancelledError:
            # The worker thread cannot be interrupted; stop it at the next chunk
            cancelled.set()
            raise
        except MergeFailed as e:
            logger.error(f"Merge failed for session {session_key}: {e.message}")
            await self._cleanup_policy.cleanup(session_key)
            raise

        logger.info(f"Reassembled {total_chunks} chunks for session {session_key} into {artifact.name}")
        return artifact

    def _merge(self, session_key: SessionKey, total_chunks: int, cancelled: threading.Event) -> Path:
        output_path = self._staging.artifact_path(session_key)
        index = 0
        try:
            with open(output_path, "wb") as raw:
                sink = (
                    gzip.GzipFile(fileobj=raw, mode="wb", compresslevel=self._compression_level)
                    if self._staging.compress
                    else raw
                )
                try:
                    # range() gives numeric order; lexical order on file names would put 10 before 2
                    for index in range(total_chunks):
                        if cancelled.is_set():
                            raise MergeFailed(
                                f"Merge cancelled before chunk {index}",
                                details={"chunk_index": index},
                            )
                        chunk_path = self._staging.chunk_path(session_key, index)
                        with open(chunk_path, "rb") as chunk:
                            shutil.copyfileobj(chunk, sink, self.COPY_BLOCK_SIZE)
                        chunk_path.unlink()
                finally:
                    if sink is not raw:
                        sink.close()
        except OSError as e:
            raise MergeFailed(
                f"Failed to merge chunk {index} of {total_chunks}: {e}",
                details={"chunk_index": index, "total_chunks": total_chunks},
            ) from e
        return output_path
