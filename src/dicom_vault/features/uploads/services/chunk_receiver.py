"""Chunk receiver.

ONLY chunk intake - validates one chunk and writes it to staging storage at a
location deterministic in (session, chunk index).
"""

import asyncio
import io
import logging
import os
from pathlib import Path
from typing import BinaryIO, Iterable, Optional, Union
from uuid import uuid4

from ....core.exceptions import ChunkTooLarge, ChunkWriteFailed, InvalidChunkIndex, InvalidFileType
from ....core.value_objects import SessionKey
from ..entities.chunk_ack import ChunkAck
from .session_guard import SessionGuard
from .staging import StagingArea

logger = logging.getLogger(__name__)

ChunkPayload = Union[bytes, BinaryIO]


def normalize_content_type(content_type: Optional[str]) -> str:
    """Lower-case a content type and drop its parameters."""
    return (content_type or "").split(";", 1)[0].strip().lower()


class ChunkReceiver:
    """Accepts one chunk at a time.

    Validation order is content type, index range, in-flight completion and
    finally size, which is counted while the payload streams to disk so an
    oversized payload is never held in memory. No database access happens
    per chunk.
    """

    COPY_BLOCK_SIZE = 1024 * 1024

    def __init__(
        self,
        staging: StagingArea,
        session_guard: SessionGuard,
        accepted_content_types: Iterable[str],
        max_chunk_size_bytes: int,
    ):
        self._staging = staging
        self._session_guard = session_guard
        self._accepted_content_types = [normalize_content_type(ct) for ct in accepted_content_types]
        self.max_chunk_size_bytes = max_chunk_size_bytes

    async def receive(
        self,
        session_key: SessionKey,
        chunk_index: int,
        total_chunks: int,
        payload: ChunkPayload,
        content_type: Optional[str],
    ) -> ChunkAck:
        """Validate and stage one chunk.

        Args:
            session_key: Owner and original filename of the upload
            chunk_index: Zero-based chunk index
            total_chunks: Number of chunks the client will send
            payload: Chunk bytes or a readable binary stream
            content_type: Content type the client declared for the chunk

        Returns:
            Acknowledgement carrying the chunk index and total

        Raises:
            InvalidFileType: If the content type is not accepted
            InvalidChunkIndex: If the index or total is out of range
            UploadInProgress: If the session is being completed right now
            ChunkTooLarge: If the payload exceeds the per-chunk ceiling
            ChunkWriteFailed: If staging storage rejects the write
        """
        if normalize_content_type(content_type) not in self._accepted_content_types:
            raise InvalidFileType(content_type, self._accepted_content_types)

        if total_chunks < 1 or not 0 <= chunk_index < total_chunks:
            raise InvalidChunkIndex(chunk_index, total_chunks)

        if isinstance(payload, (bytes, bytearray)):
            if len(payload) > self.max_chunk_size_bytes:
                raise ChunkTooLarge(chunk_index, self.max_chunk_size_bytes)
            payload = io.BytesIO(payload)

        target = self._staging.chunk_path(session_key, chunk_index)
        self._session_guard.begin_write(session_key)
        write = asyncio.ensure_future(asyncio.to_thread(self._write_chunk, target, payload, chunk_index))
        write.add_done_callback(lambda done: self._finish_write(session_key, done))
        # The worker thread outlives a cancelled request; the write stays
        # registered until it actually finishes.
        bytes_written = await asyncio.shield(write)

        logger.debug(
            f"Staged chunk {chunk_index + 1}/{total_chunks} for {session_key} ({bytes_written} bytes)"
        )
        return ChunkAck(chunk_index=chunk_index, total_chunks=total_chunks, bytes_written=bytes_written)

    def _finish_write(self, session_key: SessionKey, done: "asyncio.Future[int]") -> None:
        self._session_guard.end_write(session_key)
        if not done.cancelled() and done.exception() is not None:
            logger.debug(f"Chunk write for {session_key} failed: {done.exception()!r}")

    def _write_chunk(self, target: Path, source: BinaryIO, chunk_index: int) -> int:
        """Stream a payload to a temporary file, then rename it into place.

        The rename makes an overwrite of an existing chunk atomic. A rejected
        or failed write removes only its own temporary file.
        """
        temp_path = target.with_name(f"{target.name}.{uuid4().hex}.tmp")
        written = 0
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_path, "wb") as out:
                while True:
                    block = source.read(self.COPY_BLOCK_SIZE)
                    if not block:
                        break
                    written += len(block)
                    if written > self.max_chunk_size_bytes:
                        raise ChunkTooLarge(chunk_index, self.max_chunk_size_bytes)
                    out.write(block)
            os.replace(temp_path, target)
        except OSError as e:
            temp_path.unlink(missing_ok=True)
            raise ChunkWriteFailed(chunk_index, str(e)) from e
        except BaseException:
            temp_path.unlink(missing_ok=True)
            raise
        return written
