"""Chunk acknowledgement entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ChunkAck:
    """Acknowledges a staged chunk so the client can track completion."""

    chunk_index: int
    total_chunks: int
    bytes_written: int = 0
