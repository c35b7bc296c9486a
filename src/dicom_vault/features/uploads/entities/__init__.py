"""Upload entities."""

from .chunk_ack import ChunkAck
from .remote_object_ref import RemoteObjectRef
from .uploaded_file import UploadedFile

__all__ = ["ChunkAck", "RemoteObjectRef", "UploadedFile"]
