"""Upload protocols."""

from .object_store import ObjectStore
from .uploaded_file_repository import UploadedFileRepository

__all__ = ["ObjectStore", "UploadedFileRepository"]
