"""Upload repositories."""

from .uploaded_file_repository import AsyncPGUploadedFileRepository, UPLOADED_FILES_DDL

__all__ = ["AsyncPGUploadedFileRepository", "UPLOADED_FILES_DDL"]
