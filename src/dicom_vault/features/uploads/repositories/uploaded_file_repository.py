"""AsyncPG implementation of UploadedFileRepository."""

import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

import asyncpg

from ....core.exceptions import PersistenceError
from ....database import DatabaseManager
from ....utils.uuid import generate_uuid_v7
from ..entities.uploaded_file import UploadedFile

logger = logging.getLogger(__name__)

UPLOADED_FILES_DDL = """
    CREATE TABLE IF NOT EXISTS uploaded_files (
        id UUID PRIMARY KEY,
        filename TEXT NOT NULL,
        object_id TEXT NOT NULL,
        secure_url TEXT NOT NULL,
        owner_id UUID NOT NULL,
        metadata JSONB NOT NULL DEFAULT '{}'::jsonb,
        ai_results JSONB,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    );
    CREATE INDEX IF NOT EXISTS idx_uploaded_files_owner_created
        ON uploaded_files (owner_id, created_at DESC);
"""

_COLUMNS = "id, filename, object_id, secure_url, owner_id, metadata, ai_results, created_at, updated_at"

# Failures of the store itself, as opposed to programming errors
STORE_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, TimeoutError)


class AsyncPGUploadedFileRepository:
    """
    PostgreSQL implementation of UploadedFileRepository using asyncpg.

    Every query is scoped by owner so one owner can never read or modify
    another owner's records.
    """

    def __init__(self, database: DatabaseManager):
        self.database = database

    async def ensure_schema(self) -> None:
        """Create the uploaded_files table if it does not exist."""
        await self.database.execute(UPLOADED_FILES_DDL)
        logger.info("uploaded_files table ready")

    async def create(
        self,
        owner_id: UUID,
        filename: str,
        object_id: str,
        secure_url: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> UploadedFile:
        query = f"""
            INSERT INTO uploaded_files (id, filename, object_id, secure_url, owner_id, metadata)
            VALUES ($1, $2, $3, $4, $5, $6)
            RETURNING {_COLUMNS}
        """
        try:
            row = await self.database.fetchrow(
                query,
                UUID(generate_uuid_v7()),
                filename,
                object_id,
                secure_url,
                owner_id,
                metadata or {},
            )
        except STORE_ERRORS as e:
            raise PersistenceError(
                f"Failed to insert uploaded file '{filename}': {e}",
                details={"object_id": object_id},
            ) from e
        return UploadedFile.from_record(row)

    async def find_by_id(self, file_id: UUID, owner_id: UUID) -> Optional[UploadedFile]:
        query = f"SELECT {_COLUMNS} FROM uploaded_files WHERE id = $1 AND owner_id = $2"
        row = await self.database.fetchrow(query, file_id, owner_id)
        return UploadedFile.from_record(row) if row else None

    async def list_by_owner(self, owner_id: UUID) -> List[UploadedFile]:
        """List an owner's files, newest first."""
        query = f"SELECT {_COLUMNS} FROM uploaded_files WHERE owner_id = $1 ORDER BY created_at DESC"
        rows = await self.database.fetch(query, owner_id)
        return [UploadedFile.from_record(row) for row in rows]

    async def update_ai_results(
        self, file_id: UUID, owner_id: UUID, ai_results: Dict[str, Any]
    ) -> Optional[UploadedFile]:
        query = f"""
            UPDATE uploaded_files
            SET ai_results = $3, updated_at = NOW()
            WHERE id = $1 AND owner_id = $2
            RETURNING {_COLUMNS}
        """
        try:
            row = await self.database.fetchrow(query, file_id, owner_id, ai_results)
        except STORE_ERRORS as e:
            raise PersistenceError(f"Failed to store AI results for file {file_id}: {e}") from e
        return UploadedFile.from_record(row) if row else None

    async def delete(self, file_id: UUID, owner_id: UUID) -> bool:
        result = await self.database.execute(
            "DELETE FROM uploaded_files WHERE id = $1 AND owner_id = $2",
            file_id,
            owner_id,
        )
        # asyncpg returns the command tag, e.g. "DELETE 1"
        return result.split()[-1] != "0"

    async def count_by_owner(self, owner_id: UUID) -> int:
        count = await self.database.fetchval(
            "SELECT COUNT(*) FROM uploaded_files WHERE owner_id = $1",
            owner_id,
        )
        return int(count or 0)
