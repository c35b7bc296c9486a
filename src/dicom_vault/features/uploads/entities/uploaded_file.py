"""Uploaded file entity.

ONLY the persisted file record - one row of ``uploaded_files`` created after
the artifact reached the remote object store.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Mapping, Optional
from uuid import UUID


@dataclass
class UploadedFile:
    """Persisted record of a file in the remote object store."""

    id: UUID
    filename: str
    object_id: str
    secure_url: str
    owner_id: UUID
    metadata: Dict[str, Any] = field(default_factory=dict)
    ai_results: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def has_ai_results(self) -> bool:
        return bool(self.ai_results)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "UploadedFile":
        """Build the entity from an asyncpg record or mapping."""
        return cls(
            id=record["id"],
            filename=record["filename"],
            object_id=record["object_id"],
            secure_url=record["secure_url"],
            owner_id=record["owner_id"],
            metadata=record["metadata"] or {},
            ai_results=record["ai_results"],
            created_at=record["created_at"],
            updated_at=record["updated_at"],
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialise to the camelCase JSON shape clients receive."""
        return {
            "id": str(self.id),
            "filename": self.filename,
            "objectId": self.object_id,
            "secureUrl": self.secure_url,
            "ownerId": str(self.owner_id),
            "metadata": self.metadata,
            "aiResults": self.ai_results,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
