"""Upload session key value object.

ONLY upload session identity - an upload session is identified by the owner
and the original filename the client declared.
"""

import hashlib
import re
from dataclasses import dataclass
from uuid import UUID

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")
_MAX_SAFE_NAME_LENGTH = 64


def safe_filename(filename: str) -> str:
    """Reduce a client-supplied filename to a filesystem and key safe form.

    Path separators and anything outside ``[A-Za-z0-9._-]`` collapse to a
    single underscore, and leading dots are stripped so the result can never
    name a parent directory or a hidden file.
    """
    base = filename.replace("\\", "/").rsplit("/", 1)[-1]
    cleaned = _UNSAFE_CHARS.sub("_", base).lstrip(".")
    cleaned = cleaned[:_MAX_SAFE_NAME_LENGTH]
    return cleaned or "file"


@dataclass(frozen=True)
class SessionKey:
    """Upload session key value object.

    Two chunk requests belong to the same session when they come from the same
    owner and name the same original filename. The directory name is
    deterministic in both, so any process sharing the staging volume maps a
    session to the same place.

    Immutable and hashable for use as dictionary keys and in sets.
    """

    owner_id: UUID
    filename: str

    def __post_init__(self):
        """Validate session key parts."""
        if not isinstance(self.owner_id, UUID):
            raise ValueError(f"SessionKey owner_id must be a UUID, got {type(self.owner_id).__name__}")
        if not self.filename or not self.filename.strip():
            raise ValueError("SessionKey filename must not be empty")

    @property
    def safe_filename(self) -> str:
        return safe_filename(self.filename)

    @property
    def directory_name(self) -> str:
        """Deterministic per-session directory name.

        The hash suffix keeps sessions apart when two filenames sanitize to
        the same safe name.
        """
        digest = hashlib.sha256(f"{self.owner_id}:{self.filename}".encode("utf-8")).hexdigest()[:16]
        return f"{self.safe_filename}-{digest}"

    def __str__(self) -> str:
        return f"{self.owner_id}/{self.filename}"
