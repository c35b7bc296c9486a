"""Staging area layout.

ONLY staging paths - maps an upload session to its directory, its chunk files
and its merged artifact on the local staging volume.
"""

import logging
import re
from pathlib import Path
from typing import Iterator, Set

from ....core.value_objects import SessionKey

logger = logging.getLogger(__name__)

_CHUNK_NAME = re.compile(r"^chunk-(\d+)\.part$")


class StagingArea:
    """Deterministic filesystem layout for upload sessions.

    ``{root}/{owner_id}/{safe-filename}-{hash}/chunk-000000.part`` holds the
    chunks of a session and ``merged.gz`` (or ``merged.bin`` when compression
    is off) the reassembled artifact.
    """

    CHUNK_TEMPLATE = "chunk-{index:06d}.part"

    def __init__(self, root: Path, compress: bool = True):
        self.root = Path(root)
        self.compress = compress

    def ensure_root(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        logger.info(f"Staging area ready at {self.root}")

    def owner_dir(self, session_key: SessionKey) -> Path:
        return self.root / str(session_key.owner_id)

    def session_dir(self, session_key: SessionKey) -> Path:
        return self.owner_dir(session_key) / session_key.directory_name

    def chunk_path(self, session_key: SessionKey, chunk_index: int) -> Path:
        return self.session_dir(session_key) / self.CHUNK_TEMPLATE.format(index=chunk_index)

    @property
    def artifact_name(self) -> str:
        return "merged.gz" if self.compress else "merged.bin"

    def artifact_path(self, session_key: SessionKey) -> Path:
        return self.session_dir(session_key) / self.artifact_name

    def staged_indices(self, session_key: SessionKey) -> Set[int]:
        """Indices of chunks fully written for a session.

        In-flight temporary writes do not match the chunk name pattern and are
        never reported.
        """
        directory = self.session_dir(session_key)
        if not directory.is_dir():
            return set()
        indices = set()
        for entry in directory.iterdir():
            match = _CHUNK_NAME.match(entry.name)
            if match:
                indices.add(int(match.group(1)))
        return indices

    def iter_session_dirs(self) -> Iterator[Path]:
        """Yield every session directory currently on the staging volume."""
        if not self.root.is_dir():
            return
        for owner_dir in self.root.iterdir():
            if not owner_dir.is_dir():
                continue
            for session_dir in owner_dir.iterdir():
                if session_dir.is_dir():
                    yield session_dir
