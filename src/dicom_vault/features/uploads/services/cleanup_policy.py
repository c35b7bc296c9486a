"""Cleanup policy.

ONLY staging cleanup - removes staged chunks and merged artifacts on every
exit path, and sweeps abandoned sessions.
"""

import asyncio
import contextlib
import logging
import shutil
import time
from datetime import timedelta
from pathlib import Path
from typing import Collection, Optional

from ....core.value_objects import SessionKey
from .staging import StagingArea

logger = logging.getLogger(__name__)


def _remove_directory(directory: Path) -> int:
    """Remove a session directory and its files. Missing entries are skipped."""
    if not directory.is_dir():
        return 0
    removed = 0
    for entry in list(directory.iterdir()):
        try:
            if entry.is_dir():
                shutil.rmtree(entry)
            else:
                entry.unlink()
            removed += 1
        except FileNotFoundError:
            continue
    with contextlib.suppress(FileNotFoundError):
        directory.rmdir()
    # Parent still holds other sessions of the same owner
    with contextlib.suppress(OSError):
        directory.parent.rmdir()
    return removed


def _last_modified(directory: Path) -> float:
    latest = directory.stat().st_mtime
    for entry in directory.iterdir():
        with contextlib.suppress(FileNotFoundError):
            latest = max(latest, entry.stat().st_mtime)
    return latest


class CleanupPolicy:
    """Removes staging state for a session. Every operation is idempotent."""

    def __init__(self, staging: StagingArea):
        self._staging = staging

    async def cleanup(self, session_key: SessionKey) -> int:
        """Remove every staged chunk, the merged artifact and the session directory.

        Returns:
            Number of files removed
        """
        removed = await asyncio.to_thread(_remove_directory, self._staging.session_dir(session_key))
        if removed:
            logger.debug(f"Removed {removed} staged files for session {session_key}")
        return removed

    async def discard_artifact(self, session_key: SessionKey) -> bool:
        """Remove only the merged artifact, keeping staged chunks."""
        artifact = self._staging.artifact_path(session_key)

        def _unlink() -> bool:
            try:
                artifact.unlink()
                return True
            except FileNotFoundError:
                return False

        return await asyncio.to_thread(_unlink)

    async def sweep_stale(
        self,
        max_age: timedelta,
        exclude: Optional[Collection[Path]] = None,
    ) -> int:
        """Remove session directories untouched for longer than ``max_age``.

        Args:
            max_age: Age after which an idle session is abandoned
            exclude: Session directories that must be left alone

        Returns:
            Number of session directories removed
        """
        excluded = set(exclude or ())
        cutoff = time.time() - max_age.total_seconds()

        def _sweep() -> int:
            swept = 0
            for session_dir in list(self._staging.iter_session_dirs()):
                if session_dir in excluded:
                    continue
                try:
                    if _last_modified(session_dir) >= cutoff:
                        continue
                except FileNotFoundError:
                    continue
                _remove_directory(session_dir)
                swept += 1
            return swept

        swept = await asyncio.to_thread(_sweep)
        if swept:
            logger.info(f"Swept {swept} stale upload sessions older than {max_age}")
        return swept
