"""Session guard.

ONLY in-flight tracking - at most one completion per upload session runs at a
time within this process, and never while a chunk write for it is pending.
"""

import logging
from contextlib import contextmanager
from typing import Dict, FrozenSet, Iterator, Set

from ....core.exceptions import UploadInProgress
from ....core.value_objects import SessionKey

logger = logging.getLogger(__name__)


class SessionGuard:
    """In-process registry of sessions whose completion is in flight.

    Check-and-add happens without an intervening await, so it is atomic with
    respect to the event loop. Sessions are not coordinated across processes:
    two instances sharing a staging volume can still race on the same key.

    Chunk writes register through ``begin_write``/``end_write``. A session
    with writes pending cannot be acquired, and a held session refuses new
    writes.

    Usage:
        with guard.hold(session_key):
            ...  # reassemble, upload, persist
    """

    def __init__(self):
        self._active: Set[SessionKey] = set()
        self._writes: Dict[SessionKey, int] = {}

    def is_active(self, session_key: SessionKey) -> bool:
        return session_key in self._active

    def has_writes_in_flight(self, session_key: SessionKey) -> bool:
        return self._writes.get(session_key, 0) > 0

    def acquire(self, session_key: SessionKey) -> bool:
        """Mark a session in flight. Returns False if it already was."""
        if session_key in self._active:
            logger.warning(f"Completion already in progress for session {session_key}")
            return False
        if self.has_writes_in_flight(session_key):
            logger.warning(
                f"Completion requested while {self._writes[session_key]} chunk write(s) "
                f"are pending for session {session_key}"
            )
            return False
        self._active.add(session_key)
        return True

    def release(self, session_key: SessionKey) -> None:
        self._active.discard(session_key)

    def begin_write(self, session_key: SessionKey) -> None:
        """Register a pending chunk write.

        Raises:
            UploadInProgress: If the session is being completed
        """
        if session_key in self._active:
            raise UploadInProgress(session_key.filename)
        self._writes[session_key] = self._writes.get(session_key, 0) + 1

    def end_write(self, session_key: SessionKey) -> None:
        remaining = self._writes.get(session_key, 0) - 1
        if remaining > 0:
            self._writes[session_key] = remaining
        else:
            self._writes.pop(session_key, None)

    @contextmanager
    def hold(self, session_key: SessionKey) -> Iterator[SessionKey]:
        """Hold a session for the duration of the block.

        Raises:
            UploadInProgress: If the session is already held or has chunk
                writes pending
        """
        if not self.acquire(session_key):
            raise UploadInProgress(session_key.filename)
        try:
            yield session_key
        finally:
            self.release(session_key)

    def active_sessions(self) -> FrozenSet[SessionKey]:
        return frozenset(self._active)
