"""Stale session sweeper.

ONLY background sweeping - periodically removes staging directories of
upload sessions that were abandoned before completion.
"""

import asyncio
import logging
from datetime import timedelta
from typing import Optional

from .cleanup_policy import CleanupPolicy
from .session_guard import SessionGuard
from .staging import StagingArea

logger = logging.getLogger(__name__)


class StaleSessionSweeper:
    """Runs ``CleanupPolicy.sweep_stale`` on a fixed interval."""

    def __init__(
        self,
        cleanup_policy: CleanupPolicy,
        staging: StagingArea,
        session_guard: SessionGuard,
        max_age: timedelta = timedelta(hours=24),
        interval: timedelta = timedelta(hours=1),
    ):
        self._cleanup_policy = cleanup_policy
        self._staging = staging
        self._session_guard = session_guard
        self.max_age = max_age
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    async def sweep_once(self) -> int:
        """Sweep stale sessions, skipping any session being completed."""
        in_flight = [self._staging.session_dir(key) for key in self._session_guard.active_sessions()]
        return await self._cleanup_policy.sweep_stale(self.max_age, exclude=in_flight)

    async def run_forever(self) -> None:
        while True:
            await asyncio.sleep(self.interval.total_seconds())
            try:
                await self.sweep_once()
            except OSError as e:
                logger.error(f"Stale session sweep failed: {e}")

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run_forever())
            logger.info(f"Stale session sweeper started (interval={self.interval}, max_age={self.max_age})")

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.info("Stale session sweeper stopped")
