"""Remote uploader.

ONLY remote upload with retry - pushes the merged artifact to the object
store, retrying transient failures and stopping at definitive ones.
"""

import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Callable, Optional

from ....core.exceptions import ObjectStoreError, RemoteUploadFailed
from ..entities.remote_object_ref import RemoteObjectRef
from ..protocols.object_store import ObjectStore

logger = logging.getLogger(__name__)


class RemoteUploader:
    """Uploads an artifact under a linear backoff retry policy.

    The delay before attempt ``n + 1`` is ``base_delay_seconds * n``. Every
    attempt targets the same destination key, so a retry overwrites whatever a
    previous partial attempt left behind.
    """

    def __init__(
        self,
        object_store: ObjectStore,
        max_attempts: int = 3,
        base_delay_seconds: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._object_store = object_store
        self.max_attempts = max_attempts
        self.base_delay_seconds = base_delay_seconds
        self._sleep = sleep

    async def upload(
        self,
        local_path: Path,
        destination_key: str,
        content_type: Optional[str] = None,
    ) -> RemoteObjectRef:
        """Upload ``local_path`` to ``destination_key``.

        Raises:
            RemoteUploadFailed: After a definitive failure or once all attempts
                are used up. Carries the last underlying error's message.
                Errors other than ObjectStoreError count as definitive.
        """
        last_error: Optional[ObjectStoreError] = None
        cause: Optional[Exception] = None
        attempt = 0

        while attempt < self.max_attempts:
            attempt += 1
            try:
                remote_ref = await self._object_store.upload(local_path, destination_key, content_type)
                if attempt > 1:
                    logger.info(f"Uploaded {destination_key} on attempt {attempt}/{self.max_attempts}")
                return remote_ref

            except ObjectStoreError as e:
                last_error = cause = e
                if not e.retryable:
                    logger.error(f"Upload of {destination_key} failed definitively: {e.message}")
                    break

                logger.warning(f"Upload attempt {attempt}/{self.max_attempts} for {destination_key} failed: {e.message}")
                if attempt < self.max_attempts:
                    delay = self.base_delay_seconds * attempt
                    logger.info(f"Retrying in {delay:g} seconds...")
                    await self._sleep(delay)

            except Exception as e:
                # Adapters should raise ObjectStoreError; anything else is
                # treated as definitive.
                logger.exception(f"Unexpected error uploading {destination_key}")
                last_error = ObjectStoreError(f"Unexpected object store error: {e!r}", retryable=False)
                cause = e
                break

        logger.error(f"Failed to upload {destination_key} after {attempt} attempt(s)")
        raise RemoteUploadFailed(
            last_error.message,
            attempts=attempt,
            details={"destination_key": destination_key, "retryable": last_error.retryable},
        ) from cause
