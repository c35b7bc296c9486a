"""Object store protocol.

ONLY remote storage contract - what the upload pipeline and the file
operations require of the remote object store.
"""

from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from ..entities.remote_object_ref import RemoteObjectRef


@runtime_checkable
class ObjectStore(Protocol):
    """Remote object store contract.

    Implementations raise ``ObjectStoreError`` and set ``retryable`` for
    transient failures (network errors, timeouts, 5xx, 429) so callers can
    tell them apart from definitive ones such as rejected credentials.
    """

    async def upload(
        self,
        local_path: Path,
        destination_key: str,
        content_type: Optional[str] = None,
    ) -> RemoteObjectRef:
        """Upload a local file to ``destination_key``, overwriting any previous object."""
        ...

    async def destroy(self, object_id: str) -> None:
        """Delete a remote object. Deleting a missing object is not an error."""
        ...

    async def signed_url(self, object_id: str, expires_in: int) -> str:
        """Return a time-limited download URL for a remote object."""
        ...
