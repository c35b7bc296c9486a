"""Remote object reference entity.

ONLY remote object identity - what the object store hands back after a
successful upload.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class RemoteObjectRef:
    """Opaque reference to the durable remote copy of an artifact."""

    object_id: str
    secure_url: str
