"""S3 object store adapter.

ONLY S3-compatible remote storage - signs requests with boto3 and transfers
bytes with an httpx async client so transfers never block the event loop and
are aborted when the awaiting task is cancelled.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, AsyncIterator, Optional

import boto3
import httpx
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from ....core.exceptions import ObjectStoreError
from ..entities.remote_object_ref import RemoteObjectRef

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({408, 429})


def is_retryable_status(status_code: int) -> bool:
    """Server-side and throttling responses are worth retrying; other 4xx are not."""
    return status_code >= 500 or status_code in RETRYABLE_STATUS_CODES


async def _stream_file(path: Path, block_size: int) -> AsyncIterator[bytes]:
    with open(path, "rb") as handle:
        while True:
            block = await asyncio.to_thread(handle.read, block_size)
            if not block:
                break
            yield block


class S3ObjectStore:
    """S3/MinIO object store."""

    UPLOAD_BLOCK_SIZE = 1024 * 1024

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        bucket_name: str,
        endpoint_url: Optional[str] = None,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        region: str = "us-east-1",
        s3_client: Any = None,
        presign_expiry_seconds: int = 900,
    ):
        self._http = http_client
        self.bucket_name = bucket_name
        self.endpoint_url = (endpoint_url or "").rstrip("/")
        self._presign_expiry_seconds = presign_expiry_seconds
        self._client = s3_client or boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            region_name=region,
            config=Config(signature_version="s3v4", s3={"addressing_style": "path"}),
        )

    def _presign(self, operation: str, key: str, expires_in: Optional[int] = None, **params) -> str:
        try:
            return self._client.generate_presigned_url(
                operation,
                Params={"Bucket": self.bucket_name, "Key": key, **params},
                ExpiresIn=expires_in or self._presign_expiry_seconds,
            )
        except (BotoCoreError, ClientError) as e:
            raise ObjectStoreError(f"Could not sign {operation} request for {key}: {e}") from e

    def object_url(self, key: str) -> str:
        if self.endpoint_url:
            return f"{self.endpoint_url}/{self.bucket_name}/{key}"
        return f"https://{self.bucket_name}.s3.amazonaws.com/{key}"

    @staticmethod
    def _raise_for_response(response: httpx.Response, action: str) -> None:
        if response.is_success:
            return
        message = f"{action} failed with HTTP {response.status_code}"
        if response.text:
            message = f"{message}: {response.text[:300]}"
        raise ObjectStoreError(
            message,
            retryable=is_retryable_status(response.status_code),
            status_code=response.status_code,
        )

    async def upload(
        self,
        local_path: Path,
        destination_key: str,
        content_type: Optional[str] = None,
    ) -> RemoteObjectRef:
        """Upload a file with a presigned PUT, overwriting any existing object."""
        try:
            size = local_path.stat().st_size
        except OSError as e:
            raise ObjectStoreError(f"Cannot read artifact {local_path}: {e}") from e

        params = {"ContentType": content_type} if content_type else {}
        url = self._presign("put_object", destination_key, **params)
        headers = {"Content-Length": str(size)}
        if content_type:
            headers["Content-Type"] = content_type

        try:
            response = await self._http.put(
                url,
                content=_stream_file(local_path, self.UPLOAD_BLOCK_SIZE),
                headers=headers,
            )
        except httpx.TransportError as e:
            raise ObjectStoreError(f"Upload of {destination_key} failed: {e!r}", retryable=True) from e
        except OSError as e:
            raise ObjectStoreError(f"Cannot read artifact {local_path}: {e}") from e

        self._raise_for_response(response, f"Upload of {destination_key}")
        logger.info(f"Uploaded {size} bytes to s3://{self.bucket_name}/{destination_key}")
        return RemoteObjectRef(object_id=destination_key, secure_url=self.object_url(destination_key))

    async def destroy(self, object_id: str) -> None:
        """Delete an object. A missing object counts as deleted."""
        url = self._presign("delete_object", object_id)
        try:
            response = await self._http.delete(url)
        except httpx.TransportError as e:
            raise ObjectStoreError(f"Delete of {object_id} failed: {e!r}", retryable=True) from e

        if response.status_code == 404:
            logger.warning(f"Object {object_id} was already absent from the store")
            return
        self._raise_for_response(response, f"Delete of {object_id}")
        logger.info(f"Deleted s3://{self.bucket_name}/{object_id}")

    async def signed_url(self, object_id: str, expires_in: int) -> str:
        """Presigned GET URL valid for ``expires_in`` seconds."""
        return self._presign("get_object", object_id, expires_in=expires_in)
