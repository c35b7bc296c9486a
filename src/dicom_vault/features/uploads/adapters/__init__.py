"""Object store adapters."""

from .s3_object_store import S3ObjectStore, is_retryable_status

__all__ = ["S3ObjectStore", "is_retryable_status"]
