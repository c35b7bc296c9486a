"""Service container.

Builds every collaborator from Settings once per application and owns their
startup and shutdown. Lives on ``app.state.container``.
"""

import logging
from datetime import timedelta
from typing import Optional

import httpx

from .cache import ResponseCache
from .config import Settings
from .database import DatabaseManager
from .features.auth.token_verifier import TokenVerifier
from .features.files.services import FileService
from .features.inference.adapters import InferenceClient
from .features.inference.services import InferenceService
from .features.uploads.adapters import S3ObjectStore
from .features.uploads.protocols import ObjectStore, UploadedFileRepository
from .features.uploads.repositories import AsyncPGUploadedFileRepository
from .features.uploads.services import (
    ChunkReceiver,
    CleanupPolicy,
    QuotaGuard,
    Reassembler,
    RecordWriter,
    RemoteUploader,
    SessionGuard,
    StaleSessionSweeper,
    StagingArea,
    UploadPipeline,
)

logger = logging.getLogger(__name__)


class ServiceContainer:
    """Holds the application's services."""

    def __init__(
        self,
        settings: Settings,
        database: DatabaseManager,
        cache: ResponseCache,
        repository: UploadedFileRepository,
        object_store: ObjectStore,
        inference_client: InferenceClient,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings
        self.database = database
        self.cache = cache
        self.repository = repository
        self.object_store = object_store
        self.http_client = http_client
        self.inference_client = inference_client

        self.token_verifier = TokenVerifier(
            settings.jwt_secret.get_secret_value(),
            settings.jwt_algorithm,
        )

        self.staging = StagingArea(settings.staging_dir, compress=settings.compress_merged_artifact)
        self.session_guard = SessionGuard()
        self.cleanup_policy = CleanupPolicy(self.staging)
        self.chunk_receiver = ChunkReceiver(
            self.staging,
            self.session_guard,
            settings.accepted_chunk_content_types,
            settings.max_chunk_size_bytes,
        )
        self.reassembler = Reassembler(self.staging, self.cleanup_policy)
        self.remote_uploader = RemoteUploader(
            object_store,
            max_attempts=settings.remote_upload_max_attempts,
            base_delay_seconds=settings.remote_upload_base_delay_seconds,
        )
        self.record_writer = RecordWriter(repository)
        self.quota_guard = QuotaGuard(repository, settings.get_tier_limits())
        self.upload_pipeline = UploadPipeline(
            session_guard=self.session_guard,
            quota_guard=self.quota_guard,
            reassembler=self.reassembler,
            remote_uploader=self.remote_uploader,
            record_writer=self.record_writer,
            cleanup_policy=self.cleanup_policy,
            cache=cache,
            key_prefix=settings.s3_key_prefix,
            compressed=settings.compress_merged_artifact,
            timeout_seconds=settings.complete_timeout_seconds,
        )
        self.stale_session_sweeper = StaleSessionSweeper(
            self.cleanup_policy,
            self.staging,
            self.session_guard,
            max_age=timedelta(hours=settings.stale_session_max_age_hours),
            interval=timedelta(minutes=settings.stale_session_sweep_interval_minutes),
        )

        self.file_service = FileService(
            repository,
            object_store,
            cache=cache,
            signed_url_expiration_seconds=settings.signed_url_expiration_seconds,
        )
        self.inference_service = InferenceService(
            repository,
            inference_client,
            object_store=object_store,
            cache=cache,
            image_url_expiration_seconds=settings.signed_url_expiration_seconds,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "ServiceContainer":
        """Build the production container. Opens no connections."""
        database = DatabaseManager(
            settings.database_url,
            application_name=settings.app_name,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            command_timeout=settings.db_command_timeout,
        )
        http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(settings.s3_request_timeout_seconds, connect=10.0),
        )
        object_store = S3ObjectStore(
            http_client,
            bucket_name=settings.s3_bucket_name,
            endpoint_url=settings.s3_endpoint_url,
            access_key_id=settings.s3_access_key_id,
            secret_access_key=settings.s3_secret_access_key.get_secret_value(),
            region=settings.s3_region,
        )
        inference_client = InferenceClient(
            httpx.AsyncClient(timeout=settings.ai_request_timeout_seconds),
            settings.ai_api_url,
            settings.ai_api_key.get_secret_value(),
        )
        return cls(
            settings=settings,
            database=database,
            cache=ResponseCache(settings),
            repository=AsyncPGUploadedFileRepository(database),
            object_store=object_store,
            inference_client=inference_client,
            http_client=http_client,
        )

    async def startup(self) -> None:
        """Open pools, prepare storage and start background work."""
        self.staging.ensure_root()
        await self.database.create_pool()
        if isinstance(self.repository, AsyncPGUploadedFileRepository):
            await self.repository.ensure_schema()
        await self.cache.connect()
        self.stale_session_sweeper.start()
        logger.info(f"Services started: {self.settings.get_service_specific_config()}")

    async def shutdown(self) -> None:
        """Stop background work and release connections."""
        await self.stale_session_sweeper.stop()
        await self.cache.disconnect()
        await self.database.close_pool()
        if self.http_client is not None:
            await self.http_client.aclose()
        await self.inference_client.aclose()
        logger.info("Services stopped")
