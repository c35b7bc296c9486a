"""Pytest configuration and fixtures for DicomVault tests."""

from datetime import datetime, timezone, timedelta
from pathlib import Path
from typing import Callable, Dict
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from dicom_vault.app import create_app
from dicom_vault.cache import ResponseCache
from dicom_vault.config import Settings
from dicom_vault.container import ServiceContainer
from dicom_vault.core.shared import RequestContext, SubscriptionTier
from dicom_vault.core.value_objects import SessionKey
from dicom_vault.features.uploads.entities import RemoteObjectRef, UploadedFile
from dicom_vault.features.uploads.services import CleanupPolicy, SessionGuard, StagingArea

TEST_JWT_SECRET = "test-secret"


@pytest.fixture
def owner_id() -> UUID:
    """Sample owner ID for testing."""
    return uuid4()


@pytest.fixture
def free_context(owner_id) -> RequestContext:
    return RequestContext(owner_id=owner_id, subscription_tier=SubscriptionTier.FREE, email="free@example.com")


@pytest.fixture
def pro_context(owner_id) -> RequestContext:
    return RequestContext(owner_id=owner_id, subscription_tier=SubscriptionTier.PRO, email="pro@example.com")


@pytest.fixture
def session_key(owner_id) -> SessionKey:
    return SessionKey(owner_id, "scan.dcm")


@pytest.fixture
def staging(tmp_path) -> StagingArea:
    return StagingArea(tmp_path / "staging", compress=True)


@pytest.fixture
def raw_staging(tmp_path) -> StagingArea:
    """Staging area with compression turned off, for byte-exact comparisons."""
    return StagingArea(tmp_path / "staging", compress=False)


@pytest.fixture
def session_guard() -> SessionGuard:
    return SessionGuard()


@pytest.fixture
def cleanup_policy(staging) -> CleanupPolicy:
    return CleanupPolicy(staging)


@pytest.fixture
def stage_chunk() -> Callable[[StagingArea, SessionKey, int, bytes], Path]:
    """Write a chunk straight into staging, bypassing validation."""
    def _stage(area: StagingArea, key: SessionKey, index: int, data: bytes) -> Path:
        path = area.chunk_path(key, index)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path
    return _stage


@pytest.fixture
def remote_ref() -> RemoteObjectRef:
    return RemoteObjectRef(object_id="obj-123", secure_url="https://storage.example.com/bucket/obj-123")


@pytest.fixture
def sample_uploaded_file(owner_id) -> UploadedFile:
    now = datetime.now(timezone.utc)
    return UploadedFile(
        id=uuid4(),
        filename="scan.dcm",
        object_id="dicom-files/scan.dcm.gz",
        secure_url="https://storage.example.com/bucket/dicom-files/scan.dcm.gz",
        owner_id=owner_id,
        metadata={"modality": "CT"},
        ai_results=None,
        created_at=now - timedelta(minutes=5),
        updated_at=now - timedelta(minutes=5),
    )


@pytest.fixture
def mock_repository(sample_uploaded_file):
    """Mock uploaded file repository for testing."""
    repository = AsyncMock()
    repository.create = AsyncMock(return_value=sample_uploaded_file)
    repository.find_by_id = AsyncMock(return_value=sample_uploaded_file)
    repository.list_by_owner = AsyncMock(return_value=[sample_uploaded_file])
    repository.update_ai_results = AsyncMock(return_value=sample_uploaded_file)
    repository.delete = AsyncMock(return_value=True)
    repository.count_by_owner = AsyncMock(return_value=0)
    return repository


@pytest.fixture
def mock_object_store(remote_ref):
    """Mock remote object store for testing."""
    store = AsyncMock()
    store.upload = AsyncMock(return_value=remote_ref)
    store.destroy = AsyncMock(return_value=None)
    store.signed_url = AsyncMock(return_value="https://storage.example.com/signed?token=abc")
    return store


@pytest.fixture
def mock_inference_client():
    client = AsyncMock()
    client.infer = AsyncMock(return_value={"predictions": [{"label": "nodule", "score": 0.91}]})
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def mock_database():
    database = MagicMock()
    database.health_check = AsyncMock(return_value=True)
    database.create_pool = AsyncMock()
    database.close_pool = AsyncMock()
    return database


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        environment="test",
        staging_dir=tmp_path / "staging",
        jwt_secret=TEST_JWT_SECRET,
        redis_url=None,
        remote_upload_base_delay_seconds=0.0,
        max_chunk_size_bytes=1024,
    )


@pytest.fixture
def container(settings, mock_database, mock_repository, mock_object_store, mock_inference_client) -> ServiceContainer:
    return ServiceContainer(
        settings=settings,
        database=mock_database,
        cache=ResponseCache(None),
        repository=mock_repository,
        object_store=mock_object_store,
        inference_client=mock_inference_client,
    )


@pytest.fixture
def client(settings, container) -> TestClient:
    """Test client without lifespan; the container is prebuilt from mocks."""
    app = create_app(settings=settings, container=container)
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def make_token() -> Callable[..., str]:
    def _make(owner: UUID, tier: str = "free", secret: str = TEST_JWT_SECRET, expires_in: int = 3600) -> str:
        claims: Dict[str, object] = {
            "id": str(owner),
            "email": "user@example.com",
            "subscriptionTier": tier,
            "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
        }
        return jwt.encode(claims, secret, algorithm="HS256")
    return _make


@pytest.fixture
def auth_headers(make_token, owner_id) -> Dict[str, str]:
    return {"Authorization": f"Bearer {make_token(owner_id)}"}
