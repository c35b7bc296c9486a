"""Tests for the file service."""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from dicom_vault.core.exceptions import FileNotFound, ObjectStoreError
from dicom_vault.features.files.services import FileService


@pytest.fixture
def mock_cache():
    cache = AsyncMock()
    cache.get = AsyncMock(return_value=None)
    cache.set = AsyncMock(return_value=True)
    cache.invalidate_owner = AsyncMock(return_value=2)
    return cache


@pytest.fixture
def service(mock_repository, mock_object_store, mock_cache):
    return FileService(mock_repository, mock_object_store, cache=mock_cache, signed_url_expiration_seconds=900)


class TestFileService:
    """Test owner-scoped file operations."""

    @pytest.mark.asyncio
    async def test_list_files_populates_cache(self, service, mock_cache, owner_id, sample_uploaded_file):
        files = await service.list_files(owner_id)

        assert files == [sample_uploaded_file.to_dict()]
        mock_cache.set.assert_awaited_once_with(owner_id, "GET /files", files)

    @pytest.mark.asyncio
    async def test_list_files_served_from_cache(self, service, mock_cache, mock_repository, owner_id):
        mock_cache.get.return_value = [{"id": "cached"}]

        assert await service.list_files(owner_id) == [{"id": "cached"}]
        mock_repository.list_by_owner.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_list_files_without_cache(self, mock_repository, mock_object_store, owner_id):
        service = FileService(mock_repository, mock_object_store)

        assert len(await service.list_files(owner_id)) == 1

    @pytest.mark.asyncio
    async def test_get_file_adds_signed_url(self, service, mock_object_store, owner_id, sample_uploaded_file):
        body = await service.get_file(owner_id, sample_uploaded_file.id)

        assert body["id"] == str(sample_uploaded_file.id)
        assert body["signedUrl"] == "https://storage.example.com/signed?token=abc"
        mock_object_store.signed_url.assert_awaited_once_with(sample_uploaded_file.object_id, 900)

    @pytest.mark.asyncio
    async def test_unknown_file_raises_not_found(self, service, mock_repository, owner_id):
        mock_repository.find_by_id.return_value = None

        with pytest.raises(FileNotFound):
            await service.get_file(owner_id, uuid4())
        with pytest.raises(FileNotFound):
            await service.get_metadata(owner_id, uuid4())
        with pytest.raises(FileNotFound):
            await service.delete_file(owner_id, uuid4())

    @pytest.mark.asyncio
    async def test_metadata_and_ai_results(self, service, owner_id, sample_uploaded_file):
        assert await service.get_metadata(owner_id, sample_uploaded_file.id) == {"modality": "CT"}
        assert await service.get_ai_results(owner_id, sample_uploaded_file.id) is None

    @pytest.mark.asyncio
    async def test_delete_destroys_remote_object_then_record(
        self, service, mock_object_store, mock_repository, mock_cache, owner_id, sample_uploaded_file,
    ):
        await service.delete_file(owner_id, sample_uploaded_file.id)

        mock_object_store.destroy.assert_awaited_once_with(sample_uploaded_file.object_id)
        mock_repository.delete.assert_awaited_once_with(sample_uploaded_file.id, owner_id)
        mock_cache.invalidate_owner.assert_awaited_once_with(owner_id)

    @pytest.mark.asyncio
    async def test_failed_remote_delete_keeps_record(
        self, service, mock_object_store, mock_repository, owner_id, sample_uploaded_file,
    ):
        mock_object_store.destroy.side_effect = ObjectStoreError("HTTP 500", retryable=True, status_code=500)

        with pytest.raises(ObjectStoreError):
            await service.delete_file(owner_id, sample_uploaded_file.id)

        mock_repository.delete.assert_not_awaited()
