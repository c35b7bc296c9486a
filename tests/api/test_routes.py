"""End-to-end route tests against the app with mocked backends."""

import gzip
from dataclasses import replace
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from fastapi.testclient import TestClient

from dicom_vault.app import create_app
from dicom_vault.core.exceptions import ObjectStoreError, PersistenceError


def send_chunk(client, headers, index, total, data, filename="scan.dcm", content_type="application/octet-stream"):
    return client.post(
        "/api/upload/chunk",
        headers=headers,
        data={"chunkIndex": str(index), "totalChunks": str(total), "filename": filename},
        files={"chunk": ("blob", data, content_type)},
    )


class TestHealth:
    """Test the public health endpoint."""

    def test_healthy(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["services"] == {"database": "healthy", "cache": "disabled"}

    def test_degraded_database(self, client, mock_database):
        mock_database.health_check.return_value = False

        body = client.get("/api/health").json()

        assert body["status"] == "degraded"
        assert body["services"]["database"] == "unhealthy"


class TestSecurityHeaders:
    """Test the security headers sent with every API response."""

    def test_headers_on_public_route(self, client):
        response = client.get("/api/health")

        assert response.headers["x-content-type-options"] == "nosniff"
        assert response.headers["x-frame-options"] == "DENY"
        assert response.headers["referrer-policy"] == "strict-origin-when-cross-origin"
        assert "frame-ancestors 'none'" in response.headers["content-security-policy"]
        assert response.headers["server"] == "DicomVault"
        assert "strict-transport-security" not in response.headers

    def test_headers_on_error_response(self, client):
        response = client.get("/api/files")

        assert response.status_code == 401
        assert response.headers["x-content-type-options"] == "nosniff"
        assert response.headers["x-frame-options"] == "DENY"

    def test_hsts_over_forwarded_https(self, client):
        response = client.get("/api/health", headers={"X-Forwarded-Proto": "https"})

        assert response.headers["strict-transport-security"] == "max-age=31536000; includeSubDomains"

    def test_hsts_in_production(self, settings, container):
        production = settings.model_copy(update={"environment": "production"})
        client = TestClient(create_app(settings=production, container=container), raise_server_exceptions=False)

        response = client.get("/api/health")

        assert response.headers["strict-transport-security"] == "max-age=31536000; includeSubDomains"
        assert response.headers["x-frame-options"] == "DENY"


class TestAuthentication:
    """Test that every non-health route needs a bearer token."""

    @pytest.mark.parametrize(
        "method, path",
        [
            ("get", "/api/files"),
            ("get", f"/api/files/{uuid4()}"),
            ("delete", f"/api/files/{uuid4()}"),
            ("post", f"/api/inference/{uuid4()}"),
            ("get", f"/api/inference/status/{uuid4()}"),
        ],
    )
    def test_missing_token(self, client, method, path):
        response = getattr(client, method)(path)

        assert response.status_code == 401
        assert response.json()["errorKind"] == "AuthenticationError"
        assert response.headers["www-authenticate"] == "Bearer"

    def test_chunk_without_token(self, client):
        response = send_chunk(client, {}, 0, 1, b"data")

        assert response.status_code == 401

    def test_expired_token(self, client, make_token, owner_id):
        headers = {"Authorization": f"Bearer {make_token(owner_id, expires_in=-60)}"}

        response = client.get("/api/files", headers=headers)

        assert response.status_code == 401
        assert response.json()["message"] == "Token has expired"


class TestChunkedUpload:
    """Test chunk intake and completion over HTTP."""

    def test_chunks_then_complete(self, client, auth_headers, container, mock_object_store, remote_ref, owner_id):
        uploaded = {}

        async def capture(local_path, destination_key, content_type):
            uploaded["bytes"] = local_path.read_bytes()
            return remote_ref

        mock_object_store.upload.side_effect = capture

        for index, data in [(2, b"-end"), (0, b"DICM"), (1, b"-body-")]:
            response = send_chunk(client, auth_headers, index, 3, data)
            assert response.status_code == 202
            assert response.json() == {"chunkIndex": index, "totalChunks": 3}

        response = client.post(
            "/api/upload/complete",
            headers=auth_headers,
            json={"filename": "scan.dcm", "totalChunks": 3, "metadata": {"modality": "CT"}},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "File uploaded successfully"
        assert body["file"]["filename"] == "scan.dcm"
        assert gzip.decompress(uploaded["bytes"]) == b"DICM-body--end"
        assert list(container.staging.iter_session_dirs()) == []

    def test_rejected_content_type(self, client, auth_headers):
        response = send_chunk(client, auth_headers, 0, 1, b"data", content_type="text/plain")

        assert response.status_code == 415
        assert response.json()["errorKind"] == "InvalidFileType"

    def test_oversized_chunk(self, client, auth_headers):
        response = send_chunk(client, auth_headers, 0, 1, b"x" * 2048)

        assert response.status_code == 413
        assert response.json()["errorKind"] == "ChunkTooLarge"

    def test_out_of_range_index(self, client, auth_headers):
        response = send_chunk(client, auth_headers, 3, 3, b"data")

        assert response.status_code == 400
        assert response.json()["errorKind"] == "InvalidChunkIndex"

    def test_missing_form_field(self, client, auth_headers):
        response = client.post(
            "/api/upload/chunk",
            headers=auth_headers,
            data={"chunkIndex": "0", "filename": "scan.dcm"},
            files={"chunk": ("blob", b"data", "application/octet-stream")},
        )

        assert response.status_code == 422
        assert response.json()["errorKind"] == "ValidationError"

    def test_complete_with_missing_chunks(self, client, auth_headers):
        send_chunk(client, auth_headers, 0, 3, b"a")

        response = client.post(
            "/api/upload/complete", headers=auth_headers, json={"filename": "scan.dcm", "totalChunks": 3}
        )

        assert response.status_code == 400
        assert response.json()["errorKind"] == "IncompleteUpload"

    def test_complete_rejects_zero_chunks(self, client, auth_headers):
        response = client.post(
            "/api/upload/complete", headers=auth_headers, json={"filename": "scan.dcm", "totalChunks": 0}
        )

        assert response.status_code == 422

    def test_free_tier_limit(self, client, auth_headers, mock_repository):
        mock_repository.count_by_owner.return_value = 5
        send_chunk(client, auth_headers, 0, 1, b"a")

        response = client.post(
            "/api/upload/complete", headers=auth_headers, json={"filename": "scan.dcm", "totalChunks": 1}
        )

        assert response.status_code == 403
        assert response.json()["errorKind"] == "SubscriptionLimitExceeded"

    def test_remote_failure_is_bad_gateway(self, client, auth_headers, mock_object_store, container):
        mock_object_store.upload.side_effect = ObjectStoreError("HTTP 403: AccessDenied", status_code=403)
        send_chunk(client, auth_headers, 0, 1, b"a")

        response = client.post(
            "/api/upload/complete", headers=auth_headers, json={"filename": "scan.dcm", "totalChunks": 1}
        )

        assert response.status_code == 502
        body = response.json()
        assert body["message"] == "HTTP 403: AccessDenied"
        assert body["errorKind"] == "RemoteUploadFailed"
        assert body["details"]["retryable"] is False
        assert mock_object_store.upload.await_count == 1
        assert list(container.staging.iter_session_dirs()) == []

    def test_persistence_failure(self, client, auth_headers, mock_repository):
        mock_repository.create.side_effect = PersistenceError("database unavailable")
        send_chunk(client, auth_headers, 0, 1, b"a")

        response = client.post(
            "/api/upload/complete", headers=auth_headers, json={"filename": "scan.dcm", "totalChunks": 1}
        )

        assert response.status_code == 500
        assert response.json()["errorKind"] == "PersistenceError"


class TestFileRoutes:
    """Test file listing, viewing and deletion."""

    def test_list_files(self, client, auth_headers, sample_uploaded_file):
        response = client.get("/api/files", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()[0]["id"] == str(sample_uploaded_file.id)

    def test_get_file(self, client, auth_headers, sample_uploaded_file):
        response = client.get(f"/api/files/{sample_uploaded_file.id}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["signedUrl"].startswith("https://storage.example.com/signed")

    def test_unknown_file(self, client, auth_headers, mock_repository):
        mock_repository.find_by_id.return_value = None

        response = client.get(f"/api/files/{uuid4()}", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["errorKind"] == "FileNotFound"

    def test_invalid_file_id(self, client, auth_headers):
        response = client.get("/api/files/not-a-uuid", headers=auth_headers)

        assert response.status_code == 422

    def test_metadata_and_ai_results(self, client, auth_headers, sample_uploaded_file):
        metadata = client.get(f"/api/files/{sample_uploaded_file.id}/metadata", headers=auth_headers)
        ai_results = client.get(f"/api/files/{sample_uploaded_file.id}/ai-results", headers=auth_headers)

        assert metadata.json() == {"modality": "CT"}
        assert ai_results.status_code == 200
        assert ai_results.json() is None

    def test_delete_file(self, client, auth_headers, sample_uploaded_file, mock_object_store):
        response = client.delete(f"/api/files/{sample_uploaded_file.id}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"message": "File deleted successfully"}
        mock_object_store.destroy.assert_awaited_once_with(sample_uploaded_file.object_id)


class TestInferenceRoutes:
    """Test inference runs and status."""

    def test_run_inference(self, client, auth_headers, sample_uploaded_file):
        response = client.post(f"/api/inference/{sample_uploaded_file.id}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["predictions"][0]["label"] == "nodule"

    def test_status_completed(self, client, auth_headers, sample_uploaded_file, mock_repository):
        mock_repository.find_by_id.return_value = replace(sample_uploaded_file, ai_results={"label": "normal"})

        response = client.get(f"/api/inference/status/{sample_uploaded_file.id}", headers=auth_headers)

        assert response.json() == {"status": "completed", "results": {"label": "normal"}}


class TestUnhandledErrors:
    """Test that unexpected errors never leak internals."""

    def test_generic_message(self, client, auth_headers, mock_repository):
        mock_repository.list_by_owner = AsyncMock(side_effect=RuntimeError("secret connection string"))

        response = client.get("/api/files", headers=auth_headers)

        assert response.status_code == 500
        assert response.json() == {"message": "An unexpected error occurred", "errorKind": "InternalError"}

    def test_unknown_route(self, client):
        response = client.get("/api/nope")

        assert response.status_code == 404
        assert response.json()["errorKind"] == "HTTPError"
