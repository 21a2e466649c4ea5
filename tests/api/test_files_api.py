"""File endpoints over HTTP, with in-memory stores behind the services."""

from unittest.mock import MagicMock

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from files_api.application.dtos.file import StoredObject
from files_api.domain.categories import FilePolicy
from files_api.infrastructure.persistence.models.storage_file import StorageFile
from files_api.shared.utils.background import drain_background_tasks
from files_api.shared.utils.datetime import utc_now

FILES = "/api/v1/files"


async def _upload(client: AsyncClient, headers, data: bytes, *, name="photo.png", mime="image/png", file_type="portfolio-image"):
    return await client.post(
        FILES,
        headers=headers,
        files={"file": (name, data, mime)},
        data={"fileType": file_type},
    )


async def test_upload_download_delete_cycle(
    client, auth_headers, png_bytes, audit_service, object_store, object_key_pattern
):
    created = await _upload(client, auth_headers, png_bytes)
    assert created.status_code == 200
    body = created.json()
    assert set(body) == {"id", "fileName", "fileSize", "mimeType", "url", "fileType"}
    assert body["fileName"] == "photo.png"
    assert body["fileSize"] == 10
    assert body["mimeType"] == "image/png"
    assert body["fileType"] == "portfolio-image"
    prefix = f"{FILES}/portfolio-image/"
    assert body["url"].startswith(prefix)
    key = body["url"][len(prefix):]
    assert object_key_pattern.fullmatch(key)
    assert key.endswith(".png")
    assert list(object_store.objects) == [("images", key)]

    downloaded = await client.get(body["url"], params={"source": "public-web"})
    assert downloaded.status_code == 200
    assert downloaded.content == png_bytes
    assert downloaded.headers["content-type"] == "image/png"
    assert downloaded.headers["content-length"] == "10"
    assert downloaded.headers["content-disposition"] == "attachment; filename*=UTF-8''photo.png"

    await drain_background_tasks()
    [event] = audit_service.events
    assert event.record_id == body["id"]
    assert event.source == "public-web"

    deleted = await client.delete(f"{FILES}/{body['id']}", headers=auth_headers)
    assert deleted.status_code == 200
    assert deleted.json() == {"message": "file deleted successfully"}

    gone = await client.get(body["url"])
    assert gone.status_code == 404
    assert gone.json()["error"] == "RECORD_NOT_FOUND"


async def test_document_upload_goes_to_documents_bucket(client, auth_headers, object_store):
    response = await _upload(
        client, auth_headers, b"%PDF-1.7", name="cv.pdf", mime="application/pdf", file_type="document"
    )
    assert response.status_code == 200
    assert [bucket for bucket, _ in object_store.objects] == ["documents"]


async def test_unknown_source_is_ignored(client, auth_headers, png_bytes, audit_service):
    url = (await _upload(client, auth_headers, png_bytes)).json()["url"]
    response = await client.get(url, params={"source": "mobile"})
    assert response.status_code == 200
    await drain_background_tasks()
    assert audit_service.events[-1].source is None


async def test_download_needs_no_token(client, auth_headers, png_bytes):
    url = (await _upload(client, auth_headers, png_bytes)).json()["url"]
    response = await client.get(url)
    assert response.status_code == 200


class _TrackedChunks:
    """Chunk stream that records aclose()."""

    def __init__(self, data: bytes) -> None:
        self._parts = [data]
        self.closed = False

    def __aiter__(self):
        return self

    async def __anext__(self) -> bytes:
        if self.closed or not self._parts:
            raise StopAsyncIteration
        return self._parts.pop()

    async def aclose(self) -> None:
        self.closed = True


async def test_download_closes_object_stream(client, file_repo, object_store, monkeypatch):
    file_repo.add(bucket="images", key="a.png")
    chunks = _TrackedChunks(b"abc")

    async def get(bucket, key):
        return StoredObject(size=3, content_type="image/png", chunks=chunks)

    monkeypatch.setattr(object_store, "get", get)
    response = await client.get(f"{FILES}/portfolio-image/a.png")
    assert response.content == b"abc"
    assert chunks.closed


async def test_download_streams_after_read_transaction_ends(app, client, object_store, monkeypatch):
    from files_api.api.v1.dependencies import get_file_record_repo
    from files_api.infrastructure.persistence.database import get_db

    state = {"in_transaction": False}
    row = StorageFile(
        id=1,
        s3_bucket="images",
        s3_key="a.png",
        file_name="a.png",
        file_size=3,
        mime_type="image/png",
        file_type="portfolio-image",
        created_at=utc_now(),
    )

    async def execute(statement):
        state["in_transaction"] = True
        result = MagicMock()
        result.scalar_one_or_none.return_value = row
        return result

    async def rollback():
        state["in_transaction"] = False

    session = MagicMock(spec=AsyncSession)
    session.execute.side_effect = execute
    session.rollback.side_effect = rollback
    session.in_transaction.side_effect = lambda: state["in_transaction"]

    async def tracking_db():
        yield session

    app.dependency_overrides.pop(get_file_record_repo)
    app.dependency_overrides[get_db] = tracking_db

    seen = []

    async def chunks():
        seen.append(state["in_transaction"])
        yield b"abc"

    async def get(bucket, key):
        return StoredObject(size=3, content_type="image/png", chunks=chunks())

    monkeypatch.setattr(object_store, "get", get)
    response = await client.get(f"{FILES}/portfolio-image/a.png")
    assert response.status_code == 200
    assert response.content == b"abc"
    assert seen == [False]


class TestUploadErrors:
    async def test_without_token(self, client, png_bytes, calls):
        response = await _upload(client, {}, png_bytes)
        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"
        assert response.json()["error"] == "AUTHENTICATION_ERROR"
        assert calls == []

    async def test_invalid_token(self, client, png_bytes):
        response = await _upload(client, {"Authorization": "Bearer nope"}, png_bytes)
        assert response.status_code == 401

    async def test_wrong_scope(self, client, make_token, png_bytes, calls):
        headers = {"Authorization": f"Bearer {make_token('files:delete')}"}
        response = await _upload(client, headers, png_bytes)
        assert response.status_code == 403
        assert response.json()["details"] == {"scope": "files:write"}
        assert calls == []

    async def test_invalid_file_type(self, client, auth_headers, png_bytes, calls):
        response = await _upload(client, auth_headers, png_bytes, file_type="avatar")
        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_CATEGORY"
        assert calls == []

    async def test_missing_file(self, client, auth_headers, calls):
        response = await client.post(FILES, headers=auth_headers, data={"fileType": "document"})
        assert response.status_code == 400
        assert response.json()["error"] == "MISSING_FILE"
        assert calls == []

    async def test_missing_file_type(self, client, auth_headers, png_bytes):
        response = await client.post(
            FILES, headers=auth_headers, files={"file": ("a.png", png_bytes, "image/png")}
        )
        assert response.status_code == 400
        assert response.json()["error"] == "MISSING_CATEGORY"

    async def test_unsupported_mime(self, client, auth_headers):
        response = await _upload(client, auth_headers, b"<html>", name="x.html", mime="text/html")
        assert response.status_code == 400
        assert response.json()["error"] == "UNSUPPORTED_MIME_TYPE"

    async def test_category_mismatch(self, client, auth_headers, png_bytes):
        response = await _upload(client, auth_headers, png_bytes, file_type="document")
        assert response.status_code == 400
        assert response.json()["error"] == "CATEGORY_MIME_MISMATCH"

    async def test_too_large(self, app, client, auth_headers, png_bytes, calls):
        from files_api.api.v1.dependencies import get_file_policy

        app.dependency_overrides[get_file_policy] = lambda: FilePolicy(max_upload_size=5)
        response = await _upload(client, auth_headers, png_bytes)
        assert response.status_code == 400
        assert response.json()["error"] == "FILE_TOO_LARGE"
        assert calls == []

    async def test_object_write_failure(self, client, auth_headers, png_bytes, object_store, file_repo):
        object_store.fail_put = True
        response = await _upload(client, auth_headers, png_bytes)
        assert response.status_code == 500
        assert response.json() == {
            "error": "STORAGE_WRITE_FAILED",
            "message": "failed to upload file",
            "details": {},
        }
        assert file_repo.records == {}

    async def test_record_failure_removes_object(self, client, auth_headers, png_bytes, object_store, file_repo):
        file_repo.fail_create = True
        response = await _upload(client, auth_headers, png_bytes)
        assert response.status_code == 500
        assert response.json()["error"] == "METADATA_WRITE_FAILED"
        assert object_store.objects == {}


class TestDownloadErrors:
    async def test_unknown_category(self, client):
        response = await client.get(f"{FILES}/avatar/x.png")
        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_CATEGORY"

    async def test_unknown_key(self, client):
        response = await client.get(f"{FILES}/portfolio-image/nope.png")
        assert response.status_code == 404

    async def test_object_missing(self, client, file_repo):
        file_repo.add(bucket="images", key="lost.png")
        response = await client.get(f"{FILES}/portfolio-image/lost.png")
        assert response.status_code == 404
        assert response.json()["error"] == "OBJECT_NOT_FOUND"

    async def test_storage_read_failure(self, client, file_repo, object_store):
        file_repo.add(bucket="images", key="a.png")
        object_store.objects[("images", "a.png")] = (b"x", "image/png")
        object_store.fail_get = True
        response = await client.get(f"{FILES}/portfolio-image/a.png")
        assert response.status_code == 500
        assert response.json()["error"] == "STORAGE_READ_FAILED"

    async def test_nested_key(self, client, file_repo, object_store):
        file_repo.add(bucket="miniatures", key="2024/01/a.png", file_name="a.png", file_type="miniature-image")
        object_store.objects[("miniatures", "2024/01/a.png")] = (b"abc", "image/png")
        response = await client.get(f"{FILES}/miniature-image/2024/01/a.png")
        assert response.status_code == 200
        assert response.content == b"abc"


class TestDeleteErrors:
    async def test_without_token(self, client, file_repo, calls):
        record = file_repo.add()
        calls.clear()
        response = await client.delete(f"{FILES}/{record.id}")
        assert response.status_code == 401
        assert calls == []

    async def test_write_scope_cannot_delete(self, client, make_token, file_repo):
        record = file_repo.add()
        headers = {"Authorization": f"Bearer {make_token('files:write')}"}
        response = await client.delete(f"{FILES}/{record.id}", headers=headers)
        assert response.status_code == 403
        assert record.id in file_repo.records

    @pytest.mark.parametrize("raw_id", ["abc", "-1", "1.0", "9223372036854775808"])
    async def test_invalid_id(self, client, auth_headers, raw_id, calls):
        response = await client.delete(f"{FILES}/{raw_id}", headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_ID"
        assert calls == []

    async def test_unknown_id(self, client, auth_headers):
        response = await client.delete(f"{FILES}/999", headers=auth_headers)
        assert response.status_code == 404

    async def test_object_delete_failure_keeps_record(self, client, auth_headers, file_repo, object_store):
        record = file_repo.add()
        object_store.fail_delete = True
        response = await client.delete(f"{FILES}/{record.id}", headers=auth_headers)
        assert response.status_code == 500
        assert response.json()["error"] == "STORAGE_DELETE_FAILED"
        assert record.id in file_repo.records

    async def test_unknown_stored_category(self, client, auth_headers, file_repo):
        record = file_repo.add(file_type="avatar")
        response = await client.delete(f"{FILES}/{record.id}", headers=auth_headers)
        assert response.status_code == 500
        assert response.json()["error"] == "INVALID_STORED_CATEGORY"
