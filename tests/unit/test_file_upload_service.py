"""FileUploadService unit tests with in-memory stores."""

import io
import random
import string
from unittest.mock import AsyncMock

import pytest

from files_api.application.use_cases.files import FileUploadService
from files_api.application.use_cases.files.file_operations import (
    generate_object_key,
    safe_extension,
)
from files_api.domain.categories import FilePolicy
from files_api.domain.exceptions import (
    CategoryMimeMismatchException,
    FileTooLargeException,
    InvalidCategoryException,
    MetadataWriteFailedException,
    MissingCategoryException,
    MissingFileException,
    StorageWriteFailedException,
    UnsupportedMimeTypeException,
)
from files_api.infrastructure.exceptions import StorageDeleteError

@pytest.fixture
def upload_service(object_store, file_repo, classifier, policy) -> FileUploadService:
    return FileUploadService(
        object_store=object_store,
        file_repo=file_repo,
        classifier=classifier,
        policy=policy,
    )


async def test_upload_stores_object_then_record(upload_service, object_store, file_repo, calls, png_bytes):
    """Happy path: put then create, both under the same (bucket, key)."""
    record = await upload_service.upload(
        stream=io.BytesIO(png_bytes),
        size=len(png_bytes),
        content_type="image/png",
        filename="holiday.PNG",
        category="portfolio-image",
    )
    assert [c[0] for c in calls] == ["object.put", "record.create"]
    assert calls[0][1:] == calls[1][1:] == (record.bucket, record.key)
    assert record.bucket == "images"
    assert record.key.endswith(".PNG")
    assert record.file_name == "holiday.PNG"
    assert record.file_size == 10
    assert record.file_type == "portfolio-image"
    assert object_store.objects[(record.bucket, record.key)][0] == png_bytes
    assert file_repo.records[record.id] == record


async def test_record_size_is_bytes_stored_not_claimed(upload_service, png_bytes):
    record = await upload_service.upload(
        stream=io.BytesIO(png_bytes),
        size=3,
        content_type="image/png",
        filename="a.png",
        category="miniature-image",
    )
    assert record.file_size == len(png_bytes)
    assert record.bucket == "miniatures"


async def test_too_large_rejected_before_any_store_call(object_store, file_repo, classifier, calls):
    policy = FilePolicy(max_upload_size=5)
    svc = FileUploadService(object_store, file_repo, classifier, policy)
    with pytest.raises(FileTooLargeException) as exc_info:
        await svc.upload(
            stream=io.BytesIO(b"123456"),
            size=6,
            content_type="image/png",
            filename="a.png",
            category="portfolio-image",
        )
    assert exc_info.value.details == {"field": "file", "size": 6, "max_size": 5}
    assert calls == []


async def test_size_equal_to_limit_is_accepted(object_store, file_repo, classifier):
    svc = FileUploadService(object_store, file_repo, classifier, FilePolicy(max_upload_size=4))
    record = await svc.upload(
        stream=io.BytesIO(b"1234"),
        size=4,
        content_type="image/png",
        filename="a.png",
        category="portfolio-image",
    )
    assert record.file_size == 4


@pytest.mark.parametrize(
    ("kwargs", "exc_type"),
    [
        ({"stream": None}, MissingFileException),
        ({"category": None}, MissingCategoryException),
        ({"category": "   "}, MissingCategoryException),
        ({"content_type": "text/html"}, UnsupportedMimeTypeException),
        ({"content_type": None}, UnsupportedMimeTypeException),
        ({"content_type": "image/png" + "x" * 300}, UnsupportedMimeTypeException),
        ({"category": "avatar"}, InvalidCategoryException),
        ({"content_type": "application/pdf"}, CategoryMimeMismatchException),
    ],
)
async def test_validation_failures_make_no_store_calls(upload_service, calls, kwargs, exc_type):
    args = {
        "stream": io.BytesIO(b"x"),
        "size": 1,
        "content_type": "image/png",
        "filename": "a.png",
        "category": "portfolio-image",
    }
    args.update(kwargs)
    with pytest.raises(exc_type):
        await upload_service.upload(**args)
    assert calls == []


async def test_overlong_content_type_is_rejected_before_storage(upload_service, calls):
    with pytest.raises(UnsupportedMimeTypeException) as exc_info:
        await upload_service.upload(
            stream=io.BytesIO(b"x"),
            size=1,
            content_type="image/png; name=" + "a" * 300,
            filename="a.png",
            category="portfolio-image",
        )
    assert len(exc_info.value.details["mime_type"]) == 255
    assert calls == []


async def test_document_category_accepts_pdf(upload_service):
    record = await upload_service.upload(
        stream=io.BytesIO(b"%PDF-1.7"),
        size=8,
        content_type="application/pdf",
        filename="cv.pdf",
        category="document",
    )
    assert record.bucket == "documents"
    assert record.mime_type == "application/pdf"


async def test_put_failure_creates_no_record(upload_service, object_store, calls):
    object_store.fail_put = True
    with pytest.raises(StorageWriteFailedException) as exc_info:
        await upload_service.upload(
            stream=io.BytesIO(b"x"),
            size=1,
            content_type="image/png",
            filename="a.png",
            category="portfolio-image",
        )
    assert [c[0] for c in calls] == ["object.put"]
    assert exc_info.value.details == {}


async def test_create_failure_deletes_object(upload_service, object_store, file_repo, calls):
    file_repo.fail_create = True
    with pytest.raises(MetadataWriteFailedException):
        await upload_service.upload(
            stream=io.BytesIO(b"x"),
            size=1,
            content_type="image/png",
            filename="a.png",
            category="portfolio-image",
        )
    assert [c[0] for c in calls] == ["object.put", "record.create", "object.delete"]
    assert calls[0][1:] == calls[2][1:]
    assert object_store.objects == {}


async def test_failed_compensation_keeps_metadata_error(classifier, policy, caplog):
    store = AsyncMock()
    store.put = AsyncMock(return_value=1)
    store.delete = AsyncMock(side_effect=StorageDeleteError("images", "k", "down"))
    repo = AsyncMock()
    repo.create_record = AsyncMock(side_effect=RuntimeError("db gone"))
    svc = FileUploadService(store, repo, classifier, policy)

    with caplog.at_level("ERROR"):
        with pytest.raises(MetadataWriteFailedException):
            await svc.upload(
                stream=io.BytesIO(b"x"),
                size=1,
                content_type="image/png",
                filename="a.png",
                category="portfolio-image",
            )
    bucket, key = store.put.await_args.args[:2]
    store.delete.assert_awaited_once_with(bucket, key)
    assert any(key in r.getMessage() and r.levelname == "ERROR" for r in caplog.records)


async def test_keys_are_unique(upload_service):
    keys = set()
    for _ in range(50):
        record = await upload_service.upload(
            stream=io.BytesIO(b"x"),
            size=1,
            content_type="image/png",
            filename="same.png",
            category="portfolio-image",
        )
        keys.add(record.key)
    assert len(keys) == 50


class TestObjectKey:
    """Keys are server-generated: UUID plus a short alphanumeric extension only."""

    @pytest.mark.parametrize(
        ("filename", "ext"),
        [
            ("photo.jpg", ".jpg"),
            ("archive.tar.gz", ".gz"),
            ("noext", ""),
            ("", ""),
            (None, ""),
            ("../../etc/passwd", ""),
            ("..\\..\\boot.ini", ".ini"),
            ("x/../../y.png", ".png"),
            ("evil.p/ng", ""),
            ("bad.ext;rm", ""),
            ("name.", ""),
            ("long." + "a" * 17, ""),
            ("ok." + "a" * 16, "." + "a" * 16),
            ("café.éxt", ""),
            ("line\r\nbreak.txt", ".txt"),
            ("trailing.txt\n", ""),
        ],
    )
    def test_safe_extension(self, filename, ext) -> None:
        assert safe_extension(filename) == ext

    def test_adversarial_names_never_reach_key(self, object_key_pattern) -> None:
        rng = random.Random(1234)
        alphabet = string.printable + "é \x00/\\.."
        for _ in range(1000):
            name = "".join(rng.choice(alphabet) for _ in range(rng.randint(0, 40)))
            key = generate_object_key(name)
            assert object_key_pattern.fullmatch(key), (name, key)
            assert "/" not in key
            assert "\\" not in key
            assert ".." not in key
