"""Tests for the upload orchestrator."""

from unittest.mock import MagicMock

import pytest
from google.auth.exceptions import RefreshError

from activitycalendar.services.compressor import NoopCompressor
from activitycalendar.services.storage import DriveStorage, StorageAuthError
from activitycalendar.services.upload_service import (
    UploadItem,
    UploadService,
    classify_attachment_id,
    jpeg_filename,
)
from conftest import FailingLocalStorage, FakeRemoteStorage, make_image


def _item(name: str = "notes.txt", data: bytes = b"hello", content_type: str | None = "text/plain"):
    return UploadItem(filename=name, data=data, content_type=content_type)


class TestClassifyAttachmentId:
    """Tests for guessing the backend from an id."""

    def test_local_id(self):
        assert classify_attachment_id("1718000000000_photo.jpg") == "local"

    def test_drive_id(self):
        assert classify_attachment_id("1AbCdEfGhIjK") == "drive"

    def test_url_is_drive(self):
        assert classify_attachment_id("https://drive.google.com/uc?id=a_b") == "drive"


class TestUpload:
    """Tests for UploadService.upload."""

    @pytest.mark.asyncio
    async def test_drive_configured(self, make_upload_service, remote_storage):
        """Test files go to Drive when it is available."""
        service = make_upload_service(remote=remote_storage)

        result = await service.upload([_item("doc.pdf", b"%PDF-1.4", "application/pdf")])

        assert result.success
        assert result.errors == []
        attachment = result.files[0]
        assert attachment.id == "drive1"
        assert attachment.storage == "drive"
        assert attachment.url.startswith("https://drive.google.com/")
        assert attachment.name == "doc.pdf"
        assert attachment.mime_type == "application/pdf"
        assert attachment.size == len(b"%PDF-1.4")

    @pytest.mark.asyncio
    async def test_drive_not_configured_uses_local(self, make_upload_service, settings):
        """Test every file goes to local storage without reporting errors."""
        service = make_upload_service()

        result = await service.upload([_item("a.txt"), _item("b.txt")])

        assert [f.storage for f in result.files] == ["local", "local"]
        assert result.errors == []
        for attachment in result.files:
            assert attachment.url == f"/uploads/{attachment.id}"
            assert (settings.upload_dir / attachment.id).exists()

    @pytest.mark.asyncio
    async def test_drive_auth_failure_uses_local(self, make_upload_service):
        """Test bad credentials put the whole batch in local mode."""
        service = make_upload_service(remote=StorageAuthError("Google Drive authentication failed"))

        result = await service.upload([_item()])

        assert result.files[0].storage == "local"
        assert result.errors == []

    @pytest.mark.asyncio
    async def test_drive_failure_falls_back_per_file(self, make_upload_service):
        """Test a failed Drive upload is retried locally and reported."""
        remote = FakeRemoteStorage(fail_store=True)
        service = make_upload_service(remote=remote)

        result = await service.upload([_item("a.txt")])

        assert result.success
        assert result.files[0].storage == "local"
        assert len(result.errors) == 1
        assert result.errors[0].startswith("a.txt: saved locally instead (Google Drive:")
        assert "quota exceeded" in result.errors[0]

    @pytest.mark.asyncio
    async def test_both_backends_fail(self, make_upload_service):
        """Test a file that fails everywhere is dropped with both reasons."""
        service = make_upload_service(
            remote=FakeRemoteStorage(fail_store=True),
            local=FailingLocalStorage(),
        )

        result = await service.upload([_item("a.txt")])

        assert not result.success
        assert result.files == []
        assert "quota exceeded" in result.errors[0]
        assert "disk full" in result.errors[0]
        assert result.error_detail == result.errors[0]

    @pytest.mark.asyncio
    async def test_every_failed_file_is_named(self, make_upload_service):
        service = make_upload_service(
            remote=FakeRemoteStorage(fail_store=True),
            local=FailingLocalStorage(),
        )

        result = await service.upload([_item("a.txt"), _item("b.pdf"), _item("c.png")])

        assert not result.success
        assert len(result.errors) == 3
        for name in ("a.txt", "b.pdf", "c.png"):
            assert f"{name}: " in result.error_detail

    @pytest.mark.asyncio
    async def test_rejected_credentials_switch_batch_to_local(self, make_upload_service):
        """Test a key rejected at token refresh stops Drive for the rest of the batch."""
        service_mock = MagicMock()
        create = service_mock.files.return_value.create
        create.return_value.execute.side_effect = RefreshError(
            "invalid_grant: Invalid JWT Signature."
        )
        service = make_upload_service(remote=DriveStorage(service_mock, "folder-1"))

        result = await service.upload([_item("a.txt"), _item("b.txt")])

        assert result.errors == []
        assert [f.storage for f in result.files] == ["local", "local"]
        assert create.call_count == 1

    @pytest.mark.asyncio
    async def test_local_only_failure(self, make_upload_service):
        service = make_upload_service(local=FailingLocalStorage())

        result = await service.upload([_item("a.txt")])

        assert not result.success
        assert result.errors == ["a.txt: disk full"]

    @pytest.mark.asyncio
    async def test_oversized_file_is_rejected(self, make_upload_service, remote_storage):
        """Test files over the raw ceiling never reach a backend."""
        service = make_upload_service(remote=remote_storage)
        big = UploadItem(filename="huge.bin", data=b"x", size=26 * 1024 * 1024)

        result = await service.upload([big, _item("ok.txt")])

        assert [f.name for f in result.files] == ["ok.txt"]
        assert result.errors == ["huge.bin: file is too large (max 25MB)"]
        assert [name for name, _, _ in remote_storage.stored] == ["ok.txt"]

    @pytest.mark.asyncio
    async def test_order_is_preserved(self, make_upload_service, remote_storage):
        service = make_upload_service(remote=remote_storage)

        result = await service.upload([_item(f"{n}.txt") for n in ("c", "a", "b")])

        assert [f.name for f in result.files] == ["c.txt", "a.txt", "b.txt"]
        assert [f.id for f in result.files] == ["drive1", "drive2", "drive3"]

    @pytest.mark.asyncio
    async def test_image_is_compressed(self, make_upload_service, remote_storage):
        """Test large images are stored as smaller JPEGs."""
        service = make_upload_service(remote=remote_storage)
        data = make_image(2500, 1500, fmt="BMP", noise=True)

        result = await service.upload([_item("scan.bmp", data, "image/bmp")])

        attachment = result.files[0]
        assert attachment.mime_type == "image/jpeg"
        assert attachment.size < len(data)
        _, stored_data, stored_type = remote_storage.stored[0]
        assert stored_type == "image/jpeg"
        assert len(stored_data) == attachment.size

    @pytest.mark.asyncio
    async def test_reencoded_image_is_stored_as_jpg(self, make_upload_service, remote_storage):
        """Test the stored name follows the JPEG bytes while the display name stays."""
        service = make_upload_service(remote=remote_storage)
        data = make_image(800, 600, fmt="BMP", noise=True)

        result = await service.upload([_item("scan.bmp", data, "image/bmp")])

        assert result.files[0].name == "scan.bmp"
        assert remote_storage.stored[0][0] == "scan.jpg"

    @pytest.mark.asyncio
    async def test_reencoded_image_local_id(self, make_upload_service):
        data = make_image(800, 600, fmt="BMP", noise=True)

        result = await make_upload_service().upload([_item("scan.bmp", data, "image/bmp")])

        attachment = result.files[0]
        assert attachment.mime_type == "image/jpeg"
        assert attachment.id.endswith("_scan.jpg")

    def test_jpeg_filename(self):
        assert jpeg_filename("scan.bmp") == "scan.jpg"
        assert jpeg_filename("photo.large.PNG") == "photo.large.jpg"
        assert jpeg_filename("noext") == "noext.jpg"

    @pytest.mark.asyncio
    async def test_compression_target_applies(self, make_upload_service, remote_storage, settings):
        """Test images still above the target are squeezed further."""
        service = make_upload_service(remote=remote_storage)
        service.settings = settings.model_copy(update={"max_compressed_size_bytes": 50 * 1024})
        data = make_image(1500, 1500, fmt="BMP", noise=True)

        result = await service.upload([_item("scan.bmp", data, "image/bmp")])

        first_pass = service.compressor.compress(data, "image/bmp")
        assert result.files[0].size < len(first_pass)

    @pytest.mark.asyncio
    async def test_compression_disabled(self, settings, local_storage, remote_storage):
        service = UploadService(
            local_storage, lambda: remote_storage, NoopCompressor(), settings=settings
        )
        data = make_image(800, 800, fmt="BMP")

        result = await service.upload([_item("scan.bmp", data, "image/bmp")])

        assert result.files[0].mime_type == "image/bmp"
        assert result.files[0].size == len(data)

    @pytest.mark.asyncio
    async def test_missing_content_type(self, make_upload_service):
        result = await make_upload_service().upload([_item("blob", b"\x00\x01", None)])
        assert result.files[0].mime_type == "application/octet-stream"

    @pytest.mark.asyncio
    async def test_empty_batch(self, make_upload_service):
        result = await make_upload_service().upload([])

        assert not result.success
        assert result.error_detail == "All uploads failed"


class TestDelete:
    """Tests for UploadService.delete."""

    @pytest.mark.asyncio
    async def test_local_id_deletes_local_file(self, make_upload_service, settings):
        service = make_upload_service()
        stored = (await service.upload([_item("a.txt")])).files[0]

        await service.delete(stored.id)

        assert not (settings.upload_dir / stored.id).exists()

    @pytest.mark.asyncio
    async def test_drive_id_deletes_remote(self, make_upload_service, remote_storage):
        service = make_upload_service(remote=remote_storage)

        await service.delete("1AbCdEf")

        assert remote_storage.deleted == ["1AbCdEf"]

    @pytest.mark.asyncio
    async def test_storage_tag_overrides_id_shape(self, make_upload_service, remote_storage):
        """Test a Drive id containing an underscore still goes to Drive when tagged."""
        service = make_upload_service(remote=remote_storage)

        await service.delete("1Ab_CdEf", storage="drive")

        assert remote_storage.deleted == ["1Ab_CdEf"]

    @pytest.mark.asyncio
    async def test_missing_local_file_is_ignored(self, make_upload_service):
        await make_upload_service().delete("123_missing.txt")

    @pytest.mark.asyncio
    async def test_remote_failure_is_ignored(self, make_upload_service):
        remote = FakeRemoteStorage(fail_delete=True)
        await make_upload_service(remote=remote).delete("1AbCdEf")

    @pytest.mark.asyncio
    async def test_unconfigured_remote_is_ignored(self, make_upload_service):
        await make_upload_service().delete("1AbCdEf")
