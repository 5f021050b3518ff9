"""
Tests for image and document uploads and the file validation helpers.
"""

import io

import pytest
from httpx import AsyncClient
from PIL import Image

from property_portal.utils.exceptions import FileSizeExceededError, UnsupportedFileTypeError, ValidationError
from property_portal.utils.file_utils import FileValidator, build_blob_name, sanitize_filename
from tests.conftest import error_message

PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\ntrailer\n<<>>\n%%EOF\n"


def jpeg_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (8, 8), "blue").save(buffer, format="JPEG")
    return buffer.getvalue()


class TestFileUtils:

    def test_sanitize_filename(self):
        assert sanitize_filename("my kitchen (1).jpg") == "mykitchen1.jpg"
        assert sanitize_filename("../../etc/passwd") == "....etcpasswd"
        assert sanitize_filename(None) == ""

    def test_build_blob_name(self):
        assert build_blob_name("finished", "sink done.png", timestamp_ms=1700000000000) == (
            "finished-1700000000000-sinkdone.png"
        )

    def test_upload_type_must_be_known(self):
        with pytest.raises(ValidationError):
            FileValidator.validate_upload_type("avatar")
        assert FileValidator.validate_upload_type("verification-document") == "verification-document"

    def test_pdf_only_allowed_for_documents(self):
        assert FileValidator.validate_mime_type("application/pdf", "verification-document") == "application/pdf"
        with pytest.raises(UnsupportedFileTypeError):
            FileValidator.validate_mime_type("application/pdf", "problem")

    def test_size_limits(self):
        image_limit = FileValidator.max_size_for("problem")
        document_limit = FileValidator.max_size_for("verification-document")
        assert image_limit == int(4.5 * 1024 * 1024)
        assert document_limit == 10 * 1024 * 1024

        with pytest.raises(FileSizeExceededError):
            FileValidator.validate_file_size(image_limit + 1, image_limit)
        with pytest.raises(ValidationError):
            FileValidator.validate_file_size(0, image_limit)


class TestUploadEndpoint:

    @pytest.mark.asyncio
    async def test_upload_image(self, async_client: AsyncClient, blob_storage):
        response = await async_client.post(
            "/upload-image",
            data={"type": "problem"},
            files={"file": ("broken window.jpg", jpeg_bytes(), "image/jpeg")},
        )

        assert response.status_code == 200
        url = response.json()["url"]
        [pathname] = blob_storage.blobs
        assert url == f"https://blob.example/{pathname}"
        assert pathname.startswith("problem-") and pathname.endswith("-brokenwindow.jpg")
        assert blob_storage.blobs[pathname]["content_type"] == "image/jpeg"

    @pytest.mark.asyncio
    async def test_verification_document_may_be_pdf(self, async_client: AsyncClient, blob_storage):
        response = await async_client.post(
            "/upload-image",
            data={"type": "verification-document"},
            files={"file": ("license.pdf", PDF_BYTES, "application/pdf")},
        )

        assert response.status_code == 200
        assert response.json()["url"].endswith("-license.pdf")

    @pytest.mark.asyncio
    async def test_pdf_rejected_for_problem_photo(self, async_client: AsyncClient, blob_storage):
        response = await async_client.post(
            "/upload-image",
            data={"type": "problem"},
            files={"file": ("scan.pdf", PDF_BYTES, "application/pdf")},
        )

        assert response.status_code == 400
        assert blob_storage.blobs == {}

    @pytest.mark.asyncio
    async def test_unknown_type(self, async_client: AsyncClient):
        response = await async_client.post(
            "/upload-image",
            data={"type": "avatar"},
            files={"file": ("me.jpg", jpeg_bytes(), "image/jpeg")},
        )

        assert response.status_code == 400
        assert error_message(response) == "Invalid image type"

    @pytest.mark.asyncio
    async def test_missing_file(self, async_client: AsyncClient):
        response = await async_client.post("/upload-image", data={"type": "problem"})

        assert response.status_code == 400
        assert error_message(response) == "No file provided"

    @pytest.mark.asyncio
    async def test_corrupt_image(self, async_client: AsyncClient, blob_storage):
        response = await async_client.post(
            "/upload-image",
            data={"type": "finished"},
            files={"file": ("fake.png", b"definitely not a png", "image/png")},
        )

        assert response.status_code == 400
        assert blob_storage.blobs == {}

    @pytest.mark.asyncio
    async def test_storage_failure(self, async_client: AsyncClient, blob_storage):
        blob_storage.fail = True

        response = await async_client.post(
            "/upload-image",
            data={"type": "problem"},
            files={"file": ("leak.jpg", jpeg_bytes(), "image/jpeg")},
        )

        assert response.status_code == 500
        assert error_message(response) == "blob service unavailable"
