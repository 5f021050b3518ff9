"""
Upload validation and naming helpers.
Checks content type, size and image content before anything reaches blob storage.
"""

import io
import re
import time
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError
from fastapi import UploadFile

from property_portal.config import get_settings
from property_portal.utils.exceptions import (
    ValidationError,
    UnsupportedFileTypeError,
    FileSizeExceededError,
)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9.-]")

IMAGE_UPLOAD_TYPES = ("problem", "finished")
DOCUMENT_UPLOAD_TYPE = "verification-document"
UPLOAD_TYPES = IMAGE_UPLOAD_TYPES + (DOCUMENT_UPLOAD_TYPE,)

DOCUMENT_MIME_TYPES = ("application/pdf",)


def sanitize_filename(filename: str) -> str:
    """Strip everything except letters, digits, dots and hyphens."""
    return _UNSAFE_FILENAME_CHARS.sub("", filename or "")


def build_blob_name(upload_type: str, filename: str, timestamp_ms: Optional[int] = None) -> str:
    """
    Name a blob ``{type}-{timestamp}-{sanitized name}``.

    Args:
        upload_type: problem, finished or verification-document
        filename: Client-supplied file name
        timestamp_ms: Milliseconds since the epoch, defaults to now

    Returns:
        Blob path name
    """
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{upload_type}-{timestamp_ms}-{sanitize_filename(filename)}"


class FileValidator:
    """Utility class for upload validation."""

    @classmethod
    def validate_upload_type(cls, upload_type: Optional[str]) -> str:
        if upload_type not in UPLOAD_TYPES:
            raise ValidationError(
                "Invalid image type",
                field_errors=[{"field": "type", "message": f"must be one of: {', '.join(UPLOAD_TYPES)}"}],
            )
        return upload_type

    @classmethod
    def validate_mime_type(cls, mime_type: str, upload_type: str) -> str:
        """
        Images only for problem and finished photos; verification documents may also be PDF.

        Raises:
            UnsupportedFileTypeError: If the content type is not accepted
        """
        mime_type = mime_type or ""
        if mime_type.startswith("image/"):
            return mime_type
        if upload_type == DOCUMENT_UPLOAD_TYPE and mime_type in DOCUMENT_MIME_TYPES:
            return mime_type

        supported = ["image/*"]
        if upload_type == DOCUMENT_UPLOAD_TYPE:
            supported.extend(DOCUMENT_MIME_TYPES)
        raise UnsupportedFileTypeError(mime_type or "unknown", supported)

    @classmethod
    def max_size_for(cls, upload_type: str) -> int:
        settings = get_settings()
        if upload_type == DOCUMENT_UPLOAD_TYPE:
            return settings.max_document_size
        return settings.max_image_size

    @classmethod
    def validate_file_size(cls, file_size: int, max_size: int) -> int:
        if file_size <= 0:
            raise ValidationError(
                "File is empty",
                field_errors=[{"field": "file", "message": "file is empty"}],
            )
        if file_size > max_size:
            raise FileSizeExceededError(file_size, max_size)
        return file_size

    @classmethod
    def validate_image_content(cls, content: bytes) -> Tuple[int, int]:
        """
        Make sure the bytes decode as an image.

        Returns:
            Tuple of (width, height)
        """
        try:
            with Image.open(io.BytesIO(content)) as img:
                img.verify()
                return img.size
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            raise ValidationError(
                f"Invalid image file: {e}",
                field_errors=[{"field": "file", "message": "not a readable image"}],
            )

    @classmethod
    async def read_and_validate(cls, file: UploadFile, upload_type: str) -> Tuple[bytes, str]:
        """
        Full validation of an uploaded file.

        Args:
            file: FastAPI UploadFile object
            upload_type: problem, finished or verification-document

        Returns:
            Tuple of (content, mime_type)

        Raises:
            ValidationError: If any check fails
        """
        if not file or not file.filename:
            raise ValidationError(
                "No file provided",
                field_errors=[{"field": "file", "message": "file is required"}],
            )

        upload_type = cls.validate_upload_type(upload_type)
        mime_type = cls.validate_mime_type(file.content_type or "", upload_type)

        await file.seek(0)
        content = await file.read()
        cls.validate_file_size(len(content), cls.max_size_for(upload_type))

        if mime_type.startswith("image/"):
            cls.validate_image_content(content)

        return content, mime_type
