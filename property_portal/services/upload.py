"""
Upload service: validates a file and stores it in blob storage.
"""

import logging

from fastapi import UploadFile

from property_portal.services.blob_storage import BlobStorage, BlobStorageError
from property_portal.utils.exceptions import UpstreamServiceError
from property_portal.utils.file_utils import FileValidator, build_blob_name

logger = logging.getLogger(__name__)


class UploadService:

    def __init__(self, storage: BlobStorage):
        self.storage = storage

    async def upload(self, file: UploadFile, upload_type: str) -> str:
        """
        Validate and store an upload.

        Args:
            file: Multipart file
            upload_type: problem, finished or verification-document

        Returns:
            Public URL of the stored blob

        Raises:
            ValidationError: If the file fails validation
            UpstreamServiceError: If blob storage rejects the upload
        """
        content, mime_type = await FileValidator.read_and_validate(file, upload_type)
        pathname = build_blob_name(upload_type, file.filename)

        try:
            url = await self.storage.put(pathname, content, mime_type)
        except BlobStorageError as e:
            raise UpstreamServiceError("blob", str(e)) from e

        logger.info(f"Stored {upload_type} upload {pathname} ({len(content)} bytes)")
        return url
