"""
Blob storage backends.

``VercelBlobStorage`` talks to the hosted blob HTTP API with httpx.
``LocalBlobStorage`` writes under UPLOAD_DIR with aiofiles and serves the
files from the app's static mount.
"""

import logging
from pathlib import Path
from urllib.parse import quote

import aiofiles
import httpx

logger = logging.getLogger(__name__)

BLOB_API_VERSION = "7"


class BlobStorageError(Exception):
    """Upload to blob storage failed."""


class BlobStorage:
    """Interface: store bytes under a name and return the public URL."""

    async def put(self, pathname: str, content: bytes, content_type: str) -> str:
        raise NotImplementedError


class VercelBlobStorage(BlobStorage):
    """Public blob uploads through the Vercel Blob REST API."""

    def __init__(self, token: str, api_url: str, timeout: float = 30.0) -> None:
        self._token = token
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout

    async def put(self, pathname: str, content: bytes, content_type: str) -> str:
        if not self._token:
            raise BlobStorageError("BLOB_READ_WRITE_TOKEN not set")

        headers = {
            "authorization": f"Bearer {self._token}",
            "x-api-version": BLOB_API_VERSION,
            "x-content-type": content_type,
            "x-add-random-suffix": "0",
        }
        url = f"{self._api_url}/?pathname={quote(pathname)}"

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.put(url, content=content, headers=headers)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            logger.error("Blob upload of %s failed: %s", pathname, e)
            raise BlobStorageError(f"Failed to upload file: {e}") from e

        blob_url = data.get("url")
        if not blob_url:
            raise BlobStorageError("Blob API response did not include a URL")

        logger.info("Uploaded blob %s", blob_url)
        return blob_url


class LocalBlobStorage(BlobStorage):
    """Filesystem storage for development and tests."""

    def __init__(self, base_dir: str, public_base_url: str) -> None:
        self.base_dir = Path(base_dir)
        self.public_base_url = public_base_url.rstrip("/")

    async def put(self, pathname: str, content: bytes, content_type: str) -> str:
        file_path = self.base_dir / pathname
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(file_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to save %s: %s", file_path, e)
            raise BlobStorageError(f"Failed to save file: {e}") from e

        return f"{self.public_base_url}/{pathname}"
