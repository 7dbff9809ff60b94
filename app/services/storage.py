"""
Photo storage backed by the Supabase Storage REST API.

Only the resulting public URL is persisted on an issue; the bytes live in the
configured bucket under ``issues/<uuid>.<ext>``.
"""
import uuid
from typing import Optional

import httpx

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger("app.storage")


class StorageError(Exception):
    """Raised when the object store rejects or fails an operation."""


def build_object_path(filename: Optional[str]) -> str:
    ext = ""
    if filename and "." in filename:
        ext = "." + filename.rsplit(".", 1)[-1].lower()
    return f"issues/{uuid.uuid4()}{ext}"


class PhotoStorage:
    def __init__(
        self,
        base_url: str,
        api_key: str,
        bucket: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.bucket = bucket
        self.timeout = timeout
        self.transport = transport

    @property
    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "apikey": self.api_key,
        }

    def object_url(self, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/{self.bucket}/{path}"

    def public_url(self, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{path}"

    def path_from_public_url(self, url: str) -> Optional[str]:
        prefix = self.public_url("")
        if url.startswith(prefix):
            return url[len(prefix):]
        return None

    async def upload(self, data: bytes, filename: Optional[str], content_type: str) -> str:
        """
        Store the photo and return its public URL.
        """
        path = build_object_path(filename)
        headers = {**self._headers, "Content-Type": content_type, "x-upsert": "false"}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.object_url(path), content=data, headers=headers)
        except httpx.HTTPError as e:
            raise StorageError(f"Upload of {path} failed: {e}") from e

        if response.status_code >= 400:
            raise StorageError(
                f"Upload of {path} rejected: status={response.status_code} body={response.text[:200]}"
            )

        logger.info(f"Photo stored: path={path}, size={len(data)}")
        return self.public_url(path)

    async def remove(self, url: str) -> None:
        """
        Delete a previously uploaded photo given its public URL.
        """
        path = self.path_from_public_url(url)
        if path is None:
            raise StorageError(f"URL does not belong to bucket {self.bucket}: {url}")
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.delete(self.object_url(path), headers=self._headers)
        except httpx.HTTPError as e:
            raise StorageError(f"Delete of {path} failed: {e}") from e

        if response.status_code >= 400 and response.status_code != 404:
            raise StorageError(f"Delete of {path} rejected: status={response.status_code}")
        logger.info(f"Photo removed: path={path}")


def get_storage() -> PhotoStorage:
    return PhotoStorage(
        base_url=settings.SUPABASE_URL,
        api_key=settings.SUPABASE_KEY,
        bucket=settings.SUPABASE_BUCKET,
        timeout=settings.STORAGE_TIMEOUT_SECONDS,
    )
