"""Supabase storage client for user uploaded gem images."""
import logging
import secrets
import time
from typing import Dict, Optional

import httpx

from app.config import settings
from app.errors import UploadFailed
from app.models.gems import ImageUpload

logger = logging.getLogger(__name__)


class StorageClient:
    """Uploads images to a public Supabase storage bucket."""

    def __init__(
        self,
        supabase_url: Optional[str] = None,
        supabase_key: Optional[str] = None,
        bucket: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.supabase_url = (supabase_url or settings.supabase_url or "").rstrip("/")
        self.supabase_key = supabase_key or settings.supabase_key
        self.bucket = bucket or settings.supabase_bucket
        self.http_client = http_client or httpx.AsyncClient(timeout=settings.upload_timeout)

    def _headers(self, content_type: str) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.supabase_key}",
            "apikey": self.supabase_key or "",
            "Content-Type": content_type,
            "x-upsert": "false",
        }

    @staticmethod
    def object_path(upload: ImageUpload) -> str:
        """Sanitized object path; user file names are never trusted."""
        random_part = secrets.token_hex(4)
        return f"uploads/{int(time.time() * 1000)}-{random_part}.{upload.extension}"

    def public_url(self, path: str) -> str:
        return f"{self.supabase_url}/storage/v1/object/public/{self.bucket}/{path}"

    async def upload(self, upload: ImageUpload) -> str:
        """
        Upload an image and return its public URL.

        Raises:
            UploadFailed: storage is not configured or rejected the upload
        """
        if not self.supabase_url or not self.supabase_key:
            raise UploadFailed("Supabase storage not configured")

        path = self.object_path(upload)
        try:
            response = await self.http_client.post(
                f"{self.supabase_url}/storage/v1/object/{self.bucket}/{path}",
                content=upload.content,
                headers=self._headers(upload.content_type),
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise UploadFailed(
                f"Supabase upload error: {exc.response.status_code} - {exc.response.text}"
            ) from exc
        except httpx.RequestError as exc:
            raise UploadFailed(f"Failed to reach Supabase storage: {exc}") from exc

        url = self.public_url(path)
        logger.info(f"Uploaded gem image to {url}")
        return url

    async def aclose(self) -> None:
        await self.http_client.aclose()


# Global instance
storage_client = StorageClient()
