"""File storage gateway for a single bucket"""

import logging
from typing import Any, Dict, List, Optional

from outbehaving.config import settings
from outbehaving.infrastructure.clients.base import BackendClient, BackendConfig

logger = logging.getLogger(__name__)


class StorageClient(BackendClient):
    """Upload, download, delete and address objects in a bucket"""

    def __init__(
        self,
        config: BackendConfig,
        bucket: Optional[str] = None,
        access_token: Optional[str] = None,
    ):
        super().__init__(config, access_token)
        self.bucket = bucket or settings.avatars_bucket

    def _object_path(self, path: str) -> str:
        return f"/storage/v1/object/{self.bucket}/{path.lstrip('/')}"

    async def upload(
        self,
        path: str,
        content: bytes,
        content_type: str = "application/octet-stream",
        upsert: bool = False,
    ) -> str:
        """Upload bytes to `path`; returns the object key"""
        logger.info("Uploading file", extra={"bucket": self.bucket, "path": path, "size": len(content)})
        response = await self._request(
            "POST",
            self._object_path(path),
            "upload file",
            content=content,
            headers={
                "Content-Type": content_type,
                "cache-control": f"max-age={settings.storage_cache_control}",
                "x-upsert": "true" if upsert else "false",
            },
        )
        body = self._json(response, "upload file")
        key = body.get("Key", f"{self.bucket}/{path}") if isinstance(body, dict) else f"{self.bucket}/{path}"
        logger.info("File uploaded successfully", extra={"bucket": self.bucket, "path": path})
        return key

    async def download(self, path: str) -> bytes:
        logger.info("Downloading file", extra={"bucket": self.bucket, "path": path})
        response = await self._request("GET", self._object_path(path), "download file")
        return response.content

    async def remove(self, path: str) -> bool:
        logger.info("Deleting file", extra={"bucket": self.bucket, "path": path})
        await self._request(
            "DELETE",
            f"/storage/v1/object/{self.bucket}",
            "delete file",
            json={"prefixes": [path]},
        )
        logger.info("File deleted successfully", extra={"bucket": self.bucket, "path": path})
        return True

    def get_public_url(self, path: str) -> str:
        """Deterministic public URL; no network call"""
        url = f"{self.config.url}/storage/v1/object/public/{self.bucket}/{path.lstrip('/')}"
        logger.debug("Generated public URL", extra={"path": path, "url": url})
        return url

    async def list_files(self, folder: str = "") -> List[Dict[str, Any]]:
        logger.info("Listing files", extra={"bucket": self.bucket, "folder": folder})
        response = await self._request(
            "POST",
            f"/storage/v1/object/list/{self.bucket}",
            "list files",
            json={"prefix": folder},
        )
        return self._json(response, "list files")
