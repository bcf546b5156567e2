"""Asset store client for media files (videos, thumbnails, avatars).

The store never raises: ``store`` returns None and ``remove`` returns False
when the upstream call fails, and callers decide what that means. Uploads
arrive as ``UploadFile``s; ``stage_upload`` spools them to a local staging
file and always deletes it afterwards, on success and on failure. File I/O
goes through aiofiles so large videos never block the event loop.
"""

import os
import tempfile
import time
import uuid
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import urlparse

import aiofiles
import aiofiles.os
import httpx
from fastapi import Request, UploadFile

from src.config import Settings
from src.constants import (
    API_TIMEOUT_DEFAULT,
    API_TIMEOUT_UPLOAD,
    ASSET_UPLOAD_CHUNK_SIZE,
    CLOUDINARY_API_BASE,
    UPLOAD_CHUNK_SIZE,
)
from src.utils.logging import get_logger
from src.utils.retry import RetryConfig, retry_async
from src.utils.secrets import mask_secret, sign_params

logger = get_logger(__name__)

# Deletions are idempotent, so they are safe to retry
REMOVE_RETRY_CONFIG = RetryConfig(max_retries=2, base_delay=0.5)


@dataclass
class StoredAsset:
    url: str
    duration_seconds: float | None = None


class AssetStore(Protocol):
    async def store(self, path: str) -> StoredAsset | None: ...

    async def remove(self, url: str) -> bool: ...


def public_id_from_url(url: str) -> tuple[str, str] | None:
    """Extract (resource_type, public_id) from a delivery URL.

    ``https://res.cloudinary.com/<cloud>/video/upload/v17/abc.mp4`` gives
    ``("video", "abc")``.
    """
    parts = [p for p in urlparse(url).path.split("/") if p]
    if "upload" not in parts:
        return None
    index = parts.index("upload")
    if index == 0 or index + 1 >= len(parts):
        return None
    resource_type = parts[index - 1]
    rest = parts[index + 1 :]
    if rest and rest[0].startswith("v") and rest[0][1:].isdigit():
        rest = rest[1:]
    if not rest:
        return None
    public_id = "/".join(rest).rsplit(".", 1)[0]
    return resource_type, public_id


class CloudinaryAssetStore:
    """Asset store backed by the Cloudinary upload API."""

    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        chunk_size: int = ASSET_UPLOAD_CHUNK_SIZE,
    ) -> None:
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.chunk_size = chunk_size
        self._client = httpx.AsyncClient(timeout=API_TIMEOUT_DEFAULT)
        logger.info(
            f"Asset store configured for cloud '{cloud_name}' (key {mask_secret(api_key)})"
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "CloudinaryAssetStore":
        return cls(
            settings.cloudinary_cloud_name,
            settings.cloudinary_api_key,
            settings.cloudinary_api_secret,
        )

    def _signed(self, params: dict[str, str | int]) -> dict[str, str | int]:
        return {
            **params,
            "api_key": self.api_key,
            "signature": sign_params(params, self.api_secret),
        }

    async def _upload_part(
        self,
        name: str,
        data: dict[str, str | int],
        chunk: bytes,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        response = await self._client.post(
            f"{CLOUDINARY_API_BASE}/{self.cloud_name}/auto/upload",
            data=data,
            files={"file": (name, chunk)},
            headers=headers,
            timeout=API_TIMEOUT_UPLOAD,
        )
        response.raise_for_status()
        return response

    async def store(self, path: str) -> StoredAsset | None:
        """Upload a local file; files above ``chunk_size`` go up in parts.

        Parts share an upload id and carry a ``Content-Range``; the last
        response describes the whole asset.
        """
        if not path:
            return None

        name = os.path.basename(path)
        data = self._signed({"timestamp": int(time.time())})
        try:
            total = (await aiofiles.os.stat(path)).st_size
            async with aiofiles.open(path, "rb") as fh:
                if total <= self.chunk_size:
                    response = await self._upload_part(name, data, await fh.read())
                else:
                    upload_id = uuid.uuid4().hex
                    offset = 0
                    while chunk := await fh.read(self.chunk_size):
                        end = offset + len(chunk) - 1
                        headers = {
                            "X-Unique-Upload-Id": upload_id,
                            "Content-Range": f"bytes {offset}-{end}/{total}",
                        }
                        response = await self._upload_part(name, data, chunk, headers)
                        offset = end + 1
            payload = response.json()
        except (httpx.HTTPError, OSError, ValueError) as e:
            logger.error(f"Asset upload failed for {name}: {e}")
            return None

        url = payload.get("secure_url") or payload.get("url")
        if not url:
            logger.error("Asset upload response carried no URL")
            return None
        return StoredAsset(url=url, duration_seconds=payload.get("duration"))

    async def _destroy(self, resource_type: str, public_id: str) -> httpx.Response:
        data = self._signed({"public_id": public_id, "timestamp": int(time.time())})
        return await self._client.post(
            f"{CLOUDINARY_API_BASE}/{self.cloud_name}/{resource_type}/destroy",
            data=data,
        )

    async def remove(self, url: str) -> bool:
        if not url:
            return False
        parsed = public_id_from_url(url)
        if parsed is None:
            logger.warning(f"Cannot derive asset id from {url}")
            return False

        resource_type, public_id = parsed
        try:
            response = await retry_async(
                self._destroy,
                resource_type,
                public_id,
                config=REMOVE_RETRY_CONFIG,
                operation_name=f"asset remove {public_id}",
            )
        except httpx.HTTPError as e:
            logger.error(f"Asset removal failed for {public_id}: {e}")
            return False

        if response is None or response.status_code >= 400:
            return False
        try:
            return response.json().get("result") in ("ok", "not found")
        except ValueError:
            return False

    async def close(self) -> None:
        await self._client.aclose()


async def stage_upload(store: AssetStore, upload: UploadFile | None, staging_dir: str | None = None) -> StoredAsset | None:
    """Spool an upload to a staging file, push it to the store, delete the file."""
    if upload is None or not upload.filename:
        return None

    suffix = os.path.splitext(upload.filename)[1]
    fd, path = tempfile.mkstemp(suffix=suffix, dir=staging_dir)
    os.close(fd)
    try:
        await upload.seek(0)
        async with aiofiles.open(path, "wb") as staged:
            while chunk := await upload.read(UPLOAD_CHUNK_SIZE):
                await staged.write(chunk)
        return await store.store(path)
    finally:
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            pass


async def discard_assets(store: AssetStore, *urls: str | None) -> None:
    """Best-effort removal of assets that are no longer referenced."""
    for url in urls:
        if url and not await store.remove(url):
            logger.warning(f"Could not remove stale asset {url}")


def get_asset_store(request: Request) -> AssetStore:
    """Dependency returning the store created in the app lifespan."""
    return request.app.state.asset_store
