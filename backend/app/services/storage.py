"""File storage collaborators.

  - LocalStorage  writes under `settings.storage_root/{bucket}/{path}`
                  and serves from `settings.storage_public_url`
  - HttpStorage   object-storage REST API (`POST/DELETE
                  {storage_api_url}/object/{bucket}/{path}`)

`get_storage()` picks one from `settings.storage_backend`.
"""

import asyncio
import logging
from pathlib import Path

import httpx

from app.config import settings
from app.wizard.collaborators import StorageError

logger = logging.getLogger(__name__)


class LocalStorage:
    def __init__(self, root: str, public_url: str):
        self.root = Path(root)
        self.public_url = public_url.rstrip("/")

    def _target(self, bucket: str, path: str) -> Path:
        target = (self.root / bucket / path).resolve()
        if self.root.resolve() not in target.parents:
            raise StorageError(f"Invalid storage path: {path}")
        return target

    async def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> str:
        target = self._target(bucket, path)
        if target.exists():
            raise StorageError(f"The resource already exists: {bucket}/{path}")

        def _write():
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)

        try:
            await asyncio.to_thread(_write)
        except OSError as exc:
            raise StorageError(str(exc)) from exc
        logger.debug(f"Stored {len(data)} bytes at {bucket}/{path}")
        return path

    def get_public_url(self, bucket: str, path: str) -> str:
        return f"{self.public_url}/{bucket}/{path}"

    async def remove(self, bucket: str, path: str) -> None:
        target = self._target(bucket, path)
        try:
            await asyncio.to_thread(target.unlink, True)
        except OSError as exc:
            raise StorageError(str(exc)) from exc


class HttpStorage:
    def __init__(self, api_url: str, api_key: str, public_url: str, timeout: float = 30.0):
        self.api_url = api_url.rstrip("/")
        self.public_url = public_url.rstrip("/")
        self.headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
        self.timeout = timeout

    async def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> str:
        url = f"{self.api_url}/object/{bucket}/{path}"
        headers = {**self.headers, "Content-Type": content_type}
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(url, content=data, headers=headers)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise StorageError(_error_message(exc.response)) from exc
        except httpx.HTTPError as exc:
            raise StorageError(str(exc)) from exc
        return path

    def get_public_url(self, bucket: str, path: str) -> str:
        return f"{self.public_url}/{bucket}/{path}"

    async def remove(self, bucket: str, path: str) -> None:
        url = f"{self.api_url}/object/{bucket}/{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.delete(url, headers=self.headers)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise StorageError(str(exc)) from exc


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}: {response.text}"
    return body.get("message") or body.get("error") or f"HTTP {response.status_code}"


def get_storage():
    """FastAPI dependency: the configured storage backend."""
    if settings.storage_backend == "http":
        return HttpStorage(settings.storage_api_url, settings.storage_api_key, settings.storage_public_url)
    return LocalStorage(settings.storage_root, settings.storage_public_url)
