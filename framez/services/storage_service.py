"""Object storage helpers for post images kept in a Supabase storage bucket."""
from __future__ import annotations

import asyncio
import base64
import binascii
import inspect
import logging
import re
import time
from pathlib import Path
from typing import Union
from urllib.parse import unquote, urlparse

import httpx
from supabase import AsyncClient

from ..config import get_settings
from ..constants import POST_IMAGE_CONTENT_TYPE
from ..errors import BackendRequestError, describe_error

logger = logging.getLogger(__name__)

# A picked image: raw bytes, a local path, or a ``file://``, ``data:`` or http(s) URI.
ImageSource = Union[bytes, str, Path]

_last_timestamp_ms = 0


class StorageUploadError(BackendRequestError):
    """Raised when reading, uploading or publishing a post image fails."""

    def __init__(self, message: str) -> None:
        super().__init__("upload image", message)


def next_upload_timestamp() -> int:
    """Return milliseconds since the epoch, strictly greater than any value returned before."""

    global _last_timestamp_ms
    now = int(time.time() * 1000)
    _last_timestamp_ms = max(now, _last_timestamp_ms + 1)
    return _last_timestamp_ms


def _sanitize_segment(part: str) -> str:
    cleaned = re.sub(r"[^A-Za-z0-9._-]", "-", part.strip())
    return re.sub(r"-+", "-", cleaned).strip("-._")


def build_object_key(owner_id: str, timestamp_ms: int) -> str:
    """Key an upload as ``{owner}_{timestamp}.jpg`` so repeated posts never collide."""

    owner = _sanitize_segment(owner_id) or "anonymous"
    return f"{owner}_{timestamp_ms}.jpg"


def _decode_data_uri(uri: str) -> bytes:
    header, _, data = uri.partition(",")
    if not data:
        raise StorageUploadError("Image data URI is empty")
    if not header.endswith(";base64"):
        return unquote(data).encode("utf-8")
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise StorageUploadError("Image data URI is not valid base64") from exc


async def _download(url: str) -> bytes:
    timeout = get_settings().image_fetch_timeout
    try:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as http:
            response = await http.get(url)
            response.raise_for_status()
    except httpx.HTTPError as exc:  # pragma: no cover - network bound
        logger.exception("Fetching image %s failed", url)
        raise StorageUploadError(f"Could not read image from {url}") from exc
    return response.content


async def _read_file(path: Path) -> bytes:
    try:
        return await asyncio.to_thread(path.read_bytes)
    except OSError as exc:
        raise StorageUploadError(f"Could not read image file {path.name}") from exc


async def encode_image(image: ImageSource) -> bytes:
    """Resolve a picked image into the binary payload that gets uploaded."""

    if isinstance(image, bytes):
        payload = image
    elif isinstance(image, Path):
        payload = await _read_file(image)
    else:
        source = image.strip()
        scheme = urlparse(source).scheme.lower()
        if scheme == "data":
            payload = _decode_data_uri(source)
        elif scheme in {"http", "https"}:
            payload = await _download(source)
        elif scheme == "file":
            payload = await _read_file(Path(unquote(urlparse(source).path)))
        else:
            payload = await _read_file(Path(source))

    if not payload:
        raise StorageUploadError("Selected image is empty")
    return payload


async def upload_post_image(
    client: AsyncClient,
    *,
    owner_id: str,
    image: ImageSource,
    bucket: str | None = None,
) -> str:
    """Upload ``image`` for ``owner_id`` and return its public URL."""

    payload = await encode_image(image)
    bucket_name = bucket or get_settings().storage_bucket
    key = build_object_key(owner_id, next_upload_timestamp())
    storage = client.storage.from_(bucket_name)

    try:
        await storage.upload(key, payload, {"content-type": POST_IMAGE_CONTENT_TYPE})
        url = storage.get_public_url(key)
        if inspect.isawaitable(url):
            url = await url
    except Exception as exc:
        logger.exception("Upload of %s to bucket %s failed", key, bucket_name)
        raise StorageUploadError(describe_error(exc)) from exc

    if not url or not str(url).strip():
        raise StorageUploadError("Storage returned an empty public URL")
    logger.info("Uploaded post image %s (%d bytes)", key, len(payload))
    return str(url)


__all__ = [
    "ImageSource",
    "StorageUploadError",
    "next_upload_timestamp",
    "build_object_key",
    "encode_image",
    "upload_post_image",
]
