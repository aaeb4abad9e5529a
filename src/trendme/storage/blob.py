"""Blob store adapters: local filesystem and Cloudinary."""

from __future__ import annotations

import asyncio
import logging
from io import BytesIO
from pathlib import Path, PurePosixPath

import cloudinary
import cloudinary.uploader

from ..providers.config import StorageSettings
from .base import BlobStore

_logger = logging.getLogger("storage")


class LocalBlobStore(BlobStore):
    """Writes blobs under a directory and returns ``file://`` URLs."""

    def __init__(self, root: Path):
        self.root = Path(root)

    async def upload(self, data: bytes, path: str, content_type: str = "image/png") -> str:
        relative = PurePosixPath(path)
        if relative.is_absolute() or ".." in relative.parts:
            raise ValueError(f"Invalid blob path: {path!r}")
        target = self.root.joinpath(*relative.parts)
        target.parent.mkdir(parents=True, exist_ok=True)
        await asyncio.to_thread(target.write_bytes, data)
        _logger.info(f"BLOB_UPLOAD | local | path:{path} | bytes:{len(data)}")
        return target.resolve().as_uri()


class CloudinaryBlobStore(BlobStore):
    """Uploads blobs to Cloudinary and returns their secure URL.

    The blob path becomes the Cloudinary public id (without extension).
    """

    def __init__(self, cloud_name: str, api_key: str, api_secret: str, folder: str = "trendme"):
        """Initialize Cloudinary uploader.

        Args:
            cloud_name: Cloudinary cloud name.
            api_key: Cloudinary API key.
            api_secret: Cloudinary API secret.
            folder: Base folder prepended to every public id.
        """
        self.folder = folder
        cloudinary.config(
            cloud_name=cloud_name,
            api_key=api_key,
            api_secret=api_secret,
            secure=True,
        )

    def _upload_sync(self, data: bytes, path: str) -> str:
        public_id = str(PurePosixPath(self.folder) / PurePosixPath(path).with_suffix(""))
        result = cloudinary.uploader.upload(
            BytesIO(data),
            public_id=public_id,
            resource_type="image",
            overwrite=True,
        )
        return result["secure_url"]

    async def upload(self, data: bytes, path: str, content_type: str = "image/png") -> str:
        url = await asyncio.to_thread(self._upload_sync, data, path)
        _logger.info(f"BLOB_UPLOAD | cloudinary | path:{path} | bytes:{len(data)}")
        return url


def create_blob_store(settings: StorageSettings) -> BlobStore:
    """Build the configured blob store."""
    if settings.blob_backend == "cloudinary":
        cloud_name, api_key, api_secret = settings.get_cloudinary_credentials()
        if not (cloud_name and api_key and api_secret):
            raise ValueError(
                "Cloudinary credentials missing. Set "
                f"{settings.cloudinary_cloud_name_env}, {settings.cloudinary_api_key_env} "
                f"and {settings.cloudinary_api_secret_env}."
            )
        return CloudinaryBlobStore(cloud_name, api_key, api_secret)
    return LocalBlobStore(settings.blob_dir)
