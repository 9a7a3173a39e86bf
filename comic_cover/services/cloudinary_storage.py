"""
Cloudinary storage service for Comic Cover.

Handles server-side uploads of finished comic pages (base64 exports from
the client). The selfie itself is uploaded unsigned by the client, see
comic_cover.client.selfie.
"""

import asyncio
import base64
import binascii
import io
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Optional

import cloudinary
import cloudinary.uploader

from comic_cover.services.errors import InputValidationError, UploadError

logger = logging.getLogger(__name__)


def decode_base64_payload(file_base64: str) -> bytes:
    """
    Decode a data URL ("data:image/jpeg;base64,...") or bare base64 string.

    Raises:
        InputValidationError: the payload is not valid base64
    """
    data = file_base64.split("base64,", 1)[1] if "base64," in file_base64 else file_base64
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InputValidationError(f"fileBase64 is not valid base64: {e}") from e


class CloudinaryStorageService:
    """Cloudinary upload service for generated images."""

    def __init__(
        self,
        cloud_name: Optional[str],
        api_key: Optional[str],
        api_secret: Optional[str],
        export_folder: str = "comic-exports",
        cc_logger=None,
        uploader=None,
    ):
        """
        Initialize storage service.

        Args:
            cloud_name: Cloudinary cloud name
            api_key: Cloudinary API key
            api_secret: Cloudinary API secret
            export_folder: Default folder for base64 uploads
            cc_logger: Optional ComicCoverLogger instance
            uploader: Object with an `upload(file, **options)` method (defaults to cloudinary.uploader)
        """
        self.export_folder = export_folder
        self.cc_logger = cc_logger
        self._uploader = uploader or cloudinary.uploader
        self._executor = ThreadPoolExecutor(max_workers=3)

        cloudinary.config(
            cloud_name=cloud_name,
            api_key=api_key,
            api_secret=api_secret,
            secure=True,
        )

    async def _run_async(self, func, *args, **kwargs):
        """Run a sync function in the thread pool."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self._executor,
            lambda: func(*args, **kwargs)
        )

    def _upload_sync(self, file, options: Dict) -> Dict[str, str]:
        """Upload through the SDK and keep only the fields callers need."""
        try:
            result = self._uploader.upload(file, **options)
        except Exception as e:
            if self.cc_logger:
                self.cc_logger.error("STORAGE", "Upload failed", e)
            raise UploadError(str(e) or "Upload failed") from e

        secure_url = (result or {}).get("secure_url")
        if not secure_url:
            raise UploadError("Upload returned no secure_url")

        public_id = result.get("public_id", "")
        if self.cc_logger:
            self.cc_logger.upload_completed(public_id, options.get("folder", ""))
        return {"secure_url": secure_url, "public_id": public_id}

    async def upload_base64(
        self,
        file_base64: str,
        public_id: Optional[str] = None,
        folder: Optional[str] = None
    ) -> Dict[str, str]:
        """
        Upload a base64 image and return its hosted location.

        Args:
            file_base64: Data URL or bare base64 payload
            public_id: Optional public id for the asset
            folder: Target folder (default: comic-exports)

        Returns:
            {"secure_url": ..., "public_id": ...}
        """
        buffer = decode_base64_payload(file_base64)
        options = {
            "resource_type": "image",
            "folder": folder or self.export_folder,
        }
        if public_id:
            options["public_id"] = public_id

        logger.info(f"☁️ Uploading {len(buffer)} bytes to {options['folder']}")
        return await self._run_async(self._upload_sync, io.BytesIO(buffer), options)
