"""
Selfie Capture & Upload

capture -> preview (in memory) -> confirm (unsigned upload) | retake

Capturing requires consent. Confirming posts the preview to the storage
collaborator's unsigned upload endpoint and records the returned URL in
the session, dropping any cover generated from an older selfie.
"""

import asyncio
import logging
from pathlib import Path
from typing import Callable, Optional, Union

import aiohttp

from comic_cover.client.consent import ConsentStore
from comic_cover.client.session import SessionContext
from comic_cover.services.errors import InputValidationError, UploadError

logger = logging.getLogger(__name__)


UPLOAD_URL_TEMPLATE = "https://api.cloudinary.com/v1_1/{cloud_name}/image/upload"

CameraSource = Union[Callable[[], Optional[bytes]], str, Path]


class SelfieFlow:
    """Capture a still, then upload it once the user confirms."""

    def __init__(
        self,
        session: SessionContext,
        consent: ConsentStore,
        cloud_name: str,
        upload_preset: str = "comiccover",
        http_session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Args:
            session: Client session receiving the selfie URL
            consent: Consent store gating capture
            cloud_name: Storage account used in the upload URL
            upload_preset: Unsigned upload preset name
            http_session: Optional shared aiohttp session (created per upload otherwise)
        """
        self.session = session
        self.consent = consent
        self.upload_url = UPLOAD_URL_TEMPLATE.format(cloud_name=cloud_name)
        self.upload_preset = upload_preset
        self.http_session = http_session
        self.preview: Optional[bytes] = None

    def capture(self, source: CameraSource) -> Optional[bytes]:
        """
        Take a still from the camera collaborator.

        Args:
            source: Callable returning image bytes, or a path to an image file

        Returns:
            The preview bytes, or None when consent is missing or nothing was captured
        """
        if not self.consent.has_consent():
            logger.warning("⚠️ Capture blocked: consent required")
            return None

        if callable(source):
            image = source()
        else:
            image = Path(source).expanduser().read_bytes()

        if not image:
            return None
        self.preview = image
        logger.info(f"📸 Captured selfie preview ({len(image)} bytes)")
        return image

    async def _post(self, http: aiohttp.ClientSession, form: aiohttp.FormData) -> dict:
        async with http.post(self.upload_url, data=form) as response:
            if response.status < 200 or response.status >= 300:
                message = await response.text()
                raise UploadError(f"Cloudinary upload failed: {message}")
            return await response.json(content_type=None)

    async def confirm(self) -> str:
        """
        Upload the current preview and persist its URL.

        Returns:
            The hosted selfie URL

        Raises:
            InputValidationError: nothing has been captured yet
            UploadError: non-2xx response, transport failure, timeout or no secure_url
        """
        if not self.preview:
            raise InputValidationError("No selfie captured")

        form = aiohttp.FormData()
        form.add_field("file", self.preview, filename="selfie.png", content_type="image/png")
        form.add_field("upload_preset", self.upload_preset)

        try:
            if self.http_session is not None:
                payload = await self._post(self.http_session, form)
            else:
                async with aiohttp.ClientSession() as http:
                    payload = await self._post(http, form)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise UploadError(f"Cloudinary upload failed: {e}") from e

        selfie_url = payload.get("secure_url") if isinstance(payload, dict) else None
        if not selfie_url:
            raise UploadError("No selfie URL returned from upload")

        self.session.set_selfie_url(selfie_url)
        logger.info(f"✅ Selfie uploaded: {selfie_url}")
        return selfie_url

    def retake(self) -> None:
        """Discard the preview plus the stored selfie and cover."""
        self.preview = None
        self.session.invalidate_selfie()
