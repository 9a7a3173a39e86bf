"""
Comic Cover API client

Async HTTP client for the four API endpoints. Successful cover
generation is written back into the session (cover URL and hero name)
so later steps can pick it up.
"""

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional

import aiohttp

from comic_cover.client.session import SessionContext
from comic_cover.models.models import DialogueLine, CoverResult
from comic_cover.services.errors import ComicCoverError, InputValidationError

logger = logging.getLogger(__name__)


class ApiError(ComicCoverError):
    """The API answered with an error payload."""

    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = status


class ComicCoverClient:
    """Calls the Comic Cover HTTP API on behalf of one session."""

    def __init__(
        self,
        base_url: str,
        session: SessionContext,
        http_session: Optional[aiohttp.ClientSession] = None,
        timeout_seconds: float = 180.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session
        self.http_session = http_session
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)

    async def _post_json(self, path: str, payload: Mapping[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"

        async def send(http: aiohttp.ClientSession) -> Dict[str, Any]:
            async with http.post(url, json=dict(payload), timeout=self.timeout) as response:
                try:
                    data = await response.json(content_type=None)
                except ValueError:
                    data = {}
                if response.status != 200:
                    message = (data or {}).get("error") if isinstance(data, dict) else None
                    raise ApiError(response.status, message or f"Request failed ({response.status})")
                return data if isinstance(data, dict) else {}

        try:
            if self.http_session is not None:
                return await send(self.http_session)
            async with aiohttp.ClientSession() as http:
                return await send(http)
        except asyncio.TimeoutError as e:
            raise ApiError(0, f"Request to {url} timed out") from e
        except aiohttp.ClientError as e:
            raise ApiError(0, f"Could not reach {url}: {e}") from e

    async def generate_cover(self) -> CoverResult:
        """
        Generate the cover from the stored answers and selfie.

        Raises:
            InputValidationError: quiz answers or selfie missing from the session
            ApiError: the API returned an error payload
        """
        snapshot = self.session.read()
        if not snapshot.ready_for_cover:
            raise InputValidationError("Missing your quiz inputs or selfie - please start again.")

        logger.info("🦸 Generating your cover...")
        data = await self._post_json("/api/generate", {**snapshot.answers, "selfieUrl": snapshot.selfie_url})

        result = CoverResult(
            comic_image_url=data["comicImageUrl"],
            hero_name=data.get("heroName") or data.get("superheroName") or "The Hero",
            issue=data.get("issue", "01"),
            tagline=data.get("tagline", ""),
        )
        self.session.save_cover(result.comic_image_url, result.hero_name)
        return result

    async def generate_panel(self, prompt: str, input_image_url: str, seed: Optional[int] = None) -> str:
        payload: Dict[str, Any] = {"prompt": prompt, "inputImageUrl": input_image_url}
        if seed is not None:
            payload["seed"] = seed
        data = await self._post_json("/api/generate-multi", payload)
        return data["comicImageUrl"]

    async def generate_dialogue(self, panel_prompt: str, user_inputs: Mapping[str, Any]) -> List[DialogueLine]:
        data = await self._post_json(
            "/api/generate-dialogue",
            {"panelPrompt": panel_prompt, "userInputs": dict(user_inputs)},
        )
        return [
            DialogueLine(text=line.get("text"), speaker=line.get("speaker"))
            for line in data.get("dialogue", [])
            if isinstance(line, dict)
        ]

    async def upload_export(
        self,
        file_base64: str,
        public_id: Optional[str] = None,
        folder: Optional[str] = None,
    ) -> Dict[str, str]:
        payload: Dict[str, Any] = {"fileBase64": file_base64}
        if public_id:
            payload["publicId"] = public_id
        if folder:
            payload["folder"] = folder
        return await self._post_json("/api/cloudinary-upload", payload)
