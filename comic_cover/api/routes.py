"""
API routes for Comic Cover

REST endpoints for cover generation, story panels, dialogue and uploads.

Every handler catches its own failures, logs them server-side and returns
an `{"error": ...}` payload, so one failed request never affects the next.
"""

import json
import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from comic_cover.models import (
    CoverResponse,
    PanelImageRequest,
    PanelImageResponse,
    DialogueRequest,
    UploadRequest,
    UploadResponse,
)
from comic_cover.services.cover import CoverService
from comic_cover.services.generation import GenerationService
from comic_cover.services.dialogue import DialogueService
from comic_cover.services.cloudinary_storage import CloudinaryStorageService
from comic_cover.services.errors import InputValidationError, UploadError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["comic"])

HERO_NAME_COOKIE_MAX_AGE = 604800  # 7 days

# Global services (will be set by main app)
_cover_service: Optional[CoverService] = None
_generation_service: Optional[GenerationService] = None
_dialogue_service: Optional[DialogueService] = None
_storage_service: Optional[CloudinaryStorageService] = None


def set_services(
    cover_service: Optional[CoverService] = None,
    generation_service: Optional[GenerationService] = None,
    dialogue_service: Optional[DialogueService] = None,
    storage_service: Optional[CloudinaryStorageService] = None,
):
    """Set the global service instances"""
    global _cover_service, _generation_service, _dialogue_service, _storage_service
    _cover_service = cover_service
    _generation_service = generation_service
    _dialogue_service = dialogue_service
    _storage_service = storage_service


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _read_json(request: Request) -> Dict[str, Any]:
    """Request body as a dict; anything else raises InputValidationError."""
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise InputValidationError("Request body must be valid JSON")
    if not isinstance(body, dict):
        raise InputValidationError("Request body must be a JSON object")
    return body


# ============================================================================
# Cover
# ============================================================================

@router.post("/generate")
async def generate_cover(request: Request):
    """
    Generate the Issue 01 cover from quiz answers and a selfie URL.

    Returns the cover URL, hero name (also as `superheroName`), issue and
    tagline, and sets a `heroName` cookie for 7 days.
    """
    try:
        body = await _read_json(request)
        if _cover_service is None:
            raise RuntimeError("Cover service not initialized")

        result = await _cover_service.create_cover(body)

        payload = CoverResponse(
            comic_image_url=result.comic_image_url,
            hero_name=result.hero_name,
            superhero_name=result.hero_name,
            issue=result.issue,
            tagline=result.tagline,
        ).model_dump(by_alias=True)

        response = JSONResponse(content=payload)
        response.headers["Set-Cookie"] = (
            f"heroName={quote(result.hero_name, safe='')}; Path=/; "
            f"Max-Age={HERO_NAME_COOKIE_MAX_AGE}; SameSite=Lax"
        )
        logger.info(f"✅ Cover generated for {result.hero_name}")
        return response

    except InputValidationError as e:
        logger.warning(f"⚠️ /api/generate rejected: {e}")
        return _error(400, str(e))
    except Exception as e:
        logger.error(f"❌ /api/generate error: {e}", exc_info=True)
        return _error(500, str(e) or "Generation failed")


# ============================================================================
# Story panels
# ============================================================================

@router.post("/generate-multi")
async def generate_panel(request: Request):
    """
    Generate one story panel image.

    The reference image may be sent as `selfieUrl` or `inputImageUrl`
    (the story page sends the cover under the latter).
    """
    try:
        body = await _read_json(request)
        try:
            req = PanelImageRequest.model_validate(body)
        except ValidationError as e:
            raise InputValidationError(f"Invalid request: {e.errors()[0]['msg']}")

        image_url = (req.selfie_url or req.input_image_url or "").strip()
        if not (req.prompt or "").strip() or not image_url:
            raise InputValidationError("Missing prompt or selfieUrl")
        if _generation_service is None:
            raise RuntimeError("Generation service not initialized")

        comic_image_url = await _generation_service.generate(req.prompt, image_url, seed=req.seed)
        return PanelImageResponse(comic_image_url=comic_image_url).model_dump(by_alias=True)

    except InputValidationError as e:
        logger.warning(f"⚠️ /api/generate-multi rejected: {e}")
        return _error(400, str(e))
    except Exception as e:
        logger.error(f"❌ /api/generate-multi error: {e}", exc_info=True)
        return _error(500, str(e) or "Generation failed")


# ============================================================================
# Dialogue
# ============================================================================

@router.post("/generate-dialogue")
async def generate_dialogue(request: Request):
    """
    Write 1-2 comic lines for a panel.

    Malformed model output degrades to a placeholder line; only a failed
    chat call (or an unusable request) returns 500.
    """
    try:
        body = await _read_json(request)
        req = DialogueRequest.model_validate(body)
        if _dialogue_service is None:
            raise RuntimeError("Dialogue service not initialized")

        result = await _dialogue_service.generate_dialogue(req.panel_prompt or "", req.user_inputs)
        return result.model_dump()

    except Exception as e:
        logger.error(f"❌ OpenAI Dialogue Error: {e}", exc_info=True)
        return _error(500, "Failed to generate dialogue")


# ============================================================================
# Uploads
# ============================================================================

@router.post("/cloudinary-upload")
async def cloudinary_upload(request: Request):
    """Upload a base64 image (data URL or bare base64) and return its hosted URL."""
    try:
        body = await _read_json(request)
        req = UploadRequest.model_validate(body)
        if not req.file_base64 or not isinstance(req.file_base64, str):
            raise InputValidationError("fileBase64 is required")
        if _storage_service is None:
            raise RuntimeError("Storage service not initialized")

        result = await _storage_service.upload_base64(
            req.file_base64,
            public_id=req.public_id,
            folder=req.folder,
        )
        return UploadResponse(**result).model_dump()

    except (InputValidationError, ValidationError) as e:
        logger.warning(f"⚠️ /api/cloudinary-upload rejected: {e}")
        return _error(400, str(e))
    except UploadError as e:
        logger.error(f"❌ /api/cloudinary-upload failed: {e}")
        return _error(500, str(e) or "Upload failed")
    except Exception as e:
        logger.error(f"❌ /api/cloudinary-upload error: {e}", exc_info=True)
        return _error(500, str(e) or "Upload failed")


# ============================================================================
# Health
# ============================================================================

@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "Comic Cover",
        "services": {
            "cover": _cover_service is not None,
            "generation": _generation_service is not None,
            "dialogue": _dialogue_service is not None,
            "storage": _storage_service is not None,
        }
    }
