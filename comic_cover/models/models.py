"""
Pydantic data models for Comic Cover

Shared by the HTTP surface, the generation services and the client flow.

API FIELDS (user-facing)
========================
The HTTP surface keeps the camelCase field names the browser client sends
(`selfieUrl`, `panelPrompt`, `fileBase64`, ...). Models declare them as
aliases so Python code can use snake_case.

| Endpoint                 | Request model           | Response model         |
|--------------------------|-------------------------|------------------------|
| POST /api/generate       | CoverRequest            | CoverResponse          |
| POST /api/generate-multi | PanelImageRequest       | PanelImageResponse     |
| POST /api/generate-dialogue | DialogueRequest      | DialogueResponse       |
| POST /api/cloudinary-upload | UploadRequest        | UploadResponse         |
"""

from pydantic import BaseModel, ConfigDict, Field, validator
from typing import List, Optional, Dict, Any, Union
from dataclasses import dataclass
from enum import Enum


# ============================================================================
# Enums
# ============================================================================

class JobStatus(str, Enum):
    """Status of a prediction on the inference service."""
    STARTING = "starting"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"

    @property
    def is_terminal(self) -> bool:
        return self not in (JobStatus.STARTING, JobStatus.PROCESSING)

    @classmethod
    def parse(cls, value: Optional[str]) -> "JobStatus":
        """Map a raw status string onto the enum; unknown values count as failed."""
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.FAILED


class Speaker(str, Enum):
    """Generic speaker labels the dialogue model is asked to use."""
    HERO = "hero"
    COMPANION = "companion"
    RIVAL = "rival"


# ============================================================================
# Consent
# ============================================================================

class ConsentRecord(BaseModel):
    """Client-side record that the user agreed to the data-handling terms."""
    accepted: bool
    timestamp: int = Field(..., description="Epoch milliseconds when consent was given")


# ============================================================================
# Generation
# ============================================================================

class GenerationJob(BaseModel):
    """
    One inference request and its observed state.

    Owned by the request that created it. Status only moves forward:
    once terminal it never changes again, and output_url is set exactly
    when the status is succeeded.
    """
    job_id: Optional[str] = None
    prompt: str
    input_image_url: str
    status: JobStatus = JobStatus.STARTING
    output_url: Optional[str] = None
    attempts: int = 0

    def observe(self, status: JobStatus, output_url: Optional[str] = None) -> None:
        """Record a status observed on the inference service."""
        if self.status.is_terminal:
            return
        self.status = status
        self.output_url = output_url if status == JobStatus.SUCCEEDED else None


@dataclass(frozen=True)
class Succeeded:
    url: str


@dataclass(frozen=True)
class Failed:
    status: str


@dataclass(frozen=True)
class TimedOut:
    status: str
    attempts: int


GenerationResult = Union[Succeeded, Failed, TimedOut]


# ============================================================================
# Dialogue
# ============================================================================

class DialogueLine(BaseModel):
    """A single line of comic dialogue or narration."""
    text: str
    speaker: str = Field(..., description="hero/companion/rival or a character name")

    @validator('text', 'speaker', pre=True)
    def coerce_to_string(cls, v):
        if v is None:
            return ""
        return str(v).strip()


class DialogueResult(BaseModel):
    dialogue: List[DialogueLine]
    raw: Optional[str] = None


# ============================================================================
# Cover
# ============================================================================

class CoverResult(BaseModel):
    comic_image_url: str
    hero_name: str
    issue: str = "01"
    tagline: str


# ============================================================================
# API Request / Response Models
# ============================================================================

class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CoverRequest(_CamelModel):
    """POST /api/generate - quiz answers plus the uploaded selfie."""
    gender: Optional[str] = None
    childhood: Optional[str] = None
    superpower: Optional[str] = None
    city: Optional[str] = None
    fear: Optional[str] = None
    fuel: Optional[str] = None
    strength: Optional[str] = None
    lesson: Optional[str] = None
    selfie_url: Optional[str] = Field(None, alias="selfieUrl")


class CoverResponse(_CamelModel):
    comic_image_url: str = Field(..., alias="comicImageUrl")
    hero_name: str = Field(..., alias="heroName")
    superhero_name: str = Field(..., alias="superheroName")
    issue: str
    tagline: str


class PanelImageRequest(_CamelModel):
    """POST /api/generate-multi - a single panel prompt."""
    prompt: Optional[str] = None
    selfie_url: Optional[str] = Field(None, alias="selfieUrl")
    # The story page sends the cover under this name
    input_image_url: Optional[str] = Field(None, alias="inputImageUrl")
    seed: Optional[int] = None


class PanelImageResponse(_CamelModel):
    comic_image_url: str = Field(..., alias="comicImageUrl")


class DialogueRequest(_CamelModel):
    """POST /api/generate-dialogue"""
    panel_prompt: Optional[str] = Field(None, alias="panelPrompt")
    user_inputs: Dict[str, Any] = Field(default_factory=dict, alias="userInputs")

    @validator('user_inputs', pre=True)
    def default_user_inputs(cls, v):
        return v or {}


class UploadRequest(_CamelModel):
    """POST /api/cloudinary-upload"""
    file_base64: Optional[Any] = Field(None, alias="fileBase64")
    public_id: Optional[str] = Field(None, alias="publicId")
    folder: Optional[str] = None


class UploadResponse(BaseModel):
    secure_url: str
    public_id: str


class ErrorResponse(BaseModel):
    error: str
