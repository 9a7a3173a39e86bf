"""Services package for Comic Cover"""

from .errors import (
    ComicCoverError,
    InputValidationError,
    UploadError,
    GenerationError,
    DialogueParseError,
)
from .logger import ComicCoverLogger, init_logger
from .replicate_client import ReplicateService, PredictionSnapshot
from .generation import GenerationService, PollPolicy, GenerationParams, extract_output_url
from .chat import ChatService
from .cover import CoverService, normalize_cover_inputs
from .dialogue import DialogueService, parse_dialogue, PLACEHOLDER_TEXT
from .cloudinary_storage import CloudinaryStorageService, decode_base64_payload
from .text_processing import (
    sanitize_free_text,
    clean_hero_name,
    normalize_speaker_name,
    resolve_companion_name,
    truncate_to_two_sentences,
    fear_to_creature,
    rival_name_from_fear,
    stable_hash,
)

__all__ = [
    # Errors
    "ComicCoverError",
    "InputValidationError",
    "UploadError",
    "GenerationError",
    "DialogueParseError",
    # Logging
    "ComicCoverLogger",
    "init_logger",
    # Generation
    "ReplicateService",
    "PredictionSnapshot",
    "GenerationService",
    "PollPolicy",
    "GenerationParams",
    "extract_output_url",
    # Chat-backed services
    "ChatService",
    "CoverService",
    "normalize_cover_inputs",
    "DialogueService",
    "parse_dialogue",
    "PLACEHOLDER_TEXT",
    # Storage
    "CloudinaryStorageService",
    "decode_base64_payload",
    # Text processing utilities
    "sanitize_free_text",
    "clean_hero_name",
    "normalize_speaker_name",
    "resolve_companion_name",
    "truncate_to_two_sentences",
    "fear_to_creature",
    "rival_name_from_fear",
    "stable_hash",
]
