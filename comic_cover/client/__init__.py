"""
Client package for Comic Cover

The user-facing flow (consent, quiz, selfie, cover, story) with all state
kept in a SessionContext over a local key-value store.
"""

from .storage import LocalStorage, MemoryStorage, JsonFileStorage
from .session import SessionContext, SessionSnapshot, COMPANION_POOL
from .consent import ConsentStore, CONSENT_VERSION, CONSENT_KEY
from .quiz import QuizState, QuizOutcome, Question, QUESTIONS, QUIZ_KEYS
from .selfie import SelfieFlow
from .api_client import ComicCoverClient, ApiError
from .story import (
    StoryNames,
    StoryPanel,
    DisplayLine,
    StoryGenerator,
    build_story_beats,
    prepare_panel_dialogue,
    resolve_story_names,
)

__all__ = [
    "LocalStorage",
    "MemoryStorage",
    "JsonFileStorage",
    "SessionContext",
    "SessionSnapshot",
    "COMPANION_POOL",
    "ConsentStore",
    "CONSENT_VERSION",
    "CONSENT_KEY",
    "QuizState",
    "QuizOutcome",
    "Question",
    "QUESTIONS",
    "QUIZ_KEYS",
    "SelfieFlow",
    "ComicCoverClient",
    "ApiError",
    "StoryNames",
    "StoryPanel",
    "DisplayLine",
    "StoryGenerator",
    "build_story_beats",
    "prepare_panel_dialogue",
    "resolve_story_names",
]
