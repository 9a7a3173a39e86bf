"""Configuration package for Comic Cover"""

from .settings import Settings, get_settings
from .limits import (
    QUIZ_MAX_WORDS,
    ANSWER_MAX_LENGTH,
    POLL_INTERVAL_SECONDS,
    MAX_POLL_ATTEMPTS,
    PROMPT_MAX_LENGTH,
    HERO_NAME_MAX_LENGTH,
    HERO_NAME_MAX_TOKENS,
    MAX_SENTENCES_PER_BUBBLE,
)

__all__ = [
    "Settings",
    "get_settings",
    "QUIZ_MAX_WORDS",
    "ANSWER_MAX_LENGTH",
    "POLL_INTERVAL_SECONDS",
    "MAX_POLL_ATTEMPTS",
    "PROMPT_MAX_LENGTH",
    "HERO_NAME_MAX_LENGTH",
    "HERO_NAME_MAX_TOKENS",
    "MAX_SENTENCES_PER_BUBBLE",
]
