"""
Session Context - explicit client-side state for one user

Wraps the local key-value store and owns the lifecycle of every key the
flow reads or writes. Pages and commands receive a SessionContext instead
of reading the store directly.

KEYS
====
| Key            | Written by                  | Invalidated by                 |
|----------------|-----------------------------|--------------------------------|
| comicInputs    | quiz completion, ?data=     | new quiz session               |
| selfieUrl      | selfie upload               | retake                         |
| coverImageUrl  | cover generation            | new selfie, retake             |
| heroName       | cover generation            | quiz completion / new session  |
| superheroName  | cover generation            | quiz completion / new session  |
| companionName  | first story render          | never                          |
| rivalSeed      | story beats                 | overwritten per story          |

With `storage=None` (no persistent storage available) every read returns
None and every write is a no-op.
"""

import json
import logging
import random
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

from comic_cover.client.storage import LocalStorage
from comic_cover.services.errors import InputValidationError

logger = logging.getLogger(__name__)


COMIC_INPUTS_KEY = "comicInputs"
SELFIE_URL_KEY = "selfieUrl"
COVER_IMAGE_URL_KEY = "coverImageUrl"
HERO_NAME_KEY = "heroName"
SUPERHERO_NAME_KEY = "superheroName"
COMPANION_NAME_KEY = "companionName"
RIVAL_SEED_KEY = "rivalSeed"

COMPANION_POOL = [
    "Alex", "Sam", "Jordan", "Casey", "Taylor", "Morgan",
    "Riley", "Jamie", "Avery", "Cameron", "Quinn", "Rowan",
    "Skyler", "Elliot", "Harper", "Reese", "Drew", "Sage",
    "Parker", "Blair",
]


@dataclass
class SessionSnapshot:
    answers: Optional[Dict[str, str]]
    selfie_url: Optional[str]
    cover_image_url: Optional[str]
    hero_name: Optional[str]

    @property
    def ready_for_cover(self) -> bool:
        return bool(self.answers) and bool(self.selfie_url)


class SessionContext:
    """Client-side state for one user profile."""

    def __init__(self, storage: Optional[LocalStorage], rng: Optional[random.Random] = None):
        self.storage = storage
        self._rng = rng or random.Random()

    @property
    def available(self) -> bool:
        return self.storage is not None

    # ===== Raw access (safe without storage) =====

    def get(self, key: str) -> Optional[str]:
        if self.storage is None:
            return None
        return self.storage.get_item(key)

    def set(self, key: str, value: str) -> None:
        if self.storage is None:
            return
        self.storage.set_item(key, value)

    def remove(self, *keys: str) -> None:
        if self.storage is None:
            return
        for key in keys:
            self.storage.remove_item(key)

    # ===== Lifecycle =====

    def create(self) -> None:
        """Start a new quiz session: drop old answers and identity fields."""
        self.remove(COMIC_INPUTS_KEY, HERO_NAME_KEY, SUPERHERO_NAME_KEY)
        logger.info("🆕 New quiz session")

    def read(self) -> SessionSnapshot:
        return SessionSnapshot(
            answers=self.load_answers(),
            selfie_url=self.selfie_url,
            cover_image_url=self.cover_image_url,
            hero_name=self.hero_name,
        )

    # ===== Answers =====

    def load_answers(self) -> Optional[Dict[str, str]]:
        """Stored quiz answers, or None when absent or unreadable."""
        raw = self.get(COMIC_INPUTS_KEY)
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("⚠️ Stored quiz answers are unreadable")
            return None
        if not isinstance(data, dict):
            return None
        return {str(k): "" if v is None else str(v) for k, v in data.items()}

    def save_answers(self, answers: Union[Mapping[str, Any], str]) -> None:
        """
        Persist the answer record.

        Also accepts the serialized blob handed over between pages
        (the `?data=` handoff); it must decode to a JSON object.
        """
        if isinstance(answers, str):
            try:
                decoded = json.loads(answers)
            except json.JSONDecodeError as e:
                raise InputValidationError(f"Quiz data is not valid JSON: {e}") from e
            if not isinstance(decoded, dict):
                raise InputValidationError("Quiz data must be a JSON object")
            answers = decoded
        self.set(COMIC_INPUTS_KEY, json.dumps(dict(answers), ensure_ascii=False))

    def complete_quiz(self, answers: Mapping[str, Any]) -> None:
        """Persist a finished quiz and forget the previous run's hero name."""
        self.remove(HERO_NAME_KEY, SUPERHERO_NAME_KEY)
        self.save_answers(answers)

    # ===== Selfie / cover =====

    @property
    def selfie_url(self) -> Optional[str]:
        return self.get(SELFIE_URL_KEY) or None

    @property
    def cover_image_url(self) -> Optional[str]:
        return self.get(COVER_IMAGE_URL_KEY) or None

    @property
    def hero_name(self) -> Optional[str]:
        return self.get(HERO_NAME_KEY) or self.get(SUPERHERO_NAME_KEY) or None

    def set_selfie_url(self, url: str) -> None:
        """A new selfie makes any cached cover stale."""
        self.set(SELFIE_URL_KEY, url)
        self.invalidate_cover()

    def invalidate_selfie(self) -> None:
        self.remove(SELFIE_URL_KEY, COVER_IMAGE_URL_KEY)

    def invalidate_cover(self) -> None:
        self.remove(COVER_IMAGE_URL_KEY)

    def save_cover(self, cover_image_url: str, hero_name: str) -> None:
        self.set(COVER_IMAGE_URL_KEY, cover_image_url)
        self.set(HERO_NAME_KEY, hero_name)
        self.set(SUPERHERO_NAME_KEY, hero_name)

    # ===== Story names =====

    @property
    def stored_companion_name(self) -> Optional[str]:
        return self.get(COMPANION_NAME_KEY) or None

    def companion_name(self) -> str:
        """The persisted companion name, picking one from the pool on first use."""
        existing = self.stored_companion_name
        if existing:
            return existing
        name = self._rng.choice(COMPANION_POOL)
        self.set(COMPANION_NAME_KEY, name)
        return name

    @property
    def rival_seed(self) -> Optional[int]:
        raw = self.get(RIVAL_SEED_KEY)
        try:
            return int(raw) if raw else None
        except ValueError:
            return None

    def set_rival_seed(self, seed: int) -> None:
        self.set(RIVAL_SEED_KEY, str(seed))
