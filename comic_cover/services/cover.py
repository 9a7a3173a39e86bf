"""
Cover Service - hero naming and Issue 01 cover generation

Flow:
1. Validate and normalize the quiz answers plus selfie URL
2. Ask the chat model for a hero name (primary model, then fallback)
3. Build the deterministic cover prompt
4. Run one image prediction with the selfie as reference
"""

import logging
from typing import Any, Dict, Mapping, Tuple

from comic_cover.config.limits import ANSWER_MAX_LENGTH, HERO_NAME_MAX_TOKENS
from comic_cover.models.models import CoverResult
from comic_cover.prompts.cover import get_cover_prompt, get_hero_name_messages
from comic_cover.services.chat import ChatService
from comic_cover.services.errors import InputValidationError
from comic_cover.services.generation import GenerationService
from comic_cover.services.text_processing import clean_hero_name, DEFAULT_HERO_NAME

logger = logging.getLogger(__name__)


# Checked in this order; the error lists missing keys in the same order
REQUIRED_COVER_FIELDS = ["gender", "superpower", "city", "lesson", "selfieUrl", "fear"]

COVER_DEFAULTS = {
    "childhood": "",
    "fuel": "hope",
    "strength": "courage",
}

ISSUE_NUMBER = "01"


def normalize_cover_inputs(body: Mapping[str, Any]) -> Tuple[Dict[str, str], str]:
    """
    Trim every field, apply defaults and check required ones.

    Args:
        body: Request payload (quiz answers plus selfieUrl)

    Returns:
        (answers, selfie_url)

    Raises:
        InputValidationError: "Missing inputs: a, b" listing every empty required field
    """
    def field(key: str) -> str:
        value = body.get(key)
        if value is None:
            return COVER_DEFAULTS.get(key, "")
        return str(value).strip()

    values = {key: field(key) for key in REQUIRED_COVER_FIELDS + list(COVER_DEFAULTS)}

    missing = [key for key in REQUIRED_COVER_FIELDS if not values[key]]
    if missing:
        raise InputValidationError(f"Missing inputs: {', '.join(missing)}", missing=missing)

    too_long = [key for key, v in values.items() if key != "selfieUrl" and len(v) > ANSWER_MAX_LENGTH]
    if too_long:
        raise InputValidationError(f"Inputs too long: {', '.join(too_long)}")

    selfie_url = values.pop("selfieUrl")
    return values, selfie_url


class CoverService:
    """Names the hero and renders the Issue 01 cover."""

    def __init__(
        self,
        chat: ChatService,
        generation: GenerationService,
        name_model: str = "gpt-4o-mini",
        fallback_name_model: str = "gpt-3.5-turbo",
        name_temperature: float = 0.8,
    ):
        self.chat = chat
        self.generation = generation
        self.name_model = name_model
        self.fallback_name_model = fallback_name_model
        self.name_temperature = name_temperature

    async def _ask_name(self, model: str, answers: Mapping[str, str]) -> str:
        response = await self.chat.chat_completion(
            messages=get_hero_name_messages(answers),
            model=model,
            temperature=self.name_temperature,
            max_tokens=HERO_NAME_MAX_TOKENS,
            purpose="hero-name",
        )
        return clean_hero_name(response.get("content"))

    async def name_hero(self, answers: Mapping[str, str]) -> str:
        """
        Propose a punchy one- or two-word hero name.

        Falls back to the secondary model when the primary one returns
        nothing usable, and to "The Hero" when either call fails.
        """
        try:
            hero_name = await self._ask_name(self.name_model, answers)
            if hero_name == DEFAULT_HERO_NAME:
                logger.warning(f"⚠️ {self.name_model} returned no usable name, trying {self.fallback_name_model}")
                hero_name = await self._ask_name(self.fallback_name_model, answers)
        except Exception as e:
            logger.warning(f"⚠️ Name generation failed; using fallback: {e}")
            hero_name = DEFAULT_HERO_NAME

        logger.info(f"🦸 Hero name: {hero_name}")
        return hero_name

    async def create_cover(self, body: Mapping[str, Any]) -> CoverResult:
        """
        Generate the cover for one quiz run.

        Args:
            body: Quiz answers plus selfieUrl, as posted by the client

        Returns:
            CoverResult with image URL, hero name, issue and tagline

        Raises:
            InputValidationError: required answers or the selfie URL are missing
            GenerationError: the image prediction did not succeed
        """
        answers, selfie_url = normalize_cover_inputs(body)

        hero_name = await self.name_hero(answers)
        prompt = get_cover_prompt(answers, hero_name)
        comic_image_url = await self.generation.generate(prompt, selfie_url)

        return CoverResult(
            comic_image_url=comic_image_url,
            hero_name=hero_name,
            issue=ISSUE_NUMBER,
            tagline=answers["lesson"],
        )
