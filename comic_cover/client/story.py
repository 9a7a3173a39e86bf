"""
Origin Story - seven panels after the cover

Builds the panel prompts from the stored answers, generates each panel
image with the cover as reference, asks for dialogue, and prepares the
lines for display (speaker names resolved, hero placeholder replaced,
two sentences per bubble, one color per speaker).
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from comic_cover.client.session import SessionContext
from comic_cover.models.models import DialogueLine
from comic_cover.prompts.story import BEAT_NAMES, build_rival_design, get_story_beat_prompts
from comic_cover.services.errors import ComicCoverError, InputValidationError
from comic_cover.services.text_processing import (
    normalize_speaker_name,
    resolve_companion_name,
    rival_name_from_fear,
    substitute_hero_placeholder,
    truncate_to_two_sentences,
)

logger = logging.getLogger(__name__)


HERO_COLOR = "#FFD700"
RIVAL_COLOR = "#FF4500"
COMPANION_COLOR = "#00BFFF"
DEFAULT_SPEAKER_COLOR = "#F5C242"
SPEAKER_PALETTE = ["#F5C242", "#4DD0E1", "#F97316", "#22C55E", "#EC4899",
                   "#A78BFA", "#10B981", "#60A5FA", "#F43F5E", "#EAB308"]

DIALOGUE_FALLBACK_TEXT = "..."


@dataclass(frozen=True)
class StoryNames:
    hero: str
    rival: str
    companion: str


@dataclass
class DisplayLine:
    speaker: str
    text: str
    color: str


@dataclass
class StoryPanel:
    index: int
    beat: str
    prompt: Optional[str] = None
    image_url: Optional[str] = None
    dialogue: List[DialogueLine] = field(default_factory=list)

    @property
    def is_cover(self) -> bool:
        return self.index == 0


def resolve_story_names(
    session: SessionContext,
    answers: Mapping[str, str],
    companion: Optional[str] = None,
) -> StoryNames:
    """
    Hero from the session, rival from the fear answer.

    The companion is the explicit name if one is given, then the name
    persisted in the session. A session without one gets a pool pick,
    persisted so every later render shows the same sidekick.
    """
    explicit = companion or answers.get("companionName")
    if not (explicit and explicit.strip()) and session.stored_companion_name is None:
        session.companion_name()
    return StoryNames(
        hero=(session.hero_name or answers.get("superheroName") or "Hero").strip(),
        rival=rival_name_from_fear(answers.get("fear")),
        companion=resolve_companion_name(explicit, session),
    )


def build_story_beats(answers: Mapping[str, str], cover_url: str) -> List[StoryPanel]:
    """The cover followed by the seven beat panels, prompts filled in."""
    rival = build_rival_design(answers.get("fear"))
    prompts = get_story_beat_prompts(answers, rival)

    panels = [StoryPanel(index=0, beat="cover", image_url=cover_url)]
    for idx, (beat, prompt) in enumerate(zip(BEAT_NAMES, prompts), start=1):
        panels.append(StoryPanel(index=idx, beat=beat, prompt=prompt))
    return panels


def speaker_color(speaker: Optional[str], names: StoryNames, color_map: Dict[str, str]) -> str:
    """
    Fixed colors for hero, rival and companion; any other speaker gets
    the next palette color, remembered in `color_map`.
    """
    key = (speaker or "").strip().lower()
    if not key:
        return DEFAULT_SPEAKER_COLOR

    fixed = {
        names.hero.strip().lower(): HERO_COLOR,
        names.rival.strip().lower(): RIVAL_COLOR,
        names.companion.strip().lower(): COMPANION_COLOR,
    }
    if key in fixed:
        return fixed[key]
    if key not in color_map:
        color_map[key] = SPEAKER_PALETTE[len(color_map) % len(SPEAKER_PALETTE)]
    return color_map[key]


def prepare_panel_dialogue(
    lines: List[DialogueLine],
    names: StoryNames,
    color_map: Optional[Dict[str, str]] = None,
) -> List[DisplayLine]:
    """Resolve speakers, substitute the hero name, truncate and color each line."""
    color_map = {} if color_map is None else color_map
    prepared = []
    for line in lines:
        speaker = normalize_speaker_name(line.speaker, names.hero, names.rival, names.companion)
        text = truncate_to_two_sentences(substitute_hero_placeholder(line.text, names.hero))
        if not text:
            continue
        prepared.append(DisplayLine(speaker=speaker, text=text, color=speaker_color(speaker, names, color_map)))
    return prepared


class StoryGenerator:
    """Generates every story panel, one after another, through the API client."""

    def __init__(self, client, session: SessionContext, companion_name: Optional[str] = None):
        """
        Args:
            client: ComicCoverClient (or any object with generate_panel/generate_dialogue)
            session: Client session holding answers, cover and names
            companion_name: Optional sidekick name overriding the stored one
        """
        self.client = client
        self.session = session
        self.companion_name = companion_name

    def prepare(self):
        """
        Build panels and names from the session.

        Raises:
            InputValidationError: answers or cover missing from the session
        """
        answers = self.session.load_answers()
        cover_url = self.session.cover_image_url
        if not answers or not cover_url:
            raise InputValidationError("Missing comic inputs or cover image. Please go back and try again.")

        panels = build_story_beats(answers, cover_url)
        self.session.set_rival_seed(build_rival_design(answers.get("fear")).seed)
        return answers, panels, resolve_story_names(self.session, answers, self.companion_name)

    async def generate(self) -> List[StoryPanel]:
        """
        Render all panels. A failed image leaves that panel without an
        image; failed dialogue becomes a single "..." line.
        """
        answers, panels, names = self.prepare()
        cover_url = panels[0].image_url
        seed = self.session.rival_seed
        user_inputs = {
            **answers,
            "superheroName": names.hero,
            "rivalName": names.rival,
            "companionName": names.companion,
        }

        for panel in panels[1:]:
            try:
                panel.image_url = await self.client.generate_panel(panel.prompt, cover_url, seed=seed)
            except ComicCoverError as e:
                logger.error(f"❌ Panel {panel.index} ({panel.beat}) image failed: {e}")

            try:
                panel.dialogue = await self.client.generate_dialogue(panel.prompt, user_inputs)
            except ComicCoverError as e:
                logger.warning(f"⚠️ Dialogue failed for panel {panel.index}: {e}")
                panel.dialogue = [DialogueLine(text=DIALOGUE_FALLBACK_TEXT, speaker=names.hero)]

            logger.info(f"🖼️ Panel {panel.index}/{len(panels) - 1} ready ({panel.beat})")

        return panels
