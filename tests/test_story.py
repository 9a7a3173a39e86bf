"""
Unit tests for the origin story - beat prompts, rival design and panel generation.

Run with: python -m pytest tests/test_story.py -v
"""

import asyncio
import random
import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from comic_cover.client import (
    MemoryStorage,
    SessionContext,
    ApiError,
    ComicCoverClient,
    StoryGenerator,
    StoryNames,
    build_story_beats,
    prepare_panel_dialogue,
    resolve_story_names,
)
from comic_cover.client.story import (
    HERO_COLOR,
    RIVAL_COLOR,
    COMPANION_COLOR,
    DEFAULT_SPEAKER_COLOR,
    SPEAKER_PALETTE,
    speaker_color,
)
from comic_cover.models import DialogueLine
from comic_cover.prompts.story import BEAT_NAMES, HERO_LOCK, build_rival_design, get_rival_spec_block
from comic_cover.services.errors import InputValidationError
from comic_cover.services.text_processing import stable_hash


ANSWERS = {
    "gender": "Female",
    "childhood": "Invisible",
    "superpower": "Control time",
    "city": "Dubai",
    "fear": "Spiders",
    "fuel": "Family",
    "strength": "Calm",
    "lesson": "Be kind",
}
COVER_URL = "https://img/cover.jpg"


class FakeClient:
    """Panel and dialogue calls; listed panel numbers fail."""

    def __init__(self, failing_panels=(), failing_dialogue=()):
        self.failing_panels = set(failing_panels)
        self.failing_dialogue = set(failing_dialogue)
        self.panel_calls = []
        self.dialogue_calls = []

    async def generate_panel(self, prompt, input_image_url, seed=None):
        self.panel_calls.append((prompt, input_image_url, seed))
        if len(self.panel_calls) in self.failing_panels:
            raise ApiError(500, "Image generation failed or incomplete (status: failed)")
        return f"https://img/panel-{len(self.panel_calls)}.jpg"

    async def generate_dialogue(self, panel_prompt, user_inputs):
        self.dialogue_calls.append(user_inputs)
        if len(self.dialogue_calls) in self.failing_dialogue:
            raise ApiError(500, "Failed to generate dialogue")
        return [DialogueLine(text="Hero, look out!", speaker="best friend")]


class TimeoutHttp:
    """Stands in for an aiohttp session whose every request hits the total timeout."""

    def __init__(self):
        self.posts = []

    def post(self, url, **kwargs):
        self.posts.append(url)
        raise asyncio.TimeoutError()


def make_session(with_cover=True):
    session = SessionContext(MemoryStorage(), rng=random.Random(3))
    session.save_answers(ANSWERS)
    if with_cover:
        session.save_cover(COVER_URL, "Nova")
    return session


class TestStoryBeats:
    """Panel layout and prompt content."""

    def test_cover_plus_seven_beats(self):
        panels = build_story_beats(ANSWERS, COVER_URL)

        assert len(panels) == 8
        assert panels[0].is_cover and panels[0].image_url == COVER_URL
        assert [p.beat for p in panels[1:]] == BEAT_NAMES
        assert all(p.prompt for p in panels[1:])

    def test_prompts_use_answers(self):
        panels = build_story_beats(ANSWERS, COVER_URL)

        assert "Dubai" in panels[1].prompt
        assert "Invisible" in panels[1].prompt

    def test_confrontation_embeds_rival_design(self):
        panels = build_story_beats(ANSWERS, COVER_URL)
        confrontation = panels[1 + BEAT_NAMES.index("confrontation")].prompt

        assert get_rival_spec_block(build_rival_design("Spiders")) in confrontation

    def test_hero_lock_on_suited_panels(self):
        panels = build_story_beats(ANSWERS, COVER_URL)
        assert any(HERO_LOCK in p.prompt for p in panels[1:])

    def test_rival_design_is_deterministic(self):
        """Case and surrounding whitespace do not change the rival."""
        assert build_rival_design("Spiders") == build_rival_design("  spiders ")
        assert build_rival_design("Spiders").seed == stable_hash("spiders")
        assert "arachnid" in build_rival_design("Spiders").base


class TestDialoguePreparation:
    """Speaker resolution, hero substitution, truncation and colors."""

    def setup_method(self):
        self.names = StoryNames(hero="Nova", rival="Iron Widow", companion="Sam")

    def test_lines_prepared_for_display(self):
        lines = [
            DialogueLine(text="Hero, we did it. Really. Truly!", speaker="best friend"),
            DialogueLine(text="", speaker="hero"),
            DialogueLine(text="You cannot escape.", speaker="Villain"),
        ]

        prepared = prepare_panel_dialogue(lines, self.names)

        assert len(prepared) == 2, "Empty lines are dropped"
        assert prepared[0].speaker == "Sam"
        assert prepared[0].text == "Nova, we did it. Really."
        assert prepared[0].color == COMPANION_COLOR
        assert prepared[1].speaker == "Iron Widow"
        assert prepared[1].color == RIVAL_COLOR

    def test_fixed_colors(self):
        color_map = {}
        assert speaker_color("nova", self.names, color_map) == HERO_COLOR
        assert speaker_color("", self.names, color_map) == DEFAULT_SPEAKER_COLOR
        assert color_map == {}

    def test_other_speakers_get_palette_colors(self):
        """Each new speaker takes the next palette color and keeps it."""
        color_map = {}
        mom = speaker_color("Mom", self.names, color_map)
        coach = speaker_color("Coach", self.names, color_map)

        assert mom == SPEAKER_PALETTE[0]
        assert coach == SPEAKER_PALETTE[1]
        assert speaker_color("mom", self.names, color_map) == mom

    def test_story_names(self):
        session = make_session()
        names = resolve_story_names(session, ANSWERS)

        assert names.hero == "Nova"
        assert names.rival == "Iron Widow"
        assert names.companion == session.companion_name()

    def test_explicit_companion_wins(self):
        session = make_session()
        session.set("companionName", "Sam")

        names = resolve_story_names(session, ANSWERS, companion="  Riley ")

        assert names.companion == "Riley"
        assert session.stored_companion_name == "Sam", "An explicit name is not persisted"

    def test_companion_from_answers(self):
        names = resolve_story_names(make_session(), {**ANSWERS, "companionName": "Jo"})

        assert names.companion == "Jo"

    def test_stored_companion_is_reused(self):
        session = make_session()
        session.set("companionName", "Sam")

        assert resolve_story_names(session, ANSWERS).companion == "Sam"

    def test_pool_pick_is_persisted(self):
        """Without any name, the first render picks one and later renders keep it."""
        session = make_session()
        assert session.stored_companion_name is None

        first = resolve_story_names(session, ANSWERS).companion

        assert session.stored_companion_name == first
        assert resolve_story_names(session, ANSWERS).companion == first


class TestStoryGenerator:
    """Sequential panel generation with per-panel failure isolation."""

    def test_requires_answers_and_cover(self):
        generator = StoryGenerator(FakeClient(), make_session(with_cover=False))

        with pytest.raises(InputValidationError, match="Missing comic inputs or cover image"):
            asyncio.run(generator.generate())

    def test_generates_every_panel_from_cover(self):
        client = FakeClient()
        session = make_session()

        panels = asyncio.run(StoryGenerator(client, session).generate())

        assert len(client.panel_calls) == 7
        assert all(call[1] == COVER_URL for call in client.panel_calls), "Cover is the reference image"
        assert all(call[2] == stable_hash("spiders") for call in client.panel_calls)
        assert [p.image_url for p in panels[1:]] == [f"https://img/panel-{i}.jpg" for i in range(1, 8)]
        assert session.rival_seed == stable_hash("spiders")

    def test_dialogue_request_carries_names(self):
        client = FakeClient()
        session = make_session()

        asyncio.run(StoryGenerator(client, session).generate())
        inputs = client.dialogue_calls[0]

        assert inputs["superheroName"] == "Nova"
        assert inputs["rivalName"] == "Iron Widow"
        assert inputs["companionName"] == session.companion_name()
        assert inputs["city"] == "Dubai"

    def test_failed_panel_does_not_stop_story(self):
        client = FakeClient(failing_panels={3})

        panels = asyncio.run(StoryGenerator(client, make_session()).generate())

        assert panels[3].image_url is None
        assert panels[4].image_url == "https://img/panel-4.jpg"
        assert len(client.panel_calls) == 7

    def test_failed_dialogue_becomes_ellipsis(self):
        client = FakeClient(failing_dialogue={2})

        panels = asyncio.run(StoryGenerator(client, make_session()).generate())

        assert panels[2].dialogue[0].text == "..."
        assert panels[2].dialogue[0].speaker == "Nova"
        assert panels[1].dialogue[0].text == "Hero, look out!"

    def test_companion_name_reaches_dialogue_requests(self):
        client = FakeClient()

        asyncio.run(StoryGenerator(client, make_session(), companion_name="Riley").generate())

        assert all(inputs["companionName"] == "Riley" for inputs in client.dialogue_calls)

    def test_timeouts_do_not_abort_story(self):
        """Requests that time out leave empty panels and '...' lines, and the story finishes."""
        http = TimeoutHttp()
        client = ComicCoverClient("http://localhost:3000", make_session(), http_session=http, timeout_seconds=0.2)

        panels = asyncio.run(StoryGenerator(client, client.session).generate())

        assert len(http.posts) == 14, "Every panel asks for an image and dialogue"
        assert all(p.image_url is None for p in panels[1:])
        assert all(p.dialogue[0].text == "..." for p in panels[1:])
