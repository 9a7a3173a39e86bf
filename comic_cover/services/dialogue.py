"""
Dialogue Service - short comic lines for story panels

Asks the chat model for 1-2 lines per panel and parses the JSON array it
returns. Malformed model output never fails the request: it degrades to
a single editable placeholder line.
"""

import json
import logging
from typing import Any, List, Mapping, Optional

from comic_cover.models.models import DialogueLine, DialogueResult
from comic_cover.prompts.dialogue import get_dialogue_messages
from comic_cover.services.chat import ChatService
from comic_cover.services.errors import DialogueParseError
from comic_cover.services.text_processing import extract_json_array, fear_to_creature

logger = logging.getLogger(__name__)


PLACEHOLDER_TEXT = "No dialogue generated. (Edit me!)"
DEFAULT_DIALOGUE_HERO = "Hero"
DEFAULT_DIALOGUE_RIVAL = "Rival"


def _decode_dialogue(raw: Optional[str], default_speaker: str) -> List[DialogueLine]:
    span = extract_json_array(raw)
    if span is None:
        raise DialogueParseError("No JSON array in model output")

    try:
        entries = json.loads(span, strict=False)
    except json.JSONDecodeError as e:
        raise DialogueParseError(f"Invalid JSON array: {e}") from e

    if not isinstance(entries, list):
        raise DialogueParseError("Model output is not a JSON array")

    lines = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        text = str(entry.get("text") or "").strip()
        if not text:
            continue
        speaker = str(entry.get("speaker") or "").strip() or default_speaker
        lines.append(DialogueLine(text=text, speaker=speaker))
    return lines


def parse_dialogue(raw: Optional[str], default_speaker: str = DEFAULT_DIALOGUE_HERO) -> Optional[List[DialogueLine]]:
    """
    Parse the dialogue array out of free-form model output.

    Takes the greedy first-"[" to last-"]" span and JSON-decodes it.
    Entries that are not objects or have no text are dropped; a missing
    speaker defaults to `default_speaker`.

    Returns:
        The parsed lines, or None when no array is found or it does not decode
    """
    try:
        return _decode_dialogue(raw, default_speaker)
    except DialogueParseError as e:
        logger.warning(f"⚠️ Dialogue parse failed: {e}")
        return None


def placeholder_dialogue(hero_name: str) -> List[DialogueLine]:
    return [DialogueLine(text=PLACEHOLDER_TEXT, speaker=hero_name)]


class DialogueService:
    """Writes panel dialogue through the chat model."""

    def __init__(self, chat: ChatService, model: str = "gpt-4o", temperature: float = 0.7):
        self.chat = chat
        self.model = model
        self.temperature = temperature

    async def generate_dialogue(self, panel_prompt: str, user_inputs: Optional[Mapping[str, Any]] = None) -> DialogueResult:
        """
        Generate dialogue for one panel.

        Args:
            panel_prompt: Scene description of the panel
            user_inputs: Quiz answers plus optional superheroName/rivalName/companionName

        Returns:
            DialogueResult with at least one line and the raw model output

        Raises:
            Exception: the chat collaborator itself failed (transport, auth)
        """
        user_inputs = dict(user_inputs or {})
        hero_name = str(user_inputs.get("superheroName") or "").strip() or DEFAULT_DIALOGUE_HERO
        rival_name = str(user_inputs.get("rivalName") or "").strip() or DEFAULT_DIALOGUE_RIVAL
        rival_creature = fear_to_creature(str(user_inputs.get("fear") or ""))

        logger.info(f"🟦 Dialogue request: hero={hero_name}, rival={rival_name}")
        logger.debug(f"🟦 Rival creature: {rival_creature}")

        messages = get_dialogue_messages(panel_prompt or "", user_inputs, hero_name, rival_name, rival_creature)
        response = await self.chat.chat_completion(
            messages=messages,
            model=self.model,
            temperature=self.temperature,
            purpose="dialogue",
        )
        raw = response["content"]

        lines = parse_dialogue(raw, default_speaker=hero_name)
        if not lines:
            lines = placeholder_dialogue(hero_name)

        logger.info(f"🟩 Dialogue parsed: {len(lines)} line(s)")
        return DialogueResult(dialogue=lines, raw=raw)
