"""
Panel Dialogue Prompt

Comic writer prompt for one or two short lines per story panel.
"""

import json
from typing import Any, Dict, List, Mapping


def get_dialogue_system_prompt(hero_name: str, rival_name: str, rival_creature: str) -> str:
    """
    Generate the comic writer system prompt.

    The model is told to use exactly three speaker labels: the hero's
    name, "Best Friend" and the rival's name. Labels it invents anyway
    are mapped back by normalize_speaker_name on the client.

    Args:
        hero_name: Hero name ("Hero" when unknown)
        rival_name: Rival name ("Rival" when unknown)
        rival_creature: Creature description derived from the fear answer

    Returns:
        System prompt string
    """
    return f"""You are a comic book writer.
Given a panel's scene description and the hero's background, write 1-2 short, emotional comic-style lines for dialogue or narration.
- Use "{hero_name}" for the hero, "Best Friend" for the sidekick/supporting character.
- The rival is "{rival_name}", who is {rival_creature}.
- Match the mood of the scene and keep it natural, without long paragraphs.
- Always return your response as a JSON array, each entry is an object: {{ "text": "...", "speaker": "{hero_name}"|"Best Friend"|"{rival_name}" }}.
Do not invent other speakers."""


def get_dialogue_messages(
    panel_prompt: str,
    user_inputs: Mapping[str, Any],
    hero_name: str,
    rival_name: str,
    rival_creature: str,
) -> List[Dict[str, str]]:
    """Build the chat messages for one panel's dialogue."""
    user = f"""Hero's details: {json.dumps(dict(user_inputs), ensure_ascii=False)}
Scene: {panel_prompt}"""

    return [
        {"role": "system", "content": get_dialogue_system_prompt(hero_name, rival_name, rival_creature)},
        {"role": "user", "content": user},
    ]
