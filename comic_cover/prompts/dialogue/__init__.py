"""
Dialogue Prompts Package

- panel_dialogue: comic writer prompt returning a JSON array of {text, speaker}
"""

from .panel_dialogue import get_dialogue_system_prompt, get_dialogue_messages

__all__ = [
    "get_dialogue_system_prompt",
    "get_dialogue_messages",
]
