"""
Prompts Package for Comic Cover

Organized by feature:
- cover: cover image prompt and hero naming
- dialogue: per-panel comic dialogue
- story: origin story panel prompts and rival design

Each prompt is a function that accepts context and returns a formatted
prompt string (or chat messages).
"""

from .cover import get_cover_prompt, get_hero_name_messages
from .dialogue import get_dialogue_messages, get_dialogue_system_prompt
from .story import build_rival_design, get_rival_spec_block, get_story_beat_prompts

__all__ = [
    "get_cover_prompt",
    "get_hero_name_messages",
    "get_dialogue_messages",
    "get_dialogue_system_prompt",
    "build_rival_design",
    "get_rival_spec_block",
    "get_story_beat_prompts",
]
