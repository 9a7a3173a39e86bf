"""
Story Prompts Package

This package contains prompts for the origin story pages:
- rival_design: deterministic rival look derived from the fear answer
- story_beats: seven panel prompts with a hero identity lock
"""

from .rival_design import RivalDesign, build_rival_design, get_rival_spec_block
from .story_beats import HERO_LOCK, BEAT_NAMES, get_story_beat_prompts

__all__ = [
    "RivalDesign",
    "build_rival_design",
    "get_rival_spec_block",
    "HERO_LOCK",
    "BEAT_NAMES",
    "get_story_beat_prompts",
]
