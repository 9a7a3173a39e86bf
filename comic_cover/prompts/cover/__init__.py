"""
Cover Prompts Package

This package contains prompts for the Issue 01 cover:
- cover_image: the image model prompt with face fidelity and baked title
- hero_name: chat messages asking for a one- or two-word hero name
"""

from .cover_image import get_cover_prompt
from .hero_name import get_hero_name_messages, HERO_NAME_SYSTEM_PROMPT

__all__ = [
    "get_cover_prompt",
    "get_hero_name_messages",
    "HERO_NAME_SYSTEM_PROMPT",
]
