"""
Hero Name Prompt

Asks the chat model for a punchy superhero name.
"""

from typing import Dict, List, Mapping


HERO_NAME_SYSTEM_PROMPT = (
    "You are a comic-book editor. Propose a punchy one- or two-word superhero name. "
    "Respond with ONLY the name."
)


def get_hero_name_messages(answers: Mapping[str, str]) -> List[Dict[str, str]]:
    """Build the chat messages for hero naming from the quiz answers."""
    user = f"""Gender: {answers.get("gender", "")}
Superpower: {answers.get("superpower", "")}
City: {answers.get("city", "")}
Lesson/Tagline: {answers.get("lesson", "")}"""

    return [
        {"role": "system", "content": HERO_NAME_SYSTEM_PROMPT},
        {"role": "user", "content": user},
    ]
