"""
Text Processing Service for Quiz Answers, Names and Dialogue

This module provides pure text processing functions for:
- Quiz answer sanitization (word cap)
- Hero name cleanup (chat model output)
- Rival naming and creature descriptions derived from the fear answer
- Speaker label normalization and bubble truncation (dialogue output)

These are standalone functions (not class methods) for easy reuse
across the API routes, services and the client flow.

Architecture:
- Pure functions with no external dependencies (only re)
- Deterministic: the same input always yields the same output, so the
  rival looks and sounds the same on every panel
"""

import re
from typing import Optional

from comic_cover.config.limits import (
    QUIZ_MAX_WORDS,
    HERO_NAME_MAX_LENGTH,
    MAX_SENTENCES_PER_BUBBLE,
)


DEFAULT_HERO_NAME = "The Hero"
DEFAULT_RIVAL_NAME = "The Nemesis"
DEFAULT_COMPANION_NAME = "Best Friend"


# =========================================================================
# QUIZ ANSWERS
# =========================================================================

def sanitize_free_text(raw: Optional[str], max_words: int = QUIZ_MAX_WORDS) -> str:
    """
    Cap a free-text answer at `max_words` words.

    Internal whitespace is collapsed and leading whitespace stripped.
    While the answer is still under the cap, a trailing space the user
    just typed is kept so they can keep typing; once the cap is reached
    the answer ends at the last kept word and extra words are dropped.

    Examples:
        "  Control   time " -> "Control time "
        "one two three four five" -> "one two three four"
        "one two three four " -> "one two three four"
    """
    collapsed = re.sub(r"\s+", " ", raw or "").lstrip()
    words = [w for w in collapsed.split(" ") if w]
    kept = words[:max_words]
    text = " ".join(kept)
    if kept and len(kept) < max_words and collapsed.endswith(" "):
        text += " "
    return text


def is_blank(value: Optional[str]) -> bool:
    return not (value or "").strip()


# =========================================================================
# HERO NAMES
# =========================================================================

def clean_hero_name(raw: Optional[str]) -> str:
    """
    Clean a hero name returned by the chat model.

    Strips surrounding quotes and backticks, collapses whitespace and
    cuts the result to HERO_NAME_MAX_LENGTH characters.

    Returns:
        The cleaned name, or "The Hero" when nothing usable remains
    """
    name = (raw or "").strip()
    name = re.sub(r'^["\'`]+|["\'`]+$', "", name)
    name = re.sub(r"\s+", " ", name)[:HERO_NAME_MAX_LENGTH]
    return name or DEFAULT_HERO_NAME


def substitute_hero_placeholder(text: str, hero_name: str) -> str:
    """Replace the generic "Hero" and {heroName} placeholders with the real name."""
    text = re.sub(r"\bHero\b", hero_name, text or "", flags=re.IGNORECASE)
    return re.sub(r"\{heroName\}", hero_name, text, flags=re.IGNORECASE)


# =========================================================================
# RIVAL (derived from the fear answer)
# =========================================================================

def stable_hash(value: str) -> int:
    """
    Deterministic 32-bit string hash (h = h * 31 + code unit).

    Works on UTF-16 code units so seeds match the ones the web client
    persisted under `rivalSeed`.
    """
    h = 0
    data = (value or "").encode("utf-16-le")
    for i in range(0, len(data), 2):
        h = (h * 31 + (data[i] | (data[i + 1] << 8))) & 0xFFFFFFFF
    return h


def title_case(value: str) -> str:
    """Upper-case the first letter of every word, leave the rest untouched."""
    return " ".join(w[0].upper() + w[1:] for w in value.split() if w)


# Ordered: the first matching pattern wins
_CREATURES = [
    (r"(height|fall|vertigo)",
     "a towering cliff-golem of crumbling rock and steel girders, howling wind swirling around it"),
    (r"(failure|loser|not good enough|waste|potential)",
     "a shadow wraith stitched with torn report cards and shattered trophies, faces of doubt flickering across its surface"),
    (r"(rejection|abandon|lonely|alone)",
     "a hollow-eyed banshee made of cracked mirrors, every reflection turning away"),
    (r"(dark|night)",
     "an ink-black smoke serpent with glowing ember eyes, swallowing streetlights as it moves"),
    (r"(spider|insect|bug)",
     "a chittering iron-backed arachnid the size of a car, cables and wires for legs"),
    (r"(snake|serpent)",
     "a neon-scaled serpent coiled around rusted scaffolding, fangs dripping fluorescent venom"),
    (r"(public speaking|stage|crowd)",
     "a many-mouthed herald made of microphones and tangled cables, voices booming from every direction"),
    (r"(death|mortality)",
     "a skeletal monarch in a cloak of falling clock-hands, each tick cutting the air"),
    (r"(failure to protect|family|loved ones)",
     "a guardian-golem gone rogue, its armor plated with broken family photos"),
]


def fear_to_creature(fear_raw: Optional[str]) -> str:
    """Turn an abstract fear into a vivid monster description."""
    fear = (fear_raw or "").lower().strip()

    for pattern, creature in _CREATURES:
        if re.search(pattern, fear):
            return creature

    if not fear:
        return "a faceless void knight woven from stormclouds and static"
    return (
        f'a monstrous embodiment of "{fear_raw}", visualized as a fearsome '
        f"creature or supernatural being in full detail"
    )


_RIVAL_NAMES = [
    (r"(height|vertigo|fall)", "Lord Vertigo"),
    (r"(failure|not good enough|waste|potential|loser)", "The Dreadwraith"),
    (r"(rejection|abandon|alone|lonely)", "Echo Null"),
    (r"(dark|night)", "Nightveil"),
    (r"(spider|insect|bug)", "Iron Widow"),
    (r"(snake|serpent)", "Neon Seraphis"),
    (r"(public speaking|stage|crowd)", "Many-Mouth"),
    (r"(death|mortality)", "King Thanix"),
    (r"dementor", "The Dreadmonger"),
]

_STRONG_NOUNS = re.compile(
    r"(creature|beast|demon|wraith|phantom|reaper|fiend|spirit|guardian|monster|witch|"
    r"warlock|shadow|specter|serpent|spider|ghost|golem|titan|colossus|kraken|dragon)",
    re.IGNORECASE,
)
RIVAL_EPITHETS = ["Dread", "Night", "Shadow", "Void", "Grave", "Hex", "Ash",
                  "Iron", "Storm", "Nether", "Bone", "Blood", "Frost", "Ember"]
RIVAL_SUFFIXES = ["Wraith", "Monger", "Reaver", "Shade", "Maul", "Bane",
                  "Ruin", "Scourge", "Tyrant"]


def rival_name_from_fear(fear_raw: Optional[str]) -> str:
    """
    Derive a scary, deterministic rival name from the fear answer.

    Well-known fears map to curated names. Anything else is cleaned
    (leading "my" and articles dropped) and dressed with an epithet or
    suffix picked by hash, e.g. "clowns" -> "The Clowns Bane".
    """
    raw = (fear_raw or "").strip()
    fear = raw.lower()

    if not fear:
        return DEFAULT_RIVAL_NAME

    for pattern, name in _RIVAL_NAMES:
        if re.search(pattern, fear):
            return name

    cleaned = re.sub(r"my\s+", "", raw, count=1, flags=re.IGNORECASE)
    cleaned = re.sub(r"[^a-zA-Z0-9\s\-]", " ", cleaned)
    cleaned = re.sub(r"\s+", " ", cleaned).strip()
    base = re.sub(r"^(a|an|the)\s+", "", cleaned, flags=re.IGNORECASE).strip()
    if not base:
        return DEFAULT_RIVAL_NAME

    h = stable_hash(base)

    if re.search(r"\s", base):
        epithet = RIVAL_EPITHETS[h % len(RIVAL_EPITHETS)]
        already_has = re.search(rf"\b{epithet}\b", base, re.IGNORECASE)
        named = f"The {'' if already_has else epithet + ' '}{title_case(base)}"
    elif _STRONG_NOUNS.search(base):
        epithet = RIVAL_EPITHETS[h % len(RIVAL_EPITHETS)]
        named = f"The {epithet} {title_case(base)}"
    else:
        suffix = RIVAL_SUFFIXES[h % len(RIVAL_SUFFIXES)]
        named = f"The {title_case(base)} {suffix}"

    return re.sub(r"\s+", " ", named).strip()


# =========================================================================
# DIALOGUE
# =========================================================================

HERO_ALIASES = {"hero", "thehero", "maincharacter", "protagonist",
                "narrator", "caption", "voiceover"}
_COMPANION_PATTERN = re.compile(r"(bestfriend|companion|friend|sidekick)")
_RIVAL_PATTERN = re.compile(r"(rival|villain|enemy|antagonist)")


def normalize_speaker_name(label: Optional[str], hero: str, rival: str, companion: str) -> str:
    """
    Map a generic speaker label from the model onto a concrete name.

    The label is lower-cased and stripped of non-letters before matching:
    hero aliases (including narrator/caption) map to `hero`, anything
    mentioning a friend or sidekick maps to `companion`, anything
    mentioning a rival or villain maps to `rival`. Unknown labels are
    returned unchanged (trimmed).
    """
    speaker = (label or "").strip()
    norm = re.sub(r"[^a-z]", "", speaker.lower())

    if norm in HERO_ALIASES:
        return hero
    if _COMPANION_PATTERN.search(norm):
        return companion
    if _RIVAL_PATTERN.search(norm):
        return rival
    return speaker


def resolve_companion_name(prop: Optional[str], session=None) -> str:
    """
    Pick the display name for the sidekick.

    An explicit name wins, then the name persisted in the session,
    then the generic "Best Friend".
    """
    if prop and prop.strip():
        return prop.strip()
    stored = session.stored_companion_name if session is not None else None
    if stored and stored.strip():
        return stored.strip()
    return DEFAULT_COMPANION_NAME


def truncate_to_two_sentences(text: Optional[str], max_sentences: int = MAX_SENTENCES_PER_BUBBLE) -> str:
    """Keep the first sentences of a line so it fits in a speech bubble."""
    t = str(text or "").strip()
    if not t:
        return t
    parts = re.split(r"(?<=[.!?])\s+", t)
    return " ".join(parts[:max_sentences])


def extract_json_array(raw: Optional[str]) -> Optional[str]:
    """
    Return the span from the first "[" to the last "]" in model output.

    Greedy match, so nested brackets stay inside the span.
    """
    if not raw:
        return None
    match = re.search(r"\[[\s\S]*\]", raw)
    return match.group(0) if match else None
