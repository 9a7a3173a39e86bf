"""
Story Beat Prompts

Seven panel prompts that follow the cover: flashback, first power,
training, first suit, confrontation, victory and reflection. Each one
reuses the cover as the reference image, so every prompt insists on an
exact face and hair match.
"""

from typing import List, Mapping

from .rival_design import RivalDesign, get_rival_spec_block


HERO_LOCK = (
    "HERO MUST MATCH COVER EXACTLY: same human face and hair, same hero suit; "
    "normal human anatomy (no scales, claws, fangs, or extra limbs); do NOT transform the hero."
)

BEAT_NAMES = [
    "flashback",
    "first_power",
    "training",
    "first_suit",
    "confrontation",
    "victory",
    "reflection",
]


def get_story_beat_prompts(answers: Mapping[str, str], rival: RivalDesign) -> List[str]:
    """
    Generate the seven story panel prompts.

    Args:
        answers: Quiz answers (childhood, superpower, city, fear, strength, lesson)
        rival: Rival design derived from the fear answer

    Returns:
        Prompts in BEAT_NAMES order
    """
    childhood = answers.get("childhood", "")
    superpower = answers.get("superpower", "")
    city = answers.get("city", "")
    fear = answers.get("fear", "")
    strength = answers.get("strength", "courage")
    lesson = answers.get("lesson", "")
    rival_spec = get_rival_spec_block(rival)

    return [
        # flashback
        f"A golden flashback. The hero as a child, a de-aged version with facial features and hair that are an "
        f"*identical, unmistakable match to the cover image*, sits sideways on old playground equipment in ordinary "
        f"childhood clothes, clutching a picture representing \"{childhood}\". Best Friend (always opposite gender of hero) "
        f"is nearby, offering silent support. The background is a faded corner of {city}: cracked pavement and playground "
        f"shadows. Absolutely no superhero costume. The child's face and hair are identical to the cover, just younger. "
        f"Cinematic, 80s comic art like other panels, no text.",

        # first power
        f"On a bright afternoon in {city}, the hero stands in a lively city park. IMPORTANT: The hero must be wearing ONLY "
        f"regular, modern human clothes, no superhero costume. Their face and hair must be an *identical, photorealistic, "
        f"slightly younger match to the cover image*. Families relax on picnic blankets. Children play in the distance. "
        f"Suddenly, {superpower} bursts to life for the first time, scattering petals. Best Friend peeks from behind a "
        f"bench; the rival watches from the shade. 1980s comic art, no text.",

        # training
        f"Training montage: The hero alone, dramatic profile (not facing camera). Hero is in training clothes with jumper "
        f"and training shoes. Exact face & hair match to cover. Show dynamic athletic pose controlling {superpower}. "
        f"High-energy setting (rooftop at dusk / neon-lit gym / windy field). 80s comic art, no text.",

        # first suit
        f"First suit moment: dusk rooftop in {city}. Hero's face/hair EXACTLY match cover in a triumph pose with "
        f"{superpower} unleashed. Best Friend (always the opposite gender) present in regular clothes in admiration. "
        f"Pose playful/cheeky. Powers swirl with confidence. 80s comic art, no text.",

        # confrontation
        f"Rain-soaked alley at night. {HERO_LOCK} Hero faces a single rival in tight side profile, inches apart. "
        f"{rival_spec} One rival only; design unchanged. 80s comic art, no text.",

        # victory
        f"In the middle of a bustling street or open plaza in {city}, surrounded by amazed pedestrians, the hero unleashes "
        f"the full force of {strength} to finally overcome the rival, who embodies {fear}. The hero's face, hair, & "
        f"superhero costume are an *identical match to the cover image*, no creative liberty. In a dynamic side pose, not "
        f"facing forward, the hero sends the rival tumbling into swirling shadows, broken symbols of \"{fear}\" scattering "
        f"across the pavement. Best Friend (always the opposite gender) cheers from the crowd, arms raised. Local city "
        f"details: street signs, market stalls, banners. No Logos. Dramatic, hopeful, energetic 80s comic art, no text.",

        # reflection
        f"Dawn. The hero sits/stands sideways atop a ledge in {city} looking into the horizon, reflective pose with cape "
        f"flying. Exact face/hair/suit match to cover. Skyline with local landmarks. The lesson \"{lesson}\" is felt in "
        f"posture and golden light. Alone, no other characters. 80s comic art, no text.",
    ]
