"""
Cover Image Prompt

The single prompt sent to the image model for Issue 01's cover.
"""

from typing import Mapping


def get_cover_prompt(answers: Mapping[str, str], hero_name: str) -> str:
    """
    Generate the cover image prompt.

    Deterministic template: the same answers and name always give the
    same prompt. Interpolates gender, origin city, power, fear,
    motivating memory (fuel), signature strength and core message
    (lesson).

    Args:
        answers: Quiz answers (fuel/strength already defaulted)
        hero_name: Cleaned hero name baked into the title

    Returns:
        Prompt string passed verbatim to the image model
    """
    gender = answers.get("gender", "")
    superpower = answers.get("superpower", "")
    city = answers.get("city", "")
    fear = answers.get("fear", "")
    fuel = answers.get("fuel", "hope")
    strength = answers.get("strength", "courage")
    lesson = answers.get("lesson", "")

    return f"""Create a hyper-realistic 1980s comic-book cover of {hero_name}.
• Render the face from the input image exactly, with unmistakable resemblance. Discard all clothing details from the photo.
• Show the {gender} hero's FULL BODY head-to-toe (hands & feet visible) in a bold front-facing power pose that highlights their {superpower}, with absolutely no chest logo.
• Design a retro comic-book suit in daring color-block panels with a sleek silhouette, matching boots and gloves, accented with subtle neon trim inspired by {superpower}. No chest logo and no cape.
• Their resolve shows: driven by {fuel}, known for {strength}, standing defiant against a looming shadow of {fear}.
• Bake in exactly three text elements:
   – "{hero_name}" at the TOP-LEFT in bold, uppercase comic font.
   – "Issue 01" at the TOP-RIGHT in smaller comic font.
   – The tagline "{lesson}" in a banner at the BOTTOM-CENTER.
• Background: the {city} skyline with dynamic {superpower} effects in vivid 80s comic colors, halftone shading and bold ink lines.
• No other text, logos, speech bubbles or watermarks. The cover fills the whole image with nothing behind it.""".strip()
