"""
Rival Design

A fixed visual description of the rival, picked by hashing the fear
answer, so the image model draws the same creature on every panel.
"""

from dataclasses import dataclass
from typing import Optional

from comic_cover.services.text_processing import fear_to_creature, stable_hash


PALETTES = [
    "coal black + ember orange + ash gray",
    "ultraviolet + toxic green + chrome",
    "rust red + oil slick blue + bone white",
    "neon cyan + magenta glow + graphite",
    "sandstone beige + obsidian + eclipse purple",
]
EYE_STYLES = [
    "hollow sockets glowing with ringed light",
    "compound eyes with rotating pupils",
    "single cyclopean iris that dilates like a camera aperture",
    "many slit-pupiled eyes blinking asynchronously",
    "empty eye-plates that project symbols into the air",
]
MOUTH_STYLES = [
    "tessellated jaws that unfold in segments",
    "glass teeth that chime when it growls",
    "a seam that splits open vertically",
    "a speaker-grille maw that booms sub-bass",
    "mandibles that interlock like clockwork",
]
MOTION_STYLES = [
    "glides with low friction, leaving a shimmer trail",
    "moves in abrupt stutters, skipping frames",
    "coils and uncoils rhythmically like a machine spring",
    "pivots on limb-anchors, dragging cables",
    "flows like smoke that occasionally snaps solid",
]
SCALES = [
    "two heads taller than the hero",
    "massive, filling half the frame",
    "lean but towering with elongated limbs",
    "stocky and dense, like compacted metal",
    "whip-thin with exaggerated reach",
]
WEAK_POINTS = [
    "a faint sigil of the hero's fear flickers on its chest",
    "hairline cracks radiate from a heart-shaped core",
    "a glowing seam along the ribs pulses with each breath",
    "runes fade in and out along its spine",
    "a crown-like halo fractures whenever it's struck",
]


@dataclass(frozen=True)
class RivalDesign:
    base: str
    palette: str
    eyes: str
    mouth: str
    motion: str
    scale: str
    weak_point: str
    seed: int


def build_rival_design(fear: Optional[str]) -> RivalDesign:
    """Pick one option from each list by the hash of the normalized fear."""
    h = stable_hash((fear or "").lower().strip())

    def pick(options):
        return options[h % len(options)]

    return RivalDesign(
        base=fear_to_creature(fear),
        palette=pick(PALETTES),
        eyes=pick(EYE_STYLES),
        mouth=pick(MOUTH_STYLES),
        motion=pick(MOTION_STYLES),
        scale=pick(SCALES),
        weak_point=pick(WEAK_POINTS),
        seed=h,
    )


def get_rival_spec_block(design: RivalDesign) -> str:
    """Render the design as the block embedded in confrontation prompts."""
    return f"""RIVAL DESIGN SPEC (must match EXACTLY in every panel):
- Core concept: {design.base}
- Color palette: {design.palette}
- Eyes: {design.eyes}
- Mouth: {design.mouth}
- Motion: {design.motion}
- Scale: {design.scale}
- Weak-point motif: {design.weak_point}
Rules: The rival must look IDENTICAL across panels: same silhouette, limb count, materials, face/eye/mouth geometry, colors, and motifs. Do NOT redesign or re-style it."""
