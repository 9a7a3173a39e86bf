"""
Unit tests for text processing - quiz answers, names and dialogue text.

All functions under test are pure, so no mocks are needed.

Run with: python -m pytest tests/test_text_processing.py -v
"""

import sys
from pathlib import Path
from types import SimpleNamespace

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from comic_cover.services.text_processing import (
    sanitize_free_text,
    is_blank,
    clean_hero_name,
    substitute_hero_placeholder,
    stable_hash,
    title_case,
    fear_to_creature,
    rival_name_from_fear,
    normalize_speaker_name,
    resolve_companion_name,
    truncate_to_two_sentences,
    extract_json_array,
    RIVAL_SUFFIXES,
    RIVAL_EPITHETS,
)


class TestSanitizeFreeText:
    """Free-text quiz answers are capped at four words."""

    def test_extra_words_are_dropped(self):
        """The fifth word and everything after it is discarded."""
        assert sanitize_free_text("one two three four five six") == "one two three four"

    def test_whitespace_is_collapsed(self):
        """Runs of spaces, tabs and newlines become single spaces."""
        assert sanitize_free_text("  Control\t\n  time") == "Control time"

    def test_trailing_space_kept_under_cap(self):
        """A just-typed space survives so the user can keep typing."""
        assert sanitize_free_text("Control time ") == "Control time "

    def test_trailing_space_dropped_at_cap(self):
        """At four words the answer ends at the last kept word."""
        assert sanitize_free_text("one two three four ") == "one two three four"

    def test_never_more_than_four_words(self):
        """Word count of the result never exceeds four."""
        for raw in ["a b c d e f g", "   x   y   z   w   v ", "single", ""]:
            assert len(sanitize_free_text(raw).split()) <= 4, f"Too many words for {raw!r}"

    def test_none_becomes_empty(self):
        assert sanitize_free_text(None) == ""

    def test_is_blank(self):
        assert is_blank("   ")
        assert is_blank(None)
        assert not is_blank(" Dubai ")


class TestHeroNames:
    """Hero name cleanup and placeholder substitution."""

    def test_quotes_are_stripped(self):
        """Model output wrapped in quotes or backticks is unwrapped."""
        assert clean_hero_name('"Chrono Blaze"') == "Chrono Blaze"
        assert clean_hero_name("`Nova`") == "Nova"

    def test_whitespace_is_collapsed(self):
        assert clean_hero_name("  Nova   Star \n") == "Nova Star"

    def test_empty_name_falls_back(self):
        """Nothing usable gives the generic name."""
        assert clean_hero_name("") == "The Hero"
        assert clean_hero_name(None) == "The Hero"
        assert clean_hero_name('""') == "The Hero"

    def test_long_name_is_truncated(self):
        assert len(clean_hero_name("X" * 200)) == 60

    def test_hero_placeholder_replaced(self):
        """Generic "Hero" becomes the real name, case-insensitively."""
        assert substitute_hero_placeholder("Hero, run!", "Nova") == "Nova, run!"
        assert substitute_hero_placeholder("go HERO go", "Nova") == "go Nova go"

    def test_brace_placeholder_replaced(self):
        assert substitute_hero_placeholder("Go, {heroName}!", "Nova") == "Go, Nova!"

    def test_partial_words_untouched(self):
        """Only whole words match."""
        assert substitute_hero_placeholder("Heroic deeds", "Nova") == "Heroic deeds"


class TestRivalNaming:
    """Rival names and creatures derived from the fear answer."""

    def test_stable_hash_values(self):
        """h = h * 31 + code unit, starting from 0."""
        assert stable_hash("") == 0
        assert stable_hash("a") == 97
        assert stable_hash("ab") == 97 * 31 + 98

    def test_stable_hash_stays_32_bit(self):
        assert 0 <= stable_hash("a fairly long fear answer " * 20) <= 0xFFFFFFFF

    def test_title_case(self):
        assert title_case("lost in  space") == "Lost In Space"

    def test_curated_names(self):
        """Well-known fears map to fixed names."""
        assert rival_name_from_fear("heights") == "Lord Vertigo"
        assert rival_name_from_fear("Failure") == "The Dreadwraith"
        assert rival_name_from_fear("being alone") == "Echo Null"
        assert rival_name_from_fear("the dark") == "Nightveil"
        assert rival_name_from_fear("Spiders") == "Iron Widow"

    def test_empty_fear(self):
        assert rival_name_from_fear("") == "The Nemesis"
        assert rival_name_from_fear(None) == "The Nemesis"
        assert rival_name_from_fear("!!!") == "The Nemesis"

    def test_single_word_gets_suffix(self):
        """A plain single word is dressed with a hash-picked suffix."""
        suffix = RIVAL_SUFFIXES[stable_hash("clowns") % len(RIVAL_SUFFIXES)]
        assert rival_name_from_fear("clowns") == f"The Clowns {suffix}"

    def test_leading_my_and_article_dropped(self):
        assert rival_name_from_fear("my clowns") == rival_name_from_fear("clowns")

    def test_strong_noun_gets_epithet(self):
        """Monster nouns get an epithet in front instead of a suffix."""
        epithet = RIVAL_EPITHETS[stable_hash("ghost") % len(RIVAL_EPITHETS)]
        assert rival_name_from_fear("a ghost") == f"The {epithet} Ghost"

    def test_rival_name_is_deterministic(self):
        """The same fear always gives the same rival."""
        for fear in ["losing my family", "clowns", "Public speaking", "the ocean deep"]:
            assert rival_name_from_fear(fear) == rival_name_from_fear(fear)

    def test_creature_for_known_fear(self):
        assert "arachnid" in fear_to_creature("spiders")
        assert "cliff-golem" in fear_to_creature("Fear of heights")

    def test_creature_for_empty_fear(self):
        assert "faceless void knight" in fear_to_creature("")

    def test_creature_for_unknown_fear(self):
        """Unknown fears are quoted into a generic monster description."""
        assert '"clowns"' in fear_to_creature("clowns")


class TestDialogueText:
    """Speaker normalization, bubble truncation and JSON extraction."""

    def setup_method(self):
        self.names = ("Nova", "Nightveil", "Sam")

    def test_hero_aliases(self):
        """Hero labels, narrator and captions all map to the hero."""
        for label in ["hero", "HERO", "The Hero", "Narrator", "caption", "Main Character"]:
            assert normalize_speaker_name(label, *self.names) == "Nova", f"{label} should map to hero"

    def test_companion_labels(self):
        for label in ["Best Friend", "best_friend", "Sidekick", "companion"]:
            assert normalize_speaker_name(label, *self.names) == "Sam", f"{label} should map to companion"

    def test_rival_labels(self):
        for label in ["Rival", "villain", "The Enemy"]:
            assert normalize_speaker_name(label, *self.names) == "Nightveil", f"{label} should map to rival"

    def test_unknown_label_unchanged(self):
        assert normalize_speaker_name("  Mom ", *self.names) == "Mom"
        assert normalize_speaker_name(None, *self.names) == ""

    def test_companion_name_resolution(self):
        """Explicit name beats session-stored name beats the default."""
        session = SimpleNamespace(stored_companion_name="Riley")
        assert resolve_companion_name(" Alex ", session) == "Alex"
        assert resolve_companion_name(None, session) == "Riley"
        assert resolve_companion_name("", None) == "Best Friend"
        assert resolve_companion_name(None, SimpleNamespace(stored_companion_name=None)) == "Best Friend"

    def test_truncate_keeps_two_sentences(self):
        assert truncate_to_two_sentences("One. Two! Three?") == "One. Two!"
        assert truncate_to_two_sentences("Just one line") == "Just one line"
        assert truncate_to_two_sentences(None) == ""

    def test_extract_json_array(self):
        """First "[" to last "]", nested brackets included."""
        raw = 'Sure! Here you go: [{"text": "Hi", "tags": [1, 2]}] Enjoy.'
        assert extract_json_array(raw) == '[{"text": "Hi", "tags": [1, 2]}]'

    def test_extract_json_array_missing(self):
        assert extract_json_array("no array here") is None
        assert extract_json_array("") is None
