"""
Tests for utils/title_utils.py

Coverage:
- normalize(): casing, punctuation runs, idempotence, unicode passthrough
- similarity(): identity, symmetry, short strings, repeated bigrams
- title_slugs(): romaji/English ordering and deduplication
"""

import pytest

from utils.title_utils import normalize, similarity, title_slugs


class TestNormalize:
    """Test title normalization."""

    def test_normalize_is_case_insensitive(self):
        """Should produce the same slug regardless of case and punctuation."""
        assert normalize("Attack On Titan!!") == normalize("attack on titan")

    @pytest.mark.parametrize(
        "title,expected",
        [
            ("Attack On Titan!!", "attack on titan"),
            ("Re:Zero - Starting Life in Another World", "re zero starting life in another world"),
            ("  Spy x Family  ", "spy x family"),
            ("Jujutsu_Kaisen", "jujutsu kaisen"),
            ("Mob Psycho 100 II", "mob psycho 100 ii"),
        ],
    )
    def test_normalize_examples(self, title, expected):
        """Should collapse every non-alphanumeric run to a single space."""
        assert normalize(title) == expected

    @pytest.mark.parametrize(
        "title",
        ["Kaguya-sama: Love is War?", "Fate/Zero", "86 -Eighty Six-", "進撃の巨人 Season 2", ""],
    )
    def test_normalize_idempotent(self, title):
        """normalize(normalize(x)) should equal normalize(x)."""
        once = normalize(title)
        assert normalize(once) == once

    def test_normalize_keeps_unicode_letters(self):
        """Should keep non-Latin letters intact."""
        assert normalize("進撃の巨人") == "進撃の巨人"

    def test_normalize_handles_none(self):
        """Should return empty string for None."""
        assert normalize(None) == ""


class TestSimilarity:
    """Test bigram similarity scoring."""

    @pytest.mark.parametrize("text", ["naruto", "one piece", "ab", "進撃の巨人"])
    def test_identical_strings_score_one(self, text):
        """Identical non-empty strings should score 1.0."""
        assert similarity(text, text) == 1.0

    @pytest.mark.parametrize(
        "first,second",
        [
            ("naruto", "naruto shippuden"),
            ("attack on titan", "shingeki no kyojin"),
            ("aaaa", "aa"),
            ("a", "abc"),
            ("", "naruto"),
        ],
    )
    def test_symmetric(self, first, second):
        """similarity(a, b) should equal similarity(b, a)."""
        assert similarity(first, second) == similarity(second, first)

    def test_short_strings_score_zero(self):
        """Strings shorter than two characters should score 0.0 unless equal."""
        assert similarity("a", "b") == 0.0
        assert similarity("a", "ab") == 0.0
        assert similarity("", "naruto") == 0.0

    def test_no_shared_bigrams(self):
        """Completely different strings should score 0.0."""
        assert similarity("abc", "xyz") == 0.0

    def test_partial_overlap(self):
        """Should score a prefix match by shared bigrams."""
        # naruto: 5 bigrams, narutoshippuden: 14 bigrams, 5 shared
        assert similarity("naruto", "naruto shippuden") == pytest.approx(10 / 19)

    def test_repeated_bigrams_counted(self):
        """Repeated bigrams should count once per occurrence."""
        # "aaaa" has aa x3, "aaa" has aa x2 -> 2 * 2 / (3 + 2)
        assert similarity("aaaa", "aaa") == pytest.approx(0.8)

    def test_whitespace_ignored(self):
        """Whitespace differences should not change the score."""
        assert similarity("one piece", "onepiece") == 1.0

    def test_score_in_range(self):
        """Scores should stay within [0, 1]."""
        score = similarity("fullmetal alchemist", "fullmetal alchemist brotherhood")
        assert 0.0 <= score <= 1.0


class TestTitleSlugs:
    """Test slug ordering for reconciliation."""

    def test_romaji_first(self):
        """Should try romaji before English."""
        assert title_slugs("Shingeki no Kyojin", "Attack on Titan") == [
            "shingeki no kyojin",
            "attack on titan",
        ]

    def test_identical_titles_tried_once(self):
        """Should not repeat a slug when both titles normalize the same."""
        assert title_slugs("Test Anime", "test anime!") == ["test anime"]

    def test_missing_english_falls_back_to_romaji(self):
        """Should use romaji alone when English is missing."""
        assert title_slugs("Naruto", None) == ["naruto"]

    def test_missing_romaji_falls_back_to_english(self):
        """Should use English alone when romaji is missing."""
        assert title_slugs(None, "Naruto") == ["naruto"]

    def test_no_titles(self):
        """Should return no slugs when the media has no usable title."""
        assert title_slugs(None, None) == []
