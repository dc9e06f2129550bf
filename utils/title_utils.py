"""Title normalization and similarity scoring.

Consolidates title comparison logic in a single module for consistency.
Used by the cross-reference resolver and the provider search fallback
to rank candidate listings against a canonical title.
"""

import re
from collections import Counter

_NON_ALNUM = re.compile(r"[\W_]+")
_WHITESPACE = re.compile(r"\s+")


def normalize(title: str | None) -> str:
    """Normalize a title into a comparable slug.

    Lower-cases, replaces every run of non-alphanumeric characters with a
    single space and trims. Unicode letters and digits count as
    alphanumeric, so non-Latin titles keep their characters.

    Args:
        title: Raw title (may be None)

    Returns:
        Normalized slug ("" for empty input)

    Examples:
        "Attack On Titan!!" -> "attack on titan"
        "Re:Zero - Starting Life" -> "re zero starting life"
        "進撃の巨人" -> "進撃の巨人"
    """
    if not title:
        return ""
    return _NON_ALNUM.sub(" ", title.lower()).strip()


def _bigrams(text: str) -> Counter:
    return Counter(text[i : i + 2] for i in range(len(text) - 1))


def similarity(first: str, second: str) -> float:
    """Bigram overlap (Sorensen-Dice) between two strings.

    Whitespace is ignored. Repeated bigrams are counted as many times as
    they occur, so repeated substrings weigh more.

    Args:
        first: First string
        second: Second string

    Returns:
        Score between 0.0 (nothing shared) and 1.0 (identical)

    Examples:
        similarity("naruto", "naruto") -> 1.0
        similarity("naruto", "naruto shippuden") -> ~0.53
        similarity("a", "b") -> 0.0
    """
    first = _WHITESPACE.sub("", first or "")
    second = _WHITESPACE.sub("", second or "")

    if first == second:
        return 1.0
    if len(first) < 2 or len(second) < 2:
        return 0.0

    first_bigrams = _bigrams(first)
    second_bigrams = _bigrams(second)
    intersection = sum((first_bigrams & second_bigrams).values())

    return (2.0 * intersection) / (len(first) + len(second) - 2)


def title_slugs(romaji: str | None, english: str | None) -> list[str]:
    """Build the ordered list of slugs to try for a canonical title.

    Romaji first, English second; each falls back to the other when
    missing. The English slug is dropped when it adds nothing.

    Examples:
        ("Shingeki no Kyojin", "Attack on Titan") -> ["shingeki no kyojin", "attack on titan"]
        ("Naruto", None) -> ["naruto"]
    """
    romaji_slug = normalize(romaji or english)
    english_slug = normalize(english or romaji)

    slugs = [slug for slug in (romaji_slug, english_slug) if slug]
    if len(slugs) == 2 and slugs[0] == slugs[1]:
        return slugs[:1]
    return slugs
