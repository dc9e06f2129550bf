from typing import Any

from models.models import MediaTitle


def parse_title(raw: Any) -> str | MediaTitle:
    """Provider titles are either plain strings or {romaji, english, native, userPreferred}."""
    if isinstance(raw, dict):
        return MediaTitle(
            romaji=raw.get("romaji"),
            english=raw.get("english"),
            native=raw.get("native"),
            user_preferred=raw.get("userPreferred"),
        )
    return raw or ""
