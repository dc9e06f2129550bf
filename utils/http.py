"""JSON-over-HTTP helpers.

Every outgoing request goes through these functions so that timeout and
User-Agent come from settings.providers. Errors surface as
requests.RequestException (transport/status) or ValueError (bad JSON);
callers decide whether a failure is hard or soft.
"""

import hashlib
from typing import Any

import requests

from models.config import settings


def _headers(extra: dict[str, str] | None = None) -> dict[str, str]:
    headers = {
        "User-Agent": settings.providers.user_agent,
        "Accept": "application/json",
    }
    if extra:
        headers.update(extra)
    return headers


def get_json(url: str, params: dict[str, Any] | None = None, headers: dict[str, str] | None = None) -> Any:
    """GET a URL and decode its JSON body.

    Raises:
        requests.HTTPError: On non-2xx responses
        requests.RequestException: On transport errors
        ValueError: If the body is not JSON
    """
    response = requests.get(
        url,
        params=params,
        headers=_headers(headers),
        timeout=settings.providers.timeout_seconds,
    )
    response.raise_for_status()
    return response.json()


def post_json(url: str, payload: dict[str, Any], headers: dict[str, str] | None = None) -> Any:
    """POST a JSON payload and decode the JSON response."""
    response = requests.post(
        url,
        json=payload,
        headers=_headers({"Content-Type": "application/json", **(headers or {})}),
        timeout=settings.providers.timeout_seconds,
    )
    response.raise_for_status()
    return response.json()


def hash_image(url: str | None) -> str | None:
    """Short stable digest of an image URL, used as a cache/dedup key downstream."""
    if not url:
        return None
    return hashlib.sha1(url.encode("utf-8")).hexdigest()[:16]
