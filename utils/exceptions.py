"""Custom exception hierarchy for ani-match.

Provides specific exception types for different failure scenarios,
making error handling more precise and testable.

Hard failures (AniListError) propagate to the caller. Soft failures
(CrossReferenceError, FillerError, AnifyError, ProviderError) are caught inside the
reconciliation chain and logged. Validation errors are raised immediately.
"""


class AniMatchError(Exception):
    """Base exception for all ani-match errors."""

    pass


class AniListError(AniMatchError):
    """Raised when the canonical metadata (AniList) fetch fails.

    status_code is the HTTP status when AniList answered with an error status.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ProviderError(AniMatchError):
    """Raised when a content provider request fails."""

    pass


class ProviderNotFoundError(ProviderError):
    """Raised when a requested provider is not registered or not supported."""

    pass


class CrossReferenceError(AniMatchError):
    """Raised when the cross-reference index lookup fails."""

    pass


class FillerError(AniMatchError):
    """Raised when the filler dataset cannot be fetched or parsed."""

    pass


class AnifyError(AniMatchError):
    """Raised when an Anify request fails or returns an unexpected payload."""

    pass


class InvalidAudioTrackError(AniMatchError, ValueError):
    """Raised when a requested audio track is malformed or unsupported."""

    pass


class InvalidServerError(AniMatchError, ValueError):
    """Raised when a requested streaming server name is unknown."""

    pass


class InvalidGenreError(AniMatchError, ValueError):
    """Raised when an advanced search names an unknown genre."""

    pass


class InvalidEpisodeIdError(AniMatchError, ValueError):
    """Raised when an episode id is missing."""

    pass
