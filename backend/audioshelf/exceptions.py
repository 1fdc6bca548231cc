"""
AudioShelf Exceptions

Error taxonomy shared by the HTTP service and the player client.
"""


class AudioShelfError(Exception):
    """Base class for all domain errors."""

    error_type = "audioshelf_error"


class NotFoundError(AudioShelfError):
    """Book, chapter or other record is absent."""

    error_type = "not_found"


class ValidationFailure(AudioShelfError):
    """Malformed request or payload."""

    error_type = "validation_error"


class UpstreamFailure(AudioShelfError):
    """Object storage or persistence call failed. Safe to retry."""

    error_type = "upstream_error"


class StaleRequestError(AudioShelfError):
    """An in-flight result arrived after its request was superseded."""

    error_type = "stale_request"


__all__ = [
    "AudioShelfError",
    "NotFoundError",
    "ValidationFailure",
    "UpstreamFailure",
    "StaleRequestError",
]
