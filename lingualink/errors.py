"""
Error taxonomy shared by the relay, the call controller and the HTTP layer.
"""

from typing import Optional


class LinguaLinkError(Exception):
    """Base class for every error raised by LinguaLink components."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidRequest(LinguaLinkError):
    """A malformed request, e.g. a relay send without recipient or type."""

    status_code = 400
    default_message = "Missing required fields"


class ConflictError(LinguaLinkError):
    """The request collides with existing data (duplicate username, language...)."""

    status_code = 400
    default_message = "Resource already exists"


class AuthenticationError(LinguaLinkError):
    status_code = 401
    default_message = "Unauthorized"


class PermissionDenied(LinguaLinkError):
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(LinguaLinkError):
    status_code = 404
    default_message = "Not found"


class MediaAccessError(LinguaLinkError):
    """Camera or microphone unavailable or permission denied."""

    default_message = "Could not access camera or microphone"


class SignalingError(LinguaLinkError):
    """Join credential/token exchange failed."""

    default_message = "Could not join call"


class TranslationError(LinguaLinkError):
    """Upstream translation service failure or timeout."""

    default_message = "Translation service error"


class TranscriptionError(LinguaLinkError):
    """Upstream transcription service failure."""

    default_message = "Speech-to-text service error"


class TranscriptionTimeout(TranscriptionError):
    """Transcription result not available after the bounded polling loop."""

    default_message = "Transcription timed out"
