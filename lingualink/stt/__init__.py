"""
Speech-to-text provider implementations.
"""

from .base import TranscriptionProvider, TranscriptionResult, TranscriptionStatus
from .factory import get_transcription_provider

__all__ = [
    "TranscriptionProvider",
    "TranscriptionResult",
    "TranscriptionStatus",
    "get_transcription_provider",
]
