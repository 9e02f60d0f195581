"""
Factory for creating transcription provider instances.
"""

from typing import Optional
from lingualink.config import settings, TranscriptionProvider as TranscriptionProviderEnum
from lingualink.stt.base import TranscriptionProvider
from lingualink.stt.assemblyai import AssemblyAITranscriber
from lingualink.utils.logging import get_logger

logger = get_logger(__name__)


def get_transcription_provider(
    provider_type: Optional[TranscriptionProviderEnum] = None,
    **kwargs
) -> TranscriptionProvider:
    """
    Factory function to get a transcription provider instance.

    Raises:
        ValueError: If provider type is not supported
    """
    provider_type = provider_type or settings.transcription_provider

    logger.info(f"Creating transcription provider: {provider_type}")

    if provider_type == TranscriptionProviderEnum.ASSEMBLYAI:
        return AssemblyAITranscriber(**kwargs)
    else:
        raise ValueError(f"Unsupported transcription provider: {provider_type}")
