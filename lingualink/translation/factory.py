"""
Factory for creating translation provider instances.
"""

from typing import Optional
from lingualink.config import settings, TranslationProvider as TranslationProviderEnum
from lingualink.translation.base import TranslationProvider
from lingualink.translation.deepl_translator import DeepLTranslator
from lingualink.utils.logging import get_logger

logger = get_logger(__name__)


def get_translation_provider(
    provider_type: Optional[TranslationProviderEnum] = None,
    **kwargs
) -> TranslationProvider:
    """
    Factory function to get a translation provider instance.

    Raises:
        ValueError: If provider type is not supported
    """
    provider_type = provider_type or settings.translation_provider

    logger.info(f"Creating translation provider: {provider_type}")

    if provider_type == TranslationProviderEnum.DEEPL:
        return DeepLTranslator(**kwargs)
    else:
        raise ValueError(f"Unsupported translation provider: {provider_type}")
