"""
Translation provider implementations.
"""

from .base import TranslationProvider, TranslationResult
from .factory import get_translation_provider

__all__ = ["TranslationProvider", "TranslationResult", "get_translation_provider"]
