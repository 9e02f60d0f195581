"""
Base interface for translation providers.
"""

from abc import ABC, abstractmethod
from typing import Optional, Dict, Any
from dataclasses import dataclass
from lingualink.errors import TranslationError
from lingualink.utils.logging import LoggerMixin

MAX_TEXT_LENGTH = 10000


@dataclass
class TranslationResult:
    """Result from translation processing."""
    original_text: str
    translated_text: str
    target_language: str
    source_language: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class TranslationProvider(ABC, LoggerMixin):
    """Abstract base class for translation providers."""

    def __init__(self, api_key: Optional[str] = None, **kwargs):
        """
        Initialize translation provider.

        Args:
            api_key: API key for the provider
            **kwargs: Additional provider-specific configuration
        """
        self.api_key = api_key
        self.config = kwargs
        self._initialized = False

    async def initialize(self):
        """Initialize the translation provider."""
        if not self._initialized:
            await self._initialize()
            self._initialized = True
            self.logger.info(f"{self.__class__.__name__} initialized")

    async def _initialize(self):
        """Provider-specific initialization logic."""
        pass

    @abstractmethod
    async def translate(
        self,
        text: str,
        target_language: str,
        source_language: Optional[str] = None,
        **kwargs
    ) -> TranslationResult:
        """
        Translate text into the target language.

        Args:
            text: Text to translate
            target_language: Target language code (ISO 639-1)
            source_language: Source language code (auto-detect if None)
            **kwargs: Additional provider-specific parameters

        Returns:
            TranslationResult with translation and metadata

        Raises:
            TranslationError: If the upstream service fails
        """
        pass

    def is_same_language(self, source_language: Optional[str], target_language: str) -> bool:
        """Compare base language codes (e.g. 'es-ES' and 'es')."""
        if not source_language or source_language == "auto":
            return False
        source_base = source_language.split('-')[0].lower()
        target_base = target_language.split('-')[0].lower()
        return source_base == target_base

    def validate_text(self, text: str):
        """
        Validate text before translation.

        Raises:
            TranslationError: If the text is empty or too long
        """
        if not text or not text.strip():
            raise TranslationError("Empty text provided for translation")

        if len(text) > MAX_TEXT_LENGTH:
            raise TranslationError(f"Text too long for translation: {len(text)} characters")

    async def close(self):
        """Clean up resources."""
        if self._initialized:
            await self._close()
            self._initialized = False
            self.logger.info(f"{self.__class__.__name__} closed")

    async def _close(self):
        """Provider-specific cleanup logic."""
        pass
