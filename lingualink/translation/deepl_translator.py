"""
DeepL translation provider implementation.
"""

from typing import Optional
import asyncio
import deepl
from lingualink.translation.base import TranslationProvider, TranslationResult
from lingualink.errors import TranslationError
from lingualink.config import settings
import time


class DeepLTranslator(TranslationProvider):
    """DeepL translation provider."""

    # DeepL requires a regional variant for some target languages
    TARGET_LANGUAGE_MAP = {
        "en": "EN-US",
        "pt": "PT-PT",
    }

    def __init__(self, api_key: Optional[str] = None, **kwargs):
        super().__init__(api_key or settings.deepl_api_key, **kwargs)
        self.client: Optional[deepl.Translator] = None
        self.timeout = kwargs.get("timeout", settings.translation_timeout)
        self.server_url = kwargs.get("server_url", settings.deepl_server_url)

    async def _initialize(self):
        """Initialize DeepL client."""
        if not self.api_key:
            raise TranslationError("DeepL API key is not configured")
        self.client = deepl.Translator(self.api_key, server_url=self.server_url)

    def _normalize_language_code(self, lang_code: Optional[str], is_target: bool = False) -> Optional[str]:
        """
        Normalize language code for DeepL API.

        Source languages use the base code ("EN"), target languages the
        regional variant where DeepL requires one ("EN-US").
        """
        if not lang_code or lang_code == "auto":
            return None

        base_code = lang_code.split('-')[0].lower()
        if is_target:
            return self.TARGET_LANGUAGE_MAP.get(base_code, base_code.upper())
        return base_code.upper()

    async def translate(
        self,
        text: str,
        target_language: str,
        source_language: Optional[str] = None,
        **kwargs
    ) -> TranslationResult:
        """
        Translate text using DeepL API.
        """
        self.validate_text(text)
        await self.initialize()

        if self.is_same_language(source_language, target_language):
            return TranslationResult(
                original_text=text,
                translated_text=text,
                source_language=source_language,
                target_language=target_language,
                metadata={"bypassed": True}
            )

        target_lang = self._normalize_language_code(target_language, is_target=True)
        source_lang = self._normalize_language_code(source_language)
        start_time = time.time()

        def do_translate():
            return self.client.translate_text(
                text,
                target_lang=target_lang,
                source_lang=source_lang,
                preserve_formatting=kwargs.get("preserve_formatting", True),
            )

        try:
            result = await asyncio.wait_for(asyncio.to_thread(do_translate), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            self.log_error("deepl_translate", e, target_lang=target_lang)
            raise TranslationError("Translation timed out") from e
        except deepl.DeepLException as e:
            self.log_error("deepl_translate", e, target_lang=target_lang)
            raise TranslationError(f"DeepL error: {e}") from e

        detected = result.detected_source_lang.lower() if result.detected_source_lang else source_language
        self.log_latency(
            "deepl_translate", start_time,
            text_length=len(text),
            source_lang=detected,
            target_lang=target_language,
        )

        return TranslationResult(
            original_text=text,
            translated_text=result.text,
            source_language=detected,
            target_language=target_language,
            metadata={
                "processing_time": time.time() - start_time,
                "billed_characters": len(text)
            }
        )

    async def _close(self):
        """Close DeepL client."""
        # DeepL client doesn't need explicit closing
        self.client = None
