"""
Translation and transcription providers that go through the LinguaLink
server instead of calling the vendors directly.
"""

from typing import Optional

from lingualink.client.api import ApiClient
from lingualink.errors import LinguaLinkError, TranscriptionError, TranslationError
from lingualink.stt.base import TranscriptionProvider, TranscriptionResult, TranscriptionStatus
from lingualink.translation.base import TranslationProvider, TranslationResult


class ServerTranslationProvider(TranslationProvider):
    """Translates through ``POST /api/translate``."""

    def __init__(self, api_client: ApiClient, **kwargs):
        super().__init__(**kwargs)
        self.api_client = api_client

    async def translate(
        self,
        text: str,
        target_language: str,
        source_language: Optional[str] = None,
        **kwargs
    ) -> TranslationResult:
        self.validate_text(text)
        try:
            translated = await self.api_client.translate(text, target_language)
        except LinguaLinkError as e:
            raise TranslationError(e.message) from e

        return TranslationResult(
            original_text=text,
            translated_text=translated,
            source_language=source_language,
            target_language=target_language,
        )


class ServerTranscriptionProvider(TranscriptionProvider):
    """Transcribes through the ``/api/speech-to-text`` endpoints."""

    def __init__(self, api_client: ApiClient, **kwargs):
        super().__init__(**kwargs)
        self.api_client = api_client

    async def submit(self, audio_data: bytes, **kwargs) -> str:
        try:
            return await self.api_client.submit_audio(audio_data)
        except LinguaLinkError as e:
            raise TranscriptionError(e.message) from e

    async def submit_url(self, audio_url: str, **kwargs) -> str:
        try:
            return await self.api_client.submit_audio_url(audio_url)
        except LinguaLinkError as e:
            raise TranscriptionError(e.message) from e

    async def poll_result(self, job_id: str) -> TranscriptionResult:
        try:
            data = await self.api_client.get_transcription(job_id)
        except LinguaLinkError as e:
            raise TranscriptionError(e.message) from e

        return TranscriptionResult(
            job_id=job_id,
            status=TranscriptionStatus(data.get("status", TranscriptionStatus.PENDING.value)),
            text=data.get("text"),
            error=data.get("error"),
        )
