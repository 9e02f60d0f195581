"""
Tests for translation and transcription providers.
"""

import asyncio
from unittest.mock import AsyncMock, Mock

import deepl
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from lingualink.config import settings
from lingualink.errors import TranscriptionError, TranscriptionTimeout, TranslationError
from lingualink.stt.assemblyai import AssemblyAITranscriber
from lingualink.stt.base import TranscriptionStatus
from lingualink.translation.deepl_translator import DeepLTranslator

from conftest import MockTranscriptionProvider, MockTranslationProvider


@pytest.mark.asyncio
async def test_polling_is_bounded():
    sleep = AsyncMock()
    provider = MockTranscriptionProvider(
        statuses=[TranscriptionStatus.PENDING],
        max_attempts=30,
        poll_interval=2.0,
        sleep=sleep,
    )

    with pytest.raises(TranscriptionTimeout):
        await provider.transcribe(b"audio")

    assert provider.poll_count == 30
    assert sleep.await_count == 29
    sleep.assert_awaited_with(2.0)


@pytest.mark.asyncio
async def test_polling_stops_on_completion():
    sleep = AsyncMock()
    provider = MockTranscriptionProvider(
        statuses=[TranscriptionStatus.PENDING, TranscriptionStatus.PENDING, TranscriptionStatus.COMPLETED],
        max_attempts=30,
        sleep=sleep,
    )

    result = await provider.transcribe(b"audio")

    assert result.status == TranscriptionStatus.COMPLETED
    assert result.text == "Hello, how are you?"
    assert provider.poll_count == 3
    assert sleep.await_count == 2


@pytest.mark.asyncio
async def test_failed_job_raises():
    provider = MockTranscriptionProvider(statuses=[TranscriptionStatus.FAILED])

    with pytest.raises(TranscriptionError) as exc_info:
        await provider.transcribe(b"audio")

    assert not isinstance(exc_info.value, TranscriptionTimeout)
    assert "could not be decoded" in exc_info.value.message
    assert provider.poll_count == 1


@pytest.mark.asyncio
async def test_empty_audio_rejected():
    provider = MockTranscriptionProvider()

    with pytest.raises(TranscriptionError):
        await provider.transcribe(b"")

    assert provider.submitted == []


@pytest.mark.asyncio
async def test_assemblyai_submit_uploads_then_creates_job():
    transcriber = AssemblyAITranscriber(api_key="test-key")
    transcriber._request = AsyncMock(side_effect=[
        {"upload_url": "https://cdn.example.com/upload/abc"},
        {"id": "job-123", "status": "queued"},
    ])

    job_id = await transcriber.submit(b"audio-bytes")

    assert job_id == "job-123"
    upload_call, transcript_call = transcriber._request.await_args_list
    assert upload_call.args == ("POST", "/upload")
    assert upload_call.kwargs["data"] == b"audio-bytes"
    assert transcript_call.args == ("POST", "/transcript")
    assert transcript_call.kwargs["json"]["audio_url"] == "https://cdn.example.com/upload/abc"


@pytest.mark.asyncio
@pytest.mark.parametrize("vendor_status,expected", [
    ("queued", TranscriptionStatus.PENDING),
    ("processing", TranscriptionStatus.PENDING),
    ("completed", TranscriptionStatus.COMPLETED),
    ("error", TranscriptionStatus.FAILED),
])
async def test_assemblyai_status_mapping(vendor_status, expected):
    transcriber = AssemblyAITranscriber(api_key="test-key")
    transcriber._request = AsyncMock(return_value={
        "id": "job-1",
        "status": vendor_status,
        "text": "hola",
        "error": "bad audio",
    })

    result = await transcriber.poll_result("job-1")

    assert result.status == expected
    assert result.to_dict()["status"] == expected.value
    if expected == TranscriptionStatus.COMPLETED:
        assert result.text == "hola"
    if expected == TranscriptionStatus.FAILED:
        assert result.error == "bad audio"


@pytest.mark.asyncio
async def test_assemblyai_requires_api_key(monkeypatch):
    monkeypatch.setattr(settings, "assemblyai_api_key", None)
    transcriber = AssemblyAITranscriber()

    with pytest.raises(TranscriptionError):
        await transcriber.initialize()


def make_assemblyai_app():
    async def slow_transcript(request):
        await asyncio.sleep(2)
        return web.json_response({"id": "job-1", "status": "queued"})

    async def garbled_transcript(request):
        return web.Response(text="not json", content_type="application/json")

    app = web.Application()
    app.router.add_get("/transcript/slow", slow_transcript)
    app.router.add_post("/transcript", garbled_transcript)
    return app


@pytest.mark.asyncio
async def test_assemblyai_timeout_becomes_transcription_error():
    async with TestServer(make_assemblyai_app()) as server:
        transcriber = AssemblyAITranscriber(
            api_key="test-key", base_url=str(server.make_url("")), timeout=0.2
        )
        try:
            with pytest.raises(TranscriptionError) as exc_info:
                await transcriber.poll_result("slow")
        finally:
            await transcriber.close()

    assert "timed out" in exc_info.value.message


@pytest.mark.asyncio
async def test_assemblyai_invalid_json_becomes_transcription_error():
    async with TestServer(make_assemblyai_app()) as server:
        transcriber = AssemblyAITranscriber(api_key="test-key", base_url=str(server.make_url("")))
        try:
            with pytest.raises(TranscriptionError):
                await transcriber.submit_url("https://cdn.example.com/upload/abc")
        finally:
            await transcriber.close()


def make_deepl(result_text="Hola", detected="EN"):
    translator = DeepLTranslator(api_key="test-key")
    translator.client = Mock()
    translator.client.translate_text.return_value = Mock(text=result_text, detected_source_lang=detected)
    translator._initialized = True
    return translator


@pytest.mark.asyncio
async def test_deepl_translate():
    translator = make_deepl()

    result = await translator.translate("Hello", target_language="es", source_language="en")

    assert result.translated_text == "Hola"
    assert result.source_language == "en"
    kwargs = translator.client.translate_text.call_args.kwargs
    assert kwargs["target_lang"] == "ES"
    assert kwargs["source_lang"] == "EN"


@pytest.mark.asyncio
async def test_deepl_regional_target():
    translator = make_deepl(result_text="Hello", detected="ES")

    await translator.translate("Hola", target_language="en")

    kwargs = translator.client.translate_text.call_args.kwargs
    assert kwargs["target_lang"] == "EN-US"
    assert kwargs["source_lang"] is None


@pytest.mark.asyncio
async def test_deepl_same_language_bypass():
    translator = make_deepl()

    result = await translator.translate("Hola", target_language="es", source_language="es-ES")

    assert result.translated_text == "Hola"
    assert result.metadata == {"bypassed": True}
    translator.client.translate_text.assert_not_called()


@pytest.mark.asyncio
async def test_deepl_error_becomes_translation_error():
    translator = make_deepl()
    translator.client.translate_text.side_effect = deepl.DeepLException("quota exceeded")

    with pytest.raises(TranslationError):
        await translator.translate("Hello", target_language="es")


@pytest.mark.asyncio
async def test_translation_rejects_empty_text():
    translator = MockTranslationProvider()

    with pytest.raises(TranslationError):
        translator.validate_text("   ")
    with pytest.raises(TranslationError):
        translator.validate_text("a" * 10001)

