"""
Vendor-backed endpoints: translation, speech-to-text and RTC tokens.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Request

from lingualink.api.deps import get_current_user, get_transcriber, get_translator
from lingualink.config import settings
from lingualink.errors import InvalidRequest
from lingualink.models import User
from lingualink.schemas import LANGUAGE_OPTIONS, PROFICIENCY_OPTIONS, SpeechToTextRequest, TranslateRequest
from lingualink.stt.base import TranscriptionProvider
from lingualink.translation.base import TranslationProvider
from lingualink.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["services"])


@router.get("/languages")
async def list_languages():
    return LANGUAGE_OPTIONS


@router.get("/proficiencies")
async def list_proficiencies():
    return PROFICIENCY_OPTIONS


@router.post("/translate")
async def translate(
    request: TranslateRequest,
    user: User = Depends(get_current_user),
    translator: TranslationProvider = Depends(get_translator),
):
    if not request.text or not request.target_lang:
        raise InvalidRequest("Text and target language are required")

    result = await translator.translate(
        request.text,
        target_language=request.target_lang,
        source_language=request.source_lang,
    )
    return {"translatedText": result.translated_text}


@router.post("/speech-to-text")
async def submit_speech_url(
    request: SpeechToTextRequest,
    user: User = Depends(get_current_user),
    transcriber: TranscriptionProvider = Depends(get_transcriber),
):
    if not request.audio_url:
        raise InvalidRequest("Audio URL is required")

    job_id = await transcriber.submit_url(request.audio_url)
    return {"transcriptionId": job_id}


@router.post("/speech-to-text/audio")
async def submit_speech_audio(
    request: Request,
    user: User = Depends(get_current_user),
    transcriber: TranscriptionProvider = Depends(get_transcriber),
):
    audio = await request.body()
    if not audio:
        raise InvalidRequest("Audio data is required")

    job_id = await transcriber.submit(audio)
    return {"transcriptionId": job_id}


@router.get("/speech-to-text/{transcription_id}")
async def get_transcription(
    transcription_id: str,
    user: User = Depends(get_current_user),
    transcriber: TranscriptionProvider = Depends(get_transcriber),
):
    result = await transcriber.poll_result(transcription_id)
    return result.to_dict()


@router.get("/agora/token")
async def get_agora_token(
    channelName: Optional[str] = None,
    uid: Optional[int] = None,
    user: User = Depends(get_current_user),
):
    if not channelName:
        raise InvalidRequest("Channel name is required")

    # Static token from configuration; no token signing happens here
    logger.info("RTC token issued", channel_name=channelName, uid=uid)
    return {
        "appId": settings.agora_app_id,
        "channelName": channelName,
        "token": settings.agora_token,
        "uid": uid or 0,
    }
