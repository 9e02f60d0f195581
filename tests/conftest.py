"""
Shared fixtures and mock collaborators.
"""

import asyncio
from typing import List, Optional

import pytest

from lingualink.errors import TranslationError
from lingualink.rtc.base import JoinCredentials, MediaHandle, RTCProvider
from lingualink.stt.base import TranscriptionProvider, TranscriptionResult, TranscriptionStatus
from lingualink.translation.base import TranslationProvider, TranslationResult
from lingualink.utils.clock import Clock


class FakeClock(Clock):
    """Manually advanced clock; sleepers wake when ``advance`` passes their deadline."""

    def __init__(self, start: float = 0.0):
        self._now = start
        self._sleepers = []

    def now(self) -> float:
        return self._now

    async def sleep(self, seconds: float) -> None:
        future = asyncio.get_running_loop().create_future()
        self._sleepers.append((self._now + seconds, future))
        await future

    async def advance(self, seconds: float):
        # Let freshly started tasks reach their first sleep
        for _ in range(5):
            await asyncio.sleep(0)
        self._now += seconds
        remaining = []
        for deadline, future in self._sleepers:
            if future.done():
                continue
            if deadline <= self._now:
                future.set_result(None)
            else:
                remaining.append((deadline, future))
        self._sleepers = remaining
        for _ in range(5):
            await asyncio.sleep(0)


class MockRTCProvider(RTCProvider):
    """In-memory RTC provider recording what the controller asked for."""

    def __init__(self):
        super().__init__()
        self.credentials_error: Optional[Exception] = None
        self.join_error: Optional[Exception] = None
        self.join_gate: Optional[asyncio.Event] = None
        self.joined_channels: List[str] = []
        self.joined = False
        self.leave_count = 0
        self.leave_error: Optional[Exception] = None
        self.audio_enabled = True
        self.video_enabled = True

    async def get_join_credentials(self, channel_id, user_id):
        if self.credentials_error:
            raise self.credentials_error
        return JoinCredentials(app_id="test-app", token="test-token")

    async def join(self, app_id, channel_id, token, user_id):
        self.joined_channels.append(channel_id)
        self.joined = True
        if self.join_gate is not None:
            await self.join_gate.wait()
        if self.join_error:
            raise self.join_error
        return MediaHandle(user_id=user_id)

    async def leave(self):
        self.leave_count += 1
        self.joined = False
        if self.leave_error:
            raise self.leave_error

    async def set_local_audio_enabled(self, enabled):
        self.audio_enabled = enabled

    async def set_local_video_enabled(self, enabled):
        self.video_enabled = enabled


class MockTranslationProvider(TranslationProvider):
    """Dictionary-backed translator."""

    TRANSLATIONS = {
        ("Hello, how are you?", "es"): "Hola, ¿cómo estás?",
        ("Hola, ¿cómo estás?", "en"): "Hello, how are you?",
        ("Good morning", "es"): "Buenos días",
    }

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.fail = False
        self.calls = []

    async def translate(self, text, target_language, source_language=None, **kwargs):
        self.calls.append((text, target_language, source_language))
        if self.fail:
            raise TranslationError("Translation service unavailable")
        return TranslationResult(
            original_text=text,
            translated_text=self.TRANSLATIONS.get((text, target_language), f"[{target_language}] {text}"),
            source_language=source_language,
            target_language=target_language,
        )


class MockTranscriptionProvider(TranscriptionProvider):
    """Transcriber replaying a scripted sequence of job states."""

    def __init__(self, statuses=None, text="Hello, how are you?", **kwargs):
        kwargs.setdefault("max_attempts", 3)
        kwargs.setdefault("poll_interval", 0)
        super().__init__(**kwargs)
        self.statuses = list(statuses or [TranscriptionStatus.COMPLETED])
        self.text = text
        self.submitted = []
        self.poll_count = 0

    async def submit(self, audio_data, **kwargs):
        self.submitted.append(audio_data)
        return f"job-{len(self.submitted)}"

    async def submit_url(self, audio_url, **kwargs):
        self.submitted.append(audio_url)
        return f"job-{len(self.submitted)}"

    async def poll_result(self, job_id):
        index = min(self.poll_count, len(self.statuses) - 1)
        status = self.statuses[index]
        self.poll_count += 1
        return TranscriptionResult(
            job_id=job_id,
            status=status,
            text=self.text if status == TranscriptionStatus.COMPLETED else None,
            error="Audio could not be decoded" if status == TranscriptionStatus.FAILED else None,
        )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rtc():
    return MockRTCProvider()


@pytest.fixture
def translator():
    return MockTranslationProvider()


@pytest.fixture
def transcriber():
    return MockTranscriptionProvider()
