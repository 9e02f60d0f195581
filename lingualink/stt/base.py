"""
Base interface for speech-to-text (transcription) providers.

Transcription is asynchronous on the vendor side: audio is submitted as a
job, then the job is polled until it completes or fails.
"""

from abc import ABC, abstractmethod
from typing import Optional, Dict, Any, Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
import asyncio
import time
from lingualink.config import settings
from lingualink.errors import TranscriptionError, TranscriptionTimeout
from lingualink.utils.logging import LoggerMixin


class TranscriptionStatus(str, Enum):
    """State of a transcription job."""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class TranscriptionResult:
    """Result of polling a transcription job."""
    job_id: str
    status: TranscriptionStatus
    text: Optional[str] = None
    error: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.job_id,
            "status": self.status.value,
            "text": self.text,
            "error": self.error,
        }


class TranscriptionProvider(ABC, LoggerMixin):
    """Abstract base class for transcription providers."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        max_attempts: Optional[int] = None,
        poll_interval: Optional[float] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
        **kwargs
    ):
        """
        Initialize transcription provider.

        Args:
            api_key: API key for the provider
            max_attempts: Number of result polls before giving up
            poll_interval: Seconds between two result polls
            sleep: Coroutine used to wait between polls
            **kwargs: Additional provider-specific configuration
        """
        self.api_key = api_key
        self.max_attempts = max_attempts or settings.transcription_max_attempts
        self.poll_interval = poll_interval if poll_interval is not None else settings.transcription_poll_interval
        self._sleep = sleep or asyncio.sleep
        self.config = kwargs
        self._initialized = False

    async def initialize(self):
        """Initialize the provider (e.g., open HTTP sessions)."""
        if not self._initialized:
            await self._initialize()
            self._initialized = True
            self.logger.info(f"{self.__class__.__name__} initialized")

    async def _initialize(self):
        """Provider-specific initialization logic."""
        pass

    @abstractmethod
    async def submit(self, audio_data: bytes, **kwargs) -> str:
        """
        Submit raw audio for transcription.

        Returns:
            Job identifier to poll

        Raises:
            TranscriptionError: If the job cannot be created
        """
        pass

    @abstractmethod
    async def submit_url(self, audio_url: str, **kwargs) -> str:
        """Submit audio reachable at a URL for transcription."""
        pass

    @abstractmethod
    async def poll_result(self, job_id: str) -> TranscriptionResult:
        """
        Fetch the current state of a job.

        Raises:
            TranscriptionError: If the status request itself fails
        """
        pass

    async def wait_for_result(self, job_id: str) -> TranscriptionResult:
        """
        Poll a job until it completes, at most ``max_attempts`` times.

        Raises:
            TranscriptionError: If the job failed
            TranscriptionTimeout: If no result arrived within the attempts
        """
        for attempt in range(1, self.max_attempts + 1):
            result = await self.poll_result(job_id)

            if result.status == TranscriptionStatus.COMPLETED:
                return result
            if result.status == TranscriptionStatus.FAILED:
                raise TranscriptionError(result.error or "Transcription failed")

            if attempt < self.max_attempts:
                await self._sleep(self.poll_interval)

        self.logger.warning(
            "Transcription polling exhausted",
            job_id=job_id,
            attempts=self.max_attempts,
        )
        raise TranscriptionTimeout()

    async def transcribe(self, audio_data: bytes, **kwargs) -> TranscriptionResult:
        """Submit audio and wait for its transcription."""
        if not audio_data:
            raise TranscriptionError("Empty audio data received")

        start_time = time.time()
        job_id = await self.submit(audio_data, **kwargs)
        result = await self.wait_for_result(job_id)
        self.log_latency("transcribe", start_time, job_id=job_id)
        return result

    async def close(self):
        """Clean up resources."""
        if self._initialized:
            await self._close()
            self._initialized = False
            self.logger.info(f"{self.__class__.__name__} closed")

    async def _close(self):
        """Provider-specific cleanup logic."""
        pass
