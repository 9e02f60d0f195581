"""
AssemblyAI transcription provider implementation.
"""

from typing import Optional, Dict, Any
import asyncio
import aiohttp
from lingualink.stt.base import TranscriptionProvider, TranscriptionResult, TranscriptionStatus
from lingualink.errors import TranscriptionError
from lingualink.config import settings


class AssemblyAITranscriber(TranscriptionProvider):
    """AssemblyAI asynchronous transcription over its REST API."""

    STATUS_MAP = {
        "queued": TranscriptionStatus.PENDING,
        "processing": TranscriptionStatus.PENDING,
        "completed": TranscriptionStatus.COMPLETED,
        "error": TranscriptionStatus.FAILED,
    }

    def __init__(self, api_key: Optional[str] = None, **kwargs):
        super().__init__(api_key or settings.assemblyai_api_key, **kwargs)
        self.base_url = kwargs.get("base_url", settings.assemblyai_base_url).rstrip("/")
        self.language_code = kwargs.get("language_code", settings.transcription_language)
        self.timeout = kwargs.get("timeout", settings.request_timeout)
        self.session: Optional[aiohttp.ClientSession] = None

    async def _initialize(self):
        """Open the HTTP session."""
        if not self.api_key:
            raise TranscriptionError("AssemblyAI API key is not configured")
        self.session = aiohttp.ClientSession(
            headers={"Authorization": self.api_key},
            timeout=aiohttp.ClientTimeout(total=self.timeout),
        )

    async def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        await self.initialize()
        url = f"{self.base_url}{path}"
        try:
            async with self.session.request(method, url, **kwargs) as response:
                response.raise_for_status()
                return await response.json()
        except asyncio.TimeoutError as e:
            self.log_error("assemblyai_request", e, path=path)
            raise TranscriptionError("AssemblyAI request timed out") from e
        except (aiohttp.ClientError, ValueError) as e:
            self.log_error("assemblyai_request", e, path=path)
            raise TranscriptionError(f"AssemblyAI request failed: {e}") from e

    async def submit(self, audio_data: bytes, **kwargs) -> str:
        """Upload raw audio, then create a transcript job for it."""
        upload = await self._request(
            "POST", "/upload",
            data=audio_data,
            headers={"Content-Type": "application/octet-stream"},
        )
        upload_url = upload.get("upload_url")
        if not upload_url:
            raise TranscriptionError("AssemblyAI upload returned no URL")
        return await self.submit_url(upload_url, **kwargs)

    async def submit_url(self, audio_url: str, **kwargs) -> str:
        body = {
            "audio_url": audio_url,
            "language_code": kwargs.get("language_code", self.language_code),
        }
        data = await self._request("POST", "/transcript", json=body)
        job_id = data.get("id")
        if not job_id:
            raise TranscriptionError("AssemblyAI returned no transcript id")

        self.logger.info("Transcription submitted", job_id=job_id)
        return job_id

    async def poll_result(self, job_id: str) -> TranscriptionResult:
        data = await self._request("GET", f"/transcript/{job_id}")
        status = self.STATUS_MAP.get(data.get("status"), TranscriptionStatus.PENDING)

        return TranscriptionResult(
            job_id=job_id,
            status=status,
            text=data.get("text") if status == TranscriptionStatus.COMPLETED else None,
            error=data.get("error") if status == TranscriptionStatus.FAILED else None,
            metadata={"language_code": data.get("language_code")},
        )

    async def _close(self):
        """Close the HTTP session."""
        if self.session:
            await self.session.close()
            self.session = None
