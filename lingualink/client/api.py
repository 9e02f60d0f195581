"""
Async HTTP client for the LinguaLink API.
"""

from typing import Any, Dict, List, Optional
import asyncio
import aiohttp

from lingualink.config import settings
from lingualink.errors import (
    AuthenticationError,
    InvalidRequest,
    LinguaLinkError,
    NotFoundError,
    PermissionDenied,
)
from lingualink.messaging.relay import RelayMessage
from lingualink.utils.logging import LoggerMixin

STATUS_ERRORS = {
    400: InvalidRequest,
    401: AuthenticationError,
    403: PermissionDenied,
    404: NotFoundError,
}


class ApiClient(LoggerMixin):
    """
    Client for the endpoints a call participant needs: messaging, RTC
    tokens, translation and speech-to-text. Requests are authenticated with
    the ``user-id`` header.
    """

    def __init__(
        self,
        user_id: int,
        base_url: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: Optional[int] = None,
    ):
        self.user_id = user_id
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = timeout or settings.request_timeout
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
            self._owns_session = True
        return self._session

    async def request(self, method: str, path: str, **kwargs) -> Any:
        """
        Perform a request and decode its JSON body.

        Raises:
            LinguaLinkError: Subclass matching the HTTP status on failure
        """
        session = self._get_session()
        headers = {settings.user_id_header: str(self.user_id)}
        headers.update(kwargs.pop("headers", {}) or {})
        url = f"{self.base_url}{path}"

        try:
            async with session.request(method, url, headers=headers, **kwargs) as response:
                if response.status == 204:
                    return None
                data = await response.json(content_type=None)
                if response.status >= 400:
                    message = data.get("message") if isinstance(data, dict) else None
                    error_class = STATUS_ERRORS.get(response.status, LinguaLinkError)
                    raise error_class(message)
                return data
        except asyncio.TimeoutError as e:
            self.log_error("api_request", e, method=method, path=path)
            raise LinguaLinkError(f"Request to {path} timed out") from e
        except (aiohttp.ClientError, ValueError) as e:
            # ValueError covers bodies that are not JSON
            self.log_error("api_request", e, method=method, path=path)
            raise LinguaLinkError(f"Request to {path} failed: {e}") from e

    # Messaging

    async def register(self):
        await self.request("POST", "/api/messaging/register")

    async def send_message(self, to_user_id: int, message_type: str, payload: Optional[Dict[str, Any]] = None):
        await self.request(
            "POST", "/api/messaging/send",
            json={"to": to_user_id, "type": message_type, "payload": payload or {}},
        )

    async def poll_messages(self) -> List[RelayMessage]:
        data = await self.request("GET", "/api/messaging/poll")
        return [RelayMessage.from_dict(item) for item in data.get("messages", [])]

    # RTC

    async def get_agora_token(self, channel_name: str, uid: Optional[int] = None) -> Dict[str, Any]:
        params: Dict[str, Any] = {"channelName": channel_name}
        if uid is not None:
            params["uid"] = uid
        return await self.request("GET", "/api/agora/token", params=params)

    # Translation and speech-to-text

    async def translate(self, text: str, target_language: str) -> str:
        data = await self.request(
            "POST", "/api/translate",
            json={"text": text, "targetLang": target_language},
        )
        return data["translatedText"]

    async def submit_audio(self, audio_data: bytes) -> str:
        data = await self.request(
            "POST", "/api/speech-to-text/audio",
            data=audio_data,
            headers={"Content-Type": "application/octet-stream"},
        )
        return data["transcriptionId"]

    async def submit_audio_url(self, audio_url: str) -> str:
        data = await self.request("POST", "/api/speech-to-text", json={"audioUrl": audio_url})
        return data["transcriptionId"]

    async def get_transcription(self, transcription_id: str) -> Dict[str, Any]:
        return await self.request("GET", f"/api/speech-to-text/{transcription_id}")

    # Call history

    async def record_call(
        self,
        receiver_id: int,
        initiator_language: str,
        receiver_language: str,
    ) -> Dict[str, Any]:
        return await self.request(
            "POST", "/api/calls",
            json={
                "initiatorId": self.user_id,
                "receiverId": receiver_id,
                "initiatorLanguage": initiator_language,
                "receiverLanguage": receiver_language,
            },
        )

    async def end_call_record(self, call_id: int, duration: int) -> Dict[str, Any]:
        return await self.request("PATCH", f"/api/calls/{call_id}/end", json={"duration": duration})

    async def close(self):
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None
