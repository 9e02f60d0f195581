"""
Agora RTC provider.

Credentials come from the LinguaLink server (``/api/agora/token``); media
capture, publishing and subscription are delegated to a ``MediaEngine``
bound to the Agora SDK of the hosting runtime.
"""

from abc import ABC, abstractmethod
from typing import Optional

from lingualink.client.api import ApiClient
from lingualink.errors import LinguaLinkError, MediaAccessError, SignalingError
from lingualink.rtc.base import (
    FatalError,
    JoinCredentials,
    MediaHandle,
    RemoteJoined,
    RemoteLeft,
    RTCProvider,
)


class MediaEngine(ABC):
    """Media stack used by ``AgoraRTCProvider``."""

    @abstractmethod
    async def connect(self, app_id: str, channel_id: str, token: str, user_id: int):
        """Join the channel without publishing anything."""

    @abstractmethod
    async def create_local_tracks(self) -> MediaHandle:
        """Open microphone and camera; raise ``MediaAccessError`` when denied."""

    @abstractmethod
    async def publish(self, handle: MediaHandle):
        pass

    @abstractmethod
    async def set_track_enabled(self, handle: MediaHandle, kind: str, enabled: bool):
        pass

    @abstractmethod
    async def close_tracks(self, handle: MediaHandle):
        pass

    @abstractmethod
    async def disconnect(self):
        pass


class AgoraRTCProvider(RTCProvider):
    """RTC provider for Agora channels."""

    def __init__(self, api_client: ApiClient, engine: MediaEngine, **kwargs):
        super().__init__(**kwargs)
        self.api_client = api_client
        self.engine = engine
        self.channel_id: Optional[str] = None
        self.local_media: Optional[MediaHandle] = None
        self._connected = False

    async def get_join_credentials(self, channel_id: str, user_id: int) -> JoinCredentials:
        try:
            data = await self.api_client.get_agora_token(channel_id, user_id)
        except LinguaLinkError as e:
            raise SignalingError(f"Failed to get Agora token: {e.message}") from e

        if not data.get("token"):
            raise SignalingError("Agora token missing from server response")

        return JoinCredentials(app_id=data.get("appId", ""), token=data["token"])

    async def join(self, app_id: str, channel_id: str, token: str, user_id: int) -> MediaHandle:
        self.channel_id = channel_id
        try:
            await self.engine.connect(app_id, channel_id, token, user_id)
            self._connected = True
        except MediaAccessError:
            raise
        except Exception as e:
            raise SignalingError(f"Could not join channel {channel_id}: {e}") from e

        # Partial acquisition is released by leave()
        self.local_media = await self.engine.create_local_tracks()
        await self.engine.publish(self.local_media)

        self.logger.info("Joined Agora channel", channel_id=channel_id, user_id=user_id)
        return self.local_media

    async def leave(self):
        media, self.local_media = self.local_media, None
        try:
            if media is not None:
                await self.engine.close_tracks(media)
        finally:
            if self._connected:
                self._connected = False
                await self.engine.disconnect()
                self.logger.info("Left Agora channel", channel_id=self.channel_id)

    async def set_local_audio_enabled(self, enabled: bool):
        if self.local_media is not None:
            await self.engine.set_track_enabled(self.local_media, "audio", enabled)

    async def set_local_video_enabled(self, enabled: bool):
        if self.local_media is not None:
            await self.engine.set_track_enabled(self.local_media, "video", enabled)

    # Engine callbacks

    async def on_user_published(self, user_id: int, media_kind: str, media: MediaHandle):
        """Remote media published; video marks the remote party as joined."""
        if media_kind == "video":
            await self.emit(RemoteJoined(media=media))

    async def on_user_unpublished(self, user_id: int, media_kind: str):
        if media_kind == "video":
            await self.emit(RemoteLeft(user_id=user_id))

    async def on_user_left(self, user_id: int):
        await self.emit(RemoteLeft(user_id=user_id))

    async def on_exception(self, code: int, message: str):
        await self.emit(FatalError(error=SignalingError(f"Agora exception: {code} - {message}")))
