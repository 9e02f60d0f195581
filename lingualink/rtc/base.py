"""
Base interface for real-time communication (audio/video session) providers.
"""

import asyncio
import inspect
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, Union

from lingualink.utils.logging import LoggerMixin


@dataclass
class JoinCredentials:
    """Credentials needed to join an RTC channel."""
    app_id: str
    token: str


@dataclass
class MediaHandle:
    """Opaque handle on published or subscribed media tracks."""
    user_id: Optional[int] = None
    audio_track: Any = None
    video_track: Any = None


@dataclass
class RemoteJoined:
    """The remote participant joined and its media is flowing."""
    media: MediaHandle


@dataclass
class RemoteLeft:
    """The remote participant left the channel."""
    user_id: Optional[int] = None


@dataclass
class FatalError:
    """The RTC session failed and cannot recover."""
    error: Exception


RTCEvent = Union[RemoteJoined, RemoteLeft, FatalError]
RTCEventListener = Callable[[RTCEvent], Union[None, Awaitable[None]]]


class RTCProvider(ABC, LoggerMixin):
    """
    Abstract base class for RTC providers.

    Providers report remote activity as typed events delivered to every
    subscribed listener, in subscription order.
    """

    def __init__(self, **kwargs):
        self.config = kwargs
        self._listeners: List[RTCEventListener] = []

    def subscribe(self, listener: RTCEventListener):
        """Register a listener for RTC events."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: RTCEventListener):
        """Remove a previously registered listener."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def emit(self, event: RTCEvent):
        """Deliver an event to all listeners."""
        for listener in list(self._listeners):
            try:
                result = listener(event)
                if inspect.isawaitable(result):
                    await result
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self.log_error("rtc_event_dispatch", e, event=type(event).__name__)

    @abstractmethod
    async def get_join_credentials(self, channel_id: str, user_id: int) -> JoinCredentials:
        """
        Request credentials for joining a channel.

        Raises:
            SignalingError: If the credential exchange fails
        """
        pass

    @abstractmethod
    async def join(self, app_id: str, channel_id: str, token: str, user_id: int) -> MediaHandle:
        """
        Join the channel and publish local media.

        Raises:
            MediaAccessError: If the camera or microphone cannot be acquired
        """
        pass

    @abstractmethod
    async def leave(self):
        """Release local media and leave the channel."""
        pass

    @abstractmethod
    async def set_local_audio_enabled(self, enabled: bool):
        pass

    @abstractmethod
    async def set_local_video_enabled(self, enabled: bool):
        pass

    async def close(self):
        """Clean up resources."""
        self._listeners.clear()
