"""
Real-time communication providers.
"""

from .base import (
    FatalError,
    JoinCredentials,
    MediaHandle,
    RemoteJoined,
    RemoteLeft,
    RTCEvent,
    RTCProvider,
)

__all__ = [
    "FatalError",
    "JoinCredentials",
    "MediaHandle",
    "RemoteJoined",
    "RemoteLeft",
    "RTCEvent",
    "RTCProvider",
]
