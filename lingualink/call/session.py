"""
State of a single call attempt.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from lingualink.call.transcript import Transcript


class CallPhase(str, Enum):
    """Lifecycle phase of a call."""
    IDLE = "idle"
    CALLING = "calling"
    CONNECTED = "connected"
    ENDED = "ended"


# Phases in which a call holds RTC resources
ACTIVE_PHASES = (CallPhase.CALLING, CallPhase.CONNECTED)


def generate_session_id() -> str:
    """Time-based session id; unique enough at human call rates."""
    return f"call-{int(time.time() * 1000)}"


@dataclass
class CallSession:
    """One call, seen from the local participant."""
    session_id: str
    channel_id: str
    local_user_id: int
    remote_user_id: Optional[int]
    initiator_language: str
    receiver_language: str
    is_initiator: bool = True
    phase: CallPhase = CallPhase.IDLE
    started_at: Optional[float] = None
    audio_enabled: bool = True
    video_enabled: bool = True
    last_error: Optional[str] = None
    transcript: Transcript = field(default_factory=Transcript)

    @property
    def local_language(self) -> str:
        return self.initiator_language if self.is_initiator else self.receiver_language

    @property
    def remote_language(self) -> str:
        return self.receiver_language if self.is_initiator else self.initiator_language

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "channel_id": self.channel_id,
            "local_user_id": self.local_user_id,
            "remote_user_id": self.remote_user_id,
            "initiator_language": self.initiator_language,
            "receiver_language": self.receiver_language,
            "is_initiator": self.is_initiator,
            "phase": self.phase.value,
            "audio_enabled": self.audio_enabled,
            "video_enabled": self.video_enabled,
            "last_error": self.last_error,
        }
