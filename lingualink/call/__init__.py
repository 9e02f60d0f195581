"""
Call lifecycle components.
"""

from .session import CallPhase, CallSession
from .transcript import Transcript, Utterance
from .timer import DurationTimer
from .controller import CallController

__all__ = [
    "CallPhase",
    "CallSession",
    "Transcript",
    "Utterance",
    "DurationTimer",
    "CallController",
]
