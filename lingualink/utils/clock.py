"""
Time sources used by the relay sweep and the call duration timer.
"""

import asyncio
import time
from abc import ABC, abstractmethod


class Clock(ABC):
    """Monotonic time source with a matching sleep."""

    @abstractmethod
    def now(self) -> float:
        """Current instant in seconds."""

    @abstractmethod
    async def sleep(self, seconds: float) -> None:
        """Suspend the caller for ``seconds`` of this clock's time."""


class SystemClock(Clock):
    """Clock backed by ``time.monotonic`` and ``asyncio.sleep``."""

    def now(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


system_clock = SystemClock()
