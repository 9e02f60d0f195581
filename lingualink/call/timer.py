"""
Call duration timer.
"""

import asyncio
import inspect
from typing import Awaitable, Callable, List, Optional, Union

from lingualink.utils.clock import Clock, system_clock
from lingualink.utils.logging import LoggerMixin

TickListener = Callable[[int], Union[None, Awaitable[None]]]


def format_duration(seconds: int) -> str:
    """Format a duration as MM:SS."""
    minutes, remaining = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{remaining:02d}"


class DurationTimer(LoggerMixin):
    """
    Counts whole seconds since ``start()``.

    ``elapsed_seconds`` is derived from the clock, so it is exact even when
    ticks are late; the background task only notifies tick listeners once a
    second. The task is owned by the timer: ``stop()`` cancels and awaits it,
    and the timer can be used as an async context manager.
    """

    def __init__(self, clock: Optional[Clock] = None, interval: float = 1.0):
        self.clock = clock or system_clock
        self.interval = interval
        self._started_at: Optional[float] = None
        self._stopped_at: Optional[float] = None
        self._task: Optional[asyncio.Task] = None
        self._listeners: List[TickListener] = []

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def elapsed_seconds(self) -> int:
        if self._started_at is None:
            return 0
        end = self._stopped_at if self._stopped_at is not None else self.clock.now()
        return max(0, int(end - self._started_at))

    def on_tick(self, listener: TickListener):
        self._listeners.append(listener)

    def start(self):
        """Reset to zero and start ticking. Restarts a running timer."""
        if self._task is not None:
            self._task.cancel()
        self._started_at = self.clock.now()
        self._stopped_at = None
        self._task = asyncio.create_task(self._run())

    async def stop(self):
        """Stop ticking and freeze ``elapsed_seconds``."""
        task, self._task = self._task, None
        if self._started_at is not None and self._stopped_at is None:
            self._stopped_at = self.clock.now()
        if task is not None:
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)

    def reset(self):
        """Forget the last measurement. The timer must be stopped."""
        self._started_at = None
        self._stopped_at = None

    async def __aenter__(self) -> "DurationTimer":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.stop()

    async def _run(self):
        while True:
            await self.clock.sleep(self.interval)
            elapsed = self.elapsed_seconds
            for listener in list(self._listeners):
                try:
                    result = listener(elapsed)
                    if inspect.isawaitable(result):
                        await result
                except asyncio.CancelledError:
                    raise
                except Exception as e:
                    self.log_error("duration_tick", e)
