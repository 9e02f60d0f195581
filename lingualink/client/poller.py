"""
Client-side polling loop for the mailbox relay.
"""

import asyncio
import inspect
from typing import Awaitable, Callable, Dict, List, Optional, Union

from lingualink.client.api import ApiClient
from lingualink.config import settings
from lingualink.messaging.relay import RelayMessage
from lingualink.utils.clock import Clock, system_clock
from lingualink.utils.logging import LoggerMixin

MessageHandler = Callable[[RelayMessage], Union[None, Awaitable[None]]]


class MessagePoller(LoggerMixin):
    """
    Registers with the relay, then drains the mailbox every ``interval``
    seconds and dispatches each message to the handlers of its type.
    """

    def __init__(
        self,
        api_client: ApiClient,
        interval: Optional[float] = None,
        clock: Optional[Clock] = None,
    ):
        self.api_client = api_client
        self.interval = interval if interval is not None else settings.poll_interval
        self.clock = clock or system_clock
        self._handlers: Dict[str, List[MessageHandler]] = {}
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def add_handler(self, message_type: str, handler: MessageHandler):
        self._handlers.setdefault(message_type, []).append(handler)

    def remove_handler(self, message_type: str, handler: MessageHandler):
        handlers = self._handlers.get(message_type, [])
        if handler in handlers:
            handlers.remove(handler)

    async def start(self):
        if self.is_running:
            return
        await self.api_client.register()
        self._task = asyncio.create_task(self._run())
        self.logger.info("Message polling started", interval=self.interval)

    async def stop(self):
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
            self.logger.info("Message polling stopped")

    async def poll_once(self) -> List[RelayMessage]:
        """Fetch pending messages and dispatch them."""
        messages = await self.api_client.poll_messages()
        for message in messages:
            await self._dispatch(message)
        return messages

    async def _dispatch(self, message: RelayMessage):
        handlers = self._handlers.get(message.type, [])
        if not handlers:
            self.logger.debug("No handler for message", message_type=message.type)
        for handler in list(handlers):
            try:
                result = handler(message)
                if inspect.isawaitable(result):
                    await result
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self.log_error("message_handler", e, message_type=message.type)

    async def _run(self):
        while True:
            try:
                await self.poll_once()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self.log_error("message_poll", e)
            await self.clock.sleep(self.interval)
