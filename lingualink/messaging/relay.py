"""
Polling-based mailbox relay.

Each online user owns a bounded FIFO mailbox of short signaling messages
(call invitations, accept/reject notices...). Clients drain their mailbox by
polling; nothing is pushed. Delivery is best-effort and at-most-once:

* a mailbox keeps at most ``capacity`` messages, the oldest are dropped
  silently once it overflows;
* a mailbox that has not been polled for ``idle_timeout`` seconds is removed
  by the periodic sweep, together with anything still pending in it.
"""

import asyncio
import threading
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, List, Optional

from lingualink.config import settings
from lingualink.errors import InvalidRequest
from lingualink.utils.clock import Clock, system_clock
from lingualink.utils.logging import LoggerMixin


@dataclass
class RelayMessage:
    """A signaling message waiting in a recipient's mailbox."""
    type: str
    from_user_id: int
    payload: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "from": self.from_user_id,
            "payload": self.payload,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RelayMessage":
        return cls(
            type=data["type"],
            from_user_id=int(data["from"]),
            payload=data.get("payload") or {},
        )


@dataclass
class Mailbox:
    """Pending messages and last poll instant for one user."""
    last_poll: float
    messages: Deque[RelayMessage]


class MailboxRelay(LoggerMixin):
    """
    Registry of per-user mailboxes.

    All operations are non-blocking and guarded by a single lock over the
    whole map, so they can be called from request handlers running on the
    event loop as well as from the threadpool.
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        capacity: Optional[int] = None,
        idle_timeout: Optional[float] = None,
        sweep_interval: Optional[float] = None,
    ):
        self.clock = clock or system_clock
        self.capacity = capacity or settings.mailbox_capacity
        self.idle_timeout = idle_timeout if idle_timeout is not None else settings.mailbox_idle_timeout
        self.sweep_interval = sweep_interval if sweep_interval is not None else settings.mailbox_sweep_interval

        self._mailboxes: Dict[int, Mailbox] = {}
        self._lock = threading.Lock()
        self._sweep_task: Optional[asyncio.Task] = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._mailboxes)

    def _get_or_create(self, user_id: int) -> Mailbox:
        # Caller holds the lock
        mailbox = self._mailboxes.get(user_id)
        if mailbox is None:
            mailbox = Mailbox(
                last_poll=self.clock.now(),
                messages=deque(maxlen=self.capacity),
            )
            self._mailboxes[user_id] = mailbox
            self.logger.debug("Mailbox created", user_id=user_id)
        return mailbox

    def register(self, user_id: int) -> None:
        """Ensure a mailbox exists for the user and mark it as freshly polled."""
        with self._lock:
            self._get_or_create(user_id).last_poll = self.clock.now()

    def send(
        self,
        from_user_id: int,
        to_user_id: Optional[int],
        message_type: Optional[str],
        payload: Optional[Dict[str, Any]] = None,
    ) -> RelayMessage:
        """
        Append a message to the recipient's mailbox.

        Raises:
            InvalidRequest: If the recipient or the message type is missing
        """
        if to_user_id is None or to_user_id == "" or not message_type:
            raise InvalidRequest("Missing required fields")

        message = RelayMessage(
            type=message_type,
            from_user_id=from_user_id,
            payload=dict(payload or {}),
        )

        with self._lock:
            mailbox = self._get_or_create(int(to_user_id))
            overflow = len(mailbox.messages) == mailbox.messages.maxlen
            mailbox.messages.append(message)

        if overflow:
            self.logger.debug(
                "Mailbox full, oldest message dropped",
                user_id=to_user_id,
                capacity=self.capacity,
            )
        return message

    def poll(self, user_id: int) -> List[RelayMessage]:
        """Drain the user's mailbox, returning pending messages in arrival order."""
        with self._lock:
            mailbox = self._get_or_create(user_id)
            mailbox.last_poll = self.clock.now()
            drained = mailbox.messages
            mailbox.messages = deque(maxlen=self.capacity)

        return list(drained)

    def sweep(self) -> int:
        """Remove mailboxes idle for longer than ``idle_timeout``. Returns how many."""
        now = self.clock.now()
        with self._lock:
            stale = [
                user_id
                for user_id, mailbox in self._mailboxes.items()
                if now - mailbox.last_poll > self.idle_timeout
            ]
            for user_id in stale:
                del self._mailboxes[user_id]

        if stale:
            self.logger.info("Evicted idle mailboxes", count=len(stale), users=stale)
        return len(stale)

    def is_registered(self, user_id: int) -> bool:
        with self._lock:
            return user_id in self._mailboxes

    def pending_count(self, user_id: int) -> int:
        with self._lock:
            mailbox = self._mailboxes.get(user_id)
            return len(mailbox.messages) if mailbox else 0

    async def start(self):
        """Start the periodic sweep task."""
        if self._sweep_task and not self._sweep_task.done():
            return
        self._sweep_task = asyncio.create_task(self._sweep_loop())
        self.logger.info("Mailbox relay started", sweep_interval=self.sweep_interval)

    async def stop(self):
        """Stop the periodic sweep task."""
        if not self._sweep_task:
            return
        self._sweep_task.cancel()
        await asyncio.gather(self._sweep_task, return_exceptions=True)
        self._sweep_task = None
        self.logger.info("Mailbox relay stopped")

    async def _sweep_loop(self):
        """Background task evicting idle mailboxes."""
        while True:
            await self.clock.sleep(self.sweep_interval)
            try:
                self.sweep()
            except Exception as e:
                self.log_error("mailbox_sweep", e)
