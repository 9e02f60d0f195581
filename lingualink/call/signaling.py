"""
Call invitations exchanged through the mailbox relay.

The caller starts its call, then sends an ``invite`` carrying the channel
and languages; the callee answers with ``accept`` (joining the same channel)
or ``reject``. Either side sends ``end-call`` when hanging up.

The caller also keeps the call history: a call record is created when the
invitation goes out and closed with the measured duration once the call is
back to IDLE, however it ended.
"""

import inspect
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from lingualink.call.controller import CallController
from lingualink.call.session import ACTIVE_PHASES, CallPhase, CallSession
from lingualink.client.api import ApiClient
from lingualink.client.poller import MessagePoller
from lingualink.errors import LinguaLinkError
from lingualink.messaging.relay import RelayMessage
from lingualink.utils.logging import LoggerMixin

INVITE = "invite"
ACCEPT = "accept"
REJECT = "reject"
END_CALL = "end-call"

MAX_PENDING_INVITATIONS = 20

InvitationListener = Callable[[RelayMessage], Union[None, Awaitable[None]]]


def invitation_payload(session: CallSession) -> Dict[str, Any]:
    return {
        "channel": session.channel_id,
        "initiatorLanguage": session.initiator_language,
        "receiverLanguage": session.receiver_language,
    }


class CallSignaling(LoggerMixin):
    """Glue between the call controller and the relay polling loop."""

    def __init__(
        self,
        controller: CallController,
        api_client: ApiClient,
        poller: MessagePoller,
        max_pending: int = MAX_PENDING_INVITATIONS,
    ):
        self.controller = controller
        self.api_client = api_client
        self.poller = poller
        self.max_pending = max_pending
        self.pending_invitations: List[RelayMessage] = []
        self._invitation_listeners: List[InvitationListener] = []
        self._call_records: Dict[str, int] = {}

        poller.add_handler(INVITE, self._on_invite)
        poller.add_handler(REJECT, self._on_remote_hangup)
        poller.add_handler(END_CALL, self._on_remote_hangup)
        controller.on_phase_change(self._on_phase_change)

    def on_invitation(self, listener: InvitationListener):
        """Register a listener notified of incoming invitations."""
        self._invitation_listeners.append(listener)

    async def invite(
        self,
        remote_user_id: int,
        initiator_language: str,
        receiver_language: str,
    ) -> CallSession:
        """Start a call, record it and invite the remote user to its channel."""
        session = await self.controller.start(remote_user_id, initiator_language, receiver_language)
        await self._record_call(session)
        await self.api_client.send_message(remote_user_id, INVITE, invitation_payload(session))
        return session

    async def accept(self, invitation: RelayMessage) -> CallSession:
        """Join the caller's channel and tell the caller."""
        self._forget(invitation)
        session = await self.controller.accept(invitation)
        await self.api_client.send_message(
            invitation.from_user_id, ACCEPT, {"channel": session.channel_id}
        )
        return session

    async def reject(self, invitation: RelayMessage):
        self._forget(invitation)
        await self.api_client.send_message(
            invitation.from_user_id, REJECT, {"channel": invitation.payload.get("channel")}
        )

    async def hang_up(self):
        """End the local call and notify the other party."""
        session = self.controller.session
        await self.controller.end()
        if session is not None and session.remote_user_id is not None:
            await self.api_client.send_message(
                session.remote_user_id, END_CALL, {"channel": session.channel_id}
            )

    def _forget(self, invitation: RelayMessage):
        if invitation in self.pending_invitations:
            self.pending_invitations.remove(invitation)

    async def _record_call(self, session: CallSession):
        """Create the history record; a failure never affects the call itself."""
        try:
            record = await self.api_client.record_call(
                session.remote_user_id,
                session.initiator_language,
                session.receiver_language,
            )
        except LinguaLinkError as e:
            self.log_error("record_call", e, channel_id=session.channel_id)
            return

        self._call_records[session.session_id] = record["id"]
        if session.phase not in ACTIVE_PHASES:
            # Ended while the record was being created
            await self._close_record(session)

    async def _close_record(self, session: CallSession):
        call_id = self._call_records.pop(session.session_id, None)
        if call_id is None:
            return
        try:
            await self.api_client.end_call_record(call_id, self.controller.last_duration)
        except LinguaLinkError as e:
            self.log_error("end_call_record", e, call_id=call_id)

    async def _on_phase_change(self, session: CallSession, old_phase: CallPhase, new_phase: CallPhase):
        if new_phase == CallPhase.IDLE:
            await self._close_record(session)

    async def _on_invite(self, message: RelayMessage):
        self.logger.info("Incoming call invitation", from_user_id=message.from_user_id)
        self.pending_invitations.append(message)
        if len(self.pending_invitations) > self.max_pending:
            dropped = self.pending_invitations.pop(0)
            self.logger.debug("Oldest pending invitation dropped", from_user_id=dropped.from_user_id)
        for listener in list(self._invitation_listeners):
            result = listener(message)
            if inspect.isawaitable(result):
                await result

    async def _on_remote_hangup(self, message: RelayMessage):
        channel = (message.payload or {}).get("channel")
        # A withdrawn invitation is no longer answerable, whatever the local state
        self.pending_invitations = [
            invitation for invitation in self.pending_invitations
            if invitation.payload.get("channel") != channel
        ]

        session = self.controller.session
        if session is None or session.phase not in ACTIVE_PHASES:
            return
        if channel == session.channel_id:
            self.logger.info("Remote party hung up", message_type=message.type)
            await self.controller.end()
