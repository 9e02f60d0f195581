"""
Mailbox relay endpoints: register, send and poll.
"""

from fastapi import APIRouter, Depends

from lingualink.api.deps import get_current_user, get_relay
from lingualink.messaging.relay import MailboxRelay
from lingualink.models import User
from lingualink.schemas import SendMessageRequest

router = APIRouter(prefix="/api/messaging", tags=["messaging"])


@router.post("/register")
async def register(
    user: User = Depends(get_current_user),
    relay: MailboxRelay = Depends(get_relay),
):
    relay.register(user.id)
    return {"success": True}


@router.post("/send")
async def send_message(
    request: SendMessageRequest,
    user: User = Depends(get_current_user),
    relay: MailboxRelay = Depends(get_relay),
):
    # Best effort: success means queued, not delivered
    relay.send(user.id, request.to, request.type, request.payload)
    return {"success": True}


@router.get("/poll")
async def poll_messages(
    user: User = Depends(get_current_user),
    relay: MailboxRelay = Depends(get_relay),
):
    messages = relay.poll(user.id)
    return {"messages": [message.to_dict() for message in messages]}
