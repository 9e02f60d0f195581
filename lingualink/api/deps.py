"""
FastAPI dependencies shared by the route modules.
"""

from typing import AsyncGenerator, Optional
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from lingualink.config import settings
from lingualink.errors import AuthenticationError
from lingualink.messaging.relay import MailboxRelay
from lingualink.models import User
from lingualink.models.database import session_scope
from lingualink.storage import Storage
from lingualink.stt.base import TranscriptionProvider
from lingualink.translation.base import TranslationProvider
from lingualink.utils.logging import user_id_var


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    async with session_scope(request.app.state.session_factory) as session:
        yield session


def get_storage(session: AsyncSession = Depends(get_db_session)) -> Storage:
    return Storage(session)


def get_relay(request: Request) -> MailboxRelay:
    return request.app.state.relay


def get_translator(request: Request) -> TranslationProvider:
    return request.app.state.translator


def get_transcriber(request: Request) -> TranscriptionProvider:
    return request.app.state.transcriber


async def get_current_user(request: Request, storage: Storage = Depends(get_storage)) -> User:
    """Resolve the caller from the ``user-id`` header."""
    raw_user_id: Optional[str] = request.headers.get(settings.user_id_header)
    if not raw_user_id:
        raise AuthenticationError("Unauthorized")

    try:
        user_id = int(raw_user_id)
    except ValueError:
        raise AuthenticationError("User not found")

    user = await storage.get_user(user_id)
    if user is None:
        raise AuthenticationError("User not found")

    user_id_var.set(user.id)
    return user
