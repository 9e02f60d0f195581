"""
Data access for users, user languages and call history.
"""

from typing import Any, Dict, List, Optional
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from lingualink.models import Call, User, UserLanguage
from lingualink.utils.logging import LoggerMixin


class Storage(LoggerMixin):
    """Repository bound to one database session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    # User operations

    async def get_user(self, user_id: int) -> Optional[User]:
        return await self.session.get(User, user_id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def create_user(self, data: Dict[str, Any]) -> User:
        user = User(**data)
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        self.logger.info("User created", user_id=user.id)
        return user

    async def update_user(self, user_id: int, data: Dict[str, Any]) -> Optional[User]:
        user = await self.get_user(user_id)
        if user is None:
            return None
        for key, value in data.items():
            setattr(user, key, value)
        await self.session.flush()
        return user

    async def get_user_with_languages(self, user_id: int) -> Optional[Dict[str, Any]]:
        user = await self.get_user(user_id)
        if user is None:
            return None
        languages = await self.get_user_languages(user_id)
        return user.to_dict(languages=languages)

    # UserLanguage operations

    async def get_user_languages(self, user_id: int) -> List[UserLanguage]:
        result = await self.session.execute(
            select(UserLanguage).where(UserLanguage.user_id == user_id).order_by(UserLanguage.id)
        )
        return list(result.scalars().all())

    async def get_user_language(self, language_id: int) -> Optional[UserLanguage]:
        return await self.session.get(UserLanguage, language_id)

    async def add_user_language(self, data: Dict[str, Any]) -> UserLanguage:
        language = UserLanguage(**data)
        self.session.add(language)
        await self.session.flush()
        return language

    async def update_user_language(self, language_id: int, data: Dict[str, Any]) -> Optional[UserLanguage]:
        language = await self.get_user_language(language_id)
        if language is None:
            return None
        for key, value in data.items():
            setattr(language, key, value)
        await self.session.flush()
        return language

    async def delete_user_language(self, language_id: int) -> bool:
        language = await self.get_user_language(language_id)
        if language is None:
            return False
        await self.session.delete(language)
        await self.session.flush()
        return True

    # Call operations

    async def get_calls(self, user_id: int) -> List[Dict[str, Any]]:
        """Calls the user took part in, newest first, with both participants."""
        result = await self.session.execute(
            select(Call)
            .where(or_(Call.initiator_id == user_id, Call.receiver_id == user_id))
            .order_by(Call.start_time.desc(), Call.id.desc())
        )
        calls = list(result.scalars().all())

        participant_ids = {c.initiator_id for c in calls} | {c.receiver_id for c in calls}
        users: Dict[int, Dict[str, Any]] = {}
        if participant_ids:
            rows = await self.session.execute(select(User).where(User.id.in_(participant_ids)))
            users = {u.id: u.to_dict() for u in rows.scalars().all()}

        return [
            c.to_dict(initiator=users.get(c.initiator_id), receiver=users.get(c.receiver_id))
            for c in calls
        ]

    async def get_call(self, call_id: int) -> Optional[Call]:
        return await self.session.get(Call, call_id)

    async def create_call(self, data: Dict[str, Any]) -> Call:
        call = Call(**data)
        self.session.add(call)
        await self.session.flush()
        await self.session.refresh(call)
        self.logger.info("Call recorded", call_id=call.id)
        return call

    async def end_call(self, call_id: int, duration: int) -> Optional[Call]:
        call = await self.get_call(call_id)
        if call is None:
            return None
        call.finish(duration)
        await self.session.flush()
        return call
