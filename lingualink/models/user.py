"""
Database models for users and the languages they speak or learn.
"""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.sql import func
from typing import Dict, Any, Optional, List
from lingualink.models.database import Base


class User(Base):
    """A registered user."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)
    display_name = Column(String(100), nullable=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    bio = Column(Text, nullable=True)
    profile_picture = Column(String(500), nullable=True)
    native_language = Column(String(10), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<User(id={self.id}, username={self.username})>"

    def to_dict(self, languages: Optional[List["UserLanguage"]] = None) -> Dict[str, Any]:
        """Convert model to dictionary, never exposing the password."""
        data = {
            "id": self.id,
            "username": self.username,
            "displayName": self.display_name,
            "email": self.email,
            "bio": self.bio,
            "profilePicture": self.profile_picture,
            "nativeLanguage": self.native_language,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
        if languages is not None:
            data["languages"] = [language.to_dict() for language in languages]
        return data


class UserLanguage(Base):
    """A language a user is learning, with proficiency."""

    __tablename__ = "user_languages"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    language = Column(String(10), nullable=False)
    proficiency = Column(String(20), nullable=False)

    def __repr__(self):
        return f"<UserLanguage(user_id={self.user_id}, language={self.language})>"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "language": self.language,
            "proficiency": self.proficiency,
        }
