"""
Database models for the LinguaLink service.
"""

from .user import User, UserLanguage
from .call import Call

__all__ = ["User", "UserLanguage", "Call"]
