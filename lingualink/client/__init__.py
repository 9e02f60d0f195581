"""
Client-side access to the LinguaLink server.
"""

from .api import ApiClient
from .poller import MessagePoller

__all__ = ["ApiClient", "MessagePoller"]
