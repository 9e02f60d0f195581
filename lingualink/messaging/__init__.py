"""
In-memory signaling between online users.
"""

from .relay import MailboxRelay, Mailbox, RelayMessage

__all__ = ["MailboxRelay", "Mailbox", "RelayMessage"]
