"""
Conversation transcript for the active call.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional


@dataclass
class Utterance:
    """One transcript entry: what was said and its translation."""
    id: str
    sender_id: int
    original_text: str
    translated_text: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "sender_id": self.sender_id,
            "original_text": self.original_text,
            "translated_text": self.translated_text,
            "timestamp": self.timestamp.isoformat(),
        }


class Transcript:
    """Append-only list of utterances, cleared when the call ends."""

    def __init__(self):
        self._entries: List[Utterance] = []
        self._counter = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Utterance]:
        return iter(list(self._entries))

    @property
    def entries(self) -> List[Utterance]:
        return list(self._entries)

    def append(
        self,
        sender_id: int,
        original_text: str,
        translated_text: Optional[str] = None,
        timestamp: Optional[datetime] = None,
    ) -> Utterance:
        utterance = Utterance(
            id=f"msg-{self._counter}",
            sender_id=sender_id,
            original_text=original_text,
            translated_text=translated_text,
        )
        if timestamp is not None:
            utterance.timestamp = timestamp
        self._counter += 1
        self._entries.append(utterance)
        return utterance

    def clear(self):
        self._entries.clear()

    def to_list(self) -> List[Dict[str, Any]]:
        return [entry.to_dict() for entry in self._entries]
