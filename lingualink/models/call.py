"""
Database model for call history.
"""

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from datetime import datetime, timezone
from typing import Optional, Dict, Any
from lingualink.models.database import Base


class Call(Base):
    """A call between two users, as recorded by the initiator."""

    __tablename__ = "calls"

    id = Column(Integer, primary_key=True, index=True)
    initiator_id = Column(Integer, nullable=False, index=True)
    receiver_id = Column(Integer, nullable=False, index=True)

    initiator_language = Column(String(10), nullable=False)
    receiver_language = Column(String(10), nullable=False)

    start_time = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=True)
    duration = Column(Integer, nullable=True)

    def __repr__(self):
        return f"<Call(id={self.id}, initiator={self.initiator_id}, receiver={self.receiver_id})>"

    def to_dict(
        self,
        initiator: Optional[Dict[str, Any]] = None,
        receiver: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Convert model to dictionary."""
        data = {
            "id": self.id,
            "initiatorId": self.initiator_id,
            "receiverId": self.receiver_id,
            "startTime": self.start_time.isoformat() if self.start_time else None,
            "endTime": self.end_time.isoformat() if self.end_time else None,
            "initiatorLanguage": self.initiator_language,
            "receiverLanguage": self.receiver_language,
            "duration": self.duration,
        }
        if initiator is not None:
            data["initiator"] = initiator
        if receiver is not None:
            data["receiver"] = receiver
        return data

    def finish(self, duration: int, end_time: Optional[datetime] = None):
        """Mark the call as ended."""
        self.end_time = end_time or datetime.now(timezone.utc)
        self.duration = duration
