"""Chat widget models"""

from datetime import datetime
from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from atelier.models.base import BaseModel


class ChatSession(BaseModel):
    """A visitor conversation with the site assistant"""

    __tablename__ = "chat_sessions"

    session_id = Column(String(64), unique=True, nullable=False, index=True)
    email = Column(String(255), nullable=True)
    name = Column(String(255), nullable=True)
    company = Column(String(255), nullable=True)
    preferences = Column(JSON, default=dict, nullable=True)
    last_activity = Column(DateTime, default=datetime.utcnow, nullable=False)

    messages = relationship(
        "ChatMessage",
        back_populates="session",
        cascade="all, delete-orphan",
    )


class ChatMessage(BaseModel):
    """One turn of a chat conversation"""

    __tablename__ = "chat_messages"

    session_id = Column(
        String(64),
        ForeignKey("chat_sessions.session_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role = Column(String(20), nullable=False)  # user, assistant
    content = Column(Text, nullable=False)

    session = relationship("ChatSession", back_populates="messages")

    def __repr__(self):
        return f"<ChatMessage(id={self.id}, role={self.role})>"
