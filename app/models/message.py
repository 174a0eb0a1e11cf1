# app/models/message.py
"""Chat message posted by a user, listed newest first"""
from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from ..database import Base


class Message(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    author_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    body = Column(Text, nullable=False)
    time = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    author = relationship("User", back_populates="messages")

    def __repr__(self):
        return f"<Message(id={self.id}, author_id={self.author_id})>"
