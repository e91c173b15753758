from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from familyhub.core.json_fields import JsonText
from familyhub.db import Base, NowUtc

MESSAGE_TYPES = {"text", "image", "system"}


class ChatMessage(Base):
    __tablename__ = "chat_messages"

    Id = Column(Integer, primary_key=True, index=True)
    FamilyId = Column(Integer, ForeignKey("families.Id"), nullable=False, index=True)
    UserId = Column(Integer, ForeignKey("users.Id"), nullable=False, index=True)
    Content = Column(Text, nullable=False, default="")
    Type = Column(String(20), nullable=False, default="text")
    Attachments = Column(JsonText)
    CreatedAt = Column(DateTime(timezone=True), default=NowUtc, nullable=False, index=True)

    User = relationship("User")
