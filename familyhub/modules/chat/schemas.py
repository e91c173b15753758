from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class ChatAuthorOut(BaseModel):
    id: int
    name: str
    role: str
    avatar: str | None = None


class ChatMessageCreate(BaseModel):
    content: str | None = Field(default=None, max_length=4000)
    type: str | None = Field(default=None, max_length=20)
    attachments: list[str] | None = None


class ChatMessageOut(BaseModel):
    id: int
    familyId: int
    userId: int
    content: str
    type: str
    attachments: Any = None
    createdAt: datetime
    user: ChatAuthorOut | None = None
