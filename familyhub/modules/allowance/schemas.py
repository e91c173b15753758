from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from familyhub.modules.auth.schemas import UserOut


class JarSplit(BaseModel):
    spend: float = Field(default=0, ge=0, le=100)
    save: float = Field(default=0, ge=0, le=100)
    give: float = Field(default=0, ge=0, le=100)


class DistributeRequest(BaseModel):
    amount: float | None = None
    distribution: JarSplit | None = None
    userIds: list[int] | None = None
    notes: str | None = Field(default=None, max_length=500)


class TransactionOut(BaseModel):
    id: int
    userId: int
    type: str
    amount: float
    jarDistribution: Any = None
    source: str | None = None
    notes: str | None = None
    createdAt: datetime
    user: UserOut | None = None


class DistributeResponse(BaseModel):
    success: bool
    transactions: list[TransactionOut]
