from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class RewardCreate(BaseModel):
    title: str = Field(..., max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    pointCost: int | None = None
    photos: list[str] | None = None
    stock: int | None = None


class RewardOut(BaseModel):
    id: int
    familyId: int
    title: str
    description: str | None = None
    pointCost: int
    photos: Any = None
    stock: int | None = None
    isActive: bool
    createdAt: datetime


class RedemptionOut(BaseModel):
    id: int
    rewardId: int
    userId: int
    status: str
    pointCost: int
    createdAt: datetime
