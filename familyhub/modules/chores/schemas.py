from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field

from familyhub.modules.auth.schemas import UserOut


class ChoreCreate(BaseModel):
    title: str = Field(..., max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    points: int = Field(default=0)
    schedule: dict[str, Any] | None = None
    difficulty: str | None = Field(default=None, max_length=20)
    photos: list[str] | None = None
    assignees: list[int] = Field(default_factory=list)


class CompletionCreate(BaseModel):
    beforePhotos: list[str] | None = None
    afterPhotos: list[str] | None = None
    notes: str | None = Field(default=None, max_length=2000)
    timeSpent: int | None = Field(default=None, ge=0)


class ReviewRequest(BaseModel):
    completionId: int | None = None
    approved: bool = False


class ReviewResponse(BaseModel):
    success: bool
    status: str


class CompletionOut(BaseModel):
    id: int
    assignmentId: int
    userId: int
    status: str
    beforePhotos: Any = None
    afterPhotos: Any = None
    notes: str | None = None
    timeSpent: int | None = None
    submittedAt: datetime
    approvedAt: datetime | None = None


class AssignmentOut(BaseModel):
    id: int
    choreId: int
    userId: int
    status: str
    dueDate: date | None = None
    user: UserOut | None = None
    completions: list[CompletionOut] = Field(default_factory=list)


class ChoreOut(BaseModel):
    id: int
    familyId: int
    title: str
    description: str | None = None
    points: int
    schedule: Any = None
    difficulty: str
    photos: Any = None
    isActive: bool
    createdAt: datetime
    assignments: list[AssignmentOut] = Field(default_factory=list)
