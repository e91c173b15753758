from datetime import datetime

from pydantic import BaseModel, Field


class JarsOut(BaseModel):
    spend: float
    save: float
    give: float


class UserOut(BaseModel):
    id: int
    familyId: int
    name: str
    role: str
    avatar: str | None = None
    points: int
    streak: int
    jars: JarsOut
    createdAt: datetime


class FamilyOut(BaseModel):
    id: int
    familyCode: str
    name: str
    createdAt: datetime
    members: list[UserOut] | None = None


class RegisterRequest(BaseModel):
    familyName: str = Field(..., max_length=120)
    pin: str = Field(..., max_length=64)
    parentName: str = Field(..., max_length=120)


class RegisterResponse(BaseModel):
    token: str
    refreshToken: str
    family: FamilyOut
    user: UserOut


class LoginRequest(BaseModel):
    familyCode: str = Field(..., max_length=12)
    pin: str = Field(..., max_length=64)
    userId: int | None = None


class LoginResponse(BaseModel):
    token: str | None = None
    refreshToken: str | None = None
    family: FamilyOut
    user: UserOut | None = None


class RefreshRequest(BaseModel):
    refreshToken: str | None = Field(default=None, max_length=2000)


class RefreshResponse(BaseModel):
    token: str


class MeResponse(BaseModel):
    user: UserOut | None = None
    family: FamilyOut


class RegisterMemberRequest(BaseModel):
    name: str = Field(..., max_length=120)
    role: str = Field(..., max_length=20)
    avatar: str | None = Field(default=None, max_length=40)
