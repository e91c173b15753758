from dataclasses import dataclass

import jwt
from fastapi import Depends, Request

from familyhub.core.config import GetSettings, Settings
from familyhub.core.errors import AuthenticationError, AuthorizationError, InvalidTokenError

TOKEN_TYPE_ACCESS = "access"
TOKEN_TYPE_REFRESH = "refresh"


@dataclass(frozen=True)
class UserContext:
    FamilyId: int
    UserId: int | None = None
    Role: str | None = None


def DecodeToken(token: str, secret: str, token_type: str) -> UserContext:
    try:
        payload = jwt.decode(token, secret, algorithms=["HS256"])
    except jwt.ExpiredSignatureError as exc:
        raise InvalidTokenError("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise InvalidTokenError("Invalid token") from exc

    if payload.get("type") != token_type:
        raise InvalidTokenError("Invalid token")
    family_id = payload.get("familyId")
    user_id = payload.get("userId")
    try:
        family_id = int(family_id)
        user_id = int(user_id) if user_id is not None else None
    except (TypeError, ValueError) as exc:
        raise InvalidTokenError("Invalid token") from exc
    return UserContext(FamilyId=family_id, UserId=user_id, Role=payload.get("role"))


def ExtractBearerToken(auth_header: str | None) -> str:
    if not auth_header:
        raise AuthenticationError("Authorization header required")
    scheme, _, token = auth_header.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Token required")
    return token.strip()


def RequireAuthenticated(
    request: Request,
    settings: Settings = Depends(GetSettings),
) -> UserContext:
    token = ExtractBearerToken(request.headers.get("Authorization"))
    return DecodeToken(token, settings.JwtSecret, TOKEN_TYPE_ACCESS)


def EnsureMember(user: UserContext) -> int:
    if user.UserId is None:
        raise AuthorizationError("Select a family member first")
    return user.UserId


def EnsureRole(user: UserContext, role: str) -> None:
    if user.Role != role:
        raise AuthorizationError(f"Only {role}s can do this")


def RequireMember():
    def _checker(user: UserContext = Depends(RequireAuthenticated)) -> UserContext:
        EnsureMember(user)
        return user

    return _checker


def RequireRole(role: str):
    def _checker(user: UserContext = Depends(RequireAuthenticated)) -> UserContext:
        EnsureMember(user)
        EnsureRole(user, role)
        return user

    return _checker
