import logging
import secrets
import string
from datetime import datetime, timedelta
from decimal import Decimal
from functools import lru_cache

import jwt
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from familyhub.core.config import Settings
from familyhub.core.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    InvalidTokenError,
    NotFoundError,
    ValidationError,
)
from familyhub.db import NowUtc
from familyhub.modules.auth.deps import (
    TOKEN_TYPE_ACCESS,
    TOKEN_TYPE_REFRESH,
    DecodeToken,
    EnsureMember,
    EnsureRole,
    UserContext,
)
from familyhub.modules.auth.models import ALLOWED_ROLES, ROLE_PARENT, Family, User
from familyhub.modules.auth.schemas import FamilyOut, JarsOut, UserOut

logger = logging.getLogger("familyhub.auth")

FAMILY_CODE_LENGTH = 6
FAMILY_CODE_ALPHABET = string.ascii_uppercase + string.digits
FAMILY_CODE_ATTEMPTS = 10
DEFAULT_PARENT_AVATAR = "\U0001F46A"
DEFAULT_MEMBER_AVATAR = "\U0001F464"


@lru_cache
def _PinContext(rounds: int) -> CryptContext:
    return CryptContext(schemes=["argon2"], deprecated="auto", argon2__rounds=rounds)


def HashPin(pin: str, rounds: int) -> str:
    return _PinContext(rounds).hash(pin)


def VerifyPin(pin: str, pin_hash: str) -> bool:
    return _PinContext(1).verify(pin, pin_hash)


def GenerateFamilyCode() -> str:
    return "".join(secrets.choice(FAMILY_CODE_ALPHABET) for _ in range(FAMILY_CODE_LENGTH))


def NormalizeFamilyCode(value: str) -> str:
    return value.strip().upper()


def CreateAccessToken(user: UserContext, settings: Settings, now: datetime | None = None) -> str:
    issued = now or NowUtc()
    expires = issued + timedelta(minutes=settings.AccessTtlMinutes)
    payload = {
        "type": TOKEN_TYPE_ACCESS,
        "familyId": user.FamilyId,
        "userId": user.UserId,
        "role": user.Role,
        "iat": int(issued.timestamp()),
        "exp": int(expires.timestamp()),
    }
    return jwt.encode(payload, settings.JwtSecret, algorithm="HS256")


def CreateRefreshToken(user: UserContext, settings: Settings, now: datetime | None = None) -> str:
    issued = now or NowUtc()
    expires = issued + timedelta(days=settings.RefreshTtlDays)
    payload = {
        "type": TOKEN_TYPE_REFRESH,
        "familyId": user.FamilyId,
        "userId": user.UserId,
        "iat": int(issued.timestamp()),
        "exp": int(expires.timestamp()),
    }
    return jwt.encode(payload, settings.RefreshSecret, algorithm="HS256")


def IssueTokens(user: UserContext, settings: Settings) -> tuple[str, str]:
    """Return ``(access_token, refresh_token)`` for a selected family member.

    A family-only identity is refused: a token without a member would pass
    every authenticated route without saying who is acting.
    """
    if user.UserId is None:
        raise AuthorizationError("A family member must be selected")
    return CreateAccessToken(user, settings), CreateRefreshToken(user, settings)


def ContextForUser(user: User) -> UserContext:
    return UserContext(FamilyId=user.FamilyId, UserId=user.Id, Role=user.Role)


def RefreshAccessToken(db: Session, refresh_token: str | None, settings: Settings) -> str:
    if not refresh_token:
        raise AuthenticationError("Refresh token required")
    try:
        claims = DecodeToken(refresh_token, settings.RefreshSecret, TOKEN_TYPE_REFRESH)
    except InvalidTokenError as exc:
        raise InvalidTokenError("Invalid refresh token") from exc
    if claims.UserId is None:
        raise InvalidTokenError("Invalid refresh token")

    # Role comes from the current record, not from the refresh token.
    user = (
        db.query(User)
        .filter(User.Id == claims.UserId, User.FamilyId == claims.FamilyId)
        .first()
    )
    if not user:
        raise InvalidTokenError("Invalid refresh token")
    return CreateAccessToken(ContextForUser(user), settings)


def JarsFor(user: User) -> JarsOut:
    return JarsOut(
        spend=float(user.JarSpend or Decimal("0")),
        save=float(user.JarSave or Decimal("0")),
        give=float(user.JarGive or Decimal("0")),
    )


def BuildUserOut(user: User) -> UserOut:
    return UserOut(
        id=user.Id,
        familyId=user.FamilyId,
        name=user.Name,
        role=user.Role,
        avatar=user.Avatar,
        points=user.Points or 0,
        streak=user.Streak or 0,
        jars=JarsFor(user),
        createdAt=user.CreatedAt,
    )


def BuildFamilyOut(family: Family, include_members: bool = False) -> FamilyOut:
    return FamilyOut(
        id=family.Id,
        familyCode=family.FamilyCode,
        name=family.Name,
        createdAt=family.CreatedAt,
        members=[BuildUserOut(member) for member in family.Members] if include_members else None,
    )


def _AllocateFamilyCode(db: Session) -> str:
    for _ in range(FAMILY_CODE_ATTEMPTS):
        code = GenerateFamilyCode()
        if not db.query(Family.Id).filter(Family.FamilyCode == code).first():
            return code
    raise ConflictError("Could not allocate a family code. Try again.")


def RegisterFamily(
    db: Session,
    family_name: str,
    pin: str,
    parent_name: str,
    settings: Settings,
) -> tuple[Family, User]:
    family_name = (family_name or "").strip()
    parent_name = (parent_name or "").strip()
    pin = (pin or "").strip()
    if not family_name or not pin or not parent_name:
        raise ValidationError("Missing required fields")
    if len(pin) < settings.PinMinLength:
        raise ValidationError(f"PIN must be at least {settings.PinMinLength} characters")

    family = Family(
        Name=family_name,
        FamilyCode=_AllocateFamilyCode(db),
        PinHash=HashPin(pin, settings.PinHashRounds),
    )
    parent = User(
        Family=family,
        Name=parent_name,
        Role=ROLE_PARENT,
        Avatar=DEFAULT_PARENT_AVATAR,
        Points=0,
        Streak=0,
        JarSpend=0,
        JarSave=0,
        JarGive=0,
    )
    db.add(family)
    db.add(parent)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("Could not allocate a family code. Try again.") from exc
    db.refresh(family)
    db.refresh(parent)
    logger.info("family registered family_id=%s", family.Id)
    return family, parent


def AuthenticateFamily(db: Session, family_code: str, pin: str) -> Family:
    code = NormalizeFamilyCode(family_code or "")
    pin = (pin or "").strip()
    if not code or not pin:
        raise ValidationError("Missing family code or PIN")
    family = db.query(Family).filter(Family.FamilyCode == code).first()
    if not family or not VerifyPin(pin, family.PinHash):
        logger.warning("family login rejected")
        raise AuthenticationError("Invalid credentials")
    return family


def SelectMember(db: Session, family: Family, user_id: int) -> User:
    user = db.query(User).filter(User.Id == user_id, User.FamilyId == family.Id).first()
    if not user:
        raise NotFoundError("User not found")
    return user


def GetIdentitySnapshot(db: Session, user: UserContext) -> tuple[User | None, Family]:
    family = db.query(Family).filter(Family.Id == user.FamilyId).first()
    if not family:
        raise NotFoundError("Family not found")
    if user.UserId is None:
        return None, family
    record = db.query(User).filter(User.Id == user.UserId, User.FamilyId == family.Id).first()
    if not record:
        raise NotFoundError("User not found")
    return record, family


def RegisterMember(
    db: Session,
    user: UserContext,
    name: str,
    role: str,
    avatar: str | None = None,
) -> User:
    EnsureMember(user)
    EnsureRole(user, ROLE_PARENT)
    name = (name or "").strip()
    role = (role or "").strip().lower()
    if not name or not role:
        raise ValidationError("Name and role are required")
    if role not in ALLOWED_ROLES:
        raise ValidationError("Role must be parent or child")

    record = User(
        FamilyId=user.FamilyId,
        Name=name,
        Role=role,
        Avatar=(avatar or "").strip() or DEFAULT_MEMBER_AVATAR,
        Points=0,
        Streak=0,
        JarSpend=0,
        JarSave=0,
        JarGive=0,
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    logger.info("member added family_id=%s user_id=%s role=%s", user.FamilyId, record.Id, role)
    return record
