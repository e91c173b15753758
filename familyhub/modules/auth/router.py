import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from familyhub.core.config import GetSettings, Settings
from familyhub.db import GetDb
from familyhub.modules.auth.deps import RequireAuthenticated, RequireRole, UserContext
from familyhub.modules.auth.models import ROLE_PARENT
from familyhub.modules.auth.schemas import (
    LoginRequest,
    LoginResponse,
    MeResponse,
    RefreshRequest,
    RefreshResponse,
    RegisterMemberRequest,
    RegisterRequest,
    RegisterResponse,
    UserOut,
)
from familyhub.modules.auth.service import (
    AuthenticateFamily,
    BuildFamilyOut,
    BuildUserOut,
    ContextForUser,
    GetIdentitySnapshot,
    IssueTokens,
    RefreshAccessToken,
    RegisterFamily,
    RegisterMember,
    SelectMember,
)

router = APIRouter(prefix="/api/auth", tags=["auth"])
logger = logging.getLogger("familyhub.auth")


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def Register(
    payload: RegisterRequest,
    db: Session = Depends(GetDb),
    settings: Settings = Depends(GetSettings),
) -> RegisterResponse:
    family, parent = RegisterFamily(db, payload.familyName, payload.pin, payload.parentName, settings)
    token, refresh_token = IssueTokens(ContextForUser(parent), settings)
    return RegisterResponse(
        token=token,
        refreshToken=refresh_token,
        family=BuildFamilyOut(family),
        user=BuildUserOut(parent),
    )


@router.post("/login", response_model=LoginResponse, response_model_exclude_none=True)
def Login(
    payload: LoginRequest,
    db: Session = Depends(GetDb),
    settings: Settings = Depends(GetSettings),
) -> LoginResponse:
    family = AuthenticateFamily(db, payload.familyCode, payload.pin)
    if payload.userId is None:
        # Member picker: no token until somebody is chosen.
        return LoginResponse(family=BuildFamilyOut(family, include_members=True))

    user = SelectMember(db, family, payload.userId)
    token, refresh_token = IssueTokens(ContextForUser(user), settings)
    logger.info("member signed in family_id=%s user_id=%s", family.Id, user.Id)
    return LoginResponse(
        token=token,
        refreshToken=refresh_token,
        family=BuildFamilyOut(family),
        user=BuildUserOut(user),
    )


@router.post("/refresh", response_model=RefreshResponse)
def Refresh(
    payload: RefreshRequest,
    db: Session = Depends(GetDb),
    settings: Settings = Depends(GetSettings),
) -> RefreshResponse:
    return RefreshResponse(token=RefreshAccessToken(db, payload.refreshToken, settings))


@router.get("/me", response_model=MeResponse, response_model_exclude_none=True)
def Me(
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireAuthenticated),
) -> MeResponse:
    record, family = GetIdentitySnapshot(db, user)
    if record is None:
        # Login never issues a family-only token; tokens minted elsewhere still get the member picker.
        return MeResponse(family=BuildFamilyOut(family, include_members=True))
    return MeResponse(user=BuildUserOut(record), family=BuildFamilyOut(family))


@router.post("/register-member", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def AddMember(
    payload: RegisterMemberRequest,
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireRole(ROLE_PARENT)),
) -> UserOut:
    record = RegisterMember(db, user, payload.name, payload.role, payload.avatar)
    return BuildUserOut(record)
