from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from familyhub.db import GetDb
from familyhub.modules.auth.deps import RequireMember, RequireRole, UserContext
from familyhub.modules.auth.models import ROLE_PARENT
from familyhub.modules.rewards.schemas import RedemptionOut, RewardCreate, RewardOut
from familyhub.modules.rewards.service import (
    BuildRedemptionOut,
    BuildRewardOut,
    CreateReward,
    ListRewards,
    RedeemReward,
)

router = APIRouter(prefix="/api/rewards", tags=["rewards"])


@router.get("", response_model=list[RewardOut])
def GetRewards(
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireMember()),
) -> list[RewardOut]:
    return [BuildRewardOut(reward) for reward in ListRewards(db, user)]


@router.post("", response_model=RewardOut, status_code=status.HTTP_201_CREATED)
def AddReward(
    payload: RewardCreate,
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireRole(ROLE_PARENT)),
) -> RewardOut:
    reward = CreateReward(
        db,
        user,
        title=payload.title,
        point_cost=payload.pointCost,
        stock=payload.stock,
        description=payload.description,
        photos=payload.photos,
    )
    return BuildRewardOut(reward)


@router.post("/{reward_id}/redeem", response_model=RedemptionOut)
def Redeem(
    reward_id: int,
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireMember()),
) -> RedemptionOut:
    return BuildRedemptionOut(RedeemReward(db, user, reward_id))
