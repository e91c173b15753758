"""Reward catalog and redemption.

Redemption checks stock and balance, then applies both decrements as
conditional updates (``stock > 0``, ``points >= cost``). A concurrent
redemption that wins the race leaves the loser's update touching no rows,
which is reported as the same failure the up-front check would have given.
"""

from __future__ import annotations

import logging

from sqlalchemy import update
from sqlalchemy.orm import Session

from familyhub.core.errors import (
    InsufficientPointsError,
    OutOfStockError,
    RewardUnavailableError,
    ValidationError,
)
from familyhub.modules.auth.deps import EnsureMember, EnsureRole, UserContext
from familyhub.modules.auth.models import ROLE_PARENT, User
from familyhub.modules.rewards.models import REDEMPTION_PENDING, Reward, RewardRedemption
from familyhub.modules.rewards.schemas import RedemptionOut, RewardOut

logger = logging.getLogger("familyhub.rewards")


def ListRewards(db: Session, user: UserContext) -> list[Reward]:
    return (
        db.query(Reward)
        .filter(Reward.FamilyId == user.FamilyId, Reward.IsActive == True)  # noqa: E712
        .order_by(Reward.PointCost.asc(), Reward.Id.asc())
        .all()
    )


def CreateReward(
    db: Session,
    user: UserContext,
    title: str,
    point_cost: int | None,
    stock: int | None = None,
    description: str | None = None,
    photos: list[str] | None = None,
) -> Reward:
    EnsureMember(user)
    EnsureRole(user, ROLE_PARENT)
    title = (title or "").strip()
    if not title:
        raise ValidationError("Title is required")
    if point_cost is None or isinstance(point_cost, bool) or point_cost <= 0:
        raise ValidationError("Point cost must be a positive whole number")
    if stock is not None and stock < 0:
        raise ValidationError("Stock cannot be negative")

    reward = Reward(
        FamilyId=user.FamilyId,
        Title=title,
        Description=description,
        PointCost=point_cost,
        Photos=photos or [],
        Stock=stock,
        IsActive=True,
    )
    db.add(reward)
    db.commit()
    db.refresh(reward)
    logger.info("reward created family_id=%s reward_id=%s", user.FamilyId, reward.Id)
    return reward


def RedeemReward(db: Session, user: UserContext, reward_id: int) -> RewardRedemption:
    user_id = EnsureMember(user)

    reward = (
        db.query(Reward)
        .filter(
            Reward.Id == reward_id,
            Reward.FamilyId == user.FamilyId,
            Reward.IsActive == True,  # noqa: E712
        )
        .first()
    )
    if not reward:
        raise RewardUnavailableError()
    if reward.Stock is not None and reward.Stock <= 0:
        raise OutOfStockError()

    member = db.query(User).filter(User.Id == user_id, User.FamilyId == user.FamilyId).first()
    if not member:
        raise RewardUnavailableError("User not found")
    if (member.Points or 0) < reward.PointCost:
        raise InsufficientPointsError()

    cost = reward.PointCost
    tracks_stock = reward.Stock is not None
    try:
        if tracks_stock:
            result = db.execute(
                update(Reward)
                .where(Reward.Id == reward.Id, Reward.Stock > 0)
                .values(Stock=Reward.Stock - 1)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise OutOfStockError()

        result = db.execute(
            update(User)
            .where(User.Id == user_id, User.Points >= cost)
            .values(Points=User.Points - cost)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise InsufficientPointsError()

        redemption = RewardRedemption(
            RewardId=reward.Id,
            UserId=user_id,
            Status=REDEMPTION_PENDING,
            PointCost=cost,
        )
        db.add(redemption)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(redemption)
    db.expire_all()
    logger.info(
        "reward redeemed reward_id=%s user_id=%s redemption_id=%s",
        reward_id,
        user_id,
        redemption.Id,
    )
    return redemption


def BuildRewardOut(reward: Reward) -> RewardOut:
    return RewardOut(
        id=reward.Id,
        familyId=reward.FamilyId,
        title=reward.Title,
        description=reward.Description,
        pointCost=reward.PointCost,
        photos=reward.Photos,
        stock=reward.Stock,
        isActive=reward.IsActive,
        createdAt=reward.CreatedAt,
    )


def BuildRedemptionOut(redemption: RewardRedemption) -> RedemptionOut:
    return RedemptionOut(
        id=redemption.Id,
        rewardId=redemption.RewardId,
        userId=redemption.UserId,
        status=redemption.Status,
        pointCost=redemption.PointCost,
        createdAt=redemption.CreatedAt,
    )
