from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from familyhub.core.json_fields import JsonText
from familyhub.db import Base, NowUtc

REDEMPTION_PENDING = "pending"


class Reward(Base):
    __tablename__ = "rewards"

    Id = Column(Integer, primary_key=True, index=True)
    FamilyId = Column(Integer, ForeignKey("families.Id"), nullable=False, index=True)
    Title = Column(String(200), nullable=False)
    Description = Column(Text)
    PointCost = Column(Integer, nullable=False)
    Photos = Column(JsonText)
    Stock = Column(Integer)
    IsActive = Column(Boolean, nullable=False, default=True)
    CreatedAt = Column(DateTime(timezone=True), default=NowUtc, nullable=False)


class RewardRedemption(Base):
    __tablename__ = "reward_redemptions"

    Id = Column(Integer, primary_key=True, index=True)
    RewardId = Column(Integer, ForeignKey("rewards.Id"), nullable=False, index=True)
    UserId = Column(Integer, ForeignKey("users.Id"), nullable=False, index=True)
    Status = Column(String(20), nullable=False, default=REDEMPTION_PENDING)
    PointCost = Column(Integer, nullable=False)
    CreatedAt = Column(DateTime(timezone=True), default=NowUtc, nullable=False)

    Reward = relationship("Reward")
