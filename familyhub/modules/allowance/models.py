from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from familyhub.core.json_fields import JsonText
from familyhub.db import Base, NowUtc

TRANSACTION_DEPOSIT = "deposit"
SOURCE_ALLOWANCE = "allowance"


class AllowanceTransaction(Base):
    __tablename__ = "allowance_transactions"

    Id = Column(Integer, primary_key=True, index=True)
    UserId = Column(Integer, ForeignKey("users.Id"), nullable=False, index=True)
    Type = Column(String(20), nullable=False, default=TRANSACTION_DEPOSIT)
    Amount = Column(Numeric(12, 2), nullable=False)
    JarDistribution = Column(JsonText, nullable=False)
    Source = Column(String(60))
    Notes = Column(Text)
    CreatedByUserId = Column(Integer)
    CreatedAt = Column(DateTime(timezone=True), default=NowUtc, nullable=False, index=True)

    User = relationship("User")
