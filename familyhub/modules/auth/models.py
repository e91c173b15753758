from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from familyhub.db import Base, NowUtc

ROLE_PARENT = "parent"
ROLE_CHILD = "child"
ALLOWED_ROLES = {ROLE_PARENT, ROLE_CHILD}


class Family(Base):
    __tablename__ = "families"

    Id = Column(Integer, primary_key=True, index=True)
    FamilyCode = Column(String(12), nullable=False, unique=True, index=True)
    PinHash = Column(String(255), nullable=False)
    Name = Column(String(120), nullable=False)
    CreatedAt = Column(DateTime(timezone=True), default=NowUtc, nullable=False)

    Members = relationship("User", back_populates="Family", order_by="User.Id")


class User(Base):
    __tablename__ = "users"

    Id = Column(Integer, primary_key=True, index=True)
    FamilyId = Column(Integer, ForeignKey("families.Id"), nullable=False, index=True)
    Name = Column(String(120), nullable=False)
    Role = Column(String(20), nullable=False, default=ROLE_CHILD)
    Avatar = Column(String(40))
    Points = Column(Integer, nullable=False, default=0)
    Streak = Column(Integer, nullable=False, default=0)
    JarSpend = Column(Numeric(12, 2), nullable=False, default=0)
    JarSave = Column(Numeric(12, 2), nullable=False, default=0)
    JarGive = Column(Numeric(12, 2), nullable=False, default=0)
    CreatedAt = Column(DateTime(timezone=True), default=NowUtc, nullable=False)

    Family = relationship("Family", back_populates="Members")
