from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from familyhub.core.json_fields import JsonText
from familyhub.db import Base, NowUtc

STATUS_PENDING = "pending"
STATUS_IN_PROGRESS = "in_progress"
STATUS_COMPLETED = "completed"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"

DIFFICULTIES = {"easy", "medium", "hard"}


class Chore(Base):
    __tablename__ = "chores"

    Id = Column(Integer, primary_key=True, index=True)
    FamilyId = Column(Integer, ForeignKey("families.Id"), nullable=False, index=True)
    Title = Column(String(200), nullable=False)
    Description = Column(Text)
    Points = Column(Integer, nullable=False, default=0)
    Schedule = Column(JsonText)
    Difficulty = Column(String(20), nullable=False, default="easy")
    Photos = Column(JsonText)
    IsActive = Column(Boolean, nullable=False, default=True)
    CreatedAt = Column(DateTime(timezone=True), default=NowUtc, nullable=False)

    Assignments = relationship(
        "ChoreAssignment", back_populates="Chore", order_by="ChoreAssignment.Id"
    )


class ChoreAssignment(Base):
    __tablename__ = "chore_assignments"

    Id = Column(Integer, primary_key=True, index=True)
    ChoreId = Column(Integer, ForeignKey("chores.Id"), nullable=False, index=True)
    UserId = Column(Integer, ForeignKey("users.Id"), nullable=False, index=True)
    Status = Column(String(20), nullable=False, default=STATUS_PENDING)
    DueDate = Column(Date)
    CreatedAt = Column(DateTime(timezone=True), default=NowUtc, nullable=False)

    Chore = relationship("Chore", back_populates="Assignments")
    User = relationship("User")
    Completions = relationship(
        "ChoreCompletion", back_populates="Assignment", order_by="ChoreCompletion.Id"
    )


class ChoreCompletion(Base):
    __tablename__ = "chore_completions"

    Id = Column(Integer, primary_key=True, index=True)
    AssignmentId = Column(Integer, ForeignKey("chore_assignments.Id"), nullable=False, index=True)
    UserId = Column(Integer, ForeignKey("users.Id"), nullable=False, index=True)
    Status = Column(String(20), nullable=False, default=STATUS_PENDING)
    BeforePhotos = Column(JsonText)
    AfterPhotos = Column(JsonText)
    Notes = Column(Text)
    TimeSpent = Column(Integer)
    SubmittedAt = Column(DateTime(timezone=True), default=NowUtc, nullable=False)
    ApprovedAt = Column(DateTime(timezone=True))

    Assignment = relationship("ChoreAssignment", back_populates="Completions")
