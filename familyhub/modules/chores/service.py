"""Chore workflow: definitions, assignments and the completion review cycle.

An assignment moves ``pending -> completed`` when its user submits proof of
work, then to ``approved`` or ``rejected`` when a parent reviews the
completion. Approval credits the chore's points and bumps the user's streak
in the same transaction that records the decision.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import update
from sqlalchemy.orm import Session, selectinload

from familyhub.core.errors import ConflictError, NotFoundError, ValidationError
from familyhub.db import NowUtc
from familyhub.modules.auth.deps import EnsureMember, EnsureRole, UserContext
from familyhub.modules.auth.models import ROLE_PARENT, User
from familyhub.modules.auth.service import BuildUserOut
from familyhub.modules.chores.models import (
    DIFFICULTIES,
    STATUS_APPROVED,
    STATUS_COMPLETED,
    STATUS_PENDING,
    STATUS_REJECTED,
    Chore,
    ChoreAssignment,
    ChoreCompletion,
)
from familyhub.modules.chores.schemas import AssignmentOut, ChoreOut, CompletionOut

logger = logging.getLogger("familyhub.chores")


def _UniqueIds(values: list[int] | None) -> list[int]:
    seen: set[int] = set()
    ordered = []
    for value in values or []:
        if value in seen:
            continue
        seen.add(value)
        ordered.append(value)
    return ordered


def _ChoreQuery(db: Session):
    return db.query(Chore).options(
        selectinload(Chore.Assignments).selectinload(ChoreAssignment.User),
        selectinload(Chore.Assignments).selectinload(ChoreAssignment.Completions),
    )


def CreateChore(
    db: Session,
    user: UserContext,
    title: str,
    points: int,
    schedule: dict[str, Any] | None = None,
    difficulty: str | None = None,
    description: str | None = None,
    photos: list[str] | None = None,
    assignee_ids: list[int] | None = None,
) -> Chore:
    EnsureMember(user)
    title = (title or "").strip()
    if not title:
        raise ValidationError("Title is required")
    if points is None or points < 0:
        raise ValidationError("Points must be zero or more")
    difficulty = (difficulty or "easy").strip().lower()
    if difficulty not in DIFFICULTIES:
        raise ValidationError("Difficulty must be easy, medium or hard")

    assignees = _UniqueIds(assignee_ids)
    if assignees:
        found = {
            row.Id
            for row in db.query(User.Id)
            .filter(User.Id.in_(assignees), User.FamilyId == user.FamilyId)
            .all()
        }
        missing = [value for value in assignees if value not in found]
        if missing:
            raise NotFoundError("Assignee not found")

    chore = Chore(
        FamilyId=user.FamilyId,
        Title=title,
        Description=description,
        Points=points,
        Schedule=schedule or {},
        Difficulty=difficulty,
        Photos=photos or [],
        IsActive=True,
    )
    try:
        db.add(chore)
        db.flush()
        for assignee_id in assignees:
            db.add(ChoreAssignment(ChoreId=chore.Id, UserId=assignee_id, Status=STATUS_PENDING))
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info(
        "chore created family_id=%s chore_id=%s assignees=%s",
        user.FamilyId,
        chore.Id,
        len(assignees),
    )
    return GetChore(db, user, chore.Id)


def ListChores(db: Session, user: UserContext) -> list[Chore]:
    return (
        _ChoreQuery(db)
        .filter(Chore.FamilyId == user.FamilyId)
        .order_by(Chore.CreatedAt.asc(), Chore.Id.asc())
        .all()
    )


def GetChore(db: Session, user: UserContext, chore_id: int) -> Chore:
    chore = (
        _ChoreQuery(db)
        .filter(Chore.Id == chore_id, Chore.FamilyId == user.FamilyId)
        .first()
    )
    if not chore:
        raise NotFoundError("Chore not found")
    return chore


def SubmitCompletion(
    db: Session,
    assignment_id: int,
    user_id: int,
    before_photos: list[str] | None = None,
    after_photos: list[str] | None = None,
    notes: str | None = None,
    time_spent: int | None = None,
) -> ChoreCompletion:
    assignment = (
        db.query(ChoreAssignment)
        .filter(ChoreAssignment.Id == assignment_id, ChoreAssignment.UserId == user_id)
        .first()
    )
    if not assignment:
        raise NotFoundError("Assignment not found")

    completion = ChoreCompletion(
        AssignmentId=assignment.Id,
        UserId=user_id,
        Status=STATUS_PENDING,
        BeforePhotos=before_photos or [],
        AfterPhotos=after_photos or [],
        Notes=notes,
        TimeSpent=time_spent,
    )
    try:
        db.add(completion)
        assignment.Status = STATUS_COMPLETED
        db.add(assignment)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(completion)
    logger.info(
        "completion submitted assignment_id=%s completion_id=%s",
        assignment.Id,
        completion.Id,
    )
    return completion


def SubmitChoreCompletion(
    db: Session,
    user: UserContext,
    chore_id: int,
    before_photos: list[str] | None = None,
    after_photos: list[str] | None = None,
    notes: str | None = None,
    time_spent: int | None = None,
) -> ChoreCompletion:
    user_id = EnsureMember(user)
    assignment = (
        db.query(ChoreAssignment)
        .join(Chore, Chore.Id == ChoreAssignment.ChoreId)
        .filter(
            ChoreAssignment.ChoreId == chore_id,
            ChoreAssignment.UserId == user_id,
            Chore.FamilyId == user.FamilyId,
        )
        .order_by(ChoreAssignment.Id.desc())
        .first()
    )
    if not assignment:
        raise NotFoundError("Assignment not found")
    return SubmitCompletion(
        db,
        assignment.Id,
        user_id,
        before_photos=before_photos,
        after_photos=after_photos,
        notes=notes,
        time_spent=time_spent,
    )


def ReviewCompletion(
    db: Session,
    user: UserContext,
    completion_id: int | None,
    approve: bool,
    chore_id: int | None = None,
) -> str:
    EnsureMember(user)
    EnsureRole(user, ROLE_PARENT)
    if completion_id is None:
        raise ValidationError("Completion ID required")

    query = (
        db.query(ChoreCompletion, ChoreAssignment, Chore)
        .join(ChoreAssignment, ChoreAssignment.Id == ChoreCompletion.AssignmentId)
        .join(Chore, Chore.Id == ChoreAssignment.ChoreId)
        .filter(ChoreCompletion.Id == completion_id, Chore.FamilyId == user.FamilyId)
    )
    if chore_id is not None:
        query = query.filter(Chore.Id == chore_id)
    row = query.first()
    if not row:
        raise NotFoundError("Completion not found")
    completion, assignment, chore = row

    new_status = STATUS_APPROVED if approve else STATUS_REJECTED
    try:
        # Only a pending completion may change; a second review touches no rows.
        result = db.execute(
            update(ChoreCompletion)
            .where(ChoreCompletion.Id == completion.Id, ChoreCompletion.Status == STATUS_PENDING)
            .values(Status=new_status, ApprovedAt=NowUtc() if approve else None)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise ConflictError("Completion already reviewed")

        db.execute(
            update(ChoreAssignment)
            .where(ChoreAssignment.Id == assignment.Id)
            .values(Status=new_status)
            .execution_options(synchronize_session=False)
        )
        if approve:
            db.execute(
                update(User)
                .where(User.Id == completion.UserId)
                .values(Points=User.Points + chore.Points, Streak=User.Streak + 1)
                .execution_options(synchronize_session=False)
            )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.expire_all()
    logger.info(
        "completion reviewed completion_id=%s status=%s reviewer_id=%s",
        completion_id,
        new_status,
        user.UserId,
    )
    return new_status


def BuildCompletionOut(completion: ChoreCompletion) -> CompletionOut:
    return CompletionOut(
        id=completion.Id,
        assignmentId=completion.AssignmentId,
        userId=completion.UserId,
        status=completion.Status,
        beforePhotos=completion.BeforePhotos,
        afterPhotos=completion.AfterPhotos,
        notes=completion.Notes,
        timeSpent=completion.TimeSpent,
        submittedAt=completion.SubmittedAt,
        approvedAt=completion.ApprovedAt,
    )


def BuildAssignmentOut(assignment: ChoreAssignment) -> AssignmentOut:
    return AssignmentOut(
        id=assignment.Id,
        choreId=assignment.ChoreId,
        userId=assignment.UserId,
        status=assignment.Status,
        dueDate=assignment.DueDate,
        user=BuildUserOut(assignment.User) if assignment.User else None,
        completions=[BuildCompletionOut(completion) for completion in assignment.Completions],
    )


def BuildChoreOut(chore: Chore) -> ChoreOut:
    return ChoreOut(
        id=chore.Id,
        familyId=chore.FamilyId,
        title=chore.Title,
        description=chore.Description,
        points=chore.Points,
        schedule=chore.Schedule,
        difficulty=chore.Difficulty,
        photos=chore.Photos,
        isActive=chore.IsActive,
        createdAt=chore.CreatedAt,
        assignments=[BuildAssignmentOut(assignment) for assignment in chore.Assignments],
    )
