from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from familyhub.db import GetDb
from familyhub.modules.auth.deps import RequireMember, RequireRole, UserContext
from familyhub.modules.auth.models import ROLE_PARENT
from familyhub.modules.chores.schemas import (
    ChoreCreate,
    ChoreOut,
    CompletionCreate,
    CompletionOut,
    ReviewRequest,
    ReviewResponse,
)
from familyhub.modules.chores.service import (
    BuildChoreOut,
    BuildCompletionOut,
    CreateChore,
    GetChore,
    ListChores,
    ReviewCompletion,
    SubmitChoreCompletion,
)

router = APIRouter(prefix="/api/chores", tags=["chores"])


@router.get("", response_model=list[ChoreOut])
def GetChores(
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireMember()),
) -> list[ChoreOut]:
    return [BuildChoreOut(chore) for chore in ListChores(db, user)]


@router.post("", response_model=ChoreOut, status_code=status.HTTP_201_CREATED)
def AddChore(
    payload: ChoreCreate,
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireMember()),
) -> ChoreOut:
    chore = CreateChore(
        db,
        user,
        title=payload.title,
        points=payload.points,
        schedule=payload.schedule,
        difficulty=payload.difficulty,
        description=payload.description,
        photos=payload.photos,
        assignee_ids=payload.assignees,
    )
    return BuildChoreOut(chore)


@router.get("/{chore_id}", response_model=ChoreOut)
def GetChoreDetail(
    chore_id: int,
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireMember()),
) -> ChoreOut:
    return BuildChoreOut(GetChore(db, user, chore_id))


@router.post("/{chore_id}/complete", response_model=CompletionOut, status_code=status.HTTP_201_CREATED)
def CompleteChore(
    chore_id: int,
    payload: CompletionCreate | None = None,
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireMember()),
) -> CompletionOut:
    payload = payload or CompletionCreate()
    completion = SubmitChoreCompletion(
        db,
        user,
        chore_id,
        before_photos=payload.beforePhotos,
        after_photos=payload.afterPhotos,
        notes=payload.notes,
        time_spent=payload.timeSpent,
    )
    return BuildCompletionOut(completion)


@router.post("/{chore_id}/approve", response_model=ReviewResponse)
def ApproveCompletion(
    chore_id: int,
    payload: ReviewRequest,
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireRole(ROLE_PARENT)),
) -> ReviewResponse:
    result = ReviewCompletion(db, user, payload.completionId, payload.approved, chore_id=chore_id)
    return ReviewResponse(success=True, status=result)
