from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from familyhub.db import GetDb
from familyhub.modules.allowance.schemas import DistributeRequest, DistributeResponse, TransactionOut
from familyhub.modules.allowance.service import (
    BuildTransactionOut,
    DistributeAllowance,
    ListTransactions,
)
from familyhub.modules.auth.deps import RequireMember, RequireRole, UserContext
from familyhub.modules.auth.models import ROLE_PARENT

router = APIRouter(prefix="/api/allowance", tags=["allowance"])


@router.get("", response_model=list[TransactionOut])
def GetTransactions(
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireMember()),
) -> list[TransactionOut]:
    return [BuildTransactionOut(txn) for txn in ListTransactions(db, user)]


@router.post("/distribute", response_model=DistributeResponse)
def Distribute(
    payload: DistributeRequest,
    db: Session = Depends(GetDb),
    user: UserContext = Depends(RequireRole(ROLE_PARENT)),
) -> DistributeResponse:
    transactions = DistributeAllowance(
        db,
        user,
        payload.amount,
        payload.distribution.model_dump() if payload.distribution else None,
        payload.userIds,
        notes=payload.notes,
    )
    return DistributeResponse(
        success=True,
        transactions=[BuildTransactionOut(txn) for txn in transactions],
    )
