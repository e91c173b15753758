from __future__ import annotations

import logging
from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from sqlalchemy import update
from sqlalchemy.orm import Session, selectinload

from familyhub.core.errors import NotFoundError, ValidationError
from familyhub.modules.allowance.models import (
    SOURCE_ALLOWANCE,
    TRANSACTION_DEPOSIT,
    AllowanceTransaction,
)
from familyhub.modules.allowance.schemas import TransactionOut
from familyhub.modules.auth.deps import EnsureMember, EnsureRole, UserContext
from familyhub.modules.auth.models import ROLE_CHILD, ROLE_PARENT, User
from familyhub.modules.auth.service import BuildUserOut

logger = logging.getLogger("familyhub.allowance")

JARS = ("spend", "save", "give")
PERCENT_TOLERANCE = Decimal("0.01")
CENT = Decimal("0.01")


def AmountToCents(value: Decimal) -> int:
    return int((value * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def CentsToAmount(value: int) -> Decimal:
    return (Decimal(value) / 100).quantize(CENT)


def _ParseAmount(amount) -> Decimal:
    if amount is None or isinstance(amount, bool):
        raise ValidationError("Amount must be a positive number")
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError("Amount must be a positive number") from exc
    if not value.is_finite() or value <= 0:
        raise ValidationError("Amount must be a positive number")
    if AmountToCents(value) <= 0:
        raise ValidationError("Amount must be at least 0.01")
    return value


def _ParsePercentages(split: Mapping | None) -> dict[str, Decimal]:
    if not split:
        raise ValidationError("Missing required fields")
    percentages = {}
    for jar in JARS:
        raw = split.get(jar) or 0
        try:
            value = Decimal(str(raw))
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid {jar} percentage") from exc
        if not value.is_finite() or value < 0 or value > 100:
            raise ValidationError(f"Invalid {jar} percentage")
        percentages[jar] = value
    if abs(sum(percentages.values()) - Decimal(100)) > PERCENT_TOLERANCE:
        raise ValidationError("Distribution percentages must add up to 100")
    return percentages


def SplitIntoJars(amount, split: Mapping | None) -> dict[str, Decimal]:
    """Split ``amount`` across the jars by percentage, exact to the cent.

    Each jar gets the floor of its share in cents; leftover cents go to the
    jars with the largest remainders (spend, save, give on ties), so the
    three values always add up to ``amount``.
    """
    value = _ParseAmount(amount)
    percentages = _ParsePercentages(split)
    total_percent = sum(percentages.values())
    cents = AmountToCents(value)

    exact = {jar: Decimal(cents) * percentages[jar] / total_percent for jar in JARS}
    shares = {jar: int(exact[jar]) for jar in JARS}
    leftover = cents - sum(shares.values())
    order = sorted(JARS, key=lambda jar: (-(exact[jar] - shares[jar]), JARS.index(jar)))
    for index in range(max(leftover, 0)):
        shares[order[index % len(order)]] += 1
    return {jar: CentsToAmount(shares[jar]) for jar in JARS}


def _DepositToUser(
    db: Session,
    actor: UserContext,
    target_user_id: int,
    amount: Decimal,
    jars: dict[str, Decimal],
    notes: str | None,
) -> AllowanceTransaction:
    txn = AllowanceTransaction(
        UserId=target_user_id,
        Type=TRANSACTION_DEPOSIT,
        Amount=amount,
        JarDistribution={jar: float(jars[jar]) for jar in JARS},
        Source=SOURCE_ALLOWANCE,
        Notes=notes,
        CreatedByUserId=actor.UserId,
    )
    try:
        db.add(txn)
        db.flush()
        # Increment in SQL so concurrent deposits to the same user both land.
        db.execute(
            update(User)
            .where(User.Id == target_user_id)
            .values(
                JarSpend=User.JarSpend + jars["spend"],
                JarSave=User.JarSave + jars["save"],
                JarGive=User.JarGive + jars["give"],
            )
            .execution_options(synchronize_session=False)
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(txn)
    return txn


def DistributeAllowance(
    db: Session,
    user: UserContext,
    amount,
    split: Mapping | None,
    target_user_ids: list[int] | None,
    notes: str | None = None,
) -> list[AllowanceTransaction]:
    EnsureMember(user)
    EnsureRole(user, ROLE_PARENT)
    if not target_user_ids:
        raise ValidationError("Missing required fields")
    jars = SplitIntoJars(amount, split)
    value = CentsToAmount(AmountToCents(_ParseAmount(amount)))

    found = {
        row.Id
        for row in db.query(User.Id)
        .filter(User.Id.in_(set(target_user_ids)), User.FamilyId == user.FamilyId)
        .all()
    }
    if any(target_id not in found for target_id in target_user_ids):
        raise NotFoundError("User not found")

    transactions = []
    for target_id in target_user_ids:
        transactions.append(_DepositToUser(db, user, target_id, value, jars, notes))
    db.expire_all()
    logger.info(
        "allowance distributed family_id=%s by=%s targets=%s amount=%s",
        user.FamilyId,
        user.UserId,
        len(target_user_ids),
        value,
    )
    return transactions


def ListTransactions(db: Session, user: UserContext) -> list[AllowanceTransaction]:
    user_id = EnsureMember(user)
    query = (
        db.query(AllowanceTransaction)
        .options(selectinload(AllowanceTransaction.User))
        .join(User, User.Id == AllowanceTransaction.UserId)
        .filter(User.FamilyId == user.FamilyId)
    )
    if user.Role == ROLE_CHILD:
        query = query.filter(AllowanceTransaction.UserId == user_id)
    return query.order_by(AllowanceTransaction.CreatedAt.desc(), AllowanceTransaction.Id.desc()).all()


def BuildTransactionOut(txn: AllowanceTransaction) -> TransactionOut:
    return TransactionOut(
        id=txn.Id,
        userId=txn.UserId,
        type=txn.Type,
        amount=float(txn.Amount),
        jarDistribution=txn.JarDistribution,
        source=txn.Source,
        notes=txn.Notes,
        createdAt=txn.CreatedAt,
        user=BuildUserOut(txn.User) if txn.User else None,
    )
