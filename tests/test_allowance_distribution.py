from decimal import Decimal

import pytest

from familyhub.core.errors import AuthorizationError, NotFoundError, ValidationError
from familyhub.modules.allowance.models import AllowanceTransaction
from familyhub.modules.allowance.service import DistributeAllowance, ListTransactions, SplitIntoJars
from familyhub.modules.auth.models import User

STANDARD_SPLIT = {"spend": 50, "save": 30, "give": 20}


def test_split_matches_percentages_exactly():
    jars = SplitIntoJars(100, STANDARD_SPLIT)
    assert jars == {"spend": Decimal("50.00"), "save": Decimal("30.00"), "give": Decimal("20.00")}


def test_split_assigns_leftover_cents_to_largest_remainder():
    jars = SplitIntoJars(10, {"spend": 33.33, "save": 33.33, "give": 33.34})
    assert jars == {"spend": Decimal("3.33"), "save": Decimal("3.33"), "give": Decimal("3.34")}
    assert sum(jars.values()) == Decimal("10.00")


def test_split_single_cent_goes_to_first_largest_share():
    jars = SplitIntoJars("0.01", STANDARD_SPLIT)
    assert jars == {"spend": Decimal("0.01"), "save": Decimal("0.00"), "give": Decimal("0.00")}


def test_split_odd_amount_sums_to_amount():
    jars = SplitIntoJars("7.77", {"spend": 40, "save": 40, "give": 20})
    assert sum(jars.values()) == Decimal("7.77")


@pytest.mark.parametrize(
    "split",
    [
        {"spend": 50, "save": 30, "give": 10},
        {"spend": 60, "save": 30, "give": 20},
        {"spend": -10, "save": 90, "give": 20},
        None,
    ],
)
def test_split_rejects_bad_percentages(split):
    with pytest.raises(ValidationError):
        SplitIntoJars(100, split)


@pytest.mark.parametrize("amount", [0, -5, None, "abc", "0.001"])
def test_split_rejects_bad_amount(amount):
    with pytest.raises(ValidationError):
        SplitIntoJars(amount, STANDARD_SPLIT)


def test_distribute_updates_jars_and_records_transaction(db, household):
    child = household["child"]
    transactions = DistributeAllowance(
        db,
        household["parent_ctx"],
        20,
        STANDARD_SPLIT,
        [child.Id],
        notes="weekly",
    )

    assert len(transactions) == 1
    txn = transactions[0]
    assert txn.UserId == child.Id
    assert txn.Source == "allowance"
    assert txn.JarDistribution == {"spend": 10.0, "save": 6.0, "give": 4.0}

    db.expire_all()
    record = db.get(User, child.Id)
    assert float(record.JarSpend) == 10.0
    assert float(record.JarSave) == 6.0
    assert float(record.JarGive) == 4.0


def test_distribute_repeated_deposits_accumulate(db, household):
    child = household["child"]
    DistributeAllowance(db, household["parent_ctx"], 10, STANDARD_SPLIT, [child.Id])
    DistributeAllowance(db, household["parent_ctx"], 10, STANDARD_SPLIT, [child.Id])

    db.expire_all()
    record = db.get(User, child.Id)
    assert float(record.JarSpend) == 10.0
    assert float(record.JarSave) == 6.0
    assert float(record.JarGive) == 4.0


def test_distribute_denied_for_child(db, household):
    child = household["child"]
    with pytest.raises(AuthorizationError):
        DistributeAllowance(db, household["child_ctx"], 20, STANDARD_SPLIT, [child.Id])

    db.expire_all()
    assert float(db.get(User, child.Id).JarSpend) == 0.0
    assert db.query(AllowanceTransaction).count() == 0


def test_distribute_requires_targets(db, household):
    with pytest.raises(ValidationError):
        DistributeAllowance(db, household["parent_ctx"], 20, STANDARD_SPLIT, [])


def test_distribute_rejects_member_of_other_family(db, household):
    targets = [household["child"].Id, household["outsider"].Id]
    with pytest.raises(NotFoundError):
        DistributeAllowance(db, household["parent_ctx"], 20, STANDARD_SPLIT, targets)

    assert db.query(AllowanceTransaction).count() == 0


def test_child_sees_only_own_transactions(db, household):
    parent_ctx = household["parent_ctx"]
    DistributeAllowance(db, parent_ctx, 5, STANDARD_SPLIT, [household["child"].Id])
    DistributeAllowance(db, parent_ctx, 7, STANDARD_SPLIT, [household["parent"].Id])

    child_view = ListTransactions(db, household["child_ctx"])
    parent_view = ListTransactions(db, parent_ctx)

    assert [txn.UserId for txn in child_view] == [household["child"].Id]
    assert len(parent_view) == 2
    assert parent_view[0].UserId == household["parent"].Id
