from __future__ import annotations

import uuid
from decimal import Decimal

import pytest
from pydantic import ValidationError as SchemaValidationError

from capital_hub.core.db.audit import get_audit_log
from capital_hub.domain.funds.enums import CatchUpBase
from capital_hub.domain.funds.schemas.funds import FundCreate, FundUpdate
from capital_hub.domain.funds.services import funds as fund_service
from capital_hub.domain.funds.services.commitments import list_commitments
from capital_hub.shared.exceptions import NotFound, ValidationError


def test_fund_defaults(fund):
    assert fund.carried_interest_rate == Decimal("20")
    assert fund.preferred_return_rate == Decimal("8")
    assert fund.gp_catchup_rate == Decimal("100")
    assert fund.catch_up_base == CatchUpBase.preferred_return
    assert fund.version == 1


def test_fund_schema_rejects_hard_cap_below_target():
    with pytest.raises(SchemaValidationError):
        FundCreate(
            name="Bad Fund",
            target_size=Decimal("100"),
            hard_cap=Decimal("50"),
            min_commitment=Decimal("1"),
            max_commitment=Decimal("10"),
        )


def test_duplicate_fund_name_is_rejected(db_session, actor, fund):
    with pytest.raises(ValidationError, match="already in use"):
        fund_service.create_fund(
            db_session,
            actor=actor,
            payload=FundCreate(
                name=fund.name,
                target_size=Decimal("100"),
                hard_cap=Decimal("100"),
                min_commitment=Decimal("1"),
                max_commitment=Decimal("10"),
            ),
        )


def test_unknown_fund_is_not_found(db_session):
    with pytest.raises(NotFound):
        fund_service.get_fund(db_session, fund_id=uuid.uuid4())


@pytest.mark.parametrize("amount", [9_999, 5_000_001])
def test_commitment_outside_limits_is_rejected(fund, add_commitment, db_session, amount):
    with pytest.raises(ValidationError):
        add_commitment(amount)
    assert list_commitments(db_session, fund_id=fund.id) == []


def test_commitment_beyond_hard_cap_is_rejected(fund, add_commitment, db_session):
    add_commitment(5_000_000)
    add_commitment(5_000_000)
    with pytest.raises(ValidationError, match="hard cap"):
        add_commitment(2_000_001)
    assert len(list_commitments(db_session, fund_id=fund.id)) == 2


def test_ownership_is_rebalanced_on_every_commitment(fund, add_commitment, db_session):
    first = add_commitment(1_000_000)
    assert first.ownership_percent == Decimal("100")

    add_commitment(3_000_000)
    commitments = list_commitments(db_session, fund_id=fund.id)
    by_amount = {c.commitment_amount: c.ownership_percent for c in commitments}
    assert by_amount[Decimal("1000000.00")] == Decimal("25")
    assert by_amount[Decimal("3000000.00")] == Decimal("75")
    assert sum(c.ownership_percent for c in commitments) == Decimal("100")


def test_commitment_starts_fully_unfunded(add_commitment):
    c = add_commitment(250_000)
    assert c.unfunded_commitment == Decimal("250000.00")
    assert c.capital_called == Decimal("0")


def test_update_fund_changes_terms_and_audits(db_session, actor, fund):
    updated = fund_service.update_fund(
        db_session,
        fund_id=fund.id,
        actor=actor,
        payload=FundUpdate(carried_interest_rate=Decimal("25"), catch_up_base=CatchUpBase.lp_total),
    )
    assert updated.carried_interest_rate == Decimal("25")
    assert updated.catch_up_base == CatchUpBase.lp_total
    assert updated.version == 2

    actions = [e.action for e in get_audit_log(db_session, fund_id=fund.id)]
    assert "fund.created" in actions
    assert "fund.updated" in actions


def test_update_fund_rejects_hard_cap_below_commitments(db_session, actor, fund, add_commitment):
    add_commitment(5_000_000)
    add_commitment(5_000_000)
    with pytest.raises(ValidationError):
        fund_service.update_fund(
            db_session,
            fund_id=fund.id,
            actor=actor,
            payload=FundUpdate(target_size=Decimal("9000000"), hard_cap=Decimal("9500000")),
        )
    assert fund_service.get_fund(db_session, fund_id=fund.id).hard_cap == Decimal("12000000.00")


def test_update_fund_rejects_inverted_commitment_limits(db_session, actor, fund):
    with pytest.raises(ValidationError):
        fund_service.update_fund(
            db_session,
            fund_id=fund.id,
            actor=actor,
            payload=FundUpdate(min_commitment=Decimal("6000000")),
        )
