from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from capital_hub.core.db.base import Base
from capital_hub.core.db.unit_of_work import atomically
from capital_hub.core.security.auth import Actor
from capital_hub.domain.capital_calls.enums import CapitalCallStatus, ResponseStatus
from capital_hub.domain.capital_calls.models.capital_calls import CapitalCall
from capital_hub.domain.capital_calls.schemas.capital_calls import CapitalCallCreate, LPFundingCreate
from capital_hub.domain.capital_calls.services import capital_calls as call_service
from capital_hub.domain.funds.models.funds import Fund
from capital_hub.domain.funds.schemas.commitments import LPCommitmentCreate
from capital_hub.domain.funds.services.commitments import create_lp_commitment
from capital_hub.shared.enums import Role
from capital_hub.shared.exceptions import ConcurrencyConflict, ValidationError


@pytest.fixture()
def file_sessions(tmp_path):
    engine = create_engine(f"sqlite+pysqlite:///{tmp_path / 'uow.db'}")
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False, class_=Session)

    with factory() as setup:
        fund = Fund(
            name="Concurrency Fund",
            target_size=Decimal("1000000"),
            hard_cap=Decimal("1000000"),
            min_commitment=Decimal("1000"),
            max_commitment=Decimal("100000"),
        )
        setup.add(fund)
        setup.commit()
        fund_id = fund.id

    first, second = factory(), factory()
    try:
        yield fund_id, first, second
    finally:
        first.close()
        second.close()
        engine.dispose()


def test_stale_write_is_retried_against_fresh_state(file_sessions):
    fund_id, first, second = file_sessions

    # Load version 1 into the first session, then let the second session win the race.
    first.get(Fund, fund_id)
    rival = second.get(Fund, fund_id)
    rival.description = "rival"
    second.commit()

    attempts: list[str] = []

    def work(session: Session) -> Fund:
        fund = session.get(Fund, fund_id)
        attempts.append(fund.description or "")
        fund.short_name = "WON"
        session.flush()
        return fund

    fund = atomically(first, work, label="test.retry")

    assert attempts == ["", "rival"]
    assert fund.short_name == "WON"
    assert fund.description == "rival"
    assert fund.version == 3


def test_conflict_surfaces_after_max_attempts(db_session):
    calls: list[int] = []

    def work(session: Session) -> None:
        calls.append(1)
        raise StaleDataError("row version changed")

    with pytest.raises(ConcurrencyConflict):
        atomically(db_session, work, label="test.conflict", max_attempts=2)
    assert len(calls) == 2


def test_other_errors_roll_back_and_propagate(db_session, fund):
    def work(session: Session) -> None:
        session.get(Fund, fund.id).short_name = "SHOULD-NOT-STICK"
        session.flush()
        raise ValidationError("nope")

    with pytest.raises(ValidationError):
        atomically(db_session, work)
    assert db_session.get(Fund, fund.id).short_name is None


def test_concurrent_fundings_on_one_call_both_land(file_sessions):
    fund_id, first, second = file_sessions
    actor = Actor(actor_id="uow-admin", roles=(Role.ADMIN,), fund_ids=(), is_admin=True)

    lp_a, lp_b = (
        create_lp_commitment(
            first,
            fund_id=fund_id,
            actor=actor,
            payload=LPCommitmentCreate(
                investor_id=uuid.uuid4(),
                investor_name=name,
                commitment_amount=Decimal("50000"),
                commitment_date=dt.date(2024, 1, 15),
            ),
        )
        for name in ("LP A", "LP B")
    )
    call = call_service.create_capital_call(
        first,
        fund_id=fund_id,
        actor=actor,
        payload=CapitalCallCreate(
            call_date=dt.date(2024, 3, 1),
            due_date=dt.date(2024, 3, 31),
            investment_amount=Decimal("20000"),
        ),
    )
    call_id, lp_a_id, lp_b_id = call.id, lp_a.id, lp_b.id

    # The first session holds the call as it was before the second session pays.
    assert first.get(CapitalCall, call_id).amount_received == Decimal("0.00")
    call_service.record_lp_funding(
        second,
        fund_id=fund_id,
        call_id=call_id,
        actor=actor,
        payload=LPFundingCreate(lp_commitment_id=lp_a_id, amount=Decimal("10000")),
    )

    call = call_service.record_lp_funding(
        first,
        fund_id=fund_id,
        call_id=call_id,
        actor=actor,
        payload=LPFundingCreate(lp_commitment_id=lp_b_id, amount=Decimal("10000")),
    )

    assert call.amount_received == Decimal("20000.00")
    assert call.amount_outstanding == Decimal("0.00")
    assert call.status == CapitalCallStatus.fully_funded

    _, responses = call_service.get_capital_call(first, fund_id=fund_id, call_id=call_id)
    assert {r.lp_commitment_id: r.status for r in responses} == {
        lp_a_id: ResponseStatus.funded,
        lp_b_id: ResponseStatus.funded,
    }
