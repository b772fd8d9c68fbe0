from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal

import pytest

from capital_hub.core.db import repository
from capital_hub.domain.capital_calls.enums import CapitalCallStatus, ResponseStatus
from capital_hub.domain.capital_calls.schemas.capital_calls import CapitalCallCreate, LPFundingCreate
from capital_hub.domain.capital_calls.services import capital_calls as call_service
from capital_hub.shared.exceptions import NotFound, ValidationError


def _call_payload(investment="0", fee="0", expenses="0", org="0") -> CapitalCallCreate:
    return CapitalCallCreate(
        call_date=dt.date(2024, 3, 1),
        due_date=dt.date(2024, 3, 31),
        investment_amount=Decimal(investment),
        management_fee_amount=Decimal(fee),
        partnership_expenses_amount=Decimal(expenses),
        organizational_costs_amount=Decimal(org),
    )


def _fund(db_session, actor, fund, call, commitment, amount):
    return call_service.record_lp_funding(
        db_session,
        fund_id=fund.id,
        call_id=call.id,
        actor=actor,
        payload=LPFundingCreate(lp_commitment_id=commitment.id, amount=Decimal(amount)),
    )


def test_call_total_is_sum_of_components(db_session, actor, fund, add_commitment):
    add_commitment(1_000_000)
    call = call_service.create_capital_call(
        db_session, fund_id=fund.id, actor=actor, payload=_call_payload("80000", "15000", "3000", "2000")
    )
    assert call.total_call_amount == Decimal("100000.00")
    assert call.amount_outstanding == Decimal("100000.00")
    assert call.status == CapitalCallStatus.draft
    assert call.call_number == 1


def test_split_conserves_total_across_many_lps(db_session, actor, fund, add_commitment):
    commitments = [add_commitment(1_000_000, name=f"LP {i}") for i in range(3)]
    call = call_service.create_capital_call(
        db_session, fund_id=fund.id, actor=actor, payload=_call_payload(investment="100000")
    )

    _, responses = call_service.get_capital_call(db_session, fund_id=fund.id, call_id=call.id)
    assert len(responses) == len(commitments)
    assert sum(r.call_amount for r in responses) == call.total_call_amount
    assert sorted(r.call_amount for r in responses) == [Decimal("33333.33"), Decimal("33333.33"), Decimal("33333.34")]


def test_split_for_single_lp_is_the_whole_call(db_session, actor, fund, add_commitment):
    only = add_commitment(250_000)
    call = call_service.create_capital_call(
        db_session, fund_id=fund.id, actor=actor, payload=_call_payload(investment="12345.67")
    )
    _, responses = call_service.get_capital_call(db_session, fund_id=fund.id, call_id=call.id)
    assert [(r.lp_commitment_id, r.call_amount) for r in responses] == [(only.id, Decimal("12345.67"))]


def test_split_for_no_lps_is_empty():
    assert call_service.split_call(Decimal("1000.00"), []) == []


def test_fund_without_commitments_cannot_call(db_session, actor, fund):
    with pytest.raises(ValidationError):
        call_service.create_capital_call(db_session, fund_id=fund.id, actor=actor, payload=_call_payload(investment="1"))


def test_call_exceeding_unfunded_creates_nothing(db_session, actor, fund, add_commitment):
    add_commitment(50_000)
    add_commitment(50_000)

    with pytest.raises(ValidationError, match="exceeds unfunded"):
        call_service.create_capital_call(
            db_session, fund_id=fund.id, actor=actor, payload=_call_payload(investment="150000")
        )
    assert call_service.list_capital_calls(db_session, fund_id=fund.id) == []


def test_call_for_exactly_the_unfunded_total_is_allowed(db_session, actor, fund, add_commitment):
    add_commitment(50_000)
    add_commitment(50_000)
    call = call_service.create_capital_call(
        db_session, fund_id=fund.id, actor=actor, payload=_call_payload(investment="100000")
    )
    assert call.total_call_amount == Decimal("100000.00")


def test_rejects_non_positive_total_and_bad_dates(db_session, actor, fund, add_commitment):
    add_commitment(100_000)
    with pytest.raises(ValidationError):
        call_service.create_capital_call(db_session, fund_id=fund.id, actor=actor, payload=_call_payload())

    payload = _call_payload(investment="100")
    payload.due_date = dt.date(2024, 2, 1)
    with pytest.raises(ValidationError):
        call_service.create_capital_call(db_session, fund_id=fund.id, actor=actor, payload=payload)


def test_call_numbers_increase_per_fund(db_session, actor, fund, add_commitment):
    add_commitment(1_000_000)
    first = call_service.create_capital_call(db_session, fund_id=fund.id, actor=actor, payload=_call_payload("1000"))
    second = call_service.create_capital_call(db_session, fund_id=fund.id, actor=actor, payload=_call_payload("1000"))
    assert (first.call_number, second.call_number) == (1, 2)


def test_record_funding_updates_response_call_and_commitment(db_session, actor, fund, add_commitment):
    lp_a = add_commitment(600_000, name="LP A")
    lp_b = add_commitment(400_000, name="LP B")
    call = call_service.create_capital_call(
        db_session, fund_id=fund.id, actor=actor, payload=_call_payload(investment="100000")
    )

    call = _fund(db_session, actor, fund, call, lp_a, "60000")
    assert call.status == CapitalCallStatus.partially_funded
    assert call.amount_received == Decimal("60000.00")
    assert call.amount_outstanding == Decimal("40000.00")
    assert call.percent_funded == Decimal("60.0000")

    db_session.refresh(lp_a)
    assert lp_a.capital_called == Decimal("60000.00")
    assert lp_a.unfunded_commitment == Decimal("540000.00")
    assert lp_a.capital_called_percent == Decimal("10.00000000")

    _, responses = call_service.get_capital_call(db_session, fund_id=fund.id, call_id=call.id)
    by_lp = {r.lp_commitment_id: r for r in responses}
    assert by_lp[lp_a.id].status == ResponseStatus.funded
    assert by_lp[lp_a.id].funded_amount == Decimal("60000.00")
    assert by_lp[lp_b.id].status == ResponseStatus.pending

    # Paying exactly the outstanding balance closes the call.
    call = _fund(db_session, actor, fund, call, lp_b, "40000")
    assert call.status == CapitalCallStatus.fully_funded
    assert call.amount_outstanding == Decimal("0.00")
    assert call.percent_funded == Decimal("100.0000")


def test_partial_payment_marks_response_partial(db_session, actor, fund, add_commitment):
    lp = add_commitment(500_000)
    call = call_service.create_capital_call(
        db_session, fund_id=fund.id, actor=actor, payload=_call_payload(investment="50000")
    )
    _fund(db_session, actor, fund, call, lp, "10000")
    _, responses = call_service.get_capital_call(db_session, fund_id=fund.id, call_id=call.id)
    assert responses[0].status == ResponseStatus.partial


def test_call_short_by_a_cent_never_reads_as_fully_funded(db_session, actor, fund, add_commitment):
    lp = add_commitment(1_000_000)
    call = call_service.create_capital_call(
        db_session, fund_id=fund.id, actor=actor, payload=_call_payload(investment="50000")
    )

    call = _fund(db_session, actor, fund, call, lp, "49999.99")
    assert call.status == CapitalCallStatus.partially_funded
    assert call.amount_outstanding == Decimal("0.01")
    assert call.percent_funded == Decimal("99.9999")


def test_overpayment_is_rejected_and_nothing_changes(db_session, actor, fund, add_commitment):
    lp = add_commitment(500_000)
    call = call_service.create_capital_call(
        db_session, fund_id=fund.id, actor=actor, payload=_call_payload(investment="100000")
    )

    with pytest.raises(ValidationError, match="exceeds outstanding"):
        _fund(db_session, actor, fund, call, lp, "100000.01")

    call = repository.get_call(db_session, fund.id, call.id)
    lp = repository.get_commitment(db_session, fund.id, lp.id)
    assert call.amount_received == Decimal("0.00")
    assert call.status == CapitalCallStatus.draft
    assert lp.capital_called == Decimal("0.00")


def test_non_positive_funding_is_rejected(db_session, actor, fund, add_commitment):
    lp = add_commitment(500_000)
    call = call_service.create_capital_call(
        db_session, fund_id=fund.id, actor=actor, payload=_call_payload(investment="1000")
    )
    with pytest.raises(ValidationError):
        _fund(db_session, actor, fund, call, lp, "0")


def test_fully_funded_call_rejects_more_funding(db_session, actor, fund, add_commitment):
    lp = add_commitment(500_000)
    call = call_service.create_capital_call(
        db_session, fund_id=fund.id, actor=actor, payload=_call_payload(investment="1000")
    )
    _fund(db_session, actor, fund, call, lp, "1000")
    with pytest.raises(ValidationError, match="fully funded"):
        _fund(db_session, actor, fund, call, lp, "1")


def test_funding_unknown_commitment_is_not_found(db_session, actor, fund, add_commitment):
    add_commitment(500_000)
    call = call_service.create_capital_call(
        db_session, fund_id=fund.id, actor=actor, payload=_call_payload(investment="1000")
    )
    with pytest.raises(NotFound):
        call_service.record_lp_funding(
            db_session,
            fund_id=fund.id,
            call_id=call.id,
            actor=actor,
            payload=LPFundingCreate(lp_commitment_id=uuid.uuid4(), amount=Decimal("10")),
        )


def test_issue_and_cancel_transitions(db_session, actor, fund, add_commitment):
    lp = add_commitment(500_000)
    call = call_service.create_capital_call(
        db_session, fund_id=fund.id, actor=actor, payload=_call_payload(investment="1000")
    )

    call = call_service.issue_capital_call(db_session, fund_id=fund.id, call_id=call.id, actor=actor)
    assert call.status == CapitalCallStatus.issued
    assert call.issued_at is not None
    with pytest.raises(ValidationError):
        call_service.issue_capital_call(db_session, fund_id=fund.id, call_id=call.id, actor=actor)

    funded = call_service.create_capital_call(
        db_session, fund_id=fund.id, actor=actor, payload=_call_payload(investment="1000")
    )
    _fund(db_session, actor, fund, funded, lp, "500")
    with pytest.raises(ValidationError):
        call_service.cancel_capital_call(db_session, fund_id=fund.id, call_id=funded.id, actor=actor)

    call = call_service.cancel_capital_call(db_session, fund_id=fund.id, call_id=call.id, actor=actor)
    assert call.status == CapitalCallStatus.cancelled
    with pytest.raises(ValidationError, match="cancelled"):
        _fund(db_session, actor, fund, call, lp, "100")
