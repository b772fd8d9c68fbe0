from __future__ import annotations

import datetime as dt
import uuid
from collections.abc import Sequence
from decimal import ROUND_DOWN, Decimal

import structlog
from sqlalchemy import select
from sqlalchemy.orm import Session

from capital_hub.core.db import repository
from capital_hub.core.db.audit import write_audit_event
from capital_hub.core.db.unit_of_work import atomically
from capital_hub.core.security.auth import Actor
from capital_hub.domain.capital_calls.enums import CapitalCallStatus, ResponseStatus
from capital_hub.domain.capital_calls.models.capital_calls import CapitalCall, CapitalCallResponse
from capital_hub.domain.capital_calls.schemas.capital_calls import CapitalCallCreate, LPFundingCreate
from capital_hub.domain.funds.models.commitments import LPCommitment
from capital_hub.shared.allocation_math import (
    ZERO,
    allocate_pro_rata,
    quantize_money,
    quantize_percent,
    share_percent,
)
from capital_hub.shared.exceptions import NotFound, ValidationError
from capital_hub.shared.utils import sa_model_to_dict, utcnow

logger = structlog.get_logger(__name__)

# Truncated so a call short by a cent never reads as 100%.
PERCENT_FUNDED_QUANTUM = Decimal("0.0001")

FUNDABLE_STATUSES = {
    CapitalCallStatus.draft,
    CapitalCallStatus.issued,
    CapitalCallStatus.partially_funded,
    CapitalCallStatus.overdue,
}


def call_total(payload: CapitalCallCreate) -> Decimal:
    return quantize_money(
        payload.investment_amount
        + payload.management_fee_amount
        + payload.partnership_expenses_amount
        + payload.organizational_costs_amount
    )


def split_call(total: Decimal, commitments: Sequence[LPCommitment]) -> list[tuple[uuid.UUID, Decimal]]:
    """Each commitment's share of a call, by ownership percent.

    Every commitment gets a line regardless of its unfunded balance; a fund
    without commitments gets none.
    """
    shares = allocate_pro_rata(total, [(c.id, c.ownership_percent) for c in commitments])
    return [(c.id, shares[c.id]) for c in commitments]


def _derive_call_status(call: CapitalCall) -> CapitalCallStatus:
    if call.amount_received >= call.total_call_amount:
        return CapitalCallStatus.fully_funded
    if call.amount_received > 0:
        return CapitalCallStatus.partially_funded
    return call.status


def create_capital_call(
    db: Session,
    *,
    fund_id: uuid.UUID,
    actor: Actor,
    payload: CapitalCallCreate,
) -> CapitalCall:
    total = call_total(payload)
    if total <= 0:
        raise ValidationError("Capital call total must be positive")
    if payload.due_date < payload.call_date:
        raise ValidationError("Due date cannot precede call date")

    def work(session: Session) -> CapitalCall:
        fund = repository.get_fund(session, fund_id)
        commitments = repository.get_commitments(session, fund_id)

        unfunded = sum((c.unfunded_commitment for c in commitments), ZERO)
        if total > unfunded:
            raise ValidationError(f"Call amount {total} exceeds unfunded commitments {unfunded}")

        call = CapitalCall(
            fund_id=fund_id,
            call_number=len(repository.get_calls(session, fund_id)) + 1,
            call_date=payload.call_date,
            due_date=payload.due_date,
            purpose=payload.purpose,
            description=payload.description,
            investment_amount=quantize_money(payload.investment_amount),
            management_fee_amount=quantize_money(payload.management_fee_amount),
            partnership_expenses_amount=quantize_money(payload.partnership_expenses_amount),
            organizational_costs_amount=quantize_money(payload.organizational_costs_amount),
            total_call_amount=total,
            amount_received=ZERO,
            amount_outstanding=total,
            percent_funded=ZERO,
            status=CapitalCallStatus.draft,
            created_by=actor.actor_id,
            updated_by=actor.actor_id,
        )
        session.add(call)
        session.flush()

        for commitment_id, call_amount in split_call(total, commitments):
            session.add(
                CapitalCallResponse(
                    fund_id=fund_id,
                    capital_call_id=call.id,
                    lp_commitment_id=commitment_id,
                    call_amount=call_amount,
                    funded_amount=ZERO,
                    status=ResponseStatus.pending,
                    created_by=actor.actor_id,
                    updated_by=actor.actor_id,
                )
            )
        # Serializes call numbering per fund.
        fund.updated_at = utcnow()
        session.flush()

        write_audit_event(
            session,
            fund_id=fund_id,
            actor_id=actor.actor_id,
            action="capital_call.created",
            entity_type="CapitalCall",
            entity_id=call.id,
            before=None,
            after=sa_model_to_dict(call),
        )
        return call

    call = atomically(db, work, label="capital_call.create")
    db.refresh(call)
    logger.info(
        "capital_call.created",
        fund_id=str(fund_id),
        capital_call_id=str(call.id),
        call_number=call.call_number,
        total=str(total),
    )
    return call


def _transition(
    db: Session,
    *,
    fund_id: uuid.UUID,
    call_id: uuid.UUID,
    actor: Actor,
    allowed: set[CapitalCallStatus],
    target: CapitalCallStatus,
) -> CapitalCall:
    call = repository.get_call(db, fund_id, call_id)
    if call.status not in allowed:
        raise ValidationError(f"Cannot move capital call from {call.status.value} to {target.value}")
    if target == CapitalCallStatus.cancelled and call.amount_received > 0:
        raise ValidationError("Cannot cancel a capital call that has received funding")

    before = sa_model_to_dict(call)
    call.status = target
    if target == CapitalCallStatus.issued:
        call.issued_at = utcnow()
    elif target == CapitalCallStatus.cancelled:
        call.cancelled_at = utcnow()
    call.updated_by = actor.actor_id
    db.flush()

    write_audit_event(
        db,
        fund_id=fund_id,
        actor_id=actor.actor_id,
        action=f"capital_call.{target.value}",
        entity_type="CapitalCall",
        entity_id=call.id,
        before=before,
        after=sa_model_to_dict(call),
    )
    db.commit()
    db.refresh(call)
    logger.info("capital_call.status_changed", capital_call_id=str(call.id), status=target.value)
    return call


def issue_capital_call(db: Session, *, fund_id: uuid.UUID, call_id: uuid.UUID, actor: Actor) -> CapitalCall:
    return _transition(
        db,
        fund_id=fund_id,
        call_id=call_id,
        actor=actor,
        allowed={CapitalCallStatus.draft},
        target=CapitalCallStatus.issued,
    )


def cancel_capital_call(db: Session, *, fund_id: uuid.UUID, call_id: uuid.UUID, actor: Actor) -> CapitalCall:
    return _transition(
        db,
        fund_id=fund_id,
        call_id=call_id,
        actor=actor,
        allowed={CapitalCallStatus.draft, CapitalCallStatus.issued},
        target=CapitalCallStatus.cancelled,
    )


def _get_response(session: Session, call_id: uuid.UUID, commitment_id: uuid.UUID) -> CapitalCallResponse:
    stmt = select(CapitalCallResponse).where(
        CapitalCallResponse.capital_call_id == call_id,
        CapitalCallResponse.lp_commitment_id == commitment_id,
    )
    response = session.execute(stmt).scalar_one_or_none()
    if response is None:
        raise NotFound("LP commitment has no response on this capital call")
    return response


def record_lp_funding(
    db: Session,
    *,
    fund_id: uuid.UUID,
    call_id: uuid.UUID,
    actor: Actor,
    payload: LPFundingCreate,
) -> CapitalCall:
    """Apply one LP payment to the call, the LP's response and the LP's commitment.

    All three records change together or not at all.
    """
    amount = quantize_money(payload.amount)
    if amount <= 0:
        raise ValidationError("Funding amount must be positive")
    funded_date = payload.funded_date or dt.date.today()

    def work(session: Session) -> CapitalCall:
        call = repository.get_call(session, fund_id, call_id)
        if call.status == CapitalCallStatus.cancelled:
            raise ValidationError("Capital call is cancelled")
        if call.status not in FUNDABLE_STATUSES:
            raise ValidationError("Capital call is already fully funded")

        commitment = repository.get_commitment(session, fund_id, payload.lp_commitment_id)
        response = _get_response(session, call.id, commitment.id)

        if amount > call.amount_outstanding:
            raise ValidationError(f"Funding {amount} exceeds outstanding balance {call.amount_outstanding}")
        if amount > commitment.unfunded_commitment:
            raise ValidationError(f"Funding {amount} exceeds unfunded commitment {commitment.unfunded_commitment}")

        before = sa_model_to_dict(call)

        response.funded_amount = response.funded_amount + amount
        response.funded_date = funded_date
        response.status = (
            ResponseStatus.funded if response.funded_amount >= response.call_amount else ResponseStatus.partial
        )
        if payload.payment_reference:
            response.payment_reference = payload.payment_reference
        response.updated_by = actor.actor_id

        call.amount_received = call.amount_received + amount
        call.amount_outstanding = call.total_call_amount - call.amount_received
        call.percent_funded = share_percent(call.amount_received, call.total_call_amount).quantize(
            PERCENT_FUNDED_QUANTUM, rounding=ROUND_DOWN
        )
        call.status = _derive_call_status(call)
        call.updated_by = actor.actor_id

        commitment.capital_called = commitment.capital_called + amount
        commitment.unfunded_commitment = commitment.commitment_amount - commitment.capital_called
        commitment.capital_called_percent = quantize_percent(
            share_percent(commitment.capital_called, commitment.commitment_amount)
        )
        commitment.updated_by = actor.actor_id
        session.flush()

        write_audit_event(
            session,
            fund_id=fund_id,
            actor_id=actor.actor_id,
            action="capital_call.lp_funded",
            entity_type="CapitalCall",
            entity_id=call.id,
            before=before,
            after={
                **sa_model_to_dict(call),
                "lp_commitment_id": str(commitment.id),
                "funded_amount": str(amount),
            },
        )
        return call

    call = atomically(db, work, label="capital_call.record_funding")
    db.refresh(call)
    logger.info(
        "capital_call.lp_funded",
        capital_call_id=str(call.id),
        lp_commitment_id=str(payload.lp_commitment_id),
        amount=str(amount),
        status=call.status.value,
    )
    return call


def list_capital_calls(db: Session, *, fund_id: uuid.UUID) -> list[CapitalCall]:
    repository.get_fund(db, fund_id)
    return repository.get_calls(db, fund_id)


def get_capital_call(
    db: Session,
    *,
    fund_id: uuid.UUID,
    call_id: uuid.UUID,
) -> tuple[CapitalCall, list[CapitalCallResponse]]:
    call = repository.get_call(db, fund_id, call_id)
    return call, repository.get_call_responses(db, call.id)
