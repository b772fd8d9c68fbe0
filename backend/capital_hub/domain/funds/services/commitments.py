from __future__ import annotations

import uuid
from collections.abc import Sequence

import structlog
from sqlalchemy.orm import Session

from capital_hub.core.db import repository
from capital_hub.core.db.audit import write_audit_event
from capital_hub.core.db.unit_of_work import atomically
from capital_hub.core.security.auth import Actor
from capital_hub.domain.funds.enums import LPCommitmentStatus
from capital_hub.domain.funds.models.commitments import LPCommitment
from capital_hub.domain.funds.models.funds import Fund
from capital_hub.domain.funds.schemas.commitments import LPCommitmentCreate
from capital_hub.shared.allocation_math import ZERO, quantize_money, quantize_percent, share_percent
from capital_hub.shared.exceptions import ValidationError
from capital_hub.shared.utils import sa_model_to_dict, utcnow

logger = structlog.get_logger(__name__)


def validate_commitment_amount(fund: Fund, amount, existing_total) -> None:
    if amount < fund.min_commitment:
        raise ValidationError(f"Minimum commitment is {fund.min_commitment}")
    if amount > fund.max_commitment:
        raise ValidationError(f"Maximum commitment is {fund.max_commitment}")
    if existing_total + amount > fund.hard_cap:
        raise ValidationError("Commitment would exceed fund hard cap")


def rebalance_ownership(commitments: Sequence[LPCommitment]) -> None:
    """Set every commitment's ownership to its share of the fund's total commitments."""
    total = sum((c.commitment_amount for c in commitments), ZERO)
    for c in commitments:
        c.ownership_percent = quantize_percent(share_percent(c.commitment_amount, total))


def create_lp_commitment(
    db: Session,
    *,
    fund_id: uuid.UUID,
    actor: Actor,
    payload: LPCommitmentCreate,
) -> LPCommitment:
    amount = quantize_money(payload.commitment_amount)

    def work(session: Session) -> LPCommitment:
        fund = repository.get_fund(session, fund_id)
        existing = repository.get_commitments(session, fund_id)
        validate_commitment_amount(fund, amount, sum((c.commitment_amount for c in existing), ZERO))

        commitment = LPCommitment(
            fund_id=fund_id,
            investor_id=payload.investor_id,
            investor_name=payload.investor_name,
            investor_type=payload.investor_type,
            commitment_amount=amount,
            commitment_date=payload.commitment_date,
            commitment_currency=payload.commitment_currency,
            exchange_rate=payload.exchange_rate,
            capital_called=ZERO,
            capital_called_percent=ZERO,
            unfunded_commitment=amount,
            distributions_received=ZERO,
            recallable_distributions=ZERO,
            status=LPCommitmentStatus.active,
            created_by=actor.actor_id,
            updated_by=actor.actor_id,
        )
        session.add(commitment)
        rebalance_ownership([*existing, commitment])
        # Touch the fund row so concurrent commitments against the same hard cap conflict.
        fund.updated_at = utcnow()
        session.flush()

        write_audit_event(
            session,
            fund_id=fund_id,
            actor_id=actor.actor_id,
            action="lp_commitment.created",
            entity_type="LPCommitment",
            entity_id=commitment.id,
            before=None,
            after=sa_model_to_dict(commitment),
        )
        return commitment

    commitment = atomically(db, work, label="lp_commitment.create")
    db.refresh(commitment)
    logger.info(
        "lp_commitment.created",
        fund_id=str(fund_id),
        commitment_id=str(commitment.id),
        amount=str(amount),
    )
    return commitment


def list_commitments(db: Session, *, fund_id: uuid.UUID) -> list[LPCommitment]:
    repository.get_fund(db, fund_id)
    return repository.get_commitments(db, fund_id)
