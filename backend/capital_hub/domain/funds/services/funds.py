from __future__ import annotations

import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.orm import Session

from capital_hub.core.db import repository
from capital_hub.core.db.audit import write_audit_event
from capital_hub.core.security.auth import Actor
from capital_hub.domain.funds.models.funds import Fund
from capital_hub.domain.funds.schemas.funds import FundCreate, FundUpdate
from capital_hub.shared.allocation_math import ZERO
from capital_hub.shared.exceptions import ValidationError
from capital_hub.shared.utils import sa_model_to_dict

logger = structlog.get_logger(__name__)


def _validate_fund_invariants(fund: Fund) -> None:
    if fund.hard_cap < fund.target_size:
        raise ValidationError("hard_cap must be greater than or equal to target_size")
    if fund.max_commitment < fund.min_commitment:
        raise ValidationError("max_commitment must be greater than or equal to min_commitment")


def create_fund(db: Session, *, actor: Actor, payload: FundCreate) -> Fund:
    existing = db.execute(select(Fund.id).where(Fund.name == payload.name)).scalar_one_or_none()
    if existing is not None:
        raise ValidationError(f"Fund name already in use: {payload.name}")

    fund = Fund(**payload.model_dump(), created_by=actor.actor_id, updated_by=actor.actor_id)
    _validate_fund_invariants(fund)

    db.add(fund)
    db.flush()

    write_audit_event(
        db,
        fund_id=fund.id,
        actor_id=actor.actor_id,
        action="fund.created",
        entity_type="Fund",
        entity_id=fund.id,
        before=None,
        after=sa_model_to_dict(fund),
    )
    db.commit()
    db.refresh(fund)
    logger.info("fund.created", fund_id=str(fund.id), name=fund.name)
    return fund


def update_fund(db: Session, *, fund_id: uuid.UUID, actor: Actor, payload: FundUpdate) -> Fund:
    """Apply an explicit terms update. The only path that changes fund terms."""
    fund = repository.get_fund(db, fund_id)
    before = sa_model_to_dict(fund)

    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    for key, value in changes.items():
        setattr(fund, key, value)

    try:
        _validate_fund_invariants(fund)
        committed = sum((c.commitment_amount for c in repository.get_commitments(db, fund_id)), ZERO)
        if fund.hard_cap < committed:
            raise ValidationError("hard_cap cannot be lowered below total LP commitments")
    except ValidationError:
        db.rollback()
        raise

    fund.updated_by = actor.actor_id
    db.flush()

    write_audit_event(
        db,
        fund_id=fund.id,
        actor_id=actor.actor_id,
        action="fund.updated",
        entity_type="Fund",
        entity_id=fund.id,
        before=before,
        after=sa_model_to_dict(fund),
    )
    db.commit()
    db.refresh(fund)
    logger.info("fund.updated", fund_id=str(fund.id), fields=sorted(changes))
    return fund


def get_fund(db: Session, *, fund_id: uuid.UUID) -> Fund:
    return repository.get_fund(db, fund_id)


def list_funds(db: Session, *, actor: Actor) -> list[Fund]:
    stmt = select(Fund).order_by(Fund.name.asc())
    if not actor.is_admin:
        if not actor.fund_ids:
            return []
        stmt = stmt.where(Fund.id.in_(actor.fund_ids))
    return list(db.execute(stmt).scalars().all())
