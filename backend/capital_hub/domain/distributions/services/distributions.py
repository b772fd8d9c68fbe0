from __future__ import annotations

import datetime as dt
import uuid
from collections.abc import Sequence
from decimal import Decimal

import structlog
from sqlalchemy.orm import Session

from capital_hub.core.db import repository
from capital_hub.core.db.audit import write_audit_event
from capital_hub.core.db.unit_of_work import atomically
from capital_hub.core.security.auth import Actor
from capital_hub.domain.distributions.enums import AllocationStatus, DistributionStatus, DistributionType
from capital_hub.domain.distributions.models.distributions import Distribution, DistributionAllocation
from capital_hub.domain.distributions.schemas.distributions import BreakdownLine, DistributionCreate
from capital_hub.domain.distributions.services.waterfall import (
    WaterfallCalculation,
    WaterfallTerms,
    compute_waterfall,
)
from capital_hub.domain.funds.models.commitments import LPCommitment
from capital_hub.domain.funds.models.funds import Fund
from capital_hub.domain.reporting.services.fund_metrics import load_fund_metrics
from capital_hub.shared.allocation_math import ZERO, allocate_pro_rata, quantize_money, safe_ratio, to_decimal
from capital_hub.shared.exceptions import ValidationError
from capital_hub.shared.utils import json_safe, sa_model_to_dict, utcnow

logger = structlog.get_logger(__name__)


def validate_breakdown(lines: Sequence[BreakdownLine]) -> Decimal:
    """Return the distribution total, rejecting empty or negative breakdowns."""
    if not lines:
        raise ValidationError("Distribution breakdown must have at least one line")
    for line in lines:
        if line.amount < 0:
            raise ValidationError(f"Breakdown amount for {line.type.value} cannot be negative")
    total = quantize_money(sum((line.amount for line in lines), ZERO))
    if total <= 0:
        raise ValidationError("Distribution total must be positive")
    return total


def _waterfall_for(session: Session, fund: Fund, amount: Decimal) -> WaterfallCalculation:
    metrics = load_fund_metrics(session, fund.id)
    return compute_waterfall(
        WaterfallTerms.from_fund(fund),
        capital_called=metrics.capital_called,
        distributions_paid=metrics.distributions_paid,
        distribution_amount=amount,
    )


def _lp_breakdown(lines: Sequence[BreakdownLine], gross: Decimal, total: Decimal) -> dict[str, str]:
    by_type: dict[str, Decimal] = {}
    for line in lines:
        share = quantize_money(to_decimal(line.amount) * safe_ratio(gross, total))
        by_type[line.type.value] = by_type.get(line.type.value, ZERO) + share
    return {k: str(v) for k, v in by_type.items()}


def build_allocations(
    *,
    distribution: Distribution,
    commitments: Sequence[LPCommitment],
    lp_pool: Decimal,
    lines: Sequence[BreakdownLine],
    actor_id: str,
) -> list[DistributionAllocation]:
    shares = allocate_pro_rata(lp_pool, [(c.id, c.ownership_percent) for c in commitments])
    allocations: list[DistributionAllocation] = []
    for c in commitments:
        gross = shares[c.id]
        tax_withheld = ZERO
        allocations.append(
            DistributionAllocation(
                fund_id=distribution.fund_id,
                distribution_id=distribution.id,
                lp_commitment_id=c.id,
                ownership_percent=c.ownership_percent,
                gross_amount=gross,
                tax_withheld=tax_withheld,
                net_amount=gross - tax_withheld,
                breakdown=_lp_breakdown(lines, gross, distribution.total_distribution_amount),
                status=AllocationStatus.pending,
                created_by=actor_id,
                updated_by=actor_id,
            )
        )
    return allocations


def create_distribution(
    db: Session,
    *,
    fund_id: uuid.UUID,
    actor: Actor,
    payload: DistributionCreate,
) -> Distribution:
    total = validate_breakdown(payload.breakdown)
    if payload.distribution_date < payload.record_date:
        raise ValidationError("Distribution date cannot precede record date")

    def work(session: Session) -> Distribution:
        fund = repository.get_fund(session, fund_id)
        commitments = repository.get_commitments(session, fund_id)
        if not commitments:
            raise ValidationError("Fund has no LP commitments to distribute to")

        calculation: WaterfallCalculation | None = None
        lp_pool, gp_amount = total, ZERO
        if payload.apply_waterfall:
            calculation = _waterfall_for(session, fund, total)
            lp_pool, gp_amount = calculation.total_to_lp, calculation.total_to_gp

        distribution = Distribution(
            fund_id=fund_id,
            distribution_number=len(repository.get_distributions(session, fund_id)) + 1,
            distribution_date=payload.distribution_date,
            record_date=payload.record_date,
            source_description=payload.source_description,
            total_distribution_amount=total,
            breakdown=json_safe([line.model_dump() for line in payload.breakdown]),
            apply_waterfall=payload.apply_waterfall,
            waterfall_calculation=json_safe(calculation.to_dict()) if calculation else None,
            gp_amount=gp_amount,
            status=DistributionStatus.draft,
            created_by=actor.actor_id,
            updated_by=actor.actor_id,
        )
        session.add(distribution)
        session.flush()

        session.add_all(
            build_allocations(
                distribution=distribution,
                commitments=commitments,
                lp_pool=lp_pool,
                lines=payload.breakdown,
                actor_id=actor.actor_id,
            )
        )
        # Serializes distribution numbering per fund.
        fund.updated_at = utcnow()
        session.flush()

        write_audit_event(
            session,
            fund_id=fund_id,
            actor_id=actor.actor_id,
            action="distribution.created",
            entity_type="Distribution",
            entity_id=distribution.id,
            before=None,
            after=sa_model_to_dict(distribution),
        )
        return distribution

    distribution = atomically(db, work, label="distribution.create")
    db.refresh(distribution)
    logger.info(
        "distribution.created",
        fund_id=str(fund_id),
        distribution_id=str(distribution.id),
        total=str(total),
        gp_amount=str(distribution.gp_amount),
        apply_waterfall=payload.apply_waterfall,
    )
    return distribution


def _transition(
    db: Session,
    *,
    fund_id: uuid.UUID,
    distribution_id: uuid.UUID,
    actor: Actor,
    allowed: set[DistributionStatus],
    target: DistributionStatus,
) -> Distribution:
    distribution = repository.get_distribution(db, fund_id, distribution_id)
    if distribution.status not in allowed:
        raise ValidationError(
            f"Cannot move distribution from {distribution.status.value} to {target.value}"
        )

    before = sa_model_to_dict(distribution)
    distribution.status = target
    if target == DistributionStatus.approved:
        distribution.approved_by = actor.actor_id
        distribution.approved_at = utcnow()
    distribution.updated_by = actor.actor_id
    db.flush()

    write_audit_event(
        db,
        fund_id=fund_id,
        actor_id=actor.actor_id,
        action=f"distribution.{target.value}",
        entity_type="Distribution",
        entity_id=distribution.id,
        before=before,
        after=sa_model_to_dict(distribution),
    )
    db.commit()
    db.refresh(distribution)
    logger.info("distribution.status_changed", distribution_id=str(distribution.id), status=target.value)
    return distribution


def approve_distribution(
    db: Session, *, fund_id: uuid.UUID, distribution_id: uuid.UUID, actor: Actor
) -> Distribution:
    return _transition(
        db,
        fund_id=fund_id,
        distribution_id=distribution_id,
        actor=actor,
        allowed={DistributionStatus.draft},
        target=DistributionStatus.approved,
    )


def cancel_distribution(
    db: Session, *, fund_id: uuid.UUID, distribution_id: uuid.UUID, actor: Actor
) -> Distribution:
    return _transition(
        db,
        fund_id=fund_id,
        distribution_id=distribution_id,
        actor=actor,
        allowed={DistributionStatus.draft, DistributionStatus.approved},
        target=DistributionStatus.cancelled,
    )


def pay_distribution(
    db: Session,
    *,
    fund_id: uuid.UUID,
    distribution_id: uuid.UUID,
    actor: Actor,
    paid_date: dt.date | None = None,
) -> Distribution:
    """Mark every allocation paid and credit every LP commitment, as one unit."""
    paid_on = paid_date or dt.date.today()

    def work(session: Session) -> Distribution:
        distribution = repository.get_distribution(session, fund_id, distribution_id)
        if distribution.status == DistributionStatus.paid:
            raise ValidationError("Distribution has already been paid")
        if distribution.status == DistributionStatus.cancelled:
            raise ValidationError("Cannot pay a cancelled distribution")

        before = sa_model_to_dict(distribution)
        for allocation in repository.get_distribution_allocations(session, distribution.id):
            commitment = repository.get_commitment(session, fund_id, allocation.lp_commitment_id)
            commitment.distributions_received = commitment.distributions_received + allocation.net_amount
            recallable = to_decimal(allocation.breakdown.get(DistributionType.recallable.value))
            if recallable:
                commitment.recallable_distributions = commitment.recallable_distributions + recallable
            commitment.updated_by = actor.actor_id

            allocation.status = AllocationStatus.paid
            allocation.paid_date = paid_on
            allocation.updated_by = actor.actor_id

        distribution.status = DistributionStatus.paid
        distribution.paid_at = utcnow()
        distribution.updated_by = actor.actor_id
        session.flush()

        write_audit_event(
            session,
            fund_id=fund_id,
            actor_id=actor.actor_id,
            action="distribution.paid",
            entity_type="Distribution",
            entity_id=distribution.id,
            before=before,
            after=sa_model_to_dict(distribution),
        )
        return distribution

    distribution = atomically(db, work, label="distribution.pay")
    db.refresh(distribution)
    logger.info(
        "distribution.paid",
        fund_id=str(fund_id),
        distribution_id=str(distribution.id),
        total=str(distribution.total_distribution_amount),
    )
    return distribution


def calculate_waterfall(db: Session, *, fund_id: uuid.UUID, amount: Decimal) -> WaterfallCalculation:
    """What-if split of ``amount`` against the fund's current metrics. Persists nothing."""
    fund = repository.get_fund(db, fund_id)
    return _waterfall_for(db, fund, to_decimal(amount))


def list_distributions(db: Session, *, fund_id: uuid.UUID) -> list[Distribution]:
    repository.get_fund(db, fund_id)
    return repository.get_distributions(db, fund_id)


def get_distribution(
    db: Session,
    *,
    fund_id: uuid.UUID,
    distribution_id: uuid.UUID,
) -> tuple[Distribution, list[DistributionAllocation]]:
    distribution = repository.get_distribution(db, fund_id, distribution_id)
    return distribution, repository.get_distribution_allocations(db, distribution.id)
