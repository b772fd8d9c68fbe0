from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from capital_hub.core.db import repository
from capital_hub.core.db.session import get_db
from capital_hub.core.http.errors import to_http_exception
from capital_hub.core.security.auth import Actor
from capital_hub.core.security.dependencies import require_fund_access, require_role
from capital_hub.domain.distributions.models.distributions import Distribution
from capital_hub.domain.distributions.schemas.distributions import (
    DistributionAllocationOut,
    DistributionCreate,
    DistributionOut,
    DistributionPay,
    WaterfallCalculationOut,
    WaterfallPreviewRequest,
)
from capital_hub.domain.distributions.services import distributions as distribution_service
from capital_hub.shared.exceptions import AppError


router = APIRouter(
    prefix="/funds/{fund_id}/capital/distributions",
    tags=["Distributions"],
    dependencies=[Depends(require_fund_access())],
)


def _distribution_out(db: Session, distribution: Distribution) -> DistributionOut:
    out = DistributionOut.model_validate(distribution)
    out.allocations = [
        DistributionAllocationOut.model_validate(a)
        for a in repository.get_distribution_allocations(db, distribution.id)
    ]
    return out


@router.post("/waterfall/preview", response_model=WaterfallCalculationOut)
def preview_waterfall(
    fund_id: uuid.UUID,
    payload: WaterfallPreviewRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role(["GP", "FUND_ADMIN", "AUDITOR"])),
):
    try:
        calculation = distribution_service.calculate_waterfall(db, fund_id=fund_id, amount=payload.amount)
    except AppError as e:
        raise to_http_exception(e)
    return WaterfallCalculationOut.model_validate(calculation.to_dict())


@router.post("", response_model=DistributionOut, status_code=status.HTTP_201_CREATED)
def create_distribution(
    fund_id: uuid.UUID,
    payload: DistributionCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role(["GP", "FUND_ADMIN"])),
):
    try:
        distribution = distribution_service.create_distribution(db, fund_id=fund_id, actor=actor, payload=payload)
    except AppError as e:
        raise to_http_exception(e)
    return _distribution_out(db, distribution)


@router.get("", response_model=list[DistributionOut])
def list_distributions(
    fund_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role(["GP", "FUND_ADMIN", "AUDITOR"])),
):
    try:
        distributions = distribution_service.list_distributions(db, fund_id=fund_id)
    except AppError as e:
        raise to_http_exception(e)
    return [DistributionOut.model_validate(d) for d in distributions]


@router.get("/{distribution_id}", response_model=DistributionOut)
def get_distribution(
    fund_id: uuid.UUID,
    distribution_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role(["GP", "FUND_ADMIN", "AUDITOR"])),
):
    try:
        distribution, _ = distribution_service.get_distribution(db, fund_id=fund_id, distribution_id=distribution_id)
    except AppError as e:
        raise to_http_exception(e)
    return _distribution_out(db, distribution)


@router.post("/{distribution_id}/approve", response_model=DistributionOut)
def approve_distribution(
    fund_id: uuid.UUID,
    distribution_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role(["GP"])),
):
    try:
        distribution = distribution_service.approve_distribution(
            db, fund_id=fund_id, distribution_id=distribution_id, actor=actor
        )
    except AppError as e:
        raise to_http_exception(e)
    return _distribution_out(db, distribution)


@router.post("/{distribution_id}/cancel", response_model=DistributionOut)
def cancel_distribution(
    fund_id: uuid.UUID,
    distribution_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role(["GP", "FUND_ADMIN"])),
):
    try:
        distribution = distribution_service.cancel_distribution(
            db, fund_id=fund_id, distribution_id=distribution_id, actor=actor
        )
    except AppError as e:
        raise to_http_exception(e)
    return _distribution_out(db, distribution)


@router.post("/{distribution_id}/pay", response_model=DistributionOut)
def pay_distribution(
    fund_id: uuid.UUID,
    distribution_id: uuid.UUID,
    payload: DistributionPay | None = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role(["FUND_ADMIN"])),
):
    try:
        distribution = distribution_service.pay_distribution(
            db,
            fund_id=fund_id,
            distribution_id=distribution_id,
            actor=actor,
            paid_date=payload.paid_date if payload else None,
        )
    except AppError as e:
        raise to_http_exception(e)
    return _distribution_out(db, distribution)
